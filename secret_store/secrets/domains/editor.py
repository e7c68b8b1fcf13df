"""Interactive editing of secret content in an external editor."""
import logging
import os
import shlex
import subprocess
import sys
import tempfile
from typing import Callable, Optional

from .errors import EditorLaunchError, ParseError
from .formats import convert
from .models import ContentFormat

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "nano"

# (editor command, buffer path) -> exit code
Launcher = Callable[[str, str], int]
# (question, default answer) -> answer
Prompt = Callable[[str, bool], bool]


def resolve_editor(editor: Optional[str] = None) -> str:
    """
    Pick the editor command to run.

    Priority order:
    1. Explicit override (--editor)
    2. EDITOR environment variable
    3. nano
    """
    if editor:
        return editor
    env_editor = os.getenv("EDITOR")
    if env_editor:
        logger.debug(f"Using editor from environment: {env_editor}")
        return env_editor
    return DEFAULT_EDITOR


def launch_editor(editor: str, path: str) -> int:
    """Run ``editor`` on ``path`` in the foreground and wait for it to exit."""
    command = shlex.split(editor) + [path]
    try:
        result = subprocess.run(command, check=False)
    except OSError as e:
        raise EditorLaunchError(f"Unable to launch editor '{editor}': {e}") from e
    return result.returncode


def prompt_yes_no(question: str, default: bool = True) -> bool:
    """Ask a yes/no question on the terminal. End of input counts as no."""
    suffix = "(Y/n)" if default else "(y/N)"
    try:
        response = input(f"{question} {suffix}: ").strip().lower()
    except EOFError:
        return False
    if not response:
        return default
    return response in ("y", "yes")


class EditSession:
    """
    One interactive editing attempt over a private temporary buffer.

    The buffer is written in the edit format, handed to the editor, then read
    back and converted to the secret format. Content that fails to convert
    sends the user back into the editor until it parses or they give up.
    """

    def __init__(
        self,
        secret_format: ContentFormat,
        edit_format: ContentFormat,
        editor: Optional[str] = None,
        launcher: Optional[Launcher] = None,
        prompt: Optional[Prompt] = None,
    ):
        self.secret_format = secret_format
        self.edit_format = edit_format
        self.editor = editor
        self.launcher = launcher or launch_editor
        self.prompt = prompt or prompt_yes_no
        self.attempt_count = 0
        self.buffer_path: Optional[str] = None

    def edit(self, initial_content: str, fallback: str) -> str:
        """
        Let the user edit ``initial_content`` (already in the edit format).

        Args:
            initial_content: Text the editor opens with
            fallback: Returned untouched if the user declines to fix a parse error

        Returns:
            The edited content converted to the secret format, or ``fallback``

        Raises:
            EditorLaunchError: If the editor cannot be started
        """
        editor = resolve_editor(self.editor)
        fd, self.buffer_path = tempfile.mkstemp(prefix="secret-store-", suffix=self.edit_format.suffix)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(initial_content)

            while True:
                self.attempt_count += 1
                logger.debug(f"Opening {self.buffer_path} with '{editor}' (attempt {self.attempt_count})")
                exit_code = self.launcher(editor, self.buffer_path)
                if exit_code:
                    logger.warning(f"Editor '{editor}' exited with status {exit_code}")

                with open(self.buffer_path, "r", encoding="utf-8") as f:
                    saved_content = f.read()

                try:
                    return convert(saved_content, self.edit_format, self.secret_format)
                except ParseError as e:
                    print(f"Error: {e}", file=sys.stderr)
                    if not self.prompt("Do you want to edit again?", True):
                        logger.info("Edit discarded")
                        return fallback
        finally:
            if os.path.exists(self.buffer_path):
                os.remove(self.buffer_path)
            self.buffer_path = None
