"""Shared fakes: an in-memory backend and a scripted editor."""
import pytest

from secret_store.secrets.domains.editor import EditSession
from secret_store.secrets.domains.errors import SecretNotFoundError
from secret_store.secrets.domains.models import BackendTarget


class FakeGateway:
    """In-memory stand-in for GCPSecretClient that records every call."""

    def __init__(self, secrets=None, target=None):
        self.secrets = dict(secrets or {})
        self.target = target or BackendTarget(project_id="test-project")
        self.calls = []
        self.versions = {}

    def get(self, secret_id):
        self.calls.append(("get", secret_id))
        if secret_id not in self.secrets:
            raise SecretNotFoundError(secret_id)
        return self.secrets[secret_id]

    def put(self, secret_id, content, token):
        self.calls.append(("put", secret_id, content, token))
        self.secrets[secret_id] = content
        self.versions[secret_id] = self.versions.get(secret_id, 1) + 1
        return str(self.versions[secret_id])

    def create(self, secret_id, content, token):
        self.calls.append(("create", secret_id, content, token))
        self.secrets[secret_id] = content
        self.versions[secret_id] = 1
        return "1"

    def list(self, page_token=None, page_size=None):
        self.calls.append(("list", page_token, page_size))
        return self.pages[page_token]

    def list_versions(self, secret_id, page_token=None, page_size=None):
        self.calls.append(("list_versions", secret_id, page_token, page_size))
        return self.pages[page_token]

    @property
    def writes(self):
        return [call for call in self.calls if call[0] in ("put", "create")]


class ScriptedEditor:
    """Editor launcher that replays scripted buffer contents.

    ``None`` in the script means "save without touching the buffer".
    """

    def __init__(self, *script):
        self.script = list(script)
        self.invocations = 0
        self.seen = []
        self.paths = []

    def __call__(self, editor, path):
        with open(path, "r", encoding="utf-8") as f:
            self.seen.append(f.read())
        self.paths.append(path)

        content = self.script[self.invocations]
        self.invocations += 1
        if content is not None:
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        return 0


class ScriptedPrompt:
    def __init__(self, *answers):
        self.answers = list(answers)
        self.questions = []

    def __call__(self, question, default):
        self.questions.append(question)
        return self.answers.pop(0)


def session_factory(launcher, prompt=None):
    """Build a session factory wiring the scripted editor and prompt in."""
    def factory(operation):
        return EditSession(
            secret_format=operation.secret_format,
            edit_format=operation.effective_edit_format,
            editor="fake-editor",
            launcher=launcher,
            prompt=prompt or ScriptedPrompt(),
        )
    return factory


@pytest.fixture
def gateway():
    return FakeGateway()
