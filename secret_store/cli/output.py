"""Terminal rendering for secret content and listings."""
import sys
from typing import List, Optional, Union

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from secret_store.secrets.domains.models import ContentFormat, SecretSummary, VersionInfo

_LEXERS = {ContentFormat.JSON: "json", ContentFormat.YAML: "yaml", ContentFormat.TEXT: "text"}


def _is_terminal() -> bool:
    return sys.stdout.isatty()


def print_content(content: str, print_format: ContentFormat, no_color: bool = False) -> None:
    """Print secret content, highlighted when writing to a terminal."""
    if no_color or not _is_terminal():
        # Plain output for pipes keeps the content byte-exact
        sys.stdout.write(content if content.endswith("\n") else content + "\n")
        return

    console = Console()
    console.print(
        Syntax(content, _LEXERS[print_format], theme="ansi_dark", line_numbers=True, word_wrap=True)
    )


def _format_time(value) -> str:
    return value.isoformat() if value else "-"


def print_listing(items: List[Union[SecretSummary, VersionInfo]], secret_id: Optional[str] = None) -> None:
    """Print secrets (or the versions of ``secret_id``) as a table."""
    if secret_id:
        headers = ("Version", "State", "Created", "Last accessed")
        rows = [
            (item.version_id, item.state or "-", _format_time(item.created), _format_time(item.last_accessed))
            for item in items
        ]
    else:
        headers = ("Name", "Description")
        rows = [(item.name, item.description or "") for item in items]

    if not _is_terminal():
        for row in rows:
            print("\t".join(row))
        return

    table = Table(show_header=True, header_style="bold magenta")
    for header in headers:
        table.add_column(header, style="cyan" if header in ("Name", "Version") else None)
    for row in rows:
        table.add_row(*row)
    Console().print(table)
