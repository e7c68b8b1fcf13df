"""Domain models for secret management."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ContentFormat(str, Enum):
    """Serialization a piece of secret content is written in."""
    JSON = "json"
    YAML = "yaml"
    TEXT = "text"

    @property
    def suffix(self) -> str:
        """File suffix used for the editing buffer."""
        return {"json": ".json", "yaml": ".yaml", "text": ".txt"}[self.value]


@dataclass(frozen=True)
class BackendTarget:
    """One configured backend handle: a project, optionally pinned to a location."""
    project_id: str
    location: Optional[str] = None


@dataclass
class Operation:
    """Arguments shared by the edit, cat and copy workflows."""
    secret_id: str
    secret_format: ContentFormat = ContentFormat.JSON
    edit_format: ContentFormat = ContentFormat.YAML
    editor: Optional[str] = None

    @property
    def effective_edit_format(self) -> ContentFormat:
        # Text secrets are never pushed through a structured parser
        if self.secret_format is ContentFormat.TEXT:
            return ContentFormat.TEXT
        return self.edit_format


@dataclass
class SecretSummary:
    """Listing entry for a secret."""
    name: str
    description: Optional[str]
    identifier: str


@dataclass
class VersionInfo:
    """Listing entry for a secret version."""
    version_id: str
    created: Optional[datetime]
    last_accessed: Optional[datetime] = None
    state: Optional[str] = None
