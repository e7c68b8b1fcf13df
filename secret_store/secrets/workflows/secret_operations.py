"""Workflows for viewing, editing, copying and listing secrets."""
import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Union

from ..domains.editor import EditSession
from ..domains.errors import SecretExistsError, SecretNotFoundError, ValidationError
from ..domains.formats import convert, placeholder, round_trip
from ..domains.gcp_client import GCPSecretClient
from ..domains.models import Operation, SecretSummary, VersionInfo

logger = logging.getLogger(__name__)

SessionFactory = Callable[[Operation], EditSession]


class EditOutcome(str, Enum):
    UNCHANGED = "unchanged"
    UPDATED = "updated"
    CREATED = "created"


@dataclass
class EditResult:
    """What an edit or copy did to the backend."""
    outcome: EditOutcome
    secret_id: str
    version: Optional[str] = None


def new_session(operation: Operation) -> EditSession:
    return EditSession(
        secret_format=operation.secret_format,
        edit_format=operation.effective_edit_format,
        editor=operation.editor,
    )


def _request_token() -> str:
    return str(uuid.uuid4())


def edit_secret(
    client: GCPSecretClient,
    operation: Operation,
    session_factory: Optional[SessionFactory] = None,
) -> EditResult:
    """
    Edit a secret in place, creating it if it doesn't exist yet.

    The remote content is converted to the edit format, edited, converted
    back, and only written when the result differs from what is stored.

    Returns:
        EditResult with outcome UNCHANGED (nothing written), UPDATED (new
        version added) or CREATED (secret created)
    """
    secret_format = operation.secret_format
    edit_format = operation.effective_edit_format

    try:
        remote_content = client.get(operation.secret_id)
        to_create = False
    except SecretNotFoundError:
        logger.info(f"Secret '{operation.secret_id}' not found, it will be created on save")
        remote_content = placeholder(secret_format)
        to_create = True

    editable = convert(remote_content, secret_format, edit_format)
    baseline = round_trip(remote_content, secret_format, edit_format)

    edited_content = (session_factory or new_session)(operation).edit(editable, fallback=remote_content)

    if edited_content in (remote_content, baseline):
        logger.debug(f"No change to '{operation.secret_id}', skipping write")
        return EditResult(EditOutcome.UNCHANGED, operation.secret_id)

    token = _request_token()
    if to_create:
        try:
            version = client.create(operation.secret_id, edited_content, token)
            return EditResult(EditOutcome.CREATED, operation.secret_id, version)
        except SecretExistsError:
            # The secret exists but has no accessible version yet
            logger.debug(f"Secret '{operation.secret_id}' already exists, adding a version instead")

    version = client.put(operation.secret_id, edited_content, token)
    return EditResult(EditOutcome.UPDATED, operation.secret_id, version)


def cat_secret(client: GCPSecretClient, operation: Operation) -> str:
    """Fetch a secret and return it in the print format (carried by edit_format)."""
    remote_content = client.get(operation.secret_id)
    return convert(remote_content, operation.secret_format, operation.effective_edit_format)


def copy_secret(
    client: GCPSecretClient,
    operation: Operation,
    target_id: str,
    target_client: Optional[GCPSecretClient] = None,
    session_factory: Optional[SessionFactory] = None,
) -> EditResult:
    """
    Copy a secret to ``target_id``, letting the user adjust it first.

    Args:
        client: Backend holding the source secret
        operation: Source secret and formats
        target_id: Id of the secret to create
        target_client: Backend to create the copy in, defaults to ``client``

    Raises:
        ValidationError: If source and target are the same secret on the same backend
    """
    target_client = target_client or client
    if target_id == operation.secret_id and target_client.target == client.target:
        raise ValidationError(
            "Source secret_id and target can't be equal on the same project and location"
        )

    remote_content = client.get(operation.secret_id)
    editable = convert(remote_content, operation.secret_format, operation.effective_edit_format)
    edited_content = (session_factory or new_session)(operation).edit(editable, fallback=remote_content)

    version = target_client.create(target_id, edited_content, _request_token())
    return EditResult(EditOutcome.CREATED, target_id, version)


def list_secrets(
    client: GCPSecretClient,
    secret_id: Optional[str] = None,
    max_items: Optional[int] = None,
) -> List[Union[SecretSummary, VersionInfo]]:
    """
    List secrets, or the versions of ``secret_id`` when given.

    Pages are followed until exhausted or ``max_items`` entries are collected.
    """
    items = []
    page_token = None
    while True:
        page_size = max_items - len(items) if max_items else None
        if secret_id:
            page, page_token = client.list_versions(secret_id, page_token, page_size)
        else:
            page, page_token = client.list(page_token, page_size)
        items.extend(page)

        if max_items and len(items) >= max_items:
            return items[:max_items]
        if not page_token:
            return items
