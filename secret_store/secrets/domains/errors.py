"""Exception hierarchy for secret-store."""
from typing import Optional


class SecretStoreError(Exception):
    """Base class for every error raised by secret-store."""
    pass


class SecretNotFoundError(SecretStoreError):
    """The requested secret does not exist in the backend."""

    def __init__(self, secret_id: str, message: Optional[str] = None):
        self.secret_id = secret_id
        super().__init__(message or f"Secret '{secret_id}' not found")


class UnauthorizedError(SecretStoreError):
    """The backend refused the call because of credentials or permissions."""
    pass


class BackendError(SecretStoreError):
    """A backend call failed (network, quota, service error)."""
    pass


class ParseError(SecretStoreError):
    """Content does not conform to its declared format."""

    def __init__(self, content_format, cause):
        self.format = content_format
        self.cause = cause
        super().__init__(f"Unable to parse {content_format.value.upper()}: {cause}")


class ValidationError(SecretStoreError):
    """A command was called with arguments that can never succeed."""
    pass


class EditorLaunchError(SecretStoreError):
    """The external editor process could not be started."""
    pass


class SecretExistsError(BackendError):
    """A secret with the requested id already exists."""

    def __init__(self, secret_id: str, message: Optional[str] = None):
        self.secret_id = secret_id
        super().__init__(message or f"Secret '{secret_id}' already exists")
