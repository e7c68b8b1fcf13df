"""GCP Secret Manager client wrapper."""
import logging
from contextlib import contextmanager
from typing import List, Optional, Tuple

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import secretmanager

from .errors import BackendError, SecretExistsError, SecretNotFoundError, SecretStoreError, UnauthorizedError
from .models import BackendTarget, SecretSummary, VersionInfo

logger = logging.getLogger(__name__)

REQUEST_TOKEN_LABEL = "request-token"


@contextmanager
def _translate_errors(secret_id: Optional[str] = None):
    """Turn google client exceptions into secret-store errors."""
    try:
        yield
    except google_exceptions.NotFound as e:
        if secret_id is None:
            raise BackendError(str(e)) from e
        raise SecretNotFoundError(secret_id) from e
    except (google_exceptions.PermissionDenied, google_exceptions.Unauthenticated) as e:
        raise UnauthorizedError(f"Access denied: {e.message}") from e
    except auth_exceptions.GoogleAuthError as e:
        raise UnauthorizedError(f"Unable to authenticate: {e}") from e
    except google_exceptions.GoogleAPICallError as e:
        raise BackendError(f"Secret Manager call failed: {e}") from e


class GCPSecretClient:
    """Wrapper around GCP Secret Manager client, bound to one project/location."""

    def __init__(self, target: BackendTarget, client: Optional[secretmanager.SecretManagerServiceClient] = None):
        self.target = target
        self._client = client

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy-initialize client, using the regional endpoint for located targets."""
        if self._client is None:
            if self.target.location:
                endpoint = f"secretmanager.{self.target.location}.rep.googleapis.com"
                self._client = secretmanager.SecretManagerServiceClient(
                    client_options={"api_endpoint": endpoint}
                )
            else:
                self._client = secretmanager.SecretManagerServiceClient()
            logger.debug(f"Secret Manager client initialized for {self.parent}")
        return self._client

    @property
    def parent(self) -> str:
        if self.target.location:
            return f"projects/{self.target.project_id}/locations/{self.target.location}"
        return f"projects/{self.target.project_id}"

    def secret_path(self, secret_id: str) -> str:
        return f"{self.parent}/secrets/{secret_id}"

    def get(self, secret_id: str) -> str:
        """
        Fetch the latest version of a secret.

        Raises:
            SecretNotFoundError: If the secret (or any enabled version) doesn't exist
            UnauthorizedError: If credentials are missing or lack access
            BackendError: On any other failure
        """
        name = f"{self.secret_path(secret_id)}/versions/latest"
        with _translate_errors(secret_id):
            response = self.client.access_secret_version(request={"name": name})

        try:
            content = response.payload.data.decode("UTF-8")
        except UnicodeDecodeError as e:
            raise BackendError(f"Secret '{secret_id}' does not hold UTF-8 text") from e

        logger.debug(f"Fetched '{secret_id}' (length: {len(content)})")
        return content

    def put(self, secret_id: str, content: str, token: str) -> str:
        """Add a new version to an existing secret and return its version id."""
        # Secret Manager has no request id for versions; the token is only traced
        logger.debug(f"Adding version to '{secret_id}' (request token {token})")
        with _translate_errors(secret_id):
            response = self.client.add_secret_version(
                request={
                    "parent": self.secret_path(secret_id),
                    "payload": {"data": content.encode("UTF-8")},
                }
            )
        return response.name.split("/")[-1]

    def create(self, secret_id: str, content: str, token: str) -> str:
        """
        Create a secret holding ``content`` and return the first version id.

        If the first version can't be added, the new secret is deleted again
        so no secret without versions is left behind.

        Raises:
            SecretExistsError: If a secret with this id already exists
        """
        secret = {"labels": {REQUEST_TOKEN_LABEL: token}}
        if not self.target.location:
            # Regional secrets are pinned to their location and take no replication policy
            secret["replication"] = {"automatic": {}}

        logger.debug(f"Creating '{secret_id}' in {self.parent} (request token {token})")
        with _translate_errors(secret_id):
            try:
                self.client.create_secret(
                    request={"parent": self.parent, "secret_id": secret_id, "secret": secret}
                )
            except google_exceptions.AlreadyExists as e:
                raise SecretExistsError(secret_id, f"Secret '{secret_id}' already exists in {self.parent}") from e

        try:
            return self.put(secret_id, content, token)
        except SecretStoreError:
            self._discard(secret_id)
            raise

    def _discard(self, secret_id: str) -> None:
        """Best-effort removal of a secret whose first version failed."""
        try:
            self.client.delete_secret(request={"name": self.secret_path(secret_id)})
            logger.debug(f"Deleted '{secret_id}' after its first version failed")
        except (google_exceptions.GoogleAPICallError, auth_exceptions.GoogleAuthError) as e:
            logger.warning(f"Secret '{secret_id}' was created without a version and could not be removed: {e}")

    def list(self, page_token: Optional[str] = None, page_size: Optional[int] = None) -> Tuple[List[SecretSummary], Optional[str]]:
        """Return one page of secrets and the token of the next page, if any."""
        request = {"parent": self.parent}
        if page_token:
            request["page_token"] = page_token
        if page_size:
            request["page_size"] = page_size

        with _translate_errors():
            page = next(iter(self.client.list_secrets(request=request).pages))

        items = [
            SecretSummary(
                name=secret.name.split("/")[-1],
                description=dict(secret.annotations).get("description"),
                identifier=secret.name,
            )
            for secret in page.secrets
        ]
        return items, page.next_page_token or None

    def list_versions(self, secret_id: str, page_token: Optional[str] = None, page_size: Optional[int] = None) -> Tuple[List[VersionInfo], Optional[str]]:
        """Return one page of versions of ``secret_id``, newest first."""
        request = {"parent": self.secret_path(secret_id)}
        if page_token:
            request["page_token"] = page_token
        if page_size:
            request["page_size"] = page_size

        with _translate_errors(secret_id):
            page = next(iter(self.client.list_secret_versions(request=request).pages))

        items = [
            VersionInfo(
                version_id=version.name.split("/")[-1],
                created=version.create_time,
                # Secret Manager doesn't track access times
                last_accessed=None,
                state=version.state.name,
            )
            for version in page.versions
        ]
        return items, page.next_page_token or None
