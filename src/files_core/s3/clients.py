"""S3 client registry."""
import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from files_core.errors import BackendError
from files_core.settings import Settings, get_settings

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientIdentity:
    """Credential/region tuple a client is built for.

    Without a key/secret pair the ambient credential chain is used and the
    region alone identifies the client.
    """
    region: str
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    endpoint_url: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ClientIdentity":
        settings = settings or get_settings()
        if settings.has_explicit_credentials:
            return cls(
                region=settings.aws_region,
                access_key_id=settings.aws_access_key_id,
                secret_access_key=settings.aws_secret_access_key,
                endpoint_url=settings.aws_endpoint_url,
            )
        return cls(region=settings.aws_region, endpoint_url=settings.aws_endpoint_url)

    @property
    def is_ambient(self) -> bool:
        return self.access_key_id is None

    def __repr__(self) -> str:
        # Never print the secret
        who = "ambient" if self.is_ambient else self.access_key_id
        return f"ClientIdentity(region={self.region!r}, credentials={who!r})"


class S3ClientRegistry:
    """Caches one S3 client per identity.

    Construction for a new identity is serialized by a lock so two threads
    never build the same client twice. Clients are released only through
    ``shutdown()``.
    """

    def __init__(self):
        self._clients: Dict[ClientIdentity, "S3Client"] = {}
        self._lock = threading.Lock()

    def get_client(self, identity: ClientIdentity) -> "S3Client":
        """Get or create the S3 client for ``identity``."""
        client = self._clients.get(identity)
        if client is not None:
            return client

        with self._lock:
            client = self._clients.get(identity)
            if client is None:
                client = self._create_client(identity)
                self._clients[identity] = client
                logger.info(f"Created S3 client for {identity!r}")
            return client

    def _create_client(self, identity: ClientIdentity) -> "S3Client":
        client_kwargs = {'region_name': identity.region}
        if not identity.is_ambient:
            client_kwargs['aws_access_key_id'] = identity.access_key_id
            client_kwargs['aws_secret_access_key'] = identity.secret_access_key
        if identity.endpoint_url:
            client_kwargs['endpoint_url'] = identity.endpoint_url

        try:
            return boto3.client('s3', **client_kwargs)
        except (BotoCoreError, ClientError, ValueError) as e:
            logger.error(f"Error creating S3 client for {identity!r}: {str(e)}")
            raise BackendError(f"Could not create S3 client for {identity!r}: {e}") from e

    def __contains__(self, identity: ClientIdentity) -> bool:
        return identity in self._clients

    def __len__(self) -> int:
        return len(self._clients)

    def shutdown(self) -> None:
        """Close every cached client and clear the cache."""
        with self._lock:
            clients = list(self._clients.items())
            self._clients.clear()
        for identity, client in clients:
            try:
                client.close()
            except Exception as e:
                logger.warning(f"Error closing S3 client for {identity!r}: {e}")
        logger.info(f"Closed {len(clients)} S3 client(s)")


_registry: Optional[S3ClientRegistry] = None
_registry_lock = threading.Lock()


def get_registry() -> S3ClientRegistry:
    """Get the process-wide registry, creating it on first use."""
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = S3ClientRegistry()
        return _registry


def shutdown_registry() -> None:
    """Close all clients of the process-wide registry and drop it."""
    global _registry
    with _registry_lock:
        registry, _registry = _registry, None
    if registry is not None:
        registry.shutdown()


def get_s3_client(identity: Optional[ClientIdentity] = None) -> "S3Client":
    """Get the S3 client for ``identity`` (defaults to the configured one)."""
    return get_registry().get_client(identity or ClientIdentity.from_settings())
