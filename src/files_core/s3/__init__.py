"""
S3 access for the object-store backend.

Contains the client registry (one cached client per credential/region
identity) and the object-store adapter with files_core error semantics.
"""

from typing import Optional

from .clients import ClientIdentity, S3ClientRegistry, get_registry, get_s3_client, shutdown_registry
from .object_store import S3ObjectStore


def get_object_store(
    identity: Optional[ClientIdentity] = None,
    registry: Optional[S3ClientRegistry] = None,
) -> S3ObjectStore:
    """Get an object store bound to the registry-cached client for ``identity``."""
    registry = registry or get_registry()
    return S3ObjectStore(registry.get_client(identity or ClientIdentity.from_settings()))


__all__ = [
    'ClientIdentity', 'S3ClientRegistry', 'S3ObjectStore',
    'get_registry', 'get_s3_client', 'shutdown_registry', 'get_object_store',
]
