"""
Storage tiers - private and public blob locations for submission content.
"""

from typing import Optional

from pubflow.config import Settings
from pubflow.storage.backend import (
    ObjectNotFound,
    StorageBackend,
    StorageError,
    StorageTier,
    UnknownTier,
    normalize_cdn,
)
from pubflow.storage.local import LocalStorageBackend
from pubflow.storage.memory import InMemoryStorageBackend


def create_storage_backend(settings: Settings) -> Optional[StorageBackend]:
    """
    Build the storage backend named by settings.storage_backend.

    Returns None for "none"; job-based transitions then fail with a
    configuration error before any job is recorded.
    """
    cdns = {StorageTier.PRV: settings.private_cdn, StorageTier.PUB: settings.public_cdn}
    kind = settings.storage_backend.lower()
    if kind == "none":
        return None
    if kind == "memory":
        return InMemoryStorageBackend(cdns)
    if kind == "local":
        return LocalStorageBackend(settings.storage_root, cdns)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


__all__ = [
    "StorageBackend",
    "StorageTier",
    "StorageError",
    "ObjectNotFound",
    "UnknownTier",
    "InMemoryStorageBackend",
    "LocalStorageBackend",
    "create_storage_backend",
    "normalize_cdn",
]
