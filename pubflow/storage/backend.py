"""
Storage tier abstraction over a blob store.

Content lives in one of two tiers, each served from its own CDN prefix. A
(tier, key) pair addresses one content bundle: every object named `key` or
stored under `key/`.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List


class StorageTier(str, Enum):
    """Storage tiers for submission content."""

    PRV = "prv"  # private, source of truth for unpublished content
    PUB = "pub"  # public, served by the CDN


class StorageError(Exception):
    """A blob store operation failed."""


class ObjectNotFound(StorageError):
    pass


class UnknownTier(StorageError):
    pass


def normalize_cdn(url: str) -> str:
    """CDN prefixes are compared with a single trailing slash."""
    return url.rstrip("/") + "/"


def in_bundle(name: str, key: str) -> bool:
    root = key.rstrip("/")
    return name == root or name.startswith(root + "/")


class StorageBackend(ABC):
    """
    Abstract blob store keyed by (tier, key).

    Subclasses provide object level primitives; bundle level operations
    (exists, copy, move, delete) are built on top of them here.
    """

    def __init__(self, cdns: Dict[StorageTier, str]):
        self.cdns = {StorageTier(tier): normalize_cdn(url) for tier, url in cdns.items() if url}

    # Tier resolution

    def cdn_for_tier(self, tier: StorageTier) -> str:
        """CDN base URL for a tier, always ending in '/'."""
        try:
            return self.cdns[tier]
        except KeyError:
            raise UnknownTier(f"No CDN registered for tier {tier.value}") from None

    def tier_from_reference(self, cdn: str) -> StorageTier:
        """
        Resolve which tier a stored CDN reference points at.

        Raises:
            UnknownTier: If the URL matches no registered tier prefix
        """
        reference = normalize_cdn(cdn)
        # Longest prefix first so nested CDN paths resolve to the specific tier
        for tier, prefix in sorted(self.cdns.items(), key=lambda item: -len(item[1])):
            if reference.startswith(prefix):
                return tier
        raise UnknownTier(f"CDN {cdn} does not belong to a known storage tier")

    # Object primitives

    @abstractmethod
    async def list_objects(self, tier: StorageTier, key: str) -> List[str]:
        """Names of every object in the bundle addressed by key."""

    @abstractmethod
    async def copy_object(self, name: str, new_name: str, from_tier: StorageTier, to_tier: StorageTier) -> None:
        """Copy one object between tiers."""

    @abstractmethod
    async def delete_object(self, tier: StorageTier, name: str) -> None:
        """Delete one object; absent objects are ignored."""

    # Bundle operations

    async def exists(self, tier: StorageTier, key: str) -> bool:
        return len(await self.list_objects(tier, key)) > 0

    async def _source_objects(self, key: str, tier: StorageTier) -> List[str]:
        names = await self.list_objects(tier, key)
        if not names:
            raise ObjectNotFound(f"Nothing stored at {tier.value}:{key}")
        return names

    async def copy(self, key: str, from_tier: StorageTier, to_tier: StorageTier) -> None:
        """
        Copy the bundle at key to another tier under the same key.

        Raises:
            ObjectNotFound: If the source tier holds nothing under key
        """
        for name in await self._source_objects(key, from_tier):
            await self.copy_object(name, name, from_tier, to_tier)

    async def move(self, key: str, from_tier: StorageTier, to_tier: StorageTier) -> None:
        """
        Move the bundle at key to another tier. Not guarded: callers check
        exists() first.

        Raises:
            ObjectNotFound: If the source tier holds nothing under key
        """
        for name in await self._source_objects(key, from_tier):
            await self.copy_object(name, name, from_tier, to_tier)
            await self.delete_object(from_tier, name)

    async def delete(self, tier: StorageTier, key: str) -> None:
        """Delete the bundle at key. A no-op when nothing is stored there."""
        for name in await self.list_objects(tier, key):
            await self.delete_object(tier, name)
