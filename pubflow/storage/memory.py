"""In-memory storage backend for tests and local development."""

from typing import Dict, List, Optional

from pubflow.storage.backend import StorageBackend, StorageTier, in_bundle


class InMemoryStorageBackend(StorageBackend):
    """Keeps every tier as a dict of object name -> bytes."""

    def __init__(self, cdns: Dict[StorageTier, str]):
        super().__init__(cdns)
        self.objects: Dict[StorageTier, Dict[str, bytes]] = {tier: {} for tier in StorageTier}

    def put(self, tier: StorageTier, name: str, data: bytes = b"") -> None:
        self.objects[tier][name] = data

    def read(self, tier: StorageTier, name: str) -> Optional[bytes]:
        return self.objects[tier].get(name)

    async def list_objects(self, tier: StorageTier, key: str) -> List[str]:
        return sorted(name for name in self.objects[tier] if in_bundle(name, key))

    async def copy_object(self, name: str, new_name: str, from_tier: StorageTier, to_tier: StorageTier) -> None:
        self.objects[to_tier][new_name] = self.objects[from_tier][name]

    async def delete_object(self, tier: StorageTier, name: str) -> None:
        self.objects[tier].pop(name, None)
