"""
Local filesystem storage backend.

Each tier is a directory under a common root; object names map to relative
paths. Blocking file I/O runs in a worker thread.
"""

import asyncio
import shutil
from pathlib import Path
from typing import Dict, List, Union

from pubflow.storage.backend import StorageBackend, StorageTier, in_bundle


class LocalStorageBackend(StorageBackend):
    def __init__(self, root: Union[str, Path], cdns: Dict[StorageTier, str]):
        super().__init__(cdns)
        self.root = Path(root)

    def tier_path(self, tier: StorageTier) -> Path:
        return self.root / tier.value

    def _list(self, tier: StorageTier, key: str) -> List[str]:
        base = self.tier_path(tier)
        if not base.exists():
            return []
        names = (p.relative_to(base).as_posix() for p in base.rglob("*") if p.is_file())
        return sorted(name for name in names if in_bundle(name, key))

    def _copy(self, name: str, new_name: str, from_tier: StorageTier, to_tier: StorageTier) -> None:
        target = self.tier_path(to_tier) / new_name
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(self.tier_path(from_tier) / name, target)

    def _delete(self, tier: StorageTier, name: str) -> None:
        (self.tier_path(tier) / name).unlink(missing_ok=True)

    async def list_objects(self, tier: StorageTier, key: str) -> List[str]:
        return await asyncio.to_thread(self._list, tier, key)

    async def copy_object(self, name: str, new_name: str, from_tier: StorageTier, to_tier: StorageTier) -> None:
        await asyncio.to_thread(self._copy, name, new_name, from_tier, to_tier)

    async def delete_object(self, tier: StorageTier, name: str) -> None:
        await asyncio.to_thread(self._delete, tier, name)
