"""
Asset records and the append-only store that assigns their ids.
"""
import functools
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class Asset(BaseModel):
    """One discovered module file."""
    id: int = Field(ge=0)
    path: str
    code: Optional[str] = None
    dependency_map: Dict[str, int] = Field(default_factory=dict)
    future_features: List[str] = Field(default_factory=list)

    @property
    def processed(self) -> bool:
        return self.code is not None

    def attach(self, code, dependency_map, future_features=()):
        """Record the processing results; allowed exactly once per asset."""
        if self.processed:
            raise RuntimeError(f"Asset {self.id} ({self.path}) was already processed")
        self.code = code
        self.dependency_map = dict(dependency_map)
        self.future_features = list(future_features)


class AssetStore:
    """
    Canonical path -> Asset table for one build.

    The store owns the id counter. Creating an asset schedules its processing
    task, so a path is scheduled at most once no matter how many imports (or
    import cycles) lead to it.
    """

    def __init__(self, scheduler, process):
        self._scheduler = scheduler
        self._process = process
        self._assets: Dict[str, Asset] = {}
        self._by_id: List[Asset] = []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self):
        self._frozen = True

    def get_or_create(self, path) -> Asset:
        """
        Return the asset for path, creating and scheduling it on first sight.

        Lookup and insert happen without suspending, so concurrent tasks
        cannot both create the same path.
        """
        asset = self._assets.get(path)
        if asset is not None:
            return asset
        if self._frozen:
            raise RuntimeError(f"Asset store is frozen; cannot add {path}")

        asset = Asset(id=len(self._by_id), path=path)
        self._assets[path] = asset
        self._by_id.append(asset)
        self._scheduler.schedule(functools.partial(self._process, asset))
        return asset

    def get(self, path) -> Optional[Asset]:
        return self._assets.get(path)

    def by_id(self, asset_id) -> Asset:
        return self._by_id[asset_id]

    def __contains__(self, path):
        return path in self._assets

    def __len__(self):
        return len(self._by_id)

    def __iter__(self):
        return iter(self._by_id)
