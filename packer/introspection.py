"""
Manifest extraction for finished builds.

Describes the module table of a bundle (ids, paths and dependency maps)
without the generated code, for `knapsack --manifest`.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel


class ModuleEntry(BaseModel):
    id: int
    path: str
    dependencies: Dict[str, int]


class Manifest(BaseModel):
    entry: str
    output: Optional[str] = None
    modules: List[ModuleEntry]


def build_manifest(store, output=None) -> Manifest:
    """Summarize an asset store, ordered by id."""
    modules = [
        ModuleEntry(id=asset.id, path=asset.path, dependencies=dict(asset.dependency_map))
        for asset in store
    ]
    return Manifest(entry=store.by_id(0).path, output=output, modules=modules)
