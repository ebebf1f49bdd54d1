"""
Graph builder - discovers every module reachable from the entry script.
"""
import asyncio
import os

from packer import fs
from packer.assets import AssetStore
from packer.errors import ResolutionError
from packer.frontend import parse
from packer.scheduler import Scheduler
from packer.transformer import transpile


def canonical_path(path):
    """Absolute, symlink-free form of path; the asset deduplication key."""
    return os.path.realpath(os.path.abspath(path))


class GraphBuilder:
    """
    Builds the asset store for one entry point.

    Args:
        resolver: Object with resolve(specifier, from_directory)
        concurrency: Cap on assets processed at once (None = unbounded)
        reader: Coroutine function returning a file's source text
        trace: Optional callable receiving debug messages
    """

    def __init__(self, resolver, concurrency=None, reader=None, trace=None):
        self.resolver = resolver
        self.concurrency = concurrency
        self.reader = reader or fs.read_text
        self.trace = trace or (lambda message: None)
        self.scheduler = None
        self.store = None

    async def build(self, entry_path) -> AssetStore:
        """
        Discover and process every module reachable from entry_path.

        Returns:
            The frozen AssetStore; the entry asset has id 0

        Raises:
            BundleError: The first failure from any asset
        """
        self.scheduler = Scheduler(self.concurrency)
        self.store = AssetStore(self.scheduler, self.process_asset)
        self.store.get_or_create(canonical_path(entry_path))
        await self.scheduler.drain()
        self.store.freeze()
        self.trace(f"Discovered {len(self.store)} module(s)")
        return self.store

    async def process_asset(self, asset):
        """Read, parse, resolve, transpile and record one asset."""
        path = asset.path
        self.trace(f"Processing [{asset.id}] {path}")

        source = await self.reader(path)
        parsed = parse(source, path)

        directory = os.path.dirname(path)
        resolved = []
        for specifier in parsed.specifiers:
            try:
                target = await asyncio.to_thread(self.resolver.resolve, specifier, directory)
            except ResolutionError as e:
                raise ResolutionError(
                    e.message, path=path, specifier=specifier, suggestion=e.suggestion
                ) from e
            if target is None:
                self.trace(f"  {specifier!r} -> external")
                continue
            resolved.append((specifier, target))

        # from pkg import name: name may be a submodule rather than an attribute
        targets = dict(resolved)
        for parent, names in parsed.imported_names.items():
            package = targets.get(parent)
            if package is None:
                continue
            for name in names:
                specifier = f"{parent}.{name}"
                if specifier in targets:
                    continue
                target = await asyncio.to_thread(self.resolver.resolve_submodule, package, name)
                if target is not None:
                    targets[specifier] = target
                    resolved.append((specifier, target))

        dependency_map = {}
        for specifier, target in resolved:
            dependency = self.store.get_or_create(target)
            dependency_map[specifier] = dependency.id
            self.trace(f"  {specifier!r} -> [{dependency.id}] {target}")

        code = transpile(parsed, dependency_map, path=path, source=source)
        asset.attach(code, dependency_map, parsed.future_features)
