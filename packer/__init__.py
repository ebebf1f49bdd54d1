# knapsack - Core Bundler Components
"""
Core modules for the knapsack bundler:
- errors: Error taxonomy with formatted context
- config: Build options (pydantic)
- fs: Async file reads and atomic writes
- frontend: Parses modules and extracts import specifiers
- resolver: Maps specifiers to canonical module paths
- transformer: Rewrites modules into bundle function bodies
- assets: Asset records and the append-only asset store
- scheduler: Drives dynamically growing asyncio work to completion
- graph: Discovers every module reachable from the entry
- runtime: Loader preamble embedded into every bundle
- emitter: Serializes the module table and runtime into one script
- introspection: Manifest of a finished build
"""

from .errors import (
    BundleError,
    BundleIOError,
    ConfigError,
    ParseError,
    ResolutionError,
    TranspileError,
)
from .config import BundleConfig, load_config
from .assets import Asset, AssetStore
from .scheduler import Scheduler
from .resolver import Resolver
from .graph import GraphBuilder
from .emitter import emit_bundle, render_bundle
from .introspection import build_manifest

__all__ = [
    'BundleError',
    'BundleIOError',
    'ConfigError',
    'ParseError',
    'ResolutionError',
    'TranspileError',
    'BundleConfig',
    'load_config',
    'Asset',
    'AssetStore',
    'Scheduler',
    'Resolver',
    'GraphBuilder',
    'emit_bundle',
    'render_bundle',
    'build_manifest',
]
