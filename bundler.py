import asyncio
import os
import sys
from typing import NamedTuple

from packer.assets import AssetStore
from packer.config import BundleConfig, load_config
from packer.emitter import emit_bundle
from packer.graph import GraphBuilder
from packer.resolver import Resolver

# Global verbose flag
_VERBOSE = False

def set_verbose(value):
    """Set the global verbose flag."""
    global _VERBOSE
    _VERBOSE = value

def debug_log(message):
    """Log a debug message to stderr if verbose mode is enabled."""
    if _VERBOSE:
        print(f"\033[94mDEBUG:\033[0m {message}", file=sys.stderr)


class BuildResult(NamedTuple):
    output: str
    code: str
    store: AssetStore


async def bundle_async(config: BundleConfig) -> BuildResult:
    # STEP 1: DISCOVER THE MODULE GRAPH
    search_paths = [os.path.dirname(config.entry), *config.search_paths]
    debug_log(f"Bundling {config.entry} (search paths: {search_paths})")
    builder = GraphBuilder(
        Resolver(search_paths),
        concurrency=config.concurrency,
        trace=debug_log,
    )
    store = await builder.build(config.entry)

    # STEP 2: EMIT THE BUNDLE
    code = await emit_bundle(store, config.output, pretty=config.pretty)
    debug_log(f"Wrote {len(code)} characters to {config.output}")
    return BuildResult(config.output, code, store)


def bundle(entry, **options) -> BuildResult:
    """
    Bundle entry and everything it imports into one script.

    Args:
        entry: Entry script path, relative to the current directory
        **options: BundleConfig overrides (output, concurrency, pretty, search_paths)

    Raises:
        BundleError: On the first failure anywhere in the build
    """
    config = load_config(entry, **options)
    return asyncio.run(bundle_async(config))
