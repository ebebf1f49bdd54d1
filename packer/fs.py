"""
Filesystem helpers used by the graph builder and emitter.

Blocking calls run in a worker thread so the event loop keeps driving other
assets while one waits on the disk.
"""
import asyncio
import os
import tempfile
import tokenize

from packer.errors import BundleIOError


def _read_source(path):
    # tokenize.open honours PEP 263 coding cookies and BOMs
    with tokenize.open(path) as f:
        return f.read()


async def read_text(path):
    """Read a Python source file as text."""
    try:
        return await asyncio.to_thread(_read_source, path)
    except OSError as e:
        raise BundleIOError(f"Cannot read module: {e.strerror or e}", path=path)
    except (SyntaxError, UnicodeDecodeError) as e:
        raise BundleIOError(
            f"Cannot decode module: {e}",
            path=path,
            suggestion="Save the file as UTF-8 or declare its encoding",
        )


async def ensure_dir(path):
    """Create path and any missing parents."""
    try:
        await asyncio.to_thread(os.makedirs, path, exist_ok=True)
    except OSError as e:
        raise BundleIOError(f"Cannot create output directory: {e.strerror or e}", path=path)


def _write_atomic(path, text):
    directory = os.path.dirname(path) or "."
    fd, tmp_path = tempfile.mkstemp(prefix=".knapsack-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise


async def write_text(path, text):
    """Write text to path; readers never observe a partially written file."""
    try:
        await asyncio.to_thread(_write_atomic, path, text)
    except OSError as e:
        raise BundleIOError(f"Cannot write bundle: {e.strerror or e}", path=path)
