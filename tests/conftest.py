"""
Shared fixtures for the knapsack tests.
"""
import os
import subprocess
import sys
import textwrap

import pytest

# Make the repository root importable when running without installing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


def write_files(root, files):
    """Create files under root from a {relative_path: source} mapping."""
    for relative, source in files.items():
        path = os.path.join(root, relative)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w') as f:
            f.write(textwrap.dedent(source).lstrip('\n'))
    return root


def run_script(path):
    """Run a Python script and return the completed process."""
    return subprocess.run(
        [sys.executable, path],
        capture_output=True,
        text=True,
        timeout=60,
    )


@pytest.fixture
def project(tmp_path):
    """Factory writing a module tree into a fresh directory."""
    def make(files):
        return write_files(str(tmp_path / 'src'), files)
    return make
