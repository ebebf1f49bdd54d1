# knapsack bundle runtime
"""
Runtime code that gets embedded into every emitted bundle.

The loader is a real Python file so it can be imported and tested directly,
but it is read back as text and pasted into the bundle at emit time.
"""

import os

# Parameter names of every bundled module function; must match loader.py
REQUIRE_PARAM = "__require__"
RECORD_PARAM = "__record__"
EXPORTS_PARAM = "__exports__"
MODULE_PARAMS = (REQUIRE_PARAM, RECORD_PARAM, EXPORTS_PARAM)

PUBLISH_HELPER = "_bundle_publish"
IMPORT_NAMES_HELPER = "_bundle_import_names"
RUN_HELPER = "_bundle_run"
MODULE_TABLE = "_bundle_modules"


def get_preamble():
    """
    Return the runtime loader source that heads every bundle.

    The preamble does not depend on the modules being bundled.
    """
    path = os.path.join(os.path.dirname(__file__), "loader.py")
    with open(path, "r") as f:
        return f.read().strip("\n") + "\n"
