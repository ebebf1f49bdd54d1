"""
Unit tests for the bundle runtime loader (packer/runtime/loader.py).
"""
import os
import sys

import pytest

# Add the repository root to path for testing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from packer import runtime
from packer.runtime import get_preamble


@pytest.fixture
def runtime_env():
    """Create a namespace with the runtime loaded."""
    env = {}
    exec(get_preamble(), env)
    return env


class TestPreamble:
    """Tests for the preamble text itself."""

    def test_defines_loader(self, runtime_env):
        """The preamble defines the loader and helpers."""
        for name in ('_bundle_run', '_bundle_publish', '_bundle_import_names', '_BundleRecord'):
            assert name in runtime_env

    def test_parameter_names_match(self, runtime_env):
        """The loader and the transformer agree on parameter names."""
        assert runtime_env['_BUNDLE_PARAMS'] == runtime.MODULE_PARAMS

    def test_preamble_is_input_independent(self):
        """Two reads give the same text."""
        assert get_preamble() == get_preamble()


class TestLoader:
    """Tests for load(id) semantics."""

    def test_entry_runs_as_main(self, runtime_env):
        """Module 0 runs with the name __main__."""
        seen = []

        def entry(require, record, exports):
            seen.append(record.name)

        runtime_env['_bundle_run']({0: [entry, {}]})
        assert seen == ['__main__']

    def test_require_follows_mapping(self, runtime_env):
        """require(specifier) loads the mapped id and returns its exports."""
        def entry(require, record, exports):
            exports.result = require('./a').value

        def dep(require, record, exports):
            exports.value = 42

        exports = runtime_env['_bundle_run']({0: [entry, {'./a': 1}], 1: [dep, {}]})
        assert exports.result == 42

    def test_replaced_exports_returned(self, runtime_env):
        """load() returns record.exports, even if the body replaced it."""
        def entry(require, record, exports):
            exports.result = require('.a')

        def dep(require, record, exports):
            record.exports = 'replaced'

        exports = runtime_env['_bundle_run']({0: [entry, {'.a': 1}], 1: [dep, {}]})
        assert exports.result == 'replaced'

    def test_no_caching(self, runtime_env):
        """Each import edge re-runs the target body with fresh exports."""
        runs = []

        def entry(require, record, exports):
            exports.first = require('.a')
            exports.second = require('.b')

        def a(require, record, exports):
            exports.shared = require('.shared')

        def b(require, record, exports):
            exports.shared = require('.shared')

        def shared(require, record, exports):
            runs.append(record.name)
            exports.token = object()

        modules = {
            0: [entry, {'.a': 1, '.b': 2}],
            1: [a, {'.shared': 3}],
            2: [b, {'.shared': 3}],
            3: [shared, {}],
        }
        exports = runtime_env['_bundle_run'](modules)
        assert runs == ['shared', 'shared']
        assert exports.first.shared is not exports.second.shared
        assert exports.first.shared.token is not exports.second.shared.token

    def test_unknown_specifier_raises(self, runtime_env):
        """A specifier missing from the mapping raises KeyError."""
        def entry(require, record, exports):
            require('.nope')

        with pytest.raises(KeyError):
            runtime_env['_bundle_run']({0: [entry, {}]})


class TestHelpers:
    """Tests for the publish and import-names helpers."""

    def test_publish_skips_parameters(self, runtime_env):
        """Module parameters are not exported."""
        record = runtime_env['_BundleRecord']('m')
        runtime_env['_bundle_publish'](record.exports, {
            '__require__': 1, '__record__': 2, '__exports__': 3, 'value': 4,
        })
        assert vars(record.exports) == {'value': 4}

    def test_import_names(self, runtime_env):
        """Names come back as a tuple in request order."""
        record = runtime_env['_BundleRecord']('m')
        record.exports.a = 1
        record.exports.b = 2
        assert runtime_env['_bundle_import_names'](record.exports, '.m', 'b', 'a') == (2, 1)

    def test_import_missing_name(self, runtime_env):
        """A missing name raises ImportError naming the specifier."""
        record = runtime_env['_BundleRecord']('m')
        with pytest.raises(ImportError, match="'.m'"):
            runtime_env['_bundle_import_names'](record.exports, '.m', 'missing')

    def test_import_names_submodule_fallback(self, runtime_env):
        """A listed submodule is required when the package lacks the name."""
        record = runtime_env['_BundleRecord']('pkg')
        record.exports.attr = 1
        calls = []

        def require(specifier):
            calls.append(specifier)
            return 'loaded ' + specifier

        names = runtime_env['_bundle_import_names'](
            record.exports, 'pkg', 'sub', 'attr', require=require, submodules=('sub', 'attr'),
        )
        assert names == ('loaded pkg.sub', 1)
        assert calls == ['pkg.sub']

    def test_import_names_unlisted_still_missing(self, runtime_env):
        """Names that are neither attributes nor submodules still fail."""
        record = runtime_env['_BundleRecord']('pkg')
        with pytest.raises(ImportError):
            runtime_env['_bundle_import_names'](
                record.exports, 'pkg', 'other', require=lambda s: None, submodules=('sub',),
            )
