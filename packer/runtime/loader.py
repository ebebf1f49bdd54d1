# ==========================================
# BUNDLE RUNTIME
# ==========================================
# Every module body is a function taking (require, record, exports). The
# loader never caches: each require() call runs the target body again.

_BUNDLE_PARAMS = ("__require__", "__record__", "__exports__")


class _BundleExports:
    """Attribute bag holding the names a module body publishes."""

    def __repr__(self):
        return "<bundle exports " + ", ".join(sorted(vars(self))) + ">"


class _BundleRecord:
    """Module record passed to a body; `exports` is what require() returns."""

    def __init__(self, name):
        self.name = name
        self.exports = _BundleExports()


def _bundle_publish(exports, namespace):
    """Copy a finished module body's top-level names onto its exports."""
    for key, value in namespace.items():
        if key not in _BUNDLE_PARAMS:
            setattr(exports, key, value)


def _bundle_import_names(exports, specifier, *names, require=None, submodules=()):
    """
    Fetch names for `from <specifier> import ...`, as a tuple.

    An attribute of the exports wins; otherwise a name listed in submodules
    is loaded through require("<specifier>.<name>").
    """
    values = []
    for name in names:
        try:
            values.append(getattr(exports, name))
        except AttributeError:
            if name not in submodules:
                raise ImportError(f"cannot import name {name!r} from {specifier!r}") from None
            values.append(require(f"{specifier}.{name}"))
    return tuple(values)


def _bundle_run(modules, entry_id=0):
    """Load the entry module of a module table and return its exports."""

    def load(module_id, name):
        fn, mapping = modules[module_id]
        record = _BundleRecord(name)

        def local_require(specifier):
            return load(mapping[specifier], specifier.lstrip(".") or "__init__")

        fn(local_require, record, record.exports)
        return record.exports

    return load(entry_id, "__main__")
