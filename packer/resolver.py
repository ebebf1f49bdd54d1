"""
Resolve import specifiers to canonical module paths on disk.
"""
import importlib.util
import os

from packer.errors import ResolutionError


def _candidates(base, dotted):
    """Yield the module files a dotted name may refer to under base."""
    if not dotted:
        yield os.path.join(base, "__init__.py")
        return
    stem = os.path.join(base, *dotted.split("."))
    yield stem + ".py"
    yield os.path.join(stem, "__init__.py")


def _is_installed(name):
    try:
        return importlib.util.find_spec(name) is not None
    except (ImportError, ValueError):
        return False


class Resolver:
    """
    Maps a specifier plus the importing file's directory to a canonical path.

    Relative specifiers climb from the importing directory, one level per
    extra leading dot. Absolute specifiers are searched on search_paths in
    order (the entry script's directory comes first, as on sys.path).
    """

    def __init__(self, search_paths=()):
        self.search_paths = [os.path.abspath(p) for p in search_paths]

    def resolve(self, specifier, from_directory):
        """
        Return the canonical path for specifier, or None for an external
        module the build interpreter can import itself.

        Raises:
            ResolutionError: If the specifier names no module
        """
        if specifier.startswith("."):
            return self._resolve_relative(specifier, from_directory)
        return self._resolve_absolute(specifier, from_directory)

    def _resolve_relative(self, specifier, from_directory):
        rest = specifier.lstrip(".")
        level = len(specifier) - len(rest)
        base = os.path.abspath(from_directory)
        for _ in range(level - 1):
            base = os.path.dirname(base)
        found = self._find(base, rest)
        if found is None:
            raise ResolutionError(
                f"Cannot resolve relative import from {from_directory}",
                specifier=specifier,
                suggestion=f"Expected {' or '.join(_candidates(base, rest))}",
            )
        return found

    def _resolve_absolute(self, specifier, from_directory):
        for root in self.search_paths:
            found = self._find(root, specifier)
            if found is not None:
                return found
        if _is_installed(specifier.split(".")[0]):
            return None
        raise ResolutionError(
            f"Cannot resolve module imported from {from_directory}",
            specifier=specifier,
            suggestion="Add the module next to the entry script or pass its directory as a search path",
        )

    def resolve_submodule(self, package_path, name):
        """
        Return the canonical path of submodule name of the package whose
        __init__.py is package_path, or None when name is not a submodule.
        """
        if os.path.basename(package_path) != "__init__.py":
            return None
        return self._find(os.path.dirname(package_path), name)

    @staticmethod
    def _find(base, dotted):
        for candidate in _candidates(base, dotted):
            if os.path.isfile(candidate):
                return os.path.realpath(candidate)
        return None
