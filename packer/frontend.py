"""
Front-end: parse module source and list the imports it makes.

Specifier rules:
    import a.b.c          -> "a", "a.b", "a.b.c"   (every parent is imported too)
    import a.b as x       -> "a.b"
    from .m import x      -> ".m"
    from . import x, y    -> ".x", ".y"           (names are submodules)
    from pkg import x     -> "pkg"; "x" is kept as an imported name, which the
                             graph checks for a pkg/x.py submodule
    from __future__ ...   -> none, recorded as a future feature
"""
import ast
from typing import Dict, List, NamedTuple

from packer.errors import ParseError, get_line_context


class ParsedModule(NamedTuple):
    tree: ast.Module
    specifiers: List[str]
    future_features: List[str]
    imported_names: Dict[str, List[str]]


def import_specifiers(node):
    """Return the specifiers a single Import/ImportFrom node depends on."""
    if isinstance(node, ast.Import):
        specifiers = []
        for alias in node.names:
            if alias.asname is None:
                parts = alias.name.split(".")
                specifiers.extend(".".join(parts[:i]) for i in range(1, len(parts) + 1))
            else:
                specifiers.append(alias.name)
        return specifiers

    if node.module == "__future__" and node.level == 0:
        return []
    dots = "." * node.level
    if node.module is None:
        return [dots + alias.name for alias in node.names]
    return [dots + node.module]


class _ImportCollector(ast.NodeVisitor):
    """Collect specifiers in source order, nested scopes included."""

    def __init__(self):
        self.specifiers = []
        self.future_features = []
        self.imported_names = {}

    def _add(self, specifier):
        if specifier not in self.specifiers:
            self.specifiers.append(specifier)

    def visit_Import(self, node):
        for specifier in import_specifiers(node):
            self._add(specifier)

    def visit_ImportFrom(self, node):
        if node.module == "__future__" and node.level == 0:
            for alias in node.names:
                if alias.name not in self.future_features:
                    self.future_features.append(alias.name)
            return
        for specifier in import_specifiers(node):
            self._add(specifier)
        if node.module is not None:
            names = self.imported_names.setdefault("." * node.level + node.module, [])
            for alias in node.names:
                if alias.name != "*" and alias.name not in names:
                    names.append(alias.name)


def parse(source, path="<module>"):
    """
    Parse Python source and extract its import specifiers.

    Args:
        source: Module source text
        path: File name used in error messages

    Returns:
        ParsedModule with the AST, ordered unique specifiers and future features

    Raises:
        ParseError: If the source is not valid Python
    """
    try:
        tree = ast.parse(source, filename=path)
    except SyntaxError as e:
        raise ParseError(
            e.msg or "Syntax error",
            path=path,
            line_number=e.lineno,
            column=e.offset,
            context=(e.text or "").strip() or get_line_context(source, e.lineno),
            suggestion="Check syntax around this line",
        )
    except ValueError as e:
        # null bytes on older interpreters
        raise ParseError(str(e), path=path)

    collector = _ImportCollector()
    collector.visit(tree)
    return ParsedModule(
        tree, collector.specifiers, collector.future_features, collector.imported_names
    )
