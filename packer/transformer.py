"""
Module transformer - rewrites a parsed module into a bundle function body.

The body runs inside

    def _bundle_module_<id>(__require__, __record__, __exports__): ...

so bundled imports become __require__ calls, module-level names become locals
of that function, and the epilogue publishes them on the exports object.
"""
import ast

from packer.errors import TranspileError, get_line_context
from packer.runtime import (
    EXPORTS_PARAM,
    IMPORT_NAMES_HELPER,
    PUBLISH_HELPER,
    RECORD_PARAM,
    REQUIRE_PARAM,
)


class _AssignmentExprCollector(ast.NodeVisitor):
    """Targets of := expressions, which bind in the enclosing scope."""

    def __init__(self, names):
        self.names = names

    def visit_NamedExpr(self, node):
        self.names.add(node.target.id)
        self.visit(node.value)

    def visit_Lambda(self, node):
        pass


class _BindingCollector(ast.NodeVisitor):
    """Names bound directly in the module scope (nested scopes excluded)."""

    def __init__(self):
        self.names = set()

    def visit_Name(self, node):
        if isinstance(node.ctx, (ast.Store, ast.Del)):
            self.names.add(node.id)

    def _bind_definition(self, node):
        self.names.add(node.name)
        for decorator in node.decorator_list:
            self.visit(decorator)

    visit_FunctionDef = _bind_definition
    visit_AsyncFunctionDef = _bind_definition
    visit_ClassDef = _bind_definition

    def visit_Lambda(self, node):
        pass

    def _visit_comprehension(self, node):
        # only walrus targets escape a comprehension
        _AssignmentExprCollector(self.names).visit(node)

    visit_ListComp = _visit_comprehension
    visit_SetComp = _visit_comprehension
    visit_DictComp = _visit_comprehension
    visit_GeneratorExp = _visit_comprehension

    def visit_Import(self, node):
        for alias in node.names:
            self.names.add(alias.asname or alias.name.split(".")[0])

    def visit_ImportFrom(self, node):
        for alias in node.names:
            self.names.add(alias.asname or alias.name)

    def visit_ExceptHandler(self, node):
        if node.name:
            self.names.add(node.name)
        self.generic_visit(node)

    def visit_MatchAs(self, node):
        if node.name:
            self.names.add(node.name)
        self.generic_visit(node)

    def visit_MatchStar(self, node):
        if node.name:
            self.names.add(node.name)


def module_bindings(tree):
    """Return the set of names a module binds at top level."""
    collector = _BindingCollector()
    for statement in tree.body:
        collector.visit(statement)
    return collector.names


def _require(specifier):
    return ast.Call(
        func=ast.Name(id=REQUIRE_PARAM, ctx=ast.Load()),
        args=[ast.Constant(value=specifier)],
        keywords=[],
    )


def _dotted(parts, ctx):
    node = ast.Name(id=parts[0], ctx=ast.Load() if len(parts) > 1 else ctx)
    for i, part in enumerate(parts[1:], start=2):
        node = ast.Attribute(value=node, attr=part, ctx=ast.Load() if i < len(parts) else ctx)
    return node


class ModuleTransformer(ast.NodeTransformer):
    """
    Rewrites bundled imports into __require__ calls.

    Only specifiers in `bundled` are rewritten; external imports stay as
    ordinary import statements and bind locals as usual.
    """

    def __init__(self, bundled, path=None, source=None):
        super().__init__()
        self.bundled = set(bundled)
        self.path = path
        self.source = source
        self.top_level = set()
        self._depth = 0

    def _error(self, message, node, suggestion=None):
        line = getattr(node, "lineno", None)
        return TranspileError(
            message,
            path=self.path,
            line_number=line,
            context=get_line_context(self.source, line),
            suggestion=suggestion,
        )

    def transform(self, tree):
        """Rewrite tree in place and wrap it with the prologue and epilogue."""
        self.top_level = module_bindings(tree)
        tree = self.visit(tree)
        prologue = ast.Assign(
            targets=[ast.Name(id="__name__", ctx=ast.Store())],
            value=ast.Attribute(
                value=ast.Name(id=RECORD_PARAM, ctx=ast.Load()), attr="name", ctx=ast.Load()
            ),
        )
        epilogue = ast.Expr(
            value=ast.Call(
                func=ast.Name(id=PUBLISH_HELPER, ctx=ast.Load()),
                args=[
                    ast.Name(id=EXPORTS_PARAM, ctx=ast.Load()),
                    ast.Call(func=ast.Name(id="locals", ctx=ast.Load()), args=[], keywords=[]),
                ],
                keywords=[],
            )
        )
        tree.body = [prologue, *tree.body, epilogue]
        return ast.fix_missing_locations(tree)

    def visit_Import(self, node):
        statements = []
        for alias in node.names:
            if alias.name not in self.bundled:
                statements.append(ast.Import(names=[alias]))
                continue
            if alias.asname:
                statements.append(ast.Assign(
                    targets=[ast.Name(id=alias.asname, ctx=ast.Store())],
                    value=_require(alias.name),
                ))
                continue
            parts = alias.name.split(".")
            for i in range(1, len(parts) + 1):
                prefix = ".".join(parts[:i])
                if prefix not in self.bundled:
                    raise self._error(
                        f"Cannot bundle '{alias.name}': parent package '{prefix}' is not bundled",
                        node,
                        suggestion=f"Use 'import {alias.name} as ...'",
                    )
                statements.append(ast.Assign(
                    targets=[_dotted(parts[:i], ast.Store())],
                    value=_require(prefix),
                ))
        return [ast.copy_location(s, node) for s in statements]

    def visit_ImportFrom(self, node):
        if node.module == "__future__" and node.level == 0:
            return None
        if any(alias.name == "*" for alias in node.names):
            raise self._error(
                "Star imports cannot be bundled",
                node,
                suggestion="Import the names you use explicitly",
            )
        dots = "." * node.level

        if node.module is None:
            statements = []
            for alias in node.names:
                specifier = dots + alias.name
                if specifier not in self.bundled:
                    raise self._error(f"Relative import '{specifier}' was not resolved", node)
                statements.append(ast.Assign(
                    targets=[ast.Name(id=alias.asname or alias.name, ctx=ast.Store())],
                    value=_require(specifier),
                ))
            return [ast.copy_location(s, node) for s in statements]

        specifier = dots + node.module
        if specifier not in self.bundled:
            if node.level:
                raise self._error(f"Relative import '{specifier}' was not resolved", node)
            return node

        targets = ast.Tuple(
            elts=[ast.Name(id=alias.asname or alias.name, ctx=ast.Store()) for alias in node.names],
            ctx=ast.Store(),
        )
        value = ast.Call(
            func=ast.Name(id=IMPORT_NAMES_HELPER, ctx=ast.Load()),
            args=[_require(specifier), ast.Constant(value=specifier)]
                 + [ast.Constant(value=alias.name) for alias in node.names],
            keywords=[],
        )
        submodules = [
            alias.name for alias in node.names if f"{specifier}.{alias.name}" in self.bundled
        ]
        if submodules:
            value.keywords = [
                ast.keyword(arg="require", value=ast.Name(id=REQUIRE_PARAM, ctx=ast.Load())),
                ast.keyword(
                    arg="submodules",
                    value=ast.Tuple(elts=[ast.Constant(value=n) for n in submodules], ctx=ast.Load()),
                ),
            ]
        return ast.copy_location(ast.Assign(targets=[targets], value=value), node)

    def _visit_scope(self, node):
        self._depth += 1
        try:
            self.generic_visit(node)
        finally:
            self._depth -= 1
        return node

    visit_FunctionDef = _visit_scope
    visit_AsyncFunctionDef = _visit_scope
    visit_Lambda = _visit_scope

    def visit_ClassDef(self, node):
        self._visit_scope(node)
        # __module__ would otherwise come from the bundle's own globals
        module = ast.Assign(
            targets=[ast.Name(id="__module__", ctx=ast.Store())],
            value=ast.Name(id="__name__", ctx=ast.Load()),
        )
        index = 1 if ast.get_docstring(node, clean=False) is not None else 0
        node.body.insert(index, ast.copy_location(module, node))
        return node

    def visit_Global(self, node):
        if self._depth == 0:
            return ast.copy_location(ast.Pass(), node)
        # module-level names live in the enclosing bundle function now
        rebound = [name for name in node.names if name in self.top_level]
        remaining = [name for name in node.names if name not in self.top_level]
        statements = []
        if rebound:
            statements.append(ast.copy_location(ast.Nonlocal(names=rebound), node))
        if remaining:
            statements.append(ast.copy_location(ast.Global(names=remaining), node))
        return statements


def transpile(parsed, bundled, path=None, source=None):
    """
    Turn a ParsedModule into the text of a bundle function body.

    Args:
        parsed: ParsedModule from the front-end
        bundled: Specifiers that resolved to bundled modules
        path: Module path used in error messages
        source: Module source text, for error context

    Raises:
        TranspileError: If the module uses a construct that cannot be bundled
    """
    tree = ModuleTransformer(bundled, path=path, source=source).transform(parsed.tree)
    try:
        return ast.unparse(tree)
    except (ValueError, TypeError, AttributeError) as e:
        raise TranspileError(f"Cannot generate code: {e}", path=path)
