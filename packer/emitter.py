"""
Bundle emitter - serializes a finished asset store into one Python script.

Layout of the emitted file:

    #!/usr/bin/env python3           header comments
    from __future__ import ...       union of every module's future features
    <runtime preamble>               _bundle_run and helpers
    def _bundle_module_0(__require__, __record__, __exports__): ...
    ...
    _bundle_modules = {0: [_bundle_module_0, {'.a': 1}], ...}
    _bundle_run(_bundle_modules)     load(0) as __main__
"""
import ast
import os

from packer import fs
from packer.errors import TranspileError
from packer.runtime import MODULE_PARAMS, MODULE_TABLE, RUN_HELPER, get_preamble

HEADER = (
    "#!/usr/bin/env python3\n"
    "# Generated by knapsack. Do not edit.\n"
)


def module_function_name(asset_id):
    return f"_bundle_module_{asset_id}"


def render_module(asset):
    """Wrap an asset's code as the body of its three-parameter function."""
    if asset.code is None:
        raise TranspileError("Module was never processed", path=asset.path)
    # Build the def from source so the node carries every field this interpreter expects
    function = ast.parse(
        f"def {module_function_name(asset.id)}({', '.join(MODULE_PARAMS)}):\n    pass\n"
    ).body[0]
    try:
        function.body = ast.parse(asset.code, filename=asset.path).body or [ast.Pass()]
    except SyntaxError as e:
        raise TranspileError(f"Generated code is invalid: {e.msg}", path=asset.path, line_number=e.lineno)
    return ast.unparse(function)


def render_table(store):
    """Render the id -> [function, mapping] module table."""
    lines = [f"{MODULE_TABLE} = {{"]
    for asset in store:
        mapping = dict(asset.dependency_map)
        lines.append(f"    {asset.id}: [{module_function_name(asset.id)}, {mapping!r}],")
    lines.append("}")
    return "\n".join(lines)


def future_imports(store):
    features = []
    for asset in store:
        for feature in asset.future_features:
            if feature not in features:
                features.append(feature)
    if not features:
        return ""
    return f"from __future__ import {', '.join(features)}\n"


def render_bundle(store, preamble=None):
    """
    Render the complete bundle text for a processed store.

    Args:
        store: AssetStore whose entry asset has id 0
        preamble: Optional runtime override (defaults to get_preamble())
    """
    if preamble is None:
        preamble = get_preamble()
    sections = [future_imports(store) + preamble]
    sections.extend(render_module(asset) for asset in store)
    sections.append(render_table(store))
    sections.append(f"{RUN_HELPER}({MODULE_TABLE})")
    return HEADER + "\n" + "\n\n\n".join(s.strip("\n") for s in sections) + "\n"


def format_bundle(text):
    """
    Normalize a rendered bundle through an AST round-trip.

    Leading comment lines (shebang, banner) are kept as they are.
    """
    lines = text.split("\n")
    split = 0
    while split < len(lines) and (lines[split].startswith("#") or not lines[split].strip()):
        split += 1
    header = "\n".join(lines[:split]).rstrip("\n")
    try:
        body = ast.unparse(ast.parse("\n".join(lines[split:])))
    except SyntaxError as e:
        raise TranspileError(f"Bundle is not valid Python: {e.msg}", line_number=e.lineno)
    return (header + "\n\n" if header else "") + body + "\n"


async def emit_bundle(store, output_path, pretty=True):
    """
    Render the store and write it to output_path, creating its directory.

    Returns:
        The bundle text that was written
    """
    text = render_bundle(store)
    if pretty:
        text = format_bundle(text)
    await fs.ensure_dir(os.path.dirname(os.path.abspath(output_path)))
    await fs.write_text(output_path, text)
    return text
