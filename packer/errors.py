"""
Error handling utilities for the knapsack bundler.

Every failure during a build surfaces as a BundleError subclass so the CLI can
report it uniformly and exit non-zero.
"""


class BundleError(Exception):
    """Base exception for bundling errors with file, line and hint context."""

    kind = "Bundle Error"

    def __init__(self, message, path=None, specifier=None, line_number=None,
                 column=None, context=None, suggestion=None):
        self.message = message
        self.path = path
        self.specifier = specifier  # The import text as written
        self.line_number = line_number
        self.column = column
        self.context = context  # The offending line
        self.suggestion = suggestion  # How to fix it
        super().__init__(self._format_error())

    def _format_error(self):
        """Format the error message with location, context and suggestion."""
        lines = [f"\n❌ {self.kind}"]
        if self.path:
            lines.append(f" in {self.path}")
        if self.line_number:
            lines.append(f" at line {self.line_number}")
            if self.column:
                lines.append(f", column {self.column}")
        lines.append(":\n")

        lines.append(f"   {self.message}\n")

        if self.specifier is not None:
            lines.append(f"   import: {self.specifier!r}\n")

        if self.context:
            lines.append(f"   > {self.context}\n")

        if self.suggestion:
            lines.append(f"   💡 {self.suggestion}\n")

        return "".join(lines)


class BundleIOError(BundleError):
    """A source file could not be read or the bundle could not be written."""
    kind = "IO Error"


class ParseError(BundleError):
    """A module is not valid Python."""
    kind = "Parse Error"


class ResolutionError(BundleError):
    """An import specifier does not name a module on disk."""
    kind = "Resolution Error"


class TranspileError(BundleError):
    """A module uses a construct that cannot be rewritten into a bundle body."""
    kind = "Transpile Error"


class ConfigError(BundleError):
    """Invalid bundler options or knapsack.json contents."""
    kind = "Config Error"


def get_line_context(source_code, line_number):
    """Extract the line of code from source by line number (1-based)."""
    if not source_code or line_number is None:
        return None
    source_lines = source_code.split('\n')
    if 0 < line_number <= len(source_lines):
        return source_lines[line_number - 1].strip()
    return None
