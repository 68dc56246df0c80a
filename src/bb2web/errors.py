"""
bb2web Error Hierarchy
======================

This module defines the root of the exception hierarchy for bb2web and
the source location type shared by every stage of the transpiler.

All exceptions inherit from Bb2WebError, allowing callers to catch all
bb2web-related errors with a single except clause if desired:

    try:
        code = transpile(source)
    except Bb2WebError as e:
        print(f"Error: {e}")

Compiler faults (lexical, syntax, construction and semantic errors) live
in bb2web.transpiler.errors and format themselves as:

    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class Bb2WebError(Exception):
    """Base exception for all bb2web errors."""
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in BASIC source code for error reporting.

    Every token and every AST node carries one of these. The frozen
    dataclass keeps positions from being modified once recorded.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"
