"""
bb2web - Blitz-style BASIC to TypeScript / JavaScript
=====================================================

This package compiles small graphics programs written in a Blitz-style
BASIC dialect into a single TypeScript or JavaScript module that runs in
the browser against a small drawing runtime.

Main Components
---------------
- **transpiler**: lexer, parser, AST, emitter and the runtime command
  table
- **cli**: the `bb2web` command-line tool

Quick Start
-----------
Compile a string:
    >>> from bb2web import transpile
    >>> code = transpile('Graphics 320,240', target="ts")

Compile a file with options:
    >>> from bb2web import BasicCompiler, CompilerOptions
    >>> compiler = BasicCompiler(CompilerOptions(target="js", output_comments=False))
    >>> result = compiler.compile_file("game.bb")
    >>> print(result.code)

Or use the command-line tool:
    $ bb2web game.bb -o game.ts
    $ bb2web game.bb -f js
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================
# __version__ is defined first: the emitter reads it while this package is
# still importing.
# =============================================================================

from bb2web.errors import Bb2WebError, SourceLocation
from bb2web.transpiler import (
    BasicCompiler,
    CompilerOptions,
    CompilerResult,
    TranspileError,
    LexicalError,
    BasicSyntaxError,
    ConstructionError,
    SemanticError,
    transpile,
    compile_file,
    tokenize,
    parse_source,
)

__all__ = [
    "__version__",
    "Bb2WebError",
    "SourceLocation",
    "BasicCompiler",
    "CompilerOptions",
    "CompilerResult",
    "TranspileError",
    "LexicalError",
    "BasicSyntaxError",
    "ConstructionError",
    "SemanticError",
    "transpile",
    "compile_file",
    "tokenize",
    "parse_source",
]
