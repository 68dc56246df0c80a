"""
bb2web Compiler Main Module
===========================

This module provides the main compiler interface for bb2web. It
orchestrates the complete compilation process:

    Source → Lex → Parse → Emit → TypeScript / JavaScript

Usage
-----
Command line:
    $ bb2web game.bb -o game.ts

Programmatic:
    >>> from bb2web import transpile
    >>> code = transpile('Graphics 320,240', target="js")

Compilation Pipeline
--------------------
1. **Lexical Analysis**: Convert source to tokens
2. **Parsing**: Build Abstract Syntax Tree (AST)
3. **Emission**: Convert the AST to one TypeScript or JavaScript module

Error Handling
--------------
The first fault raised by any stage aborts the compilation and reaches
the caller unchanged; there is no partial output.

Every compilation builds fresh lexer, parser and emitter instances, so
one BasicCompiler (or several) can be used for independent compilations
without state leaking between them.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging

from bb2web.transpiler.lexer import BasicLexer, BasicToken
from bb2web.transpiler.parser import BasicParser
from bb2web.transpiler.emitter import CodeEmitter, TargetDialect
from bb2web.transpiler.ast import ProgramNode


logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        target: Output dialect, "ts" or "js" ("typescript" and
                "javascript" are accepted and normalized)
        runtime_module: Module specifier the runtime object is imported
                        or required from
        runtime_name: Identifier the runtime object is bound to
        output_comments: Emit the banner and declaration comments
        indent: Indentation unit of the generated code
    """
    target: str = "ts"
    runtime_module: str = "./bb_runtime"
    runtime_name: str = "rt"
    output_comments: bool = True
    indent: str = "  "

    def __post_init__(self):
        # Raises ValueError for unknown names
        self.target = TargetDialect.from_name(self.target).value


class BasicCompiler:
    """
    BASIC to TypeScript / JavaScript compiler.

    Example:
        compiler = BasicCompiler(CompilerOptions(target="js"))
        result = compiler.compile_file("game.bb")
        print(result.code)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> "CompilerResult":
        """
        Compile BASIC source code.

        Args:
            source: BASIC source code string
            filename: Source filename for error messages

        Returns:
            CompilerResult with the generated code and the AST

        Raises:
            TranspileError: If any stage fails
        """
        logger.debug(f"Compiling {filename} to {self.options.target}")
        result = CompilerResult(filename=filename, target=self.options.target)

        # Stage 1: Lexical analysis
        tokens = self._lex(source, filename)
        result.token_count = len(tokens)

        # Stage 2: Parsing
        ast = self._parse(tokens, filename, source.splitlines())
        result.ast = ast

        # Stage 3: Emission
        result.code = self._generate(ast)
        result.success = True

        logger.debug(f"Generated {len(result.code)} characters for {filename}")
        return result

    def compile_file(self, filepath: str) -> "CompilerResult":
        """
        Compile a BASIC source file.

        Args:
            filepath: Path to the source file

        Returns:
            CompilerResult with the generated code and the AST

        Raises:
            TranspileError: If compilation fails
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath))

    def _lex(self, source: str, filename: str) -> list[BasicToken]:
        """Tokenize source."""
        tokens = BasicLexer(source, filename).tokenize()
        logger.debug(f"Tokenized: {len(tokens)} tokens")
        return tokens

    def _parse(self, tokens: list[BasicToken], filename: str, source_lines: list[str]) -> ProgramNode:
        """Parse tokens into AST."""
        program = BasicParser(tokens, filename, source_lines).parse()
        logger.debug(f"Parsed: {program}")
        return program

    def _generate(self, ast: ProgramNode) -> str:
        emitter = CodeEmitter(
            target=self.options.target,
            runtime_module=self.options.runtime_module,
            runtime_name=self.options.runtime_name,
            output_comments=self.options.output_comments,
            indent=self.options.indent,
        )
        return emitter.generate(ast)


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        success: True if compilation succeeded
        code: Generated TypeScript or JavaScript
        ast: Abstract syntax tree
        token_count: Number of tokens lexed (EOF included)
        target: Dialect the code was generated for ("ts" or "js")
    """
    filename: str = ""
    success: bool = False
    code: str = ""
    ast: Optional[ProgramNode] = None
    token_count: int = 0
    target: str = "ts"


# =============================================================================
# Convenience Functions
# =============================================================================

def transpile(source: str, target: str = "ts", filename: str = "<input>") -> str:
    """
    Compile BASIC source to TypeScript or JavaScript in one call.

    Args:
        source: BASIC source code
        target: "ts" or "js" (or "typescript" / "javascript")
        filename: Source filename for error messages

    Returns:
        Generated source text

    Raises:
        TranspileError: If compilation fails
        ValueError: If the target is unknown

    Example:
        >>> print(transpile('Graphics 320,240', target="js", filename="demo.bb"))
    """
    compiler = BasicCompiler(CompilerOptions(target=target))
    return compiler.compile_source(source, filename).code


def compile_file(
    filepath: str,
    output_path: Optional[str] = None,
    target: str = "ts",
) -> str:
    """
    Compile a BASIC file, optionally writing the generated code.

    Args:
        filepath: Path to the source file
        output_path: Where to write the result (nothing is written if None)
        target: "ts" or "js"

    Returns:
        Generated source text
    """
    compiler = BasicCompiler(CompilerOptions(target=target))
    code = compiler.compile_file(filepath).code

    if output_path:
        Path(output_path).write_text(code, encoding="utf-8")
        logger.debug(f"Wrote {len(code)} characters to {output_path}")

    return code
