"""
bb2web - BASIC Transpiler Command-Line Interface
================================================

This module implements the command-line interface for the transpiler.

Usage Examples
--------------
Basic compilation (writes game.ts):
    $ bb2web game.bb

JavaScript output:
    $ bb2web game.bb -f js -o public/game.js

Custom runtime location:
    $ bb2web game.bb --runtime-module ./lib/runtime

Inspect the front end:
    $ bb2web --tokens game.bb
    $ bb2web --ast game.bb
"""

import logging
from pathlib import Path
from typing import Optional

import click

from bb2web import __version__
from bb2web.transpiler import BasicCompiler, CompilerOptions, TargetDialect
from bb2web.transpiler.ast import ASTPrinter
from bb2web.transpiler.lexer import tokenize, format_tokens
from bb2web.transpiler.parser import parse_source
from bb2web.cli.errors import handle_cli_exception


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: input.ts or input.js)",
)
@click.option(
    "-f", "--format", "output_format",
    type=click.Choice(["typescript", "javascript", "ts", "js"], case_sensitive=False),
    default="typescript",
    show_default=True,
    help="Output language",
)
@click.option(
    "--runtime-module",
    default="./bb_runtime",
    show_default=True,
    help="Module the runtime object is imported from",
)
@click.option(
    "--no-comments",
    is_flag=True,
    help="Omit the banner and declaration comments",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print tokens and exit (for debugging)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print AST and exit (for debugging)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="bb2web")
def main(
    input_file: Path,
    output: Optional[Path],
    output_format: str,
    runtime_module: str,
    no_comments: bool,
    tokens: bool,
    ast: bool,
    verbose: bool,
) -> None:
    """
    Compile Blitz-style BASIC to TypeScript or JavaScript.

    INPUT_FILE is the BASIC source file (.bb) to compile.

    The generated module imports its drawing runtime from
    --runtime-module and runs the program when loaded.

    \b
    Examples:
        bb2web game.bb                  # Outputs game.ts
        bb2web game.bb -f js            # Outputs game.js
        bb2web game.bb -o out/game.ts   # Specify output file
        bb2web --ast game.bb            # Dump the syntax tree
        bb2web -v game.bb               # Verbose output

    \b
    Supported BASIC features:
        - Global, Local, Const, Dim
        - If/ElseIf/Else, While, Repeat/Until, For/Next, Select/Case
        - Functions with parameters and Return
        - Graphics, Cls, Color, Plot, Line, Rect, Oval, Text, Flip
        - MilliSecs, KeyDown, MouseX, MouseY, Rnd, SeedRnd
    """
    setup_logging(verbose)

    try:
        dialect = TargetDialect.from_name(output_format)

        if output is None:
            output = input_file.with_suffix(dialect.extension)

        source = input_file.read_text(encoding="utf-8")

        # Token dump mode
        if tokens:
            click.echo(format_tokens(tokenize(source, str(input_file))))
            return

        # AST dump mode stops after parsing
        if ast:
            click.echo(ASTPrinter().print(parse_source(source, str(input_file))))
            return

        options = CompilerOptions(
            target=dialect.value,
            runtime_module=runtime_module,
            output_comments=not no_comments,
        )
        logger.debug(f"Compiling {input_file} as {dialect.name.lower()}")

        compiler = BasicCompiler(options)
        result = compiler.compile_source(source, str(input_file))

        output.write_text(result.code, encoding="utf-8")

        if verbose:
            click.echo(f"Wrote {len(result.code)} characters to {output}")
            click.echo(f"Tokenized: {result.token_count} tokens")
            if result.ast:
                click.echo(f"Parsed: {len(result.ast.statements)} top-level statements")

        click.echo(f"Compiled {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
