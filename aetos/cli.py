"""
Command-line interface for Aetos.

    aetosc run FILE        lex, parse, check, optimize and interpret
    aetosc check FILE      everything except interpretation
    aetosc tokens FILE     print the token stream

Compile-time errors (lexical, syntax, type) and runtime errors are reported
on stderr and exit with status 1.
"""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .analyzer import SemanticError
from .driver import compile_source
from .interpreter import Interpreter, InterpreterConfiguration, InterpreterError
from .lexer import LexerError, TokenType, tokenize_string
from .parser import ParseError

logger = logging.getLogger(__name__)

COMPILE_ERRORS = (LexerError, ParseError, SemanticError)

# Each Aetos call nests several interpreter frames.
RECURSION_LIMIT = 4000


def _read_source(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def _report(error: Exception) -> None:
    click.echo(str(error).rstrip(), err=True)


@click.group()
@click.version_option(__version__, prog_name="aetosc")
@click.option("--verbose", "-v", is_flag=True, help="Log pipeline details to stderr.")
def cli(verbose):
    """Aetos language compiler and interpreter."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--width", "-W", default=800, show_default=True, help="Graphics surface width.")
@click.option("--height", "-H", default=600, show_default=True, help="Graphics surface height.")
@click.option("--no-optimize", is_flag=True, help="Skip the optimizer.")
@click.pass_context
def run(ctx, file, width, height, no_optimize):
    """Run an Aetos program."""
    logger.info("Running Aetos program: %s", file)
    try:
        program = compile_source(_read_source(file), file, optimize=not no_optimize)
    except COMPILE_ERRORS as error:
        _report(error)
        ctx.exit(1)

    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))
    config = InterpreterConfiguration(width=width, height=height, title=Path(file).stem)
    interpreter = Interpreter(config, output=sys.stdout)
    try:
        result = interpreter.execute_program(program)
    except InterpreterError as error:
        click.echo(f"Runtime error: {error.message}", err=True)
        ctx.exit(1)

    logger.info("Program finished successfully (main returned %s)", result)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def check(ctx, file):
    """Check syntax and types without running."""
    try:
        program = compile_source(_read_source(file), file)
    except COMPILE_ERRORS as error:
        _report(error)
        ctx.exit(1)

    click.echo(f"Parsed {len(program.functions)} functions and {len(program.structs)} structs")
    click.echo("Program is valid Aetos code")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def tokens(ctx, file):
    """Print the token stream of a source file."""
    try:
        token_list = tokenize_string(_read_source(file), file)
    except LexerError as error:
        _report(error)
        ctx.exit(1)

    for token in token_list:
        if token.type is TokenType.EOF:
            break
        location = token.location
        click.echo(f"{location.line}:{location.column}\t{token.type.name}\t{token.lexeme}")


def main():
    cli()


if __name__ == "__main__":
    main()
