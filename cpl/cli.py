"""
Command line interface for the CPL front end.

    cpl tokens FILE   print the token stream
    cpl ast FILE      print the syntax tree (or canonical source with --source)
    cpl check FILE    run every stage and report diagnostics
    cpl run FILE      run every stage, printing each result and its timing
    cpl repl          start the interactive loop

Exit status is 0 on success, 1 when diagnostics were reported and 2 when
the file cannot be used.

Author: xwest
"""

import logging
from dataclasses import dataclass
from typing import List

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import CompilerOptions
from .lexer import Lexer, Diagnostic, Token
from .parser import Parser, AstPrinter, SourcePrinter
from .analyzer import SemanticAnalyzer
from .pipeline import tokenize, parse, analyze
from .repl import Repl
from .util import SourceFileError, read_source_file, Timer, format_time

logger = logging.getLogger(__name__)

EXIT_DIAGNOSTICS = 1
EXIT_BAD_FILE = 2


@dataclass
class CliState:
    options: CompilerOptions
    console: Console
    err_console: Console


def _configure_logging(verbose: bool, console: Console):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(state: CliState, path: str) -> str:
    try:
        return read_source_file(path)
    except SourceFileError as e:
        state.err_console.print(str(e), style="red", markup=False, highlight=False)
        raise click.exceptions.Exit(EXIT_BAD_FILE)
    except OSError as e:
        state.err_console.print(f"Failed to read file '{path}': {e}", style="red",
                                markup=False, highlight=False)
        raise click.exceptions.Exit(EXIT_BAD_FILE)


def _report(state: CliState, diagnostics: List[Diagnostic]):
    """Print diagnostics and exit with the diagnostics status if there were any."""
    for diagnostic in diagnostics:
        state.err_console.print(str(diagnostic), style="red", markup=False, highlight=False)
        if diagnostic.help_text:
            state.err_console.print(f"  help: {diagnostic.help_text}", style="dim",
                                    markup=False, highlight=False)
    if diagnostics:
        raise click.exceptions.Exit(EXIT_DIAGNOSTICS)


def _token_table(tokens: List[Token]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Line", justify="right")
    table.add_column("Col", justify="right")
    table.add_column("Type")
    table.add_column("Lexeme")
    table.add_column("Literal")
    for token in tokens:
        literal = "" if token.literal is None else escape(repr(token.literal))
        table.add_row(str(token.line), str(token.column), token.type.name,
                      escape(repr(token.lexeme)), literal)
    return table


@click.group()
@click.version_option(__version__, prog_name="cpl")
@click.option("--recover/--no-recover", default=None,
              help="Keep going after the first error and report every diagnostic.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, recover, verbose: bool):
    """CPL language front end."""
    console = Console()
    err_console = Console(stderr=True)
    _configure_logging(verbose, err_console)

    overrides = {} if recover is None else {"recover": recover}
    ctx.obj = CliState(CompilerOptions.from_env(**overrides), console, err_console)


@main.command()
@click.argument("file", type=click.Path())
@click.pass_obj
def tokens(state: CliState, file: str):
    """Print the tokens of FILE."""
    source = _load(state, file)
    result = tokenize(source, state.options.with_filename(file))
    state.console.print(_token_table(result.tokens))
    _report(state, result.diagnostics)


@main.command()
@click.argument("file", type=click.Path())
@click.option("--source", "as_source", is_flag=True, help="Print canonical CPL source instead of the tree.")
@click.pass_obj
def ast(state: CliState, file: str, as_source: bool):
    """Print the syntax tree of FILE."""
    source = _load(state, file)
    result = parse(source, state.options.with_filename(file))
    if result.statements:
        printer = SourcePrinter() if as_source else AstPrinter()
        state.console.print(printer.print(result.statements), markup=False, highlight=False)
    _report(state, result.diagnostics)


@main.command()
@click.argument("file", type=click.Path())
@click.pass_obj
def check(state: CliState, file: str):
    """Check FILE and report diagnostics."""
    source = _load(state, file)
    result = analyze(source, state.options.with_filename(file))
    _report(state, result.diagnostics)
    state.console.print(f"{file}: no problems found", style="green", markup=False, highlight=False)


@main.command()
@click.argument("file", type=click.Path())
@click.pass_obj
def run(state: CliState, file: str):
    """Run every stage on FILE, printing each result and how long it took."""
    source = _load(state, file)
    options = state.options.with_filename(file)
    console = state.console
    timer = Timer()

    console.rule("Source Code")
    console.print(source, markup=False, highlight=False)

    lexer = Lexer(source, file)
    elapsed, token_list = timer.time(lexer.tokenize, label="lex")
    console.rule("Tokens")
    console.print(_token_table(token_list))
    console.print(f"Lexing took {format_time(elapsed) or '0 nanoseconds'}.")
    diagnostics = list(lexer.errors)

    elapsed, parsed = timer.time(Parser(token_list, options).parse, label="parse")
    console.rule("AST")
    if parsed.statements:
        console.print(AstPrinter().print(parsed.statements), markup=False, highlight=False)
    console.print(f"Parsing took {format_time(elapsed) or '0 nanoseconds'}.")
    diagnostics.extend(parsed.errors)

    if parsed.ok:
        elapsed, analysis = timer.time(SemanticAnalyzer(options).analyze, parsed.statements,
                                       label="analyze")
        console.rule("Semantic Analysis")
        console.print(f"Analysis took {format_time(elapsed) or '0 nanoseconds'}.")
        diagnostics.extend(analysis.errors)

    console.print(f"Total: {format_time(timer.total_time()) or '0 nanoseconds'}.")
    _report(state, diagnostics)


@main.command()
@click.option("--no-tokens", is_flag=True, help="Do not print the token stream for each line.")
@click.pass_obj
def repl(state: CliState, no_tokens: bool):
    """Start an interactive session."""
    Repl(state.console, state.options, show_tokens=not no_tokens).run()


if __name__ == "__main__":
    main()
