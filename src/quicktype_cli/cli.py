"""Command-line entry point for quicktype_cli."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer
from click.core import ParameterSource
from rich.console import Console
from rich.table import Table

from . import get_version
from .engine import RenderEngine, resolve_engine
from .errors import QuicktypeError, UnsupportedInvocationError
from .options import QuicktypeOptions, load_defaults
from .orchestrator import run

EPILOG = """\
\b
Examples:
  Generate C# to parse a Bitcoin API
  $ quicktype -o LatestBlock.cs https://blockchain.info/latestblock

\b
  Generate Go code from a JSON file
  $ quicktype -l go user.json

\b
  Generate JSON Schema, then TypeScript
  $ quicktype -o schema.json https://blockchain.info/latestblock
  $ quicktype -o bitcoin.ts --src-lang schema schema.json
"""

app = typer.Typer(
    help="Given JSON sample data, quicktype outputs code for working with that data.",
    epilog=EPILOG,
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
    rich_markup_mode=None,
)
console = Console()
err_console = Console(stderr=True)


def _fail(message: str) -> None:
    err_console.print(message, style="bold red", markup=False, highlight=False, soft_wrap=True)


def _print_languages(engine: RenderEngine) -> None:
    table = Table(title="Target languages")
    table.add_column("Name")
    table.add_column("Extension")
    table.add_column("Ace mode")
    for renderer in engine.renderers:
        table.add_row(renderer.name, renderer.extension, renderer.ace_mode or "-")
    console.print(table)


@app.command()
def quicktype(
    ctx: typer.Context,
    src: Annotated[
        list[str] | None,
        typer.Argument(metavar="[FILE|URL]...", help="The file or url to type.", show_default=False),
    ] = None,
    out: Annotated[
        Path | None,
        typer.Option(
            "--out", "-o", metavar="FILE", help="The output file. Determines --lang and --top-level."
        ),
    ] = None,
    top_level: Annotated[
        str | None,
        typer.Option("--top-level", "-t", metavar="NAME", help="The name for the top level type."),
    ] = None,
    lang: Annotated[
        str | None, typer.Option("--lang", "-l", metavar="LANG", help="The target language.")
    ] = None,
    src_lang: Annotated[
        str | None,
        typer.Option(
            "--src-lang", "-s", metavar="json|schema", help="The source language (default is json)."
        ),
    ] = None,
    urls_from: Annotated[
        Path | None,
        typer.Option("--urls-from", metavar="FILE", help="URL grammar describing URLs to crawl."),
    ] = None,
    engine: Annotated[
        str | None,
        typer.Option(
            envvar="QUICKTYPE_ENGINE", help="Rendering engine to use when several are installed."
        ),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option(metavar="FILE", help="YAML or JSON file with default option values."),
    ] = None,
    list_langs: Annotated[
        bool, typer.Option("--list-langs", help="List the engine's target languages.")
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", help="Report progress on stderr.")] = False,
    version: Annotated[bool, typer.Option("--version", help="Print the version.")] = False,
) -> None:
    """Generate code from JSON samples read from files, URLs or standard input."""
    if version:
        typer.echo(get_version())
        return
    flags = (out, top_level, lang, src_lang, urls_from, config)
    engine_given = ctx.get_parameter_source("engine") == ParameterSource.COMMANDLINE
    if (
        not src
        and all(value is None for value in flags)
        and not (engine_given or list_langs or verbose)
    ):
        typer.echo(ctx.get_help())
        return

    given: dict[str, Any] = {
        "out": out,
        "top_level": top_level,
        "lang": lang,
        "src_lang": src_lang,
        "urls_from": urls_from,
        "engine": engine,
        "src": src or None,
        "verbose": verbose or None,
    }
    try:
        defaults = load_defaults(config) if config is not None else {}
        options = QuicktypeOptions(
            **{**defaults, **{key: value for key, value in given.items() if value is not None}}
        )
        engine_impl = resolve_engine(options.engine)
        if list_langs:
            _print_languages(engine_impl)
            return
        run(options, engine_impl)
    except UnsupportedInvocationError as exc:
        _fail(str(exc))
        typer.echo(ctx.get_help())
        raise typer.Exit(1) from exc
    except QuicktypeError as exc:
        _fail(str(exc))
        raise typer.Exit(1) from exc


def main() -> None:
    """Entry point for the ``quicktype`` console script."""
    app()


if __name__ == "__main__":
    main()
