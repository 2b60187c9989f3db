"""Expand a URL grammar into the named groups a `--urls-from` run would fetch.

Usage:
  python scripts/expand_grammar.py grammar.json --out groups.json
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import ujson as json

from quicktype_cli.engine import resolve_engine
from quicktype_cli.errors import QuicktypeError
from quicktype_cli.orchestrator import expand_grammar

app = typer.Typer(help="Print the name -> URLs mapping produced by a URL grammar.")


@app.command()
def main(
    grammar: Path = typer.Argument(..., exists=True, readable=True, help="Grammar file (JSON)."),
    out: Optional[Path] = typer.Option(None, help="Write the mapping here instead of stdout."),
    engine: Optional[str] = typer.Option(None, envvar="QUICKTYPE_ENGINE", help="Engine name."),
    pretty: bool = typer.Option(True, help="Write pretty-printed JSON."),
) -> None:
    try:
        groups = expand_grammar(grammar, resolve_engine(engine))
    except QuicktypeError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc
    text = json.dumps(groups, indent=2 if pretty else 0)
    if out is None:
        typer.echo(text)
        return
    out.write_text(text)
    typer.echo(f"Wrote {sum(len(urls) for urls in groups.values())} URL(s) to {out}")


if __name__ == "__main__":
    app()
