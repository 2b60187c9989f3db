"""Aggregation pipeline: from options to samples to rendered output."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Literal

import httpx
import ujson as json
from rich.console import Console

from .assembler import JsonValue, assemble_json
from .engine import RenderEngine
from .errors import GrammarError, UnsupportedInvocationError
from .mapping import map_object_values
from .options import QuicktypeOptions, infer_top_level, resolve_options, validate_options
from .render import render_and_output, unwrap
from .sources import make_client, parse_sources, stdin_chunks

console = Console(stderr=True)

Mode = Literal["grammar", "stdin", "single"]
NamedGroupRequest = dict[str, list[str]]
Aggregate = dict[str, list[JsonValue]]


def _log(options: QuicktypeOptions, message: str) -> None:
    if options.verbose:
        console.print(message, highlight=False)


def invocation_mode(options: QuicktypeOptions) -> Mode:
    """Decide where samples come from; a grammar file wins over positional sources."""
    if options.urls_from is not None:
        return "grammar"
    if not options.src:
        return "stdin"
    if len(options.src) == 1:
        return "single"
    raise UnsupportedInvocationError(
        f"Expected at most one source, got {len(options.src)}; use --urls-from to group several."
    )


def load_grammar(path: Path) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise GrammarError(f"Error: cannot read grammar {path}: {exc.strerror or exc}") from exc
    except ValueError as exc:
        raise GrammarError(f"Error: grammar {path} is not valid JSON: {exc}") from exc


def expand_grammar(path: Path, engine: RenderEngine) -> NamedGroupRequest:
    """Ask the engine to turn a URL grammar into named groups of URLs."""
    outcome = engine.urls_from_json_grammar(load_grammar(path))
    groups = unwrap(outcome, GrammarError, prefix="Error: ")
    return {str(name): list(urls) for name, urls in groups.items()}


def build_request(options: QuicktypeOptions, engine: RenderEngine) -> NamedGroupRequest | None:
    """Named group request for this run, or None when reading standard input."""
    if options.urls_from is not None:
        request = expand_grammar(options.urls_from, engine)
        _log(options, f"Expanded grammar into {len(request)} group(s)")
        return request
    if invocation_mode(options) == "stdin":
        return None
    top_level = options.top_level or infer_top_level(options.out, options.src)
    return {top_level: list(options.src)}


async def gather_aggregate(
    options: QuicktypeOptions,
    engine: RenderEngine,
    client: httpx.AsyncClient | None = None,
) -> Aggregate:
    """Resolve every source, one at a time, into the name -> samples aggregate."""
    request = build_request(options, engine)
    if request is None:
        top_level = options.top_level or infer_top_level(options.out, options.src)
        _log(options, "Reading JSON from standard input")
        return {top_level: [await assemble_json(stdin_chunks())]}

    owns_client = client is None
    http = client or make_client()
    try:
        return await map_object_values(
            request,
            lambda sources: parse_sources(
                sources, http, log=lambda source: _log(options, f"Resolving {source}")
            ),
        )
    finally:
        if owns_client:
            await http.aclose()


def run(
    options: QuicktypeOptions,
    engine: RenderEngine,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Validate, aggregate and render one invocation; returns the generated text."""
    options = resolve_options(options)
    renderer = validate_options(options, engine)
    invocation_mode(options)

    async def _gather() -> Aggregate:
        async with make_client(transport) as client:
            return await gather_aggregate(options, engine, client=client)

    aggregate = asyncio.run(_gather())
    text = render_and_output(aggregate, engine, renderer, options.src_lang, options.out)
    if options.out is not None:
        _log(options, f"Wrote {options.out}")
    return text
