"""Hand the aggregate to the rendering engine and write what comes back."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .engine import Err, Ok, Outcome, RenderEngine, Renderer, RenderRequest
from .errors import ConfigurationError, RenderError

Pipeline = Callable[[RenderRequest], Outcome[str]]


def select_pipeline(engine: RenderEngine, src_lang: str) -> Pipeline:
    """Engine entry point for the given source language."""
    pipelines: dict[str, Pipeline] = {
        "json": engine.render_from_json_array_map,
        "schema": engine.render_from_json_schema_array_map,
    }
    pipeline = pipelines.get(src_lang)
    if pipeline is None:
        raise ConfigurationError(f"Input language '{src_lang}' is not supported.")
    return pipeline


def unwrap(
    outcome: Outcome[Any], error: type[Exception] = RenderError, prefix: str = ""
) -> Any:
    """Return the payload of ``Ok`` or raise ``error`` with the ``Err`` message."""
    if isinstance(outcome, Err):
        raise error(f"{prefix}{outcome.message}")
    if isinstance(outcome, Ok):
        return outcome.value
    raise TypeError(f"Expected an Ok or Err outcome, got {type(outcome).__name__}")


def render(
    aggregate: dict[str, list[Any]],
    engine: RenderEngine,
    renderer: Renderer,
    src_lang: str = "json",
) -> str:
    """Run the engine and return the generated source text."""
    pipeline = select_pipeline(engine, src_lang)
    return unwrap(pipeline(RenderRequest(input=aggregate, renderer=renderer)))


def write_output(text: str, out: Path | None) -> None:
    if out is None:
        sys.stdout.write(text)
        sys.stdout.flush()
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text)


def render_and_output(
    aggregate: dict[str, list[Any]],
    engine: RenderEngine,
    renderer: Renderer,
    src_lang: str = "json",
    out: Path | None = None,
) -> str:
    """Render and write to ``out`` or standard output; nothing is written on error."""
    text = render(aggregate, engine, renderer, src_lang)
    write_output(text, out)
    return text
