"""Typed run configuration and the rules that fill in its defaults."""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Any

import ujson as json
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .engine import RenderEngine, Renderer, find_renderer
from .errors import ConfigurationError

DEFAULT_LANG = "go"
DEFAULT_TOP_LEVEL = "TopLevel"
SOURCE_LANGUAGES = ("json", "schema")


class QuicktypeOptions(BaseModel):
    """Everything one invocation needs, built once by the CLI."""

    out: Path | None = None
    top_level: str | None = None
    lang: str | None = None
    src_lang: str = "json"
    src: list[str] = Field(default_factory=list)
    urls_from: Path | None = None
    engine: str | None = None
    verbose: bool = False

    model_config = {"extra": "forbid"}

    @field_validator("src", mode="before")
    @classmethod
    def none_means_no_sources(cls, value: Any) -> Any:
        return [] if value is None else value


def _strip_extension(name: str) -> str:
    base = posixpath.basename(name.replace("\\", "/"))
    stem, _ = posixpath.splitext(base)
    return stem


def infer_lang(out: Path | str | None) -> str:
    """Target language implied by the output file's extension."""
    if out is None:
        return DEFAULT_LANG
    extension = posixpath.splitext(str(out))[1]
    if not extension:
        raise ConfigurationError("Please specify a language (--lang) or an output file extension.")
    return extension[1:]


def infer_top_level(out: Path | str | None, src: list[str]) -> str:
    """Top-level name from the output file, else the single source, else a fallback."""
    if out is not None:
        return _strip_extension(str(out))
    if len(src) == 1:
        return _strip_extension(src[0])
    return DEFAULT_TOP_LEVEL


def resolve_options(options: QuicktypeOptions) -> QuicktypeOptions:
    """Return a copy with ``lang`` and ``top_level`` filled in."""
    return options.model_copy(
        update={
            "lang": options.lang or infer_lang(options.out),
            "top_level": options.top_level or infer_top_level(options.out, options.src),
        }
    )


def validate_options(options: QuicktypeOptions, engine: RenderEngine) -> Renderer:
    """Reject unsupported languages before any I/O; return the selected renderer."""
    if options.src_lang not in SOURCE_LANGUAGES:
        raise ConfigurationError(f"Input language '{options.src_lang}' is not supported.")
    lang = options.lang or infer_lang(options.out)
    renderer = find_renderer(engine, lang)
    if renderer is None:
        raise ConfigurationError(f"'{lang}' is not yet supported as an output language.")
    return renderer


def load_defaults(path: str | Path) -> dict[str, Any]:
    """Read option defaults from a YAML or JSON file."""
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config {path}: {exc.strerror or exc}") from exc
    try:
        if path.suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, ValueError) as exc:
        raise ConfigurationError(f"Invalid config {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid config {path}: expected a mapping of options")
    data = {str(key).replace("-", "_"): value for key, value in data.items()}
    try:
        QuicktypeOptions(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid config {path}: {exc}") from exc
    return data
