"""Contract with the external rendering engine, plus an engine registry.

The engine performs type inference and code generation; this package only
gathers samples for it. Engines shipped as separate distributions register
themselves under the ``quicktype_cli.engines`` entry-point group, and tests
or embedding applications can call :func:`register_engine` directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib.metadata import entry_points
from typing import Any, Generic, Protocol, TypeVar, Union

from pydantic import BaseModel, Field

from .errors import ConfigurationError

ENTRY_POINT_GROUP = "quicktype_cli.engines"

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    message: str


Outcome = Union[Ok[T], Err]


class Renderer(BaseModel):
    """One target language advertised by an engine."""

    name: str
    extension: str
    ace_mode: str | None = None

    def matches(self, selector: str) -> bool:
        return selector in (self.extension, self.ace_mode, self.name)


class RenderRequest(BaseModel):
    """Samples grouped by top-level name, with the renderer to apply."""

    input: dict[str, list[Any]] = Field(default_factory=dict)
    renderer: Renderer


class RenderEngine(Protocol):
    """What the CLI needs from a rendering engine."""

    renderers: list[Renderer]

    def render_from_json_array_map(self, request: RenderRequest) -> Outcome[str]:
        ...

    def render_from_json_schema_array_map(self, request: RenderRequest) -> Outcome[str]:
        ...

    def urls_from_json_grammar(self, grammar: Any) -> Outcome[dict[str, list[str]]]:
        ...


def find_renderer(engine: RenderEngine, selector: str) -> Renderer | None:
    """Return the renderer whose extension, ace mode or name equals ``selector``."""
    return next((r for r in engine.renderers if r.matches(selector)), None)


_REGISTRY: dict[str, RenderEngine] = {}
_discovered = False


def _discover() -> None:
    global _discovered
    if _discovered:
        return
    _discovered = True
    for ep in entry_points(group=ENTRY_POINT_GROUP):
        if ep.name in _REGISTRY:
            continue
        loaded = ep.load()
        _REGISTRY[ep.name] = loaded() if isinstance(loaded, type) else loaded


def register_engine(name: str, engine: RenderEngine) -> None:
    """Register a rendering engine under ``name``."""
    _REGISTRY[name] = engine


def unregister_engine(name: str) -> None:
    _REGISTRY.pop(name, None)


def get_engine(name: str) -> RenderEngine | None:
    """Return the engine registered as ``name``, if any."""
    _discover()
    return _REGISTRY.get(name)


def list_engines() -> list[str]:
    """Return the names of all known engines."""
    _discover()
    return sorted(_REGISTRY)


def resolve_engine(name: str | None = None) -> RenderEngine:
    """Pick the engine for this run.

    An explicit name must be registered. Without one, the single installed
    engine is used.
    """
    if name is not None:
        engine = get_engine(name)
        if engine is None:
            raise ConfigurationError(f"Rendering engine '{name}' is not installed.")
        return engine
    names = list_engines()
    if not names:
        raise ConfigurationError("No rendering engine is installed.")
    if len(names) > 1:
        raise ConfigurationError(
            f"Several rendering engines are installed ({', '.join(names)}); pick one with --engine."
        )
    return _REGISTRY[names[0]]
