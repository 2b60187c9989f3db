from __future__ import annotations

from typing import Any

import pytest
import ujson as json

from quicktype_cli import engine as engine_mod
from quicktype_cli.engine import Err, Ok, Renderer, RenderRequest


class FakeEngine:
    """Stands in for the rendering engine; records every render request."""

    def __init__(self) -> None:
        self.renderers = [
            Renderer(name="Go", extension="go", ace_mode="golang"),
            Renderer(name="C#", extension="cs", ace_mode="csharp"),
            Renderer(name="TypeScript", extension="ts", ace_mode="typescript"),
            Renderer(name="JSON Schema", extension="schema", ace_mode="json"),
        ]
        self.requests: list[tuple[str, RenderRequest]] = []
        self.error: str | None = None
        self.grammar_outcome: Any = Ok({})
        self.grammars: list[Any] = []

    def _render(self, pipeline: str, request: RenderRequest):
        self.requests.append((pipeline, request))
        if self.error is not None:
            return Err(self.error)
        payload = {"renderer": request.renderer.name, "input": request.input}
        return Ok(f"// {pipeline}\n{json.dumps(payload, sort_keys=True)}\n")

    def render_from_json_array_map(self, request: RenderRequest):
        return self._render("json", request)

    def render_from_json_schema_array_map(self, request: RenderRequest):
        return self._render("schema", request)

    def urls_from_json_grammar(self, grammar: Any):
        self.grammars.append(grammar)
        return self.grammar_outcome


def rendered_payload(text: str) -> dict[str, Any]:
    return json.loads(text.split("\n", 1)[1])


@pytest.fixture()
def fake_engine(monkeypatch: pytest.MonkeyPatch) -> FakeEngine:
    monkeypatch.setattr(engine_mod, "_REGISTRY", {})
    monkeypatch.setattr(engine_mod, "_discovered", True)
    monkeypatch.delenv("QUICKTYPE_ENGINE", raising=False)
    fake = FakeEngine()
    engine_mod.register_engine("fake", fake)
    return fake
