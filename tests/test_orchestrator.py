import asyncio
import io
import sys
from pathlib import Path

import httpx
import pytest
import ujson as json

from quicktype_cli.engine import Err, Ok
from quicktype_cli.errors import (
    ConfigurationError,
    GrammarError,
    JsonDecodeError,
    SourceResolutionError,
    UnsupportedInvocationError,
)
from quicktype_cli.options import QuicktypeOptions
from quicktype_cli.orchestrator import (
    build_request,
    expand_grammar,
    gather_aggregate,
    invocation_mode,
    run,
)
from quicktype_cli.sources import make_client

from .conftest import rendered_payload


def _gather(options, engine, handler=lambda request: httpx.Response(404)):
    async def _main():
        async with make_client(httpx.MockTransport(handler)) as client:
            return await gather_aggregate(options, engine, client=client)

    return asyncio.run(_main())


def test_invocation_modes() -> None:
    assert invocation_mode(QuicktypeOptions()) == "stdin"
    assert invocation_mode(QuicktypeOptions(src=["a.json"])) == "single"
    assert invocation_mode(QuicktypeOptions(src=["a", "b"], urls_from=Path("g.json"))) == "grammar"
    with pytest.raises(UnsupportedInvocationError):
        invocation_mode(QuicktypeOptions(src=["a.json", "b.json"]))


def test_single_local_file_aggregate(fake_engine, tmp_path: Path) -> None:
    path = tmp_path / "people.json"
    path.write_text('[{"a":1},{"a":2}]')
    aggregate = _gather(QuicktypeOptions(src=[str(path)]), fake_engine)
    assert aggregate == {"people": [[{"a": 1}, {"a": 2}]]}


def test_stdin_is_one_anonymous_source(fake_engine, monkeypatch: pytest.MonkeyPatch) -> None:
    stdin = io.TextIOWrapper(io.BytesIO(b'{"k": [true, null]}'), encoding="utf-8")
    monkeypatch.setattr(sys, "stdin", stdin)
    aggregate = _gather(QuicktypeOptions(top_level="Root"), fake_engine)
    assert aggregate == {"Root": [{"k": [True, None]}]}


def test_grammar_groups_keep_order_and_names(fake_engine, tmp_path: Path) -> None:
    grammar = tmp_path / "grammar.json"
    grammar.write_text(json.dumps({"origin": "#name#"}))
    fake_engine.grammar_outcome = Ok(
        {
            "Block": [f"https://api.test/block/{i}" for i in range(4)],
            "Ticker": ["https://api.test/ticker"],
        }
    )

    async def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith("/block/"):
            index = int(path.rsplit("/", 1)[1])
            await asyncio.sleep((4 - index) / 400)
            return httpx.Response(200, json={"height": index})
        return httpx.Response(200, json={"USD": 1.5})

    aggregate = _gather(QuicktypeOptions(urls_from=grammar), fake_engine, handler)
    assert list(aggregate) == ["Block", "Ticker"]
    assert aggregate["Block"] == [{"height": i} for i in range(4)]
    assert aggregate["Ticker"] == [{"USD": 1.5}]
    assert fake_engine.grammars == [{"origin": "#name#"}]


def test_grammar_error_is_reported_with_prefix(fake_engine, tmp_path: Path) -> None:
    grammar = tmp_path / "grammar.json"
    grammar.write_text("{}")
    fake_engine.grammar_outcome = Err("no origin rule")
    with pytest.raises(GrammarError, match="^Error: no origin rule$"):
        expand_grammar(grammar, fake_engine)


def test_grammar_file_must_be_json(fake_engine, tmp_path: Path) -> None:
    grammar = tmp_path / "grammar.json"
    grammar.write_text("{not json")
    with pytest.raises(GrammarError):
        build_request(QuicktypeOptions(urls_from=grammar), fake_engine)


def test_decode_error_aborts_whole_aggregate(fake_engine, tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text('{"a": [1, 2')
    with pytest.raises(JsonDecodeError):
        _gather(QuicktypeOptions(src=[str(path)]), fake_engine)


def test_run_writes_rendered_output(fake_engine, tmp_path: Path) -> None:
    path = tmp_path / "user.json"
    path.write_text('{"id": 7}')
    out = tmp_path / "User.ts"
    text = run(QuicktypeOptions(src=[str(path)], out=out), fake_engine)
    assert out.read_text() == text
    assert rendered_payload(text) == {"renderer": "TypeScript", "input": {"User": [{"id": 7}]}}


def test_run_rejects_unknown_language_before_any_io(fake_engine) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no source may be resolved")

    options = QuicktypeOptions(src=["https://api.test/x"], lang="cobol")
    with pytest.raises(ConfigurationError, match="not yet supported"):
        run(options, fake_engine, transport=httpx.MockTransport(handler))
    assert fake_engine.requests == []


def test_run_network_failure_is_fatal(fake_engine, tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    out = tmp_path / "X.go"
    with pytest.raises(SourceResolutionError):
        run(
            QuicktypeOptions(src=["https://api.test/x"], out=out),
            fake_engine,
            transport=httpx.MockTransport(handler),
        )
    assert not out.exists()
    assert fake_engine.requests == []


def test_stdin_read_failure_is_a_resolution_error(fake_engine, monkeypatch: pytest.MonkeyPatch):
    class BrokenStdin:
        def read(self, size: int = -1) -> bytes:
            raise OSError(5, "Input/output error")

    monkeypatch.setattr(sys, "stdin", BrokenStdin())
    with pytest.raises(SourceResolutionError, match="<stdin>: Input/output error"):
        _gather(QuicktypeOptions(top_level="Root"), fake_engine)
