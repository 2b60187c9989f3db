"""Incremental JSON assembly from a chunked byte stream.

The raw text is never held in memory as a whole. Chunks are pushed into the
``ijson`` event parser as they arrive and the resulting structural events are
folded into a single value by :class:`JsonAssembler`, whose working stack only
grows with the nesting depth of the document.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from typing import Any

import ijson

from .errors import JsonDecodeError

JsonValue = Any

_SCALAR_EVENTS = frozenset({"null", "boolean", "integer", "double", "number", "string"})


class JsonAssembler:
    """Builds one JSON value out of ``ijson.basic_parse`` events."""

    def __init__(self) -> None:
        # Each frame holds the enclosing container and the key pending in it.
        self._stack: list[tuple[Any, str | None]] = []
        self._key: str | None = None
        self.current: JsonValue = None
        self.done = False

    @property
    def depth(self) -> int:
        return len(self._stack)

    def feed(self, event: str, value: Any = None) -> None:
        """Apply a single parser event."""
        if self.done:
            raise JsonDecodeError(f"Unexpected '{event}' after the end of the JSON value")
        if event == "start_map":
            self._open({})
        elif event == "start_array":
            self._open([])
        elif event in ("end_map", "end_array"):
            self._close()
        elif event == "map_key":
            self._key = value
        elif event in _SCALAR_EVENTS:
            self._save(value)
        else:
            raise JsonDecodeError(f"Unknown JSON event '{event}'")

    def consume(self, events: Iterable[tuple[str, Any]]) -> None:
        for event, value in events:
            self.feed(event, value)

    def _open(self, container: dict[str, Any] | list[Any]) -> None:
        self._stack.append((self.current, self._key))
        self.current = container
        self._key = None

    def _close(self) -> None:
        if not self._stack:
            raise JsonDecodeError("Unbalanced container end")
        value = self.current
        self.current, self._key = self._stack.pop()
        self._save(value)

    def _save(self, value: JsonValue) -> None:
        if not self._stack:
            self.current = value
            self.done = True
        elif isinstance(self.current, list):
            self.current.append(value)
        else:
            if self._key is None:
                raise JsonDecodeError("Object member without a key")
            self.current[self._key] = value
            self._key = None


async def assemble_json(chunks: AsyncIterator[bytes]) -> JsonValue:
    """Parse exactly one JSON value out of an async stream of UTF-8 chunks."""
    assembler = JsonAssembler()
    events = ijson.sendable_list()
    parser = ijson.basic_parse_coro(events, use_float=True)
    try:
        async for chunk in chunks:
            if not chunk:
                continue
            parser.send(chunk)
            assembler.consume(events)
            del events[:]
        parser.close()
        assembler.consume(events)
    except (ijson.JSONError, UnicodeDecodeError) as exc:
        raise JsonDecodeError(f"Invalid JSON: {exc}") from exc
    if not assembler.done:
        raise JsonDecodeError("Invalid JSON: unexpected end of input")
    return assembler.current
