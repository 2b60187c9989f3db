"""Turn source identifiers into byte streams and parsed JSON samples."""

from __future__ import annotations

import asyncio
import os
import sys
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import IO, Any

import httpx

from .assembler import JsonValue, assemble_json
from .errors import SourceResolutionError
from .mapping import map_sequential

CHUNK_SIZE = 64 * 1024
STDIN_NAME = "<stdin>"


def is_local(source: str) -> bool:
    """Return True when ``source`` names an existing filesystem entry."""
    return os.path.exists(source)


def make_client(transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """HTTP client shared by all network sources of one run.

    No timeout is applied; a hung server stalls the run.
    """
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(None),
        transport=transport,
    )


async def _file_chunks(handle: IO[Any]) -> AsyncIterator[bytes]:
    while True:
        chunk = await asyncio.to_thread(handle.read, CHUNK_SIZE)
        if not chunk:
            return
        yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk


async def stdin_chunks() -> AsyncIterator[bytes]:
    """Chunk stream over standard input."""
    try:
        async for chunk in _file_chunks(getattr(sys.stdin, "buffer", sys.stdin)):
            yield chunk
    except OSError as exc:
        raise SourceResolutionError(STDIN_NAME, exc.strerror or str(exc)) from exc


def _is_http_url(source: str) -> bool:
    try:
        return httpx.URL(source).scheme in ("http", "https")
    except httpx.InvalidURL:
        return False


@asynccontextmanager
async def open_source(source: str, client: httpx.AsyncClient) -> AsyncIterator[AsyncIterator[bytes]]:
    """Yield the byte stream behind ``source``, a local path or a URL."""
    if is_local(source):
        try:
            with open(source, "rb") as handle:
                yield _file_chunks(handle)
        except OSError as exc:
            raise SourceResolutionError(source, exc.strerror or str(exc)) from exc
        return

    if not _is_http_url(source):
        raise SourceResolutionError(source, "no such file, and not an http(s) URL")
    try:
        async with client.stream("GET", source) as response:
            if not response.is_success:
                raise SourceResolutionError(
                    source, f"HTTP {response.status_code} {response.reason_phrase}".rstrip()
                )
            yield response.aiter_bytes()
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise SourceResolutionError(source, str(exc) or type(exc).__name__) from exc


async def parse_source(source: str, client: httpx.AsyncClient) -> JsonValue:
    """Resolve, stream and assemble one source."""
    async with open_source(source, client) as chunks:
        return await assemble_json(chunks)


async def parse_sources(
    sources: list[str],
    client: httpx.AsyncClient,
    log: Callable[[str], None] | None = None,
) -> list[JsonValue]:
    """Parse a group of sources one at a time, keeping their order."""

    async def _parse(source: str) -> JsonValue:
        if log is not None:
            log(source)
        return await parse_source(source, client)

    return await map_sequential(sources, _parse)
