"""Ordered, one-at-a-time async mapping helpers.

Every source in a run goes through :func:`map_sequential`, so at most one file
or HTTP connection is open at any time and results come back in input order
without any merge step.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import TypeVar

K = TypeVar("K")
T = TypeVar("T")
U = TypeVar("U")


async def map_sequential(items: Iterable[T], transform: Callable[[T], Awaitable[U]]) -> list[U]:
    """Apply ``transform`` to each item in order, awaiting each before the next.

    Errors raised by ``transform`` propagate unchanged and stop the map.
    """
    results: list[U] = []
    for item in items:
        results.append(await transform(item))
    return results


async def map_object_values(
    mapping: Mapping[K, T], transform: Callable[[T], Awaitable[U]]
) -> dict[K, U]:
    """Transform the values of ``mapping`` sequentially, keeping its keys and their order."""
    keys = list(mapping)
    values = await map_sequential(keys, lambda key: transform(mapping[key]))
    return dict(zip(keys, values))
