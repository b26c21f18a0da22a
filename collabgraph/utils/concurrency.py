"""Bounded-concurrency helpers for fan-out stages.

``throttled_gather`` is a drop-in replacement for ``asyncio.gather`` that
wraps each awaitable in a semaphore acquire/release.  The enrichment stage
creates one semaphore per synthesis run and hands it in here, so two
concurrent runs never share (or starve) each other's ceiling.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

_T = TypeVar("_T")

_DEFAULT_LIMIT = 5


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore | None = None,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently with semaphore throttling.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    semaphore:
        Semaphore for concurrency control.  When omitted a fresh semaphore
        with a limit of 5 is created for this call only.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input coroutines.
    """
    if semaphore is None:
        semaphore = asyncio.Semaphore(_DEFAULT_LIMIT)

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    tasks = [_wrapped(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)
