"""Ordered "attempt list, first success wins" combinator."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def first_success(
    candidates: Iterable[T],
    attempt: Callable[[T], Awaitable[R | None]],
) -> tuple[T, R] | None:
    """Try *candidates* in order; return the first ``(candidate, result)``
    whose attempt produced a non-None result, or None if all failed.

    Attempts run sequentially and later candidates are never started
    once one succeeds.
    """
    for candidate in candidates:
        result = await attempt(candidate)
        if result is not None:
            return candidate, result
    return None
