"""Unit-of-work helpers shared by the lifecycle services.

Work functions call expect() on each store result; the first Err aborts
the block, the store's atomic() rolls back, and run_in_unit() hands the
error value back as Err.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Any

from tradebook.core.result import Err, Ok


class Abort(Exception):
    """Carries an error value out of an atomic() block."""

    def __init__(self, error: Any) -> None:
        super().__init__(error.message)
        self.error = error


def expect[T](result: Ok[T] | Err[Any]) -> T:
    """Unwrap Ok, or abort the enclosing unit with the Err's error."""
    if isinstance(result, Err):
        raise Abort(result.error)
    return result.value


def run_in_unit[T](
    atomic: Callable[[], AbstractContextManager[None]], work: Callable[[], T],
) -> Ok[T] | Err[Any]:
    try:
        with atomic():
            return Ok(work())
    except Abort as abort:
        return Err(abort.error)
