"""Tagged outcome values used instead of exceptions for expected conditions.

A step either produces ``Success(value)`` or ``Failure(reason)``.  The
combinators in this module never raise on a ``Failure``; they pass it along
untouched so that a pipeline built from them stops at the first failure
without any later step running.

Quick usage::

    from create_project.result import Success, chain_async

    result = await chain_async(Success(changeset), write_package_json)
    if not result.is_success:
        print(result.reason)
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


# ---------------------------------------------------------------------------
# Failure reasons
# ---------------------------------------------------------------------------


class FailureReason(str, Enum):
    """Expected outcomes of a scaffolding run, other than success."""

    NOT_DIRECTORY = "not-directory"
    NOT_EMPTY = "not-empty"
    GIT_INIT_FAILED = "git-init-failed"
    INSTALL_FAILED = "install-failed"
    FIX_FAILED = "fix-failed"

    @property
    def is_external_command(self) -> bool:
        """True for reasons produced by a non-zero exit of an external command."""
        return self in _EXTERNAL_COMMAND_REASONS


_EXTERNAL_COMMAND_REASONS = frozenset(
    {
        FailureReason.GIT_INIT_FAILED,
        FailureReason.INSTALL_FAILED,
        FailureReason.FIX_FAILED,
    }
)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Success(Generic[T]):
    """A successful outcome carrying a value."""

    value: T

    @property
    def is_success(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure(Generic[E]):
    """A failed outcome carrying an enumerated reason."""

    reason: E

    @property
    def is_success(self) -> bool:
        return False

    def unwrap(self):
        raise ValueError(f"Called unwrap() on a failure: {self.reason}")


Result = Union[Success[T], Failure[E]]


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------


def map_result(result: Result, f: Callable[[T], U]) -> Result:
    """Apply *f* to the value of a success; pass a failure through unchanged."""
    if isinstance(result, Success):
        return Success(f(result.value))
    return result


async def chain_async(
    result: Result, f: Callable[[T], Awaitable[Result]]
) -> Result:
    """Await ``f(value)`` on success; return a failure without calling *f*."""
    if isinstance(result, Success):
        return await f(result.value)
    return result


def all_results(results: Iterable[Result]) -> Result:
    """Combine already-resolved results.

    Returns ``Success([values...])`` when every element succeeded, otherwise
    the first failure in iteration order.
    """
    values = []
    for result in results:
        if isinstance(result, Failure):
            return result
        values.append(result.value)
    return Success(values)


async def all_async_results(awaitables: Iterable[Awaitable[Result]]) -> Result:
    """Await every result concurrently, then combine them with :func:`all_results`.

    All awaitables run to completion even when an early one fails.  If any of
    them raises, the first exception in order is re-raised once every other
    awaitable has finished.
    """
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return all_results(results)
