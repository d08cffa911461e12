"""
Tagged Execution Results
========================
Explicit success/failure variants returned across component seams.

Callers branch on type instead of inspecting response blobs:

    result = await oracle.fetch_quotes(mints)
    if isinstance(result, Err):
        handle(result.error)
    else:
        quotes = result.value
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from spreadarb.shared.execution.errors import ArbitrageError


T = TypeVar("T")
E = TypeVar("E", bound=ArbitrageError)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful decode carrying the typed value."""

    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failure carrying the error (and therefore its ErrorCode)."""

    error: E


Result = Union[Ok[T], Err[E]]
