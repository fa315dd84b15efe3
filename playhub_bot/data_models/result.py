"""
Explicit success/failure results for operations that report errors as values.

Leaderboard and search operations never raise for expected failures
(validation, unknown location, no events, upstream errors); they return a
``Failure`` carrying a user-facing message instead. Check ``result.ok``.
"""

from dataclasses import dataclass, field
from typing import Generic, TypeVar, Union

T = TypeVar('T')


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Failure:
    error: str
    ok: bool = field(default=False, init=False)


Result = Union[Success[T], Failure]
