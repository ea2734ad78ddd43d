"""
outcome.py

Tagged results for operations that can succeed, fall back, or give up.

- Ok(value):                 the operation did what was asked
- Degraded(value, reason):   a usable fallback value was produced instead
- Fatal(error):              nothing meaningful could be produced
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from labdoc.core.errors import AppError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_degraded(self) -> bool:
        return False


@dataclass(frozen=True)
class Degraded(Generic[T]):
    value: T
    reason: str

    @property
    def is_degraded(self) -> bool:
        return True


@dataclass(frozen=True)
class Fatal:
    error: AppError

    @property
    def is_degraded(self) -> bool:
        return False


Outcome = Union[Ok[T], Degraded[T], Fatal]
