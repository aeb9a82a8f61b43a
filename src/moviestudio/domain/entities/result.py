"""Tagged results returned across the repository boundary."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class FailureKind(str, Enum):
    NETWORK = "network"  # any remote call / decoding failure
    NOT_FOUND = "not_found"  # detail fetch for an unknown movie id


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    reason: str
    kind: FailureKind = FailureKind.NETWORK


Result = Union[Success[T], Failure]
