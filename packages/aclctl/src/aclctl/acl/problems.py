"""Validation findings and the result type that carries them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ProblemKind(str, Enum):
    SYNTAX = "syntax"
    SEMANTIC = "semantic"
    STRUCTURAL = "structural"
    RESOLUTION = "resolution"
    CONSISTENCY = "consistency"
    RECORD = "record"
    FETCH = "fetch"


@dataclass(frozen=True)
class Problem:
    kind: ProblemKind
    message: str
    source: str = ""
    subject: str = ""

    def __str__(self) -> str:
        return f"{self.source}: {self.message}" if self.source else self.message

    def as_row(self) -> dict[str, str]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "source": self.source,
            "subject": self.subject,
        }


@dataclass(frozen=True)
class Parsed(Generic[T]):
    value: T
    problems: tuple[Problem, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.problems

