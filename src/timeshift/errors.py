from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class TimeShiftError(Exception):
    code: str
    message: str
    details: dict[str, Any] | None = None
    cause: Exception | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def with_details(self, details: dict[str, Any]) -> TimeShiftError:
        self.details = details
        return self

    def with_cause(self, cause: Exception) -> TimeShiftError:
        self.cause = cause
        self.__cause__ = cause
        return self


@dataclass(slots=True)
class TimeParseError(TimeShiftError):
    pass


def parse_error(value: Any, message: str) -> TimeParseError:
    return TimeParseError(
        code="timeshift.parse_failed",
        message=str(message),
        details={"value": "" if value is None else str(value)},
    )
