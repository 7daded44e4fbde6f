from __future__ import annotations

import contextlib
import datetime as dt
import os
import time
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from timeshift.clock import ManualClock
from timeshift.logger import StructuredLogger, merge_fields
from timeshift.util import from_epoch_millis, to_epoch_millis, to_millis
from timeshift.virtual_clock import TimeValue, VirtualClock


@dataclass(slots=True)
class FakeTimeSource:
    """Hand-driven wall and monotonic readings for ``VirtualClock``.

    ``advance`` moves both readings as real time passing would.
    ``adjust_wall`` moves only the wall reading, like an NTP step.
    """

    wall_ns: int
    monotonic_ns: int

    def __init__(self, *, wall_ms: int = 0, monotonic_ns: int = 0) -> None:
        self.wall_ns = int(wall_ms) * 1_000_000
        self.monotonic_ns = int(monotonic_ns)

    def wall(self) -> int:
        return self.wall_ns

    def monotonic(self) -> int:
        return self.monotonic_ns

    def local_now(self) -> dt.datetime:
        return from_epoch_millis(self.wall_ns // 1_000_000)

    def advance(self, delta: int | dt.timedelta) -> None:
        delta_ns = to_millis(delta) * 1_000_000
        self.wall_ns += delta_ns
        self.monotonic_ns += delta_ns

    def adjust_wall(self, delta: int | dt.timedelta) -> None:
        self.wall_ns += to_millis(delta) * 1_000_000


@dataclass(slots=True)
class LogEntry:
    level: str
    message: str
    fields: dict[str, Any]


class RecordingLogger:
    def __init__(self, fields: dict[str, Any] | None = None, entries: list[LogEntry] | None = None) -> None:
        self.fields: dict[str, Any] = dict(fields or {})
        self.entries: list[LogEntry] = entries if entries is not None else []

    def debug(self, message: str, *fields: dict[str, Any]) -> None:
        self._record("debug", message, fields)

    def info(self, message: str, *fields: dict[str, Any]) -> None:
        self._record("info", message, fields)

    def warn(self, message: str, *fields: dict[str, Any]) -> None:
        self._record("warn", message, fields)

    def error(self, message: str, *fields: dict[str, Any]) -> None:
        self._record("error", message, fields)

    def with_field(self, key: str, value: Any) -> StructuredLogger:
        return RecordingLogger({**self.fields, str(key): value}, self.entries)

    def with_fields(self, fields: dict[str, Any]) -> StructuredLogger:
        return RecordingLogger({**self.fields, **dict(fields or {})}, self.entries)

    def flush(self) -> None:
        return None

    def is_healthy(self) -> bool:
        return True

    def levels(self) -> list[str]:
        return [e.level for e in self.entries]

    def messages(self, level: str | None = None) -> list[str]:
        return [e.message for e in self.entries if level is None or e.level == level]

    def clear(self) -> None:
        self.entries.clear()

    def _record(self, level: str, message: str, fields: tuple[dict[str, Any], ...]) -> None:
        self.entries.append(LogEntry(level=level, message=str(message), fields=merge_fields(self.fields, *fields)))


@dataclass(slots=True)
class TestEnv:
    source: FakeTimeSource
    logger: RecordingLogger

    def __init__(self, *, now: dt.datetime | int | None = None) -> None:
        if now is None:
            wall_ms = 0
        elif isinstance(now, dt.datetime):
            wall_ms = to_epoch_millis(now)
        else:
            wall_ms = int(now)
        self.source = FakeTimeSource(wall_ms=wall_ms)
        self.logger = RecordingLogger()

    def virtual_clock(self, initial: TimeValue | None = None, *, logger: StructuredLogger | None = None) -> VirtualClock:
        return VirtualClock(
            initial,
            monotonic_ns=self.source.monotonic,
            wall_ns=self.source.wall,
            local_now=self.source.local_now,
            logger=logger or self.logger,
        )

    def manual_clock(self) -> ManualClock:
        return ManualClock(self.source.wall_ns // 1_000_000)

    def advance(self, delta: int | dt.timedelta) -> None:
        self.source.advance(delta)


def create_test_env(*, now: dt.datetime | int | None = None) -> TestEnv:
    return TestEnv(now=now)


@contextlib.contextmanager
def host_time_zone(tz: str) -> Iterator[None]:
    """Run the block with the process time zone set to a POSIX ``TZ`` value.

    Needs ``time.tzset``, which is missing on Windows.
    """
    previous = os.environ.get("TZ")
    os.environ["TZ"] = str(tz)
    time.tzset()
    try:
        yield
    finally:
        if previous is None:
            os.environ.pop("TZ", None)
        else:
            os.environ["TZ"] = previous
        time.tzset()
