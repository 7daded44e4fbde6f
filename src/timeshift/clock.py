from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int: ...


@dataclass(slots=True)
class RealClock:
    def now(self) -> int:
        return time.time_ns() // 1_000_000


@dataclass(slots=True)
class ManualClock:
    _now: int

    def __init__(self, now: int = 0) -> None:
        self._now = int(now)

    def now(self) -> int:
        return self._now

    def set(self, now: int) -> None:
        self._now = int(now)

    def advance(self, delta_ms: int) -> int:
        self._now = self._now + int(delta_ms)
        return self._now
