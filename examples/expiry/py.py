import datetime as dt
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "src"))

from timeshift import (  # noqa: E402
    Clock,
    ProfilingConfig,
    StdlibLogger,
    VirtualClock,
    profiling_middleware,
    set_logger,
    to_epoch_millis,
)

TOKEN_TTL_MS = 15 * 60 * 1000


def is_expired(issued_at_ms: int, clock: Clock) -> bool:
    return clock.now() - issued_at_ms >= TOKEN_TTL_MS


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(message)s")
    set_logger(StdlibLogger("timeshift.example"))

    clock = VirtualClock()
    issued = clock.now()
    assert not is_expired(issued, clock)

    clock.advance(dt.timedelta(minutes=16))
    assert is_expired(issued, clock)

    clock.reset()
    assert not is_expired(issued, clock)

    assert clock.set_iso("2030-01-01T00:00:00")
    assert clock.datetime().year == 2030
    assert abs(clock.now() - to_epoch_millis(dt.datetime(2030, 1, 1))) < 1000

    assert not clock.set_iso("not-a-date")
    assert clock.datetime().year == 2030

    @profiling_middleware(ProfilingConfig(slow_ms=1), name="check-expiry", clock=clock)
    def check() -> bool:
        return is_expired(issued, clock)

    assert check()

    print("examples/expiry/py.py: PASS")


if __name__ == "__main__":
    main()
