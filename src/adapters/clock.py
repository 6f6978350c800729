from datetime import UTC, datetime, timedelta


class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """Clock that returns a settable instant; advances by `step` per call when given."""

    def __init__(self, start: datetime, step_seconds: float = 0.0) -> None:
        self._now = start
        self._step = step_seconds

    def now_utc(self) -> datetime:
        current = self._now
        self._now = current + timedelta(seconds=self._step)
        return current
