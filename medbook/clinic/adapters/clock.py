import datetime as dt

from medbook.clinic.adapters.datetime_helpers import resolve_timezone


class SystemClock:
    """Reads the wall clock in the clinic's timezone."""

    def __init__(self, timezone: str = "America/New_York") -> None:
        self._tz = resolve_timezone(timezone)

    def now(self) -> dt.datetime:
        return dt.datetime.now(self._tz)

    def today(self) -> dt.date:
        return self.now().date()


class FixedClock:
    """Clock pinned to a given instant. Move it with ``advance``.

    Naive instants are treated as UTC.
    """

    def __init__(self, instant: dt.datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=dt.timezone.utc)
        self._instant = instant

    @classmethod
    def on(cls, date: dt.date, time: dt.time = dt.time(8, 0)) -> "FixedClock":
        return cls(dt.datetime.combine(date, time, tzinfo=dt.timezone.utc))

    def now(self) -> dt.datetime:
        return self._instant

    def today(self) -> dt.date:
        return self._instant.date()

    def advance(self, delta: dt.timedelta) -> None:
        self._instant += delta
