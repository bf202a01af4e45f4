from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone

from ..core.constants import DEFAULT_ORG_UTC_OFFSET_HOURS


@dataclass(frozen=True)
class OrgClock:
    """Organization time zone: a fixed UTC offset used for day boundaries and display.

    Instants are always timezone-aware. Naive datetimes handed to `normalize`
    are taken as UTC, which is how the database stores them.
    """

    utc_offset_hours: float = DEFAULT_ORG_UTC_OFFSET_HOURS
    tz: timezone = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tz", timezone(timedelta(hours=self.utc_offset_hours)))

    def now(self) -> datetime:
        """Current instant (UTC).

        Note: Wrapped so tests can patch/mock easier.
        """
        return datetime.now(timezone.utc)

    def normalize(self, instant: datetime) -> datetime:
        if instant.tzinfo is None:
            return instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(timezone.utc)

    def to_local(self, instant: datetime) -> datetime:
        return self.normalize(instant).astimezone(self.tz)

    def local_date(self, instant: datetime) -> date:
        return self.to_local(instant).date()

    def at_local_time(self, day: date, at: time) -> datetime:
        """UTC instant of the given organization-local wall clock time."""
        local = datetime.combine(day, at.replace(tzinfo=None), tzinfo=self.tz)
        return local.astimezone(timezone.utc)

    def day_bounds(self, start: date, end: date) -> tuple[datetime, datetime]:
        """Inclusive UTC bounds covering whole organization-local days."""
        return (
            self.at_local_time(start, time.min),
            self.at_local_time(end, time.max),
        )

    def format_local(self, instant: datetime, fmt: str = "%Y-%m-%d %H:%M") -> str:
        return self.to_local(instant).strftime(fmt)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_clock_time(value: str) -> time:
    """Parse HH:MM or HH:MM:SS into a time (used for settings)."""
    fmt = "%H:%M:%S" if value.count(":") == 2 else "%H:%M"
    return datetime.strptime(value.strip(), fmt).time()


def format_duration(duration: timedelta) -> str:
    minutes = int(duration.total_seconds() // 60)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
