from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional

from ...attendance.model import AccessLogEntry
from ...common.clock import OrgClock
from ...core.enums import ActionKind
from .base import DayTotal, WorkedHoursCalculator, WorkedHoursSummary


class GreedyPairingCalculator(WorkedHoursCalculator):
    """Pair each check-in with the check-out that immediately follows it.

    Entries are ordered by timestamp, ties broken by entry id. Anything left
    without a partner counts as incomplete. A pair is credited to the
    organization-local date of its check-in.
    """

    def __init__(self, clock: Optional[OrgClock] = None):
        self._clock = clock or OrgClock()

    def summarize(self, entries: Iterable[AccessLogEntry]) -> WorkedHoursSummary:
        ordered = sorted(entries, key=lambda e: (self._clock.normalize(e.timestamp), e.entry_id))

        per_day: dict[date, list] = {}
        total = timedelta(0)
        pairs = 0
        incomplete = 0

        i = 0
        while i < len(ordered):
            current = ordered[i]
            nxt = ordered[i + 1] if i + 1 < len(ordered) else None

            if current.action == ActionKind.CHECK_IN and nxt is not None and nxt.action == ActionKind.CHECK_OUT:
                worked = self._clock.normalize(nxt.timestamp) - self._clock.normalize(current.timestamp)
                day = self._clock.local_date(current.timestamp)
                bucket = per_day.setdefault(day, [timedelta(0), 0])
                bucket[0] += worked
                bucket[1] += 1
                total += worked
                pairs += 1
                i += 2
                continue

            incomplete += 1
            i += 1

        return WorkedHoursSummary(
            total=total,
            per_day=tuple(DayTotal(day=d, worked=w, pairs=n) for d, (w, n) in sorted(per_day.items())),
            incomplete_count=incomplete,
            pair_count=pairs,
        )


def compute_worked_hours(
    entries: Iterable[AccessLogEntry],
    clock: Optional[OrgClock] = None,
) -> WorkedHoursSummary:
    return GreedyPairingCalculator(clock).summarize(entries)
