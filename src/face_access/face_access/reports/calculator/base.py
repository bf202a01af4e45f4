from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable

from ...attendance.model import AccessLogEntry


@dataclass(frozen=True)
class DayTotal:
    day: date
    worked: timedelta
    pairs: int


@dataclass(frozen=True)
class WorkedHoursSummary:
    total: timedelta = timedelta(0)
    per_day: tuple[DayTotal, ...] = field(default_factory=tuple)
    incomplete_count: int = 0
    pair_count: int = 0


class WorkedHoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked hours)."""

    @abstractmethod
    def summarize(self, entries: Iterable[AccessLogEntry]) -> WorkedHoursSummary:
        raise NotImplementedError
