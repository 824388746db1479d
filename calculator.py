from __future__ import annotations
from calendar import month_name
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
import re
from typing import Any, Iterable, List, Optional, Union


class TripKind(str, Enum):
    WORK = "work"
    PERSONAL = "personal"


ALL_KINDS = "todos"

ODOMETER_ERROR = "End odometer must be greater than start odometer."


class ValidationError(ValueError):
    """Input rejected locally, before anything is sent to the backend."""


@dataclass(frozen=True)
class _TripBase:
    """
    Fields shared by both kinds of trip.

    id:             backend row id, assigned on creation
    date:           day the trip happened
    odometer_start: odometer reading when leaving
    odometer_end:   odometer reading when arriving
    earnings:       money made; normally only set on work trips
    """
    id: int
    date: date
    odometer_start: int
    odometer_end: int
    notes: Optional[str] = None
    earnings: Optional[float] = None

    @property
    def distance(self) -> int:
        return self.odometer_end - self.odometer_start

    @property
    def iso_date(self) -> str:
        return self.date.isoformat()


@dataclass(frozen=True)
class WorkTrip(_TripBase):
    """A delivery run: counts packages and earns money."""
    package_count: Optional[int] = None

    kind = TripKind.WORK

    def display_detail(self) -> str:
        return f"{self.package_count or 0} packages"


@dataclass(frozen=True)
class PersonalTrip(_TripBase):
    destination: Optional[str] = None

    kind = TripKind.PERSONAL

    def display_detail(self) -> str:
        return self.destination or ""


Trip = Union[WorkTrip, PersonalTrip]


# -----------------------------
# Input parsing / validation
# -----------------------------

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")
_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")


def parse_int_lenient(value: Any) -> int:
    """
    Parse the leading integer of a form value, like a browser's parseInt.
    Anything without a leading integer (None, "", "abc") becomes 0.

        "42"   -> 42
        " 7km" -> 7
        "3.9"  -> 3
        "abc"  -> 0
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    m = _LEADING_INT.match(str(value))
    return int(m.group(1)) if m else 0


def parse_number_lenient(value: Any) -> Union[int, float]:
    """
    Like parse_int_lenient but keeps fractions ("2000.5" -> 2000.5).
    Whole numbers come back as int.
    """
    if value is None or isinstance(value, bool):
        return parse_int_lenient(value)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        m = _LEADING_NUMBER.match(str(value))
        if not m:
            return 0
        number = float(m.group(1))
    return int(number) if number.is_integer() else number


def validate_odometers(odometer_start: int, odometer_end: int) -> None:
    if odometer_end <= odometer_start:
        raise ValidationError(ODOMETER_ERROR)


# -----------------------------
# Filtering
# -----------------------------

@dataclass(frozen=True)
class FilterState:
    """
    Narrowing predicate over the cached trips.

    kind is "todos" or a TripKind value. year/month/day are zero-padded
    strings ("2024", "03", "05") or empty.
    """
    kind: str = ALL_KINDS
    year: str = ""
    month: str = ""
    day: str = ""

    def with_kind(self, kind: str) -> "FilterState":
        return replace(self, kind=kind)

    def with_year(self, year: str) -> "FilterState":
        return replace(self, year=year or "", month="", day="")

    def with_month(self, month: str) -> "FilterState":
        return replace(self, month=month or "", day="")

    def with_day(self, day: str) -> "FilterState":
        return replace(self, day=day or "")

    def matches(self, trip: Trip) -> bool:
        if self.kind != ALL_KINDS and trip.kind.value != self.kind:
            return False

        iso = trip.iso_date
        if self.year and not iso.startswith(self.year):
            return False
        if self.month and not iso.startswith(f"{self.year}-{self.month}"):
            return False
        if self.day and iso != f"{self.year}-{self.month}-{self.day}":
            return False
        return True


def filter_trips(trips: Iterable[Trip], state: FilterState) -> List[Trip]:
    return [t for t in trips if state.matches(t)]


def available_years(trips: Iterable[Trip]) -> List[str]:
    """Distinct years over every cached trip (kind filter ignored), newest first."""
    return sorted({t.iso_date.split("-")[0] for t in trips}, reverse=True)


def available_months(trips: Iterable[Trip], year: str) -> List[str]:
    if not year:
        return []
    return sorted({t.iso_date.split("-")[1] for t in trips if t.iso_date.startswith(year)})


def available_days(trips: Iterable[Trip], year: str, month: str) -> List[str]:
    if not year or not month:
        return []
    prefix = f"{year}-{month}"
    return sorted({t.iso_date.split("-")[2] for t in trips if t.iso_date.startswith(prefix)})


def month_label(month: str) -> str:
    """ "03" -> "March" """
    return month_name[int(month)]


# -----------------------------
# Aggregation
# -----------------------------

@dataclass
class AggregateStats:
    count: int = 0
    distance: int = 0
    earnings: float = 0
    packages: int = 0


def compute_stats(trips: Iterable[Trip]) -> AggregateStats:
    """
    Totals over an already-filtered set of trips.
    Missing earnings / package counts count as zero. Earnings come from
    every trip, packages only from work trips.
    """
    stats = AggregateStats()
    for trip in trips:
        stats.count += 1
        stats.distance += trip.distance
        stats.earnings += trip.earnings or 0
        if trip.kind is TripKind.WORK:
            stats.packages += trip.package_count or 0
    return stats
