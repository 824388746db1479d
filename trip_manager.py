from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from calculator import (
    AggregateStats,
    FilterState,
    Trip,
    TripKind,
    ValidationError,
    available_days,
    available_months,
    available_years,
    compute_stats,
    filter_trips,
    parse_int_lenient,
    parse_number_lenient,
    validate_odometers,
)
import db
from models import WIRE_KINDS, parse_trip_date, row_to_trip
from rpc import RpcClient, RpcError

logger = logging.getLogger(__name__)

BUSY_MESSAGE = "Another change is still being saved."
NOT_CONFIRMED_MESSAGE = "Deletion was not confirmed."


@dataclass
class TripForm:
    """
    Raw values as typed into the trip form. Numeric fields stay as text
    until submission, where they are parsed leniently.
    """
    date: Union[date, str]
    odometer_start: Any = ""
    odometer_end: Any = ""
    package_count: Any = ""
    earnings: Any = ""
    destination: str = ""
    notes: str = ""


@dataclass(frozen=True)
class MutationResult:
    ok: bool
    message: str


def _common_payload(kind: TripKind, form: TripForm) -> Dict[str, Any]:
    odometer_start = parse_int_lenient(form.odometer_start)
    odometer_end = parse_int_lenient(form.odometer_end)
    validate_odometers(odometer_start, odometer_end)

    try:
        trip_date = parse_trip_date(form.date)
    except (TypeError, ValueError) as e:
        raise ValidationError("Please enter a valid date.") from e

    payload: Dict[str, Any] = {
        "tipo": WIRE_KINDS[kind],
        "fecha": trip_date.isoformat(),
        "kmInicio": odometer_start,
        "kmFinal": odometer_end,
    }
    notes = (form.notes or "").strip()
    if notes:
        payload["notas"] = notes
    return payload


def build_payload(kind: TripKind, form: TripForm) -> Dict[str, Any]:
    """
    Validate a form and turn it into the backend's input shape.
    Work trips carry packages and earnings, personal trips a destination.

    Raises ValidationError when the odometer readings don't describe a
    forward trip.
    """
    payload = _common_payload(kind, form)
    if kind is TripKind.WORK:
        payload["paquetes"] = parse_int_lenient(form.package_count)
        payload["dineroGanado"] = parse_number_lenient(form.earnings)
    else:
        payload["destino"] = (form.destination or "").strip()
    return payload


class TripManager:
    """
    Page-session cache of the user's trips.

    The backend is authoritative: `trips` is only ever replaced as a whole,
    by refresh(), after a mutation has been confirmed.
    """

    def __init__(self, client: RpcClient):
        self.client = client
        self.trips: Tuple[Trip, ...] = ()
        self.loaded = False
        self.busy = False

    def refresh(self) -> None:
        """
        Reload every trip from the backend. Rows that cannot be read are
        logged and left out rather than failing the whole list.
        """
        trips = []
        for row in db.fetch_trips(self.client):
            try:
                trips.append(row_to_trip(row))
            except (AttributeError, ValueError) as e:
                logger.warning("Skipping trip row: %s", e)
        self.trips = tuple(trips)
        self.loaded = True

    # -------------------------
    # Mutations
    # -------------------------

    def _run(self, send: Callable[[], Any], success_message: str) -> MutationResult:
        if self.busy:
            return MutationResult(False, BUSY_MESSAGE)

        self.busy = True
        try:
            send()
        except RpcError as e:
            return MutationResult(False, e.message)
        finally:
            self.busy = False

        try:
            self.refresh()
        except RpcError as e:
            logger.warning("Refresh after mutation failed: %s", e)
        return MutationResult(True, success_message)

    def create_trip(self, kind: TripKind, form: TripForm) -> MutationResult:
        try:
            payload = build_payload(kind, form)
        except ValidationError as e:
            return MutationResult(False, str(e))
        return self._run(lambda: db.insert_trip(self.client, payload), "Trip saved.")

    def update_trip(self, trip: Trip, form: TripForm) -> MutationResult:
        """Edit an existing trip. Its kind cannot change."""
        try:
            payload = build_payload(trip.kind, form)
        except ValidationError as e:
            return MutationResult(False, str(e))
        return self._run(lambda: db.update_trip(self.client, trip.id, payload), "Trip updated.")

    def delete_trip(self, trip_id: int, confirmed: bool = False) -> MutationResult:
        if not confirmed:
            return MutationResult(False, NOT_CONFIRMED_MESSAGE)
        return self._run(lambda: db.delete_trip(self.client, trip_id), "Trip deleted.")

    # -------------------------
    # Read side
    # -------------------------

    def get(self, trip_id: int) -> Optional[Trip]:
        for trip in self.trips:
            if trip.id == trip_id:
                return trip
        return None

    def filtered(self, state: FilterState) -> List[Trip]:
        return filter_trips(self.trips, state)

    def stats(self, state: FilterState) -> AggregateStats:
        return compute_stats(self.filtered(state))

    def years(self) -> List[str]:
        return available_years(self.trips)

    def months(self, year: str) -> List[str]:
        return available_months(self.trips, year)

    def days(self, year: str, month: str) -> List[str]:
        return available_days(self.trips, year, month)


def form_from_trip(trip: Trip) -> TripForm:
    """Pre-fill the edit form from a stored trip."""
    form = TripForm(
        date=trip.date,
        odometer_start=str(trip.odometer_start),
        odometer_end=str(trip.odometer_end),
        notes=trip.notes or "",
    )
    if trip.kind is TripKind.WORK:
        form.package_count = "" if trip.package_count is None else str(trip.package_count)
        form.earnings = "" if trip.earnings is None else str(trip.earnings)
    else:
        form.destination = trip.destination or ""
    return form
