from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Union

from dateutil.parser import isoparse

from calculator import PersonalTrip, Trip, TripKind, WorkTrip

# Backend column names and kind tags.
WIRE_KINDS = {
    TripKind.WORK: "trabajo",
    TripKind.PERSONAL: "personal",
}
_KINDS_BY_WIRE = {v: k for k, v in WIRE_KINDS.items()}


def parse_trip_date(value: Union[str, date, datetime]) -> date:
    """
    The backend sends either a plain "YYYY-MM-DD" or a full ISO timestamp
    ("2024-03-05T00:00:00.000Z"). Only the calendar day matters.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return isoparse(str(value).strip()).date()


def _opt_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _opt_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def row_to_trip(row: Dict[str, Any]) -> Trip:
    wire_kind = row.get("tipo")
    kind = _KINDS_BY_WIRE.get(wire_kind)
    if kind is None:
        raise ValueError(f"Unknown trip kind: {wire_kind!r}")

    try:
        common = dict(
            id=int(row["id"]),
            date=parse_trip_date(row["fecha"]),
            odometer_start=int(row["kmInicio"]),
            odometer_end=int(row["kmFinal"]),
            notes=_opt_text(row.get("notas")),
            earnings=row.get("dineroGanado"),
        )
        package_count = _opt_int(row.get("paquetes"))
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Malformed trip row {row.get('id')!r}: {e}") from e

    if kind is TripKind.WORK:
        return WorkTrip(**common, package_count=package_count)
    return PersonalTrip(**common, destination=_opt_text(row.get("destino")))


def trip_to_row(trip: Trip) -> Dict[str, Any]:
    """
    Wire-shaped dict for a trip, plus the derived distance. Used for export.
    """
    row: Dict[str, Any] = {
        "id": trip.id,
        "tipo": WIRE_KINDS[trip.kind],
        "fecha": trip.iso_date,
        "kmInicio": trip.odometer_start,
        "kmFinal": trip.odometer_end,
        "kmRecorridos": trip.distance,
    }
    if isinstance(trip, WorkTrip):
        row["paquetes"] = trip.package_count
        row["destino"] = None
    else:
        row["paquetes"] = None
        row["destino"] = trip.destination
    row["dineroGanado"] = trip.earnings
    row["notas"] = trip.notes
    return row
