from datetime import date

import pytest

from calculator import PersonalTrip, TripKind, WorkTrip
from models import parse_trip_date, row_to_trip, trip_to_row


def test_row_to_work_trip() -> None:
    trip = row_to_trip(
        {
            "id": 1,
            "tipo": "trabajo",
            "fecha": "2024-03-05",
            "kmInicio": 100,
            "kmFinal": 150,
            "paquetes": 10,
            "destino": None,
            "dineroGanado": 2000,
            "notas": "  ",
        }
    )

    assert isinstance(trip, WorkTrip)
    assert trip.kind is TripKind.WORK
    assert trip.date == date(2024, 3, 5)
    assert trip.distance == 50
    assert trip.package_count == 10
    assert trip.earnings == 2000
    assert trip.notes is None


def test_row_to_personal_trip_drops_work_fields() -> None:
    trip = row_to_trip(
        {
            "id": "2",
            "tipo": "personal",
            "fecha": "2024-03-06T00:00:00.000Z",
            "kmInicio": 150,
            "kmFinal": 170,
            "paquetes": 3,
            "destino": "Centro",
            "dineroGanado": None,
            "notas": "gym",
        }
    )

    assert isinstance(trip, PersonalTrip)
    assert trip.id == 2
    assert trip.date == date(2024, 3, 6)
    assert trip.destination == "Centro"
    assert trip.notes == "gym"
    assert not hasattr(trip, "package_count")


def test_unknown_kind_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown trip kind"):
        row_to_trip({"id": 1, "tipo": "boat", "fecha": "2024-01-01", "kmInicio": 0, "kmFinal": 1})


def test_parse_trip_date_accepts_dates_and_strings() -> None:
    assert parse_trip_date(date(2024, 1, 2)) == date(2024, 1, 2)
    assert parse_trip_date("2024-01-02") == date(2024, 1, 2)
    assert parse_trip_date("2024-01-02T10:30:00+00:00") == date(2024, 1, 2)


def test_trip_to_row_includes_distance(sample_trips) -> None:
    work, personal = sample_trips

    work_row = trip_to_row(work)
    assert work_row["tipo"] == "trabajo"
    assert work_row["fecha"] == "2024-03-05"
    assert work_row["kmRecorridos"] == 50
    assert work_row["paquetes"] == 10
    assert work_row["destino"] is None

    personal_row = trip_to_row(personal)
    assert personal_row["tipo"] == "personal"
    assert personal_row["destino"] == "Centro"
    assert personal_row["dineroGanado"] is None


def test_personal_row_keeps_earnings() -> None:
    trip = row_to_trip(
        {"id": 3, "tipo": "personal", "fecha": "2024-01-01", "kmInicio": 0, "kmFinal": 5, "dineroGanado": 500}
    )

    assert isinstance(trip, PersonalTrip)
    assert trip.earnings == 500
    assert trip_to_row(trip)["dineroGanado"] == 500


@pytest.mark.parametrize(
    "overrides",
    [
        {"fecha": None},
        {"kmInicio": None},
        {"kmFinal": "lots"},
        {"paquetes": "many"},
    ],
)
def test_malformed_row_raises_value_error(overrides) -> None:
    row = {"id": 1, "tipo": "trabajo", "fecha": "2024-01-01", "kmInicio": 0, "kmFinal": 5, **overrides}

    with pytest.raises(ValueError, match="Malformed trip row"):
        row_to_trip(row)


def test_row_without_date_raises_value_error() -> None:
    with pytest.raises(ValueError, match="Malformed trip row"):
        row_to_trip({"id": 1, "tipo": "personal", "kmInicio": 0, "kmFinal": 5})
