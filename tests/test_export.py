import json
from datetime import date

from calculator import FilterState, filter_trips
from export import export_filename, export_trips_json


def test_export_empty_set_is_empty_array() -> None:
    assert json.loads(export_trips_json([])) == []


def test_export_is_pretty_printed(sample_trips) -> None:
    text = export_trips_json(filter_trips(sample_trips, FilterState(kind="work")))

    assert text.startswith("[\n  {")
    rows = json.loads(text)
    assert [r["id"] for r in rows] == [1]
    assert rows[0]["kmRecorridos"] == 50
    assert rows[0]["dineroGanado"] == 2000


def test_export_filename_uses_date() -> None:
    assert export_filename(date(2024, 3, 7)) == "trips-2024-03-07.json"
