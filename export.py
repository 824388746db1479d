from __future__ import annotations

import json
from datetime import date
from typing import Iterable, Optional

from calculator import Trip
from models import trip_to_row

EXPORT_MIME = "application/json"


def export_trips_json(trips: Iterable[Trip]) -> str:
    """Pretty-printed JSON array of the given trips. No trips -> "[]"."""
    return json.dumps([trip_to_row(t) for t in trips], indent=2, ensure_ascii=False)


def export_filename(today: Optional[date] = None) -> str:
    return f"trips-{(today or date.today()).isoformat()}.json"
