import sys
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402

from calculator import PersonalTrip, WorkTrip  # noqa: E402


@pytest.fixture
def sample_trips():
    return [
        WorkTrip(
            id=1,
            date=date(2024, 3, 5),
            odometer_start=100,
            odometer_end=150,
            package_count=10,
            earnings=2000,
        ),
        PersonalTrip(
            id=2,
            date=date(2024, 3, 6),
            odometer_start=150,
            odometer_end=170,
            destination="Centro",
        ),
    ]
