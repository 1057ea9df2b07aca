import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

# Add the parent directory to sys.path so we can import the project modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from pitwall_lights.data.models import Driver, Position

RACE_TIME = datetime(2024, 9, 22, 12, 30, tzinfo=timezone.utc)


def make_position(driver_number, position, minutes=0, date=None):
    """Build a position record ``minutes`` after RACE_TIME"""
    return Position(
        session_key=9598,
        meeting_key=1245,
        driver_number=driver_number,
        date=date or RACE_TIME + timedelta(minutes=minutes),
        position=position,
    )


@pytest.fixture
def race_time():
    return RACE_TIME


@pytest.fixture
def sample_drivers():
    """Fixture to provide sample driver data"""
    return [
        Driver(
            broadcast_name="M VERSTAPPEN",
            full_name="MAX VERSTAPPEN",
            driver_number=1,
            name_acronym="VER",
            team_colour="3671C6",  # OpenF1 serves colours without the hash
            team_name="Red Bull Racing",
        ),
        Driver(
            broadcast_name="S PEREZ",
            full_name="SERGIO PEREZ",
            driver_number=11,
            name_acronym="PER",
            team_colour="3671C6",
            team_name="Red Bull Racing",
        ),
        Driver(
            broadcast_name="L NORRIS",
            full_name="LANDO NORRIS",
            driver_number=4,
            name_acronym="NOR",
            team_colour="FF8000",
            team_name="McLaren",
        ),
        Driver(
            broadcast_name="L LAWSON",
            full_name="LIAM LAWSON",
            driver_number=30,
            name_acronym="LAW",
            team_colour=None,
            team_name="RB",
        ),
    ]


@pytest.fixture
def sample_positions():
    """Latest order is VER, NOR, PER, LAW with an older record for VER"""
    return [
        make_position(1, 2, minutes=0),
        make_position(1, 1, minutes=5),
        make_position(4, 2, minutes=5),
        make_position(11, 3, minutes=4),
        make_position(30, 4, minutes=3),
    ]


@pytest.fixture
def mock_env_config():
    """Mock environment configuration"""
    with patch.dict(
        os.environ,
        {
            "GOVEE_API_KEY": "test-api-key",
            "GOVEE_DEVICE_ID": "AA:BB:CC:DD:EE:FF:00:11",
            "GOVEE_SKU": "H6062",
            "STALENESS_THRESHOLD_MINUTES": "90",
            "PACING_INTERVAL_MS": "750",
            "RECONCILE_POLICY": "per_driver",
            "ACTIVE_WEEKDAYS": "5,6",
        },
    ):
        yield
