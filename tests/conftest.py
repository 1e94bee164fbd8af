import os
from datetime import datetime

import pytest
from dateutil import tz
from dotenv import load_dotenv

from fuzzydate import Anchor


def pytest_configure(config):
    # Load .env file before any tests are collected or run
    load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), '..', '.env'), override=True)


@pytest.fixture
def new_york():
    """America/New_York from the timezone database."""
    return tz.gettz("America/New_York")


@pytest.fixture
def monday_anchor(new_york):
    """Monday 2025-11-24 09:30:00 in New York."""
    return Anchor.of(datetime(2025, 11, 24, 9, 30), new_york)


@pytest.fixture
def thanksgiving_anchor(new_york):
    """Thursday 2025-11-27 08:00:00 in New York."""
    return Anchor.of(datetime(2025, 11, 27, 8, 0), new_york)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove FUZZYDATE_* settings that a local .env may have loaded."""
    for name in (
        "FUZZYDATE_TIMEZONE",
        "FUZZYDATE_DEFAULT_TIME",
        "FUZZYDATE_WEEK_START",
        "FUZZYDATE_CENTURY_WINDOW",
    ):
        monkeypatch.delenv(name, raising=False)
