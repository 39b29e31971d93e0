import copy
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from whereis.models import ApiError, ErrorPayload, LocationRecord, LookupOutcome  # noqa: E402

MOUNTAIN_VIEW = {
    "locationData": {
        "cityName": "Mountain View",
        "continentCode": "NA",
        "countryCode": "US",
        "countryName": "United States",
        "lat": 37.40,
        "lng": -122.08,
        "tz": "America/Los_Angeles",
    }
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the user's real environment and home directory out of every test."""
    for name in (
        "FASTAH_API_KEY",
        "FASTAH-API-KEY",
        "FASTAH_ENDPOINT",
        "MMDB_PATH",
        "LOG_LEVEL",
        "LOG-LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("COLUMNS", "200")
    return home


@pytest.fixture
def location_body():
    return copy.deepcopy(MOUNTAIN_VIEW)


@pytest.fixture
def mountain_view():
    return LocationRecord(
        country_code="US",
        city_name="Mountain View",
        latitude=37.40,
        longitude=-122.08,
        timezone="America/Los_Angeles",
        continent_code="NA",
        country_name="United States",
    )


class FakeRemote:
    """Stand-in for FastahClient that answers from a dict and records calls."""

    def __init__(self, answers):
        self.answers = answers
        self.calls = []

    def lookup(self, ip):
        self.calls.append(ip)
        answer = self.answers[ip]
        if isinstance(answer, Exception):
            raise answer
        return answer


class FakeLocal:
    def __init__(self, answers):
        self.answers = answers
        self.calls = []
        self.closed = False

    def lookup(self, ip):
        self.calls.append(ip)
        answer = self.answers[ip]
        if isinstance(answer, Exception):
            raise answer
        return answer

    def close(self):
        self.closed = True


@pytest.fixture
def fake_remote_factory():
    return FakeRemote


@pytest.fixture
def fake_local_factory():
    return FakeLocal


@pytest.fixture
def rate_limited():
    return LookupOutcome(error=ApiError(500, ErrorPayload("rate limited")))
