"""
Shared test fixtures — service area, fake notifiers, orchestrator, test client.
"""

import math
import threading

import pytest
from fastapi.testclient import TestClient

from survey_quote.dependencies import get_orchestrator
from survey_quote.eligibility import ServiceArea
from survey_quote.geometry import EARTH_RADIUS_MILES
from survey_quote.main import app
from survey_quote.mobilization import DEPOT_LONLAT
from survey_quote.submission import SubmissionOrchestrator


# --- Geometry helpers ---

def square_feature(lon: float, lat: float, size: float = 0.01) -> dict:
    """Closed square polygon Feature with its lower-left corner at (lon, lat)."""
    ring = [
        [lon, lat],
        [lon + size, lat],
        [lon + size, lat + size],
        [lon, lat + size],
        [lon, lat],
    ]
    return {"type": "Feature", "properties": {}, "geometry": {"type": "Polygon", "coordinates": [ring]}}


def point_north_of_depot(miles: float) -> list:
    """[lon, lat] due north of the depot at the given great-circle distance."""
    lon, lat = DEPOT_LONLAT
    return [lon, lat + math.degrees(miles / EARTH_RADIUS_MILES)]


# Square service area around the depot: lon -98.5..-97.0, lat 29.5..30.8
SERVICE_AREA_GEOJSON = {
    "type": "Polygon",
    "coordinates": [[
        [-98.5, 29.5], [-97.0, 29.5], [-97.0, 30.8], [-98.5, 30.8], [-98.5, 29.5],
    ]],
}


def sample_payload(**overrides) -> dict:
    """A 20-acre lidar request inside the service area, in the client's wire format."""
    payload = {
        "contact": {
            "name": "Dana Ruiz",
            "company": "Hill Country Civil",
            "email": "dana@example.com",
            "phone": "512-555-0100",
        },
        "project": {
            "projectName": "Onion Creek Topo",
            "location": "Buda, TX",
            "schedule": "Within 30 days",
            "notLegalSurvey": True,
            "notes": "Gate code 1234",
        },
        "aoi": {
            "features": [square_feature(-97.85, 30.07)],
            "count": 1,
            "totalArea_acres": 20,
            "totalArea_hectares": 8.09,
            "totalArea_sqKm": 0.081,
            "centroid_lonlat": [-97.845, 30.075],
        },
        "options": {
            "service": "lidar",
            "lidar": {"density": "20", "accuracy": "0.3", "addOns": ["dtm"]},
            "photo": {"gsd": "3in"},
            "mobilization": {"on": False},
        },
        "meta": {"version": "1.4.0"},
    }
    for key, value in overrides.items():
        payload[key] = value
    return payload


# --- Fake notifiers ---

class RecordingNotifier:
    name = "recording"

    def __init__(self):
        self.results = []
        self.called = threading.Event()

    def notify(self, result):
        self.results.append(result)
        self.called.set()


class SlowNotifier:
    """Blocks until released, like a hung SMTP server."""
    name = "slow"

    def __init__(self, timeout: float = 5.0):
        self.release = threading.Event()
        self.finished = threading.Event()
        self.timeout = timeout

    def notify(self, result):
        self.release.wait(self.timeout)
        self.finished.set()


class FailingNotifier:
    name = "failing"

    def __init__(self):
        self.called = threading.Event()

    def notify(self, result):
        self.called.set()
        raise ConnectionError("webhook unreachable")


# --- Fixtures ---

@pytest.fixture
def service_area():
    return ServiceArea.from_geojson(SERVICE_AREA_GEOJSON, source="test")


@pytest.fixture
def recorder():
    return RecordingNotifier()


@pytest.fixture
def orchestrator(service_area, recorder):
    return SubmissionOrchestrator(service_area=service_area, notifiers=[recorder])


@pytest.fixture
def client(orchestrator):
    """FastAPI test client wired to the test orchestrator."""
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()
