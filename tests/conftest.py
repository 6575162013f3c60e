"""Shared fixtures: an offline client and a small country directory."""

import pytest

from covid19_api import Country, CountryDirectory, Covid19Data


COUNTRIES = [
    {"Country": "Philippines", "Slug": "philippines", "ISO2": "PH"},
    {"Country": "Indonesia", "Slug": "indonesia", "ISO2": "ID"},
    {"Country": "Malaysia", "Slug": "malaysia", "ISO2": "MY"},
    {"Country": "United States of America", "Slug": "united-states", "ISO2": "US"},
]


def history_records(country, confirmed, deaths=None, start_day=1, month="2021-09"):
    """Native /total/country records with consecutive dates."""
    deaths = deaths or [0] * len(confirmed)
    return [
        {
            "Country": country,
            "CountryCode": "",
            "Province": "",
            "City": "",
            "CityCode": "",
            "Lat": "0",
            "Lon": "0",
            "Confirmed": c,
            "Deaths": d,
            "Recovered": 0,
            "Active": c - d,
            "Date": f"{month}-{start_day + i:02d}T00:00:00Z",
        }
        for i, (c, d) in enumerate(zip(confirmed, deaths))
    ]


class FakeClient:
    """Stands in for Covid19APIClient: canned responses keyed by endpoint."""

    base_url = "https://api.example.test"

    def __init__(self, responses=None):
        self.responses = {"/countries": COUNTRIES}
        self.responses.update(responses or {})
        self.calls = []

    def build_url(self, endpoint, params=None):
        return f"{self.base_url}{endpoint}"

    def get(self, endpoint, params=None):
        self.calls.append((endpoint, params))
        response = self.responses.get(endpoint, [])
        if isinstance(response, Exception):
            raise response
        return response

    def endpoints(self):
        return [endpoint for endpoint, _ in self.calls]


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def directory():
    return CountryDirectory(
        countries=[Country(c["Country"], c["Slug"], c["ISO2"]) for c in COUNTRIES]
    )


@pytest.fixture
def data(fake_client, directory):
    return Covid19Data(client=fake_client, directory=directory)


@pytest.fixture
def make_client():
    """Build a FakeClient with extra canned responses."""
    return FakeClient


@pytest.fixture
def make_history():
    return history_records
