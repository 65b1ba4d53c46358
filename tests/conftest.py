import random

import pytest
from rest_framework.test import APIClient

from countries.errors import SourceTimeout


WAKANDA = {
    "name": "Wakanda",
    "capital": "Birnin Zana",
    "region": "Africa",
    "population": 1000,
    "flag": "https://flagcdn.com/wk.svg",
    "currencies": [{"code": "WK", "name": "Wakandan dollar", "symbol": "W$"}],
}

SAMPLE_COUNTRIES = [
    WAKANDA,
    {
        "name": "Nigeria",
        "capital": "Abuja",
        "region": "Africa",
        "population": 206139587,
        "flag": "https://flagcdn.com/ng.svg",
        "currencies": [{"code": "NGN", "name": "Nigerian naira", "symbol": "₦"}],
    },
    {
        "name": "Ghana",
        "capital": "Accra",
        "region": "Africa",
        "population": 31072945,
        "flag": "https://flagcdn.com/gh.svg",
        "currencies": [{"code": "GHS", "name": "Ghanaian cedi", "symbol": "₵"}],
    },
    {
        "name": "Germany",
        "capital": "Berlin",
        "region": "Europe",
        "population": 83240525,
        "flag": "https://flagcdn.com/de.svg",
        "currencies": [{"code": "EUR", "name": "Euro", "symbol": "€"}],
    },
    {
        "name": "Antarctica",
        "region": "Polar",
        "population": 1000,
        "flag": "https://flagcdn.com/aq.svg",
    },
]

SAMPLE_RATES = {"WK": 2.0, "NGN": 1600.23, "GHS": 15.34, "EUR": 0.92}


class FakeSourceClient:
    """Stands in for SourceClient.fetch_all with canned data or an error."""

    def __init__(self, countries=None, rates=None, error=None):
        self.countries = SAMPLE_COUNTRIES if countries is None else countries
        self.rates = SAMPLE_RATES if rates is None else rates
        self.error = error
        self.calls = 0

    def fetch_all(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.countries, self.rates

    def close(self):
        pass


@pytest.fixture(autouse=True)
def cache_dir(settings, tmp_path):
    settings.APP_ENVIRONMENT = "development"
    settings.CACHE_DIR = str(tmp_path / "cache")
    return tmp_path / "cache"


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def fake_client():
    return FakeSourceClient()


@pytest.fixture
def timeout_client():
    return FakeSourceClient(error=SourceTimeout("Exchange Rate API", "request timed out"))
