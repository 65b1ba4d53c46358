from datetime import datetime, timezone
from unittest import mock

import pytest

from countries import store
from countries.models import Country, RequestLog
from countries.reconcile import CountryRecord

from conftest import SAMPLE_COUNTRIES, FakeSourceClient

pytestmark = pytest.mark.django_db

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def source(fake_client):
    with mock.patch("countries.refresh.SourceClient", return_value=fake_client):
        yield fake_client


@pytest.fixture
def seeded():
    store.bulk_reconcile([
        CountryRecord(name="Ghana", region="Africa", population=31000000, currency_code="GHS",
                      exchange_rate=15.34, estimated_gdp=900.0),
        CountryRecord(name="Nigeria", region="Africa", population=206000000, currency_code="NGN",
                      exchange_rate=1600.0, estimated_gdp=300.0),
        CountryRecord(name="Germany", region="Europe", population=83000000, currency_code="EUR",
                      exchange_rate=0.92, estimated_gdp=600.0),
    ], now=NOW)


def test_index(api_client):
    response = api_client.get("/")

    assert response.status_code == 200
    assert "refresh" in response.json()["endpoints"]


def test_refresh(api_client, source):
    response = api_client.post("/countries/refresh")

    assert response.status_code == 200
    body = response.json()
    assert body["total_countries"] == len(SAMPLE_COUNTRIES)
    assert body["last_refreshed_at"] is not None
    assert body["failed"] == 0
    assert body["message"] == "Refresh successful"
    assert Country.objects.count() == len(SAMPLE_COUNTRIES)


def test_refresh_source_down_returns_503(api_client, timeout_client):
    with mock.patch("countries.refresh.SourceClient", return_value=timeout_client):
        response = api_client.post("/countries/refresh")

    assert response.status_code == 503
    assert response.json()["error"] == "External data source unavailable"
    assert Country.objects.count() == 0
    assert store.get_refresh_marker() is None


def test_refresh_requires_post(api_client):
    assert api_client.get("/countries/refresh").status_code == 405


def test_list_countries(api_client, seeded):
    response = api_client.get("/countries")

    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["Germany", "Ghana", "Nigeria"]
    assert set(response.json()[0]) == {
        "id", "name", "capital", "region", "population", "currency_code", "exchange_rate",
        "estimated_gdp", "flag_url", "last_refreshed_at", "created_at",
    }


def test_list_countries_filters_and_sort(api_client, seeded):
    response = api_client.get("/countries", {"region": "Africa", "sort": "gdp_desc"})

    assert [c["name"] for c in response.json()] == ["Ghana", "Nigeria"]

    response = api_client.get("/countries", {"currency": "ngn"})
    assert [c["name"] for c in response.json()] == ["Nigeria"]


def test_list_countries_unknown_sort_and_empty_params(api_client, seeded):
    default = api_client.get("/countries").json()

    assert api_client.get("/countries", {"sort": "sideways"}).json() == default
    assert api_client.get("/countries", {"region": "", "currency": "", "sort": ""}).json() == default


def test_list_countries_empty(api_client):
    response = api_client.get("/countries")

    assert response.status_code == 200
    assert response.json() == []


def test_get_country(api_client, seeded):
    response = api_client.get("/countries/ghana")

    assert response.status_code == 200
    assert response.json()["name"] == "Ghana"
    assert response.json()["currency_code"] == "GHS"


def test_get_country_not_found(api_client):
    response = api_client.get("/countries/Nonexistent")

    assert response.status_code == 404
    assert response.json() == {"error": "Country not found"}


def test_delete_country(api_client, seeded):
    response = api_client.delete("/countries/GERMANY")

    assert response.status_code == 200
    assert response.json()["name"] == "Germany"
    assert response.json()["id"] is not None
    assert not Country.objects.filter(name_key="germany").exists()


def test_delete_country_not_found(api_client, seeded):
    response = api_client.delete("/countries/Nonexistent")

    assert response.status_code == 404
    assert Country.objects.count() == 3


def test_status_before_refresh(api_client):
    response = api_client.get("/status")

    assert response.json() == {"total_countries": 0, "last_refreshed_at": None}


def test_status_after_refresh(api_client, source):
    refreshed = api_client.post("/countries/refresh").json()

    response = api_client.get("/status")

    assert response.json()["total_countries"] == len(SAMPLE_COUNTRIES)
    assert response.json()["last_refreshed_at"] is not None
    assert response.json()["last_refreshed_at"] == refreshed["last_refreshed_at"]
    assert refreshed["last_refreshed_at"].endswith("Z")


def test_image_missing(api_client):
    response = api_client.get("/countries/image")

    assert response.status_code == 404
    assert response.json() == {"error": "Summary image not found"}


def test_image_after_refresh(api_client, source):
    api_client.post("/countries/refresh")

    response = api_client.get("/countries/image")

    assert response.status_code == 200
    assert response["Content-Type"] == "image/png"
    content = b"".join(response.streaming_content)
    assert content.startswith(b"\x89PNG")
    response.close()


def test_unknown_route_is_json(api_client):
    response = api_client.get("/nowhere/at/all")

    assert response.status_code == 404


def test_unexpected_error_hides_details(api_client, settings):
    settings.DEBUG = False
    with mock.patch("countries.views.store.count_countries", side_effect=RuntimeError("secret db text")):
        response = api_client.get("/status")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_unexpected_error_shows_details_in_debug(api_client, settings):
    settings.DEBUG = True
    with mock.patch("countries.views.store.count_countries", side_effect=RuntimeError("secret db text")):
        response = api_client.get("/status")

    assert response.status_code == 500
    assert response.json()["details"] == "secret db text"


def test_requests_are_logged(api_client, settings):
    settings.REQUEST_LOG_TO_DB = True

    api_client.get("/status")

    log = RequestLog.objects.get()
    assert log.method == "GET"
    assert log.path == "/status"
    assert log.status_code == 200


def test_request_logging_to_db_can_be_disabled(api_client, settings):
    settings.REQUEST_LOG_TO_DB = False

    api_client.get("/status")

    assert not RequestLog.objects.exists()
