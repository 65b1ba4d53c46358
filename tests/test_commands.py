from io import StringIO
from unittest import mock

import pytest
from django.core.management import CommandError, call_command

from countries import store
from countries.models import Country

from conftest import SAMPLE_COUNTRIES

pytestmark = pytest.mark.django_db


def test_refresh_command(fake_client):
    out = StringIO()
    with mock.patch("countries.refresh.SourceClient", return_value=fake_client):
        call_command("refresh_countries", "--seed", "3", stdout=out)

    assert Country.objects.count() == len(SAMPLE_COUNTRIES)
    assert f"Refreshed {len(SAMPLE_COUNTRIES)} countries" in out.getvalue()


def test_refresh_command_seed_is_reproducible(fake_client):
    with mock.patch("countries.refresh.SourceClient", return_value=fake_client):
        call_command("refresh_countries", "--seed", "3", stdout=StringIO())
        first = dict(Country.objects.values_list("name", "estimated_gdp"))
        call_command("refresh_countries", "--seed", "3", stdout=StringIO())

    assert dict(Country.objects.values_list("name", "estimated_gdp")) == first


def test_refresh_command_source_down(timeout_client):
    with mock.patch("countries.refresh.SourceClient", return_value=timeout_client):
        with pytest.raises(CommandError, match="External data source unavailable"):
            call_command("refresh_countries", stdout=StringIO())

    assert store.get_refresh_marker() is None
