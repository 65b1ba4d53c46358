"""
Persistence for reconciled countries and the global refresh marker.

Every write to the ``countries`` and ``metadata`` tables goes through here.
"""
import logging

from django.db import DatabaseError, transaction

from . import utils
from .errors import NotFound, RecordWriteFailure
from .models import Country, Metadata, normalize_name
from .serializers import CountrySerializer

logger = logging.getLogger(__name__)

SORT_ORDERINGS = {
    "gdp_asc": ("estimated_gdp", "name_key"),
    "gdp_desc": ("-estimated_gdp", "name_key"),
    "population_asc": ("population", "name_key"),
    "population_desc": ("-population", "name_key"),
    "name_asc": ("name_key",),
    "name_desc": ("-name_key",),
}
DEFAULT_ORDERING = SORT_ORDERINGS["name_asc"]


def _lookup(name):
    return Country.objects.filter(name_key=normalize_name(name))


def upsert(record, now=None):
    """
    Insert or update one country, keyed by case-insensitive name.

    The existing row is locked for the duration of the write; a racing
    insert of the same name hits the unique name_key and fails. Returns
    the row as re-read from the database. Raises RecordWriteFailure on invalid data
    or any database error.
    """
    now = now or utils.get_now()
    payload = record.as_dict() if hasattr(record, "as_dict") else dict(record)
    name = payload.get("name")

    try:
        with transaction.atomic():
            existing = None
            if isinstance(name, str) and name.strip():
                existing = _lookup(name).select_for_update().first()
            serializer = CountrySerializer(instance=existing, data=payload)
            if not serializer.is_valid():
                raise RecordWriteFailure(name, serializer.errors.get("details", serializer.errors))

            if existing is None:
                country = serializer.save(created_at=now, last_refreshed_at=now)
            else:
                country = serializer.save(last_refreshed_at=now)
    except DatabaseError as exc:
        raise RecordWriteFailure(name, str(exc)) from exc

    return Country.objects.get(pk=country.pk)


def bulk_reconcile(records, now=None):
    """
    Upsert every record, skipping the ones that fail.

    Returns only the rows that were written.
    """
    now = now or utils.get_now()
    records = list(records)
    saved = []
    for record in records:
        try:
            saved.append(upsert(record, now=now))
        except RecordWriteFailure as exc:
            logger.warning("Skipping country %r: %s", exc.name, exc.details)

    logger.info("Reconciled %d of %d countries", len(saved), len(records))
    return saved


def commit_refresh_marker(now=None):
    now = now or utils.get_now()
    Metadata.objects.update_or_create(
        key_name=Metadata.LAST_REFRESHED_AT,
        defaults={"value": now},
    )
    return now


def get_refresh_marker():
    marker = Metadata.objects.filter(key_name=Metadata.LAST_REFRESHED_AT).first()
    return marker.value if marker else None


def get_by_name(name):
    country = _lookup(name).first()
    if country is None:
        raise NotFound(name)
    return country


def delete_by_name(name):
    """Delete a country and return it as it was, or None when absent."""
    with transaction.atomic():
        country = _lookup(name).select_for_update().first()
        if country is None:
            return None
        # queryset delete leaves the instance (and its pk) untouched
        Country.objects.filter(pk=country.pk).delete()

    logger.info("Deleted country %s", country.name)
    return country


def list_filtered(region=None, currency=None, sort=None):
    qs = Country.objects.all()
    if region:
        qs = qs.filter(region__iexact=region)
    if currency:
        qs = qs.filter(currency_code__iexact=currency)
    return qs.order_by(*SORT_ORDERINGS.get(sort, DEFAULT_ORDERING))


def top_by_gdp(n=5):
    return list(Country.objects.filter(estimated_gdp__isnull=False).order_by("-estimated_gdp", "name_key")[:n])


def count_countries():
    return Country.objects.count()
