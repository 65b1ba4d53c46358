"""
Join raw country records to the exchange-rate table.

Pure functions only: nothing here touches the network or the database.
"""
import math
import random
from dataclasses import asdict, dataclass
from typing import Mapping, Optional, Sequence

from django.core.exceptions import ValidationError
from django.core.validators import URLValidator

MULTIPLIER_MIN = 1000
MULTIPLIER_MAX = 2000
FLAG_URL_MAX_LENGTH = 500

_validate_url = URLValidator(schemes=["http", "https"])


@dataclass
class CountryRecord:
    name: Optional[str]
    capital: Optional[str] = None
    region: Optional[str] = None
    population: int = 0
    currency_code: Optional[str] = None
    exchange_rate: Optional[float] = None
    estimated_gdp: Optional[float] = 0.0
    flag_url: Optional[str] = None

    def as_dict(self):
        return asdict(self)


def make_multiplier(rng: random.Random) -> float:
    """Uniform draw in [1000, 2000)."""
    return MULTIPLIER_MIN + rng.random() * (MULTIPLIER_MAX - MULTIPLIER_MIN)


def normalize_population(value) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return 0
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        value = int(value)
    if not isinstance(value, int) or value < 0:
        return 0
    return value


def _text(value) -> Optional[str]:
    # some sources send capital as a list
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    # and name as {"common": ..., "official": ...}
    if isinstance(value, Mapping):
        value = value.get("common")
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def normalize_flag_url(value) -> Optional[str]:
    """Keep only http(s) URLs that fit the column; anything else becomes None."""
    value = _text(value)
    if value is None or len(value) > FLAG_URL_MAX_LENGTH:
        return None
    try:
        _validate_url(value)
    except ValidationError:
        return None
    return value


def first_currency_code(currencies) -> Optional[str]:
    if not isinstance(currencies, (list, tuple)) or not currencies:
        return None
    first = currencies[0]
    if not isinstance(first, Mapping):
        return None
    return _text(first.get("code"))


def reconcile_country(raw, rates: Mapping[str, float], rng: random.Random) -> CountryRecord:
    if not isinstance(raw, Mapping):
        raw = {}

    population = normalize_population(raw.get("population"))
    currency_code = first_currency_code(raw.get("currencies"))

    exchange_rate = None
    estimated_gdp = 0.0
    if currency_code is not None and currency_code in rates:
        exchange_rate = rates[currency_code]
        estimated_gdp = population * make_multiplier(rng) / exchange_rate
        # a vanishingly small rate overflows; treat it like a missing rate
        if not math.isfinite(estimated_gdp):
            exchange_rate = None
            estimated_gdp = 0.0

    return CountryRecord(
        name=_text(raw.get("name")),
        capital=_text(raw.get("capital")),
        region=_text(raw.get("region")),
        population=population,
        currency_code=currency_code,
        exchange_rate=exchange_rate,
        estimated_gdp=estimated_gdp,
        flag_url=normalize_flag_url(raw.get("flag")),
    )


def reconcile(raw_countries: Sequence, rates: Mapping[str, float], rng: Optional[random.Random] = None):
    """
    Build one CountryRecord per raw country.

    Bad data never drops a record; it shows up as None / 0 fields instead.
    Pass a seeded ``rng`` to make estimated GDP reproducible.
    """
    rng = rng or random.Random()
    return [reconcile_country(raw, rates, rng) for raw in raw_countries]
