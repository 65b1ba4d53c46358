import logging
import math
from concurrent.futures import ThreadPoolExecutor

import requests
from django.conf import settings
from requests.adapters import HTTPAdapter
from requests.exceptions import RequestException, Timeout

from .errors import MalformedResponse, SourceTimeout, SourceUnavailable

logger = logging.getLogger(__name__)

COUNTRIES_SOURCE = "Countries API"
EXCHANGE_SOURCE = "Exchange Rate API"


class SourceClient:
    """
    Fetches raw country records and the exchange-rate table.

    Transport problems are turned into SourceTimeout / SourceUnavailable and
    payload problems into MalformedResponse, so callers never see a
    requests exception.
    """

    def __init__(self, countries_url=None, exchange_rate_url=None, timeout=None, pool_size=None):
        self.countries_url = countries_url or settings.COUNTRIES_API_URL
        self.exchange_rate_url = exchange_rate_url or settings.EXCHANGE_RATE_API_URL
        self.timeout = timeout or settings.SOURCE_TIMEOUT
        pool_size = pool_size or settings.SOURCE_POOL_SIZE

        self.session = requests.Session()
        adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def _get_json(self, source, url):
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except Timeout as exc:
            raise SourceTimeout(source, "request timed out", str(exc)) from exc
        except RequestException as exc:
            raise SourceUnavailable(source, "could not fetch data", str(exc)) from exc

        try:
            return resp.json()
        except ValueError as exc:
            raise MalformedResponse(source, "response is not valid JSON", str(exc)) from exc

    def fetch_countries(self):
        data = self._get_json(COUNTRIES_SOURCE, self.countries_url)
        if not isinstance(data, list):
            raise MalformedResponse(COUNTRIES_SOURCE, "expected a list of countries")
        logger.info("Fetched %d countries from %s", len(data), self.countries_url)
        return data

    def fetch_exchange_rates(self):
        data = self._get_json(EXCHANGE_SOURCE, self.exchange_rate_url)
        # API returns 'rates' mapping
        rates = data.get("rates") if isinstance(data, dict) else None
        if not isinstance(rates, dict):
            raise MalformedResponse(EXCHANGE_SOURCE, "response has no 'rates' table")

        table = {}
        for code, value in rates.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            if not math.isfinite(value) or value <= 0:
                continue
            table[str(code)] = float(value)

        dropped = len(rates) - len(table)
        if dropped:
            logger.warning("Ignored %d exchange rates that were not positive numbers", dropped)
        logger.info("Fetched %d exchange rates from %s", len(table), self.exchange_rate_url)
        return table

    def fetch_all(self):
        """
        Fetch both sources at the same time and wait for both to finish.

        Returns (countries, rates). If either fetch failed its error is
        re-raised, countries first.
        """
        with ThreadPoolExecutor(max_workers=2) as executor:
            countries_future = executor.submit(self.fetch_countries)
            rates_future = executor.submit(self.fetch_exchange_rates)

        # leaving the executor waits for both
        return countries_future.result(), rates_future.result()

    def close(self):
        self.session.close()
