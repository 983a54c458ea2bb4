"""Rate Oracle — market exchange rates with a short-lived in-memory cache.

Invariants:
    - Cache key is "FROM:TO" (upper-cased)
    - A hit within TTL returns the cached MarketRate unchanged, original timestamp included
    - A miss or expired entry calls the provider and stores the result with a fresh expiry
    - Provider failures raise RateUnavailableError; never a stale or zero rate
    - Concurrent callers may both fetch; last writer wins (no lock)

Design Decisions:
    - Oracle is an injected instance with explicit TTL, one per process via get_rate_oracle()
    - Monotonic clock for cache expiry, wall clock for the rate timestamp
"""

import logging
import math
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable

import httpx

from remit.config import Settings, get_settings
from remit.core.clock import utcnow
from remit.core.collaborator_protocols import MarketRate, RateProvider, RateQuote
from remit.core.errors import RateUnavailableError

logger = logging.getLogger(__name__)

USD_TO_GHS = 12.35
BTC_TO_USD = 67000.0


class MockRateProvider:
    """Static rate table for sandbox use. Unknown pairs price at 1."""

    name = "MockRateProvider"

    def __init__(self):
        self._rates = {
            "USD:GHS": USD_TO_GHS,
            "GHS:USD": 1 / USD_TO_GHS,
            "BTC:USD": BTC_TO_USD,
            "USD:BTC": 1 / BTC_TO_USD,
            "BTC:GHS": BTC_TO_USD * USD_TO_GHS,
            "GHS:BTC": 1 / (BTC_TO_USD * USD_TO_GHS),
        }

    async def get_rate(self, from_code: str, to_code: str) -> RateQuote:
        key = f"{from_code.upper()}:{to_code.upper()}"
        return RateQuote(rate=self._rates.get(key, 1.0), timestamp=utcnow())


class HttpRateProvider:
    """Fetches `{base_url}?from=X&to=Y` and expects `{"rate": <number>}`."""

    name = "HttpRateProvider"

    def __init__(
        self, base_url: str, timeout_seconds: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url
        self._timeout = timeout_seconds
        self._client = client

    async def get_rate(self, from_code: str, to_code: str) -> RateQuote:
        pair = f"{from_code.upper()}:{to_code.upper()}"
        params = {"from": from_code.upper(), "to": to_code.upper()}
        try:
            if self._client is not None:
                response = await self._client.get(self._base_url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(self._base_url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise RateUnavailableError(pair, f"http: {e}")
        except ValueError as e:
            raise RateUnavailableError(pair, f"invalid json: {e}")

        rate = payload.get("rate") if isinstance(payload, dict) else None
        if not isinstance(rate, (int, float)) or not math.isfinite(rate) or rate <= 0:
            raise RateUnavailableError(pair, f"invalid rate: {rate!r}")
        return RateQuote(rate=float(rate), timestamp=utcnow())


@dataclass
class _CacheEntry:
    rate: MarketRate
    expires_at: float


class RateOracle:
    """TTL cache in front of a RateProvider."""

    def __init__(
        self, provider: RateProvider, ttl_seconds: float = 30.0,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self._provider = provider
        self._ttl = ttl_seconds
        self._monotonic = monotonic
        self._cache: dict[str, _CacheEntry] = {}

    @property
    def source(self) -> str:
        return self._provider.name

    async def get_rate(self, from_code: str, to_code: str) -> MarketRate:
        key = f"{from_code.upper()}:{to_code.upper()}"
        now = self._monotonic()
        cached = self._cache.get(key)
        if cached and cached.expires_at > now:
            return cached.rate

        try:
            quote = await self._provider.get_rate(from_code, to_code)
        except RateUnavailableError:
            logger.error(f"Rate provider failed for {key}")
            raise
        except Exception as e:
            logger.error(f"Rate provider raised for {key}: {e}", exc_info=True)
            raise RateUnavailableError(key, str(e))

        rate = MarketRate(
            rate=quote.rate, source=self._provider.name, timestamp=quote.timestamp,
        )
        self._cache[key] = _CacheEntry(rate=rate, expires_at=now + self._ttl)
        return rate

    def clear(self) -> None:
        self._cache.clear()


def build_rate_provider(settings: Settings) -> RateProvider:
    if settings.rate_provider.lower() == "http":
        return HttpRateProvider(
            settings.rate_provider_url, settings.rate_provider_timeout_seconds,
        )
    return MockRateProvider()


@lru_cache
def get_rate_oracle() -> RateOracle:
    """Process-wide oracle; the cache is an efficiency, not a correctness, concern."""
    settings = get_settings()
    return RateOracle(
        build_rate_provider(settings), ttl_seconds=settings.rate_cache_ttl_seconds,
    )
