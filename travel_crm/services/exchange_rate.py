import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import httpx

from travel_crm.core.cache import CacheService
from travel_crm.core.config import settings
from travel_crm.core.exceptions import ExchangeRateServiceError

logger = logging.getLogger(__name__)

_RATE_CACHE_KEY = "exchange_rate:USD:INR"


def quote_inr(
    cost_inr: Decimal, cost_usd: Decimal, rate: Decimal, markup: Decimal
) -> Decimal:
    """Price an itinerary in whole rupees.

    A positive stored INR cost wins; otherwise the USD cost is converted
    at ``rate + markup``.
    """
    if cost_inr and cost_inr > 0:
        return Decimal(cost_inr)
    converted = Decimal(cost_usd or 0) * (rate + markup)
    return converted.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


class ExchangeRateService:
    """Read-through USD→INR rate backed by the Redis cache.

    Lookup failures never reach the caller: the configured fallback rate
    is returned and the failure is logged.
    """

    def __init__(
        self,
        cache: CacheService,
        url: Optional[str] = None,
        fallback: Optional[float] = None,
        markup: Optional[float] = None,
    ) -> None:
        self._cache = cache
        self._url = url if url is not None else settings.EXCHANGE_RATE_URL
        self.fallback = Decimal(
            str(fallback if fallback is not None else settings.EXCHANGE_RATE_FALLBACK)
        )
        self.markup = Decimal(
            str(markup if markup is not None else settings.EXCHANGE_RATE_MARKUP)
        )

    async def _fetch_rate(self) -> Decimal:
        if not self._url:
            raise ExchangeRateServiceError("Exchange rate URL is not configured")
        try:
            async with httpx.AsyncClient(
                timeout=settings.EXTERNAL_SERVICE_TIMEOUT
            ) as client:
                response = await client.get(self._url)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ExchangeRateServiceError(f"Exchange rate lookup failed: {exc}")

        rate = (data.get("rates") or {}).get("INR") if isinstance(data, dict) else None
        if not rate:
            raise ExchangeRateServiceError("Exchange rate response has no INR rate")
        return Decimal(str(rate))

    async def get_usd_inr_rate(self) -> Decimal:
        cached = await self._cache.get(_RATE_CACHE_KEY)
        if cached is not None:
            return Decimal(cached)

        try:
            rate = await self._fetch_rate()
        except ExchangeRateServiceError:
            logger.warning(
                "Using fallback USD/INR rate %s", self.fallback, exc_info=True
            )
            return self.fallback

        await self._cache.set(
            _RATE_CACHE_KEY, str(rate), ttl=settings.EXCHANGE_RATE_CACHE_TTL
        )
        return rate
