from typing import List, Optional

from travel_crm.repositories.itinerary_repository import ItineraryRepository
from travel_crm.schemas.itinerary import ItineraryOut, PricedItinerary
from travel_crm.services.exchange_rate import ExchangeRateService, quote_inr


class ItineraryPricingService:
    """Lists itineraries with the INR quote an agent reads out to a client."""

    def __init__(self, exchange_rates: ExchangeRateService) -> None:
        self._exchange_rates = exchange_rates

    async def list_priced(
        self,
        itinerary_repo: ItineraryRepository,
        destination: Optional[str] = None,
    ) -> List[PricedItinerary]:
        itineraries = await itinerary_repo.list_itineraries(destination)
        if not itineraries:
            return []

        rate = await self._exchange_rates.get_usd_inr_rate()
        markup = self._exchange_rates.markup
        return [
            PricedItinerary(
                **ItineraryOut.model_validate(itinerary).model_dump(),
                exchange_rate=rate,
                quoted_inr=quote_inr(
                    itinerary.cost_inr, itinerary.cost_usd, rate, markup
                ),
            )
            for itinerary in itineraries
        ]
