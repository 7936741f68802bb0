from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from travel_crm.repositories.itinerary_repository import ItineraryRepository
from travel_crm.schemas.itinerary import PricedItinerary
from travel_crm.services.itinerary_pricing import ItineraryPricingService
from travel_crm.api.deps import get_itinerary_pricing_service, get_itinerary_repo

router = APIRouter(prefix="/itineraries", tags=["Itineraries"])


@router.get("", response_model=List[PricedItinerary])
async def list_itineraries(
    destination: Optional[str] = Query(None, description="Case-insensitive match"),
    service: ItineraryPricingService = Depends(get_itinerary_pricing_service),
    itinerary_repo: ItineraryRepository = Depends(get_itinerary_repo),
) -> List[PricedItinerary]:
    """Itineraries with their INR quote at today's USD rate."""
    return await service.list_priced(itinerary_repo, destination)
