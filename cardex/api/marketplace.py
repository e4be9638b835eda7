"""
Marketplace API endpoints.

Live price lookups against the marketplace. Nothing here is stored.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.api.deps import get_current_user_id, get_marketplace
from cardex.clients.cardtrader import CardTraderClient
from cardex.config import ILLUSTRATION_RARE_TYPE
from cardex.db import get_tracked_expansions
from cardex.db.database import get_session
from cardex.models.card import Card
from cardex.models.failure import ApiResponse
from cardex.models.listing import Listing, MarketplaceExpansion
from cardex.services.marketplace_matcher import find_expansion_matches, search_listings

router = APIRouter(prefix="/marketplace", tags=["marketplace"])


class PriceSearchRequest(BaseModel):
    """The card to price."""

    id: str = Field(default="", examples=["sv3pt5-166"])
    name: str = Field(..., min_length=1, examples=["Charmander"])
    image_url: str = ""
    expansion: str = Field(..., min_length=1, description="Expansion slug", examples=["sv3pt5"])
    card_type: str | None = Field(
        default=ILLUSTRATION_RARE_TYPE,
        description="Tracked subset; illustration rares get the rarity filter",
    )

    def to_card(self) -> Card:
        return Card(
            id=self.id,
            name=self.name,
            image_url=self.image_url,
            expansion=self.expansion.lower(),
            card_type=self.card_type,
        )


class ListingResponse(BaseModel):
    """A marketplace offer."""

    id: int
    name: str
    price_cents: int
    currency: str
    condition: str | None = None
    seller: str | None = None
    country_code: str | None = None
    quantity: int = 0

    @classmethod
    def from_model(cls, listing: Listing) -> "ListingResponse":
        return cls(
            id=listing.id,
            name=listing.name,
            price_cents=listing.price_cents,
            currency=listing.currency,
            condition=listing.condition,
            seller=listing.seller,
            country_code=listing.country_code,
            quantity=listing.quantity,
        )


class PriceSearchResponse(BaseModel):
    """Best offer for a card."""

    card: PriceSearchRequest
    best_price: ListingResponse | None = None
    total_found: int = 0


class MarketplaceExpansionResponse(BaseModel):
    id: int
    code: str
    name: str

    @classmethod
    def from_model(cls, expansion: MarketplaceExpansion) -> "MarketplaceExpansionResponse":
        return cls(id=expansion.id, code=expansion.code, name=expansion.name)


class ExpansionMatchResponse(BaseModel):
    expansion_name: str
    candidates: list[MarketplaceExpansionResponse]


class ExpansionMatchesResponse(BaseModel):
    """Marketplace expansions proposed for our tracked expansions."""

    pokemon_expansions: list[MarketplaceExpansionResponse]
    matches: list[ExpansionMatchResponse]


@router.post("/search", response_model=ApiResponse[PriceSearchResponse])
async def search_price(
    request: PriceSearchRequest,
    _user_id: Annotated[str, Depends(get_current_user_id)],
    marketplace: Annotated[CardTraderClient, Depends(get_marketplace)],
) -> ApiResponse[PriceSearchResponse]:
    """
    Find the cheapest acceptable listing for a card.

    Cards of expansions without a marketplace mapping have no offers.
    """
    listings = await search_listings(request.to_card(), marketplace)
    best = ListingResponse.from_model(listings[0]) if listings else None
    return ApiResponse.success(
        PriceSearchResponse(card=request, best_price=best, total_found=len(listings))
    )


@router.get("/expansions", response_model=ApiResponse[ExpansionMatchesResponse])
async def expansion_matches(
    _user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
    marketplace: Annotated[CardTraderClient, Depends(get_marketplace)],
) -> ApiResponse[ExpansionMatchesResponse]:
    """Propose marketplace expansions for each stored expansion name."""
    ours = await get_tracked_expansions(session)
    pokemon, matches = await find_expansion_matches(marketplace, [exp.name for exp in ours])
    return ApiResponse.success(
        ExpansionMatchesResponse(
            pokemon_expansions=[MarketplaceExpansionResponse.from_model(e) for e in pokemon],
            matches=[
                ExpansionMatchResponse(
                    expansion_name=m.expansion_name,
                    candidates=[MarketplaceExpansionResponse.from_model(c) for c in m.candidates],
                )
                for m in matches
            ],
        )
    )
