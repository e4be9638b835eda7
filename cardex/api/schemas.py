"""Response models shared by several routers."""

from datetime import datetime

from pydantic import BaseModel, Field

from cardex.models.card import Card, Expansion


class CardResponse(BaseModel):
    """A card with the caller's collected state."""

    id: str
    name: str
    image_url: str
    expansion: str
    is_collected: bool = False
    date_collected: datetime | None = None
    card_type: str | None = Field(
        default=None,
        description="Tracked subset the card belongs to (e.g., illustration_rare)",
    )

    @classmethod
    def from_model(cls, card: Card) -> "CardResponse":
        return cls(
            id=card.id,
            name=card.name,
            image_url=card.image_url,
            expansion=card.expansion,
            is_collected=card.is_collected,
            date_collected=card.date_collected,
            card_type=card.card_type,
        )


class ExpansionResponse(BaseModel):
    """An expansion."""

    id: str
    name: str
    slug: str
    logo: str | None = None
    release_date: str | None = None

    @classmethod
    def from_model(cls, expansion: Expansion) -> "ExpansionResponse":
        return cls(
            id=expansion.id,
            name=expansion.name,
            slug=expansion.slug,
            logo=expansion.logo,
            release_date=expansion.release_date,
        )


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str
