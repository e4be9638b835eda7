from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Listing:
    """
    A single marketplace offer for a card.

    Prices are in minor units (cents) of `currency`.
    """

    id: int
    blueprint_id: int
    name: str
    price_cents: int
    currency: str
    condition: str | None = None
    description: str | None = None
    can_sell_via_hub: bool = False
    seller: str | None = None
    country_code: str | None = None
    expansion_name: str | None = None
    quantity: int = 0

    @classmethod
    def from_api(cls, product: dict[str, Any]) -> "Listing":
        """Build a listing from a CardTrader marketplace product payload."""
        price = product.get("price") or {}
        user = product.get("user") or {}
        properties = product.get("properties_hash") or {}
        expansion = product.get("expansion") or {}
        return cls(
            id=int(product["id"]),
            blueprint_id=int(product.get("blueprint_id", 0)),
            name=product.get("name_en", ""),
            price_cents=int(price.get("cents", 0)),
            currency=price.get("currency", ""),
            condition=properties.get("condition"),
            description=product.get("description"),
            can_sell_via_hub=user.get("can_sell_via_hub") is True,
            seller=user.get("username"),
            country_code=user.get("country_code"),
            expansion_name=expansion.get("name_en"),
            quantity=int(product.get("quantity", 0)),
        )


@dataclass(frozen=True, slots=True)
class MarketplaceExpansion:
    """An expansion as named on the marketplace."""

    id: int
    code: str
    name: str
