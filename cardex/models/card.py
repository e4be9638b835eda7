from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class Card:
    """
    A catalog card, optionally annotated with one user's ownership.

    Attributes:
        id: Catalog identifier, unique per printing (e.g., "sv1-203")
        name: Card name as printed
        image_url: Card image (low-res variant)
        expansion: Expansion slug the card belongs to
        is_collected: Whether the user owns the card
        date_collected: When the user marked it collected
        card_type: Tracked subset the card belongs to (e.g., "illustration_rare")
    """

    id: str
    name: str
    image_url: str
    expansion: str
    is_collected: bool = False
    date_collected: datetime | None = None
    card_type: str | None = None


@dataclass(frozen=True, slots=True)
class Expansion:
    """
    A card expansion (set).

    `slug` is the lowercase routable identifier; `id` is the catalog set id.
    """

    id: str
    name: str
    slug: str
    logo: str | None = None
    release_date: str | None = None
