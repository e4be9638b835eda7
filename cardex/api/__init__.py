from cardex.api.binders import router as binders_router
from cardex.api.cards import router as cards_router
from cardex.api.expansions import router as expansions_router
from cardex.api.health import router as health_router
from cardex.api.marketplace import router as marketplace_router
from cardex.api.stats import router as stats_router
from cardex.api.wishlist import router as wishlist_router

__all__ = [
    "binders_router",
    "cards_router",
    "expansions_router",
    "health_router",
    "marketplace_router",
    "stats_router",
    "wishlist_router",
]
