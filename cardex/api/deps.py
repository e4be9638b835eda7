"""
Shared request dependencies.

The identity provider in front of the service resolves the caller and
forwards the user id in a header; this module only reads it.
"""

import logging

from fastapi import Request

from cardex.clients.cardtrader import CardTraderClient
from cardex.clients.pokemon_tcg import PokemonTCGClient
from cardex.config import settings
from cardex.models.failure import AuthenticationError

logger = logging.getLogger(__name__)


def get_current_user_id(request: Request) -> str:
    """
    Resolve the authenticated user id for the request.

    Raises:
        AuthenticationError: If no user id was forwarded
    """
    user_id = request.headers.get(settings.user_id_header, "").strip()
    if not user_id:
        logger.info("Rejected unauthenticated request to %s", request.url.path)
        raise AuthenticationError()
    return user_id


def get_catalog(request: Request) -> PokemonTCGClient:
    """Catalog client owned by the application lifespan."""
    client: PokemonTCGClient = request.app.state.catalog
    return client


def get_marketplace(request: Request) -> CardTraderClient:
    """Marketplace client owned by the application lifespan."""
    client: CardTraderClient = request.app.state.marketplace
    return client
