from cardex.clients.cardtrader import CardTraderClient
from cardex.clients.pokemon_tcg import PokemonTCGClient, filter_tracked_expansions

__all__ = [
    "CardTraderClient",
    "PokemonTCGClient",
    "filter_tracked_expansions",
]
