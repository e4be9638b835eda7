from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "Cardex"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "postgresql+asyncpg://localhost:5432/cardex"

    pokemon_tcg_api_url: str = "https://api.pokemontcg.io/v2"
    pokemon_tcg_api_key: str = ""

    cardtrader_api_url: str = "https://api.cardtrader.com/api/v2"
    cardtrader_api_token: str = ""

    # Header set by the identity provider in front of the service
    user_id_header: str = "X-User-Id"

    http_timeout_seconds: float = 30.0
    http_retries: int = 2
    max_concurrent_requests: int = 8

    stats_ttl_hours: int = 24

    cors_origins: list[str] = ["*"]


settings = Settings()


# =============================================================================
# CATALOG CONSTANTS
# =============================================================================

# Rarity tracked by the collection views
ILLUSTRATION_RARE = "Illustration Rare"
ILLUSTRATION_RARE_TYPE = "illustration_rare"

RARITY_TYPES = {
    "Illustration Rare": "illustration_rare",
    "Special Illustration Rare": "special_illustration_rare",
}

# Only Scarlet & Violet era sets are tracked
TRACKED_SERIES_PREFIX = "sv"
EXCLUDED_EXPANSIONS = frozenset({"sv8pt5", "sve", "svp"})
MAX_LISTED_EXPANSIONS = 13

ALLOWED_SLOT_COUNTS = (180, 360, 540, 720)

STATS_TYPE = "illustration_rare_count"
