from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "DeckSmith"
    debug: bool = False

    # Remote deck database (used when remote_store_url is empty)
    database_url: str = "postgresql+asyncpg://localhost:5432/decksmith"

    # Remote deck service; takes precedence over database_url when set
    remote_store_url: str = ""
    remote_store_timeout: float = 30.0

    # Local fallback cache; empty keeps saved decks in memory only
    local_store_path: str = "data/saved_decks.json"

    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    suggestion_max_tokens: int = 2000

    # Number of available cards listed in a suggestion request
    suggestion_inventory_limit: int = 100


settings = Settings()


# =============================================================================
# DECK CONSTRUCTION LIMITS
# =============================================================================

# Minimum total card count for a legal constructed deck
MIN_DECK_SIZE = 60

# Max copies per card in constructed formats
DEFAULT_MAX_COPIES = 4

# Practical cap for cards exempt from the copy limit (basic lands)
UNBOUNDED_COPIES = 999
