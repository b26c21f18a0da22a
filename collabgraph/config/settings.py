"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Settings are read from TWO sources (in priority order):
#
#   1. Environment variables, e.g. SPOTIFY_CLIENT_ID=abc123
#   2. .env file in the project root (local development only)
#
# Field name `spotify_client_id` maps to env var `SPOTIFY_CLIENT_ID`.
# An empty string means "not configured": the wiring in main.py skips
# any provider whose credentials are empty.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """collabGraph application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === LLM Providers ===
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint (TogetherAI, Groq, ...)
    openai_text_model: str = ""  # defaults to gpt-4o
    anthropic_api_key: str = ""
    anthropic_model: str = ""  # defaults to claude-sonnet-4-20250514
    llm_timeout_seconds: float = 25.0

    # === Metadata graph (MusicBrainz) ===
    musicbrainz_app_name: str = "collabGraph"
    musicbrainz_app_version: str = "0.1.0"
    musicbrainz_contact: str = ""
    musicbrainz_request_interval: float = 1.0
    musicbrainz_expand_branches: bool = True

    # === Encyclopedia (Wikipedia) ===
    wikipedia_api_url: str = "https://en.wikipedia.org/w/api.php"
    http_timeout_seconds: float = 15.0

    # === Streaming catalog (Spotify) ===
    spotify_client_id: str = ""
    spotify_client_secret: str = ""

    # === Subject registry / durable store ===
    registry_db_path: str = "data/collabgraph.db"

    # === Synthesis tuning ===
    enrichment_concurrency: int = 5
    enrichment_timeout_seconds: float = 10.0
    branch_limit: int = 3

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    log_to_stderr: bool = False  # CLI sets this so stdout carries only results

    def get_available_llm_providers(self) -> list[str]:
        """Return the LLM provider names that have non-empty API keys configured."""
        providers: list[str] = []
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.openai_api_key:
            providers.append("openai")
        return providers

    def spotify_configured(self) -> bool:
        return bool(self.spotify_client_id and self.spotify_client_secret)
