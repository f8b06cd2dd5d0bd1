"""
Central settings module.

All configuration comes from environment variables (or .env in local dev).
Never import settings directly from this file — always use the `settings`
singleton at the bottom so the entire engine shares one instance.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # silently ignore unrecognised env vars
        case_sensitive=False,
    )

    # ── Environment ────────────────────────────────────────────────────────
    environment: str = "development"
    log_level: str = "INFO"

    # ── Fuzzy matching ─────────────────────────────────────────────────────
    # Similarity runs 0.0 (nothing in common) to 1.0 (identical).
    # 0.6 corresponds to the 0.4 distance cutoff the catalogs were tuned with.
    fuzzy_min_similarity: float = Field(default=0.6, ge=0.0, le=1.0)
    activity_link_limit: int = Field(default=3, ge=1)

    # ── Hierarchy / search ─────────────────────────────────────────────────
    root_node_name: str = "All Services"
    filter_all_token: str = "All"
    warn_on_duplicate_service_ids: bool = True

    # ── Derived helpers ────────────────────────────────────────────────────
    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


# Singleton: import this everywhere
settings = Settings()
