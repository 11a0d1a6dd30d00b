"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from arena.schemas.snapshot import LoadoutItem, Vector3


class Settings(BaseSettings):
    """Arena settings loaded from ARENA_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ARENA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///arena_snapshots.db"

    # ==========================================================================
    # Arena profile
    # ==========================================================================
    # List settings are read as JSON from the environment, e.g.
    #   ARENA_ABILITY_ALLOW_LIST=[1001, 1002]
    #   ARENA_LOADOUT=[{"item_id": 7, "amount": 1}]

    # Where entering players are teleported; unset skips the teleport
    spawn_position: Vector3 | None = None
    loadout: list[LoadoutItem] = Field(default_factory=list)

    # Boss-school abilities the arena may grant and revoke
    ability_allow_list: list[int] = Field(default_factory=list)

    # Bosses unlocked for arena play; empty means every boss the host knows
    arena_boss_ids: list[int] = Field(default_factory=list)

    # Arena blood; 0 leaves the player's blood untouched
    arena_blood_type: int = -700632469  # Warrior
    arena_blood_quality: float = Field(default=100.0, ge=0.0, le=100.0)

    # Prefix added to the character name while in the arena; empty disables
    name_tag: str = "[arena] "

    # Seconds a worker waits for the simulation tick to run live-state work
    dispatch_timeout_seconds: float | None = 30.0

    # Debug
    debug: bool = False
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience alias
settings = get_settings()
