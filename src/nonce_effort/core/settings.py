"""Library settings and configuration.

Settings are loaded from environment variables (or an `.env` file) with
defaults that match the reference nonce and effort behavior.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Nonce and effort settings loaded from environment variables.

    Attributes:
        default_nonce_bytes: Length of nonces created without an explicit length.
        effort_digest: Name of the digest used for effort search and verification.
        effort_progress_trials: Emit a debug progress line every N search trials
            (0 disables progress logging).
    """

    default_nonce_bytes: int = Field(default=18, ge=1, le=254, alias="NONCE_DEFAULT_BYTES")
    effort_digest: str = Field(default="sha1", alias="EFFORT_DIGEST")
    effort_progress_trials: int = Field(default=1_000_000, ge=0, alias="EFFORT_PROGRESS_TRIALS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
