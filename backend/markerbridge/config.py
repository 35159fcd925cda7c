"""
markerbridge: Application Configuration
==========================================

What:  Typed settings for the bridge, loaded with Pydantic Settings.
How:   Environment variables prefixed with BRIDGE_ (or a .env file) override
       the defaults below; values are validated when Settings() is built.
Who:   Passed explicitly into create_app() and BridgeServer. Nothing in the
       package reads a global settings object.

Example:
    BRIDGE_PORT=3001 BRIDGE_SINK_KIND=webhook \\
    BRIDGE_SINK_URL=http://127.0.0.1:9000/markers python -m markerbridge
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SINK_KINDS = {"stdout", "log", "webhook"}


class Settings(BaseSettings):
    """
    Bridge settings. Every field has a default suitable for a local setup.

    Attributes are grouped by concern.
    """

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    # 0 asks the OS for a free port (tests)
    port: int = Field(default=3000, ge=0, le=65535)

    # ── Asset Roots ───────────────────────────────────────────────────────
    # What: Directory holding index.html and the rest of the UI
    ui_root: str = Field(default="./other")
    # What: Directory every GET ending in ".js" is served from
    script_root: str = Field(default="./code")

    # ── Ingest Limits ─────────────────────────────────────────────────────
    # None means unbounded, matching a bridge with no configured limits
    max_body_size: Optional[int] = Field(default=None, ge=1)
    body_timeout: Optional[float] = Field(default=None, gt=0)

    # What: Status returned for bodies that are not valid marker JSON
    # Kept at 500 by default so existing clients see the same contract
    invalid_body_status: int = Field(default=500, ge=400, le=599)

    # ── Sink ──────────────────────────────────────────────────────────────
    sink_kind: str = Field(default="stdout")
    sink_url: Optional[str] = Field(default=None)
    sink_timeout: float = Field(default=5.0, gt=0)

    # ── Logging ───────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("sink_kind")
    @classmethod
    def validate_sink_kind(cls, v: str) -> str:
        lower = v.lower()
        if lower not in SINK_KINDS:
            raise ValueError(f"Invalid sink_kind '{v}'. Must be one of: {sorted(SINK_KINDS)}")
        return lower

    def validate_sink(self) -> None:
        """
        What:  Checks that the chosen sink has what it needs.
        When:  Called by build_sink() before a sink is constructed.
        Raises ValueError with one line per problem.
        """
        errors = []
        if self.sink_kind == "webhook" and not self.sink_url:
            errors.append("BRIDGE_SINK_URL is required when BRIDGE_SINK_KIND=webhook")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )
