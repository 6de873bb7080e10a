# backend/portfolio_analytics/config.py
"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- ENVIRONMENT: Runtime mode (development, test, production)
- LOG_LEVEL / LOG_FORMAT: Logging setup (see utils/logging.py)
- Analytics thresholds: concentration, diversification, benchmark verdict

Business constants that are not meant to be tuned per deployment
(XIRR solver bounds, default category tables) live in
portfolio_analytics.services.constants instead.

Usage:
    from portfolio_analytics.config import settings

    threshold = settings.concentration_threshold_pct
"""
from decimal import Decimal
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Find the .env file in project root (parent of backend/)
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")

    Analytics settings (optional, with defaults from the product rules):
        - DEFAULT_RESOLUTION: Growth curve resolution (default: "monthly")
        - CONCENTRATION_THRESHOLD_PCT: Max single-holding weight (default: 30)
        - OVER_DIVERSIFICATION_HOLDINGS: Holdings count limit (default: 15)
        - SMALL_HOLDING_WEIGHT_PCT: "Small holding" weight (default: 5)
        - BENCHMARK_IN_LINE_TOLERANCE_PCT: Verdict dead-band (default: 0.5)
        - TOP_HOLDINGS_COUNT: Holdings listed in the snapshot (default: 5)
        - ANALYTICS_MAX_WORKERS: Snapshot fan-out threads (default: 4)
    """

    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format ('json' for log aggregation)"
    )

    app_name: str = "Portfolio Analytics Engine"

    # =========================================================================
    # ANALYTICS
    # =========================================================================
    default_resolution: Literal["daily", "weekly", "monthly"] = Field(
        default="monthly",
        description="Default growth curve resolution"
    )
    concentration_threshold_pct: Decimal = Field(
        default=Decimal("30"),
        gt=0,
        le=100,
        description="Single-holding weight (percent) above which concentration risk is flagged"
    )
    over_diversification_holdings: int = Field(
        default=15,
        ge=1,
        description="Holdings count above which a portfolio may be over-diversified"
    )
    small_holding_weight_pct: Decimal = Field(
        default=Decimal("5"),
        gt=0,
        le=100,
        description="Largest-weight ceiling (percent) for the over-diversification flag"
    )
    benchmark_in_line_tolerance_pct: Decimal = Field(
        default=Decimal("0.5"),
        ge=0,
        description="Outperformance band (percentage points) reported as in line"
    )
    top_holdings_count: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of holdings listed in the snapshot allocation"
    )
    analytics_max_workers: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Thread pool size for snapshot fan-out (1 = sequential)"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        """Uppercase the log level so 'debug' and 'DEBUG' both work."""
        return value.upper().strip()

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


# Create single instance
settings = Settings()
