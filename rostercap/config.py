"""
Application configuration.

Database location, logging and transfer-engine timeouts. All settings can
be overridden via environment variables. Season rules (cap, roster size,
position minimums) are stored per season, not configured here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional


def _float_env(name: str, default: str) -> float:
    return float(os.getenv(name, default))


@dataclass
class RosterCapConfig:
    """Configuration for the rostercap service."""

    # Storage
    db_path: str = field(default_factory=lambda: os.getenv("ROSTERCAP_DB_PATH", "rostercap.db"))
    busy_timeout_s: float = field(
        default_factory=lambda: _float_env("ROSTERCAP_BUSY_TIMEOUT", "5.0")
    )

    # Transfer engine
    lock_timeout_s: float = field(
        default_factory=lambda: _float_env("ROSTERCAP_LOCK_TIMEOUT", "10.0")
    )
    default_season: int = field(
        default_factory=lambda: int(os.getenv("ROSTERCAP_DEFAULT_SEASON", "2024"))
    )

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("ROSTERCAP_LOG_LEVEL", "INFO"))

    @classmethod
    def from_env(cls) -> RosterCapConfig:
        """Create config from environment variables."""
        return cls()

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []
        if not self.db_path:
            errors.append("ROSTERCAP_DB_PATH is required")
        if self.busy_timeout_s < 0:
            errors.append("ROSTERCAP_BUSY_TIMEOUT must be non-negative")
        if self.lock_timeout_s <= 0:
            errors.append("ROSTERCAP_LOCK_TIMEOUT must be positive")
        if self.default_season < 1900:
            errors.append("ROSTERCAP_DEFAULT_SEASON must be a season year")
        if self.log_level.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            errors.append(f"Unknown ROSTERCAP_LOG_LEVEL: {self.log_level}")
        return errors


# Singleton config instance
_config: Optional[RosterCapConfig] = None


def get_config() -> RosterCapConfig:
    """Get the global configuration."""
    global _config
    if _config is None:
        _config = RosterCapConfig.from_env()
    return _config


def set_config(config: Optional[RosterCapConfig]) -> None:
    """
    Replace the global configuration.

    Useful for testing; None resets to environment defaults on next access.
    """
    global _config
    _config = config
