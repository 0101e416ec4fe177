"""
Runtime settings schema.

Frozen dataclasses describing every tunable of the inventory backend.
YAML fragments and environment overrides are parsed into these types by
``inventory_config.loader``; nothing else constructs them outside tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseSettings:
    """Engine construction parameters."""

    url: str = "sqlite://"
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class PaginationSettings:
    """Page size used when a listing request does not give one."""

    default_limit: int = 20
    max_limit: int = 100


@dataclass(frozen=True)
class ClosingSettings:
    """Closing gate tunables."""

    min_justification_length: int = 10


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Settings:
    """Complete runtime settings."""

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    pagination: PaginationSettings = field(default_factory=PaginationSettings)
    closing: ClosingSettings = field(default_factory=ClosingSettings)
    checksum: str = ""
