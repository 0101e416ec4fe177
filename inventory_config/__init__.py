"""
inventory_config -- single public entrypoint for runtime settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_settings()``.  No other component may read settings files or
    environment variables directly.

Architecture position:
    Configuration.  This package sits beside ``inventory_kernel`` and below
    ``inventory_services``.  The kernel MUST NEVER import from
    ``inventory_config``; the use-case layer passes the relevant values
    (justification length, page sizes) into kernel services.

Failure modes:
    - ``FileNotFoundError`` -- an explicit ``path`` does not exist.
    - ``ValueError`` -- unknown keys or badly typed values.

Audit relevance:
    Every ``get_settings()`` call emits an ``INVENTORY_CONFIG_TRACE`` log
    entry with the settings checksum (the database URL is never logged).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from inventory_config.loader import (
    apply_env_overrides,
    load_yaml_file,
    merge,
    parse_settings,
)
from inventory_config.schema import (
    ClosingSettings,
    DatabaseSettings,
    LoggingSettings,
    PaginationSettings,
    Settings,
)

_logger = logging.getLogger("inventory_kernel.config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def get_settings(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """The ONLY public settings entrypoint.

    Resolution order (later wins): packaged ``defaults.yaml``, the YAML
    file at ``path`` (if given), then ``INVENTORY_*`` environment variables.

    Args:
        path: Optional YAML file overriding the defaults.
        environ: Environment mapping; defaults to ``os.environ``.

    Returns:
        Frozen ``Settings``.
    """
    data = load_yaml_file(DEFAULTS_PATH)
    if path is not None:
        data = merge(data, load_yaml_file(Path(path)))
    data = apply_env_overrides(data, os.environ if environ is None else environ)

    settings = parse_settings(data)

    _logger.info(
        "INVENTORY_CONFIG_TRACE",
        extra={
            "trace_type": "INVENTORY_CONFIG_TRACE",
            "checksum": settings.checksum,
            "source": str(path) if path is not None else "defaults",
            "log_level": settings.logging.level,
            "min_justification_length": settings.closing.min_justification_length,
        },
    )
    return settings


__all__ = [
    "get_settings",
    "Settings",
    "DatabaseSettings",
    "LoggingSettings",
    "PaginationSettings",
    "ClosingSettings",
]
