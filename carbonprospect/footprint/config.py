# -*- coding: utf-8 -*-
"""
Footprint Engine Configuration

Centralized configuration for the footprint engine covering:
- Financial projection defaults (horizon, discount rate)
- Default reduction target
- Scenario store capacity
- Reference data file overrides
- Persistence backend URL

All settings can be overridden via environment variables with the
``CP_FOOTPRINT_`` prefix (e.g. ``CP_FOOTPRINT_DEFAULT_DISCOUNT_RATE``).

Components accept an explicit config; ``get_config()`` is only consulted
when none is given.

Example:
    >>> from carbonprospect.footprint.config import get_config
    >>> cfg = get_config()
    >>> print(cfg.default_horizon_years, cfg.default_discount_rate)
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Environment variable prefix
# ---------------------------------------------------------------------------

_ENV_PREFIX = "CP_FOOTPRINT_"


# ---------------------------------------------------------------------------
# FootprintConfig
# ---------------------------------------------------------------------------


@dataclass
class FootprintConfig:
    """Complete configuration for the footprint engine.

    Attributes:
        default_horizon_years: Projection horizon used when none is given.
        default_discount_rate: Annual discount rate used when none is given.
        max_horizon_years: Largest accepted projection horizon.
        default_reduction_target_percent: Target applied to new footprints.
        max_scenarios_per_footprint: Scenario capacity per footprint.
        emission_factors_path: Optional YAML overriding the packaged factors.
        compliance_rules_path: Optional YAML overriding the packaged rules.
        strategy_catalog_path: Optional YAML overriding the packaged catalog.
        benchmarks_path: Optional YAML overriding the packaged benchmarks.
        database_url: SQLAlchemy URL for the SQL scenario repository.
            Empty keeps scenarios in memory.
    """

    # -- Financial projection ------------------------------------------------
    default_horizon_years: int = 5
    default_discount_rate: float = 0.05
    max_horizon_years: int = 50

    # -- Targets -------------------------------------------------------------
    default_reduction_target_percent: float = 20.0

    # -- Capacity limits -----------------------------------------------------
    max_scenarios_per_footprint: int = 50

    # -- Reference data ------------------------------------------------------
    emission_factors_path: str = ""
    compliance_rules_path: str = ""
    strategy_catalog_path: str = ""
    benchmarks_path: str = ""

    # -- Persistence ---------------------------------------------------------
    database_url: str = ""

    # ------------------------------------------------------------------
    # Factory helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> FootprintConfig:
        """Build a FootprintConfig from environment variables.

        Every field can be overridden via ``CP_FOOTPRINT_<FIELD_UPPER>``.
        Unparsable numbers are logged and replaced by the default.

        Returns:
            Populated FootprintConfig instance.
        """
        prefix = _ENV_PREFIX

        def _env(name: str, default: Any = None) -> Optional[str]:
            return os.environ.get(f"{prefix}{name}", default)

        def _int(name: str, default: int) -> int:
            val = _env(name)
            if val is None:
                return default
            try:
                return int(val)
            except ValueError:
                logger.warning(
                    "Invalid integer for %s%s=%s, using default %d",
                    prefix, name, val, default,
                )
                return default

        def _float(name: str, default: float) -> float:
            val = _env(name)
            if val is None:
                return default
            try:
                return float(val)
            except ValueError:
                logger.warning(
                    "Invalid float for %s%s=%s, using default %s",
                    prefix, name, val, default,
                )
                return default

        def _str(name: str, default: str) -> str:
            val = _env(name)
            if val is None:
                return default
            return val

        config = cls(
            default_horizon_years=_int(
                "DEFAULT_HORIZON_YEARS", cls.default_horizon_years,
            ),
            default_discount_rate=_float(
                "DEFAULT_DISCOUNT_RATE", cls.default_discount_rate,
            ),
            max_horizon_years=_int("MAX_HORIZON_YEARS", cls.max_horizon_years),
            default_reduction_target_percent=_float(
                "DEFAULT_REDUCTION_TARGET_PERCENT",
                cls.default_reduction_target_percent,
            ),
            max_scenarios_per_footprint=_int(
                "MAX_SCENARIOS_PER_FOOTPRINT", cls.max_scenarios_per_footprint,
            ),
            emission_factors_path=_str(
                "EMISSION_FACTORS_PATH", cls.emission_factors_path,
            ),
            compliance_rules_path=_str(
                "COMPLIANCE_RULES_PATH", cls.compliance_rules_path,
            ),
            strategy_catalog_path=_str(
                "STRATEGY_CATALOG_PATH", cls.strategy_catalog_path,
            ),
            benchmarks_path=_str("BENCHMARKS_PATH", cls.benchmarks_path),
            database_url=_str("DATABASE_URL", cls.database_url),
        )

        logger.info(
            "FootprintConfig loaded: horizon=%d, discount_rate=%.4f, "
            "target=%.1f%%, max_scenarios=%d",
            config.default_horizon_years,
            config.default_discount_rate,
            config.default_reduction_target_percent,
            config.max_scenarios_per_footprint,
        )
        return config


# ---------------------------------------------------------------------------
# Thread-safe accessor
# ---------------------------------------------------------------------------

_config_instance: Optional[FootprintConfig] = None
_config_lock = threading.Lock()


def get_config() -> FootprintConfig:
    """Return the shared FootprintConfig, creating it from env if needed."""
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = FootprintConfig.from_env()
    return _config_instance


def set_config(config: FootprintConfig) -> None:
    """Replace the shared FootprintConfig (useful for testing).

    Args:
        config: New configuration to install.
    """
    global _config_instance
    with _config_lock:
        _config_instance = config


def reset_config() -> None:
    """Drop the shared FootprintConfig so the next access re-reads the env."""
    global _config_instance
    with _config_lock:
        _config_instance = None
