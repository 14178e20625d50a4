# -*- coding: utf-8 -*-
"""
Reference Data Files

Locates the packaged YAML tables and reads JSON or YAML documents by
file suffix.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from carbonprospect.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"

EMISSION_FACTORS_FILE = "emission_factors.yaml"
COMPLIANCE_RULES_FILE = "compliance_rules.yaml"
REDUCTION_STRATEGIES_FILE = "reduction_strategies.yaml"
INDUSTRY_BENCHMARKS_FILE = "industry_benchmarks.yaml"


def resolve_path(override: Optional[Union[str, Path]], filename: str) -> Path:
    """Return ``override`` if set, otherwise the packaged file."""
    if override:
        return Path(override)
    return DATA_DIR / filename


def load_document(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a JSON or YAML mapping from disk.

    Raises:
        ConfigurationError: If the file is missing, unreadable, has an
            unsupported suffix, or does not contain a mapping.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            elif path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                raise ConfigurationError(
                    f"Unsupported reference data format: {path.suffix}",
                    source=str(path),
                )
    except OSError as exc:
        raise ConfigurationError(
            f"Cannot read reference data: {exc}", source=str(path),
        ) from exc
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(
            f"Cannot parse reference data: {exc}", source=str(path),
        ) from exc

    if not isinstance(data, dict):
        raise ConfigurationError(
            "Reference data must be a mapping at the top level",
            source=str(path),
        )
    logger.debug("Loaded reference data from %s", path)
    return data
