# -*- coding: utf-8 -*-
"""
Reduction Strategy Catalog

Static, industry-scoped catalog of emissions reduction measures loaded
from reference data at startup.

Example:
    >>> from carbonprospect.footprint.strategy_catalog import StrategyCatalog
    >>> catalog = StrategyCatalog.default()
    >>> [s.strategy_id for s in catalog.for_industry("office")][:2]
    ['energy-efficient-equipment-office', 'remote-work-policy']
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from carbonprospect.exceptions import ConfigurationError, StrategyNotFound
from carbonprospect.footprint.models import ReductionStrategy
from carbonprospect.footprint.reference_data import (
    REDUCTION_STRATEGIES_FILE,
    load_document,
    resolve_path,
)

logger = logging.getLogger(__name__)


def parse_catalog(document: Mapping[str, Any]) -> List[ReductionStrategy]:
    """Read ``industries: {name: [strategy, ...]}`` into strategy models.

    Raises:
        ConfigurationError: If an entry fails validation.
    """
    strategies: List[ReductionStrategy] = []
    for industry, entries in (document.get("industries") or {}).items():
        for entry in entries or []:
            try:
                strategies.append(
                    ReductionStrategy(industry=str(industry).lower(), **entry)
                )
            except (PydanticValidationError, TypeError) as exc:
                raise ConfigurationError(
                    f"Invalid strategy in industry '{industry}': {exc}",
                    component="StrategyCatalog",
                ) from exc
    return strategies


class StrategyCatalog:
    """Read-only lookup of reduction strategies by industry and id."""

    def __init__(self, strategies: Iterable[ReductionStrategy]) -> None:
        """Index strategies.

        Raises:
            ConfigurationError: If a strategy id appears twice.
        """
        self._by_id: Dict[str, ReductionStrategy] = {}
        self._by_industry: Dict[str, List[ReductionStrategy]] = {}
        for strategy in strategies:
            if strategy.strategy_id in self._by_id:
                raise ConfigurationError(
                    f"Duplicate strategy id '{strategy.strategy_id}'",
                    component="StrategyCatalog",
                )
            self._by_id[strategy.strategy_id] = strategy
            self._by_industry.setdefault(strategy.industry, []).append(strategy)

        logger.info(
            "StrategyCatalog initialized with %d strategies across %d industries",
            len(self._by_id), len(self._by_industry),
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> StrategyCatalog:
        return cls(parse_catalog(load_document(path)))

    @classmethod
    def default(cls, path: Optional[Union[str, Path]] = None) -> StrategyCatalog:
        """Build the catalog from the packaged table, or ``path`` if given."""
        return cls.from_file(resolve_path(path, REDUCTION_STRATEGIES_FILE))

    def industries(self) -> List[str]:
        return sorted(self._by_industry)

    def for_industry(self, industry: str) -> List[ReductionStrategy]:
        """Strategies for an industry in catalog order (empty if unknown)."""
        return list(self._by_industry.get(industry.lower(), []))

    def get(self, strategy_id: str, industry: str) -> ReductionStrategy:
        """Look up one strategy within an industry.

        Raises:
            StrategyNotFound: If the id is unknown or belongs to another
                industry.
        """
        strategy = self._by_id.get(strategy_id)
        if strategy is None or strategy.industry != industry.lower():
            raise StrategyNotFound(strategy_id, industry)
        return strategy

    def __len__(self) -> int:
        return len(self._by_id)


__all__ = ["StrategyCatalog", "parse_catalog"]
