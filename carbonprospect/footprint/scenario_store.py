# -*- coding: utf-8 -*-
"""
Scenario Store

Versioned persistence of footprint scenarios. Each footprint owns an
append-growing list of scenarios; every scenario is one JSON payload
holding the inputs and results of one assessment.

Concurrency model:
    - Last-writer-wins with field-level merge: the stored payload is read,
      merged and written inside the repository's critical section, so
      concurrent updates to different fields both survive.
    - No optimistic-concurrency token; concurrent updates to the same
      field keep whichever committed last.
    - ``revision`` is a store-wide write counter that orders writes which
      share an ``updated_at`` timestamp.

Example:
    >>> store = ScenarioStore(InMemoryScenarioRepository())
    >>> scenario = store.create_scenario("fp-1", "Baseline", {"industry": "office"})
    >>> store.update_scenario(scenario.scenario_id, {"reduction_target_percent": 30})
    >>> store.get_current("fp-1").has_emissions
    False
"""

from __future__ import annotations

import json
import logging
import threading
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from carbonprospect.exceptions import (
    CapacityExceeded,
    ScenarioNotFound,
    ValidationError,
)
from carbonprospect.footprint.config import FootprintConfig, get_config
from carbonprospect.footprint.metrics import record_operation, update_scenarios_count
from carbonprospect.footprint.models import (
    CurrentEmissions,
    EmissionsInventory,
    ImportResult,
    Scenario,
    ScenarioPayload,
    ScenarioUpdate,
)
from carbonprospect.footprint.payload import (
    SCHEMA_VERSION,
    decode_payload,
    encode_payload,
    merge_payload,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Persistence shape and repository contract
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScenarioRecord:
    """Scenario row as stored by a repository."""

    scenario_id: str
    footprint_id: str
    name: str
    payload: str
    schema_version: int
    created_at: datetime
    updated_at: datetime
    revision: int = 0
    sequence: int = 0


class ScenarioRepository(ABC):
    """Storage backend for scenario records.

    Implementations assign ``revision`` on every write and ``sequence`` on
    insert, both from store-wide increasing counters.
    """

    @abstractmethod
    def insert(self, record: ScenarioRecord) -> ScenarioRecord:
        """Store a new record and return it with counters assigned."""

    @abstractmethod
    def get(self, scenario_id: str) -> Optional[ScenarioRecord]:
        """Return the record or None."""

    @abstractmethod
    def merge(
        self,
        scenario_id: str,
        update: ScenarioUpdate,
        updated_at: datetime,
    ) -> Optional[ScenarioRecord]:
        """Atomically merge ``update`` into the stored payload.

        Returns:
            The updated record, or None if the scenario does not exist.
        """

    @abstractmethod
    def list_for_footprint(self, footprint_id: str) -> List[ScenarioRecord]:
        """Records for a footprint in creation order."""

    @abstractmethod
    def delete(self, scenario_id: str) -> bool:
        """Remove a record; False if it did not exist."""

    @abstractmethod
    def count(self, footprint_id: Optional[str] = None) -> int:
        """Number of records, optionally for one footprint."""


class InMemoryScenarioRepository(ScenarioRepository):
    """Dictionary-backed repository guarded by a single lock."""

    def __init__(self) -> None:
        self._records: Dict[str, ScenarioRecord] = {}
        self._lock = threading.RLock()
        self._revision = 0
        self._sequence = 0

    def insert(self, record: ScenarioRecord) -> ScenarioRecord:
        with self._lock:
            self._revision += 1
            self._sequence += 1
            stored = replace(record, revision=self._revision, sequence=self._sequence)
            self._records[stored.scenario_id] = stored
            return stored

    def get(self, scenario_id: str) -> Optional[ScenarioRecord]:
        with self._lock:
            return self._records.get(scenario_id)

    def merge(
        self,
        scenario_id: str,
        update: ScenarioUpdate,
        updated_at: datetime,
    ) -> Optional[ScenarioRecord]:
        with self._lock:
            record = self._records.get(scenario_id)
            if record is None:
                return None
            payload, version = merge_payload(record.payload, record.schema_version, update)
            self._revision += 1
            stored = replace(
                record,
                payload=payload,
                schema_version=version,
                updated_at=updated_at,
                revision=self._revision,
            )
            self._records[scenario_id] = stored
            return stored

    def list_for_footprint(self, footprint_id: str) -> List[ScenarioRecord]:
        with self._lock:
            records = [r for r in self._records.values() if r.footprint_id == footprint_id]
        return sorted(records, key=lambda r: r.sequence)

    def delete(self, scenario_id: str) -> bool:
        with self._lock:
            return self._records.pop(scenario_id, None) is not None

    def count(self, footprint_id: Optional[str] = None) -> int:
        with self._lock:
            if footprint_id is None:
                return len(self._records)
            return sum(1 for r in self._records.values() if r.footprint_id == footprint_id)


# ---------------------------------------------------------------------------
# ScenarioStore
# ---------------------------------------------------------------------------


def _validation_error(exc: PydanticValidationError, model: str) -> ValidationError:
    invalid = {
        ".".join(str(part) for part in error["loc"]) or "<root>": error["msg"]
        for error in exc.errors()
    }
    return ValidationError(
        f"Invalid {model}: {', '.join(sorted(invalid))}",
        component="ScenarioStore",
        invalid_fields=invalid,
    )


class ScenarioStore:
    """Scenario CRUD, current-emissions lookup, and import/export.

    Attributes:
        repository: Storage backend.
        config: Supplies the default reduction target and capacity limit.
        clock: Timestamp source for created_at/updated_at.
    """

    def __init__(
        self,
        repository: ScenarioRepository,
        config: Optional[FootprintConfig] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.repository = repository
        self.config = config or get_config()
        self.clock = clock or _utcnow

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _to_scenario(record: ScenarioRecord) -> Scenario:
        data, warnings = decode_payload(
            record.payload, record.schema_version, record.scenario_id,
        )
        return Scenario(
            scenario_id=record.scenario_id,
            footprint_id=record.footprint_id,
            name=record.name,
            created_at=record.created_at,
            updated_at=record.updated_at,
            revision=record.revision,
            schema_version=record.schema_version,
            data=data,
            warnings=warnings,
        )

    @staticmethod
    def _coerce(
        data: Union[None, Mapping[str, Any], ScenarioPayload],
        model: type,
    ) -> ScenarioPayload:
        if data is None:
            return model()
        if isinstance(data, model):
            return data
        if isinstance(data, ScenarioPayload):
            data = data.model_dump(exclude_unset=True)
        try:
            return model.model_validate(dict(data))
        except PydanticValidationError as exc:
            raise _validation_error(exc, model.__name__) from exc

    def _insert(
        self,
        footprint_id: str,
        name: str,
        payload: str,
        schema_version: int,
    ) -> ScenarioRecord:
        limit = self.config.max_scenarios_per_footprint
        if self.repository.count(footprint_id) >= limit:
            raise CapacityExceeded(footprint_id, limit)
        now = self.clock()
        record = self.repository.insert(ScenarioRecord(
            scenario_id=str(uuid.uuid4()),
            footprint_id=footprint_id,
            name=name,
            payload=payload,
            schema_version=schema_version,
            created_at=now,
            updated_at=now,
        ))
        update_scenarios_count(self.repository.count())
        return record

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_scenario(
        self,
        footprint_id: str,
        name: str,
        data: Union[None, Mapping[str, Any], ScenarioPayload] = None,
    ) -> Scenario:
        """Create a scenario for a footprint.

        Args:
            footprint_id: Owning footprint.
            name: Display name.
            data: Initial payload fields.

        Returns:
            The stored Scenario.

        Raises:
            ValidationError: If ``data`` has unknown or invalid fields.
            CapacityExceeded: If the footprint is at its scenario limit.
        """
        start = time.monotonic()
        payload = self._coerce(data, ScenarioPayload)
        record = self._insert(
            footprint_id, name, encode_payload(payload.to_fields()), SCHEMA_VERSION,
        )
        record_operation("create_scenario", "success", time.monotonic() - start)
        logger.info(
            "Created scenario %s (%s) for footprint %s",
            record.scenario_id, name, footprint_id,
        )
        return self._to_scenario(record)

    def update_scenario(
        self,
        scenario_id: str,
        merge_fields: Union[None, Mapping[str, Any], ScenarioUpdate],
    ) -> Scenario:
        """Merge fields into a scenario's payload.

        Fields not present in ``merge_fields`` are preserved. An empty
        update leaves the payload untouched and only advances
        ``updated_at``.

        Raises:
            ValidationError: If ``merge_fields`` has unknown or invalid fields.
            ScenarioNotFound: If the scenario does not exist.
        """
        start = time.monotonic()
        update = self._coerce(merge_fields, ScenarioUpdate)
        record = self.repository.merge(scenario_id, update, self.clock())
        if record is None:
            record_operation("update_scenario", "not_found", time.monotonic() - start)
            raise ScenarioNotFound(scenario_id)
        record_operation("update_scenario", "success", time.monotonic() - start)
        logger.debug(
            "Updated scenario %s fields=%s", scenario_id, sorted(update.to_fields()),
        )
        return self._to_scenario(record)

    def get_scenario(self, scenario_id: str) -> Scenario:
        """Fetch one scenario.

        Raises:
            ScenarioNotFound: If the scenario does not exist.
        """
        record = self.repository.get(scenario_id)
        if record is None:
            raise ScenarioNotFound(scenario_id)
        return self._to_scenario(record)

    def list_scenarios(self, footprint_id: str) -> List[Scenario]:
        """All scenarios of a footprint in creation order."""
        return [
            self._to_scenario(r) for r in self.repository.list_for_footprint(footprint_id)
        ]

    def delete_scenario(self, scenario_id: str) -> None:
        """Delete a scenario.

        Raises:
            ScenarioNotFound: If the scenario does not exist.
        """
        if not self.repository.delete(scenario_id):
            raise ScenarioNotFound(scenario_id)
        update_scenarios_count(self.repository.count())
        logger.info("Deleted scenario %s", scenario_id)

    def get_current(self, footprint_id: str) -> CurrentEmissions:
        """Latest computed emissions for a footprint.

        Picks the most recently updated scenario that holds an inventory;
        ties on ``updated_at`` go to the later write. When no scenario has
        an inventory, returns an explicit empty result with a zero
        inventory and the default reduction target.
        """
        candidates = [
            s for s in self.list_scenarios(footprint_id) if s.has_inventory
        ]
        default_target = self.config.default_reduction_target_percent
        if not candidates:
            return CurrentEmissions(
                footprint_id=footprint_id,
                has_emissions=False,
                inventory=EmissionsInventory.empty(),
                reduction_target_percent=default_target,
            )

        current = max(candidates, key=lambda s: (s.updated_at, s.revision))
        target = current.data.reduction_target_percent
        return CurrentEmissions(
            footprint_id=footprint_id,
            has_emissions=True,
            scenario_id=current.scenario_id,
            scenario_name=current.name,
            inventory=current.data.inventory,
            reduction_target_percent=default_target if target is None else target,
            updated_at=current.updated_at,
            warnings=current.warnings,
        )

    # ------------------------------------------------------------------
    # Copy, export and import
    # ------------------------------------------------------------------

    def duplicate_scenario(self, scenario_id: str, name: Optional[str] = None) -> Scenario:
        """Copy a scenario's stored payload into a new scenario.

        Raises:
            ScenarioNotFound: If the source scenario does not exist.
            CapacityExceeded: If the footprint is at its scenario limit.
        """
        source = self.repository.get(scenario_id)
        if source is None:
            raise ScenarioNotFound(scenario_id)
        record = self._insert(
            source.footprint_id,
            name or f"{source.name} (Copy)",
            source.payload,
            source.schema_version,
        )
        logger.info("Duplicated scenario %s as %s", scenario_id, record.scenario_id)
        return self._to_scenario(record)

    def export_scenarios(self, footprint_id: str) -> str:
        """Serialize a footprint's scenarios to a JSON array."""
        items = []
        for scenario in self.list_scenarios(footprint_id):
            items.append({
                "name": scenario.name,
                "schema_version": SCHEMA_VERSION,
                "created_at": scenario.created_at.isoformat(),
                "updated_at": scenario.updated_at.isoformat(),
                "data": scenario.data.to_fields(),
            })
        return json.dumps(items, indent=2, sort_keys=True)

    def import_scenarios(self, footprint_id: str, text: str) -> ImportResult:
        """Create scenarios from an exported JSON array.

        Items without a ``schema_version`` are treated as legacy payloads
        and migrated on read. Items without a ``data`` object are
        skipped with a warning, as are items whose schema version falls
        outside ``0..SCHEMA_VERSION``.

        Raises:
            ValidationError: If ``text`` is not a JSON array.
        """
        try:
            items = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValidationError(
                f"Import is not valid JSON: {exc.msg}",
                component="ScenarioStore",
            ) from exc
        if not isinstance(items, list):
            raise ValidationError(
                "Import must be a JSON array of scenarios",
                component="ScenarioStore",
            )

        result = ImportResult()
        for index, item in enumerate(items):
            if not isinstance(item, dict) or not isinstance(item.get("data"), dict):
                result.skipped += 1
                result.warnings.append(f"Item {index} has no data object; skipped")
                continue
            version = item.get("schema_version", 0)
            if (
                not isinstance(version, int)
                or isinstance(version, bool)
                or not 0 <= version <= SCHEMA_VERSION
            ):
                result.skipped += 1
                result.warnings.append(f"Item {index} has an invalid schema_version; skipped")
                continue
            try:
                record = self._insert(
                    footprint_id,
                    str(item.get("name") or "Imported Scenario"),
                    encode_payload(item["data"]),
                    version,
                )
            except CapacityExceeded:
                remaining = len(items) - index
                result.skipped += remaining
                result.warnings.append(
                    f"Scenario limit reached; {remaining} item(s) not imported"
                )
                break
            result.imported.append(record.scenario_id)

        for warning in result.warnings:
            logger.warning("Scenario import for %s: %s", footprint_id, warning)
        logger.info(
            "Imported %d scenario(s) into footprint %s", len(result.imported), footprint_id,
        )
        return result


__all__ = [
    "ScenarioRecord",
    "ScenarioRepository",
    "InMemoryScenarioRepository",
    "ScenarioStore",
]
