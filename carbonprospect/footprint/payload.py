# -*- coding: utf-8 -*-
"""
Scenario Payload Codec

Serializes scenario payloads to deterministic JSON text, merges partial
updates into stored text, and reads stored text back into a typed
ScenarioPayload.

Reading never fails: an unparsable or non-object payload becomes an
empty payload and an individually invalid field is dropped. Each
recovery is logged at WARNING and returned as a structured warning.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from carbonprospect.exceptions import MalformedScenarioPayload
from carbonprospect.footprint.metrics import record_payload_recovery
from carbonprospect.footprint.migrations import SCHEMA_VERSION, migrate
from carbonprospect.footprint.models import ScenarioPayload, ScenarioUpdate

logger = logging.getLogger(__name__)


def encode_payload(fields: Dict[str, Any]) -> str:
    """Deterministic JSON text for a payload mapping."""
    return json.dumps(fields, sort_keys=True, separators=(",", ":"))


def _raw_mapping(text: Optional[str]) -> Optional[Dict[str, Any]]:
    if text is None or text == "":
        return {}
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return data if isinstance(data, dict) else None


def _recover(
    scenario_id: Optional[str],
    reason: str,
    field: Optional[str] = None,
) -> Dict[str, Any]:
    issue = MalformedScenarioPayload(scenario_id, reason, field=field)
    logger.warning("%s", issue.message)
    record_payload_recovery("field" if field else "payload")
    return issue.to_warning()


def decode_payload(
    text: Optional[str],
    schema_version: int = SCHEMA_VERSION,
    scenario_id: Optional[str] = None,
) -> Tuple[ScenarioPayload, List[Dict[str, Any]]]:
    """Read stored payload text into a ScenarioPayload.

    Args:
        text: Stored JSON text.
        schema_version: Version the text was written with.
        scenario_id: Used in warning messages.

    Returns:
        Tuple of the recovered payload and the list of warnings.
    """
    warnings: List[Dict[str, Any]] = []
    data = _raw_mapping(text)
    if data is None:
        warnings.append(_recover(scenario_id, "payload is not a JSON object"))
        return ScenarioPayload(), warnings

    try:
        data = migrate(data, schema_version)
    except ValueError as exc:
        warnings.append(_recover(scenario_id, str(exc)))
        return ScenarioPayload(), warnings

    kept: Dict[str, Any] = {}
    for key, value in data.items():
        try:
            validated = ScenarioPayload.model_validate({key: value})
        except PydanticValidationError as exc:
            reason = exc.errors()[0].get("msg", "invalid value") if exc.errors() else "invalid value"
            warnings.append(_recover(scenario_id, reason, field=key))
            continue
        kept[key] = getattr(validated, key)

    return ScenarioPayload(**kept), warnings


def merge_payload(
    text: Optional[str],
    schema_version: int,
    update: ScenarioUpdate,
) -> Tuple[str, int]:
    """Shallow-merge an update into stored payload text.

    Fields absent from the update are preserved as stored. An update with
    no fields returns the stored text and version unchanged.

    Returns:
        Tuple of the new payload text and its schema version.
    """
    fields = update.to_fields()
    if not fields:
        return text if text is not None else encode_payload({}), schema_version

    data = _raw_mapping(text)
    if data is None:
        logger.warning("Discarding unreadable stored payload during merge")
        record_payload_recovery("payload")
        data = {}
    try:
        data = migrate(data, schema_version)
    except ValueError as exc:
        logger.warning("Discarding stored payload during merge: %s", exc)
        record_payload_recovery("payload")
        data = {}
    data.update(fields)
    return encode_payload(data), SCHEMA_VERSION


__all__ = ["encode_payload", "decode_payload", "merge_payload", "SCHEMA_VERSION"]
