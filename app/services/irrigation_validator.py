"""
Irrigation Request Validator.
Turns a raw scheduling request into a canonical field set and budget.

Rules are checked in order; the first violated rule rejects the whole
request. Fields without a usable name are dropped silently, while an
out-of-range moisture or water need on any field fails the request.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from app.services.irrigation_models import (
    AllocationBudget,
    FieldRequest,
    FieldState,
    ValidationError,
)
from app.services.irrigation_rules import (
    MAX_FIELDS,
    MIN_FIELDS,
    MAX_NAME_LENGTH,
    MAX_MOISTURE,
    MIN_MOISTURE,
)

logger = logging.getLogger(__name__)


def _as_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    """Return value as an int, the default when absent, or None when not integral."""
    if value is None:
        return default
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _optional_int(raw: Dict[str, Any], key: str, error: str) -> Optional[int]:
    value = raw.get(key)
    parsed = _as_int(value, default=None)
    if parsed is None and value is not None:
        logger.warning(f"Rejected request: {error.lower()} {value!r}")
        raise ValidationError(error, details=f"{key}={value!r}")
    return parsed


def _parse_field(candidate: Any, index: int) -> Optional[FieldState]:
    """Build a FieldState from one raw field, or None when it should be dropped."""
    if not isinstance(candidate, dict):
        return None

    name = candidate.get("name")
    if not name or not isinstance(name, str):
        logger.debug(f"Dropping field #{index}: missing name")
        return None
    name = name[:MAX_NAME_LENGTH]

    moisture = _as_int(candidate.get("moisture"))
    if moisture is None or moisture < MIN_MOISTURE or moisture > MAX_MOISTURE:
        logger.warning(f"Rejected request: invalid moisture level for field {name}: {candidate.get('moisture')!r}")
        raise ValidationError(
            "Invalid moisture level",
            details=f"field '{name}': {candidate.get('moisture')!r}"
        )

    water_needed = _as_int(candidate.get("waterNeeded"))
    if water_needed is None or water_needed < 0:
        logger.warning(f"Rejected request: invalid water needed for field {name}: {candidate.get('waterNeeded')!r}")
        raise ValidationError(
            "Invalid water needed",
            details=f"field '{name}': {candidate.get('waterNeeded')!r}"
        )

    return FieldState(
        request=FieldRequest(name=name, moisture=moisture, water_needed=water_needed),
        original_index=index,
    )


def parse_schedule_request(
    raw: Dict[str, Any],
    max_total_water: Optional[int] = None
) -> Tuple[List[FieldState], AllocationBudget]:
    """
    Validate a raw scheduling request.

    Args:
        raw: Request mapping with totalWater, optional totalElectricity,
            waterDeliveryRate and fieldCount, and a fields list
        max_total_water: Upper bound on totalWater (used by the DP allocator)

    Returns:
        Tuple of (fields in input order, budget)

    Raises:
        ValidationError: naming the first violated rule
    """
    if not isinstance(raw, dict):
        raise ValidationError("Invalid input data", details="request body must be an object")

    total_water = _as_int(raw.get("totalWater"))
    if total_water is None or total_water <= 0:
        logger.warning(f"Rejected request: invalid total water amount {raw.get('totalWater')!r}")
        raise ValidationError("Invalid total water amount", details=f"totalWater={raw.get('totalWater')!r}")

    raw_fields = raw.get("fields")
    default_count = len(raw_fields) if isinstance(raw_fields, list) else 0
    field_count = _as_int(raw.get("fieldCount"), default=default_count)
    if field_count is None or field_count < MIN_FIELDS or field_count > MAX_FIELDS:
        shown = raw.get("fieldCount", default_count)
        logger.warning(f"Rejected request: invalid field count {shown!r}")
        raise ValidationError("Invalid field count", details=f"fieldCount={shown!r}")

    if not isinstance(raw_fields, list):
        logger.warning("Rejected request: fields array not found")
        raise ValidationError("Fields array not found")

    fields = []
    for index, candidate in enumerate(raw_fields[:field_count]):
        state = _parse_field(candidate, index)
        if state is not None:
            fields.append(state)

    if not fields:
        logger.warning("Rejected request: every field was dropped")
        raise ValidationError("No valid fields supplied", details="every field was missing a name")

    budget = AllocationBudget(
        total_water=total_water,
        total_electricity=_optional_int(raw, "totalElectricity", "Invalid electricity budget"),
        water_delivery_rate=_optional_int(raw, "waterDeliveryRate", "Invalid water delivery rate"),
    )

    if max_total_water is not None and total_water > max_total_water:
        logger.warning(f"Rejected request: total water {total_water} exceeds DP capacity {max_total_water}")
        raise ValidationError(
            "Total water exceeds dynamic programming capacity",
            details=f"totalWater={total_water} > {max_total_water}"
        )

    logger.debug(f"Validated request: {len(fields)} field(s), total_water={budget.total_water}")
    return fields, budget
