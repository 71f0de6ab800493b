"""
Field ranking policies for irrigation allocation.

DEFICIT_FIRST: driest field first, larger water need breaks ties.
WEIGHTED_PRIORITY: moisture deficit scaled by a small efficiency bonus for
fields with lower water need; near-equal scores fall back to larger need.
"""
import logging
from dataclasses import replace
from functools import cmp_to_key
from typing import List

from app.services.irrigation_models import FieldRequest, FieldState, RankingPolicy
from app.services.irrigation_rules import PRIORITY_EFFICIENCY_SCALE, PRIORITY_TIE_EPSILON

logger = logging.getLogger(__name__)


def calculate_priority(field: FieldRequest) -> float:
    """
    Weighted priority score for a field.

    priority = (100 - moisture) * (1 + (1000 / water_needed) / 1000)

    A field with zero water need gets no efficiency bonus.
    """
    if field.water_needed > 0:
        efficiency = (PRIORITY_EFFICIENCY_SCALE / field.water_needed) / PRIORITY_EFFICIENCY_SCALE
    else:
        efficiency = 0.0
    return (100 - field.moisture) * (1 + efficiency)


def _compare_weighted(a: FieldState, b: FieldState) -> int:
    if abs(a.priority - b.priority) >= PRIORITY_TIE_EPSILON:
        return -1 if a.priority > b.priority else 1
    return b.water_needed - a.water_needed


def rank_fields(fields: List[FieldState], policy: RankingPolicy = RankingPolicy.DEFICIT_FIRST) -> List[FieldState]:
    """Return a new list of fields ordered by the given policy."""
    if policy == RankingPolicy.WEIGHTED_PRIORITY:
        scored = [replace(f, priority=calculate_priority(f.request)) for f in fields]
        ranked = sorted(scored, key=cmp_to_key(_compare_weighted))
    else:
        ranked = sorted(fields, key=lambda f: (f.moisture, -f.water_needed))

    logger.debug(f"Ranked {len(ranked)} field(s) by {policy.value}: {[f.name for f in ranked]}")
    return ranked
