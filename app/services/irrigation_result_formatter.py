"""
Result formatting for irrigation allocations.
Restores input order, keeps scheduled fields only and checks result invariants.
"""
import logging
from dataclasses import replace
from typing import List

from app.services.irrigation_models import (
    AllocationBudget,
    AllocationOutcome,
    AllocationResult,
    ComputationError,
    FieldState,
)
from app.services.irrigation_rules import PRIORITY_DECIMALS

logger = logging.getLogger(__name__)


def _check_invariants(states: List[FieldState], outcome: AllocationOutcome, budget: AllocationBudget):
    allocated_sum = sum(s.allocated for s in states)

    for s in states:
        if s.allocated < 0 or s.allocated > s.water_needed:
            raise ComputationError(
                "Allocation outside field bounds",
                details=f"field '{s.name}': allocated={s.allocated}, need={s.water_needed}"
            )

    if allocated_sum != outcome.total_water_used:
        raise ComputationError(
            "Allocated water does not match reported usage",
            details=f"sum={allocated_sum}, reported={outcome.total_water_used}"
        )

    if allocated_sum > budget.total_water or outcome.remaining_water != budget.total_water - allocated_sum:
        raise ComputationError(
            "Water budget exceeded",
            details=f"used={allocated_sum}, remaining={outcome.remaining_water}, total={budget.total_water}"
        )


def format_result(
    algorithm: str,
    fields: List[FieldState],
    outcome: AllocationOutcome,
    budget: AllocationBudget,
    include_trace: bool = False
) -> AllocationResult:
    """
    Shape an allocator outcome into the canonical result.

    Args:
        algorithm: Selector id reported to the caller
        fields: Validated fields in input order
        outcome: Allocator output (states in ranked order)
        budget: Budget the allocator ran with
        include_trace: Attach the allocator's trace events

    Returns:
        AllocationResult with scheduled fields in input order
    """
    _check_invariants(outcome.states, outcome, budget)

    by_index = {s.original_index: s for s in outcome.states}
    if len(by_index) != len(fields):
        raise ComputationError(
            "Allocator lost track of fields",
            details=f"expected {len(fields)}, got {len(by_index)}"
        )

    scheduled = []
    for f in fields:
        state = by_index[f.original_index]
        if not state.scheduled:
            continue
        if state.priority is not None:
            state = replace(state, priority=round(state.priority, PRIORITY_DECIMALS))
        scheduled.append(state)

    logger.info(
        f"{algorithm}: scheduled {len(scheduled)}/{len(fields)} field(s), "
        f"used {outcome.total_water_used} of {budget.total_water} water"
    )

    return AllocationResult(
        algorithm=algorithm,
        scheduled=scheduled,
        total_water_used=outcome.total_water_used,
        remaining_water=outcome.remaining_water,
        total_time_used=outcome.total_time_used,
        remaining_electricity=outcome.remaining_electricity,
        trace=list(outcome.trace) if include_trace else None,
    )
