"""
Greedy Irrigation Scheduler.

A single allocator covering both greedy configurations:

  - Single pass (use_time_constraints=False):
    * Walk fields in ranked order, fully satisfying each while water lasts
    * The first field that cannot be fully served gets all remaining water
      if that covers its minimum viable allocation, then allocation stops
    * At most one field receives a partial allocation

  - Time constrained (use_time_constraints=True):
    * Each field also needs time = ceil(water / delivery rate), at least 1
    * A field is scheduled when both budgets cover its minimum viable share
    * Water is clamped to remaining water, then time to remaining
      electricity, and allocation continues with the next field

Ranking (deficit-first or weighted priority) is applied by the caller.
"""
import logging
import math
from dataclasses import replace
from typing import List

from app.services.irrigation_models import (
    AllocationBudget,
    AllocationOutcome,
    ComputationError,
    FieldState,
    TraceEvent,
)
from app.services.irrigation_rules import MIN_VIABLE_DIVISOR

logger = logging.getLogger(__name__)


def minimum_viable_water(water_needed: int) -> int:
    """Smallest partial allocation worth scheduling (floor of 10% of need)."""
    return water_needed // MIN_VIABLE_DIVISOR


def calculate_time_needed(water: int, delivery_rate: int) -> int:
    """Time units to deliver the given water, never less than 1."""
    return max(1, math.ceil(water / delivery_rate))


def _ensure_budget(budget: AllocationBudget, use_time_constraints: bool):
    if budget.total_water < 0:
        raise ComputationError("Negative water budget reached allocator", details=f"total_water={budget.total_water}")
    if use_time_constraints and (budget.effective_electricity < 0 or budget.effective_delivery_rate <= 0):
        raise ComputationError(
            "Invalid time budget reached allocator",
            details=f"electricity={budget.effective_electricity}, rate={budget.effective_delivery_rate}"
        )


def _allocate_single_pass(ranked: List[FieldState], budget: AllocationBudget) -> AllocationOutcome:
    remaining_water = budget.total_water
    total_used = 0
    states = list(ranked)
    trace = []

    for i, state in enumerate(states):
        need = state.water_needed

        if remaining_water >= need:
            states[i] = replace(state, allocated=need, scheduled=True)
            remaining_water -= need
            total_used += need
            trace.append(TraceEvent(i, state.name, "full", water=need, remaining_water=remaining_water))
            logger.debug(f"[GREEDY] {state.name}: full allocation {need}, remaining={remaining_water}")
            continue

        if remaining_water > 0 and remaining_water >= minimum_viable_water(need):
            granted = remaining_water
            states[i] = replace(state, allocated=granted, scheduled=True)
            total_used += granted
            remaining_water = 0
            trace.append(TraceEvent(i, state.name, "partial", water=granted, remaining_water=0))
            logger.debug(f"[GREEDY] {state.name}: partial allocation {granted} of {need}, stopping")
        else:
            trace.append(TraceEvent(i, state.name, "stop", remaining_water=remaining_water))
            logger.debug(f"[GREEDY] {state.name}: below minimum viable allocation, stopping")
        break

    return AllocationOutcome(
        states=states,
        total_water_used=total_used,
        remaining_water=remaining_water,
        trace=trace,
    )


def _allocate_time_constrained(ranked: List[FieldState], budget: AllocationBudget) -> AllocationOutcome:
    rate = budget.effective_delivery_rate
    remaining_water = budget.total_water
    remaining_electricity = budget.effective_electricity
    total_water_used = 0
    total_time_used = 0
    states = [replace(s, time_needed=calculate_time_needed(s.water_needed, rate)) for s in ranked]
    trace = []

    for i, state in enumerate(states):
        min_water = minimum_viable_water(state.water_needed)
        min_time = math.ceil(min_water / rate)

        if remaining_water < min_water or remaining_electricity < min_time:
            trace.append(TraceEvent(
                i, state.name, "skipped",
                remaining_water=remaining_water, remaining_electricity=remaining_electricity
            ))
            logger.debug(
                f"[TIME GREEDY] {state.name}: skipped (needs {min_water} water / {min_time} time, "
                f"have {remaining_water} / {remaining_electricity})"
            )
            continue

        water = state.water_needed
        time = state.time_needed

        if water > remaining_water:
            water = remaining_water
            time = math.ceil(water / rate)

        if time > remaining_electricity:
            time = remaining_electricity
            water = min(time * rate, state.water_needed)

        states[i] = replace(state, allocated=water, scheduled=True, time_allocated=time)
        remaining_water -= water
        remaining_electricity -= time
        total_water_used += water
        total_time_used += time

        action = "full" if water == state.water_needed else "partial"
        trace.append(TraceEvent(
            i, state.name, action, water=water, time=time,
            remaining_water=remaining_water, remaining_electricity=remaining_electricity
        ))
        logger.debug(
            f"[TIME GREEDY] {state.name}: {action} allocation {water} water / {time} time, "
            f"remaining={remaining_water} / {remaining_electricity}"
        )

    return AllocationOutcome(
        states=states,
        total_water_used=total_water_used,
        remaining_water=remaining_water,
        total_time_used=total_time_used,
        remaining_electricity=remaining_electricity,
        trace=trace,
    )


def allocate_greedy(
    ranked: List[FieldState],
    budget: AllocationBudget,
    use_time_constraints: bool = False
) -> AllocationOutcome:
    """
    Allocate water greedily over already-ranked fields.

    Args:
        ranked: Fields in allocation order
        budget: Validated budget
        use_time_constraints: Request two-resource mode; only honoured when the
            budget carries a positive electricity budget and delivery rate

    Returns:
        AllocationOutcome with states in ranked order
    """
    use_time = use_time_constraints and budget.use_time_constraints
    _ensure_budget(budget, use_time)

    if use_time:
        return _allocate_time_constrained(ranked, budget)
    return _allocate_single_pass(ranked, budget)
