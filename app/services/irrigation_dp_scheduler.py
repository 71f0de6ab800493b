"""
Dynamic Programming Irrigation Scheduler.

Knapsack-style allocation over a single water capacity. The value of giving
x units to a field is its moisture deficit scaled by the fraction of need
covered:

    value(i, x) = (100 - moisture_i) * (x / water_needed_i)

for ceil(water_needed_i / 10) <= x <= water_needed_i. The allocation that
maximises total value is recovered by backtracking a parent table.

Cost is O(fields * total_water * max(water_needed)); total_water and the
table steps must be bounded by the caller (see DP_MAX_WATER and
DP_MAX_WORK). The electricity budget is ignored.
"""
import logging
import math
from dataclasses import replace
from typing import Iterable, List

from app.services.irrigation_models import (
    AllocationBudget,
    AllocationOutcome,
    ComputationError,
    FieldRequest,
    FieldState,
    TraceEvent,
)
from app.services.irrigation_rules import MIN_VIABLE_DIVISOR

logger = logging.getLogger(__name__)

NEG_INF = float("-inf")
SKIP = -1


def dp_minimum_water(water_needed: int) -> int:
    return math.ceil(water_needed / MIN_VIABLE_DIVISOR)


def allocation_value(field: FieldRequest, water: int) -> float:
    """Deficit-weighted value of allocating `water` units to a field."""
    if field.water_needed <= 0 or water <= 0:
        return 0.0
    return (100 - field.moisture) * (water / field.water_needed)


def score_allocation(states: Iterable[FieldState]) -> float:
    """Total value of an allocation under the knapsack value model."""
    return sum(allocation_value(s.request, s.allocated) for s in states if s.scheduled)


def knapsack_work(fields: Iterable[FieldState], capacity: int) -> int:
    """Upper bound on table steps allocate_knapsack takes for these fields."""
    work = 0
    for f in fields:
        choices = 0
        if f.water_needed > 0:
            choices = max(0, min(f.water_needed, capacity) - dp_minimum_water(f.water_needed) + 1)
        work += (capacity + 1) * (1 + choices)
    return work


def allocate_knapsack(ranked: List[FieldState], budget: AllocationBudget) -> AllocationOutcome:
    """
    Compute the value-optimal allocation of budget.total_water.

    Args:
        ranked: Fields in deficit-first order
        budget: Validated budget (only total_water is used)

    Returns:
        AllocationOutcome with states in ranked order
    """
    capacity = budget.total_water
    if capacity < 0:
        raise ComputationError("Negative water budget reached allocator", details=f"total_water={capacity}")

    n = len(ranked)
    dp = [[NEG_INF] * (capacity + 1) for _ in range(n + 1)]
    parent = [[SKIP] * (capacity + 1) for _ in range(n + 1)]
    dp[0][0] = 0.0

    for i, state in enumerate(ranked):
        need = state.water_needed
        prev_row = dp[i]
        row = dp[i + 1]
        parent_row = parent[i + 1]

        if need == 0:
            # Satisfied with no water: carry every reachable cell forward as taken
            for w in range(capacity + 1):
                if prev_row[w] > NEG_INF:
                    row[w] = prev_row[w]
                    parent_row[w] = 0
            continue

        min_water = dp_minimum_water(need)
        deficit = 100 - state.moisture

        for w in range(capacity + 1):
            if prev_row[w] > row[w]:
                row[w] = prev_row[w]
                parent_row[w] = SKIP

            for x in range(min_water, min(need, w) + 1):
                base = prev_row[w - x]
                if base == NEG_INF:
                    continue
                candidate = base + deficit * (x / need)
                if candidate > row[w]:
                    row[w] = candidate
                    parent_row[w] = x

    best_w = 0
    best_value = NEG_INF
    for w in range(capacity + 1):
        if dp[n][w] > best_value:
            best_value = dp[n][w]
            best_w = w

    states = list(ranked)
    current_w = best_w
    for i in range(n - 1, -1, -1):
        x = parent[i + 1][current_w]
        if x >= 0:
            states[i] = replace(states[i], allocated=x, scheduled=True)
            current_w -= x

    if current_w != 0:
        raise ComputationError("Knapsack backtrack did not consume the chosen water", details=f"leftover={current_w}")

    trace = []
    remaining = capacity
    for i, state in enumerate(states):
        if not state.scheduled:
            trace.append(TraceEvent(i, state.name, "skipped", remaining_water=remaining))
            continue
        remaining -= state.allocated
        action = "full" if state.allocated == state.water_needed else "partial"
        trace.append(TraceEvent(i, state.name, action, water=state.allocated, remaining_water=remaining))

    logger.debug(f"[DP] best value {best_value:.4f} using {best_w} of {capacity} water")

    return AllocationOutcome(
        states=states,
        total_water_used=best_w,
        remaining_water=capacity - best_w,
        trace=trace,
    )
