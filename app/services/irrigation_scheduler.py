"""
Irrigation Scheduler Service
Validates a scheduling request, ranks fields and dispatches to an allocator.

ALGORITHMS:
  - greedy-basic: deficit-first ranking, single pass
  - greedy-weighted: weighted-priority ranking, single pass
  - time-constrained-greedy: deficit-first ranking, water + time budgets
  - time-constrained-weighted: weighted-priority ranking, water + time budgets
  - knapsack-dp: value-optimal allocation over water only

Legacy selectors from the first web client are accepted as aliases:
"greedy", "dynamic" and "genetic". The "genetic" label never performed an
evolutionary search; it maps to the plain greedy allocator.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from app.services.irrigation_dp_scheduler import allocate_knapsack, knapsack_work, score_allocation
from app.services.irrigation_greedy_scheduler import allocate_greedy
from app.services.irrigation_models import (
    AllocationBudget,
    AllocationOutcome,
    AllocationResult,
    FieldState,
    RankingPolicy,
    UnknownAlgorithmError,
    ValidationError,
)
from app.services.irrigation_ranking import rank_fields
from app.services.irrigation_result_formatter import format_result
from app.services.irrigation_rules import DP_MAX_WATER, DP_MAX_WORK
from app.services.irrigation_validator import parse_schedule_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlgorithmSpec:
    id: str
    name: str
    description: str
    policy: RankingPolicy
    use_time_constraints: bool = False
    knapsack: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "rankingPolicy": self.policy.value,
            "usesTimeBudget": self.use_time_constraints,
        }


ALGORITHMS: Dict[str, AlgorithmSpec] = {
    spec.id: spec for spec in (
        AlgorithmSpec(
            "greedy-basic", "Greedy",
            "Driest fields first; one partial allocation at most, then stop",
            RankingPolicy.DEFICIT_FIRST,
        ),
        AlgorithmSpec(
            "greedy-weighted", "Weighted Greedy",
            "Weighted priority score; one partial allocation at most, then stop",
            RankingPolicy.WEIGHTED_PRIORITY,
        ),
        AlgorithmSpec(
            "time-constrained-greedy", "Time-Constrained Greedy",
            "Driest fields first under both water and operating-time budgets",
            RankingPolicy.DEFICIT_FIRST, use_time_constraints=True,
        ),
        AlgorithmSpec(
            "time-constrained-weighted", "Time-Constrained Weighted Greedy",
            "Weighted priority score under both water and operating-time budgets",
            RankingPolicy.WEIGHTED_PRIORITY, use_time_constraints=True,
        ),
        AlgorithmSpec(
            "knapsack-dp", "Dynamic Programming",
            "Optimal deficit-weighted allocation of water; ignores the time budget",
            RankingPolicy.DEFICIT_FIRST, knapsack=True,
        ),
    )
}

LEGACY_ALIASES = {
    "greedy": "time-constrained-greedy",
    "dynamic": "knapsack-dp",
    "genetic": "greedy-basic",
}


def list_algorithms() -> List[Dict[str, Any]]:
    return [spec.to_dict() for spec in ALGORITHMS.values()]


def resolve_algorithm(selector: Optional[str]) -> AlgorithmSpec:
    """Map a selector (or legacy alias) to its AlgorithmSpec."""
    if not selector:
        raise UnknownAlgorithmError("No technique specified")

    key = str(selector).strip().lower()
    if key in LEGACY_ALIASES:
        logger.warning(f"Legacy technique '{key}' mapped to '{LEGACY_ALIASES[key]}'")
        key = LEGACY_ALIASES[key]

    spec = ALGORITHMS.get(key)
    if spec is None:
        raise UnknownAlgorithmError("Invalid technique specified", details=f"technique={selector!r}")
    return spec


def run_allocation(fields: List[FieldState], budget: AllocationBudget, spec: AlgorithmSpec) -> AllocationOutcome:
    """Rank the fields and run the allocator described by spec."""
    ranked = rank_fields(fields, spec.policy)
    if spec.knapsack:
        return allocate_knapsack(ranked, budget)
    return allocate_greedy(ranked, budget, use_time_constraints=spec.use_time_constraints)


def _ensure_knapsack_tractable(fields: List[FieldState], budget: AllocationBudget):
    work = knapsack_work(fields, budget.total_water)
    if work > DP_MAX_WORK:
        logger.warning(f"Rejected request: knapsack needs {work} steps, limit {DP_MAX_WORK}")
        raise ValidationError(
            "Total water exceeds dynamic programming capacity",
            details=f"{work} table steps > {DP_MAX_WORK}"
        )


def schedule_irrigation(
    raw: Dict[str, Any],
    algorithm: Optional[str] = None,
    include_trace: Optional[bool] = None
) -> AllocationResult:
    """
    Validate a raw request and allocate its water budget.

    Args:
        raw: Canonical request mapping
        algorithm: Selector; defaults to raw["algorithm"] or raw["technique"]
        include_trace: Attach trace events; defaults to raw["includeTrace"]

    Returns:
        AllocationResult

    Raises:
        ValidationError: request rejected before allocation
        ComputationError: internal invariant violated
    """
    if algorithm is None and isinstance(raw, dict):
        algorithm = raw.get("algorithm") or raw.get("technique")
    if include_trace is None:
        include_trace = bool(raw.get("includeTrace")) if isinstance(raw, dict) else False

    spec = resolve_algorithm(algorithm)
    fields, budget = parse_schedule_request(raw, max_total_water=DP_MAX_WATER if spec.knapsack else None)
    if spec.knapsack:
        _ensure_knapsack_tractable(fields, budget)

    logger.info(f"Scheduling {len(fields)} field(s) with {spec.id}, total_water={budget.total_water}")
    outcome = run_allocation(fields, budget, spec)
    return format_result(spec.id, fields, outcome, budget, include_trace=include_trace)


def compare_algorithms(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Run every algorithm on the same request and score each allocation.

    The request is validated once; an allocator that cannot run for this
    request (for example the knapsack capacity limit) is reported with its
    error instead of failing the comparison.
    """
    parse_schedule_request(raw)

    entries = []
    for spec in ALGORITHMS.values():
        try:
            result = schedule_irrigation(raw, algorithm=spec.id, include_trace=False)
        except ValidationError as e:
            logger.warning(f"Compare: {spec.id} unavailable: {e.message}")
            entries.append({"algorithm": spec.id, "value": None, **e.to_dict()})
            continue
        entries.append({
            "algorithm": spec.id,
            "value": round(score_allocation(result.scheduled), 4),
            "result": result.to_dict(),
        })

    scored = [e for e in entries if e["value"] is not None]
    best = max(scored, key=lambda e: e["value"])["algorithm"] if scored else None
    return {"results": entries, "best": best}
