"""
Tests for the knapsack irrigation allocator.
"""
import itertools

import pytest
from app.services.irrigation_dp_scheduler import (
    allocate_knapsack,
    allocation_value,
    dp_minimum_water,
    knapsack_work,
    score_allocation,
)
from app.services.irrigation_greedy_scheduler import allocate_greedy
from app.services.irrigation_models import (
    AllocationBudget,
    ComputationError,
    FieldRequest,
    FieldState,
)
from app.services.irrigation_ranking import rank_fields


def build_fields(*specs):
    return [
        FieldState(request=FieldRequest(name, moisture, need), original_index=i)
        for i, (name, moisture, need) in enumerate(specs)
    ]


def allocations(outcome):
    return {s.name: s.allocated for s in outcome.states if s.scheduled}


def brute_force_best(fields, capacity):
    """Exhaustive best value over x in {0} U [ceil(need/10), need] for every field."""
    choices = [[0] + list(range(dp_minimum_water(f.water_needed), f.water_needed + 1)) for f in fields]
    best = 0.0
    for combo in itertools.product(*choices):
        if sum(combo) > capacity:
            continue
        value = sum(allocation_value(f.request, x) for f, x in zip(fields, combo))
        best = max(best, value)
    return best


class TestValueModel:

    def test_minimum_water_rounds_up(self):
        assert dp_minimum_water(20) == 2
        assert dp_minimum_water(15) == 2
        assert dp_minimum_water(5) == 1

    def test_value_scales_with_coverage(self):
        assert allocation_value(FieldRequest("A", 30, 20), 10) == pytest.approx(35.0)
        assert allocation_value(FieldRequest("A", 30, 20), 20) == pytest.approx(70.0)

    def test_zero_need_has_no_value(self):
        assert allocation_value(FieldRequest("A", 0, 0), 0) == 0.0

    def test_score_ignores_unscheduled_states(self):
        states = build_fields(("A", 10, 100))
        assert score_allocation(states) == 0.0


class TestKnapsack:

    def test_two_fields_match_exhaustive_search(self):
        fields = rank_fields(build_fields(("A", 30, 20), ("B", 60, 20)))
        outcome = allocate_knapsack(fields, AllocationBudget(total_water=10))

        assert outcome.total_water_used <= 10
        assert score_allocation(outcome.states) == pytest.approx(brute_force_best(fields, 10))
        assert allocations(outcome) == {"A": 10}
        assert outcome.remaining_water == 0

    def test_three_fields_match_exhaustive_search(self):
        fields = rank_fields(build_fields(("A", 10, 12), ("B", 45, 9), ("C", 70, 15)))
        outcome = allocate_knapsack(fields, AllocationBudget(total_water=20))

        assert outcome.total_water_used <= 20
        assert score_allocation(outcome.states) == pytest.approx(brute_force_best(fields, 20))

    def test_beats_greedy_when_driest_field_is_expensive(self):
        fields = rank_fields(build_fields(("A", 10, 100), ("B", 20, 50), ("C", 30, 50)))
        budget = AllocationBudget(total_water=100)

        dp = allocate_knapsack(fields, budget)
        greedy = allocate_greedy(fields, budget)

        assert allocations(dp) == {"B": 50, "C": 50}
        assert score_allocation(dp.states) == pytest.approx(150.0)
        assert score_allocation(greedy.states) == pytest.approx(90.0)

    def test_allocations_respect_minimum_and_need(self):
        fields = rank_fields(build_fields(("A", 10, 40), ("B", 20, 30), ("C", 50, 70)))
        outcome = allocate_knapsack(fields, AllocationBudget(total_water=55))

        for s in outcome.states:
            if s.scheduled:
                assert dp_minimum_water(s.water_needed) <= s.allocated <= s.water_needed
        assert sum(s.allocated for s in outcome.states) == outcome.total_water_used

    def test_zero_need_field_scheduled_with_nothing(self):
        fields = rank_fields(build_fields(("Idle", 5, 0), ("A", 10, 20)))
        outcome = allocate_knapsack(fields, AllocationBudget(total_water=30))

        assert allocations(outcome) == {"Idle": 0, "A": 20}
        assert outcome.remaining_water == 10

    def test_time_budget_ignored(self):
        fields = rank_fields(build_fields(("A", 10, 100)))
        budget = AllocationBudget(total_water=100, total_electricity=1, water_delivery_rate=1)
        outcome = allocate_knapsack(fields, budget)

        assert allocations(outcome) == {"A": 100}
        assert outcome.total_time_used is None
        assert outcome.remaining_electricity is None

    def test_trace_covers_every_field(self):
        fields = rank_fields(build_fields(("A", 10, 100), ("B", 20, 50), ("C", 30, 50)))
        outcome = allocate_knapsack(fields, AllocationBudget(total_water=100))

        assert [(e.field_name, e.action) for e in outcome.trace] == [
            ("A", "skipped"), ("B", "full"), ("C", "full")
        ]

    def test_negative_budget_raises(self):
        with pytest.raises(ComputationError):
            allocate_knapsack(build_fields(("A", 10, 20)), AllocationBudget(total_water=-1))

    def test_trace_reports_running_remainder(self):
        fields = rank_fields(build_fields(("A", 10, 100), ("B", 20, 50), ("C", 30, 50)))
        outcome = allocate_knapsack(fields, AllocationBudget(total_water=120))

        assert [(e.field_name, e.action, e.remaining_water) for e in outcome.trace] == [
            ("A", "partial", 100), ("B", "full", 50), ("C", "full", 0)
        ]


class TestKnapsackWork:

    def test_counts_water_cells_and_choices(self):
        # need 20 at capacity 10: choices 2..10 plus the skip step, over 11 water cells
        fields = build_fields(("A", 10, 20))
        assert knapsack_work(fields, 10) == 11 * (1 + 9)

    def test_zero_need_costs_one_pass(self):
        assert knapsack_work(build_fields(("Idle", 10, 0)), 99) == 100

    def test_grows_with_capacity_and_need(self):
        small = knapsack_work(build_fields(*[(f"F{i}", 10, 200) for i in range(10)]), 200)
        large = knapsack_work(build_fields(*[(f"F{i}", 10, 2000) for i in range(10)]), 2000)
        assert large > 50 * small
