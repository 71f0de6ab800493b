#!/usr/bin/env python3
"""
Irrigation Scheduler Validation Script
Runs randomized scenarios against every algorithm and checks allocation invariants.
"""
import sys
import os
import random
import json
from typing import List, Dict, Any

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from app.services.irrigation_dp_scheduler import score_allocation
from app.services.irrigation_scheduler import ALGORITHMS, schedule_irrigation

FIELD_NAMES = ["North Orchard", "South Terrace", "Greenhouse 1", "Greenhouse 2", "Vineyard",
               "Corn Block", "Potato Rows", "Berry Patch", "Nursery", "Pasture"]

SCENARIOS = 200
SEED = 42


def build_request(rng: random.Random) -> Dict[str, Any]:
    field_count = rng.randint(1, 10)
    request = {
        "totalWater": rng.randint(1, 600),
        "fields": [
            {
                "name": FIELD_NAMES[i],
                "moisture": rng.randint(0, 100),
                # Multiples of 10 keep greedy allocations inside the DP feasible set
                "waterNeeded": rng.randint(0, 20) * 10,
            }
            for i in range(field_count)
        ],
    }
    if rng.random() < 0.6:
        request["totalElectricity"] = rng.randint(1, 40)
        request["waterDeliveryRate"] = rng.randint(1, 25)
    return request


def check_result(request: Dict[str, Any], result) -> List[str]:
    errors = []
    total_water = request["totalWater"]
    allocated = sum(f.allocated for f in result.scheduled)

    if allocated > total_water:
        errors.append(f"allocated {allocated} exceeds budget {total_water}")
    if result.total_water_used != allocated:
        errors.append(f"totalWaterUsed {result.total_water_used} != sum {allocated}")
    if result.remaining_water != total_water - allocated:
        errors.append(f"remainingWater {result.remaining_water} != {total_water - allocated}")

    for f in result.scheduled:
        if not 0 <= f.allocated <= f.water_needed:
            errors.append(f"{f.name}: allocated {f.allocated} outside [0, {f.water_needed}]")

    names = [f["name"] for f in request["fields"]]
    order = [names.index(f.name) for f in result.scheduled]
    if order != sorted(order):
        errors.append(f"output order {order} differs from input order")

    return errors


def run_validation() -> Dict[str, Any]:
    rng = random.Random(SEED)
    summary = {alg: {"passed": 0, "failed": 0, "errors": []} for alg in ALGORITHMS}
    knapsack_not_best = 0

    for scenario_id in range(SCENARIOS):
        request = build_request(rng)
        values = {}

        for alg in ALGORITHMS:
            result = schedule_irrigation(request, algorithm=alg)
            errors = check_result(request, result)

            repeat = schedule_irrigation(request, algorithm=alg)
            if repeat.to_dict() != result.to_dict():
                errors.append("result not reproducible")

            if errors:
                summary[alg]["failed"] += 1
                summary[alg]["errors"].append({"scenario": scenario_id, "errors": errors})
            else:
                summary[alg]["passed"] += 1
            values[alg] = score_allocation(result.scheduled)

        if values["knapsack-dp"] + 1e-9 < max(values.values()):
            knapsack_not_best += 1

    return {"scenarios": SCENARIOS, "algorithms": summary, "knapsack_not_best": knapsack_not_best}


def main():
    report = run_validation()

    print("=" * 60)
    print("IRRIGATION SCHEDULER VALIDATION")
    print("=" * 60)
    for alg, stats in report["algorithms"].items():
        print(f"  {alg:<28} passed={stats['passed']:<4} failed={stats['failed']}")
    print(f"  Knapsack below another algorithm: {report['knapsack_not_best']}")

    failures = sum(s["failed"] for s in report["algorithms"].values()) + report["knapsack_not_best"]
    if failures:
        print(json.dumps(report, indent=2, default=str))
        sys.exit(1)
    print("All scenarios passed.")


if __name__ == "__main__":
    main()
