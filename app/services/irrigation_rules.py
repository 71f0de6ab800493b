"""
Deterministic allocation rules and thresholds for irrigation scheduling.

This module centralizes constants so allocation logic can remain
deterministic, auditable, and consistent across services and tests.
"""
import os

MAX_FIELDS = 10
MIN_FIELDS = 1
MAX_NAME_LENGTH = 99

MAX_MOISTURE = 100
MIN_MOISTURE = 0

# A partial allocation is only worth scheduling when it covers need / 10
MIN_VIABLE_DIVISOR = 10

PRIORITY_TIE_EPSILON = 0.01
PRIORITY_DECIMALS = 2
PRIORITY_EFFICIENCY_SCALE = 1000

DEFAULT_ELECTRICITY = int(os.environ.get("IRRIGATION_DEFAULT_ELECTRICITY", "1000"))
DEFAULT_DELIVERY_RATE = int(os.environ.get("IRRIGATION_DEFAULT_DELIVERY_RATE", "50"))

# Knapsack bounds: water capacity and total (field, water, allocation) steps
DP_MAX_WATER = int(os.environ.get("IRRIGATION_DP_MAX_WATER", "5000"))
DP_MAX_WORK = int(os.environ.get("IRRIGATION_DP_MAX_WORK", "2000000"))
