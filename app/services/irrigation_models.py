"""
Shared data model for the irrigation scheduler.

Input records are immutable; allocators derive new FieldState entries with
dataclasses.replace instead of mutating a shared list.
"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional

from app.services.irrigation_rules import DEFAULT_ELECTRICITY, DEFAULT_DELIVERY_RATE


class IrrigationScheduleError(Exception):
    """Base class for scheduler failures carrying a human-readable reason."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        payload = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(IrrigationScheduleError):
    """Raised when a request is malformed or out of range."""
    pass


class UnknownAlgorithmError(ValidationError):
    """Raised when the algorithm selector is missing or not recognised."""
    pass


class ComputationError(IrrigationScheduleError):
    """Raised when an internal invariant is violated after validation passed."""
    pass


class RankingPolicy(str, Enum):
    DEFICIT_FIRST = "deficit_first"
    WEIGHTED_PRIORITY = "weighted_priority"


@dataclass(frozen=True)
class FieldRequest:
    """A validated field as supplied by the caller."""
    name: str
    moisture: int
    water_needed: int

    @property
    def deficit(self) -> int:
        return 100 - self.moisture


@dataclass(frozen=True)
class FieldState:
    """Per-request working state of a field during one allocation call."""
    request: FieldRequest
    original_index: int
    allocated: int = 0
    scheduled: bool = False
    time_needed: Optional[int] = None
    time_allocated: Optional[int] = None
    priority: Optional[float] = None

    @property
    def name(self) -> str:
        return self.request.name

    @property
    def moisture(self) -> int:
        return self.request.moisture

    @property
    def water_needed(self) -> int:
        return self.request.water_needed


@dataclass(frozen=True)
class AllocationBudget:
    """Resources available for a single allocation call."""
    total_water: int
    total_electricity: Optional[int] = None
    water_delivery_rate: Optional[int] = None

    @property
    def use_time_constraints(self) -> bool:
        return (self.total_electricity or 0) > 0 and (self.water_delivery_rate or 0) > 0

    @property
    def effective_electricity(self) -> int:
        if self.use_time_constraints:
            return self.total_electricity
        return DEFAULT_ELECTRICITY

    @property
    def effective_delivery_rate(self) -> int:
        if self.use_time_constraints:
            return self.water_delivery_rate
        return DEFAULT_DELIVERY_RATE


@dataclass
class TraceEvent:
    """One allocation decision, recorded when tracing is requested."""
    step: int
    field_name: str
    action: str  # full, partial, skipped, stop
    water: int = 0
    time: Optional[int] = None
    remaining_water: int = 0
    remaining_electricity: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class AllocationOutcome:
    """Raw allocator output, states in ranked order."""
    states: List[FieldState]
    total_water_used: int
    remaining_water: int
    total_time_used: Optional[int] = None
    remaining_electricity: Optional[int] = None
    trace: List[TraceEvent] = field(default_factory=list)


@dataclass
class AllocationResult:
    """Formatted result, scheduled states in input order."""
    algorithm: str
    scheduled: List[FieldState]
    total_water_used: int
    remaining_water: int
    total_time_used: Optional[int] = None
    remaining_electricity: Optional[int] = None
    trace: Optional[List[TraceEvent]] = None

    def to_dict(self) -> Dict[str, Any]:
        scheduled = []
        for state in self.scheduled:
            entry = {
                "name": state.name,
                "moisture": state.moisture,
                "need": state.water_needed,
                "allocated": state.allocated,
            }
            if state.priority is not None:
                entry["priority"] = state.priority
            if self.total_time_used is not None:
                entry["timeNeeded"] = state.time_allocated
            scheduled.append(entry)

        payload = {
            "algorithm": self.algorithm,
            "scheduled": scheduled,
            "totalWaterUsed": self.total_water_used,
            "remainingWater": self.remaining_water,
        }
        if self.total_time_used is not None:
            payload["totalTimeUsed"] = self.total_time_used
            payload["remainingElectricity"] = self.remaining_electricity
        if self.trace is not None:
            payload["trace"] = [event.to_dict() for event in self.trace]
        return payload
