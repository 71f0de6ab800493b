"""
Pydantic schemas for the Irrigation Scheduler API.

Request models only check JSON types, without coercion. Range checks, dropped
fields and the error taxonomy belong to app.services.irrigation_validator so
every caller gets the same messages.
"""
from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt
from typing import Any, Dict, List, Optional, Union

# Booleans and numeric strings are rejected, never coerced
Number = Union[StrictInt, StrictFloat]


# ==================== REQUEST SCHEMAS ====================

class FieldInput(BaseModel):
    """One irrigation zone as submitted by the client."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[Any] = Field(None, description="Field name (fields without a name are skipped)")
    moisture: Optional[Number] = Field(None, description="Soil moisture 0-100")
    waterNeeded: Optional[Number] = Field(None, description="Water requirement in liters")


class ScheduleRequest(BaseModel):
    """Request schema for an irrigation schedule."""
    model_config = ConfigDict(extra="ignore")

    algorithm: Optional[str] = Field(None, description="Algorithm selector, e.g. greedy-basic, knapsack-dp")
    technique: Optional[str] = Field(None, description="Legacy selector: greedy, dynamic, genetic")
    totalWater: Optional[Number] = Field(None, description="Total water available (liters)")
    totalElectricity: Optional[Number] = Field(None, description="Operating-time budget (time units)")
    waterDeliveryRate: Optional[Number] = Field(None, description="Liters delivered per time unit")
    fieldCount: Optional[Number] = Field(None, description="Number of fields to consider")
    fields: Optional[List[FieldInput]] = None
    includeTrace: bool = Field(default=False, description="Attach allocation trace events")

    def to_raw(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


# ==================== RESPONSE SCHEMAS ====================

class ScheduledField(BaseModel):
    """A field that received an allocation."""
    name: str
    moisture: int
    need: int
    allocated: int
    priority: Optional[float] = None
    timeNeeded: Optional[int] = None


class TraceEventOut(BaseModel):
    """One allocation decision."""
    step: int
    field_name: str
    action: str
    water: int = 0
    time: Optional[int] = None
    remaining_water: int = 0
    remaining_electricity: Optional[int] = None


class ScheduleResponse(BaseModel):
    """Canonical success response."""
    algorithm: str
    scheduled: List[ScheduledField]
    totalWaterUsed: int
    remainingWater: int
    totalTimeUsed: Optional[int] = None
    remainingElectricity: Optional[int] = None
    trace: Optional[List[TraceEventOut]] = None


class ErrorResponse(BaseModel):
    """Canonical failure response."""
    error: str
    details: Optional[str] = None


class AlgorithmInfo(BaseModel):
    """Algorithm catalogue entry."""
    id: str
    name: str
    description: str
    rankingPolicy: str
    usesTimeBudget: bool


class AlgorithmComparison(BaseModel):
    """Result of one algorithm in a comparison run."""
    algorithm: str
    value: Optional[float] = None
    result: Optional[ScheduleResponse] = None
    error: Optional[str] = None
    details: Optional[str] = None


class CompareResponse(BaseModel):
    """All algorithms run against the same request."""
    results: List[AlgorithmComparison]
    best: Optional[str] = None
