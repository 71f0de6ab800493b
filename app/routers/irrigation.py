"""
Irrigation Scheduler Router.
Maps the HTTP boundary onto the scheduler's canonical request/result contract.
"""
import logging
from typing import List

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, StreamingResponse

from app.schemas.irrigation_schemas import (
    AlgorithmInfo,
    CompareResponse,
    ErrorResponse,
    ScheduleRequest,
    ScheduleResponse,
)
from app.services.irrigation_excel_service import irrigation_excel_service, XLSX_MEDIA_TYPE
from app.services.irrigation_models import ComputationError, ValidationError
from app.services.irrigation_scheduler import (
    compare_algorithms,
    list_algorithms,
    schedule_irrigation,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/irrigation", tags=["irrigation"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _validation_failure(e: ValidationError) -> JSONResponse:
    logger.warning(f"Schedule request rejected: {e.message} ({e.details})")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=e.to_dict())


def _computation_failure(e: ComputationError) -> JSONResponse:
    logger.error(f"Scheduler failed: {e.message} ({e.details})")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Scheduler failed", "details": e.message},
    )


@router.get("/algorithms", response_model=List[AlgorithmInfo])
def get_algorithms():
    """List the available allocation algorithms."""
    return list_algorithms()


@router.post(
    "/schedule",
    response_model=ScheduleResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
def create_schedule(request: ScheduleRequest):
    """
    Allocate the water budget across fields.

    Scheduled fields are returned in the order they were submitted. Time
    keys are present only when both totalElectricity and waterDeliveryRate
    are positive and a time-constrained algorithm was selected.
    """
    try:
        result = schedule_irrigation(request.to_raw())
    except ValidationError as e:
        return _validation_failure(e)
    except ComputationError as e:
        return _computation_failure(e)
    return result.to_dict()


@router.post(
    "/compare",
    response_model=CompareResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
def compare_schedules(request: ScheduleRequest):
    """Run every algorithm against the same request and score each allocation."""
    try:
        return compare_algorithms(request.to_raw())
    except ValidationError as e:
        return _validation_failure(e)
    except ComputationError as e:
        return _computation_failure(e)


@router.post("/schedule/excel", responses=ERROR_RESPONSES)
def export_schedule_excel(request: ScheduleRequest):
    """Compute a schedule and return it as an Excel workbook."""
    raw = request.to_raw()
    try:
        result = schedule_irrigation(raw)
    except ValidationError as e:
        return _validation_failure(e)
    except ComputationError as e:
        return _computation_failure(e)

    excel_buffer = irrigation_excel_service.generate_schedule_excel(result.to_dict(), raw)
    filename = f"irrigation_schedule_{result.algorithm}.xlsx"

    return StreamingResponse(
        excel_buffer,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"'
        }
    )
