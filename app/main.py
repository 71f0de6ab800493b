# app/main.py
import logging
import os
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.routers.irrigation import router as irrigation_router

# ---------------------------
# Configuration / Logging
# ---------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# ---------------------------
# FastAPI app
# ---------------------------
app = FastAPI(title="Irrigation Scheduler API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(irrigation_router)


# Body type errors use the same failure shape as the scheduler's own validation
@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"{request.method} {request.url.path}: malformed body: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid input data", "details": str(exc.errors())},
    )


# ---------------------------
# Endpoints
# ---------------------------
@app.get("/healthz")
def healthz():
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
