"""
HRDD Risk & Allocation Engine — FastAPI application.

  GET  /health        → {"status": "ok", ...}
  GET  /defaults      → default configuration
  POST /score         → unit risk scores
  POST /portfolio     → baseline risk and concentration
  POST /managed-risk  → rank-preserving managed risk
  POST /cost          → allocation budget
  POST /optimize      → budget-constrained allocation search
  GET  /optimize/history → recent optimizer runs
"""

from __future__ import annotations

import logging

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hrdd.api.routes.health import router as health_router
from hrdd.api.routes.optimize import router as optimize_router
from hrdd.api.routes.risk import router as risk_router
from hrdd.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("hrdd")

app = FastAPI(
    title="HRDD Risk Engine",
    description="Portfolio risk scoring and budget-constrained due diligence allocation",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(risk_router)
app.include_router(optimize_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    body = await request.body()
    logger.error(f"Validation Error. Raw body: {body.decode('utf-8')[:500]} | Errors: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_errors(exc), "body": body.decode("utf-8")[:100]},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors with only JSON-safe fields."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
