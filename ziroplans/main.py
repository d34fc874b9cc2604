# -------------------------------------------------------------
# ZiroPlans Backend: FastAPI Entrypoint
# -------------------------------------------------------------
import asyncio
import logging
from typing import Set

from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Routers
from ziroplans.api.places_router import router as places_router
from ziroplans.api.trip_router import router as trip_router

from ziroplans.config import settings
from ziroplans.db.mongo import init_mongo
from ziroplans.db.trip_store import get_trip_store
from ziroplans.errors import TripPlannerError
from ziroplans.planner.plan_validator import format_path
from ziroplans.schemas.trip_schema import ApiResponse, HealthStatus, error_body

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("ziroplans")


# -------------------------------------------------------------
# Initialize FastAPI App
# -------------------------------------------------------------
app = FastAPI(
    title="ZiroPlans Backend",
    description="AI travel itinerary generator: Gemini + plan validation + Google Maps links",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Register API routers
app.include_router(trip_router)
app.include_router(places_router)


# -------------------------------------------------------------
# Error envelope: { success: false, error: { code, message, details? } }
# -------------------------------------------------------------
def _details(value):
    return None if settings.is_production else value


@app.exception_handler(TripPlannerError)
async def trip_planner_error_handler(request: Request, exc: TripPlannerError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, _details(exc.details)),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {"loc": (), "msg": "Invalid request"}
    path = format_path([p for p in first.get("loc", ()) if p != "body"])
    return JSONResponse(
        status_code=400,
        content=error_body("VALIDATION_ERROR", f"{path}: {first.get('msg')}", _details(str(exc.errors()))),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    code = {404: "NOT_FOUND", 405: "METHOD_NOT_ALLOWED"}.get(exc.status_code, "HTTP_ERROR")
    message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content=error_body(code, message))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=error_body(
            "INTERNAL_ERROR",
            "An internal error occurred. Please try again.",
            _details(repr(exc)),
        ),
    )


# -------------------------------------------------------------
# Health Check
# -------------------------------------------------------------
@app.get("/api/health", response_model=ApiResponse[HealthStatus], response_model_exclude_none=True)
def health():
    return ApiResponse[HealthStatus](success=True, data=HealthStatus())


# -------------------------------------------------------------
# Manual warmup endpoint (optional)
# -------------------------------------------------------------
@app.get("/api/warmup")
async def warmup(background_tasks: BackgroundTasks):
    background_tasks.add_task(initialize_services)
    return {"success": True, "data": {"message": "Warmup initiated, check logs for progress."}}


# -------------------------------------------------------------
# Startup Hook: connect Mongo + indexes without blocking boot
# -------------------------------------------------------------
# the event loop only keeps weak references to tasks
_background_tasks: Set[asyncio.Task] = set()


@app.on_event("startup")
async def on_startup():
    logger.info("Application startup complete (env=%s).", settings.ENV)
    task = asyncio.create_task(initialize_services())
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


async def initialize_services():
    """
    Best-effort warmup: a failure here is logged, not fatal. Requests still
    reach Mongo lazily and surface StoreError on their own.
    """
    try:
        await init_mongo()
        await get_trip_store().ensure_indexes()
        logger.info("Warmup completed successfully.")
    except Exception:
        logger.exception("Warmup failed; Mongo will be retried lazily on first request")
