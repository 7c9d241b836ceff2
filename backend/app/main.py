import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.routes.etl import router as etl_router
from app.api.v1.routes.health import router as health_router
from app.core.config import get_settings
from app.core.log import configure_logging_if_needed
from app.jobs.sync.errors import PayloadInvalid, SyncError

configure_logging_if_needed(get_settings().log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Mobility Sync API")

# Sync endpoints are called server-to-server by the scheduler; only GET/POST are exposed.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type"],
)


@app.exception_handler(SyncError)
async def sync_error_handler(request: Request, exc: SyncError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # same contract as PayloadInvalid: 400 with a single message
    first = exc.errors()[0] if exc.errors() else {}
    where = ".".join(str(p) for p in first.get("loc", ()))
    message = f"Invalid {where}: {first.get('msg', 'invalid value')}" if where else "Invalid request"
    return JSONResponse(status_code=PayloadInvalid.status_code, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc) or exc.__class__.__name__})


app.include_router(health_router, prefix="/v1")
app.include_router(etl_router)
