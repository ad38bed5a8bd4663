import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from config import get_settings
from database import init_db
from errors import AppError, InternalError
from logging_setup import log_requests, setup_logging
from metrics import metrics_response, record_request_duration
from routes import auth, reference, tasks
from schemas import HealthResponse

settings = get_settings()
setup_logging(settings.log_level)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database ready")
    yield


app = FastAPI(title="Task Manager API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(log_requests)
app.middleware("http")(record_request_duration)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=exc.headers)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    error = InternalError("An unexpected error occurred")
    return JSONResponse(status_code=error.status_code, content={"detail": error.message})


@app.get("/healthz", response_model=HealthResponse)
def healthz():
    return {"status": "ok", "uptime": time.monotonic() - STARTED_AT}


@app.get("/metrics", include_in_schema=False)
def metrics():
    return metrics_response()


app.include_router(auth.router, prefix=f"{API_PREFIX}/auth", tags=["authentication"])
app.include_router(tasks.router, prefix=API_PREFIX, tags=["tasks"])
app.include_router(reference.router, prefix=API_PREFIX, tags=["reference"])
