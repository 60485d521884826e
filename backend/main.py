# main.py — Task Manager API
# Features:
# - Request correlation IDs
# - Security headers
# - Domain errors mapped to fixed status codes
# - Health check with DB verification
# - Business images served read-only

import os
import json
import uuid
import time
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text

from database import init_db, close_db, engine, get_db_session
from errors import AppError
from images import UPLOAD_DIR
from telemetry import setup_telemetry

# Logging
logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
)
logger = logging.getLogger("taskhub")

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Task Manager API...")
    await init_db()
    # No-op if OTEL_EXPORTER_OTLP_ENDPOINT not set
    setup_telemetry(app, engine)
    yield
    logger.info("Shutting down Task Manager API...")
    await close_db()


app = FastAPI(
    title="Task Manager API",
    description="Tasks with nested subtasks, categories, comments and business listings",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ============================================================
# CORS
# ============================================================

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "https://task-management-frontend-steel.vercel.app"
    ).split(",")
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID", "X-Correlation-ID"],
    expose_headers=["X-Request-ID", "X-Correlation-ID"],
)


# ============================================================
# MIDDLEWARE: Correlation IDs + Timing
# ============================================================

@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    correlation_id = request.headers.get("X-Correlation-ID", request_id)
    request.state.request_id = request_id
    request.state.correlation_id = correlation_id

    start = time.perf_counter()
    response = await call_next(request)
    duration = time.perf_counter() - start

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Correlation-ID"] = correlation_id
    response.headers["X-Response-Time"] = f"{duration:.4f}s"

    logger.info(
        f"{request.method} {request.url.path} → {response.status_code} "
        f"({duration:.3f}s) [rid={request_id[:8]}]"
    )
    return response


# ============================================================
# MIDDLEWARE: Security Headers
# ============================================================

@app.middleware("http")
async def security_headers_middleware(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# ============================================================
# EXCEPTION HANDLERS
# ============================================================

def _request_id(request: Request):
    return getattr(request.state, "request_id", None)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.http_status >= 500:
        logger.warning(f"{exc.code} {exc.message} [{request.method} {request.url.path}]")
    else:
        logger.info(f"{exc.code} {exc.message} [{request.method} {request.url.path}]")
    return JSONResponse(
        status_code=exc.http_status,
        content={**exc.to_dict(), "request_id": _request_id(request)},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Sanitise errors to ensure JSON serialisability
    errors = []
    missing = []
    for err in exc.errors():
        loc = list(err.get("loc", []))
        clean_err = {
            "type": str(err.get("type", "unknown")),
            "loc": loc,
            "msg": str(err.get("msg", "")),
        }
        if "input" in err:
            try:
                json.dumps(err["input"])
                clean_err["input"] = err["input"]
            except (TypeError, ValueError):
                clean_err["input"] = str(err["input"])
        errors.append(clean_err)
        if clean_err["type"] == "missing" and loc:
            missing.append(str(loc[-1]))

    if missing:
        message = f"Missing required fields: {', '.join(missing)}"
    else:
        message = errors[0]["msg"] if errors else "Request validation failed"

    return JSONResponse(
        status_code=400,
        content={
            "error": message,
            "code": "TM-VAL-001",
            "detail": errors,
            "request_id": _request_id(request),
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "code": "TM-SYS-001",
            "request_id": _request_id(request),
        },
    )


# ============================================================
# ROUTERS
# ============================================================

from routers import auth, users, tasks, categories, comments, businesses

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(tasks.router)
app.include_router(categories.router)
app.include_router(comments.router)
app.include_router(businesses.router)

os.makedirs(UPLOAD_DIR, exist_ok=True)
app.mount("/uploads/businesses", StaticFiles(directory=UPLOAD_DIR), name="business-images")


# ============================================================
# HEALTH & ROOT
# ============================================================

@app.get("/health")
async def health_check():
    """Health check with database connectivity verification"""
    db_status = "unknown"
    try:
        async for db in get_db_session():
            await db.execute(text("SELECT 1"))
            db_status = "connected"
            break
    except Exception as e:
        db_status = f"error: {str(e)[:100]}"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "version": VERSION,
        "environment": os.getenv("ENVIRONMENT", "development"),
        "database": db_status,
    }


@app.get("/")
async def root():
    return {
        "name": "Task Manager API",
        "version": VERSION,
        "docs": "/docs",
        "health": "/health",
        "status": "operational",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=os.getenv("ENVIRONMENT") != "production",
        workers=int(os.getenv("WORKERS", 1)),
    )
