from __future__ import annotations

import logging
import os
import time
import uuid
from pathlib import Path

from dotenv import load_dotenv

# Load .env from backend directory so OPENAI_API_KEY, DATABASE_URL etc. are available
load_dotenv(Path(__file__).resolve().parent / ".env")

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from llm_client import ai_enabled
from routes.leads import router as leads_router
from routes.rent_roll import router as rent_roll_router

_LOG = logging.getLogger("uvicorn.error")

# Version for /health and startup log (Render sets RENDER_GIT_COMMIT)
VERSION = (os.environ.get("RENDER_GIT_COMMIT") or "").strip() or "unknown"

app = FastAPI(title="Rent Roll Backend", version="0.1.0")

# CORS: use ALLOWED_ORIGINS env (comma-separated) if set, else default
_origins_env = os.environ.get("ALLOWED_ORIGINS", "").strip()
if _origins_env:
    ALLOWED_ORIGINS = [o.strip() for o in _origins_env.split(",") if o.strip()]
else:
    ALLOWED_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        _LOG.info(
            "request_id=%s method=%s path=%s status=%s duration_ms=%.0f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        response.headers["X-Request-Id"] = request_id
        return response


app.add_middleware(RequestLogMiddleware)
app.include_router(leads_router)
app.include_router(rent_roll_router)


# Every failure leaves the API as {"error": message}; success bodies never carry "error".
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg", "Invalid request")
    return JSONResponse(status_code=400, content={"error": f"{loc}: {msg}" if loc else msg})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    _LOG.exception("unhandled error path=%s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Server error"})


@app.on_event("startup")
def startup_log() -> None:
    enabled = ai_enabled()
    _LOG.info("Backend starting (OPENAI_API_KEY configured: %s) version=%s", enabled, VERSION)
    if not enabled:
        _LOG.warning("OPENAI_API_KEY is not set. Lead ranking and CSV column mapping will not work.")
    if not (os.environ.get("AUTH_JWT_SECRET") or os.environ.get("AUTH_JWKS_URL")):
        _LOG.warning("Neither AUTH_JWT_SECRET nor AUTH_JWKS_URL is set. Authenticated routes will fail.")


@app.get("/health")
def health():
    return {
        "status": "ok",
        "ai_enabled": ai_enabled(),
        "version": VERSION,
    }
