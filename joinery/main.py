# joinery/main.py
from __future__ import annotations

# Load .env early so settings and os.getenv see it everywhere
from dotenv import load_dotenv
load_dotenv()

import secrets
from contextlib import asynccontextmanager
from urllib.parse import parse_qsl

import sqlalchemy as sa
from fastapi import FastAPI, Depends
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession
from twilio.request_validator import RequestValidator

from joinery.core.config import settings
from joinery.core.errors import ErrorSeverity, log_error
from joinery.core.logging import setup_logging, LoggingMiddleware, get_logger

setup_logging(debug=settings.is_development, max_log_length=settings.MAX_LOG_LENGTH, level=settings.LOG_LEVEL)
logger = get_logger(__name__)

import joinery.db.base  # noqa: F401  registers every model
from joinery.db.session import get_session
from joinery.services.assistant import VoiceAssistant
from joinery.services.session_store import SessionSweeper, build_session_store

# Routers
from joinery.api.routes.twilio import router as twilio_router
from joinery.api.routes.voice import router as voice_router
from joinery.api.routes.projects import router as projects_router
from joinery.api.routes.tasks import router as tasks_router
from joinery.api.routes.materials import router as materials_router
from joinery.api.routes.joinery_items import router as joinery_items_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("application_startup", env=settings.APP_ENV)
    sweeper = SessionSweeper(app.state.session_store)
    sweeper.start()
    app.state.session_sweeper = sweeper
    yield
    logger.info("application_shutdown")
    await sweeper.stop()


app = FastAPI(
    title="Joinery Voice Assistant",
    description="Project records for a joinery workshop, manageable by phone",
    lifespan=lifespan,
)

# Voice memory lives for the life of the process (or in Redis when configured)
app.state.session_store = build_session_store()
app.state.assistant = VoiceAssistant(app.state.session_store)

app.middleware("http")(LoggingMiddleware(
    log_requests=settings.LOG_REQUESTS,
    slow_threshold=settings.SLOW_REQUEST_THRESHOLD,
))

# -------- Health / readiness (public) --------
@app.get("/healthz", include_in_schema=False)
async def healthz():
    return {"ok": True}

@app.get("/readyz", include_in_schema=False)
async def readyz(db: AsyncSession = Depends(get_session)):
    await db.execute(sa.text("SELECT 1"))
    return {"db": "ok"}

# -------- Global security gate (single place) --------
PUBLIC_EXACT = {
    "/healthz",
    "/readyz",
    "/favicon.ico",
}

def _is_public(path: str) -> bool:
    return path in PUBLIC_EXACT

_REJECT_TWIML = '<?xml version="1.0" encoding="UTF-8"?><Response><Reject/></Response>'

def _twilio_signature_ok(url: str, body: bytes, signature: str) -> bool:
    form = dict(parse_qsl(body.decode(errors="ignore")))
    validator = RequestValidator(settings.TWILIO_AUTH_TOKEN)
    # behind a TLS-terminating proxy the app sees http:// while Twilio signed https://
    for candidate in (url, url.replace("http://", "https://", 1)):
        if validator.validate(candidate, form, signature):
            return True
    return False

@app.middleware("http")
async def lock_all(request, call_next):
    path = request.url.path

    # 1) Twilio webhook signature verify (reject spoofed hits)
    if path.startswith("/twilio/"):
        if settings.TWILIO_AUTH_TOKEN and not settings.is_test:
            body_bytes = await request.body()  # Starlette caches; the route can still read the form
            sig = request.headers.get("X-Twilio-Signature", "")
            if not _twilio_signature_ok(str(request.url), body_bytes, sig):
                log_error(Exception("Twilio signature validation failed"),
                          {"endpoint": path, "signature_present": bool(sig)},
                          ErrorSeverity.MEDIUM)
                return Response(content=_REJECT_TWIML, media_type="application/xml", status_code=403)
        else:
            logger.debug("twilio_signature_check_skipped", test_mode=settings.is_test)
        return await call_next(request)

    # 2) Public paths -> allow
    if _is_public(path):
        return await call_next(request)

    # 3) Everything else -> require API key header
    api_key = request.headers.get("X-API-Key", "")
    expected = settings.JOINERY_API_KEY or ""
    if not expected or not secrets.compare_digest(api_key, expected):
        log_error(Exception("API key validation failed"),
                  {"endpoint": path, "has_key": bool(api_key)},
                  ErrorSeverity.LOW)
        return JSONResponse({"detail": "Invalid or missing API key"}, status_code=401)

    return await call_next(request)

# -------- Include routers --------
app.include_router(twilio_router)
app.include_router(voice_router)
app.include_router(projects_router)
app.include_router(tasks_router)
app.include_router(materials_router)
app.include_router(joinery_items_router)
