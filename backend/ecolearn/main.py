from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from ecolearn.config import settings
from ecolearn.errors import register_error_handlers
from ecolearn.logging_setup import configure_logging
from ecolearn.routes.system import router as system_router
from ecolearn.routes.admin import router as admin_router
from ecolearn.routes.challenges import router as challenges_router
from ecolearn.routes.submissions import router as submissions_router
from ecolearn.routes.profiles import router as profiles_router
from ecolearn.routes.chat import router as chat_router
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha,
             kv_backend=settings.kv_backend)
    yield
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API: eco challenges, photo moderation and the Eco chat assistant",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(system_router)
app.include_router(admin_router)
app.include_router(challenges_router)
app.include_router(submissions_router)
app.include_router(profiles_router)
app.include_router(chat_router)

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    try:
        response: Response = await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()
    response.headers["X-Request-ID"] = rid
    return response
