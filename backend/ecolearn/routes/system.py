from __future__ import annotations
from fastapi import APIRouter, Request
from datetime import datetime, timezone
from ecolearn.config import settings

router = APIRouter(tags=["system"])

@router.get("/health")
async def health(request: Request):
    return {
        "status": "ok",
        "service": settings.app_display_name,
        "env": settings.environment,
        "kv_backend": settings.kv_backend,
        "time": datetime.now(timezone.utc).isoformat(),
        "request_id": request.headers.get("x-request-id") or request.state.request_id,
    }

@router.get("/version")
async def version():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "git_sha": settings.git_sha,
        "limits": {
            "max_upload_bytes": settings.max_upload_bytes,
            "chat_daily_messages": settings.chat_daily_message_limit,
        },
    }
