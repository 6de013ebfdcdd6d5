from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from ecolearn.db import get_session
from ecolearn.auth_deps import require_admin
from ecolearn.schemas.auth import AdminLoginRequest, AdminLoginResponse, AdminPublic
from ecolearn.services.admins import authenticate

router = APIRouter(prefix="/api/admin", tags=["admin"])

@router.post("/login", response_model=AdminLoginResponse)
async def login(payload: AdminLoginRequest, session: AsyncSession = Depends(get_session)):
    admin, token = await authenticate(session, payload.username, payload.password)
    return {"token": token, "admin": admin}

@router.post("/logout")
async def logout():
    # tokens are stateless; the client drops it
    return {"success": True}

@router.get("/me", response_model=AdminPublic)
async def me(admin=Depends(require_admin)):
    return admin
