from __future__ import annotations
import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from ecolearn.db import get_session
from ecolearn.errors import AuthError
from ecolearn.models.admin import AdminUser
from ecolearn.security import decode_token, ADMIN_TOKEN_TYPE

security = HTTPBearer(auto_error=False)

async def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    session: AsyncSession = Depends(get_session),
) -> AdminUser:
    if credentials is None or not credentials.credentials:
        raise AuthError("Missing admin token")
    try:
        data = decode_token(credentials.credentials)
    except jwt.PyJWTError:
        raise AuthError("Invalid token")
    if data.get("type") != ADMIN_TOKEN_TYPE:
        raise AuthError("Wrong token type")
    sub = data.get("sub")
    admin = await session.get(AdminUser, sub) if sub else None
    if not admin or not admin.is_active:
        raise AuthError("Admin not found")
    return admin
