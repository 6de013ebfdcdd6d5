from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from ecolearn.errors import AuthError, Conflict, ValidationError
from ecolearn.models.admin import AdminUser
from ecolearn.security import hash_password, verify_password, make_admin_token

log = structlog.get_logger()

ROLES = ("admin", "super_admin")


async def create_admin_user(
    session: AsyncSession,
    *,
    username: str,
    password: str,
    full_name: str,
    role: str = "admin",
) -> AdminUser:
    username = username.strip().lower()
    if not username:
        raise ValidationError("username is required")
    if len(password) < 8:
        raise ValidationError("password must be at least 8 characters")
    if role not in ROLES:
        raise ValidationError(f"role must be one of {', '.join(ROLES)}")
    admin = AdminUser(
        username=username,
        password_hash=hash_password(password),
        full_name=full_name,
        role=role,
        is_active=True,
    )
    session.add(admin)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise Conflict("Admin username already taken", status_code=409)
    await session.refresh(admin)
    log.info("admin_created", admin_id=admin.id, role=admin.role)
    return admin


async def authenticate(session: AsyncSession, username: str, password: str) -> tuple[AdminUser, str]:
    """Returns (admin, signed token). Same error for unknown user, bad password and disabled account."""
    admin = await session.scalar(select(AdminUser).where(AdminUser.username == username.strip().lower()))
    if not admin or not admin.is_active or not verify_password(password, admin.password_hash):
        log.warning("admin_login_failed", username=username)
        raise AuthError("Invalid credentials")
    admin.last_login = datetime.now(dt_tz.utc)
    await session.commit()
    await session.refresh(admin)
    log.info("admin_login", admin_id=admin.id)
    return admin, make_admin_token(admin.id)
