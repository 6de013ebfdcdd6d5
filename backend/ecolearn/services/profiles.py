from __future__ import annotations
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from ecolearn.errors import Conflict, NotFound, ValidationError
from ecolearn.models.profile import StudentProfile
from ecolearn.schemas.profile import ProfileCreate, ProfileUpdate

log = structlog.get_logger()

REQUIRED_FIELDS = ("full_name", "email", "school_name", "grade")


async def get_profile(session: AsyncSession, user_id: str) -> StudentProfile:
    profile = await session.scalar(select(StudentProfile).where(StudentProfile.user_id == user_id))
    if not profile:
        raise NotFound("Profile not found")
    return profile


async def create_profile(session: AsyncSession, payload: ProfileCreate) -> StudentProfile:
    exists = await session.scalar(select(StudentProfile.id).where(StudentProfile.user_id == payload.user_id))
    if exists:
        raise Conflict("Profile already exists", status_code=409)
    profile = StudentProfile(**payload.model_dump(), eco_points=0, current_level=1)
    session.add(profile)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise Conflict("Profile already exists", status_code=409)
    await session.refresh(profile)
    log.info("profile_created", user_id=profile.user_id)
    return profile


async def update_profile(session: AsyncSession, user_id: str, payload: ProfileUpdate) -> StudentProfile:
    profile = await get_profile(session, user_id)
    changes = payload.model_dump(exclude_unset=True)
    for field in REQUIRED_FIELDS + ("current_level",):
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null")
    for field, value in changes.items():
        setattr(profile, field, value)
    await session.commit()
    await session.refresh(profile)
    log.info("profile_updated", user_id=user_id, fields=sorted(changes))
    return profile


async def leaderboard(session: AsyncSession, *, school: str | None = None, limit: int = 10) -> list[StudentProfile]:
    q = select(StudentProfile)
    if school:
        q = q.where(StudentProfile.school_name == school)
    q = q.order_by(StudentProfile.eco_points.desc(), StudentProfile.created_at.asc()).limit(limit)
    return list((await session.execute(q)).scalars().all())
