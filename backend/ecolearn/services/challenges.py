from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from ecolearn.errors import NotFound, ValidationError
from ecolearn.models.challenge import Challenge
from ecolearn.schemas.challenge import ChallengeCreate, ChallengeUpdate

log = structlog.get_logger()


def _aware(dt: datetime) -> datetime:
    # sqlite hands back naive datetimes
    return dt if dt.tzinfo else dt.replace(tzinfo=dt_tz.utc)


async def list_challenges(
    session: AsyncSession,
    *,
    week: int | None = None,
    category: str | None = None,
    is_active: bool | None = None,
) -> list[Challenge]:
    q = select(Challenge)
    if week is not None:
        q = q.where(Challenge.week == week)
    if category:
        q = q.where(Challenge.category == category)
    if is_active is not None:
        q = q.where(Challenge.is_active == is_active)
    q = q.order_by(Challenge.week.asc(), Challenge.created_at.asc())
    return list((await session.execute(q)).scalars().all())


async def get_challenge(session: AsyncSession, challenge_id: str) -> Challenge:
    """Raises NotFound; callers never see None."""
    ch = await session.get(Challenge, challenge_id)
    if not ch:
        raise NotFound("Challenge not found")
    return ch


async def create_challenge(session: AsyncSession, payload: ChallengeCreate) -> Challenge:
    ch = Challenge(**payload.model_dump())
    session.add(ch)
    await session.commit()
    await session.refresh(ch)
    log.info("challenge_created", challenge_id=ch.id, week=ch.week, points=ch.points)
    return ch


async def update_challenge(session: AsyncSession, challenge_id: str, payload: ChallengeUpdate) -> Challenge:
    ch = await get_challenge(session, challenge_id)
    changes = payload.model_dump(exclude_unset=True)
    for field in ("title", "description", "points", "category", "week", "is_active"):
        # NOT NULL columns
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null")
    for field, value in changes.items():
        setattr(ch, field, value)
    if ch.start_date and ch.end_date and _aware(ch.end_date) <= _aware(ch.start_date):
        await session.rollback()
        raise ValidationError("endDate must be after startDate")
    await session.commit()
    await session.refresh(ch)
    log.info("challenge_updated", challenge_id=ch.id, fields=sorted(changes))
    return ch
