from __future__ import annotations
import uuid
from datetime import datetime, timezone as dt_tz
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool
import structlog

from ecolearn.config import settings
from ecolearn.errors import Conflict, InvalidState, NotFound, ValidationError
from ecolearn.models.challenge import Challenge
from ecolearn.models.profile import StudentProfile
from ecolearn.models.submission import ChallengeSubmission, SubmissionStatus, can_transition
from ecolearn.services.challenges import get_challenge
from ecolearn.services.media import inspect_image, ext_for_mime
from ecolearn.services.storage import ImageStore

log = structlog.get_logger()

MAX_CAPTION_CHARS = 200
REVIEW_OUTCOMES = (SubmissionStatus.APPROVED, SubmissionStatus.REJECTED)


def ensure_transition(current: str, target: SubmissionStatus) -> None:
    if not can_transition(current, target):
        raise InvalidState(f"Cannot change submission status from '{current}' to '{target.value}'")


def _parse_status(status: str | None) -> SubmissionStatus | None:
    if status is None:
        return None
    try:
        return SubmissionStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown status '{status}'")


def _conflict_for(existing: ChallengeSubmission | None) -> Conflict:
    if existing is not None and existing.status == SubmissionStatus.APPROVED.value:
        return Conflict("Challenge already approved")
    if existing is not None and existing.status == SubmissionStatus.PENDING.value:
        return Conflict("Submission already under review")
    return Conflict("Submission already exists")


def ensure_resubmittable(existing: ChallengeSubmission) -> None:
    if existing.status != SubmissionStatus.REJECTED.value:
        raise _conflict_for(existing)


async def find_submission(session: AsyncSession, user_id: str, challenge_id: str) -> ChallengeSubmission | None:
    return await session.scalar(
        select(ChallengeSubmission).where(
            ChallengeSubmission.user_id == user_id,
            ChallengeSubmission.challenge_id == challenge_id,
        )
    )


async def _commit_after_upload(session: AsyncSession, photo_key: str) -> None:
    # The object store write already happened and is not rolled back with the DB.
    try:
        await session.commit()
    except IntegrityError:
        raise
    except SQLAlchemyError:
        await session.rollback()
        log.error("orphaned_upload", photo_key=photo_key, reason="db_write_failed", exc_info=True)
        raise


async def submit(
    session: AsyncSession,
    store: ImageStore,
    *,
    user_id: str,
    challenge_id: str,
    photo: bytes,
    caption: str | None = None,
    max_bytes: int | None = None,
) -> ChallengeSubmission:
    """
    Create a pending submission for (user, challenge), or turn a rejected one
    back into pending with a fresh photo. Approved and pending submissions
    block the call with Conflict and are left untouched.
    """
    if not user_id or not user_id.strip():
        raise ValidationError("userId is required")
    ch = await get_challenge(session, challenge_id)
    if not ch.is_active:
        raise ValidationError("Challenge is not active")
    # plain copies: a rollback below expires the ORM instances
    challenge_id = ch.id

    caption = (caption or "").strip() or None
    if caption is not None and len(caption) > MAX_CAPTION_CHARS:
        raise ValidationError(f"Caption must be at most {MAX_CAPTION_CHARS} characters")
    try:
        mime, _, _ = inspect_image(photo, max_bytes or settings.max_upload_bytes)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    existing = await find_submission(session, user_id, challenge_id)
    if existing is not None:
        ensure_resubmittable(existing)

    photo_key = f"challenges/{challenge_id}/{user_id}/{uuid.uuid4().hex}.{ext_for_mime(mime)}"
    photo_url = await run_in_threadpool(store.put, photo_key, photo, mime)

    bound = log.bind(user_id=user_id, challenge_id=challenge_id)
    if existing is None:
        sub = ChallengeSubmission(
            user_id=user_id,
            challenge_id=challenge_id,
            photo_url=photo_url,
            photo_key=photo_key,
            caption=caption,
            status=SubmissionStatus.PENDING.value,
            points_awarded=0,
        )
        session.add(sub)
        try:
            await _commit_after_upload(session, photo_key)
        except IntegrityError:
            # lost the create race; the unique (user, challenge) constraint kept one row
            await session.rollback()
            bound.warning("orphaned_upload", photo_key=photo_key, reason="duplicate_submission")
            raise _conflict_for(await find_submission(session, user_id, challenge_id))
        await session.refresh(sub)
        bound.info("submission_created", submission_id=sub.id)
        return sub

    ensure_transition(existing.status, SubmissionStatus.PENDING)
    submission_id, previous_key = existing.id, existing.photo_key
    try:
        res = await session.execute(
            update(ChallengeSubmission)
            .where(
                ChallengeSubmission.id == submission_id,
                ChallengeSubmission.status == SubmissionStatus.REJECTED.value,
            )
            .values(
                photo_url=photo_url,
                photo_key=photo_key,
                caption=caption,
                status=SubmissionStatus.PENDING.value,
                points_awarded=0,
                submitted_at=datetime.now(dt_tz.utc),
                reviewed_at=None,
                reviewed_by=None,
                feedback=None,
            )
            .execution_options(synchronize_session=False)
        )
    except SQLAlchemyError:
        await session.rollback()
        bound.error("orphaned_upload", photo_key=photo_key, reason="db_write_failed", exc_info=True)
        raise
    if res.rowcount != 1:
        await session.rollback()
        bound.warning("orphaned_upload", photo_key=photo_key, reason="concurrent_resubmission")
        raise _conflict_for(await find_submission(session, user_id, challenge_id))
    await _commit_after_upload(session, photo_key)
    await session.refresh(existing)
    if previous_key:
        bound.info("orphaned_upload", photo_key=previous_key, reason="replaced_on_resubmit")
    bound.info("submission_resubmitted", submission_id=submission_id)
    return existing


async def review(
    session: AsyncSession,
    submission_id: str,
    *,
    status: str,
    feedback: str | None = None,
    reviewed_by: str | None = None,
) -> ChallengeSubmission:
    """
    Move a pending submission to approved or rejected.

    Approval stores the challenge's current point value on the submission and
    adds it to the owner's eco_points in the same transaction. Both writes
    are conditional on the submission still being pending, so of several
    concurrent reviews exactly one lands and the rest get InvalidState.
    The challenge's active flag is not consulted: a submission made while the
    challenge was live can still be reviewed after it is switched off.
    """
    target = _parse_status(status)
    if target not in REVIEW_OUTCOMES:
        raise ValidationError("Invalid status. Must be 'approved' or 'rejected'")

    sub = await session.get(ChallengeSubmission, submission_id)
    if not sub:
        raise NotFound("Submission not found")
    ensure_transition(sub.status, target)

    points = 0
    if target == SubmissionStatus.APPROVED:
        ch = await session.get(Challenge, sub.challenge_id)
        if not ch:
            raise NotFound("Challenge not found")
        points = int(ch.points)

    now = datetime.now(dt_tz.utc)
    res = await session.execute(
        update(ChallengeSubmission)
        .where(
            ChallengeSubmission.id == sub.id,
            ChallengeSubmission.status == SubmissionStatus.PENDING.value,
        )
        .values(
            status=target.value,
            points_awarded=points,
            reviewed_at=now,
            reviewed_by=reviewed_by,
            feedback=feedback,
        )
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        await session.rollback()
        raise InvalidState("Submission is no longer pending")

    if points:
        res = await session.execute(
            update(StudentProfile)
            .where(StudentProfile.user_id == sub.user_id)
            .values(eco_points=StudentProfile.eco_points + points, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if res.rowcount != 1:
            await session.rollback()
            raise NotFound("Student profile not found")

    await session.commit()
    await session.refresh(sub)
    log.info(
        "submission_reviewed",
        submission_id=sub.id,
        user_id=sub.user_id,
        challenge_id=sub.challenge_id,
        status=sub.status,
        points_awarded=sub.points_awarded,
        reviewed_by=reviewed_by,
    )
    return sub


# ---------- queries ----------

async def list_user_submissions(session: AsyncSession, user_id: str, status: str | None = None) -> list[ChallengeSubmission]:
    q = select(ChallengeSubmission).where(ChallengeSubmission.user_id == user_id)
    st = _parse_status(status)
    if st is not None:
        q = q.where(ChallengeSubmission.status == st.value)
    q = q.order_by(ChallengeSubmission.submitted_at.desc())
    return list((await session.execute(q)).scalars().all())


async def list_pending_submissions(session: AsyncSession) -> list[ChallengeSubmission]:
    # oldest first: moderation works the queue in arrival order
    q = (
        select(ChallengeSubmission)
        .where(ChallengeSubmission.status == SubmissionStatus.PENDING.value)
        .order_by(ChallengeSubmission.submitted_at.asc())
    )
    return list((await session.execute(q)).scalars().all())


async def list_approved_submissions(session: AsyncSession, *, limit: int = 20, offset: int = 0) -> list[ChallengeSubmission]:
    q = (
        select(ChallengeSubmission)
        .where(ChallengeSubmission.status == SubmissionStatus.APPROVED.value)
        .order_by(ChallengeSubmission.reviewed_at.desc())
        .limit(limit)
        .offset(offset)
    )
    return list((await session.execute(q)).scalars().all())


async def list_challenge_submissions(session: AsyncSession, challenge_id: str, status: str | None = None) -> list[ChallengeSubmission]:
    await get_challenge(session, challenge_id)
    q = select(ChallengeSubmission).where(ChallengeSubmission.challenge_id == challenge_id)
    st = _parse_status(status)
    if st is not None:
        q = q.where(ChallengeSubmission.status == st.value)
    q = q.order_by(ChallengeSubmission.submitted_at.desc())
    return list((await session.execute(q)).scalars().all())
