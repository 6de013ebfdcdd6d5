from __future__ import annotations
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from ecolearn.db import get_session
from ecolearn.auth_deps import require_admin
from ecolearn.models.admin import AdminUser
from ecolearn.schemas.submission import ReviewRequest, SubmissionEnvelope, SubmissionList
from ecolearn.services import submissions as workflow

router = APIRouter(prefix="/api/submissions", tags=["submissions"])

@router.get("/user/{user_id}", response_model=SubmissionList)
async def list_for_user(
    user_id: str,
    status: str | None = Query(default=None, description="pending|approved|rejected"),
    session: AsyncSession = Depends(get_session),
):
    return {"submissions": await workflow.list_user_submissions(session, user_id, status)}

@router.get("/pending", response_model=SubmissionList)
async def list_pending(session: AsyncSession = Depends(get_session), admin=Depends(require_admin)):
    return {"submissions": await workflow.list_pending_submissions(session)}

@router.get("/approved", response_model=SubmissionList)
async def list_approved(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    return {"submissions": await workflow.list_approved_submissions(session, limit=limit, offset=offset)}

@router.put("/{submission_id}/review", response_model=SubmissionEnvelope)
async def review_submission(
    submission_id: str,
    payload: ReviewRequest,
    session: AsyncSession = Depends(get_session),
    admin: AdminUser = Depends(require_admin),
):
    sub = await workflow.review(
        session,
        submission_id,
        status=payload.status,
        feedback=payload.feedback,
        reviewed_by=payload.reviewed_by or admin.username,
    )
    return {"submission": sub}
