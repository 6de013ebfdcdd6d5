from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File, Form
from sqlalchemy.ext.asyncio import AsyncSession
from ecolearn.db import get_session
from ecolearn.auth_deps import require_admin
from ecolearn.config import settings
from ecolearn.schemas.challenge import ChallengeCreate, ChallengeUpdate, ChallengeEnvelope, ChallengeList
from ecolearn.schemas.submission import SubmissionEnvelope, SubmissionList
from ecolearn.services import challenges as catalog
from ecolearn.services import submissions as workflow
from ecolearn.services.storage import ImageStore, get_image_store

router = APIRouter(prefix="/api/challenges", tags=["challenges"])

@router.get("", response_model=ChallengeList)
async def list_challenges(
    week: int | None = Query(default=None, ge=1),
    category: str | None = Query(default=None),
    is_active: bool | None = Query(default=None, alias="isActive"),
    session: AsyncSession = Depends(get_session),
):
    rows = await catalog.list_challenges(session, week=week, category=category, is_active=is_active)
    return {"challenges": rows}

@router.post("", response_model=ChallengeEnvelope, status_code=201)
async def create_challenge(
    payload: ChallengeCreate,
    session: AsyncSession = Depends(get_session),
    admin=Depends(require_admin),
):
    return {"challenge": await catalog.create_challenge(session, payload)}

@router.get("/{challenge_id}", response_model=ChallengeEnvelope)
async def get_challenge(challenge_id: str, session: AsyncSession = Depends(get_session)):
    return {"challenge": await catalog.get_challenge(session, challenge_id)}

@router.put("/{challenge_id}", response_model=ChallengeEnvelope)
async def update_challenge(
    challenge_id: str,
    payload: ChallengeUpdate,
    session: AsyncSession = Depends(get_session),
    admin=Depends(require_admin),
):
    return {"challenge": await catalog.update_challenge(session, challenge_id, payload)}

@router.post("/{challenge_id}/submit", response_model=SubmissionEnvelope, status_code=201)
async def submit_photo(
    challenge_id: str,
    photo: UploadFile | None = File(default=None, description="proof photo in any common image format, up to 10MB"),
    user_id: str | None = Form(default=None, alias="userId"),
    caption: str | None = Form(default=None, description="optional, up to 200 characters"),
    session: AsyncSession = Depends(get_session),
    store: ImageStore = Depends(get_image_store),
):
    if photo is None:
        raise HTTPException(status_code=400, detail="Photo is required")
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    # one byte over the cap is enough to reject
    data = await photo.read(settings.max_upload_bytes + 1)
    sub = await workflow.submit(
        session,
        store,
        user_id=user_id,
        challenge_id=challenge_id,
        photo=data,
        caption=caption,
    )
    return {"submission": sub}

@router.get("/{challenge_id}/submissions", response_model=SubmissionList)
async def list_challenge_submissions(
    challenge_id: str,
    status: str | None = Query(default=None),
    session: AsyncSession = Depends(get_session),
    admin=Depends(require_admin),
):
    return {"submissions": await workflow.list_challenge_submissions(session, challenge_id, status)}
