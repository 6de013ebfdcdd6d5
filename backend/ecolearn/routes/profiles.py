from __future__ import annotations
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from ecolearn.db import get_session
from ecolearn.schemas.profile import ProfileCreate, ProfileUpdate, ProfileEnvelope, LeaderboardResponse
from ecolearn.services import profiles

router = APIRouter(prefix="/api", tags=["profiles"])

@router.post("/profiles", response_model=ProfileEnvelope, status_code=201)
async def create_profile(payload: ProfileCreate, session: AsyncSession = Depends(get_session)):
    return {"profile": await profiles.create_profile(session, payload)}

@router.get("/profile/{user_id}", response_model=ProfileEnvelope)
async def get_profile(user_id: str, session: AsyncSession = Depends(get_session)):
    return {"profile": await profiles.get_profile(session, user_id)}

@router.put("/profile/{user_id}", response_model=ProfileEnvelope)
async def update_profile(user_id: str, payload: ProfileUpdate, session: AsyncSession = Depends(get_session)):
    return {"profile": await profiles.update_profile(session, user_id, payload)}

@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    school: str | None = Query(default=None),
    limit: int = Query(default=10, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
):
    return {"leaderboard": await profiles.leaderboard(session, school=school, limit=limit)}
