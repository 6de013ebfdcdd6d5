from __future__ import annotations
from pydantic import Field, EmailStr
from datetime import datetime
from ecolearn.schemas.base import ApiModel

class ProfileCreate(ApiModel):
    user_id: str = Field(min_length=1, max_length=128)
    full_name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    school_name: str = Field(min_length=1, max_length=160)
    grade: str = Field(min_length=1, max_length=32)
    class_name: str | None = Field(default=None, alias="class", max_length=32)
    student_id: str | None = Field(default=None, max_length=64)

class ProfileUpdate(ApiModel):
    """Fields a student may change. ecoPoints is deliberately absent."""
    full_name: str | None = Field(default=None, min_length=1, max_length=120)
    email: EmailStr | None = None
    school_name: str | None = Field(default=None, min_length=1, max_length=160)
    grade: str | None = Field(default=None, min_length=1, max_length=32)
    class_name: str | None = Field(default=None, alias="class", max_length=32)
    student_id: str | None = Field(default=None, max_length=64)
    current_level: int | None = Field(default=None, ge=1)

class ProfilePublic(ApiModel):
    id: str
    user_id: str
    full_name: str
    email: str
    school_name: str
    grade: str
    class_name: str | None = Field(default=None, alias="class")
    student_id: str | None = None
    eco_points: int
    current_level: int
    created_at: datetime
    updated_at: datetime

class ProfileEnvelope(ApiModel):
    success: bool = True
    profile: ProfilePublic

class LeaderboardResponse(ApiModel):
    success: bool = True
    leaderboard: list[ProfilePublic]
