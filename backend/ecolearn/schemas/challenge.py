from __future__ import annotations
from pydantic import Field, model_validator
from datetime import datetime
from ecolearn.schemas.base import ApiModel

class ChallengeCreate(ApiModel):
    title: str = Field(min_length=3, max_length=160)
    description: str = Field(min_length=1)
    points: int = Field(gt=0, default=10)
    category: str = Field(min_length=1, max_length=80)
    week: int = Field(ge=1, default=1)
    is_active: bool = True
    start_date: datetime | None = None
    end_date: datetime | None = None

    @model_validator(mode="after")
    def dates_ordered(self):
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        return self

class ChallengeUpdate(ApiModel):
    title: str | None = Field(default=None, min_length=3, max_length=160)
    description: str | None = Field(default=None, min_length=1)
    points: int | None = Field(default=None, gt=0)
    category: str | None = Field(default=None, min_length=1, max_length=80)
    week: int | None = Field(default=None, ge=1)
    is_active: bool | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None

class ChallengePublic(ApiModel):
    id: str
    title: str
    description: str
    points: int
    category: str
    week: int
    is_active: bool
    start_date: datetime | None = None
    end_date: datetime | None = None
    created_at: datetime
    updated_at: datetime

class ChallengeEnvelope(ApiModel):
    challenge: ChallengePublic

class ChallengeList(ApiModel):
    challenges: list[ChallengePublic]
