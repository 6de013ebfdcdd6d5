from __future__ import annotations
from pydantic import Field
from datetime import datetime
from ecolearn.schemas.base import ApiModel


class SubmissionPublic(ApiModel):
    id: str
    user_id: str
    challenge_id: str
    photo_url: str | None = None
    # 🔒 do not expose storage keys
    caption: str | None = None
    status: str
    points_awarded: int
    submitted_at: datetime
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    feedback: str | None = None


class SubmissionEnvelope(ApiModel):
    submission: SubmissionPublic


class SubmissionList(ApiModel):
    submissions: list[SubmissionPublic]


class ReviewRequest(ApiModel):
    # plain str: an unknown status is a 400 from the workflow, not a 422
    status: str
    feedback: str | None = Field(default=None, max_length=2000)
    reviewed_by: str | None = Field(default=None, max_length=128)
