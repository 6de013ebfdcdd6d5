from __future__ import annotations
import enum
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, Text, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, func
from ecolearn.db import Base


class SubmissionStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Allowed moves; anything missing here is rejected. APPROVED is terminal.
TRANSITIONS: dict[SubmissionStatus, frozenset[SubmissionStatus]] = {
    SubmissionStatus.PENDING: frozenset({SubmissionStatus.APPROVED, SubmissionStatus.REJECTED}),
    SubmissionStatus.REJECTED: frozenset({SubmissionStatus.PENDING}),
    SubmissionStatus.APPROVED: frozenset(),
}


def can_transition(current: SubmissionStatus | str, target: SubmissionStatus | str) -> bool:
    return SubmissionStatus(target) in TRANSITIONS[SubmissionStatus(current)]


class ChallengeSubmission(Base):
    """
    One row per (user, challenge). A rejected row is reused on resubmission
    rather than inserting a second one.
    """
    __tablename__ = "user_challenge_submissions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    user_id: Mapped[str] = mapped_column(String(128), index=True, nullable=False)  # Firebase UID
    challenge_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("challenges.id", ondelete="CASCADE"), index=True, nullable=False
    )

    photo_url: Mapped[str | None] = mapped_column(Text(), nullable=True)
    photo_key: Mapped[str | None] = mapped_column(Text(), nullable=True)  # object store key
    caption: Mapped[str | None] = mapped_column(String(200), nullable=True)

    status: Mapped[str] = mapped_column(String(16), index=True, nullable=False, default=SubmissionStatus.PENDING.value)
    points_awarded: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    feedback: Mapped[str | None] = mapped_column(Text(), nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "challenge_id", name="uq_submission_one_per_user_challenge"),
        CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_submission_status"),
        CheckConstraint("status = 'approved' OR points_awarded = 0", name="ck_submission_points_only_when_approved"),
    )
