from __future__ import annotations
from pydantic import Field, ConfigDict
from datetime import datetime
from typing import Literal
from ecolearn.schemas.base import ApiModel

ChatRole = Literal["user", "assistant"]

class ChatContext(ApiModel):
    """Where the student is in the app when they ask. Unknown keys are rejected."""
    model_config = ConfigDict(extra="forbid")

    page: str = Field(min_length=1, max_length=64)
    module_id: str | None = Field(default=None, max_length=64)
    lesson_id: str | None = Field(default=None, max_length=64)
    quiz_id: str | None = Field(default=None, max_length=64)
    challenge_id: str | None = Field(default=None, max_length=64)

class ChatSessionCreate(ApiModel):
    user_id: str = Field(min_length=1, max_length=128)
    title: str | None = Field(default=None, max_length=120)

class ChatSessionPublic(ApiModel):
    id: str
    user_id: str
    title: str
    created_at: datetime
    updated_at: datetime

class ChatMessagePublic(ApiModel):
    id: str
    session_id: str
    role: ChatRole
    content: str
    context: ChatContext | None = None
    module_id: str | None = None
    timestamp: datetime

class ChatMessageCreate(ApiModel):
    user_id: str = Field(min_length=1, max_length=128)
    content: str = Field(min_length=1, max_length=4000)
    context: ChatContext | None = None

class ChatSessionEnvelope(ApiModel):
    success: bool = True
    session: ChatSessionPublic

class ChatSessionList(ApiModel):
    success: bool = True
    sessions: list[ChatSessionPublic]

class ChatMessageList(ApiModel):
    success: bool = True
    messages: list[ChatMessagePublic]

class ChatReply(ApiModel):
    success: bool = True
    user_message: ChatMessagePublic
    ai_message: ChatMessagePublic
    remaining_messages: int
