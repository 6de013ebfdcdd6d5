from __future__ import annotations
import asyncio
import json
import uuid
from datetime import datetime, timezone as dt_tz
from typing import Callable, Protocol
import google.generativeai as genai
import structlog

from ecolearn.config import settings
from ecolearn.errors import NotFound, RateLimited
from ecolearn.schemas.chat import ChatContext, ChatMessagePublic, ChatSessionPublic
from ecolearn.services.kv import KeyValueStore, get_kv_store
from ecolearn.services.rate_limit import ChatRateLimiter, get_rate_limiter

log = structlog.get_logger()

ECO_ASSISTANT_PROMPT = """You are Eco, a friendly environmental education assistant for school students.

Be encouraging, age-appropriate and solution-focused. You help with climate change,
sustainability, renewable energy, waste reduction, biodiversity and conservation.

Rules:
- Never give direct quiz answers; offer hints and explanations instead.
- Celebrate progress and effort, and point to relevant lessons when useful.
- Keep answers short and clear. An occasional emoji is fine.
- Use the context block below to tailor the answer to what the student is doing."""

FALLBACK_REPLY = (
    "I'm experiencing some technical difficulties right now. Please try asking your "
    "question again in a moment, or check back later!"
)
DEFAULT_TITLE = "Eco Assistant Chat"
HISTORY_LIMIT = 20


class ChatModel(Protocol):
    async def generate(self, prompt: str) -> str: ...


class GeminiChatModel:
    def __init__(self, api_key: str, model_name: str, timeout_seconds: float):
        genai.configure(api_key=api_key)
        self._model = genai.GenerativeModel(model_name)
        self.timeout_seconds = timeout_seconds

    async def generate(self, prompt: str) -> str:
        response = await asyncio.wait_for(
            self._model.generate_content_async(prompt, request_options={"timeout": self.timeout_seconds}),
            timeout=self.timeout_seconds,
        )
        return response.text


def context_block(context: ChatContext | None) -> str:
    if context is None:
        return ""
    lines = [f"Current page: {context.page}"]
    if context.module_id:
        lines.append(f"Module: {context.module_id}")
    if context.lesson_id:
        lines.append(f"Lesson: {context.lesson_id}")
    if context.quiz_id:
        lines.append(f"Quiz: {context.quiz_id}")
    if context.challenge_id:
        lines.append(f"Challenge: {context.challenge_id}")
    return "Context information:\n" + "\n".join(lines)


def build_prompt(history: list[ChatMessagePublic], content: str, context: ChatContext | None) -> str:
    parts = [ECO_ASSISTANT_PROMPT]
    ctx = context_block(context)
    if ctx:
        parts.append(ctx)
    if history:
        parts.append("Chat history:\n" + "\n".join(f"{m.role}: {m.content}" for m in history[-HISTORY_LIMIT:]))
    parts.append(f"User: {content}\nAssistant:")
    return "\n\n".join(parts)


def _utcnow() -> datetime:
    return datetime.now(dt_tz.utc)


class ChatService:
    """Chat sessions and message relay. All state sits in the key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        model: ChatModel,
        limiter: ChatRateLimiter,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.model = model
        self.limiter = limiter
        self.clock = clock

    # keys
    @staticmethod
    def _session_key(session_id: str) -> str:
        return f"chat:session:{session_id}"

    @staticmethod
    def _messages_key(session_id: str) -> str:
        return f"chat:messages:{session_id}"

    @staticmethod
    def _user_key(user_id: str) -> str:
        return f"chat:user:{user_id}:sessions"

    async def _load_json(self, key: str, default):
        raw = await self.store.get(key)
        return json.loads(raw) if raw is not None else default

    async def get_session(self, session_id: str) -> ChatSessionPublic:
        raw = await self.store.get(self._session_key(session_id))
        if raw is None:
            raise NotFound("Chat session not found")
        return ChatSessionPublic.model_validate_json(raw)

    async def _save_session(self, s: ChatSessionPublic) -> None:
        await self.store.set(self._session_key(s.id), s.model_dump_json())

    async def create_session(self, user_id: str, title: str | None = None) -> ChatSessionPublic:
        now = self.clock()
        s = ChatSessionPublic(
            id=f"session_{uuid.uuid4().hex}",
            user_id=user_id,
            title=title or DEFAULT_TITLE,
            created_at=now,
            updated_at=now,
        )
        await self._save_session(s)
        key = self._user_key(user_id)
        async with self.store.lock(key):
            ids = await self._load_json(key, [])
            ids.append(s.id)
            await self.store.set(key, json.dumps(ids))
        log.info("chat_session_created", session_id=s.id, user_id=user_id)
        return s

    async def list_sessions(self, user_id: str) -> list[ChatSessionPublic]:
        out = []
        for sid in await self._load_json(self._user_key(user_id), []):
            raw = await self.store.get(self._session_key(sid))
            if raw is not None:
                out.append(ChatSessionPublic.model_validate_json(raw))
        out.sort(key=lambda s: s.updated_at, reverse=True)
        return out

    async def list_messages(self, session_id: str) -> list[ChatMessagePublic]:
        await self.get_session(session_id)
        return [ChatMessagePublic.model_validate(m) for m in await self._load_json(self._messages_key(session_id), [])]

    async def delete_session(self, session_id: str) -> None:
        s = await self.get_session(session_id)
        await self.store.delete(self._session_key(session_id))
        await self.store.delete(self._messages_key(session_id))
        key = self._user_key(s.user_id)
        async with self.store.lock(key):
            ids = [sid for sid in await self._load_json(key, []) if sid != session_id]
            await self.store.set(key, json.dumps(ids))
        log.info("chat_session_deleted", session_id=session_id, user_id=s.user_id)

    def _message(self, session_id: str, role: str, content: str, context: ChatContext | None) -> ChatMessagePublic:
        return ChatMessagePublic(
            id=f"msg_{uuid.uuid4().hex}",
            session_id=session_id,
            role=role,
            content=content,
            context=context,
            module_id=context.module_id if context else None,
            timestamp=self.clock(),
        )

    async def _generate(self, prompt: str, session_id: str) -> str:
        try:
            text = await self.model.generate(prompt)
        except Exception:
            # provider outages must not fail the student's request
            log.error("chat_generation_failed", session_id=session_id, exc_info=True)
            return FALLBACK_REPLY
        if not text or not text.strip():
            log.warning("chat_generation_empty", session_id=session_id)
            return FALLBACK_REPLY
        return text.strip()

    async def send_message(
        self,
        session_id: str,
        *,
        user_id: str,
        content: str,
        context: ChatContext | None = None,
    ) -> tuple[ChatMessagePublic, ChatMessagePublic, int]:
        """Returns (user message, assistant message, messages left today)."""
        s = await self.get_session(session_id)
        if s.user_id != user_id:
            raise NotFound("Chat session not found")

        quota = await self.limiter.check_and_consume(user_id)
        if not quota.allowed:
            log.info("chat_rate_limited", user_id=user_id)
            raise RateLimited("Daily message limit exceeded")

        history = await self.list_messages(session_id)
        user_msg = self._message(session_id, "user", content, context)
        prompt = build_prompt(history, content, context)
        reply = await self._generate(prompt, session_id)
        ai_msg = self._message(session_id, "assistant", reply, context)

        key = self._messages_key(session_id)
        async with self.store.lock(key):
            stored = await self._load_json(key, [])
            stored.extend([user_msg.model_dump(mode="json"), ai_msg.model_dump(mode="json")])
            await self.store.set(key, json.dumps(stored))
        await self._save_session(s.model_copy(update={"updated_at": self.clock()}))
        log.info("chat_message_sent", session_id=session_id, user_id=user_id, remaining=quota.remaining)
        return user_msg, ai_msg, quota.remaining


_model: ChatModel | None = None

def get_chat_model() -> ChatModel:
    global _model
    if _model is None:
        _model = GeminiChatModel(settings.gemini_api_key, settings.gemini_model, settings.gemini_timeout_seconds)
    return _model


def get_chat_service() -> ChatService:
    return ChatService(get_kv_store(), get_chat_model(), get_rate_limiter())
