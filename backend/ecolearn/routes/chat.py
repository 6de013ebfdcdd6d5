from __future__ import annotations
from fastapi import APIRouter, Depends
from ecolearn.schemas.chat import (
    ChatMessageCreate, ChatMessageList, ChatReply, ChatSessionCreate, ChatSessionEnvelope, ChatSessionList,
)
from ecolearn.services.chat import ChatService, get_chat_service

router = APIRouter(prefix="/api/chat", tags=["chat"])

@router.post("/sessions", response_model=ChatSessionEnvelope)
async def create_session(payload: ChatSessionCreate, chat: ChatService = Depends(get_chat_service)):
    return {"session": await chat.create_session(payload.user_id, payload.title)}

@router.get("/sessions/{user_id}", response_model=ChatSessionList)
async def list_sessions(user_id: str, chat: ChatService = Depends(get_chat_service)):
    return {"sessions": await chat.list_sessions(user_id)}

@router.get("/sessions/{session_id}/messages", response_model=ChatMessageList)
async def list_messages(session_id: str, chat: ChatService = Depends(get_chat_service)):
    return {"messages": await chat.list_messages(session_id)}

@router.post("/sessions/{session_id}/messages", response_model=ChatReply)
async def send_message(session_id: str, payload: ChatMessageCreate, chat: ChatService = Depends(get_chat_service)):
    user_msg, ai_msg, remaining = await chat.send_message(
        session_id, user_id=payload.user_id, content=payload.content, context=payload.context,
    )
    return {"user_message": user_msg, "ai_message": ai_msg, "remaining_messages": remaining}

@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, chat: ChatService = Depends(get_chat_service)):
    await chat.delete_session(session_id)
    return {"success": True, "message": "Chat session deleted successfully"}
