import asyncio
import pytest
from conftest import CHAT_LIMIT
from ecolearn.services.chat import FALLBACK_REPLY, DEFAULT_TITLE


async def _new_session(client, user_id="u1", **extra):
    r = await client.post("/api/chat/sessions", json={"userId": user_id, **extra})
    assert r.status_code == 200, r.text
    return r.json()["session"]


@pytest.mark.asyncio
async def test_session_lifecycle(client):
    s = await _new_session(client)
    assert s["id"].startswith("session_")
    assert s["title"] == DEFAULT_TITLE
    named = await _new_session(client, title="Recycling questions")
    await _new_session(client, user_id="someone-else")

    r = await client.get("/api/chat/sessions/u1")
    assert {x["id"] for x in r.json()["sessions"]} == {s["id"], named["id"]}

    r = await client.get(f"/api/chat/sessions/{s['id']}/messages")
    assert r.json()["messages"] == []

    r = await client.delete(f"/api/chat/sessions/{s['id']}")
    assert r.json()["success"] is True
    r = await client.get(f"/api/chat/sessions/{s['id']}/messages")
    assert r.status_code == 404
    r = await client.get("/api/chat/sessions/u1")
    assert [x["id"] for x in r.json()["sessions"]] == [named["id"]]
    r = await client.delete(f"/api/chat/sessions/{s['id']}")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_send_message_returns_reply_and_quota(client, chat_model):
    s = await _new_session(client)
    r = await client.post(
        f"/api/chat/sessions/{s['id']}/messages",
        json={
            "userId": "u1",
            "content": "How does composting help?",
            "context": {"page": "lesson", "moduleId": "waste-101", "lessonId": "compost-1"},
        },
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["userMessage"]["role"] == "user"
    assert body["userMessage"]["content"] == "How does composting help?"
    assert body["userMessage"]["moduleId"] == "waste-101"
    assert body["aiMessage"]["role"] == "assistant"
    assert body["aiMessage"]["content"] == chat_model.reply
    assert body["remainingMessages"] == CHAT_LIMIT - 1

    prompt = chat_model.prompts[-1]
    assert "Current page: lesson" in prompt
    assert "Module: waste-101" in prompt
    assert "Lesson: compost-1" in prompt
    assert prompt.rstrip().endswith("User: How does composting help?\nAssistant:")

    r = await client.get(f"/api/chat/sessions/{s['id']}/messages")
    assert [m["role"] for m in r.json()["messages"]] == ["user", "assistant"]


@pytest.mark.asyncio
async def test_history_is_included_in_next_prompt(client, chat_model):
    s = await _new_session(client)
    url = f"/api/chat/sessions/{s['id']}/messages"
    await client.post(url, json={"userId": "u1", "content": "What is solar power?"})
    await client.post(url, json={"userId": "u1", "content": "And wind?"})
    assert "user: What is solar power?" in chat_model.prompts[-1]
    assert f"assistant: {chat_model.reply}" in chat_model.prompts[-1]


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [RuntimeError("provider down"), asyncio.TimeoutError()])
async def test_model_failure_falls_back(client, chat_model, error):
    chat_model.error = error
    s = await _new_session(client)
    r = await client.post(f"/api/chat/sessions/{s['id']}/messages", json={"userId": "u1", "content": "hi"})
    assert r.status_code == 200
    assert r.json()["aiMessage"]["content"] == FALLBACK_REPLY


@pytest.mark.asyncio
async def test_blank_model_reply_falls_back(client, chat_model):
    chat_model.reply = "   "
    s = await _new_session(client)
    r = await client.post(f"/api/chat/sessions/{s['id']}/messages", json={"userId": "u1", "content": "hi"})
    assert r.json()["aiMessage"]["content"] == FALLBACK_REPLY


@pytest.mark.asyncio
async def test_daily_limit_returns_429(client, chat_model):
    s = await _new_session(client)
    url = f"/api/chat/sessions/{s['id']}/messages"
    for i in range(CHAT_LIMIT):
        r = await client.post(url, json={"userId": "u1", "content": f"q{i}"})
        assert r.status_code == 200
    assert r.json()["remainingMessages"] == 0

    r = await client.post(url, json={"userId": "u1", "content": "one more"})
    assert r.status_code == 429
    assert r.json()["detail"] == "Daily message limit exceeded"
    assert len(chat_model.prompts) == CHAT_LIMIT

    other = await _new_session(client, user_id="u2")
    r = await client.post(f"/api/chat/sessions/{other['id']}/messages", json={"userId": "u2", "content": "hi"})
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_message_validation(client):
    s = await _new_session(client)
    url = f"/api/chat/sessions/{s['id']}/messages"
    r = await client.post(url, json={"userId": "u1", "content": "hi", "context": {"page": "quiz", "answers": "A,B"}})
    assert r.status_code == 422
    r = await client.post(url, json={"userId": "u1", "content": ""})
    assert r.status_code == 422
    r = await client.post(url, json={"userId": "intruder", "content": "hi"})
    assert r.status_code == 404
    r = await client.post("/api/chat/sessions/session_missing/messages", json={"userId": "u1", "content": "hi"})
    assert r.status_code == 404
