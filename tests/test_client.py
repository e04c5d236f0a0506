"""
Tests for the JSON-RPC client against a mocked remote agent
"""

import json

import httpx
import pytest
import respx
from httpx import Response

from easy_a2a import (
    A2AClient,
    A2AClientError,
    TaskIdParams,
    TaskQueryParams,
    TaskState,
    create_agent_card,
    create_message,
    create_status_update,
    create_task,
    create_text_part,
)
from easy_a2a.protocol.client import parse_sse_event

BASE_URL = "http://remote.test/a2a"


def rpc_result(result):
    return Response(200, json={"jsonrpc": "2.0", "id": "req_1", "result": result})


def completed_task(text="Bonjour"):
    task = create_task("task-1", "ctx-1", state=TaskState.COMPLETED)
    message = create_message("agent", [create_text_part(text)], "ctx-1", "task-1")
    return task.model_copy(update={"status": task.status.model_copy(update={"message": message})})


@pytest.mark.asyncio
@respx.mock
async def test_send_message_returns_task():
    route = respx.post(BASE_URL).mock(return_value=rpc_result(completed_task().to_dict()))

    task = await A2AClient(BASE_URL).send_message("Translate hello")

    assert task.kind == "task"
    assert task.status.message.parts[0].text == "Bonjour"
    body = json.loads(route.calls.last.request.content)
    assert body["method"] == "message/send"
    assert body["id"].startswith("req_")
    assert body["params"]["message"]["parts"] == [{"kind": "text", "text": "Translate hello"}]


@pytest.mark.asyncio
@respx.mock
async def test_send_message_returns_message():
    reply = create_message("agent", [create_text_part("direct")])
    respx.post(BASE_URL).mock(return_value=rpc_result(reply.to_dict()))

    result = await A2AClient(BASE_URL).send_message("hi")

    assert result.kind == "message"


@pytest.mark.asyncio
@respx.mock
async def test_get_and_cancel_task():
    route = respx.post(BASE_URL).mock(return_value=rpc_result(completed_task().to_dict()))
    client = A2AClient(BASE_URL, headers={"Authorization": "Bearer token"})

    task = await client.get_task(TaskQueryParams(id="task-1", historyLength=2))
    await client.cancel_task(TaskIdParams(id="task-1"))

    assert task.id == "task-1"
    first, second = [json.loads(call.request.content) for call in route.calls]
    assert first["method"] == "tasks/get"
    assert first["params"] == {"id": "task-1", "historyLength": 2}
    assert second["method"] == "tasks/cancel"
    assert route.calls.last.request.headers["Authorization"] == "Bearer token"


@pytest.mark.asyncio
@respx.mock
async def test_jsonrpc_error_raised():
    respx.post(BASE_URL).mock(return_value=Response(200, json={
        "jsonrpc": "2.0",
        "id": "req_1",
        "error": {"code": -32001, "message": "Task not found", "data": {"id": "x"}},
    }))

    with pytest.raises(A2AClientError) as exc_info:
        await A2AClient(BASE_URL).get_task(TaskQueryParams(id="x"))

    assert exc_info.value.code == -32001
    assert exc_info.value.data == {"id": "x"}


@pytest.mark.asyncio
@respx.mock
async def test_http_error_raised():
    respx.post(BASE_URL).mock(return_value=Response(503, text="unavailable"))

    with pytest.raises(A2AClientError) as exc_info:
        await A2AClient(BASE_URL).send_message("hi")

    assert exc_info.value.code == 503


@pytest.mark.asyncio
@respx.mock
async def test_timeout_raised_as_client_error():
    respx.post(BASE_URL).mock(side_effect=httpx.ReadTimeout("slow"))

    with pytest.raises(A2AClientError, match="timeout"):
        await A2AClient(BASE_URL, timeout=0.5).send_message("hi")


@pytest.mark.asyncio
@respx.mock
async def test_agent_card_from_well_known_path():
    card = create_agent_card("Translator")
    route = respx.get("http://remote.test/.well-known/agent-card.json").mock(
        return_value=Response(200, json=card.to_dict())
    )

    fetched = await A2AClient(BASE_URL).agent_card()

    assert route.called
    assert fetched.name == "Translator"


@pytest.mark.asyncio
@respx.mock
async def test_stream_message_yields_events():
    working = create_status_update("task-1", "ctx-1", TaskState.WORKING)
    done = create_status_update("task-1", "ctx-1", TaskState.COMPLETED, final=True)
    stream = "".join(
        f"data: {json.dumps({'jsonrpc': '2.0', 'id': 'req_1', 'result': event.to_dict()})}\n\n"
        for event in (working, done)
    )
    respx.post(BASE_URL).mock(return_value=Response(
        200, text=stream, headers={"Content-Type": "text/event-stream"}
    ))

    events = [event async for event in A2AClient(BASE_URL).stream_message("hi")]

    assert [event.status.state for event in events] == [TaskState.WORKING, TaskState.COMPLETED]
    assert events[-1].final is True


def test_parse_sse_event():
    assert parse_sse_event('data: {"a": 1}') == {"a": 1}
    assert parse_sse_event(": keep-alive") is None
    assert parse_sse_event("data: not json") is None


def test_timeout_from_environment(monkeypatch):
    monkeypatch.setenv("EASY_A2A_CLIENT_TIMEOUT", "5")
    assert A2AClient(BASE_URL + "/").timeout == 5.0
    assert A2AClient(BASE_URL + "/").base_url == BASE_URL
