"""
A2A client
JSON-RPC 2.0 over HTTP to a remote agent, using httpx
"""

import json
import logging
from collections.abc import AsyncGenerator
from typing import Any, Dict, Optional, Union

import httpx
from pydantic import TypeAdapter

from ..config import get_client_timeout
from ..exceptions import A2AClientError
from .types import (
    A2AErrorCodes,
    AgentCard,
    Message,
    MessageSendParams,
    SendMessageResult,
    Task,
    TaskIdParams,
    TaskQueryParams,
    UpdateEvent,
    create_message_send_params,
    new_id,
)

logger = logging.getLogger(__name__)

AGENT_CARD_PATH = "/.well-known/agent-card.json"

_send_result_adapter = TypeAdapter(SendMessageResult)
_update_event_adapter = TypeAdapter(UpdateEvent)


def create_jsonrpc_request(method: str, params: Dict[str, Any]) -> Dict[str, Any]:
    """Create a JSON-RPC request body"""
    return {
        "jsonrpc": "2.0",
        "id": f"req_{new_id()}",
        "method": method,
        "params": params,
    }


def parse_sse_event(line: str) -> Optional[Dict[str, Any]]:
    """Parse a single Server-Sent Event ``data:`` line"""
    if not line.startswith("data: "):
        return None

    data = line[6:]
    if not data.strip():
        return None

    try:
        return json.loads(data)
    except json.JSONDecodeError:
        logger.warning("Failed to parse SSE data: %s", data)
        return None


class A2AClient:
    """
    Handle on a remote A2A agent.

    ``base_url`` is the agent's JSON-RPC endpoint, usually the ``url`` of its
    agent card. The card itself is fetched from the well-known path under the
    same origin.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else get_client_timeout()
        self.headers = dict(headers or {})

    def __repr__(self) -> str:
        return f"A2AClient({self.base_url!r})"

    async def _rpc(self, method: str, params: Dict[str, Any]) -> Any:
        body = create_jsonrpc_request(method, params)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    self.base_url,
                    json=body,
                    headers={
                        "Content-Type": "application/json",
                        "Accept": "application/json",
                        **self.headers,
                    }
                )
            except httpx.TimeoutException as e:
                raise A2AClientError(
                    A2AErrorCodes.INTERNAL_ERROR.value,
                    f"Request timeout after {self.timeout}s"
                ) from e

        if not response.is_success:
            raise A2AClientError(response.status_code, f"HTTP {response.status_code}: {response.text}")

        payload = response.json()
        if "error" in payload and payload["error"] is not None:
            error = payload["error"]
            raise A2AClientError(error.get("code", 0), error.get("message", ""), error.get("data"))
        return payload.get("result")

    async def send_message(self, params: Union[str, MessageSendParams]) -> Union[Task, Message]:
        params = create_message_send_params(params)
        logger.debug("message/send to %s", self.base_url)
        result = await self._rpc("message/send", params.to_dict())
        return _send_result_adapter.validate_python(result)

    async def stream_message(self, params: Union[str, MessageSendParams]) -> AsyncGenerator[Any, None]:
        """Stream update events from message/stream"""
        params = create_message_send_params(params)
        body = create_jsonrpc_request("message/stream", params.to_dict())

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            async with client.stream(
                "POST",
                self.base_url,
                json=body,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "text/event-stream",
                    **self.headers,
                }
            ) as response:
                if not response.is_success:
                    await response.aread()
                    raise A2AClientError(response.status_code, f"HTTP {response.status_code}: {response.text}")

                async for line in response.aiter_lines():
                    event = parse_sse_event(line)
                    if event is None:
                        continue
                    if event.get("error"):
                        error = event["error"]
                        raise A2AClientError(error.get("code", 0), error.get("message", ""), error.get("data"))
                    if "result" in event:
                        yield _update_event_adapter.validate_python(event["result"])

    async def get_task(self, params: TaskQueryParams) -> Task:
        result = await self._rpc("tasks/get", params.to_dict())
        return Task.model_validate(result)

    async def cancel_task(self, params: TaskIdParams) -> Task:
        result = await self._rpc("tasks/cancel", params.to_dict())
        return Task.model_validate(result)

    async def agent_card(self) -> AgentCard:
        url = str(httpx.URL(self.base_url).copy_with(path=AGENT_CARD_PATH))

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(url, headers={"Accept": "application/json", **self.headers})

        if not response.is_success:
            raise A2AClientError(response.status_code, f"Failed to get agent card: HTTP {response.status_code}")

        return AgentCard.model_validate(response.json())
