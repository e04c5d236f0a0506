"""
Shared fixtures: a mock chat-completions client and completion factories.
"""

import json
import time
from typing import Any, Dict, List, Optional

import pytest
from openai.types.chat import ChatCompletion

from easy_a2a import EngineBuilder


def build_completion(
    content: Optional[str] = None,
    tool_calls: Optional[List[Dict[str, Any]]] = None,
    total_tokens: int = 12
) -> ChatCompletion:
    message: Dict[str, Any] = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = [
            {
                "id": call.get("id", f"call_{index}"),
                "type": "function",
                "function": {"name": call["name"], "arguments": json.dumps(call.get("arguments", {}))},
            }
            for index, call in enumerate(tool_calls)
        ]
    return ChatCompletion.model_validate({
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": int(time.time()),
        "model": "gpt-4o-mini",
        "choices": [{
            "index": 0,
            "finish_reason": "tool_calls" if tool_calls else "stop",
            "message": message,
        }],
        "usage": {"prompt_tokens": 10, "completion_tokens": 2, "total_tokens": total_tokens},
    })


class _Completions:
    def __init__(self, owner: "MockOpenAIClient"):
        self._owner = owner

    async def create(self, **kwargs):
        return await self._owner.create(**kwargs)


class _Chat:
    def __init__(self, owner: "MockOpenAIClient"):
        self.completions = _Completions(owner)


class MockOpenAIClient:
    """Stands in for AsyncOpenAI; replays queued completions and records requests"""

    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.requests: List[Dict[str, Any]] = []
        self.options: List[Dict[str, Any]] = []
        self.chat = _Chat(self)

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    def with_options(self, **options):
        self.options.append(options)
        return self


@pytest.fixture
def completion():
    return build_completion


@pytest.fixture
def mock_client():
    return MockOpenAIClient


@pytest.fixture
def echo_agent():
    return (
        EngineBuilder()
        .text(lambda params: f"Echo: {params.content}")
        .create_agent({
            "name": "Echo",
            "description": "Repeats whatever it is told",
            "skills": [{
                "id": "echo",
                "name": "Echo",
                "description": "Echo messages back",
                "tags": ["echo", "repeat"],
            }],
        })
    )
