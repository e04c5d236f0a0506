"""
Session assembly for AI steps.

Builds the chat-completion message list from explicit prior messages, the
task history, forwarded step arguments and the current content. The list is
rebuilt on every call and never persisted.
"""

import json
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel

from .protocol.types import Task, get_content

AGENTS_PROMPT = (
    "The assistant can call agents to help with the users request. "
    "Always get a list of the available agents/agent then use the agents whenever possible."
)

EMPTY_CONTENT = frozenset({"", "{}", "[]", "null", "undefined"})


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    return str(value)


def serialize_args(args: Sequence[Any]) -> str:
    return json.dumps(list(args), default=_json_default)


def history_messages(task: Optional[Task]) -> List[Dict[str, str]]:
    """Task history as chat messages, skipping entries without real content"""
    if task is None or not task.history:
        return []

    messages = []
    for message in task.history:
        content = get_content(message)
        if content is None or content in EMPTY_CONTENT:
            continue
        messages.append({
            "role": "assistant" if message.role == "agent" else "user",
            "content": content,
        })
    return messages


def create_session(
    messages: Optional[Sequence[Dict[str, Any]]] = None,
    task: Optional[Task] = None,
    args: Optional[Sequence[Any]] = None,
    content: Optional[str] = None,
    agents: bool = False
) -> List[Dict[str, Any]]:
    """
    Assemble the message list for one model call.

    Order is fixed: prior messages, task history, forwarded arguments (one
    system message with their JSON encoding), current content (one user
    message), then the agent-availability system message when tools exist.
    Pass ``None`` for any source that should be left out.
    """
    session: List[Dict[str, Any]] = [dict(message) for message in (messages or [])]
    session.extend(history_messages(task))

    if args:
        session.append({"role": "system", "content": serialize_args(args)})
    if content:
        session.append({"role": "user", "content": content})
    if agents:
        session.append({"role": "system", "content": AGENTS_PROMPT})

    return session
