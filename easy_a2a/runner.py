"""
Bounded tool-calling loop over the chat-completions API.

Each round sends the conversation with the tool definitions. Tool calls in the
reply are executed and answered with ``tool`` messages; a reply without tool
calls ends the run. Tool failures (unknown tool, invalid arguments, handler
errors) are reported to the model as JSON error payloads and never abort the
run. After ``max_rounds`` rounds a last request is sent with
``tool_choice="none"`` so the model has to answer.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from .config import get_max_tool_rounds
from .tools import AgentTool, serialize_tool_result

logger = logging.getLogger(__name__)


def with_request_options(client: Any, options: Optional[Dict[str, Any]]) -> Any:
    """Apply per-request options (``max_retries``, ``timeout``...) to a client"""
    if not options:
        return client
    return client.with_options(**options)


def _assistant_message(message: Any) -> Dict[str, Any]:
    return {
        "role": "assistant",
        "content": message.content,
        "tool_calls": [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.function.name, "arguments": call.function.arguments},
            }
            for call in message.tool_calls
        ],
    }


async def execute_tool_call(tool_call: Any, tools: Dict[str, AgentTool]) -> Dict[str, Any]:
    """Run one tool call and build the ``tool`` message answering it"""
    name = tool_call.function.name
    tool = tools.get(name)

    if tool is None:
        logger.warning("Model requested unknown tool %s", name)
        content = json.dumps({"error": "tool_not_found", "message": f"Tool {name} not found", "tool_name": name})
    else:
        try:
            result = await tool.invoke(tool_call.function.arguments)
            content = serialize_tool_result(result)
        except ValidationError as e:
            logger.warning("Invalid arguments for tool %s: %s", name, e)
            content = json.dumps({
                "error": "validation_error",
                "message": f"Invalid arguments for {name}: {e!s}",
                "tool_name": name,
            })
        except Exception as e:
            logger.warning("Tool %s failed: %s", name, e)
            content = json.dumps({"error": "execution_error", "message": str(e), "tool_name": name})

    return {"role": "tool", "tool_call_id": tool_call.id, "content": content}


async def run_tools(
    client: Any,
    body: Dict[str, Any],
    tools: Sequence[AgentTool],
    options: Optional[Dict[str, Any]] = None,
    max_rounds: Optional[int] = None
) -> Any:
    """Run the tool loop and return the final chat completion"""
    api = with_request_options(client, options)
    rounds = max_rounds if max_rounds is not None else get_max_tool_rounds()
    registry = {tool.name: tool for tool in tools}
    definitions = [tool.to_openai() for tool in tools]
    messages: List[Dict[str, Any]] = list(body.get("messages", []))

    for round_number in range(rounds):
        completion = await api.chat.completions.create(**{**body, "messages": messages, "tools": definitions})
        message = completion.choices[0].message
        if not message.tool_calls:
            return completion

        logger.debug("Tool round %d: %d call(s)", round_number + 1, len(message.tool_calls))
        messages = [*messages, _assistant_message(message)]
        for tool_call in message.tool_calls:
            messages = [*messages, await execute_tool_call(tool_call, registry)]

    logger.info("Reached %d tool rounds, requesting a final answer", rounds)
    return await api.chat.completions.create(
        **{**body, "messages": messages, "tools": definitions, "tool_choice": "none"}
    )
