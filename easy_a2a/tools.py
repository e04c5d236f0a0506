"""
Tool bridge: exposes peer agents to the model as callable tools.

A peer handle is classified once into an ``AgentTarget`` (single in-process
agent, remote client, or relay of many agents). ``toolify_agents`` then maps
each kind to its tool set. Every tool carries a pydantic model that is both
the JSON schema sent to the model and the validator applied to the model's
arguments before the handler runs.
"""

import json
import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Type, Union

from openai import pydantic_function_tool
from pydantic import BaseModel, ConfigDict, Field

from .protocol.client import A2AClient
from .protocol.types import TaskIdParams, TaskQueryParams, create_message_send_params
from .core.agent import Agent
from .exceptions import InvalidAgentsError
from .relay import AgentRelay, RelayConfig

logger = logging.getLogger(__name__)


class AgentTargetKind(str, Enum):
    SINGLE_AGENT = "single-agent"
    CLIENT = "client"
    RELAY = "relay"


@dataclass(frozen=True)
class AgentTarget:
    """A peer-agent handle tagged with its capability shape"""
    kind: AgentTargetKind
    handle: Union[Agent, A2AClient, AgentRelay]

    @classmethod
    def of(cls, agents: Any) -> "AgentTarget":
        """
        Classify a peer-agent handle.

        Accepts an ``Agent``, an ``A2AClient``, an ``AgentRelay``, a
        ``RelayConfig`` (or a mapping with ``caller_id``/``agents``), a mapping
        of name to agent, or a list of ``(name, agent)`` pairs /
        ``{"name": ..., "agent": ...}`` dicts. Anything else raises
        ``InvalidAgentsError``.
        """
        if isinstance(agents, AgentTarget):
            return agents
        if isinstance(agents, AgentRelay):
            return cls(AgentTargetKind.RELAY, agents)
        if isinstance(agents, Agent):
            return cls(AgentTargetKind.SINGLE_AGENT, agents)
        if isinstance(agents, A2AClient):
            return cls(AgentTargetKind.CLIENT, agents)
        if isinstance(agents, RelayConfig):
            return cls(AgentTargetKind.RELAY, AgentRelay.from_config(agents))
        if isinstance(agents, Mapping):
            caller_id = agents.get("caller_id", agents.get("callerId"))
            if caller_id is not None:
                return cls(AgentTargetKind.RELAY, AgentRelay(caller_id, agents.get("agents")))
            return cls(AgentTargetKind.RELAY, AgentRelay(_multi_agent_caller_id(), agents))
        if isinstance(agents, (list, tuple)):
            return cls(AgentTargetKind.RELAY, AgentRelay(_multi_agent_caller_id(), _named_agents(agents)))
        raise InvalidAgentsError(agents)


def _multi_agent_caller_id() -> str:
    return f"multi-agent-{uuid.uuid4()}"


def _named_agents(entries) -> dict:
    named = {}
    for entry in entries:
        if isinstance(entry, Mapping) and "name" in entry and "agent" in entry:
            named[entry["name"]] = entry["agent"]
        elif isinstance(entry, (list, tuple)) and len(entry) == 2:
            named[entry[0]] = entry[1]
        else:
            raise InvalidAgentsError(entry)
    return named


def create_agent_args(agents: Any) -> Optional[AgentTarget]:
    """Resolve the ``agents`` argument of the builder, ``None`` when absent"""
    if agents is None:
        return None
    return AgentTarget.of(agents)


@dataclass(frozen=True)
class AgentTool:
    """A callable tool with a validated argument model"""
    name: str
    description: str
    parameters: Type[BaseModel]
    function: Callable[[Any], Awaitable[Any]]

    def to_openai(self) -> Any:
        return pydantic_function_tool(self.parameters, name=self.name, description=self.description)

    async def invoke(self, arguments: Union[str, dict, None]) -> Any:
        """Validate raw model arguments, then run the handler"""
        if isinstance(arguments, str):
            args = self.parameters.model_validate_json(arguments or "{}")
        else:
            args = self.parameters.model_validate(arguments or {})
        logger.debug("Invoking tool %s", self.name)
        return await self.function(args)


# Argument models

class ToolArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")


class NoArgs(ToolArgs):
    pass


class MessageSendArgs(ToolArgs):
    message: str = Field(description="The text message to send to the agent")


class TaskGetArgs(ToolArgs):
    id: str = Field(description="The task id")
    history_length: Optional[int] = Field(None, description="Number of history entries to return")


class TaskCancelArgs(ToolArgs):
    id: str = Field(description="The task id")


class RelayMessageSendArgs(ToolArgs):
    agent_id: str = Field(description="The id of the agent to message")
    message: str = Field(description="The text message to send to the agent")


class RelayTaskArgs(ToolArgs):
    agent_id: str = Field(description="The id of the agent owning the task")
    task_id: str = Field(description="The task id")


class RelayAgentArgs(ToolArgs):
    agent_id: str = Field(description="The id of the agent")


class RelaySearchArgs(ToolArgs):
    query: str = Field(description="Text to look for in agent names, descriptions and skills")


GET_AGENT_CARD_DESCRIPTION = (
    "Retrieve the agent's AgentCard which contains information about the agent's capabilities, "
    "skills, default input/output modes, and other information."
)


def _peer_tools(send_message, get_card, get_task, cancel_task) -> List[AgentTool]:
    return [
        AgentTool(
            name="message-send",
            description="Send a message to the agent. This will send the message to the agent and return the result.",
            parameters=MessageSendArgs,
            function=lambda args: send_message(create_message_send_params(args.message)),
        ),
        AgentTool(
            name="get-agent-card",
            description=GET_AGENT_CARD_DESCRIPTION,
            parameters=NoArgs,
            function=lambda args: get_card(),
        ),
        AgentTool(
            name="tasks-get",
            description="Retrieve the current state of a task by passing its ID and optional history length",
            parameters=TaskGetArgs,
            function=lambda args: get_task(TaskQueryParams(id=args.id, historyLength=args.history_length)),
        ),
        AgentTool(
            name="tasks-cancel",
            description=(
                "Cancel a task by passing its ID. This will cancel the task and return "
                "information about the cancelled task."
            ),
            parameters=TaskCancelArgs,
            function=lambda args: cancel_task(TaskIdParams(id=args.id)),
        ),
    ]


def toolify_agent_instance(agent: Agent) -> List[AgentTool]:
    async def get_card():
        return agent.agent_card

    return _peer_tools(agent.send_message, get_card, agent.get_task, agent.cancel_task)


def toolify_client(client: A2AClient) -> List[AgentTool]:
    return _peer_tools(client.send_message, client.agent_card, client.get_task, client.cancel_task)


def toolify_agent_relay(relay: AgentRelay) -> List[AgentTool]:
    return [
        AgentTool(
            name="relay-message-send",
            description=(
                "Send a message to an agent via the relay. This will send the message to the agent "
                "indicated by the agent_id and return the result."
            ),
            parameters=RelayMessageSendArgs,
            function=lambda args: relay.send_message(args.agent_id, create_message_send_params(args.message)),
        ),
        AgentTool(
            name="relay-tasks-get",
            description="Retrieve the current state of a task owned by the agent indicated by the agent_id.",
            parameters=RelayTaskArgs,
            function=lambda args: relay.get_task(args.agent_id, TaskQueryParams(id=args.task_id)),
        ),
        AgentTool(
            name="relay-tasks-cancel",
            description="Cancel a task owned by the agent indicated by the agent_id.",
            parameters=RelayTaskArgs,
            function=lambda args: relay.cancel_task(args.agent_id, TaskIdParams(id=args.task_id)),
        ),
        AgentTool(
            name="relay-agents-get-card-all",
            description="Get all the agent cards from the relay. This will return an array of AgentCard objects.",
            parameters=NoArgs,
            function=lambda args: relay.get_agent_cards(),
        ),
        AgentTool(
            name="relay-agents-get-ids",
            description="Get the ids of all the agents from the relay. This will return an array of strings.",
            parameters=NoArgs,
            function=lambda args: relay.get_agent_ids(),
        ),
        AgentTool(
            name="relay-agents-search",
            description="Search the relay for agents whose name, description or skills match the query.",
            parameters=RelaySearchArgs,
            function=lambda args: relay.search_agents(args.query),
        ),
        AgentTool(
            name="relay-agents-get-card",
            description=(
                "Get the agent card from the relay for the given agent_id. "
                "This will return an AgentCard object."
            ),
            parameters=RelayAgentArgs,
            function=lambda args: relay.get_agent_card(args.agent_id),
        ),
    ]


def toolify_agents(agents: Any) -> List[AgentTool]:
    """Build a fresh tool list for a peer target; raw handles are classified first"""
    target = AgentTarget.of(agents)
    if target.kind is AgentTargetKind.RELAY:
        return toolify_agent_relay(target.handle)
    if target.kind is AgentTargetKind.SINGLE_AGENT:
        return toolify_agent_instance(target.handle)
    if target.kind is AgentTargetKind.CLIENT:
        return toolify_client(target.handle)
    raise InvalidAgentsError(target.handle)


def serialize_tool_result(result: Any) -> str:
    """Render a handler result as tool-message content"""
    if isinstance(result, str):
        return result
    if isinstance(result, BaseModel):
        return result.model_dump_json(by_alias=True, exclude_none=True)
    if isinstance(result, list):
        return json.dumps([
            item.model_dump(mode="json", by_alias=True, exclude_none=True) if isinstance(item, BaseModel) else item
            for item in result
        ])
    return json.dumps(result, default=str)
