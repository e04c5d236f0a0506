"""
easy-a2a - build Agent2Agent agents on any OpenAI-compatible API.

Main exports:
- a2a: entry point returning a chainable agent builder
- EngineBuilder / OpenAIEngineBuilder: immutable step pipelines
- Agent: in-process A2A agent runtime
- AgentRelay / A2AClient: peer agents an AI step can call as tools
- convert_executor: run a2a-sdk AgentExecutors as agent engines

Usage:

    from easy_a2a import a2a

    agent = (
        a2a({"api_key": "your-api-key"})
        .ai("You are a helpful assistant.")
        .create_agent("MyAgent")
    )
    task = await agent.send_message("Hello!")
"""

from typing import Any

from .protocol import *  # noqa: F401,F403
from .protocol import __all__ as _protocol_all
from .builder import AIStepArgs, AIStepSettings, OpenAIEngineBuilder, ai_agent_builder, ai_step
from .core import (
    Agent,
    AgentEngine,
    Context,
    EngineBuilder,
    InMemoryTaskStore,
    Step,
    StepOutput,
    StepParams,
    StepWithKind,
    create_step_engine,
)
from .exceptions import (
    A2AClientError,
    AgentNotFoundError,
    ConfigurationError,
    EasyA2AException,
    EngineBuildError,
    InvalidAgentsError,
    StepOutputError,
    TaskNotCancelableError,
    TaskNotFoundError,
)
from .executor import convert_executor, create_request_context, to_update_event
from .relay import AgentRelay, RelayConfig
from .runner import run_tools
from .session import create_session
from .tools import AgentTarget, AgentTargetKind, AgentTool, toolify_agents

__version__ = "0.1.0"


def a2a(client: Any, agents: Any = None) -> OpenAIEngineBuilder:
    """
    Create a builder for an A2A agent backed by an OpenAI-compatible API.

    Args:
        client: an ``AsyncOpenAI`` instance, or a dict of ``AsyncOpenAI``
            options (``api_key``, ``base_url``...)
        agents: optional peer agents the AI steps may call as tools: an
            ``Agent``, an ``A2AClient``, an ``AgentRelay``, a ``RelayConfig``,
            or a mapping / list of named agents

    Example:
        ```python
        helper = EngineBuilder().text(lambda p: f"Echo: {p.content}").create_agent("Helper")

        agent = (
            a2a({"api_key": "your-api-key"}, {"helper": helper})
            .ai("Use the helper agent when users want to echo messages.")
            .create_agent("MainAgent")
        )
        ```
    """
    return ai_agent_builder(client, agents)


def agent_builder() -> EngineBuilder:
    """Create a builder for agents made only of plain steps"""
    return EngineBuilder()


__all__ = [
    *_protocol_all,
    "A2AClientError",
    "AIStepArgs",
    "AIStepSettings",
    "Agent",
    "AgentEngine",
    "AgentNotFoundError",
    "AgentRelay",
    "AgentTarget",
    "AgentTargetKind",
    "AgentTool",
    "ConfigurationError",
    "Context",
    "EasyA2AException",
    "EngineBuildError",
    "EngineBuilder",
    "InMemoryTaskStore",
    "InvalidAgentsError",
    "OpenAIEngineBuilder",
    "RelayConfig",
    "Step",
    "StepOutput",
    "StepOutputError",
    "StepParams",
    "StepWithKind",
    "TaskNotCancelableError",
    "TaskNotFoundError",
    "__version__",
    "a2a",
    "agent_builder",
    "ai_agent_builder",
    "ai_step",
    "convert_executor",
    "create_request_context",
    "create_session",
    "create_step_engine",
    "run_tools",
    "to_update_event",
    "toolify_agents",
]
