"""
OpenAI-compatible A2A agent builder.

Extends the step pipeline with AI steps: each AI step assembles a chat session
from the task history, the arguments forwarded by the previous step and the
inbound content, calls the chat-completions API (through a tool loop when peer
agents are configured) and forwards the raw completion to the next step.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from openai import AsyncOpenAI

from .protocol.types import Task
from .config import get_default_model
from .core.engine import EngineBuilder, Step, StepOutput, StepParams, StepWithKind
from .runner import run_tools, with_request_options
from .session import create_session
from .tools import AgentTarget, create_agent_args, toolify_agents

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AIStepSettings:
    include_history: bool = True
    include_args: bool = True
    include_content: bool = True
    disable_agents: bool = False


@dataclass(frozen=True)
class AIStepArgs:
    """
    Configuration of one AI step.

    Attributes:
        client: ``AsyncOpenAI`` (or compatible) client
        settings: which context sources feed the session, and whether peer agents are offered as tools
        body: chat-completion request body; ``messages`` are used as the session prefix
        options: request options applied with ``client.with_options`` (``max_retries``, ``timeout``...)
        agents: peer agents exposed as tools
    """
    client: Any
    settings: AIStepSettings = field(default_factory=AIStepSettings)
    body: Optional[Dict[str, Any]] = None
    options: Optional[Dict[str, Any]] = None
    agents: Optional[AgentTarget] = None


def _session_task(params: StepParams, settings: AIStepSettings) -> Task:
    """
    The task whose history feeds the session.

    When the inbound content is sent as its own user message, the inbound
    message is dropped from the history so the turn is not sent twice.
    """
    task = params.context.get_task()
    if not (settings.include_content and params.content):
        return task
    current_id = params.command.message.message_id
    history = [message for message in (task.history or []) if message.message_id != current_id]
    return task.model_copy(update={"history": history})


def ai_step(step_args: AIStepArgs) -> Step:
    """Create a step that answers with one chat completion"""

    async def step(params: StepParams) -> StepOutput:
        settings = step_args.settings
        body = step_args.body or {"model": get_default_model(), "messages": []}

        tools = toolify_agents(step_args.agents) if step_args.agents is not None else []

        messages = create_session(
            body.get("messages"),
            _session_task(params, settings) if settings.include_history else None,
            params.args if settings.include_args else None,
            params.content if settings.include_content else None,
            agents=bool(tools),
        )
        logger.debug("AI step: model=%s messages=%d tools=%d", body.get("model"), len(messages), len(tools))

        if not tools or settings.disable_agents:
            api = with_request_options(step_args.client, step_args.options)
            completion = await api.chat.completions.create(**{**body, "messages": messages})
        else:
            completion = await run_tools(
                step_args.client,
                {**body, "messages": messages},
                tools,
                step_args.options,
            )

        content = completion.choices[0].message.content
        return StepOutput(parts=content if content else [], args=(completion,))

    return step


class OpenAIEngineBuilder(EngineBuilder):
    """
    Builder for A2A agents backed by any OpenAI-compatible API.

    Example:
        ```python
        builder = OpenAIEngineBuilder(AsyncOpenAI(api_key="your-api-key"))
        agent = (
            builder
            .ai("You are a helpful assistant.")
            .text(lambda params: f"Tokens used: {params.args[0].usage.total_tokens}")
            .create_agent("Assistant")
        )
        ```
    """

    def __init__(
        self,
        client: Any,
        steps: Sequence[StepWithKind] = (),
        agents: Optional[AgentTarget] = None
    ):
        super().__init__(steps)
        self._client = client
        self._agents = agents

    @property
    def client(self) -> Any:
        return self._client

    @property
    def agents(self) -> Optional[AgentTarget]:
        return self._agents

    def _derive(self, steps: Tuple[StepWithKind, ...]) -> "OpenAIEngineBuilder":
        return OpenAIEngineBuilder(self._client, steps, self._agents)

    def ai(
        self,
        body: Union[str, Dict[str, Any]],
        *,
        include_history: bool = True,
        include_args: bool = True,
        include_content: bool = True,
        disable_agents: bool = False,
        **options: Any
    ) -> "OpenAIEngineBuilder":
        """
        Add an AI step that calls the chat-completions API.

        Args:
            body: a system prompt (using the default model) or a full request body
            include_history: send the task's conversation history
            include_args: send the previous step's forwarded args as a JSON system message
            include_content: send the inbound message content as a user message
            disable_agents: make a plain completion, without sending the peer-agent tools
            **options: request options such as ``max_retries`` or ``timeout``

        The next step receives the raw ``ChatCompletion`` as ``args[0]``.
        """
        if isinstance(body, str):
            body = {"model": get_default_model(), "messages": [{"role": "system", "content": body}]}

        return self.add_step(
            ai_step(AIStepArgs(
                client=self._client,
                settings=AIStepSettings(
                    include_history=include_history,
                    include_args=include_args,
                    include_content=include_content,
                    disable_agents=disable_agents,
                ),
                body=body,
                options=options or None,
                agents=self._agents,
            )),
            "text",
        )


def ai_agent_builder(client: Union[AsyncOpenAI, Mapping, Any], agents: Any = None) -> OpenAIEngineBuilder:
    """Create a builder from a client (or client options) and optional peer agents"""
    if isinstance(client, Mapping):
        client = AsyncOpenAI(**client)
    return OpenAIEngineBuilder(client, (), create_agent_args(agents))
