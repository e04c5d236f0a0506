"""
Step pipeline and engine builder.

A pipeline is an immutable, append-only tuple of steps. Each step receives the
inbound command, the execution context, the message content and the arguments
forwarded by the previous step, and returns output parts (optionally with new
forwarded arguments). ``create_step_engine`` runs the steps strictly in order
and turns their output into A2A update events.
"""

import inspect
import logging
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Literal, Optional, Sequence, Tuple, Union

from ..protocol.agent_card import create_agent_card
from ..protocol.types import (
    AgentCard,
    DataPart,
    File,
    FilePart,
    MessageSendParams,
    TaskState,
    TextPart,
    create_artifact_update,
    create_message,
    create_status_update,
    get_content,
)
from ..exceptions import ConfigurationError, EngineBuildError, StepOutputError
from .agent import Agent, AgentEngine
from .context import Context
from .tasks import InMemoryTaskStore

logger = logging.getLogger(__name__)

StepKind = Literal["text", "file", "data"]
STEP_KINDS = ("text", "file", "data")


@dataclass(frozen=True)
class StepParams:
    """Everything a step gets to see for one invocation"""
    command: MessageSendParams
    context: Context
    content: str
    args: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class StepOutput:
    """Output parts plus the arguments forwarded verbatim to the next step"""
    parts: Any
    args: Tuple[Any, ...] = ()


Step = Callable[[StepParams], Union[Any, Awaitable[Any]]]


@dataclass(frozen=True)
class StepWithKind:
    step: Step
    kind: StepKind = "text"


@dataclass(frozen=True)
class NormalizedOutput:
    parts: List[Any] = field(default_factory=list)
    args: Tuple[Any, ...] = ()


def _to_part(value: Any, kind: StepKind) -> Any:
    if kind == "text":
        if isinstance(value, TextPart):
            return value
        if isinstance(value, str):
            return TextPart(text=value)
    elif kind == "data":
        if isinstance(value, DataPart):
            return value
        if isinstance(value, Mapping):
            return DataPart(data=dict(value))
    elif kind == "file":
        if isinstance(value, FilePart):
            return value
        if isinstance(value, File):
            return FilePart(file=value)
        if isinstance(value, Mapping):
            return FilePart(file=File.model_validate(dict(value)))
    raise StepOutputError(kind, value)


def _is_forwarding_dict(output: Any) -> bool:
    return isinstance(output, Mapping) and "parts" in output and set(output) <= {"parts", "args"}


def normalize_step_output(output: Any, kind: StepKind) -> NormalizedOutput:
    """
    Turn whatever a step returned into protocol parts and forwarded args.

    Accepted shapes are a single part value, a list of part values, a
    ``StepOutput`` or a ``{"parts": ..., "args": ...}`` mapping. Every part
    must match the step's declared kind.
    """
    args: Tuple[Any, ...] = ()
    if isinstance(output, StepOutput):
        parts, args = output.parts, tuple(output.args or ())
    elif _is_forwarding_dict(output):
        parts, args = output["parts"], tuple(output.get("args") or ())
    else:
        parts = output

    if parts is None:
        values: List[Any] = []
    elif isinstance(parts, (list, tuple)):
        values = list(parts)
    else:
        values = [parts]

    return NormalizedOutput(parts=[_to_part(value, kind) for value in values], args=args)


async def run_step(entry: StepWithKind, params: StepParams) -> NormalizedOutput:
    """Invoke one step, awaiting it when it is a coroutine function"""
    result = entry.step(params)
    if inspect.isawaitable(result):
        result = await result
    return normalize_step_output(result, entry.kind)


def create_step_engine(steps: Sequence[StepWithKind]) -> AgentEngine:
    """Bind a step sequence into a single engine function"""
    pipeline = tuple(steps)

    async def engine(context: Context) -> AsyncIterator[Any]:
        command = context.command
        content = get_content(command.message) or ""
        task_id, context_id = context.task_id, context.context_id

        yield create_status_update(task_id, context_id, TaskState.WORKING)

        args: Tuple[Any, ...] = ()
        collected: List[Any] = []
        for index, entry in enumerate(pipeline):
            if context.is_cancelled():
                logger.info("Task %s cancelled before step %d", task_id, index)
                yield create_status_update(task_id, context_id, TaskState.CANCELED, final=True)
                return

            output = await run_step(entry, StepParams(command, context, content, args))
            args = output.args
            collected = [*collected, *output.parts]

            if output.parts:
                yield create_artifact_update(
                    task_id,
                    context_id,
                    output.parts,
                    name=f"step-{index}",
                    artifact_id=f"{context.id}-step-{index}",
                )

        yield create_status_update(
            task_id,
            context_id,
            TaskState.COMPLETED,
            message=create_message("agent", collected, context_id, task_id),
            final=True,
        )

    return engine


class EngineBuilder:
    """
    Immutable builder for step pipelines.

    Every ``add_step`` call returns a new builder; earlier builders keep their
    own step tuple and can be reused or extended independently.

    Example:
        ```python
        agent = (
            EngineBuilder()
            .text(lambda params: f"Echo: {params.content}")
            .create_agent("EchoAgent")
        )
        ```
    """

    def __init__(self, steps: Sequence[StepWithKind] = ()):
        self._steps: Tuple[StepWithKind, ...] = tuple(steps)

    @property
    def steps(self) -> Tuple[StepWithKind, ...]:
        return self._steps

    def _derive(self, steps: Tuple[StepWithKind, ...]) -> "EngineBuilder":
        return type(self)(steps)

    def add_step(self, step: Union[Step, StepWithKind], kind: StepKind = "text") -> "EngineBuilder":
        entry = step if isinstance(step, StepWithKind) else StepWithKind(step=step, kind=kind)
        if entry.kind not in STEP_KINDS:
            raise ConfigurationError(f"Unknown step kind: {entry.kind}", {"kind": entry.kind})
        if not callable(entry.step):
            raise ConfigurationError("Step must be callable", {"type": type(entry.step).__name__})
        return self._derive((*self._steps, entry))

    def text(self, step: Step) -> "EngineBuilder":
        return self.add_step(step, "text")

    def file(self, step: Step) -> "EngineBuilder":
        return self.add_step(step, "file")

    def data(self, step: Step) -> "EngineBuilder":
        return self.add_step(step, "data")

    def build(self) -> List[StepWithKind]:
        if not self._steps:
            raise EngineBuildError("No steps added to the pipeline")
        return list(self._steps)

    def create_engine(self) -> AgentEngine:
        return create_step_engine(self.build())

    def create_agent(
        self,
        agent_card: Union[str, dict, AgentCard],
        task_store: Optional[InMemoryTaskStore] = None
    ) -> Agent:
        """Bind the pipeline into an A2A agent"""
        return Agent(
            engine=self.create_engine(),
            agent_card=create_agent_card(agent_card),
            task_store=task_store,
        )
