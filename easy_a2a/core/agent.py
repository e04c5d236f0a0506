"""
In-process A2A agent runtime.

An ``Agent`` owns an engine function and a task store. It turns inbound
``message/send`` / ``message/stream`` calls into a ``Context``, drives the
engine, and records every update event the engine yields on the task.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any, Callable, Dict, Optional, Union

from ..protocol.agent_card import validate_agent_card
from ..protocol.types import (
    TERMINAL_STATES,
    AgentCard,
    Message,
    MessageSendParams,
    Task,
    TaskIdParams,
    TaskQueryParams,
    TaskState,
    create_message_send_params,
    create_status_update,
    create_task,
    new_id,
)
from ..exceptions import TaskNotCancelableError, TaskNotFoundError
from .context import Context
from .tasks import InMemoryTaskStore

logger = logging.getLogger(__name__)

AgentEngine = Callable[[Context], AsyncIterator[Any]]


class Agent:
    """Executable A2A agent backed by an engine function."""

    def __init__(
        self,
        engine: AgentEngine,
        agent_card: AgentCard,
        task_store: Optional[InMemoryTaskStore] = None
    ):
        self._engine = engine
        self._agent_card = agent_card
        self._store = task_store if task_store is not None else InMemoryTaskStore()
        # keyed by context id; a task may have several invocations in flight
        self._running: Dict[str, Context] = {}

        for problem in validate_agent_card(agent_card):
            logger.warning("Agent card %s: %s", agent_card.name, problem)

    def __repr__(self) -> str:
        return f"Agent({self._agent_card.name!r})"

    @property
    def agent_card(self) -> AgentCard:
        return self._agent_card

    @property
    def engine(self) -> AgentEngine:
        return self._engine

    async def _begin(self, params: MessageSendParams) -> Context:
        message = params.message
        task = await self._store.get(message.task_id) if message.task_id else None

        if task is None:
            task = create_task(
                task_id=message.task_id or new_id(),
                context_id=message.context_id or new_id(),
            )
            logger.info("Created task %s in context %s", task.id, task.context_id)

        message = message.model_copy(update={"task_id": task.id, "context_id": task.context_id})
        task = task.model_copy(update={"history": [*(task.history or []), message]})
        await self._store.save(task)

        return Context(params.model_copy(update={"message": message}), task)

    async def _run(self, context: Context) -> AsyncIterator[Any]:
        task_id = context.task_id
        self._running[context.id] = context
        try:
            async for event in self._engine(context):
                context.set_task(await self._store.apply(task_id, event))
                yield event
        except Exception:
            logger.error("Engine failed for task %s", task_id, exc_info=True)
            await self._store.apply(
                task_id,
                create_status_update(task_id, context.context_id, TaskState.FAILED, final=True)
            )
            raise
        finally:
            self._running.pop(context.id, None)

    async def stream_message(self, params: Union[str, MessageSendParams]) -> AsyncIterator[Any]:
        """Run the engine and yield each update event as it is produced"""
        context = await self._begin(create_message_send_params(params))
        async for event in self._run(context):
            yield event

    async def send_message(self, params: Union[str, MessageSendParams]) -> Union[Task, Message]:
        """Run the engine to completion and return the final task"""
        context = await self._begin(create_message_send_params(params))
        reply: Optional[Message] = None
        async for event in self._run(context):
            if isinstance(event, Message):
                reply = event
        if reply is not None:
            return reply
        return await self._store.get(context.task_id)

    async def get_task(self, params: Union[str, TaskQueryParams]) -> Task:
        if isinstance(params, str):
            params = TaskQueryParams(id=params)
        task = await self._store.get(params.id)
        if task is None:
            raise TaskNotFoundError(params.id)

        if params.history_length is not None and task.history:
            history = task.history[-params.history_length:] if params.history_length > 0 else []
            task = task.model_copy(update={"history": history})
        return task

    async def cancel_task(self, params: Union[str, TaskIdParams]) -> Task:
        """
        Request cancellation of a task.

        A running task only gets its context flagged; the engine decides when to
        stop and publishes the canceled status itself. An idle task is marked
        canceled directly.
        """
        if isinstance(params, str):
            params = TaskIdParams(id=params)
        task = await self._store.get(params.id)
        if task is None:
            raise TaskNotFoundError(params.id)
        if task.status.state in TERMINAL_STATES:
            raise TaskNotCancelableError(task.id, task.status.state.value)

        running = [context for context in self._running.values() if context.task_id == task.id]
        if running:
            for context in running:
                context.cancel()
            return await self._store.get(task.id)

        return await self._store.apply(
            task.id,
            create_status_update(task.id, task.context_id, TaskState.CANCELED, final=True)
        )
