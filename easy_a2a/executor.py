"""
Executor adapter: runs a2a-sdk agent executors as pull-style engines.

An a2a-sdk ``AgentExecutor`` pushes events onto an ``EventQueue`` while it
works. ``convert_executor`` wraps such an executor into an engine: each
invocation gets a fresh ``RequestContext`` and ``EventQueue``, starts the
executor concurrently, and yields the enqueued events in order, converted to
easy-a2a models, until the executor finishes.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any, List, Optional

from a2a import types as a2a_types
from a2a.server.agent_execution import AgentExecutor, RequestContext
from a2a.server.events.event_queue import EventQueue
from pydantic import TypeAdapter

from .protocol.types import Message, Task, TaskStatusUpdateEvent, UpdateEvent
from .core.agent import AgentEngine
from .core.context import Context

logger = logging.getLogger(__name__)

_update_event_adapter = TypeAdapter(UpdateEvent)


def to_update_event(event: Any) -> Any:
    """Convert an a2a-sdk event (task, message or update) into the easy-a2a model"""
    return _update_event_adapter.validate_python(
        event.model_dump(mode="json", by_alias=True, exclude_none=True)
    )


def _ends_stream(event: Any) -> bool:
    if isinstance(event, Message):
        return True
    return isinstance(event, TaskStatusUpdateEvent) and event.final


def _reference_tasks(task: Task) -> Optional[List[a2a_types.Task]]:
    raw = (task.metadata or {}).get("referenceTasks")
    if not raw:
        return None
    return [
        a2a_types.Task.model_validate(item.to_dict() if isinstance(item, Task) else item)
        for item in raw
    ]


def create_request_context(context: Context) -> RequestContext:
    """Build the a2a-sdk request context for the task a context works on"""
    task = context.get_task()
    return RequestContext(
        a2a_types.MessageSendParams.model_validate(context.command.to_dict()),
        task_id=task.id,
        context_id=task.context_id,
        task=a2a_types.Task.model_validate(task.to_dict()),
        related_tasks=_reference_tasks(task),
    )


async def _dequeue_now(event_queue: EventQueue) -> Optional[Any]:
    try:
        event = await event_queue.dequeue_event(no_wait=True)
    except asyncio.QueueEmpty:
        return None
    event_queue.task_done()
    return event


async def _next_event(event_queue: EventQueue, execution: asyncio.Future) -> Optional[Any]:
    """
    Wait for the next enqueued event.

    Returns ``None`` once the execution is done and nothing is left in the
    queue, or when the executor closed the queue itself.
    """
    if not execution.done():
        getter = asyncio.ensure_future(event_queue.dequeue_event())
        await asyncio.wait({getter, execution}, return_when=asyncio.FIRST_COMPLETED)
        if not getter.done():
            getter.cancel()
            await asyncio.wait({getter})
        if not getter.cancelled():
            if getter.exception() is not None:
                # closed by the executor
                return None
            event_queue.task_done()
            return getter.result()
    return await _dequeue_now(event_queue)


async def _close_queue(event_queue: EventQueue) -> None:
    # unconsumed events would block a graceful close
    while await _dequeue_now(event_queue) is not None:
        pass
    await event_queue.close()


def _log_cancel_failure(future: asyncio.Future) -> None:
    if not future.cancelled() and future.exception() is not None:
        logger.error("Executor cancel failed", exc_info=future.exception())


def convert_executor(executor: AgentExecutor) -> AgentEngine:
    """Wrap an a2a-sdk ``AgentExecutor`` into an engine function"""

    async def engine(context: Context) -> AsyncIterator[Any]:
        event_queue = EventQueue()
        request_context = create_request_context(context)
        pending_cancels = set()

        def on_cancel(_: Context) -> None:
            future = asyncio.ensure_future(executor.cancel(request_context, event_queue))
            pending_cancels.add(future)
            future.add_done_callback(pending_cancels.discard)
            future.add_done_callback(_log_cancel_failure)

        context.on_cancel(on_cancel)
        execution = asyncio.ensure_future(executor.execute(request_context, event_queue))

        try:
            while True:
                event = await _next_event(event_queue, execution)
                if event is None:
                    break
                update = to_update_event(event)
                yield update
                if _ends_stream(update):
                    break
            await execution
        finally:
            context.off_cancel(on_cancel)
            if not execution.done():
                execution.cancel()
            await _close_queue(event_queue)

    return engine
