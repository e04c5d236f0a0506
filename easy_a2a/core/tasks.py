"""
In-memory task storage for the agent runtime.

Tasks are immutable pydantic models; every event application produces a new
task value which replaces the stored one.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from ..protocol.types import (
    Artifact,
    Message,
    Task,
    TaskArtifactUpdateEvent,
    TaskStatusUpdateEvent,
)

logger = logging.getLogger(__name__)


def apply_event(task: Task, event) -> Task:
    """Return the task that results from applying one update event"""
    history: List[Message] = list(task.history or [])

    if isinstance(event, Task):
        if event.history is None:
            return event.model_copy(update={"history": history})
        return event

    if isinstance(event, Message):
        return task.model_copy(update={"history": [*history, event]})

    if isinstance(event, TaskStatusUpdateEvent):
        if event.status.message is not None:
            history = [*history, event.status.message]
        return task.model_copy(update={"status": event.status, "history": history})

    if isinstance(event, TaskArtifactUpdateEvent):
        return task.model_copy(update={"artifacts": _merge_artifact(task.artifacts or [], event)})

    logger.warning("Ignoring unknown update event %r", type(event).__name__)
    return task


def _merge_artifact(artifacts: List[Artifact], event: TaskArtifactUpdateEvent) -> List[Artifact]:
    incoming = event.artifact
    for index, existing in enumerate(artifacts):
        if existing.artifact_id != incoming.artifact_id:
            continue
        if event.append:
            merged = existing.model_copy(update={"parts": [*existing.parts, *incoming.parts]})
        else:
            merged = incoming
        return [*artifacts[:index], merged, *artifacts[index + 1:]]
    return [*artifacts, incoming]


class InMemoryTaskStore:
    """Task store keeping every task in a process-local dict"""

    def __init__(self):
        self._tasks: Dict[str, Task] = {}
        self._lock = asyncio.Lock()

    async def get(self, task_id: str) -> Optional[Task]:
        async with self._lock:
            return self._tasks.get(task_id)

    async def save(self, task: Task) -> Task:
        async with self._lock:
            self._tasks[task.id] = task
        return task

    async def apply(self, task_id: str, event) -> Task:
        """Apply an event to the stored task and persist the result"""
        async with self._lock:
            updated = apply_event(self._tasks[task_id], event)
            self._tasks[task_id] = updated
        return updated

    def __len__(self) -> int:
        return len(self._tasks)
