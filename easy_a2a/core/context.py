"""
Execution context handed to engines and steps.

One context exists per agent invocation. Cancellation is advisory: steps and
executors observe it through ``is_cancelled()`` or a registered listener, and
nothing is interrupted forcibly.
"""

import logging
import uuid
from typing import Callable, List

from ..protocol.types import MessageSendParams, Task

logger = logging.getLogger(__name__)

CancelListener = Callable[["Context"], None]


class Context:
    """Per-invocation state: the command, the live task and the cancel signal."""

    def __init__(self, command: MessageSendParams, task: Task):
        self.id = str(uuid.uuid4())
        self.command = command
        self._task = task
        self._cancelled = False
        self._cancel_listeners: List[CancelListener] = []

    @property
    def task_id(self) -> str:
        return self._task.id

    @property
    def context_id(self) -> str:
        return self._task.context_id

    def get_task(self) -> Task:
        """Current snapshot of the task this invocation works on."""
        return self._task

    def set_task(self, task: Task) -> None:
        self._task = task

    def is_cancelled(self) -> bool:
        return self._cancelled

    def on_cancel(self, listener: CancelListener) -> None:
        self._cancel_listeners.append(listener)

    def off_cancel(self, listener: CancelListener) -> None:
        if listener in self._cancel_listeners:
            self._cancel_listeners.remove(listener)

    def cancel(self) -> None:
        """Flag the invocation as cancelled and notify listeners once."""
        if self._cancelled:
            return
        self._cancelled = True
        logger.info("Cancellation requested for task %s", self.task_id)
        for listener in list(self._cancel_listeners):
            listener(self)
