"""
Central exceptions module for easy-a2a.

Configuration problems are raised synchronously while an agent is being
assembled. Errors coming from the OpenAI client are never wrapped here; they
propagate to the caller untouched.
"""

from typing import Any, Dict, Optional


class EasyA2AException(Exception):
    """Base exception for all easy-a2a errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Configuration errors
class ConfigurationError(EasyA2AException):
    """Raised when an agent or builder is configured incorrectly."""
    pass


class InvalidAgentsError(ConfigurationError):
    """Raised when a peer-agent handle is not an agent, client or relay."""

    def __init__(self, agents: Any):
        type_name = type(agents).__name__
        super().__init__(f"Invalid agents type: {type_name}", {"type": type_name})
        self.agents = agents


# Pipeline errors
class EngineBuildError(EasyA2AException):
    """Raised when a pipeline cannot be turned into an engine."""
    pass


class StepOutputError(EasyA2AException):
    """Raised when a step returns parts that do not match its declared kind."""

    def __init__(self, kind: str, value: Any):
        super().__init__(
            f"Step declared kind '{kind}' but produced {type(value).__name__}",
            {"kind": kind, "value_type": type(value).__name__}
        )
        self.kind = kind
        self.value = value


# Runtime errors
class AgentNotFoundError(EasyA2AException):
    """Raised when a relay does not know the requested agent."""

    def __init__(self, agent_id: str):
        super().__init__(f"Agent not found: {agent_id}", {"agent_id": agent_id})
        self.agent_id = agent_id


class TaskNotFoundError(EasyA2AException):
    """Raised when a task id is unknown to the task store."""

    def __init__(self, task_id: str):
        super().__init__(f"Task with id {task_id} not found", {"task_id": task_id})
        self.task_id = task_id


class TaskNotCancelableError(EasyA2AException):
    """Raised when cancelling a task that already reached a terminal state."""

    def __init__(self, task_id: str, state: str):
        super().__init__(
            f"Task {task_id} cannot be canceled in state {state}",
            {"task_id": task_id, "state": state}
        )
        self.task_id = task_id
        self.state = state


class A2AClientError(EasyA2AException):
    """Raised when a remote agent answers with an error or an HTTP failure."""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(f"A2A Error {code}: {message}", {"code": code, "data": data})
        self.code = code
        self.data = data
