"""
Core runtime: execution context, step pipeline, agent runtime and task store.
"""

from .agent import Agent, AgentEngine
from .context import Context
from .engine import (
    EngineBuilder,
    Step,
    StepOutput,
    StepParams,
    StepWithKind,
    create_step_engine,
    normalize_step_output,
)
from .tasks import InMemoryTaskStore, apply_event

__all__ = [
    "Agent",
    "AgentEngine",
    "Context",
    "EngineBuilder",
    "InMemoryTaskStore",
    "Step",
    "StepOutput",
    "StepParams",
    "StepWithKind",
    "apply_event",
    "create_step_engine",
    "normalize_step_output",
]
