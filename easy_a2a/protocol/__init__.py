"""
A2A protocol layer: wire types, agent cards and the remote agent client.
"""

from .agent_card import create_agent_card, create_minimal_agent_card, validate_agent_card
from .client import A2AClient
from .types import (
    A2AErrorCodes,
    AgentCapabilities,
    AgentCard,
    AgentSkill,
    Artifact,
    DataPart,
    File,
    FilePart,
    Message,
    MessageSendParams,
    Part,
    Task,
    TaskArtifactUpdateEvent,
    TaskIdParams,
    TaskQueryParams,
    TaskState,
    TaskStatus,
    TaskStatusUpdateEvent,
    TextPart,
    UpdateEvent,
    create_artifact_update,
    create_data_part,
    create_file_part,
    create_message,
    create_message_send_params,
    create_status_update,
    create_task,
    create_text_part,
    get_content,
)

__all__ = [
    "A2AClient",
    "A2AErrorCodes",
    "AgentCapabilities",
    "AgentCard",
    "AgentSkill",
    "Artifact",
    "DataPart",
    "File",
    "FilePart",
    "Message",
    "MessageSendParams",
    "Part",
    "Task",
    "TaskArtifactUpdateEvent",
    "TaskIdParams",
    "TaskQueryParams",
    "TaskState",
    "TaskStatus",
    "TaskStatusUpdateEvent",
    "TextPart",
    "UpdateEvent",
    "create_agent_card",
    "create_artifact_update",
    "create_data_part",
    "create_file_part",
    "create_message",
    "create_message_send_params",
    "create_minimal_agent_card",
    "create_status_update",
    "create_task",
    "create_text_part",
    "get_content",
    "validate_agent_card",
]
