"""
A2A protocol types for easy-a2a.
Immutable pydantic models using the protocol's camelCase field names as aliases.
"""

import json
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

PROTOCOL_VERSION = "0.3.0"


class A2AModel(BaseModel):
    """Base for all protocol models"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation of the model"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class A2AErrorCodes(Enum):
    """A2A protocol error codes"""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    TASK_NOT_FOUND = -32001
    TASK_NOT_CANCELABLE = -32002
    PUSH_NOTIFICATION_NOT_SUPPORTED = -32003
    UNSUPPORTED_OPERATION = -32004
    CONTENT_TYPE_NOT_SUPPORTED = -32005
    INVALID_AGENT_RESPONSE = -32006


class File(A2AModel):
    """File content, either inline base64 bytes or a URI"""
    bytes: Optional[str] = None
    uri: Optional[str] = None
    name: Optional[str] = None
    mime_type: Optional[str] = Field(None, alias="mimeType")


class TextPart(A2AModel):
    kind: Literal["text"] = "text"
    text: str
    metadata: Optional[Dict[str, Any]] = None


class DataPart(A2AModel):
    kind: Literal["data"] = "data"
    data: Dict[str, Any]
    metadata: Optional[Dict[str, Any]] = None


class FilePart(A2AModel):
    kind: Literal["file"] = "file"
    file: File
    metadata: Optional[Dict[str, Any]] = None


Part = Annotated[Union[TextPart, DataPart, FilePart], Field(discriminator="kind")]


class Message(A2AModel):
    """Core A2A message type"""
    kind: Literal["message"] = "message"
    role: Literal["user", "agent"]
    parts: List[Part]
    message_id: str = Field(alias="messageId")
    context_id: Optional[str] = Field(None, alias="contextId")
    task_id: Optional[str] = Field(None, alias="taskId")
    reference_task_ids: Optional[List[str]] = Field(None, alias="referenceTaskIds")
    metadata: Optional[Dict[str, Any]] = None
    extensions: Optional[List[str]] = None


class TaskState(str, Enum):
    """Task state enumeration"""
    SUBMITTED = "submitted"
    WORKING = "working"
    INPUT_REQUIRED = "input-required"
    COMPLETED = "completed"
    CANCELED = "canceled"
    FAILED = "failed"
    REJECTED = "rejected"
    AUTH_REQUIRED = "auth-required"
    UNKNOWN = "unknown"


TERMINAL_STATES = frozenset({
    TaskState.COMPLETED,
    TaskState.CANCELED,
    TaskState.FAILED,
    TaskState.REJECTED,
})


class TaskStatus(A2AModel):
    state: TaskState
    message: Optional[Message] = None
    timestamp: Optional[str] = None


class Artifact(A2AModel):
    artifact_id: str = Field(alias="artifactId")
    name: Optional[str] = None
    description: Optional[str] = None
    parts: List[Part]
    metadata: Optional[Dict[str, Any]] = None
    extensions: Optional[List[str]] = None


class Task(A2AModel):
    """A2A task representation"""
    kind: Literal["task"] = "task"
    id: str
    context_id: str = Field(alias="contextId")
    status: TaskStatus
    history: Optional[List[Message]] = None
    artifacts: Optional[List[Artifact]] = None
    metadata: Optional[Dict[str, Any]] = None


class TaskStatusUpdateEvent(A2AModel):
    kind: Literal["status-update"] = "status-update"
    task_id: str = Field(alias="taskId")
    context_id: str = Field(alias="contextId")
    status: TaskStatus
    final: bool = False
    metadata: Optional[Dict[str, Any]] = None


class TaskArtifactUpdateEvent(A2AModel):
    kind: Literal["artifact-update"] = "artifact-update"
    task_id: str = Field(alias="taskId")
    context_id: str = Field(alias="contextId")
    artifact: Artifact
    append: Optional[bool] = None
    last_chunk: Optional[bool] = Field(None, alias="lastChunk")
    metadata: Optional[Dict[str, Any]] = None


UpdateEvent = Annotated[
    Union[Task, Message, TaskStatusUpdateEvent, TaskArtifactUpdateEvent],
    Field(discriminator="kind"),
]

SendMessageResult = Annotated[Union[Task, Message], Field(discriminator="kind")]


class AgentSkill(A2AModel):
    id: str
    name: str
    description: str
    tags: List[str] = Field(default_factory=list)
    examples: Optional[List[str]] = None
    input_modes: Optional[List[str]] = Field(None, alias="inputModes")
    output_modes: Optional[List[str]] = Field(None, alias="outputModes")


class AgentCapabilities(A2AModel):
    streaming: Optional[bool] = None
    push_notifications: Optional[bool] = Field(None, alias="pushNotifications")
    state_transition_history: Optional[bool] = Field(None, alias="stateTransitionHistory")


class AgentProvider(A2AModel):
    organization: str
    url: str


class AgentCard(A2AModel):
    """A2A agent card for discovery"""
    protocol_version: str = Field(PROTOCOL_VERSION, alias="protocolVersion")
    name: str
    description: str
    url: str
    preferred_transport: Optional[str] = Field(None, alias="preferredTransport")
    version: str
    provider: Optional[AgentProvider] = None
    capabilities: AgentCapabilities
    default_input_modes: List[str] = Field(alias="defaultInputModes")
    default_output_modes: List[str] = Field(alias="defaultOutputModes")
    skills: List[AgentSkill]


class MessageSendConfiguration(A2AModel):
    accepted_output_modes: Optional[List[str]] = Field(None, alias="acceptedOutputModes")
    history_length: Optional[int] = Field(None, alias="historyLength")
    blocking: Optional[bool] = None


class MessageSendParams(A2AModel):
    """Parameters for message/send and message/stream"""
    message: Message
    configuration: Optional[MessageSendConfiguration] = None
    metadata: Optional[Dict[str, Any]] = None


class TaskQueryParams(A2AModel):
    """Parameters for tasks/get"""
    id: str
    history_length: Optional[int] = Field(None, alias="historyLength")
    metadata: Optional[Dict[str, Any]] = None


class TaskIdParams(A2AModel):
    """Parameters for tasks/cancel"""
    id: str
    metadata: Optional[Dict[str, Any]] = None


# Factory functions

def new_id() -> str:
    return str(uuid.uuid4())


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_text_part(text: str, metadata: Optional[Dict[str, Any]] = None) -> TextPart:
    return TextPart(text=text, metadata=metadata)


def create_data_part(data: Dict[str, Any], metadata: Optional[Dict[str, Any]] = None) -> DataPart:
    return DataPart(data=data, metadata=metadata)


def create_file_part(file: Union[File, Dict[str, Any]], metadata: Optional[Dict[str, Any]] = None) -> FilePart:
    if not isinstance(file, File):
        file = File.model_validate(file)
    return FilePart(file=file, metadata=metadata)


def create_message(
    role: Literal["user", "agent"],
    parts: Sequence[Any],
    context_id: Optional[str] = None,
    task_id: Optional[str] = None
) -> Message:
    """Create an A2A message with a fresh message id"""
    return Message(
        role=role,
        parts=list(parts),
        messageId=new_id(),
        contextId=context_id,
        taskId=task_id,
    )


def create_message_send_params(
    message: Union[str, Message, MessageSendParams],
    context_id: Optional[str] = None,
    task_id: Optional[str] = None
) -> MessageSendParams:
    """Wrap plain text (or a message) into message/send parameters"""
    if isinstance(message, MessageSendParams):
        return message
    if isinstance(message, str):
        message = create_message("user", [create_text_part(message)], context_id, task_id)
    return MessageSendParams(message=message)


def create_task(
    task_id: str,
    context_id: str,
    state: TaskState = TaskState.SUBMITTED,
    history: Optional[List[Message]] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> Task:
    return Task(
        id=task_id,
        contextId=context_id,
        status=TaskStatus(state=state, timestamp=now_iso()),
        history=list(history or []),
        artifacts=[],
        metadata=metadata,
    )


def create_status_update(
    task_id: str,
    context_id: str,
    state: TaskState,
    message: Optional[Message] = None,
    final: bool = False
) -> TaskStatusUpdateEvent:
    return TaskStatusUpdateEvent(
        taskId=task_id,
        contextId=context_id,
        status=TaskStatus(state=state, message=message, timestamp=now_iso()),
        final=final,
    )


def create_artifact_update(
    task_id: str,
    context_id: str,
    parts: Sequence[Any],
    name: Optional[str] = None,
    artifact_id: Optional[str] = None,
    append: Optional[bool] = None
) -> TaskArtifactUpdateEvent:
    return TaskArtifactUpdateEvent(
        taskId=task_id,
        contextId=context_id,
        artifact=Artifact(artifactId=artifact_id or new_id(), name=name, parts=list(parts)),
        append=append,
    )


def get_parts(message: Optional[Message]) -> List[Any]:
    if message is None:
        return []
    return list(message.parts)


def get_content(message: Optional[Message]) -> Optional[str]:
    """
    Extract the textual content of a message.

    Text parts are joined with newlines. Messages without text fall back to
    the JSON encoding of their data parts, then to file URIs or names.
    """
    parts = get_parts(message)
    if not parts:
        return None

    texts = [part.text for part in parts if isinstance(part, TextPart)]
    if texts:
        return "\n".join(texts)

    data = [part.data for part in parts if isinstance(part, DataPart)]
    if data:
        return json.dumps(data[0] if len(data) == 1 else data)

    files = [part.file.uri or part.file.name for part in parts if isinstance(part, FilePart)]
    files = [f for f in files if f]
    if files:
        return "\n".join(files)

    return None
