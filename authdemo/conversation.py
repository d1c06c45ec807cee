"""Chat messages, tool call cards and the conversation log"""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

MessageRole = Literal["user", "assistant", "system"]
ToolCallStatus = Literal["pending", "running", "approved", "denied", "completed"]


def _new_id() -> str:
    return str(uuid.uuid4())


class ToolCallDisplay(BaseModel):
    """A tool invocation as shown under an assistant message.

    Only ``status`` (and ``result`` on completion) ever change after creation.
    """

    id: str = Field(default_factory=_new_id)
    tool_id: str = ""
    tool_name: str
    tool_description: str = ""
    scopes: List[str] = Field(default_factory=list)
    status: ToolCallStatus = "pending"
    requires_approval: bool = False
    result: Optional[Any] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ChatMessage(BaseModel):
    """One entry in the conversation log"""

    id: str = Field(default_factory=_new_id)
    role: MessageRole
    content: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
    tool_calls: List[ToolCallDisplay] = Field(default_factory=list)


class ConversationStore:
    """Ordered, append-only chat log.

    Owned by the orchestrator. The log is the only chat history the gateway
    ever sees, replayed in full on every turn.
    """

    def __init__(self):
        self._messages: List[ChatMessage] = []

    def append(self, role: MessageRole, content: str, tool_calls: Optional[List[ToolCallDisplay]] = None) -> ChatMessage:
        message = ChatMessage(role=role, content=content, tool_calls=list(tool_calls or []))
        self._messages.append(message)
        return message

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    def history(self) -> List[Dict[str, str]]:
        """Wire form of the log: ``[{role, content}]`` in order"""
        return [{"role": m.role, "content": m.content} for m in self._messages]

    def clear(self) -> None:
        self._messages = []

    def __len__(self) -> int:
        return len(self._messages)
