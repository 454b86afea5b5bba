"""
Conversation thread model for Inkwell Review.

Each thread keeps its own chat log and, while the user is away from it,
the suspended record of its unresolved diff session.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class ChatMessage:
    """A single chat line (role is 'user' or 'assistant')."""

    role: str
    content: str

    def to_record(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class ConversationThread:
    """
    A named conversation with the writing assistant.

    Attributes:
        id: Unique thread identifier
        name: Display name
        messages: Chat history
        diff_record: Suspended diff session record, or None
        created_at: ISO timestamp of creation
    """

    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    name: str = "New thread"
    messages: List[ChatMessage] = field(default_factory=list)
    diff_record: Optional[Dict[str, Any]] = None
    created_at: str = field(default_factory=lambda: datetime.now().isoformat(timespec="seconds"))

    def add_message(self, role: str, content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        self.messages.append(message)
        return message

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "messages": [m.to_record() for m in self.messages],
            "diffState": self.diff_record,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ConversationThread":
        if "id" not in record:
            raise ValueError("Thread record is missing 'id'")
        return cls(
            id=record["id"],
            name=record.get("name") or "New thread",
            messages=[
                ChatMessage(role=m["role"], content=m["content"])
                for m in record.get("messages", [])
            ],
            diff_record=record.get("diffState"),
            created_at=record.get("createdAt") or datetime.now().isoformat(timespec="seconds"),
        )
