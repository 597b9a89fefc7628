"""
Session 数据类型定义。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


class Role:
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"

    ALL = (SYSTEM, USER, ASSISTANT)


@dataclass(frozen=True)
class Message:
    """A single role-tagged conversation message."""

    role: str  # "system", "user", "assistant"
    content: str

    def __post_init__(self) -> None:
        if self.role not in Role.ALL:
            raise ValueError(f"Unknown message role: {self.role!r}")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Message":
        return cls(
            role=d.get("role", Role.USER),
            content=d.get("content", ""),
        )

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(Role.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(Role.ASSISTANT, content)


@dataclass
class Session:
    """One ongoing conversation.

    ``messages[0]`` is always the system instruction.
    """

    key: str
    messages: List[Message] = field(default_factory=list)

    @property
    def system_message(self) -> Message:
        return self.messages[0]

    @property
    def history(self) -> List[Message]:
        """Messages after the leading system instruction."""
        return self.messages[1:]

    def append(self, message: Message) -> None:
        self.messages.append(message)

    def to_dicts(self) -> List[Dict[str, str]]:
        return [m.to_dict() for m in self.messages]

    def __len__(self) -> int:
        return len(self.messages)
