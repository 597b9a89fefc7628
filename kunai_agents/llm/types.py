"""
LLM 调用数据类型。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from kunai_agents.session.types import Message


@dataclass
class Usage:
    """Token counters reported for one backend call."""

    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "Usage":
        """Build from a Responses-API or Chat-Completions usage payload.

        Accepts a dict or an object with attributes; missing counters stay None.
        """
        if raw is None:
            return cls()
        input_tokens = _first(raw, "input_tokens", "prompt_tokens")
        output_tokens = _first(raw, "output_tokens", "completion_tokens")
        total_tokens = _get(raw, "total_tokens")
        if total_tokens is None and input_tokens is not None and output_tokens is not None:
            total_tokens = input_tokens + output_tokens
        return cls(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=total_tokens,
        )


@dataclass
class BackendRequest:
    """A single request to the generative backend."""

    model: str
    messages: List[Message] = field(default_factory=list)
    max_output_tokens: Optional[int] = None
    temperature: Optional[float] = None

    def input_dicts(self) -> List[dict]:
        return [m.to_dict() for m in self.messages]


@dataclass
class BackendResponse:
    text: str = ""
    usage: Usage = field(default_factory=Usage)


class OutcomeKind:
    OK = "ok"
    RATE_LIMITED = "rate_limited"
    ERROR = "error"


@dataclass
class CallOutcome:
    """Result of one backend attempt: success, rate-limited, or other failure."""

    kind: str
    response: Optional[BackendResponse] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.kind == OutcomeKind.OK

    @property
    def rate_limited(self) -> bool:
        return self.kind == OutcomeKind.RATE_LIMITED

    @classmethod
    def success(cls, response: BackendResponse) -> "CallOutcome":
        return cls(kind=OutcomeKind.OK, response=response)

    @classmethod
    def limited(cls, error: BaseException) -> "CallOutcome":
        return cls(kind=OutcomeKind.RATE_LIMITED, error=error)

    @classmethod
    def failure(cls, error: BaseException) -> "CallOutcome":
        return cls(kind=OutcomeKind.ERROR, error=error)


def _get(obj: Any, key: str, default: Any = None) -> Any:
    """Get attribute or dict key."""
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _first(obj: Any, *keys: str) -> Any:
    for key in keys:
        value = _get(obj, key)
        if value is not None:
            return value
    return None
