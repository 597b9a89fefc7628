"""
OpenAIBackend — 基于 OpenAI Responses API 的后端实现。
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import openai
from openai import AsyncOpenAI

from kunai_agents.errors import BackendError, RateLimited
from kunai_agents.llm.types import BackendRequest, BackendResponse, Usage

logger = logging.getLogger("kunai_agents.llm")


class OpenAIBackend:
    """Backend that calls ``client.responses.create``.

    Parameters:
        client: An existing ``AsyncOpenAI`` client (created from ``api_key`` if omitted).
        api_key: API key used when ``client`` is not given.
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        api_key: Optional[str] = None,
    ) -> None:
        self._client = client or AsyncOpenAI(api_key=api_key or None)
        logger.debug("Initialized OpenAIBackend")

    @property
    def client(self) -> AsyncOpenAI:
        return self._client

    async def invoke(self, request: BackendRequest) -> BackendResponse:
        kwargs = build_responses_kwargs(request)
        try:
            response = await self._client.responses.create(**kwargs)
        except openai.RateLimitError as e:
            raise RateLimited(str(e), retry_after=_retry_after(e)) from e
        except openai.APIStatusError as e:
            raise BackendError(str(e), status=e.status_code) from e
        except openai.APIError as e:
            raise BackendError(str(e)) from e

        return BackendResponse(
            text=getattr(response, "output_text", "") or "",
            usage=Usage.from_raw(getattr(response, "usage", None)),
        )


def build_responses_kwargs(request: BackendRequest) -> Dict[str, Any]:
    """Build kwargs for the Responses API; optional parameters are omitted when unset."""
    kwargs: Dict[str, Any] = {
        "model": request.model,
        "input": request.input_dicts(),
    }
    if request.max_output_tokens is not None:
        kwargs["max_output_tokens"] = request.max_output_tokens
    if request.temperature is not None:
        kwargs["temperature"] = request.temperature
    return kwargs


def _retry_after(error: openai.APIStatusError) -> Optional[float]:
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None) or {}
    value = headers.get("retry-after")
    try:
        return float(value) if value is not None else None
    except ValueError:
        return None
