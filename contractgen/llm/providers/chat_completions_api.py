from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from contractgen.project_state.models import CompletionReply
from contractgen.utils.errors import MalformedResponse, RequestFailure

logger = logging.getLogger(__name__)

DEFAULT_COMPLETION_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_COMPLETION_MODEL = "gpt-4"


class ChatCompletionsProvider:
    """
    Chat-completion endpoint over plain HTTP.

    Request:  POST {model, messages, max_tokens, temperature}, bearer auth.
    Reply:    {"choices": [{"message": {"content": "..."}}]}
    """

    def __init__(
        self,
        api_key: Optional[str],
        url: str = DEFAULT_COMPLETION_URL,
        model: str = DEFAULT_COMPLETION_MODEL,
        name: str = "chat-completions",
    ) -> None:
        if not api_key:
            raise ValueError("Completion API key is not set")

        self.name = name
        self.url = url
        self.model = model
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def chat(
        self,
        messages: List[Dict[str, str]],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if temperature is not None:
            payload["temperature"] = temperature

        logger.info("ChatCompletionsProvider[%s]: calling %s model=%s", self.name, self.url, self.model)
        try:
            resp = requests.post(self.url, json=payload, headers=self._headers)
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.error("ChatCompletionsProvider[%s] request failed: %s", self.name, exc)
            raise RequestFailure(f"Completion request failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            logger.error("ChatCompletionsProvider[%s]: reply is not JSON", self.name)
            raise MalformedResponse("Completion reply is not valid JSON") from exc

        try:
            reply = CompletionReply.model_validate(data)
        except ValidationError as exc:
            logger.error("ChatCompletionsProvider[%s]: unexpected response format: %s", self.name, data)
            raise MalformedResponse("Unexpected completion response format") from exc

        return reply.choices[0].message.content
