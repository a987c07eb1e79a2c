from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from contractgen.llm.providers.chat_completions_api import ChatCompletionsProvider
from contractgen.utils.logger import get_logger


class BaseAgent(ABC):
    """
    Base class for agents backed by a chat-completion provider.
    Provides access to the provider and a logger.
    """

    def __init__(self, llm: ChatCompletionsProvider) -> None:
        self.llm = llm
        self.logger = get_logger(self.__class__.__name__)

    @abstractmethod
    def run(self, **kwargs: Any) -> Any:
        ...

    def _call_llm(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        self.logger.info("Calling LLM (max_tokens=%s, temperature=%s)", max_tokens, temperature)
        return self.llm.chat(messages, max_tokens=max_tokens, temperature=temperature)
