from __future__ import annotations

from pathlib import Path
from typing import Tuple

from contractgen.agents.contract_writer.prompt_builder import EXPLANATION_MARKER, build_prompt
from contractgen.agents.shared.base_agent import BaseAgent
from contractgen.llm.providers.chat_completions_api import ChatCompletionsProvider
from contractgen.project_state.models import ContractRequest

FALLBACK_EXPLANATION = "Smart contract generated successfully."


def split_reply(text: str) -> Tuple[str, str]:
    """Split a completion on the first EXPLANATION: marker into (code, explanation)."""
    code, marker, explanation = text.partition(EXPLANATION_MARKER)
    if not marker:
        return text.strip(), FALLBACK_EXPLANATION
    return code.strip(), explanation.strip()


class ContractWriterAgent(BaseAgent):
    """
    Turns a contract request into Solidity source plus an explanation.
    One completion call per request, no retries.
    """

    def __init__(
        self,
        llm: ChatCompletionsProvider,
        max_tokens: int = 2000,
        temperature: float = 0.3,
    ) -> None:
        super().__init__(llm)
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._prompt_path = Path(__file__).with_name("prompt.md")
        self._system_prompt = self._prompt_path.read_text(encoding="utf-8")

    def run(self, request: ContractRequest) -> Tuple[str, str]:
        self.logger.info("Generating %s contract: %s", request.category.value, request.description)
        return self.generate(build_prompt(request))

    def generate(self, prompt: str) -> Tuple[str, str]:
        output = self._call_llm(
            system_prompt=self._system_prompt,
            user_prompt=prompt,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        return split_reply(output)
