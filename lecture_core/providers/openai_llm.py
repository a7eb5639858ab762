"""
OpenAI LLM provider implementation.
"""

from typing import Optional
from llama_index.core.llms import ChatMessage, MessageRole
from llama_index.llms.openai import OpenAI
from domain.models import LLMCompletion
from lecture_core.providers import LLMProviderBase, completion_from_chat_response
from shared_utils.constants import Defaults, LogScope


class OpenAILLMProvider(LLMProviderBase):
    """OpenAI chat model provider."""

    def __init__(
        self,
        model_id: str,
        api_key: Optional[str],
        temperature: float = Defaults.LLM_TEMPERATURE,
        timeout: float = Defaults.REQUEST_TIMEOUT,
    ):
        super().__init__(name=f"OpenAILLM({model_id})")
        self.model_id = model_id
        self.api_key = api_key
        self.temperature = temperature
        self.timeout = timeout
        self._llm = None

    def initialize(self) -> None:
        """Initialize OpenAI LLM client."""
        if not self.api_key:
            self.logger.warning(
                "OPENAI_API_KEY is not set; LLM calls will fail until it is provided",
                extra={"scope": LogScope.PROVIDER, "model_id": self.model_id}
            )
            return

        try:
            self._llm = OpenAI(
                model=self.model_id,
                api_key=self.api_key,
                temperature=self.temperature,
                timeout=self.timeout,
                max_retries=0,
            )
            self.logger.info(
                "Initialized OpenAI LLM provider",
                extra={
                    "scope": LogScope.PROVIDER,
                    "model_id": self.model_id
                }
            )
        except Exception as e:
            self.logger.error(
                "Failed to initialize OpenAI LLM provider",
                extra={"scope": LogScope.PROVIDER, "error": str(e)}
            )
            raise

    def is_available(self) -> bool:
        """Check if OpenAI LLM is available."""
        return self._llm is not None

    def chat(self, system_prompt: str, user_prompt: str) -> LLMCompletion:
        """Run one chat completion."""
        if not self.is_available():
            raise RuntimeError("OPENAI_API_KEY not set")

        try:
            response = self._llm.chat([
                ChatMessage(role=MessageRole.SYSTEM, content=system_prompt),
                ChatMessage(role=MessageRole.USER, content=user_prompt),
            ])
            return completion_from_chat_response(response)
        except Exception as e:
            self.logger.error(
                "LLM generation failed",
                extra={"scope": LogScope.PROVIDER, "error": str(e)}
            )
            raise
