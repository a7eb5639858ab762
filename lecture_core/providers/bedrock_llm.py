"""
Bedrock LLM provider implementation.
"""

from llama_index.core.llms import ChatMessage, MessageRole
from llama_index.llms.bedrock import Bedrock
from domain.models import LLMCompletion
from lecture_core.providers import LLMProviderBase, completion_from_chat_response
from shared_utils.constants import Defaults, LogScope


class BedrockLLMProvider(LLMProviderBase):
    """AWS Bedrock LLM provider."""

    def __init__(
        self,
        model_id: str,
        region: str,
        temperature: float = Defaults.LLM_TEMPERATURE,
        timeout: float = Defaults.REQUEST_TIMEOUT,
    ):
        super().__init__(name=f"BedrockLLM({model_id})")
        self.model_id = model_id
        self.region = region
        self.temperature = temperature
        self.timeout = timeout
        self._llm = None

    def initialize(self) -> None:
        """Initialize Bedrock LLM client."""
        try:
            self._llm = Bedrock(
                model=self.model_id,
                region_name=self.region,
                temperature=self.temperature,
                timeout=self.timeout,
                max_retries=1,
            )
            self.logger.info(
                "Initialized Bedrock LLM provider",
                extra={
                    "scope": LogScope.PROVIDER,
                    "model_id": self.model_id,
                    "region": self.region
                }
            )
        except Exception as e:
            self.logger.error(
                "Failed to initialize Bedrock LLM provider",
                extra={"scope": LogScope.PROVIDER, "error": str(e)}
            )
            raise

    def is_available(self) -> bool:
        """Check if Bedrock LLM is available."""
        return self._llm is not None

    def chat(self, system_prompt: str, user_prompt: str) -> LLMCompletion:
        """Run one chat completion."""
        if not self.is_available():
            raise RuntimeError("Bedrock LLM provider not initialized")

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
