"""
Bedrock embedding provider implementation.
"""

from typing import List
from llama_index.embeddings.bedrock import BedrockEmbedding
from lecture_core.providers import EmbeddingProviderBase
from shared_utils.constants import EMBEDDING_DIMENSIONS, Defaults, LogScope
from shared_utils.error_handler import EmbeddingError


class BedrockEmbeddingProvider(EmbeddingProviderBase):
    """AWS Bedrock embedding provider."""

    def __init__(self, model_id: str, region: str, timeout: float = Defaults.REQUEST_TIMEOUT):
        super().__init__(name=f"BedrockEmbedding({model_id})")
        self.model_id = model_id
        self.region = region
        self.timeout = timeout
        self._embedding = None

    def initialize(self) -> None:
        """Initialize Bedrock embedding client."""
        try:
            self._embedding = BedrockEmbedding(
                model_name=self.model_id,
                region_name=self.region,
                timeout=self.timeout,
                max_retries=1,
            )
            self.logger.info(
                "Initialized Bedrock embedding provider",
                extra={
                    "scope": LogScope.PROVIDER,
                    "model_id": self.model_id,
                    "region": self.region,
                    "dimension": self.get_embedding_dimension()
                }
            )
        except Exception as e:
            self.logger.error(
                "Failed to initialize Bedrock embedding provider",
                extra={"scope": LogScope.PROVIDER, "error": str(e)}
            )
            raise

    def is_available(self) -> bool:
        """Check if Bedrock embedding is available."""
        return self._embedding is not None

    def embed_text(self, text: str) -> List[float]:
        """Generate embedding for single text."""
        if not self.is_available():
            raise EmbeddingError(
                "Bedrock embedding provider not initialized",
                context={"model": self.model_id},
            )

        try:
            return self._embedding.get_text_embedding(text)
        except Exception as e:
            self.logger.error(
                "Bedrock embedding generation failed",
                extra={"scope": LogScope.PROVIDER, "error": str(e)}
            )
            raise EmbeddingError(str(e), context={"model": self.model_id}) from e

    def get_embedding_dimension(self) -> int:
        """Return dimensionality of Bedrock embeddings."""
        return EMBEDDING_DIMENSIONS.get(self.model_id, Defaults.EMBEDDING_DIMENSION)
