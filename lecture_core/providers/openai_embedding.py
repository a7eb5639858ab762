"""
OpenAI embedding provider implementation.
"""

from typing import List, Optional
from llama_index.embeddings.openai import OpenAIEmbedding
from lecture_core.providers import EmbeddingProviderBase
from shared_utils.constants import EMBEDDING_DIMENSIONS, ModelIDs, Defaults, LogScope
from shared_utils.error_handler import EmbeddingError


class OpenAIEmbeddingProvider(EmbeddingProviderBase):
    """OpenAI text embedding provider.

    A missing API key is tolerated at startup; every embed call then raises
    EmbeddingError until a key is configured.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = ModelIDs.OPENAI_EMBED_MODEL,
        timeout: float = Defaults.REQUEST_TIMEOUT,
    ):
        super().__init__(name=f"OpenAIEmbedding({model})")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._embedding = None

    def initialize(self) -> None:
        """Initialize OpenAI embedding client."""
        if not self.api_key:
            self.logger.warning(
                "OPENAI_API_KEY is not set; embedding calls will fail until it is provided",
                extra={"scope": LogScope.PROVIDER, "model": self.model}
            )
            return

        try:
            self._embedding = OpenAIEmbedding(
                api_key=self.api_key,
                model=self.model,
                timeout=self.timeout,
                max_retries=0,
            )
            self.logger.info(
                "Initialized OpenAI embedding provider",
                extra={
                    "scope": LogScope.PROVIDER,
                    "model": self.model,
                    "dimension": self.get_embedding_dimension()
                }
            )
        except Exception as e:
            self.logger.error(
                "Failed to initialize OpenAI embedding provider",
                extra={"scope": LogScope.PROVIDER, "error": str(e)}
            )
            raise

    def is_available(self) -> bool:
        """Check if OpenAI API is available."""
        return self._embedding is not None

    def embed_text(self, text: str) -> List[float]:
        """Generate embedding for single text."""
        if not self.is_available():
            raise EmbeddingError("OPENAI_API_KEY not set", context={"model": self.model})

        try:
            return self._embedding.get_text_embedding(text)
        except Exception as e:
            self.logger.error(
                "Embedding generation failed",
                extra={"scope": LogScope.PROVIDER, "error": str(e)}
            )
            raise EmbeddingError(str(e), context={"model": self.model}) from e

    def get_embedding_dimension(self) -> int:
        """Return dimensionality of OpenAI embeddings."""
        return EMBEDDING_DIMENSIONS.get(self.model, Defaults.EMBEDDING_DIMENSION)
