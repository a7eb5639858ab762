"""
Dependency injection container for managing application dependencies.
Centralizes provider creation and lifecycle management.

Holds lazy singletons for providers, adapters (vector index, question
history) and the ingestion / query services built on top of them.
"""

from typing import Callable, Optional
import logging

from lecture_core.providers import BaseProvider, EmbeddingProviderBase, LLMProviderBase
from lecture_core.providers.factory import EmbeddingProviderFactory, LLMProviderFactory
from shared_utils.config_loader import get_settings
from shared_utils.constants import LogScope


logger = logging.getLogger(__name__)


class DIContainer:
    """Singleton dependency injection container."""

    _instance: Optional['DIContainer'] = None
    _embedding_provider: Optional[EmbeddingProviderBase] = None
    _llm_provider: Optional[LLMProviderBase] = None

    # adapter / service singletons
    _vector_store: Optional[object] = None
    _history_store: Optional[object] = None
    _ingestion_service: Optional[object] = None
    _query_service: Optional[object] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def reset(self):
        """Reset container (useful for testing)."""
        self._embedding_provider = None
        self._llm_provider = None
        self._vector_store = None
        self._history_store = None
        self._ingestion_service = None
        self._query_service = None

    def _create_provider(self, kind: str, factory: Callable[[], BaseProvider]) -> BaseProvider:
        logger.info(
            f"Initializing {kind} provider",
            extra={"scope": LogScope.CONFIG}
        )
        try:
            return factory()
        except Exception as e:
            logger.error(
                f"Failed to initialize {kind} provider",
                extra={"scope": LogScope.CONFIG, "error": str(e)}
            )
            raise RuntimeError(f"{kind} provider initialization failed: {e}") from e

    def get_embedding_provider(self) -> EmbeddingProviderBase:
        """Get or create embedding provider (lazy singleton).

        Raises:
            RuntimeError: If provider initialization fails.
        """
        if self._embedding_provider is None:
            self._embedding_provider = self._create_provider(
                "Embedding", EmbeddingProviderFactory.create
            )
        return self._embedding_provider

    def get_llm_provider(self) -> LLMProviderBase:
        """Get or create LLM provider (lazy singleton).

        Raises:
            RuntimeError: If provider initialization fails.
        """
        if self._llm_provider is None:
            self._llm_provider = self._create_provider("LLM", LLMProviderFactory.create)
        return self._llm_provider

    def validate_all_providers(self) -> bool:
        """Check that both providers were created and hold a usable client.

        Raises:
            RuntimeError: Naming every provider that is unavailable.
        """
        status = {
            "Embedding": self.get_embedding_provider().is_available(),
            "LLM": self.get_llm_provider().is_available(),
        }
        failures = [f"{kind} provider is not available" for kind, ok in status.items() if not ok]
        if failures:
            logger.error(
                "Provider validation failed",
                extra={"scope": LogScope.CONFIG, "failures": failures}
            )
            raise RuntimeError(f"Provider validation failed: {'; '.join(failures)}")

        logger.info(
            "All providers validated",
            extra={"scope": LogScope.CONFIG, **{k.lower(): v for k, v in status.items()}}
        )
        return True

    # ------------------------------------------------------------------
    # Adapter accessors
    # ------------------------------------------------------------------

    def get_vector_store(self):
        """Get or create vector store adapter (lazy singleton).

        Uses InMemoryVectorStoreAdapter when S3_VECTORS_BUCKET is empty
        (local dev / CI), and S3VectorsVectorStoreAdapter otherwise.
        """
        if self._vector_store is None:
            settings = get_settings()
            if not settings.s3_vectors_bucket:
                from adapters.in_memory_vector_store import InMemoryVectorStoreAdapter
                self._vector_store = InMemoryVectorStoreAdapter(
                    name=settings.s3_vectors_index_name,
                )
                logger.info("Initialized InMemoryVectorStoreAdapter (local dev)")
            else:
                from adapters.s3vectors_vector_store import S3VectorsVectorStoreAdapter
                self._vector_store = S3VectorsVectorStoreAdapter(
                    vector_bucket_name=settings.s3_vectors_bucket,
                    index_name=settings.s3_vectors_index_name,
                    region=settings.aws_region,
                    endpoint_url=settings.aws_endpoint_url,
                    timeout=settings.request_timeout,
                )
                logger.info("Initialized S3VectorsVectorStoreAdapter")
        return self._vector_store

    def get_history_store(self):
        """Get or create the question history adapter (lazy singleton)."""
        if self._history_store is None:
            from adapters.in_memory_history_store import InMemoryQuestionHistoryAdapter

            self._history_store = InMemoryQuestionHistoryAdapter()
            logger.info("Initialized InMemoryQuestionHistoryAdapter")
        return self._history_store

    # ------------------------------------------------------------------
    # Service accessors
    # ------------------------------------------------------------------

    def get_ingestion_service(self):
        """Get or create IngestionService (lazy singleton)."""
        if self._ingestion_service is None:
            from services.ingestion_service import IngestionService

            settings = get_settings()
            self._ingestion_service = IngestionService(
                vector_store=self.get_vector_store(),
                embedding_provider=self.get_embedding_provider(),
                window_seconds=settings.window_seconds,
                max_workers=settings.embed_max_workers,
            )
            logger.info("Initialized IngestionService")
        return self._ingestion_service

    def get_query_service(self):
        """Get or create QueryService (lazy singleton)."""
        if self._query_service is None:
            from services.query_service import QueryService

            settings = get_settings()
            self._query_service = QueryService(
                vector_store=self.get_vector_store(),
                embedding_provider=self.get_embedding_provider(),
                llm_provider=self.get_llm_provider(),
                history_store=self.get_history_store(),
                top_k=settings.retrieval_top_k,
                prior_question_limit=settings.prior_question_limit,
                expose_error_details=settings.expose_error_details,
            )
            logger.info("Initialized QueryService")
        return self._query_service


# Global singleton instance
_container = DIContainer()


def get_di_container() -> DIContainer:
    """Get global DI container instance."""
    return _container
