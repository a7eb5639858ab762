"""
Factory for creating configured provider instances.
Handles provider instantiation with dependency injection.
"""

from typing import Optional
import logging

from lecture_core.providers import EmbeddingProviderBase, LLMProviderBase
from lecture_core.providers.openai_embedding import OpenAIEmbeddingProvider
from lecture_core.providers.bedrock_embedding import BedrockEmbeddingProvider
from lecture_core.providers.bedrock_llm import BedrockLLMProvider
from lecture_core.providers.openai_llm import OpenAILLMProvider
from shared_utils.config_loader import get_settings
from shared_utils.constants import EmbeddingProvider, LLMProvider, LogScope
from shared_utils.error_handler import ConfigurationError


logger = logging.getLogger(__name__)


class EmbeddingProviderFactory:
    """Factory for creating embedding providers."""

    @staticmethod
    def create(provider_type: Optional[str] = None) -> EmbeddingProviderBase:
        """Create configured embedding provider.

        Args:
            provider_type: Optional override. If None, uses config value.

        Returns:
            Initialized embedding provider.

        Raises:
            ConfigurationError: If provider type is unknown or config is invalid.
        """
        settings = get_settings()
        embed_provider = provider_type or settings.embed_provider

        logger.info(
            "Creating embedding provider",
            extra={"scope": LogScope.CONFIG, "provider": embed_provider}
        )

        if embed_provider == EmbeddingProvider.OPENAI.value:
            provider = OpenAIEmbeddingProvider(
                api_key=settings.openai_api_key,
                model=settings.openai_embed_model,
                timeout=settings.request_timeout,
            )
        elif embed_provider == EmbeddingProvider.BEDROCK.value:
            if not settings.bedrock_region or not settings.bedrock_embed_model_id:
                raise ConfigurationError("BEDROCK_REGION or BEDROCK_EMBED_MODEL_ID not configured")

            provider = BedrockEmbeddingProvider(
                model_id=settings.bedrock_embed_model_id,
                region=settings.bedrock_region,
                timeout=settings.request_timeout,
            )
        else:
            raise ConfigurationError(
                f"Unknown embedding provider: {embed_provider}",
                context={"provider": embed_provider},
            )

        try:
            provider.initialize()
        except Exception as e:
            logger.error(
                "Failed to create embedding provider",
                extra={"scope": LogScope.CONFIG, "provider": embed_provider, "error": str(e)}
            )
            raise
        return provider


class LLMProviderFactory:
    """Factory for creating LLM providers."""

    @staticmethod
    def create(provider_type: Optional[str] = None) -> LLMProviderBase:
        """Create configured LLM provider.

        Returns:
            Initialized LLM provider.

        Raises:
            ConfigurationError: If config is invalid.
        """
        settings = get_settings()
        llm_provider = provider_type or settings.llm_provider

        logger.info(
            "Creating LLM provider",
            extra={"scope": LogScope.CONFIG, "provider": llm_provider}
        )

        if llm_provider == LLMProvider.OPENAI.value:
            provider = OpenAILLMProvider(
                model_id=settings.openai_llm_model_id,
                api_key=settings.openai_api_key,
                temperature=settings.llm_temperature,
                timeout=settings.request_timeout,
            )
        elif llm_provider == LLMProvider.BEDROCK.value:
            if not settings.bedrock_region or not settings.bedrock_llm_model_id:
                raise ConfigurationError("BEDROCK_REGION or BEDROCK_LLM_MODEL_ID not configured")

            provider = BedrockLLMProvider(
                model_id=settings.bedrock_llm_model_id,
                region=settings.bedrock_region,
                temperature=settings.llm_temperature,
                timeout=settings.request_timeout,
            )
        else:
            raise ConfigurationError(
                f"Unknown LLM provider: {llm_provider}",
                context={"provider": llm_provider},
            )

        try:
            provider.initialize()
        except Exception as e:
            logger.error(
                "Failed to create LLM provider",
                extra={"scope": LogScope.CONFIG, "provider": llm_provider, "error": str(e)}
            )
            raise
        return provider
