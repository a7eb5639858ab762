"""
Abstract base classes for swappable providers.
Enables dependency injection and flexible component swapping.
"""

from abc import ABC, abstractmethod
from typing import List
import logging

from domain.models import LLMCompletion


class BaseProvider(ABC):
    """Base class for all providers."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @abstractmethod
    def initialize(self) -> None:
        """Initialize provider. Called after instantiation."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if provider is available and credentials are valid."""
        pass


class EmbeddingProviderBase(BaseProvider):
    """Abstract base for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str) -> List[float]:
        """Generate embedding for single text."""
        pass

    def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings for multiple texts; fails on the first error."""
        return [self.embed_text(text) for text in texts]

    @abstractmethod
    def get_embedding_dimension(self) -> int:
        """Return dimensionality of embeddings."""
        pass


class LLMProviderBase(BaseProvider):
    """Abstract base for LLM providers."""

    @abstractmethod
    def chat(self, system_prompt: str, user_prompt: str) -> LLMCompletion:
        """Run one system + user chat completion."""
        pass


def completion_from_chat_response(response) -> LLMCompletion:
    """Build an LLMCompletion from a llama-index ChatResponse.

    Token usage is read from ``additional_kwargs`` first, then from the raw
    SDK payload; providers that report nothing yield ``tokens_used=None``.
    """
    text = response.message.content or ""
    extra = getattr(response, "additional_kwargs", None) or {}
    tokens = extra.get("total_tokens")

    if tokens is None:
        raw = getattr(response, "raw", None)
        usage = raw.get("usage") if isinstance(raw, dict) else getattr(raw, "usage", None)
        if isinstance(usage, dict):
            tokens = usage.get("total_tokens")
        elif usage is not None:
            tokens = getattr(usage, "total_tokens", None)

    return LLMCompletion(text=text, tokens_used=int(tokens) if tokens is not None else None)
