"""
Port interface for LLM and embedding operations.

lecture_core/providers/ implements concrete versions.
This port formalises the contract so services depend on the interface, not the impl.
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from domain.models import LLMCompletion


@runtime_checkable
class LLMProviderPort(Protocol):
    """Abstract interface for LLM text generation."""

    def chat(self, system_prompt: str, user_prompt: str) -> LLMCompletion:
        """Run one chat completion with a system and a user message.

        Args:
            system_prompt: Instruction constraining the model.
            user_prompt: Question plus retrieved context.

        Returns:
            LLMCompletion with the answer text and token usage when reported.
        """
        ...


@runtime_checkable
class EmbeddingProviderPort(Protocol):
    """Abstract interface for text embedding."""

    def embed_text(self, text: str) -> List[float]:
        """Embed a single text string.

        Raises:
            EmbeddingError: Credential missing or the provider call failed.
        """
        ...

    def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """Embed multiple text strings (same order as input)."""
        ...

    def get_embedding_dimension(self) -> int:
        """Return the dimensionality of produced embeddings."""
        ...
