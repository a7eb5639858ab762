"""
Port interface for the caller's question history.

The answering pipeline records every answered question and reads recent
ones back as soft context for the next answer.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable


@runtime_checkable
class QuestionHistoryPort(Protocol):
    """Questions a user has asked before."""

    def record_question(
        self,
        user_id: str,
        question: str,
        conversation_id: Optional[str] = None,
    ) -> None:
        """Append an answered question to the user's history."""
        ...

    def recent_questions(
        self,
        user_id: str,
        limit: int,
        conversation_id: Optional[str] = None,
    ) -> List[str]:
        """Return up to ``limit`` most recent questions, oldest first.

        Args:
            user_id: Caller identifier.
            limit: Maximum number of questions.
            conversation_id: Optional conversation to restrict to.
        """
        ...
