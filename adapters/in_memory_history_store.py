"""
In-memory question history adapter.

Implements QuestionHistoryPort for local development and tests.  Production
deployments back the same port with the conversation store owned by the caller.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Dict, List, Optional, Tuple


class InMemoryQuestionHistoryAdapter:
    """Keeps every recorded question per user, in arrival order."""

    def __init__(self) -> None:
        self._questions: Dict[str, List[Tuple[Optional[str], str]]] = defaultdict(list)
        self._lock = threading.Lock()

    def record_question(
        self, user_id: str, question: str, conversation_id: Optional[str] = None
    ) -> None:
        with self._lock:
            self._questions[user_id].append((conversation_id, question))

    def recent_questions(
        self,
        user_id: str,
        limit: int,
        conversation_id: Optional[str] = None,
    ) -> List[str]:
        """Most recent ``limit`` questions, oldest first."""
        if limit <= 0:
            return []
        with self._lock:
            entries = list(self._questions.get(user_id, []))
        if conversation_id is not None:
            entries = [e for e in entries if e[0] == conversation_id]
        return [q for _, q in entries[-limit:]]
