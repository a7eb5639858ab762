"""
QueryService — course-scoped question answering with citations.

Orchestrates:
    1. Embed the learner's question via EmbeddingProviderPort.
    2. Search VectorStorePort, restricted to the caller's accessible courses.
    3. Build numbered context blocks and a grounded prompt.
    4. Call LLMProviderPort once.
    5. Assemble and return an AnswerResult with references.

No framework / vendor imports — depends only on ports & domain models.
"""

from __future__ import annotations

import time
from typing import List, Optional, Sequence

from domain.models import AnswerResult, Reference, RetrievalHit
from ports.history_store import QuestionHistoryPort
from ports.llm_provider import EmbeddingProviderPort, LLMProviderPort
from ports.vector_store import VectorStorePort
from shared_utils.constants import Defaults, LogScope, MetadataKeys
from shared_utils.error_handler import AnswerGenerationError, NoAccessibleCoursesError
from shared_utils.logging_utils import ContextualLogger
from shared_utils.validation import InputValidator


logger = ContextualLogger(scope=LogScope.QUERY_SERVICE)

# Prompt templates — kept as module constants so tests can inspect them.
SYSTEM_PROMPT = (
    "You are a helpful teaching assistant for an online programming course. "
    "Answer the student's question using ONLY the course context provided. "
    "Cite the section name and the time range (start → end) of the passages "
    "you rely on. Format any code as fenced Markdown code blocks. Keep the "
    "answer concise. If the context does not contain the answer, say so "
    "explicitly instead of guessing."
)

USER_PROMPT = (
    'Student question: "{question}"\n\n'
    "{history}"
    "Relevant course context:\n\n{context}\n\n"
    "Answer the student using only the above context. "
    "Include the best timestamps and section names."
)

HISTORY_BLOCK = "Earlier questions from this student (for context only):\n{questions}\n\n"

CONTEXT_BLOCK = (
    "[#{n}] [Course: {course}] [Section: {section}] [File: {file}] "
    "[Time: {start} → {end}]\n{text}"
)

NO_CONTEXT_ANSWER = (
    "I couldn't find anything in your courses that covers this question. "
    "Try rephrasing it or asking about a topic from the course material."
)


class QueryService:
    """Stateless answer orchestrator that depends on port interfaces."""

    def __init__(
        self,
        *,
        vector_store: VectorStorePort,
        embedding_provider: EmbeddingProviderPort,
        llm_provider: LLMProviderPort,
        history_store: Optional[QuestionHistoryPort] = None,
        top_k: int = Defaults.RETRIEVAL_TOP_K,
        prior_question_limit: int = Defaults.PRIOR_QUESTION_LIMIT,
        expose_error_details: bool = False,
    ) -> None:
        self._vectors = vector_store
        self._embedder = embedding_provider
        self._llm = llm_provider
        self._history = history_store
        self._top_k = top_k
        self._prior_question_limit = prior_question_limit
        self._expose_error_details = expose_error_details

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def answer(
        self,
        question: str,
        user_id: str,
        accessible_course_ids: Sequence[str],
        section: Optional[str] = None,
        prior_question_limit: Optional[int] = None,
        conversation_id: Optional[str] = None,
    ) -> AnswerResult:
        """Answer a question from the caller's accessible course material.

        Args:
            question: Learner's natural-language question.
            user_id: Caller identity, used for question history.
            accessible_course_ids: Courses the caller may read. Retrieval
                never returns windows outside this set.
            section: Optional section name to restrict retrieval to.
            prior_question_limit: How many earlier questions to include;
                defaults to the limit the service was built with.
            conversation_id: Optional conversation scope for history.

        Returns:
            AnswerResult with answer text, references, and token usage.

        Raises:
            ValidationError: Blank question.
            NoAccessibleCoursesError: Caller has no accessible course.
            EmbeddingError: The question could not be embedded.
            IndexUnavailableError: The vector index could not be queried.
            AnswerGenerationError: The language model call failed.
        """
        question = InputValidator.validate_non_empty_string(question, "question")
        course_ids = [c for c in dict.fromkeys(accessible_course_ids or []) if c]
        if not course_ids:
            logger.warning("answer_rejected_no_courses", user_id=user_id)
            raise NoAccessibleCoursesError(user_id)

        if prior_question_limit is None:
            prior_question_limit = self._prior_question_limit

        started = time.time()
        logger.info(
            "answer_started",
            user_id=user_id,
            question_len=len(question),
            courses=len(course_ids),
            section=section,
        )

        # 1. Embed the question
        query_embedding = self._embedder.embed_text(question)

        # 2. Retrieve windows from the caller's courses only
        hits = self._vectors.query(
            embedding=query_embedding,
            top_k=self._top_k,
            filters={MetadataKeys.SECTION: section} if section else None,
            course_ids=course_ids,
        )

        if not hits:
            logger.info(
                "answer_no_context",
                user_id=user_id,
                latency_ms=round(_elapsed_ms(started), 1),
            )
            self._record_question(user_id, question, conversation_id)
            return AnswerResult(answer=NO_CONTEXT_ANSWER, context_found=False)

        # 3. Build the grounded prompt
        prior = self._recent_questions(user_id, prior_question_limit, conversation_id)
        user_prompt = build_user_prompt(question, hits, prior)

        # 4. Call the LLM once
        try:
            completion = self._llm.chat(SYSTEM_PROMPT, user_prompt)
        except Exception as exc:
            error_msg = f"{type(exc).__name__}: {exc}"
            logger.error("answer_generation_failed", user_id=user_id, error=error_msg)
            raise AnswerGenerationError(
                error_msg,
                expose_details=self._expose_error_details,
                context={"user_id": user_id},
            ) from exc

        # 5. Assemble references in retrieval order
        references = [Reference.from_hit(h) for h in hits]
        self._record_question(user_id, question, conversation_id)

        logger.info(
            "answer_completed",
            user_id=user_id,
            windows_retrieved=len(hits),
            prior_questions=len(prior),
            tokens_used=completion.tokens_used,
            latency_ms=round(_elapsed_ms(started), 1),
        )
        return AnswerResult(
            answer=completion.text,
            references=references,
            tokens_used=completion.tokens_used,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _recent_questions(
        self,
        user_id: str,
        limit: int,
        conversation_id: Optional[str],
    ) -> List[str]:
        """Earlier questions of the caller, oldest first.

        History is soft context: a lookup failure yields no history rather
        than failing the answer.
        """
        if self._history is None or limit <= 0:
            return []
        try:
            questions = self._history.recent_questions(
                user_id, limit, conversation_id=conversation_id
            )
        except Exception as exc:
            logger.warning(
                "question_history_unavailable",
                user_id=user_id,
                error=f"{type(exc).__name__}: {exc}",
            )
            return []
        return [q for q in questions if q and q.strip()][-limit:]

    def _record_question(
        self,
        user_id: str,
        question: str,
        conversation_id: Optional[str],
    ) -> None:
        if self._history is None:
            return
        try:
            self._history.record_question(user_id, question, conversation_id=conversation_id)
        except Exception as exc:
            logger.warning(
                "question_history_write_failed",
                user_id=user_id,
                error=f"{type(exc).__name__}: {exc}",
            )


# ------------------------------------------------------------------
# Module-level helpers
# ------------------------------------------------------------------

def format_context_blocks(hits: Sequence[RetrievalHit]) -> str:
    """Number retrieved windows ``[#1]..[#n]`` in retrieval order."""
    blocks = []
    for n, hit in enumerate(hits, start=1):
        meta = hit.metadata
        blocks.append(
            CONTEXT_BLOCK.format(
                n=n,
                course=meta.get(MetadataKeys.TITLE) or hit.course_id,
                section=meta.get(MetadataKeys.SECTION, Defaults.UNKNOWN_SECTION),
                file=meta.get(MetadataKeys.FILE_NAME, ""),
                start=meta.get(MetadataKeys.START_TIME, ""),
                end=meta.get(MetadataKeys.END_TIME, ""),
                text=hit.text,
            )
        )
    return "\n\n".join(blocks)


def build_user_prompt(
    question: str,
    hits: Sequence[RetrievalHit],
    prior_questions: Sequence[str] = (),
) -> str:
    """Render the user prompt from the question, hits and prior questions."""
    history = ""
    if prior_questions:
        history = HISTORY_BLOCK.format(
            questions="\n".join(f"- {q}" for q in prior_questions)
        )
    return USER_PROMPT.format(
        question=question,
        history=history,
        context=format_context_blocks(hits),
    )


def _elapsed_ms(started: float) -> float:
    """Return milliseconds elapsed since *started*."""
    return (time.time() - started) * 1000
