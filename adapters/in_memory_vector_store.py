"""
In-memory vector store adapter for local development and tests.

Implements VectorStorePort using a simple Python dict + brute-force cosine
similarity. Used when S3_VECTORS_BUCKET is empty (local dev, CI).

NOT for production — no persistence across restarts.
"""

from __future__ import annotations

import math
import threading
import uuid
from typing import Dict, List, Optional, Tuple

from domain.models import CollectionStats, CourseInfo, IndexedRecord, RetrievalHit
from shared_utils.constants import LogScope, MetadataKeys, VectorIndexConfig
from shared_utils.error_handler import ProcessingError
from shared_utils.logging_utils import get_scoped_logger


logger = get_scoped_logger(LogScope.ADAPTER)


class InMemoryVectorStoreAdapter:
    """Brute-force in-memory implementation of VectorStorePort.

    Records live in an insertion-ordered dict keyed by id.  Search uses cosine
    similarity with a stable sort, so equal scores keep insertion order.
    """

    def __init__(self, name: str = VectorIndexConfig.INDEX_NAME) -> None:
        self.name = name
        self._dimension: Optional[int] = None
        self._store: Dict[str, IndexedRecord] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # VectorStorePort implementation
    # ------------------------------------------------------------------

    def ensure_collection(self, dimension: int) -> None:
        """Fix the collection dimension on first call; later calls are no-ops."""
        with self._lock:
            if self._dimension is None:
                self._dimension = dimension
                logger.info("inmemory_collection_created", name=self.name, dimension=dimension)

    def upsert_many(self, records: List[IndexedRecord], course_info: CourseInfo) -> int:
        """Store records; course-level fields override record metadata."""
        if not records:
            return 0

        self.ensure_collection(len(records[0].vector))
        course_meta = course_info.to_metadata()

        stored = []
        for r in records:
            if len(r.vector) != self._dimension:
                raise ProcessingError(
                    f"Vector dimension {len(r.vector)} does not match collection dimension {self._dimension}",
                    error_type="indexing",
                    context={"collection": self.name},
                )
            stored.append(
                IndexedRecord(
                    id=r.id or str(uuid.uuid4()),
                    vector=list(r.vector),
                    text=r.text,
                    metadata={**r.metadata, **course_meta},
                )
            )

        with self._lock:
            for r in stored:
                self._store[r.id] = r
            total = len(self._store)

        logger.info(
            "inmemory_vectors_upserted",
            course_id=course_info.course_id,
            count=len(stored),
            total=total,
        )
        return len(stored)

    def query(
        self,
        embedding: List[float],
        top_k: int = 5,
        filters: Optional[Dict[str, str]] = None,
        course_ids: Optional[List[str]] = None,
    ) -> List[RetrievalHit]:
        """Brute-force cosine similarity search."""
        with self._lock:
            candidates = list(self._store.values())

        if course_ids:
            allowed = set(course_ids)
            candidates = [
                r for r in candidates
                if r.metadata.get(MetadataKeys.COURSE_ID) in allowed
            ]
        for key, value in (filters or {}).items():
            candidates = [r for r in candidates if r.metadata.get(key) == value]

        scored: List[Tuple[float, IndexedRecord]] = [
            (self._cosine_similarity(embedding, r.vector), r) for r in candidates
        ]
        scored.sort(key=lambda x: x[0], reverse=True)

        hits = [
            RetrievalHit(id=r.id, score=score, text=r.text, metadata=dict(r.metadata))
            for score, r in scored[:top_k]
        ]
        logger.info(
            "inmemory_vector_query",
            top_k=top_k,
            results=len(hits),
            course_filter=course_ids,
            filters=filters,
        )
        return hits

    def delete_by_course(self, course_id: str) -> int:
        """Remove all vectors for a course."""
        with self._lock:
            keys = [
                k for k, r in self._store.items()
                if r.metadata.get(MetadataKeys.COURSE_ID) == course_id
            ]
            for k in keys:
                del self._store[k]
        logger.info(
            "inmemory_vectors_deleted",
            course_id=course_id,
            deleted_count=len(keys),
        )
        return len(keys)

    def get_collection_stats(self) -> Optional[CollectionStats]:
        if self._dimension is None:
            return None
        return CollectionStats(
            name=self.name,
            dimension=self._dimension,
            distance_metric=VectorIndexConfig.DISTANCE_METRIC,
            vector_count=len(self._store),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _cosine_similarity(a: List[float], b: List[float]) -> float:
        """Compute cosine similarity between two vectors."""
        if len(a) != len(b) or not a:
            return 0.0
        dot = sum(x * y for x, y in zip(a, b))
        norm_a = math.sqrt(sum(x * x for x in a))
        norm_b = math.sqrt(sum(x * x for x in b))
        if norm_a == 0.0 or norm_b == 0.0:
            return 0.0
        return dot / (norm_a * norm_b)
