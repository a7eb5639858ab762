"""
Port interface for vector index operations.

Implementations: InMemoryVectorStoreAdapter, S3VectorsVectorStoreAdapter (adapters/)
"""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol, runtime_checkable

from domain.models import CollectionStats, CourseInfo, IndexedRecord, RetrievalHit


@runtime_checkable
class VectorStorePort(Protocol):
    """Abstract interface for vector storage and retrieval."""

    def ensure_collection(self, dimension: int) -> None:
        """Create the backing collection (cosine distance) if it is absent.

        Idempotent.  The dimension is fixed once the collection exists.
        """
        ...

    def upsert_many(
        self, records: List[IndexedRecord], course_info: CourseInfo
    ) -> int:
        """Write records in one acknowledged batch.

        Args:
            records: Embedded windows; records without ``id`` get a UUID.
            course_info: Course-level fields; they win over any same-named
                key in a record's own metadata.

        Returns:
            Number of records written.

        Raises:
            IndexUnavailableError: If the store is unreachable.
            ProcessingError: On a vector dimension mismatch.
        """
        ...

    def query(
        self,
        embedding: List[float],
        top_k: int = 5,
        filters: Optional[Dict[str, str]] = None,
        course_ids: Optional[List[str]] = None,
    ) -> List[RetrievalHit]:
        """Nearest-neighbour search.

        Args:
            embedding: Query embedding vector.
            top_k: Maximum results to return.
            filters: Scalar equality filters, ANDed together.
            course_ids: When non-empty, restricts hits to these courses.

        Returns:
            Hits ordered by descending score; empty when nothing qualifies.

        Raises:
            IndexUnavailableError: If the store is unreachable.
        """
        ...

    def delete_by_course(self, course_id: str) -> int:
        """Remove every record tagged with ``course_id``.

        Idempotent; returns the number of records removed.
        """
        ...

    def get_collection_stats(self) -> Optional[CollectionStats]:
        """Describe the collection, or ``None`` when it cannot be read."""
        ...
