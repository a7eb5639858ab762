"""
S3 Vectors-backed vector store adapter.

Implements VectorStorePort using the Amazon S3 Vectors boto3 client
for embedding storage and ANN retrieval.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Iterator, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from domain.models import CollectionStats, CourseInfo, IndexedRecord, RetrievalHit
from shared_utils.constants import Defaults, LogScope, MetadataKeys, VectorIndexConfig
from shared_utils.error_handler import IndexUnavailableError, ProcessingError
from shared_utils.logging_utils import get_scoped_logger


logger = get_scoped_logger(LogScope.ADAPTER)

_AWS_ERRORS = (ClientError, BotoCoreError)


class S3VectorsVectorStoreAdapter:
    """Amazon S3 Vectors implementation of VectorStorePort.

    Uses the ``s3vectors`` boto3 client for:
    - ``get_index`` / ``create_index`` – collection bootstrap (cosine)
    - ``put_vectors``  – store embeddings with metadata
    - ``query_vectors`` – ANN search with metadata filters
    - ``list_vectors`` / ``delete_vectors`` – per-course bulk delete

    S3 Vectors writes are strongly consistent: a vector is queryable as soon
    as ``put_vectors`` returns.  Hits come back in the order the service
    returns them; ties are not re-sorted.
    """

    def __init__(
        self,
        vector_bucket_name: str,
        index_name: str = VectorIndexConfig.INDEX_NAME,
        region: str = Defaults.AWS_REGION,
        endpoint_url: str = "",
        timeout: float = Defaults.REQUEST_TIMEOUT,
        s3vectors_client: Optional[object] = None,
    ) -> None:
        self._bucket = vector_bucket_name
        self._index = index_name
        self._dimension: Optional[int] = None
        client_kwargs: dict = {
            "region_name": region,
            "config": Config(connect_timeout=timeout, read_timeout=timeout),
        }
        if endpoint_url:
            client_kwargs["endpoint_url"] = endpoint_url
        self._client = s3vectors_client or boto3.client(
            "s3vectors", **client_kwargs
        )

    # ------------------------------------------------------------------
    # VectorStorePort implementation
    # ------------------------------------------------------------------

    def ensure_collection(self, dimension: int) -> None:
        """Create the index with cosine distance if it does not exist."""
        if self._dimension is not None:
            return

        try:
            response = self._client.get_index(
                vectorBucketName=self._bucket, indexName=self._index
            )
            self._dimension = int(response["index"]["dimension"])
            return
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") != "NotFoundException":
                logger.error("s3vectors_get_index_failed", error=str(exc))
                raise IndexUnavailableError(f"Failed to read index: {exc}") from exc
        except BotoCoreError as exc:
            logger.error("s3vectors_get_index_failed", error=str(exc))
            raise IndexUnavailableError(f"Failed to read index: {exc}") from exc

        try:
            self._client.create_index(
                vectorBucketName=self._bucket,
                indexName=self._index,
                dataType=VectorIndexConfig.DATA_TYPE,
                dimension=dimension,
                distanceMetric=VectorIndexConfig.DISTANCE_METRIC,
                metadataConfiguration={
                    "nonFilterableMetadataKeys": [MetadataKeys.TEXT],
                },
            )
        except _AWS_ERRORS as exc:
            logger.error("s3vectors_create_index_failed", error=str(exc))
            raise IndexUnavailableError(f"Failed to create index: {exc}") from exc

        self._dimension = dimension
        logger.info("s3vectors_index_created", index=self._index, dimension=dimension)

    def upsert_many(self, records: List[IndexedRecord], course_info: CourseInfo) -> int:
        """Store embedding vectors in the S3 Vectors index with one ``put_vectors`` call.

        Raises:
            ProcessingError: More records than one ``put_vectors`` call accepts,
                or a vector whose dimension differs from the index.
            IndexUnavailableError: The write was rejected by S3 Vectors.
        """
        if not records:
            return 0
        if len(records) > VectorIndexConfig.MAX_VECTORS_PER_PUT:
            raise ProcessingError(
                f"Cannot write {len(records)} vectors at once; "
                f"the limit is {VectorIndexConfig.MAX_VECTORS_PER_PUT}",
                error_type="indexing",
                context={"index": self._index, "course_id": course_info.course_id},
            )

        self.ensure_collection(len(records[0].vector))
        course_meta = course_info.to_metadata()

        payload = []
        for r in records:
            if len(r.vector) != self._dimension:
                raise ProcessingError(
                    f"Vector dimension {len(r.vector)} does not match index dimension {self._dimension}",
                    error_type="indexing",
                    context={"index": self._index},
                )
            payload.append(
                {
                    "key": r.id or str(uuid.uuid4()),
                    "data": {"float32": list(r.vector)},
                    "metadata": {
                        **r.metadata,
                        **course_meta,
                        MetadataKeys.TEXT: self._metadata_text(r),
                    },
                }
            )

        try:
            self._client.put_vectors(
                vectorBucketName=self._bucket,
                indexName=self._index,
                vectors=payload,
            )
        except _AWS_ERRORS as exc:
            logger.error("s3vectors_store_failed", error=str(exc))
            raise IndexUnavailableError(f"Failed to store vectors: {exc}") from exc

        logger.info(
            "s3vectors_upserted",
            course_id=course_info.course_id,
            count=len(payload),
            index=self._index,
        )
        return len(payload)

    def query(
        self,
        embedding: List[float],
        top_k: int = 5,
        filters: Optional[Dict[str, str]] = None,
        course_ids: Optional[List[str]] = None,
    ) -> List[RetrievalHit]:
        """ANN search restricted to ``course_ids`` and scalar filters."""
        query_params: Dict[str, Any] = {
            "vectorBucketName": self._bucket,
            "indexName": self._index,
            "queryVector": {"float32": list(embedding)},
            "topK": top_k,
            "returnMetadata": True,
            "returnDistance": True,
        }
        metadata_filter = self.build_filter(filters, course_ids)
        if metadata_filter:
            query_params["filter"] = metadata_filter

        try:
            response = self._client.query_vectors(**query_params)
        except _AWS_ERRORS as exc:
            logger.error("s3vectors_query_failed", error=str(exc))
            raise IndexUnavailableError(f"Vector search failed: {exc}") from exc

        hits: List[RetrievalHit] = []
        for hit in response.get("vectors", []):
            meta = dict(hit.get("metadata", {}))
            text = meta.pop(MetadataKeys.TEXT, "")
            hits.append(
                RetrievalHit(
                    id=hit.get("key", ""),
                    # cosine distance -> similarity
                    score=1.0 - float(hit.get("distance", 1.0)),
                    text=text,
                    metadata=meta,
                )
            )
        logger.info(
            "s3vectors_query",
            top_k=top_k,
            results=len(hits),
            course_filter=course_ids,
            filters=filters,
        )
        return hits

    def delete_by_course(self, course_id: str) -> int:
        """Delete every vector tagged with ``course_id``; no-op when none exist."""
        try:
            keys = [
                v["key"]
                for v in self._iter_vectors()
                if v.get("metadata", {}).get(MetadataKeys.COURSE_ID) == course_id
            ]
            batch_size = VectorIndexConfig.DELETE_BATCH_SIZE
            for i in range(0, len(keys), batch_size):
                self._client.delete_vectors(
                    vectorBucketName=self._bucket,
                    indexName=self._index,
                    keys=keys[i : i + batch_size],
                )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "NotFoundException":
                logger.info("s3vectors_delete_noop", course_id=course_id)
                return 0
            logger.error("s3vectors_delete_failed", course_id=course_id, error=str(exc))
            raise IndexUnavailableError(f"Failed to delete vectors: {exc}") from exc
        except BotoCoreError as exc:
            logger.error("s3vectors_delete_failed", course_id=course_id, error=str(exc))
            raise IndexUnavailableError(f"Failed to delete vectors: {exc}") from exc

        logger.info("s3vectors_deleted", course_id=course_id, deleted_count=len(keys))
        return len(keys)

    def get_collection_stats(self) -> Optional[CollectionStats]:
        """Describe the index; any failure degrades to ``None``."""
        try:
            index = self._client.get_index(
                vectorBucketName=self._bucket, indexName=self._index
            )["index"]
            count = sum(1 for _ in self._iter_vectors(with_metadata=False))
        except _AWS_ERRORS as exc:
            logger.warning("s3vectors_stats_unavailable", error=str(exc))
            return None

        return CollectionStats(
            name=self._index,
            dimension=index.get("dimension"),
            distance_metric=index.get("distanceMetric", ""),
            vector_count=count,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def build_filter(
        filters: Optional[Dict[str, str]] = None,
        course_ids: Optional[List[str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Translate course ids and scalar filters to an S3 Vectors filter."""
        clauses: List[Dict[str, Any]] = []
        if course_ids:
            if len(course_ids) == 1:
                clauses.append({MetadataKeys.COURSE_ID: {"$eq": course_ids[0]}})
            else:
                clauses.append({MetadataKeys.COURSE_ID: {"$in": list(course_ids)}})
        for key, value in (filters or {}).items():
            clauses.append({key: {"$eq": value}})

        if not clauses:
            return None
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}

    def _metadata_text(self, record: IndexedRecord) -> str:
        limit = VectorIndexConfig.TEXT_METADATA_LIMIT
        if len(record.text) <= limit:
            return record.text
        logger.warning(
            "s3vectors_text_truncated",
            record_id=record.id,
            start_time=record.metadata.get(MetadataKeys.START_TIME),
            text_len=len(record.text),
            limit=limit,
        )
        return record.text[:limit]

    def _iter_vectors(self, with_metadata: bool = True) -> Iterator[Dict[str, Any]]:
        params: Dict[str, Any] = {
            "vectorBucketName": self._bucket,
            "indexName": self._index,
            "maxResults": VectorIndexConfig.LIST_PAGE_SIZE,
            "returnMetadata": with_metadata,
        }
        while True:
            response = self._client.list_vectors(**params)
            yield from response.get("vectors", [])
            token = response.get("nextToken")
            if not token:
                break
            params["nextToken"] = token
