"""
Ingestion service — orchestrates the caption upload write path.

Flow:  raw bytes → parse → aggregate windows → embed (best-effort) → upsert.

Depends only on ports (protocol interfaces) — never on concrete adapters.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple

from domain.models import (
    CollectionStats,
    CourseInfo,
    FileReport,
    FileStatus,
    IndexedRecord,
    UploadReport,
    Window,
)
from lecture_core.engine.windowing import (
    aggregate_windows,
    seconds_to_timestamp,
    timestamp_to_seconds,
)
from lecture_core.parser.caption_parser import CaptionParser, section_from_filename
from ports.llm_provider import EmbeddingProviderPort
from ports.vector_store import VectorStorePort
from shared_utils.constants import (
    ALLOWED_CAPTION_EXTENSIONS,
    Defaults,
    ErrorCode,
    LogScope,
    MetadataKeys,
)
from shared_utils.error_handler import ValidationError, handle_error
from shared_utils.logging_utils import get_scoped_logger, log_execution
from shared_utils.validation import InputValidator

logger = get_scoped_logger(LogScope.INGESTION)


# ---------------------------------------------------------------------------
# Helpers (pure functions — no external deps)
# ---------------------------------------------------------------------------

def _decode(raw_content: bytes) -> str:
    """UTF-8 decode, dropping a leading BOM."""
    return raw_content.decode("utf-8-sig")


def _span(windows: List[Window]) -> str:
    """Covered duration from the first window start to the last window end."""
    if not windows:
        return seconds_to_timestamp(0)
    return seconds_to_timestamp(
        timestamp_to_seconds(windows[-1].end) - timestamp_to_seconds(windows[0].start)
    )


# ---------------------------------------------------------------------------
# IngestionService
# ---------------------------------------------------------------------------

class IngestionService:
    """Turns uploaded caption files into indexed, course-tagged windows.

    Each upload is additive: records are appended under the upload's course
    and never modified afterwards.
    """

    def __init__(
        self,
        vector_store: VectorStorePort,
        embedding_provider: EmbeddingProviderPort,
        window_seconds: int = Defaults.WINDOW_SECONDS,
        max_workers: int = Defaults.EMBED_MAX_WORKERS,
    ) -> None:
        self._vectors = vector_store
        self._embedder = embedding_provider
        self._window_seconds = window_seconds
        self._max_workers = max_workers

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def embed_windows(self, windows: Sequence[Window]) -> List[Optional[List[float]]]:
        """Embed every window concurrently with best-effort semantics.

        Returns one entry per window, in order: the vector, or ``None`` when
        the window is blank or its embedding call failed.  A failure never
        cancels the other calls.
        """
        if not windows:
            return []

        def _embed_one(index: int, window: Window) -> Optional[List[float]]:
            if not window.text.strip():
                return None
            try:
                return self._embedder.embed_text(window.text)
            except Exception as exc:
                logger.warning(
                    "window_embedding_failed",
                    window_index=index,
                    start=window.start,
                    end=window.end,
                    error=f"{type(exc).__name__}: {exc}",
                )
                return None

        workers = max(1, min(self._max_workers, len(windows)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(_embed_one, i, w) for i, w in enumerate(windows)]
            return [f.result() for f in futures]

    def ingest_file(
        self,
        course: CourseInfo,
        file_name: str,
        raw_content: bytes,
        section: Optional[str] = None,
    ) -> FileReport:
        """Parse, window, embed and index a single caption file.

        Windows whose embedding fails are left out; the report's ``chunks``
        is the number of records actually written.

        Raises:
            ValidationError: Bad file name or undecodable content.
            IndexUnavailableError: The index write failed.
        """
        file_name = self._validate_file_name(file_name)
        section = section or section_from_filename(file_name) or Defaults.UNKNOWN_SECTION

        try:
            content = _decode(raw_content)
        except UnicodeDecodeError as exc:
            raise ValidationError(
                "Caption file is not valid UTF-8", context={"file": file_name}
            ) from exc

        segments = CaptionParser.parse(content)
        windows = aggregate_windows(segments, window_seconds=self._window_seconds)
        if not windows:
            logger.info("caption_file_empty", course_id=course.course_id, file=file_name)
            return FileReport(file=file_name, section=section, status=FileStatus.EMPTY)

        embeddings = self.embed_windows(windows)
        records = [
            IndexedRecord(
                vector=vector,
                text=window.text,
                metadata={
                    MetadataKeys.FILE_NAME: file_name,
                    MetadataKeys.SECTION: section,
                    MetadataKeys.START_TIME: window.start,
                    MetadataKeys.END_TIME: window.end,
                },
            )
            for window, vector in zip(windows, embeddings)
            if vector is not None
        ]

        written = self._vectors.upsert_many(records, course) if records else 0
        failed = len(windows) - len(records)

        report = FileReport(
            file=file_name,
            section=section,
            chunks=written,
            windows=len(windows),
            failed_windows=failed,
            duration=_span(windows),
            status=FileStatus.SUCCESS if written else FileStatus.FAILED,
            error=None if written else "No window could be embedded",
        )
        logger.info(
            "caption_file_ingested",
            course_id=course.course_id,
            file=file_name,
            section=section,
            windows=len(windows),
            chunks=written,
            failed_windows=failed,
        )
        return report

    @log_execution(scope=LogScope.INGESTION)
    def ingest_files(
        self,
        course: CourseInfo,
        files: Sequence[Tuple[str, bytes]],
        section: Optional[str] = None,
    ) -> UploadReport:
        """Ingest several caption files for one course.

        A file that fails is reported with ``status=failed`` and its error;
        the remaining files are still processed.

        Args:
            course: Target course; its fields tag every record.
            files: ``(file_name, raw_bytes)`` pairs in upload order.
            section: Optional section override for every file.

        Raises:
            ValidationError: If no files were supplied.
        """
        if not files:
            raise ValidationError("No files uploaded", context={"course_id": course.course_id})

        reports: List[FileReport] = []
        for file_name, raw_content in files:
            try:
                reports.append(self.ingest_file(course, file_name, raw_content, section=section))
            except Exception as exc:
                error = handle_error(
                    exc,
                    scope=LogScope.INGESTION,
                    default_error_code=ErrorCode.INDEXING_FAILED.value,
                )["error"]
                logger.error(
                    "caption_file_failed",
                    course_id=course.course_id,
                    file=file_name,
                    error_code=error["code"],
                    error=error["message"],
                )
                reports.append(
                    FileReport(file=file_name, status=FileStatus.FAILED, error=error["message"])
                )

        upload = UploadReport(course_id=course.course_id, files=reports)
        logger.info(
            "upload_completed",
            course_id=course.course_id,
            files=len(reports),
            total_inserted=upload.total_inserted,
            file_count_delta=upload.file_count_delta,
        )
        return upload

    def delete_course_vectors(self, course_id: str) -> int:
        """Remove every indexed window of a course; safe to repeat."""
        course_id = InputValidator.validate_non_empty_string(course_id, "course_id")
        deleted = self._vectors.delete_by_course(course_id)
        logger.info("course_vectors_deleted", course_id=course_id, deleted=deleted)
        return deleted

    def collection_stats(self) -> Optional[CollectionStats]:
        """Index statistics, or ``None`` when the index cannot be read."""
        try:
            return self._vectors.get_collection_stats()
        except Exception as exc:
            logger.warning("collection_stats_unavailable", error=str(exc))
            return None

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_file_name(file_name: str) -> str:
        file_name = InputValidator.validate_non_empty_string(file_name, "file_name")
        file_name = InputValidator.sanitize_filename(
            os.path.basename(file_name.replace("\\", "/"))
        )
        return InputValidator.validate_file_extension(file_name, ALLOWED_CAPTION_EXTENSIONS)
