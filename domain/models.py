"""
Pure domain models for the lecture transcript pipeline.

These models contain NO vendor dependencies. They represent core business
concepts that flow through ports and services.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shared_utils.constants import MetadataKeys


# ---------------------------------------------------------------------------
# Transcript
# ---------------------------------------------------------------------------


class Segment(BaseModel):
    """One caption cue: ``HH:MM:SS.mmm`` timestamps and its trimmed text."""

    model_config = ConfigDict(frozen=True)

    start: str
    end: str
    text: str


class Window(BaseModel):
    """Consecutive segments merged into one retrieval unit."""

    model_config = ConfigDict(frozen=True)

    start: str
    end: str
    text: str


# ---------------------------------------------------------------------------
# Courses & index records
# ---------------------------------------------------------------------------


class Difficulty(str, Enum):
    """Course difficulty level."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class CourseInfo(BaseModel):
    """Course-level fields stamped on every window of an upload."""

    course_id: str
    title: str = ""
    topic: str = ""
    difficulty: Difficulty = Difficulty.BEGINNER

    def to_metadata(self) -> Dict[str, str]:
        return {
            MetadataKeys.COURSE_ID: self.course_id,
            MetadataKeys.TITLE: self.title,
            MetadataKeys.TOPIC: self.topic,
            MetadataKeys.DIFFICULTY: self.difficulty.value,
        }


class IndexedRecord(BaseModel):
    """A single embedded window ready for the vector index.

    ``id`` is optional; the index assigns a UUID when it is missing.
    """

    id: Optional[str] = None
    vector: List[float]
    text: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class RetrievalHit(BaseModel):
    """Read-only projection returned by a similarity query.

    ``score`` is cosine similarity: higher means more relevant.
    """

    id: str
    score: float
    text: str
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def course_id(self) -> str:
        return str(self.metadata.get(MetadataKeys.COURSE_ID, ""))


class CollectionStats(BaseModel):
    """Auxiliary description of the backing collection."""

    name: str
    dimension: Optional[int] = None
    distance_metric: str = ""
    vector_count: Optional[int] = None


# ---------------------------------------------------------------------------
# Answering
# ---------------------------------------------------------------------------


class Reference(BaseModel):
    """A citation pointing at one retrieved window."""

    course_id: str
    course_title: str = ""
    section: str = ""
    file: str = ""
    start: str = ""
    end: str = ""
    score: float = 0.0

    @classmethod
    def from_hit(cls, hit: RetrievalHit) -> "Reference":
        meta = hit.metadata
        return cls(
            course_id=hit.course_id,
            course_title=str(meta.get(MetadataKeys.TITLE, "")),
            section=str(meta.get(MetadataKeys.SECTION, "")),
            file=str(meta.get(MetadataKeys.FILE_NAME, "")),
            start=str(meta.get(MetadataKeys.START_TIME, "")),
            end=str(meta.get(MetadataKeys.END_TIME, "")),
            score=hit.score,
        )


class LLMCompletion(BaseModel):
    """Text and token usage of one language model call."""

    text: str
    tokens_used: Optional[int] = None


class AnswerResult(BaseModel):
    """Answer payload handed back to the caller for persistence/display."""

    answer: str
    references: List[Reference] = Field(default_factory=list)
    tokens_used: Optional[int] = None
    context_found: bool = True


# ---------------------------------------------------------------------------
# Upload reports
# ---------------------------------------------------------------------------


class FileStatus(str, Enum):
    """Outcome of processing one caption file."""

    SUCCESS = "success"
    EMPTY = "empty"
    FAILED = "failed"


class FileReport(BaseModel):
    """Per-file processing report.

    ``chunks`` always equals the number of records written to the index.
    """

    file: str
    section: str = ""
    chunks: int = 0
    windows: int = 0
    failed_windows: int = 0
    duration: str = ""
    status: FileStatus = FileStatus.SUCCESS
    error: Optional[str] = None


class UploadReport(BaseModel):
    """Report for a multi-file upload plus course counters to persist."""

    course_id: str
    files: List[FileReport] = Field(default_factory=list)
    total_inserted: int = 0
    vector_count_delta: int = 0
    file_count_delta: int = 0

    @model_validator(mode="after")
    def _derive_totals(self) -> "UploadReport":
        self.total_inserted = sum(f.chunks for f in self.files)
        self.vector_count_delta = self.total_inserted
        self.file_count_delta = sum(
            1 for f in self.files if f.status == FileStatus.SUCCESS
        )
        return self
