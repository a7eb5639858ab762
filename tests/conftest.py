"""
Root conftest.py — shared fixtures for the entire test suite.

Guidelines:
    • No __init__.py in test sub-directories (avoids shadowing root packages).
    • pytest.ini_options lives in pyproject.toml with pythonpath=["."].
    • Markers: integration.
"""

from typing import Dict, List
from unittest.mock import MagicMock

import pytest

from domain.models import CourseInfo, Difficulty, RetrievalHit, Segment


# ---------------------------------------------------------------------------
# Marker registration
# ---------------------------------------------------------------------------

def pytest_configure(config):
    config.addinivalue_line("markers", "integration: mark test as integration test")


# ---------------------------------------------------------------------------
# Minimal required settings kwargs for Settings(**BASE_SETTINGS_KWARGS)
# ---------------------------------------------------------------------------

BASE_SETTINGS_KWARGS: Dict[str, str] = {
    "llm_provider": "bedrock",
    "embed_provider": "bedrock",
    "bedrock_region": "eu-west-2",
    "bedrock_llm_model_id": "anthropic.claude-3-haiku-20240307-v1:0",
    "environment": "development",
}


@pytest.fixture()
def base_settings_kwargs() -> Dict[str, str]:
    """Provide the minimal kwargs needed to instantiate ``Settings``."""
    return {**BASE_SETTINGS_KWARGS}


# ---------------------------------------------------------------------------
# Sample caption fixtures
# ---------------------------------------------------------------------------

SAMPLE_VTT = (
    "WEBVTT\n"
    "\n"
    "1\n"
    "00:00:00.000 --> 00:00:20.000\n"
    "Welcome to the course.\n"
    "\n"
    "2\n"
    "00:00:20.000 --> 00:00:40.000\n"
    "Today we install Node.\n"
    "\n"
    "3\n"
    "00:00:40.000 --> 00:01:00.000\n"
    "Let's run our first script.\n"
)


@pytest.fixture()
def sample_vtt_bytes() -> bytes:
    """Raw caption bytes suitable for IngestionService.ingest_file()."""
    return SAMPLE_VTT.encode()


@pytest.fixture()
def sample_segments() -> List[Segment]:
    """Ready-made segments matching SAMPLE_VTT."""
    return [
        Segment(start="00:00:00.000", end="00:00:20.000", text="Welcome to the course."),
        Segment(start="00:00:20.000", end="00:00:40.000", text="Today we install Node."),
        Segment(start="00:00:40.000", end="00:01:00.000", text="Let's run our first script."),
    ]


# ---------------------------------------------------------------------------
# Mock adapter factories
# ---------------------------------------------------------------------------

@pytest.fixture()
def mock_vector_store() -> MagicMock:
    """Pre-configured vector store mock; upsert reports every record written."""
    mock = MagicMock()
    mock.upsert_many.side_effect = lambda records, course_info: len(records)
    mock.query.return_value = []
    return mock


@pytest.fixture()
def mock_embedding_provider() -> MagicMock:
    """Pre-configured embedding provider mock."""
    mock = MagicMock()
    mock.embed_text.return_value = [0.1, 0.2, 0.3]
    mock.embed_texts.side_effect = lambda texts: [[0.1, 0.2, 0.3] for _ in texts]
    mock.get_embedding_dimension.return_value = 3
    return mock


# ---------------------------------------------------------------------------
# Domain object factories
# ---------------------------------------------------------------------------

@pytest.fixture()
def sample_course() -> CourseInfo:
    """A standard course used across ingestion and query tests."""
    return CourseInfo(
        course_id="course-node",
        title="Node Fundamentals",
        topic="node",
        difficulty=Difficulty.BEGINNER,
    )


def _make_hit(
    hit_id: str = "v-1",
    score: float = 0.9,
    text: str = "Use npm init to start a project.",
    course_id: str = "course-node",
    **metadata,
) -> RetrievalHit:
    """Build a RetrievalHit with sensible citation metadata."""
    meta = {
        "course_id": course_id,
        "title": "Node Fundamentals",
        "section": "Node Introduction",
        "file_name": "01-node-introduction.vtt",
        "start_time": "00:00:00.000",
        "end_time": "00:00:45.000",
    }
    meta.update(metadata)
    return RetrievalHit(id=hit_id, score=score, text=text, metadata=meta)


@pytest.fixture()
def make_hit():
    """Factory fixture for RetrievalHit objects."""
    return _make_hit
