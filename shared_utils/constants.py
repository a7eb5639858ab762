"""
Constants management.
Centralized configuration for all magic values, model IDs, and defaults.
"""

from enum import Enum
from typing import Final


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class EmbeddingProvider(str, Enum):
    """Supported embedding providers."""
    OPENAI = "openai"
    BEDROCK = "bedrock"


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    BEDROCK = "bedrock"
    OPENAI = "openai"


# Model IDs
class ModelIDs:
    """Centralized model identifiers."""
    # OpenAI chat
    OPENAI_CHAT_MODEL: Final[str] = "gpt-4.1-mini"

    # Bedrock LLM
    BEDROCK_CLAUDE_3_HAIKU: Final[str] = "anthropic.claude-3-haiku-20240307-v1:0"

    # OpenAI Embeddings
    OPENAI_EMBED_MODEL: Final[str] = "text-embedding-3-small"
    OPENAI_EMBEDDING_LARGE: Final[str] = "text-embedding-3-large"

    # Bedrock Embeddings
    BEDROCK_TITAN_EMBED_V2: Final[str] = "amazon.titan-embed-text-v2:0"


# Embedding sizes per model; unknown models fall back to Defaults.EMBEDDING_DIMENSION
EMBEDDING_DIMENSIONS: Final[dict] = {
    ModelIDs.OPENAI_EMBED_MODEL: 1536,
    ModelIDs.OPENAI_EMBEDDING_LARGE: 3072,
    ModelIDs.BEDROCK_TITAN_EMBED_V2: 1024,
}


# Default values
class Defaults:
    """Pipeline defaults."""
    EMBEDDING_DIMENSION: Final[int] = 1536  # OpenAI small dimension
    WINDOW_SECONDS: Final[int] = 45
    RETRIEVAL_TOP_K: Final[int] = 5
    PRIOR_QUESTION_LIMIT: Final[int] = 3
    EMBED_MAX_WORKERS: Final[int] = 8
    REQUEST_TIMEOUT: Final[float] = 60.0
    LLM_TEMPERATURE: Final[float] = 0.2
    UNKNOWN_SECTION: Final[str] = "Unknown"
    AWS_REGION: Final[str] = "eu-west-2"


# Vector index settings
class VectorIndexConfig:
    """Vector index configuration."""
    INDEX_NAME: Final[str] = "course-vectors"
    DISTANCE_METRIC: Final[str] = "cosine"
    DATA_TYPE: Final[str] = "float32"
    MAX_VECTORS_PER_PUT: Final[int] = 500
    DELETE_BATCH_SIZE: Final[int] = 500
    LIST_PAGE_SIZE: Final[int] = 500
    TEXT_METADATA_LIMIT: Final[int] = 2000


# Metadata keys written with every indexed window
class MetadataKeys:
    """Field names of IndexedRecord metadata."""
    COURSE_ID: Final[str] = "course_id"
    TOPIC: Final[str] = "topic"
    TITLE: Final[str] = "title"
    FILE_NAME: Final[str] = "file_name"
    SECTION: Final[str] = "section"
    START_TIME: Final[str] = "start_time"
    END_TIME: Final[str] = "end_time"
    DIFFICULTY: Final[str] = "difficulty"
    TEXT: Final[str] = "text"


# Logging scopes
class LogScope:
    """Standardized logging scope names."""
    CONFIG = "config_loader"
    PARSER = "caption_parser"
    WINDOWING = "windowing"
    VALIDATION = "validation"
    ERROR_HANDLER = "error_handler"
    PROVIDER = "provider"
    INGESTION = "ingestion"
    QUERY_SERVICE = "query_service"
    ADAPTER = "adapter"


# Error codes
class ErrorCode(str, Enum):
    """Standardized error codes for consistency."""
    INVALID_CONFIG = "INVALID_CONFIG"
    PARSING_FAILED = "PARSING_FAILED"
    INDEXING_FAILED = "INDEXING_FAILED"
    INVALID_INPUT = "INVALID_INPUT"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    NO_ACCESSIBLE_COURSES = "NO_ACCESSIBLE_COURSES"
    ANSWER_GENERATION_FAILED = "ANSWER_GENERATION_FAILED"


# Allowed upload formats
ALLOWED_CAPTION_EXTENSIONS: Final[tuple] = ("vtt",)
