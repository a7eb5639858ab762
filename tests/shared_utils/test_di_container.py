"""
Comprehensive tests for shared_utils.di_container.

Tests singleton behaviour, lazy initialisation, reset(), and the adapter
and service accessors.  All external dependencies (providers, adapters,
settings) are mocked — no AWS calls.
"""

from unittest.mock import MagicMock, patch

import pytest

from adapters.in_memory_history_store import InMemoryQuestionHistoryAdapter
from adapters.in_memory_vector_store import InMemoryVectorStoreAdapter
from domain.models import CourseInfo, IndexedRecord, LLMCompletion
from services.ingestion_service import IngestionService
from services.query_service import QueryService
from shared_utils.di_container import DIContainer, get_di_container


# ---------------------------------------------------------------------------
# Ensure each test gets a fresh singleton
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_singleton():
    """Reset the DIContainer singleton before and after each test."""
    DIContainer._instance = None
    yield
    DIContainer._instance = None


def _mock_settings(**overrides) -> MagicMock:
    settings = MagicMock()
    settings.s3_vectors_bucket = ""
    settings.s3_vectors_index_name = "test-index"
    settings.aws_region = "eu-west-2"
    settings.aws_endpoint_url = ""
    settings.request_timeout = 30.0
    settings.window_seconds = 45
    settings.embed_max_workers = 4
    settings.retrieval_top_k = 7
    settings.prior_question_limit = 2
    settings.expose_error_details = True
    for key, value in overrides.items():
        setattr(settings, key, value)
    return settings


# ---------------------------------------------------------------------------
# Singleton behaviour
# ---------------------------------------------------------------------------


class TestSingleton:
    def test_same_instance(self) -> None:
        assert DIContainer() is DIContainer()

    def test_get_di_container_returns_singleton(self) -> None:
        c1 = get_di_container()
        assert c1 is get_di_container()
        assert isinstance(c1, DIContainer)


class TestReset:
    def test_reset_clears_everything(self) -> None:
        container = DIContainer()
        container._embedding_provider = "fake"
        container._llm_provider = "fake"
        container._vector_store = "fake"
        container._history_store = "fake"
        container._ingestion_service = "fake"
        container._query_service = "fake"

        container.reset()

        assert container._embedding_provider is None
        assert container._llm_provider is None
        assert container._vector_store is None
        assert container._history_store is None
        assert container._ingestion_service is None
        assert container._query_service is None


# ---------------------------------------------------------------------------
# Provider accessors
# ---------------------------------------------------------------------------


class TestEmbeddingProvider:
    @patch(
        "shared_utils.di_container.EmbeddingProviderFactory.create",
        return_value=MagicMock(),
    )
    def test_returns_same_instance(self, mock_create) -> None:
        container = DIContainer()
        assert container.get_embedding_provider() is container.get_embedding_provider()
        mock_create.assert_called_once()

    @patch(
        "shared_utils.di_container.EmbeddingProviderFactory.create",
        side_effect=RuntimeError("fail"),
    )
    def test_raises_on_factory_error(self, mock_create) -> None:
        with pytest.raises(RuntimeError, match="Embedding provider initialization failed"):
            DIContainer().get_embedding_provider()


class TestLLMProvider:
    @patch(
        "shared_utils.di_container.LLMProviderFactory.create",
        return_value=MagicMock(),
    )
    def test_lazy_creation(self, mock_create) -> None:
        assert DIContainer().get_llm_provider() is mock_create.return_value

    @patch(
        "shared_utils.di_container.LLMProviderFactory.create",
        side_effect=ValueError("bad"),
    )
    def test_raises_on_factory_error(self, mock_create) -> None:
        with pytest.raises(RuntimeError, match="LLM provider initialization failed"):
            DIContainer().get_llm_provider()


class TestValidateAllProviders:
    @patch("shared_utils.di_container.LLMProviderFactory.create")
    @patch("shared_utils.di_container.EmbeddingProviderFactory.create")
    def test_all_healthy(self, mock_embed_create, mock_llm_create) -> None:
        mock_embed_create.return_value.is_available.return_value = True
        mock_llm_create.return_value.is_available.return_value = True
        assert DIContainer().validate_all_providers() is True

    @patch("shared_utils.di_container.LLMProviderFactory.create")
    @patch("shared_utils.di_container.EmbeddingProviderFactory.create")
    def test_embedding_unavailable(self, mock_embed_create, mock_llm_create) -> None:
        mock_embed_create.return_value.is_available.return_value = False
        mock_llm_create.return_value.is_available.return_value = True
        with pytest.raises(RuntimeError, match="Embedding provider is not available"):
            DIContainer().validate_all_providers()


# ---------------------------------------------------------------------------
# Adapter accessors
# ---------------------------------------------------------------------------


class TestGetVectorStore:
    @patch("shared_utils.di_container.get_settings")
    def test_in_memory_when_no_bucket(self, mock_get_settings) -> None:
        mock_get_settings.return_value = _mock_settings()
        store = DIContainer().get_vector_store()
        assert isinstance(store, InMemoryVectorStoreAdapter)
        assert store.name == "test-index"

    @patch("shared_utils.di_container.get_settings")
    @patch("adapters.s3vectors_vector_store.S3VectorsVectorStoreAdapter.__init__", return_value=None)
    def test_s3vectors_when_bucket_set(self, mock_init, mock_get_settings) -> None:
        mock_get_settings.return_value = _mock_settings(s3_vectors_bucket="vec-bucket")
        DIContainer().get_vector_store()

        kwargs = mock_init.call_args.kwargs
        assert kwargs["vector_bucket_name"] == "vec-bucket"
        assert kwargs["index_name"] == "test-index"
        assert kwargs["timeout"] == 30.0

    @patch("shared_utils.di_container.get_settings")
    def test_lazy_singleton(self, mock_get_settings) -> None:
        mock_get_settings.return_value = _mock_settings()
        container = DIContainer()
        assert container.get_vector_store() is container.get_vector_store()


class TestGetHistoryStore:
    def test_lazy_singleton(self) -> None:
        container = DIContainer()
        store = container.get_history_store()
        assert isinstance(store, InMemoryQuestionHistoryAdapter)
        assert container.get_history_store() is store


# ---------------------------------------------------------------------------
# Service accessors
# ---------------------------------------------------------------------------


class TestGetIngestionService:
    @patch("shared_utils.di_container.get_settings")
    @patch("shared_utils.di_container.EmbeddingProviderFactory.create", return_value=MagicMock())
    def test_creates_service(self, mock_embed_create, mock_get_settings) -> None:
        mock_get_settings.return_value = _mock_settings()
        container = DIContainer()

        svc = container.get_ingestion_service()

        assert isinstance(svc, IngestionService)
        assert svc._window_seconds == 45
        assert svc._max_workers == 4
        assert container.get_ingestion_service() is svc


class TestGetQueryService:
    @patch("shared_utils.di_container.get_settings")
    @patch("shared_utils.di_container.LLMProviderFactory.create", return_value=MagicMock())
    @patch("shared_utils.di_container.EmbeddingProviderFactory.create", return_value=MagicMock())
    def test_creates_service(self, mock_embed_create, mock_llm_create, mock_get_settings) -> None:
        mock_get_settings.return_value = _mock_settings()
        container = DIContainer()

        svc = container.get_query_service()

        assert isinstance(svc, QueryService)
        assert svc._top_k == 7
        assert svc._prior_question_limit == 2
        assert svc._expose_error_details is True
        assert svc._history is container.get_history_store()
        assert svc._vectors is container.get_vector_store()
        assert container.get_query_service() is svc

    @patch("shared_utils.di_container.get_settings")
    @patch("shared_utils.di_container.LLMProviderFactory.create")
    @patch("shared_utils.di_container.EmbeddingProviderFactory.create")
    def test_follow_up_prompt_includes_earlier_questions(
        self, mock_embed_create, mock_llm_create, mock_get_settings
    ) -> None:
        mock_get_settings.return_value = _mock_settings()
        mock_embed_create.return_value.embed_text.return_value = [1.0, 0.0]
        llm = mock_llm_create.return_value
        llm.chat.return_value = LLMCompletion(text="Use npm init [#1].", tokens_used=10)

        container = DIContainer()
        container.get_vector_store().upsert_many(
            [
                IndexedRecord(
                    vector=[1.0, 0.0],
                    text="Use npm init to start a project.",
                    metadata={"section": "Intro", "start_time": "00:00:00.000"},
                )
            ],
            CourseInfo(course_id="c1", title="Node"),
        )
        svc = container.get_query_service()

        svc.answer("first question", "u1", ["c1"])
        svc.answer("second question", "u1", ["c1"])

        second_prompt = llm.chat.call_args_list[1].args[1]
        assert "Earlier questions" in second_prompt
        assert "- first question" in second_prompt
