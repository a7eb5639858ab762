"""
Comprehensive tests for shared_utils.config_loader.

Covers the field validators, pipeline defaults, expose_error_details,
get_settings() caching / secret lookup, and get_secret_from_aws().
"""

import os
from unittest.mock import MagicMock, patch

import pytest

from shared_utils.config_loader import Settings, get_settings, get_secret_from_aws


# ---------------------------------------------------------------------------
# Helpers — minimal required kwargs
# ---------------------------------------------------------------------------

_BASE = {
    "llm_provider": "bedrock",
    "embed_provider": "bedrock",
    "bedrock_region": "eu-west-2",
    "bedrock_llm_model_id": "anthropic.claude-3-haiku-20240307-v1:0",
    "environment": "development",
}

_ENV = {
    "LLM_PROVIDER": "openai",
    "EMBED_PROVIDER": "openai",
    "ENVIRONMENT": "dev",
}


def _settings(**overrides) -> Settings:
    kw = {**_BASE, **overrides}
    return Settings(**kw)


# ---------------------------------------------------------------------------
# validate_embed_provider / validate_llm_provider
# ---------------------------------------------------------------------------


class TestValidateEmbedProvider:
    def test_openai_valid(self) -> None:
        assert _settings(embed_provider="openai").embed_provider == "openai"

    def test_case_insensitive(self) -> None:
        assert _settings(embed_provider="BEDROCK").embed_provider == "bedrock"

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError, match="embed_provider"):
            _settings(embed_provider="invalid")


class TestValidateLLMProvider:
    def test_bedrock_valid(self) -> None:
        assert _settings(llm_provider="bedrock").llm_provider == "bedrock"

    def test_case_insensitive(self) -> None:
        assert _settings(llm_provider="OpenAI").llm_provider == "openai"

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError, match="llm_provider"):
            _settings(llm_provider="google")


# ---------------------------------------------------------------------------
# validate_environment (short + long forms)
# ---------------------------------------------------------------------------


class TestValidateEnvironment:
    @pytest.mark.parametrize(
        "input_val, expected",
        [
            ("development", "development"),
            ("staging", "staging"),
            ("production", "production"),
            ("dev", "development"),
            ("stage", "staging"),
            ("PROD", "production"),
        ],
    )
    def test_valid_environments(self, input_val: str, expected: str) -> None:
        assert _settings(environment=input_val).environment == expected

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError, match="environment"):
            _settings(environment="alpha")

    def test_expose_error_details_outside_production(self) -> None:
        assert _settings(environment="staging").expose_error_details is True
        assert _settings(environment="production").expose_error_details is False


# ---------------------------------------------------------------------------
# Pipeline settings
# ---------------------------------------------------------------------------


class TestPipelineSettings:
    def test_defaults(self) -> None:
        s = _settings()
        assert s.window_seconds == 45
        assert s.retrieval_top_k == 5
        assert s.prior_question_limit == 3
        assert s.llm_temperature == 0.2
        assert s.openai_llm_model_id == "gpt-4.1-mini"
        assert s.s3_vectors_index_name == "course-vectors"

    def test_overrides(self) -> None:
        s = _settings(window_seconds=30, s3_vectors_bucket="vec-bucket", prior_question_limit=0)
        assert s.window_seconds == 30
        assert s.s3_vectors_bucket == "vec-bucket"
        assert s.prior_question_limit == 0

    @pytest.mark.parametrize("field", ["window_seconds", "retrieval_top_k", "embed_max_workers"])
    def test_non_positive_rejected(self, field: str) -> None:
        with pytest.raises(ValueError, match=field):
            _settings(**{field: 0})

    def test_negative_prior_question_limit_rejected(self) -> None:
        with pytest.raises(ValueError, match="prior_question_limit"):
            _settings(prior_question_limit=-1)


# ---------------------------------------------------------------------------
# get_secret_from_aws
# ---------------------------------------------------------------------------


class TestGetSecretFromAWS:
    @patch("shared_utils.config_loader.boto3.client")
    def test_success(self, mock_client_ctor) -> None:
        mock_client = MagicMock()
        mock_client.get_secret_value.return_value = {
            "SecretString": '{"openai_api_key": "sk-test123"}'
        }
        mock_client_ctor.return_value = mock_client

        assert get_secret_from_aws("my-secret", "eu-west-2") == "sk-test123"
        mock_client_ctor.assert_called_once_with("secretsmanager", region_name="eu-west-2")

    @patch("shared_utils.config_loader.boto3.client")
    def test_no_secret_string_returns_empty(self, mock_client_ctor) -> None:
        mock_client_ctor.return_value.get_secret_value.return_value = {"SecretBinary": b"x"}
        assert get_secret_from_aws("my-secret") == ""

    @patch("shared_utils.config_loader.boto3.client")
    def test_exception_returns_empty(self, mock_client_ctor) -> None:
        mock_client_ctor.side_effect = Exception("no credentials")
        assert get_secret_from_aws("my-secret") == ""


# ---------------------------------------------------------------------------
# get_settings caching
# ---------------------------------------------------------------------------


class TestGetSettings:
    def setup_method(self) -> None:
        get_settings.cache_clear()

    def teardown_method(self) -> None:
        get_settings.cache_clear()

    def test_get_settings_returns_cached_settings(self) -> None:
        with patch.dict(os.environ, _ENV, clear=False):
            settings = get_settings()
            assert isinstance(settings, Settings)
            assert settings.environment == "development"
            assert get_settings() is settings

    @patch("shared_utils.config_loader.get_secret_from_aws", return_value="sk-from-secret")
    def test_openai_key_fetched_from_secret(self, mock_secret) -> None:
        env = {**_ENV, "OPENAI_SECRET_NAME": "openai/key", "OPENAI_API_KEY": ""}
        with patch.dict(os.environ, env, clear=False):
            settings = get_settings()
        assert settings.openai_api_key == "sk-from-secret"
        mock_secret.assert_called_once()

    @patch("shared_utils.config_loader.get_secret_from_aws")
    def test_direct_key_skips_secret_lookup(self, mock_secret) -> None:
        env = {**_ENV, "OPENAI_SECRET_NAME": "openai/key", "OPENAI_API_KEY": "sk-direct"}
        with patch.dict(os.environ, env, clear=False):
            settings = get_settings()
        assert settings.openai_api_key == "sk-direct"
        mock_secret.assert_not_called()
