from pydantic_settings import BaseSettings
from pydantic import field_validator, ConfigDict
from functools import lru_cache
from typing import Optional
import json
import logging
import boto3

from shared_utils.constants import Defaults, ModelIDs, VectorIndexConfig
from shared_utils.logging_utils import configure_logging

logger = logging.getLogger(__name__)


def get_secret_from_aws(secret_name: str, region: str = Defaults.AWS_REGION) -> str:
    """Fetch the OpenAI API key from AWS Secrets Manager.

    Args:
        secret_name: Name of the secret in Secrets Manager
        region: AWS region

    Returns:
        Secret value or empty string if fetch fails
    """
    try:
        client = boto3.client("secretsmanager", region_name=region)
        response = client.get_secret_value(SecretId=secret_name)
        if "SecretString" in response:
            secret = json.loads(response["SecretString"])
            return secret.get("openai_api_key", "")
        return ""
    except Exception as e:
        logger.warning(f"Could not fetch secret from Secrets Manager: {e}")
        return ""


class Settings(BaseSettings):
    """Application configuration with environment variable precedence.

    Precedence: 1) Environment Variables > 2) .env file > 3) Class defaults
    (required fields have no defaults).
    """
    # Application metadata
    app_name: str = "Lecture Intelligence"
    app_version: str = "0.1.0"

    # Providers
    llm_provider: str  # "bedrock" or "openai"
    embed_provider: str  # "bedrock" or "openai"

    # OpenAI
    openai_api_key: Optional[str] = None
    openai_secret_name: Optional[str] = None
    openai_embed_model: str = ModelIDs.OPENAI_EMBED_MODEL
    openai_llm_model_id: str = ModelIDs.OPENAI_CHAT_MODEL

    # Bedrock
    bedrock_region: str = Defaults.AWS_REGION
    bedrock_embed_model_id: Optional[str] = ModelIDs.BEDROCK_TITAN_EMBED_V2
    bedrock_llm_model_id: Optional[str] = ModelIDs.BEDROCK_CLAUDE_3_HAIKU

    # Vector index (empty bucket selects the in-memory store)
    aws_region: str = Defaults.AWS_REGION
    aws_endpoint_url: str = ""
    s3_vectors_bucket: str = ""
    s3_vectors_index_name: str = VectorIndexConfig.INDEX_NAME

    # Pipeline tuning
    window_seconds: int = Defaults.WINDOW_SECONDS
    retrieval_top_k: int = Defaults.RETRIEVAL_TOP_K
    prior_question_limit: int = Defaults.PRIOR_QUESTION_LIMIT
    embed_max_workers: int = Defaults.EMBED_MAX_WORKERS
    request_timeout: float = Defaults.REQUEST_TIMEOUT
    llm_temperature: float = Defaults.LLM_TEMPERATURE

    # Environment
    environment: str

    model_config = ConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @field_validator('embed_provider')
    @classmethod
    def validate_embed_provider(cls, v: str) -> str:
        """Validate embedding provider is supported."""
        valid_providers = {"openai", "bedrock"}
        if v.lower() not in valid_providers:
            raise ValueError(f"embed_provider must be one of {valid_providers}, got {v}")
        return v.lower()

    @field_validator('llm_provider')
    @classmethod
    def validate_llm_provider(cls, v: str) -> str:
        """Validate LLM provider is supported."""
        valid_providers = {"openai", "bedrock"}
        if v.lower() not in valid_providers:
            raise ValueError(f"llm_provider must be one of {valid_providers}, got {v}")
        return v.lower()

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is recognized."""
        aliases = {"dev": "development", "stage": "staging", "prod": "production"}
        valid_envs = {"development", "staging", "production"}
        env = aliases.get(v.lower(), v.lower())
        if env not in valid_envs:
            raise ValueError(f"environment must be one of {valid_envs}, got {v}")
        return env

    @field_validator('window_seconds', 'retrieval_top_k', 'embed_max_workers')
    @classmethod
    def validate_positive(cls, v: int, info) -> int:
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1, got {v}")
        return v

    @field_validator('prior_question_limit')
    @classmethod
    def validate_prior_question_limit(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"prior_question_limit must be >= 0, got {v}")
        return v

    @property
    def expose_error_details(self) -> bool:
        """Upstream error messages are only returned outside production."""
        return self.environment != "production"


@lru_cache()
def get_settings() -> Settings:
    """Load and cache application settings.

    If OPENAI_SECRET_NAME is provided and no key is set directly, fetches the
    API key from AWS Secrets Manager.

    Returns:
        Validated Settings instance

    Raises:
        ValueError: If required settings are missing or invalid
    """
    settings = Settings()
    configure_logging(json_output=settings.environment != "development")

    needs_openai = "openai" in (settings.embed_provider, settings.llm_provider)
    if needs_openai and not settings.openai_api_key and settings.openai_secret_name:
        secret_key = get_secret_from_aws(settings.openai_secret_name, settings.aws_region)
        if secret_key:
            settings.openai_api_key = secret_key
            logger.debug("fetched_openai_key_from_secrets_manager")

    # Log loaded configuration (sensitive values masked)
    logger.info(
        "configuration_loaded environment=%s embed_provider=%s llm_provider=%s vector_bucket=%s",
        settings.environment,
        settings.embed_provider,
        settings.llm_provider,
        settings.s3_vectors_bucket or "<in-memory>",
    )

    return settings
