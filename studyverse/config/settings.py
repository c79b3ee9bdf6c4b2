"""Application settings and configuration."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load .env file if present
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # AWS CONFIG (only needed by the Bedrock generation client)
    aws_api_key_id: str | None = Field(
        default=None,
        description="AWS API key ID",
        validation_alias="AWS_ACCESS_KEY_ID",
    )
    aws_api_key_secret: str | None = Field(
        default=None,
        description="AWS API key",
        validation_alias="AWS_SECRET_ACCESS_KEY",
    )
    aws_default_region: str | None = Field(
        default=None,
        description="AWS API region",
        validation_alias="AWS_DEFAULT_REGION",
    )

    # Model Configuration
    model_name: str = Field(
        default="anthropic.claude-3-7-sonnet-20250219-v1:0",
        description="Model to use (AWS Bedrock model ID)",
        validation_alias="MODEL_NAME",
    )

    # Generation Settings
    summary_temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Temperature for chapter summaries",
        validation_alias="SUMMARY_TEMPERATURE",
    )

    essay_temperature: float = Field(
        default=0.7,  # outlines benefit from a little more variety
        ge=0.0,
        le=1.0,
        description="Temperature for essay outlines",
        validation_alias="ESSAY_TEMPERATURE",
    )

    quiz_temperature: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Temperature for quiz question generation",
        validation_alias="QUIZ_TEMPERATURE",
    )

    default_question_count: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Number of quiz questions when the request does not say",
        validation_alias="DEFAULT_QUESTION_COUNT",
    )

    default_difficulty: str = Field(
        default="Medium",
        description="Quiz difficulty when the request does not say",
        validation_alias="DEFAULT_DIFFICULTY",
    )

    # Account Settings
    default_credits: int = Field(
        default=100,
        ge=0,
        description="Starting credit balance for a new profile",
        validation_alias="DEFAULT_CREDITS",
    )

    unlimited_plan_credits: int = Field(
        default=100_000,
        ge=1,
        description="Credits granted by the unlimited plan tier",
        validation_alias="UNLIMITED_PLAN_CREDITS",
    )

    allow_score_overwrite: bool = Field(
        default=True,
        description="Replace the stored score when a quiz is retaken",
        validation_alias="ALLOW_SCORE_OVERWRITE",
    )

    # Storage Settings
    data_dir: str = Field(
        default="data",
        description="Directory holding the JSON document store",
        validation_alias="DATA_DIR",
    )

    log_level: str = Field(
        default="WARNING",
        description="Root log level for the CLI",
        validation_alias="LOG_LEVEL",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Loaded the first time and then cached for the session, orchestrators and CLI
@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings object with loaded configuration
    """
    return Settings()
