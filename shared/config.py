"""Configuration management for the semantic drift analysis service."""

import os
from typing import Optional
from dataclasses import dataclass


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Config:
    """Central configuration for the drift pipeline and its oracle."""

    # AWS Configuration
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")
    aws_access_key_id: Optional[str] = os.getenv("AWS_ACCESS_KEY_ID")
    aws_secret_access_key: Optional[str] = os.getenv("AWS_SECRET_ACCESS_KEY")

    # Bedrock Configuration
    bedrock_model_id: str = os.getenv("BEDROCK_MODEL_ID", "anthropic.claude-3-5-sonnet-20240620-v1:0")
    bedrock_synthesis_model_id: str = os.getenv("BEDROCK_SYNTHESIS_MODEL_ID", "anthropic.claude-3-haiku-20240307-v1:0")
    oracle_read_timeout_seconds: float = float(os.getenv("ORACLE_READ_TIMEOUT_SECONDS", "120"))

    # Oracle Behaviour
    oracle_enabled: bool = _env_flag("DRIFT_ORACLE_ENABLED", "true")
    fallback_on_unavailable: bool = _env_flag("DRIFT_FALLBACK_ON_UNAVAILABLE", "true")
    max_json_retries: int = int(os.getenv("DRIFT_MAX_JSON_RETRIES", "3"))
    retry_delay_seconds: float = float(os.getenv("DRIFT_RETRY_DELAY_SECONDS", "0.5"))
    min_transition_output_tokens: int = int(os.getenv("DRIFT_MIN_TRANSITION_OUTPUT_TOKENS", "1200"))
    max_transition_output_tokens: int = int(os.getenv("DRIFT_MAX_TRANSITION_OUTPUT_TOKENS", "64000"))
    synthesis_max_tokens: int = int(os.getenv("DRIFT_SYNTHESIS_MAX_TOKENS", "600"))

    # Pipeline Configuration
    transition_concurrency: int = int(os.getenv("DRIFT_TRANSITION_CONCURRENCY", "4"))
    max_versions_per_request: int = int(os.getenv("DRIFT_MAX_VERSIONS_PER_REQUEST", "10"))
    min_version_chars: int = int(os.getenv("DRIFT_MIN_VERSION_CHARS", "20"))

    # Runtime Configuration
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    agent_runtime_mode: str = os.getenv("AGENT_RUNTIME_MODE", "development")

    def validate(self) -> None:
        """Validate configuration and raise errors for missing or out-of-range values."""
        required_fields = [
            ("aws_region", self.aws_region),
            ("bedrock_model_id", self.bedrock_model_id),
        ]

        missing = [field for field, value in required_fields if not value]
        if missing:
            raise ValueError(f"Missing required configuration fields: {missing}")

        if self.transition_concurrency < 1:
            raise ValueError("transition_concurrency must be at least 1")
        if self.max_json_retries < 0:
            raise ValueError("max_json_retries cannot be negative")
        if self.min_transition_output_tokens > self.max_transition_output_tokens:
            raise ValueError("min_transition_output_tokens exceeds max_transition_output_tokens")

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.agent_runtime_mode.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.agent_runtime_mode.lower() == "development"
