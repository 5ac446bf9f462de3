"""Configuration management for LoanChain extraction."""

import os
from dataclasses import dataclass, field
from typing import Optional

from .models import ExtractionMode

REMOTE_PROVIDERS = ("groq", "bedrock")


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # Extraction Mode
    extraction_mode: str = field(
        default_factory=lambda: os.environ.get("EXTRACTION_MODE", "local").lower()
    )
    remote_provider: str = field(
        default_factory=lambda: os.environ.get("REMOTE_PROVIDER", "groq").lower()
    )

    # Groq Configuration
    groq_api_key: str = field(default_factory=lambda: os.environ.get("GROQ_API_KEY", ""))
    groq_api_url: str = field(
        default_factory=lambda: os.environ.get(
            "GROQ_API_URL", "https://api.groq.com/openai/v1/chat/completions"
        )
    )
    groq_model: str = field(
        default_factory=lambda: os.environ.get("GROQ_MODEL", "llama-3.3-70b-versatile")
    )

    # Bedrock Configuration
    bedrock_model_id: str = field(
        default_factory=lambda: os.environ.get(
            "BEDROCK_MODEL_ID", "us.anthropic.claude-3-5-haiku-20241022-v1:0"
        )
    )

    # Processing Configuration
    max_pages: int = field(default_factory=lambda: int(os.environ.get("MAX_PAGES", "30")))
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "60"))
    )

    # Deal Vault
    vault_dir: str = field(
        default_factory=lambda: os.environ.get(
            "VAULT_DIR", os.path.join(os.path.expanduser("~"), ".loanchain", "deals")
        )
    )

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings instance from environment variables."""
        return cls()

    @property
    def mode(self) -> ExtractionMode:
        return ExtractionMode(self.extraction_mode)

    def validate(self) -> None:
        """Validate settings are consistent."""
        if self.extraction_mode not in {m.value for m in ExtractionMode}:
            raise ValueError(f"EXTRACTION_MODE must be one of local, remote (got '{self.extraction_mode}')")
        if self.remote_provider not in REMOTE_PROVIDERS:
            raise ValueError(f"REMOTE_PROVIDER must be one of {', '.join(REMOTE_PROVIDERS)}")
        if self.max_pages < 1:
            raise ValueError("MAX_PAGES must be a positive integer")
        if (
            self.extraction_mode == ExtractionMode.REMOTE.value
            and self.remote_provider == "groq"
            and not self.groq_api_key
        ):
            raise ValueError("GROQ_API_KEY environment variable is required for remote extraction")


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
