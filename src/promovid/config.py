"""Configuration management."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _optional_path(name: str) -> Optional[Path]:
    value = os.getenv(name, "")
    return Path(value) if value else None


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    gemini_api_key: str = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", ""),
        description="Gemini API key (script generation, Veo and video downloads)"
    )
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key (alternate script backend)"
    )

    # Content database
    supabase_url: str = Field(
        default_factory=lambda: os.getenv("SUPABASE_URL", ""),
        description="Supabase project URL holding the component_config table"
    )
    supabase_anon_key: str = Field(
        default_factory=lambda: os.getenv("SUPABASE_ANON_KEY", ""),
        description="Supabase anon key"
    )

    # Script generation
    script_provider: str = Field(
        default_factory=lambda: os.getenv("SCRIPT_PROVIDER", "gemini"),
        description="Text model backend for scripts: 'gemini' or 'anthropic'"
    )
    script_model: str = Field(
        default_factory=lambda: os.getenv("SCRIPT_MODEL", "gemini-2.5-flash"),
        description="Gemini model used for script generation"
    )
    default_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Default Claude model"
    )

    # Video generation
    veo_model: str = Field(
        default_factory=lambda: os.getenv("VEO_MODEL", "veo-3.1-fast-generate-preview"),
        description="Primary Veo model variant"
    )
    veo_fallback_model: str = Field(
        default_factory=lambda: os.getenv("VEO_FALLBACK_MODEL", "veo-3.0-generate"),
        description="Veo model tried once when the primary submission fails"
    )
    veo_poll_interval: float = Field(
        default_factory=lambda: float(os.getenv("VEO_POLL_INTERVAL", "5")),
        description="Seconds between operation status checks"
    )
    veo_max_poll_attempts: int = Field(
        default_factory=lambda: int(os.getenv("VEO_MAX_POLL_ATTEMPTS", "120")),
        description="Maximum number of operation status checks"
    )

    # Paths
    asset_dir: Optional[Path] = Field(
        default_factory=lambda: _optional_path("PROMOVID_ASSET_DIR"),
        description="Directory for downloaded videos (a temp dir when unset)"
    )

    class Config:
        """Pydantic config."""
        frozen = False

    def validate_required(self) -> None:
        """Validate that the credentials for video generation are set."""
        if not self.gemini_api_key:
            raise ValueError("GEMINI_API_KEY not set")

    def validate_script_required(self) -> None:
        """Validate the credentials of the configured script backend.

        Raises:
            ValueError: If the provider is unknown or its key is missing.
        """
        provider = self.script_provider.lower()
        if provider == "gemini":
            self.validate_required()
        elif provider == "anthropic":
            if not self.anthropic_api_key:
                raise ValueError("ANTHROPIC_API_KEY not set")
        else:
            raise ValueError(
                f"Unknown SCRIPT_PROVIDER: {self.script_provider}. "
                "Must be 'gemini' or 'anthropic'."
            )


# Global config instance
config = Config()
