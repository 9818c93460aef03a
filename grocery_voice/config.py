"""Configuration management for Grocery Voice."""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Upper limit for MAX_TOOL_STEPS
MAX_STEP_BOUND = 5


def _parse_user_ids(raw: str) -> frozenset[int]:
    """Parse a comma-separated list of Telegram user IDs."""
    ids = set()
    for part in raw.split(","):
        part = part.strip()
        if part:
            ids.add(int(part))
    return frozenset(ids)


def _optional_path(env_key: str) -> Optional[Path]:
    value = os.getenv(env_key)
    return Path(value) if value else None


@dataclass
class TelegramConfig:
    """Telegram bot configuration."""
    bot_token: str = field(default_factory=lambda: os.getenv("TELEGRAM_BOT_TOKEN", ""))
    allowed_user_ids: frozenset[int] = field(
        default_factory=lambda: _parse_user_ids(os.getenv("TELEGRAM_ALLOWED_USERS", ""))
    )


@dataclass
class OpenAIConfig:
    """OpenAI configuration (chat completions and Whisper transcription)."""
    api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    model: str = field(default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini"))
    base_url: str = field(default_factory=lambda: os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"))
    whisper_model: str = field(default_factory=lambda: os.getenv("WHISPER_MODEL", "whisper-1"))


@dataclass
class AnthropicConfig:
    """Anthropic Claude configuration."""
    api_key: str = field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""))
    model: str = field(default_factory=lambda: os.getenv("ANTHROPIC_MODEL", "claude-3-haiku-20240307"))


@dataclass
class AssistantConfig:
    """Conversational loop settings."""
    max_steps: int = field(default_factory=lambda: int(os.getenv("MAX_TOOL_STEPS", "5")))
    temperature: float = field(default_factory=lambda: float(os.getenv("ASSISTANT_TEMPERATURE", "0.2")))
    prompt_file: Optional[Path] = field(default_factory=lambda: _optional_path("ASSISTANT_PROMPT_FILE"))


@dataclass
class PathsConfig:
    """File system paths configuration."""
    lists_dir: Path = field(default_factory=lambda: Path(os.getenv("LISTS_DIR", "./data/lists")))
    log_dir: Path = field(default_factory=lambda: Path(os.getenv("LOG_DIR", "./logs")))


@dataclass
class Config:
    """Main configuration container."""
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    anthropic: AnthropicConfig = field(default_factory=AnthropicConfig)
    assistant: AssistantConfig = field(default_factory=AssistantConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    default_provider: str = field(default_factory=lambda: os.getenv("DEFAULT_LLM_PROVIDER", "openai"))

    @property
    def has_llm_credentials(self) -> bool:
        """Whether any language model provider can be configured."""
        return bool(self.openai.api_key or self.anthropic.api_key)

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors.

        A missing model credential is not an error: the assistant runs in
        degraded mode without one.
        """
        errors = []

        if not self.telegram.bot_token:
            errors.append("TELEGRAM_BOT_TOKEN is required")
        if not 1 <= self.assistant.max_steps <= MAX_STEP_BOUND:
            errors.append(f"MAX_TOOL_STEPS must be between 1 and {MAX_STEP_BOUND}")
        if self.default_provider not in ("openai", "anthropic"):
            errors.append(f"Unknown DEFAULT_LLM_PROVIDER '{self.default_provider}'")

        return errors


# Global config instance
config = Config()
