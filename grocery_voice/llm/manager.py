"""LLM provider manager for picking the configured provider."""

import logging
from typing import Optional

from grocery_voice.config import Config
from .base import LLMProvider
from .openai_provider import OpenAIProvider
from .anthropic_provider import AnthropicProvider

logger = logging.getLogger(__name__)


class ProviderManager:
    """Holds the configured LLM providers and the active one."""

    def __init__(self, config: Config):
        """Initialize provider manager.

        Args:
            config: Application configuration.
        """
        self.config = config
        self.providers: dict[str, LLMProvider] = {}
        self.active_provider: Optional[str] = None

    def initialize(self) -> None:
        """Create every provider that has a credential configured."""
        if self.config.openai.api_key:
            self.providers["openai"] = OpenAIProvider(
                api_key=self.config.openai.api_key,
                model=self.config.openai.model,
                base_url=self.config.openai.base_url,
            )

        if self.config.anthropic.api_key:
            self.providers["anthropic"] = AnthropicProvider(
                api_key=self.config.anthropic.api_key,
                model=self.config.anthropic.model,
            )

        preferred = self.config.default_provider
        if preferred in self.providers:
            self.active_provider = preferred
        elif self.providers:
            self.active_provider = next(iter(self.providers))
            logger.warning(
                f"Configured provider '{preferred}' not available, "
                f"falling back to '{self.active_provider}'"
            )
        else:
            self.active_provider = None
            logger.warning("No LLM credentials configured - assistant runs in degraded mode")

        logger.info(f"Initialized providers: {list(self.providers.keys())}")
        logger.info(f"Active provider: {self.active_provider}")

    def get_active(self) -> Optional[LLMProvider]:
        """Get the currently active provider, or None in degraded mode."""
        if self.active_provider is None:
            return None
        return self.providers[self.active_provider]

    def list_providers(self) -> list[dict]:
        """List all configured providers with their status."""
        result = []
        for name, provider in self.providers.items():
            result.append({
                "name": name,
                "model": provider.model_name,
                "available": provider.is_available(),
                "active": name == self.active_provider,
            })
        return result

    async def close(self) -> None:
        """Release provider resources."""
        for provider in self.providers.values():
            close = getattr(provider, "close", None)
            if close is not None:
                await close()
