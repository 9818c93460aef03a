"""Main entry point for Grocery Voice."""

import asyncio
import logging
from datetime import datetime

from telegram.ext import Application

from grocery_voice.config import config
from grocery_voice.bot import setup_handlers, setup_commands, ListStore
from grocery_voice.core import GroceryAssistant, PriceOracle, PromptBuilder
from grocery_voice.llm import ProviderManager
from grocery_voice.speech import WhisperTranscriber

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Log to the console and to a file under the configured log directory."""
    log_dir = config.paths.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
        handlers=[
            logging.StreamHandler(),  # Console output
            logging.FileHandler(log_dir / "grocery-voice.log", encoding="utf-8"),  # File output
        ],
    )

    # Suppress noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


class GroceryVoiceBot:
    """Main Grocery Voice application."""

    def __init__(self):
        self.config = config
        self.start_time = datetime.now()

        # Initialize components
        self.oracle = PriceOracle()
        self.prompt_builder = PromptBuilder(
            extra_file=config.assistant.prompt_file,
            priced_items=self.oracle.known_items(),
        )
        self.list_store = ListStore(config.paths.lists_dir)
        self.transcriber = WhisperTranscriber(
            api_key=config.openai.api_key,
            model=config.openai.whisper_model,
            base_url=config.openai.base_url,
        )
        self.provider_manager: ProviderManager | None = None
        self.assistant: GroceryAssistant | None = None
        self.app: Application | None = None

    def initialize(self):
        """Initialize providers, the assistant and the Telegram application."""
        logger.info("Initializing Grocery Voice...")

        # Validate configuration
        errors = self.config.validate()
        if errors:
            for error in errors:
                logger.error(f"Config error: {error}")
            raise ValueError("Configuration validation failed")

        self.config.paths.lists_dir.mkdir(parents=True, exist_ok=True)

        # Initialize provider manager
        self.provider_manager = ProviderManager(self.config)
        self.provider_manager.initialize()

        system_prompt = self.prompt_builder.build_system_prompt()
        logger.info(f"Loaded system prompt ({len(system_prompt)} chars)")

        self.assistant = GroceryAssistant(
            provider=self.provider_manager.get_active(),
            system_prompt=system_prompt,
            oracle=self.oracle,
            max_steps=self.config.assistant.max_steps,
            temperature=self.config.assistant.temperature,
        )
        if not self.assistant.is_available():
            logger.warning("Assistant unavailable: set OPENAI_API_KEY or ANTHROPIC_API_KEY")

        # Build Telegram application
        self.app = Application.builder().token(self.config.telegram.bot_token).build()

        # Store references in bot_data for handlers
        self.app.bot_data["agent"] = self
        self.app.bot_data["config"] = self.config
        self.app.bot_data["provider_manager"] = self.provider_manager
        self.app.bot_data["assistant"] = self.assistant
        self.app.bot_data["transcriber"] = self.transcriber
        self.app.bot_data["list_store"] = self.list_store

        # Setup handlers and commands
        setup_commands(self.app)
        setup_handlers(self.app)

        logger.info("Grocery Voice initialized successfully")

    async def run(self):
        """Run the bot."""
        self.initialize()

        logger.info("Starting Grocery Voice bot...")
        await self.app.initialize()
        await self.app.start()
        await self.app.updater.start_polling(drop_pending_updates=True)

        logger.info("Grocery Voice is running. Press Ctrl+C to stop.")

        # Keep running until interrupted
        try:
            while True:
                await asyncio.sleep(1)
        except asyncio.CancelledError:
            pass
        finally:
            logger.info("Shutting down...")
            await self.app.updater.stop()
            await self.app.stop()
            await self.app.shutdown()
            await self.provider_manager.close()

    @property
    def uptime(self) -> str:
        """Get formatted uptime string."""
        delta = datetime.now() - self.start_time
        hours, remainder = divmod(int(delta.total_seconds()), 3600)
        minutes, seconds = divmod(remainder, 60)
        if hours:
            return f"{hours}h {minutes}m"
        return f"{minutes}m {seconds}s"


def main():
    """Entry point."""
    configure_logging()
    bot = GroceryVoiceBot()
    try:
        asyncio.run(bot.run())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")


if __name__ == "__main__":
    main()
