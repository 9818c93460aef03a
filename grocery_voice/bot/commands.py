"""Telegram command handlers."""

import logging
from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
)

from grocery_voice.bot.handlers import (
    allowed_users_only,
    format_list,
    get_user_items,
    save_user_items,
)

logger = logging.getLogger(__name__)


@allowed_users_only
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command."""
    await update.message.reply_text(
        "Welcome to Grocery Voice!\n\n"
        "Tell me what you need, by text or voice note, and I'll keep your shopping list.\n\n"
        "Try: \"Add milk to my list\", \"What's on my list?\" or \"Remove bread\".\n\n"
        "/list - Show your list\n"
        "/help - Show all commands"
    )


@allowed_users_only
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command."""
    await update.message.reply_text(
        "Grocery Voice Help\n\n"
        "Send a message or a voice note. I can add and remove items, "
        "check things off and compare store prices.\n\n"
        "Commands:\n"
        "/list - Show your list\n"
        "/clear - Empty your list\n"
        "/status - Check assistant status\n"
        "/help - Show this message"
    )


@allowed_users_only
async def list_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /list command - show the user's list."""
    user_id = update.effective_user.id if update.effective_user else 0
    items = get_user_items(context, user_id)
    await update.message.reply_text(format_list(items))


@allowed_users_only
async def clear_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /clear command - empty the user's list."""
    user_id = update.effective_user.id if update.effective_user else 0
    save_user_items(context, user_id, [])
    await update.message.reply_text("Your list is now empty. Starting fresh!")


@allowed_users_only
async def status_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /status command - show assistant status."""
    agent = context.bot_data.get("agent")
    provider_manager = context.bot_data.get("provider_manager")
    transcriber = context.bot_data.get("transcriber")
    user_id = update.effective_user.id if update.effective_user else 0

    provider_name = "none (degraded mode)"
    model_name = "N/A"
    provider = provider_manager.get_active() if provider_manager else None
    if provider:
        provider_name = provider.name.title()
        model_name = provider.model_name

    voice = "enabled" if transcriber and transcriber.is_available() else "disabled"
    items = get_user_items(context, user_id)
    uptime = agent.uptime if agent else "N/A"

    await update.message.reply_text(
        "🛒 Grocery Voice Status\n\n"
        f"Provider: {provider_name} ({model_name})\n"
        f"Voice input: {voice}\n"
        f"Your list: {len(items)} items\n"
        f"Uptime: {uptime}"
    )


def setup_commands(app: Application) -> None:
    """Register command handlers with the application."""
    app.add_handler(CommandHandler("start", start_command))
    app.add_handler(CommandHandler("help", help_command))
    app.add_handler(CommandHandler("list", list_command))
    app.add_handler(CommandHandler("clear", clear_command))
    app.add_handler(CommandHandler("status", status_command))

    logger.info("Command handlers registered")
