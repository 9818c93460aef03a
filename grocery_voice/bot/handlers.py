"""Telegram message handlers: text and voice utterances become assistant turns."""

import asyncio
import copy
import html as html_lib
import logging
import re
from contextlib import asynccontextmanager
from functools import wraps
from io import BytesIO
from typing import Callable, Any, Optional

from telegram import Update
from telegram.constants import ChatAction, ParseMode
from telegram.ext import (
    Application,
    ContextTypes,
    MessageHandler,
    filters,
)

from grocery_voice.config import config
from grocery_voice.core.assistant import GroceryAssistant, UNAVAILABLE_MESSAGE
from grocery_voice.core.models import GroceryItem
from grocery_voice.errors import TranscriptionError, TurnFailedError
from grocery_voice.bot.list_store import ListStore

logger = logging.getLogger(__name__)

# Processing timeout in seconds (2 minutes)
PROCESSING_TIMEOUT = 120


@asynccontextmanager
async def typing_indicator(chat):
    """Keep the typing indicator active until the block finishes.

    Telegram clears the indicator after about five seconds, so it is resent
    every four.
    """
    stop_event = asyncio.Event()

    async def keep_typing():
        while not stop_event.is_set():
            try:
                await chat.send_action(ChatAction.TYPING)
            except Exception as e:
                logger.debug(f"Typing indicator failed: {e}")
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=4.0)
            except asyncio.TimeoutError:
                continue

    task = asyncio.create_task(keep_typing())
    try:
        yield
    finally:
        stop_event.set()
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


def allowed_users_only(func: Callable) -> Callable:
    """Ignore updates from users outside TELEGRAM_ALLOWED_USERS (if set)."""
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> Any:
        user_id = update.effective_user.id if update.effective_user else 0
        allowed = context.bot_data.get("config", config).telegram.allowed_user_ids

        if allowed and user_id not in allowed:
            logger.debug(f"Ignoring update from user not on the allow-list: {user_id}")
            return None

        return await func(update, context)

    return wrapper


def get_user_items(context: ContextTypes.DEFAULT_TYPE, user_id: int) -> list[GroceryItem]:
    """Get the user's list, loading it from disk on first use."""
    if "items" not in context.user_data:
        store: Optional[ListStore] = context.bot_data.get("list_store")
        context.user_data["items"] = store.load(user_id) if store else []
    return context.user_data["items"]


def save_user_items(context: ContextTypes.DEFAULT_TYPE, user_id: int, items: list[GroceryItem]) -> None:
    """Replace the user's list in memory and on disk."""
    context.user_data["items"] = items
    store: Optional[ListStore] = context.bot_data.get("list_store")
    if store:
        try:
            store.save(user_id, items)
        except OSError as e:
            logger.warning(f"Failed to save list for user {user_id}: {e}")


def format_quantity(quantity: float) -> str:
    return str(int(quantity)) if float(quantity).is_integer() else f"{quantity:g}"


def format_list(items: list[GroceryItem]) -> str:
    """Render a list as plain text grouped by category."""
    if not items:
        return "Your list is empty."

    groups: dict[str, list[GroceryItem]] = {}
    for item in items:
        groups.setdefault(item.category or "Other", []).append(item)

    lines = []
    for category, group in groups.items():
        lines.append(f"{category}:")
        for item in group:
            mark = "✅" if item.completed else "⬜"
            amount = format_quantity(item.quantity)
            if item.unit:
                amount = f"{amount} {item.unit}"
            line = f"{mark} {item.name} ({amount})"
            if item.price_estimate is not None:
                line += f" ~${item.price_estimate} at {item.store}"
            lines.append(line)

    remaining = sum(1 for item in items if not item.completed)
    lines.append("")
    lines.append(f"{remaining} of {len(items)} items left")
    return "\n".join(lines)


def markdown_to_html(text: str) -> str:
    """Convert the bold/italic markdown models tend to emit to Telegram HTML."""
    escaped = html_lib.escape(text)
    escaped = re.sub(r'\*\*(.+?)\*\*', r'<b>\1</b>', escaped)
    escaped = re.sub(r'(?<!\w)\*([^*\n]+)\*(?!\w)', r'<i>\1</i>', escaped)
    return escaped


async def send_formatted(update: Update, text: str) -> None:
    """Send a reply as HTML, falling back to plain text."""
    try:
        await update.message.reply_text(markdown_to_html(text), parse_mode=ParseMode.HTML)
        return
    except Exception as e:
        logger.debug(f"HTML formatting failed: {e}")

    await update.message.reply_text(text[:4000])


async def download_voice(update: Update, context: ContextTypes.DEFAULT_TYPE) -> Optional[tuple[bytes, str, str]]:
    """Download a voice note or audio file from a Telegram message.

    Returns:
        Tuple of (audio_bytes, filename, mime_type) or None if no audio.
    """
    if not update.message:
        return None

    if update.message.voice:
        media = update.message.voice
        filename = "voice.ogg"
    elif update.message.audio:
        media = update.message.audio
        filename = media.file_name or "audio.mp3"
    else:
        return None

    mime_type = media.mime_type or "audio/ogg"

    try:
        file = await context.bot.get_file(media.file_id)

        # Download to BytesIO
        buffer = BytesIO()
        await file.download_to_memory(buffer)
        buffer.seek(0)

        return buffer.read(), filename, mime_type

    except Exception as e:
        logger.error(f"Failed to download audio: {e}")
        return None


@allowed_users_only
async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle incoming text messages."""
    if not update.message or not update.message.text:
        return

    await process_message(update, context, update.message.text)


@allowed_users_only
async def handle_voice(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle voice notes: transcribe, echo the transcript, then run a turn."""
    if not update.message:
        return

    transcriber = context.bot_data.get("transcriber")
    if transcriber is None or not transcriber.is_available():
        await update.message.reply_text("Voice input is not configured. Please type your request.")
        return

    audio = await download_voice(update, context)
    if not audio:
        await update.message.reply_text("Sorry, I couldn't download that recording.")
        return

    audio_bytes, filename, mime_type = audio
    try:
        async with typing_indicator(update.message.chat):
            result = await transcriber.transcribe(audio_bytes, filename=filename, mime_type=mime_type)
    except TranscriptionError as e:
        logger.warning(f"Voice transcription failed: {e}")
        await update.message.reply_text("Sorry, I couldn't understand that recording. Please try again.")
        return

    text = result["text"].strip()
    if not text:
        await update.message.reply_text("I didn't catch anything in that recording.")
        return

    await update.message.reply_text(f'🎙 "{text}"')
    await process_message(update, context, text)


async def process_message(update: Update, context: ContextTypes.DEFAULT_TYPE, message: str) -> None:
    """Run one assistant turn for the user and reply with the result.

    The turn works on a copy of the stored list, which replaces the stored
    one only when the turn succeeds.
    """
    user_id = update.effective_user.id if update.effective_user else 0
    logger.info(f"Received message from {user_id}: {message[:50]}...")

    assistant: Optional[GroceryAssistant] = context.bot_data.get("assistant")
    if assistant is None:
        await update.message.reply_text("I'm still initializing. Please try again in a moment.")
        return

    if not assistant.is_available():
        await update.message.reply_text(UNAVAILABLE_MESSAGE)
        return

    working_items = copy.deepcopy(get_user_items(context, user_id))

    try:
        async with typing_indicator(update.message.chat):
            turn = await asyncio.wait_for(
                assistant.run_turn(message, working_items),
                timeout=PROCESSING_TIMEOUT,
            )
    except asyncio.TimeoutError:
        logger.warning(f"Processing timed out after {PROCESSING_TIMEOUT}s for user {user_id}")
        await update.message.reply_text(
            f"⏱️ Request timed out after {PROCESSING_TIMEOUT // 60} minutes. "
            "Your list was not changed."
        )
        return
    except TurnFailedError:
        await update.message.reply_text(
            "Sorry, I couldn't process your request. Your list was not changed."
        )
        return

    save_user_items(context, user_id, turn.items)
    await send_formatted(update, turn.response)


def setup_handlers(app: Application) -> None:
    """Register message handlers with the application."""
    # Text messages
    app.add_handler(MessageHandler(
        filters.TEXT & ~filters.COMMAND,
        handle_message,
    ))

    # Voice notes and audio files
    app.add_handler(MessageHandler(
        filters.VOICE | filters.AUDIO,
        handle_voice,
    ))

    logger.info("Message handlers registered (text + voice)")
