"""
Telegram front-end (python-telegram-bot).

The chat id is the conversation user id. Updates are processed concurrently
so one operator's pending transaction never blocks another chat; the
engine's per-user lock keeps each chat's own inputs in order.
"""

import asyncio
import logging
from typing import Optional, Union

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, LinkPreviewOptions, Update
from telegram.constants import ParseMode
from telegram.error import BadRequest
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from ..core.conversation import MENU_ORDER, Action, ConversationEngine, OutboundMessage
from .base import Frontend


logger = logging.getLogger(__name__)


def main_keyboard() -> InlineKeyboardMarkup:
    """Two menu entries per row, callback data is the action value."""
    buttons = [
        InlineKeyboardButton(action.label, callback_data=action.value)
        for action in MENU_ORDER
    ]
    return InlineKeyboardMarkup([buttons[i:i + 2] for i in range(0, len(buttons), 2)])


class TelegramFrontend(Frontend):
    name = "telegram"

    def __init__(
        self,
        engine: ConversationEngine,
        token: str,
        application: Optional[Application] = None,
    ):
        super().__init__(engine)
        self.application = application or (
            Application.builder().token(token).concurrent_updates(True).build()
        )
        self.keyboard = main_keyboard()
        self._register()

    def _register(self) -> None:
        app = self.application
        app.add_handler(CommandHandler("start", self.on_start))
        app.add_handler(CommandHandler("help", self.on_help))
        app.add_handler(CallbackQueryHandler(self.on_callback))
        app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, self.on_text))
        app.add_error_handler(self.on_error)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    async def deliver(self, user_id: Union[str, int], text: str) -> None:
        await self.application.bot.send_message(chat_id=user_id, text=text)

    async def render(self, user_id: Union[str, int], message: OutboundMessage) -> None:
        reply_markup = self.keyboard if message.menu else None
        try:
            await self.application.bot.send_message(
                chat_id=user_id,
                text=message.text,
                parse_mode=ParseMode.MARKDOWN if message.markdown else None,
                reply_markup=reply_markup,
                link_preview_options=LinkPreviewOptions(is_disabled=True),
            )
        except BadRequest as e:
            if not message.markdown:
                raise
            # Unbalanced markup in user-supplied text; resend as-is
            logger.warning(f"Markdown rejected for chat {user_id}: {e}")
            await self.application.bot.send_message(
                chat_id=user_id,
                text=message.text,
                reply_markup=reply_markup,
            )

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def on_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        text = await self.engine.welcome()
        await update.effective_message.reply_text(
            text,
            parse_mode=ParseMode.MARKDOWN if self.engine.formatter.markdown else None,
            reply_markup=self.keyboard,
        )

    async def on_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        chat_id = update.effective_chat.id
        await self.engine.select(chat_id, Action.HELP, render=self.renderer(chat_id))

    async def on_callback(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        query = update.callback_query
        await query.answer()
        chat_id = update.effective_chat.id
        await self.engine.select(chat_id, query.data, render=self.renderer(chat_id))

    async def on_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        chat_id = update.effective_chat.id
        await self.engine.handle(chat_id, update.effective_message.text, render=self.renderer(chat_id))

    async def on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        logger.error(f"Telegram update failed: {context.error}", exc_info=context.error)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Poll for updates until the task is cancelled."""
        async with self.application:
            await self.application.start()
            await self.application.updater.start_polling()
            logger.info("Telegram bot polling")
            try:
                await asyncio.Event().wait()
            finally:
                await self.application.updater.stop()
                await self.application.stop()
