from __future__ import annotations

import telebot

from application.commands import CommandDispatcher
from logger import logger


def strip_bot_mention(text: str) -> str:
    """
    Drop the `@botname` suffix Telegram adds to commands in group chats.

    "/usergames@ShameBot Q" -> "/usergames Q"
    """

    keyword, sep, rest = text.partition(" ")
    keyword = keyword.split("@", 1)[0]
    return f"{keyword}{sep}{rest}"


def create_telegram_bot(
    bot_token: str,
    dispatcher: CommandDispatcher,
) -> telebot.TeleBot:
    """
    Configure and return a TeleBot instance wired to the dispatcher.

    This module contains only Telegram-specific concerns: unwrapping the
    message text and sending each reply back to the originating chat.
    """

    bot = telebot.TeleBot(bot_token)

    @bot.message_handler(func=lambda message: bool(message.text), content_types=["text"])
    def handle_text(message):
        response = dispatcher.dispatch(strip_bot_mention(message.text))
        if response is None:
            return

        try:
            for text in response.messages:
                bot.send_message(message.chat.id, text)
        except telebot.apihelper.ApiException as exc:
            logger.error(f"Error sending response to chat {message.chat.id}: {exc}")

    return bot
