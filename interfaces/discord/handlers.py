from __future__ import annotations

from typing import List

import discord

from application.commands import CommandDispatcher
from logger import logger

DISCORD_MESSAGE_LIMIT = 2000


def split_message(text: str, limit: int = DISCORD_MESSAGE_LIMIT) -> List[str]:
    """
    Split `text` into chunks Discord will accept.

    Breaks on newlines where possible so list entries stay whole; a single
    line longer than `limit` is cut hard.
    """

    chunks: List[str] = []
    current = ""
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]

        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate

    if current:
        chunks.append(current)
    return chunks


def create_discord_bot(dispatcher: CommandDispatcher) -> discord.Client:
    """
    Configure and return a Discord client that feeds every message to
    `dispatcher` and posts whatever it answers in the same channel.
    """

    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True

    client = discord.Client(intents=intents)

    # Only the threshold alert may ping @here/@everyone.
    quiet = discord.AllowedMentions.none()
    loud = discord.AllowedMentions(everyone=True)

    @client.event
    async def on_ready():
        logger.info(f"Discord bot logged in as {client.user} (id={client.user.id})")

    @client.event
    async def on_message(message: discord.Message):
        if message.author.bot:
            return

        response = dispatcher.dispatch(message.content)
        if response is None:
            return

        try:
            for chunk in split_message(response.reply):
                await message.channel.send(chunk, allowed_mentions=quiet)
            if response.alert:
                for chunk in split_message(response.alert):
                    await message.channel.send(chunk, allowed_mentions=loud)
        except discord.HTTPException as exc:
            logger.error(f"Error sending response to channel {message.channel.id}: {exc}")

    return client
