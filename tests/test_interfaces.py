import unittest
from unittest import mock

from application.commands import CommandDispatcher
from application.ledger import GameLedger
from infrastructure.db.ledger_backend_memory import InMemoryLedgerBackend
from interfaces.discord.handlers import DISCORD_MESSAGE_LIMIT, create_discord_bot, split_message
from interfaces.telegram.handlers import strip_bot_mention


class SplitMessageTests(unittest.TestCase):
    def test_short_message_is_untouched(self):
        self.assertEqual(split_message("hello\nworld"), ["hello\nworld"])

    def test_splits_on_line_boundaries(self):
        text = "\n".join(["x" * 6] * 4)
        self.assertEqual(split_message(text, limit=13), ["xxxxxx\nxxxxxx", "xxxxxx\nxxxxxx"])

    def test_long_line_is_cut(self):
        chunks = split_message("y" * 25, limit=10)
        self.assertEqual(chunks, ["y" * 10, "y" * 10, "y" * 5])
        self.assertTrue(all(len(c) <= 10 for c in chunks))


class StripBotMentionTests(unittest.TestCase):
    def test_strips_suffix_from_keyword_only(self):
        self.assertEqual(
            strip_bot_mention('/adduser@ShameBot Q "Tekken 8" 200'),
            '/adduser Q "Tekken 8" 200',
        )
        self.assertEqual(strip_bot_mention("/getusers@ShameBot"), "/getusers")

    def test_plain_text_unchanged(self):
        self.assertEqual(strip_bot_mention("/usergames Q"), "/usergames Q")
        self.assertEqual(strip_bot_mention("mail me@x.com"), "mail me@x.com")

class DiscordAlertTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.ledger = GameLedger(InMemoryLedgerBackend())
        self.client = create_discord_bot(CommandDispatcher(self.ledger))

    def _message(self, content: str):
        message = mock.Mock()
        message.author.bot = False
        message.content = content
        message.channel.send = mock.AsyncMock()
        return message

    async def test_long_alert_is_chunked_like_the_reply(self):
        game = "G" * 1990
        self.ledger.add_user("Q", game, "299")

        message = self._message(f'!updatetotal Q "{game}" 1')
        await self.client.on_message(message)

        sent = [c.args[0] for c in message.channel.send.await_args_list]
        self.assertGreater(len(sent), 2)
        self.assertTrue(all(len(text) <= DISCORD_MESSAGE_LIMIT for text in sent))
        alert_calls = [
            c for c in message.channel.send.await_args_list
            if c.kwargs["allowed_mentions"].everyone
        ]
        self.assertTrue(alert_calls[0].args[0].startswith("@here 🚨 Q just crossed $300"))

    async def test_bot_messages_are_ignored(self):
        message = self._message("!getusers")
        message.author.bot = True
        await self.client.on_message(message)
        message.channel.send.assert_not_awaited()


if __name__ == "__main__":
    unittest.main()
