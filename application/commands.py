from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from application.ledger import GameLedger
from application.tokenizer import quote_token, tokenize
from domain.errors import LedgerError, PersistenceError
from logger import logger


class ArityMismatchError(LedgerError):
    """A command was given the wrong number of arguments."""

    def __init__(self, usage: str) -> None:
        super().__init__(usage)
        self.usage = usage


@dataclass
class CommandResponse:
    """
    What a command produces for the chat.

    `reply` always goes back to the channel. `alert`, when present, is a
    separate message meant to page everyone reading it.
    """

    reply: str
    alert: Optional[str] = None

    @property
    def messages(self) -> List[str]:
        if self.alert:
            return [self.reply, self.alert]
        return [self.reply]


@dataclass(eq=False)
class _Command:
    names: List[str]
    args: List[str]
    description: str
    section: str
    handler: Callable[[List[str]], CommandResponse]
    example: List[str] = field(default_factory=list)

    @property
    def arity(self) -> int:
        # The keyword itself counts as a token.
        return len(self.args) + 1


USER_SECTION = "👤 User Management"
GAME_SECTION = "🎯 Game Management"
INFO_SECTION = "📊 Information & Viewing"


class CommandDispatcher:
    """
    Turns one chat line into a response, using a `GameLedger` for state.

    The dispatcher keeps nothing between calls. Keywords are case
    sensitive and must be the first token, prefixed with `prefix`. Ledger
    failures become an `Error: ...` reply and are never raised to the
    transport.
    """

    def __init__(
        self,
        ledger: GameLedger,
        prefix: str = "!",
        alert_mention: str = "@here",
    ) -> None:
        self._ledger = ledger
        self._prefix = prefix
        self._alert_mention = alert_mention
        self._commands: Dict[str, _Command] = {}

        self._register(
            ["help", "commands"], [], "Show this help message", INFO_SECTION, self._help
        )
        self._register(
            ["quickhelp"], [], "Show a one-line command summary", INFO_SECTION, self._quick_help
        )
        self._register(
            ["adduser"],
            ["<user>", '"<game>"', "<total>"],
            "Create new user with first game",
            USER_SECTION,
            self._add_user,
            example=["Q", "Tekken 8", "200"],
        )
        self._register(
            ["deleteuser"],
            ["<user>"],
            "Delete user and all their games",
            USER_SECTION,
            self._delete_user,
            example=["Bob"],
        )
        self._register(
            ["addgame"],
            ["<user>", '"<game>"', "<total>"],
            "Add new game to existing user",
            GAME_SECTION,
            self._add_game,
            example=["Alice", "Street Fighter 6", "150"],
        )
        self._register(
            ["removegame"],
            ["<user>", '"<game>"'],
            "Remove specific game from user",
            GAME_SECTION,
            self._remove_game,
            example=["Alice", "Street Fighter 6"],
        )
        self._register(
            ["updatetotal"],
            ["<user>", '"<game>"', "<amount>"],
            "Add money to game total",
            GAME_SECTION,
            self._update_total,
            example=["Q", "Tekken 8", "50"],
        )
        self._register(
            ["getusers"], [], "Show all users and their games", INFO_SECTION, self._get_users
        )
        self._register(
            ["usergames"],
            ["<user>"],
            "Show all games for specific user",
            INFO_SECTION,
            self._user_games,
            example=["Q"],
        )
        self._register(
            ["gametotal"],
            ["<user>", '"<game>"'],
            "Show total for specific game",
            INFO_SECTION,
            self._game_total,
            example=["Q", "Tekken 8"],
        )
        self._register(
            ["usertotal"],
            ["<user>"],
            "Show user's total across all games",
            INFO_SECTION,
            self._user_total,
            example=["Q"],
        )

    def _register(
        self,
        names: List[str],
        args: List[str],
        description: str,
        section: str,
        handler: Callable[[List[str]], CommandResponse],
        example: Optional[List[str]] = None,
    ) -> None:
        command = _Command(names, args, description, section, handler, example or [])
        for name in names:
            self._commands[self._prefix + name] = command

    @property
    def keywords(self) -> List[str]:
        return list(self._commands)

    def _usage(self, command: _Command, name: Optional[str] = None) -> str:
        keyword = self._prefix + (name or command.names[0])
        return " ".join([keyword, *command.args])

    def dispatch(self, line: str) -> Optional[CommandResponse]:
        """
        Handle one line of chat text.

        Returns None when the line is not a recognised command, so the
        transport can stay silent on ordinary conversation.
        """

        tokens = tokenize(line)
        if not tokens or tokens[0] not in self._commands:
            return None

        keyword = tokens[0]
        command = self._commands[keyword]
        try:
            if len(tokens) != command.arity:
                raise ArityMismatchError(
                    "Usage: " + self._usage(command, keyword[len(self._prefix):])
                )
            return command.handler(tokens[1:])
        except ArityMismatchError as exc:
            return CommandResponse(exc.usage)
        except PersistenceError as exc:
            logger.error(f"Storage failure while handling {keyword}: {exc}")
            return CommandResponse(f"Error: {exc}")
        except LedgerError as exc:
            return CommandResponse(f"Error: {exc}")

    # Help

    def _help(self, args: List[str]) -> CommandResponse:
        lines = [
            "**🎮 ShameBot - Command List**",
            "Track your gaming totals across different games! "
            "When the totals get high, it puts you on blast for your spending!",
        ]

        sections: Dict[str, List[_Command]] = {USER_SECTION: [], GAME_SECTION: [], INFO_SECTION: []}
        for command in dict.fromkeys(self._commands.values()):
            sections[command.section].append(command)

        for section, commands in sections.items():
            lines.append("")
            lines.append(f"**{section}:**")
            for command in commands:
                usages = " or ".join(f"`{self._usage(command, n)}`" for n in command.names)
                lines.append(f"• {usages} - {command.description}")

        examples = [
            " ".join([self._prefix + c.names[0], *map(quote_token, c.example)])
            for c in dict.fromkeys(self._commands.values())
            if c.example
        ]
        lines.append("")
        lines.append("**💡 Command Examples:**")
        lines.append("```\n" + "\n".join(examples) + "```")

        lines.append("")
        lines.append("**⚠️ Important Notes:**")
        lines.append("• Use quotes around game names with spaces")
        lines.append("• Game names are case-sensitive")
        lines.append("• Amounts must be whole numbers")
        lines.append("• User names cannot contain spaces")
        return CommandResponse("\n".join(lines))

    def _quick_help(self, args: List[str]) -> CommandResponse:
        names = [
            "adduser",
            "addgame",
            "updatetotal",
            "getusers",
            "usergames",
            "gametotal",
            "usertotal",
            "deleteuser",
            "removegame",
        ]
        listed = ", ".join(f"`{self._prefix}{n}`" for n in names)
        return CommandResponse(
            f"**Quick Commands:** {listed} | Use `{self._prefix}help` for details"
        )

    # Mutations

    def _add_user(self, args: List[str]) -> CommandResponse:
        user, game, total_text = args
        total = self._ledger.add_user(user, game, total_text)
        return CommandResponse(f"Added user {user} with game '{game}' and total ${total}")

    def _add_game(self, args: List[str]) -> CommandResponse:
        user, game, total_text = args
        total = self._ledger.add_game(user, game, total_text)
        return CommandResponse(f"Added game '{game}' with total ${total} to user {user}")

    def _update_total(self, args: List[str]) -> CommandResponse:
        user, game, delta_text = args
        result = self._ledger.update_total(user, game, delta_text)
        response = CommandResponse(
            f"{user}'s total for '{game}' was updated by ${result.delta}. "
            f"New total: ${result.new_total}"
        )
        if result.crossed_threshold:
            mention = f"{self._alert_mention} " if self._alert_mention else ""
            response.alert = (
                f"{mention}🚨 {user} just crossed ${self._ledger.alert_threshold} in {game}! 💸"
            )
        return response

    def _remove_game(self, args: List[str]) -> CommandResponse:
        user, game = args
        user_removed = self._ledger.remove_game(user, game)
        text = f"Removed game '{game}' from user {user}"
        if user_removed:
            text += f". {user} had no games left and was removed"
        return CommandResponse(text)

    def _delete_user(self, args: List[str]) -> CommandResponse:
        (user,) = args
        self._ledger.delete_user(user)
        return CommandResponse(f"Deleted user {user} and all their games")

    # Queries

    def _user_games(self, args: List[str]) -> CommandResponse:
        (user,) = args
        games = self._ledger.get_user_games(user)
        if not games:
            return CommandResponse(f"User {user} has no games")

        games_list = "\n".join(f"• {game}: ${total}" for game, total in games.items())
        return CommandResponse(f"**{user}'s Games:**\n{games_list}")

    def _get_users(self, args: List[str]) -> CommandResponse:
        users = self._ledger.get_users()
        if not users:
            return CommandResponse(
                "No users are currently added to the bot! "
                f"Try the {self._prefix}adduser command."
            )

        blocks = []
        for user in users:
            games_info = "\n".join(f"  • {game}: ${total}" for game, total in user.games.items())
            blocks.append(f"**{user.name}**\n{games_info}")
        return CommandResponse("**All Users:**\n" + "\n\n".join(blocks))

    def _game_total(self, args: List[str]) -> CommandResponse:
        user, game = args
        total = self._ledger.get_game_total(user, game)
        return CommandResponse(f"{user}'s total for '{game}': ${total}")

    def _user_total(self, args: List[str]) -> CommandResponse:
        (user,) = args
        total = self._ledger.get_user_total_all_games(user)
        return CommandResponse(f"{user}'s total across all available games: ${total}")
