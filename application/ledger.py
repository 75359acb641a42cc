from __future__ import annotations

import re
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from config import ALERT_THRESHOLD
from domain.errors import (
    GameAlreadyExistsError,
    GameNotFoundError,
    InvalidNumberError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from domain.models import User
from domain.repositories import LedgerBackend
from logger import logger

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

# Totals are stored as 64-bit integers (SQLite INTEGER, Postgres BIGINT).
MIN_AMOUNT = -(2**63)
MAX_AMOUNT = 2**63 - 1


@dataclass
class UpdateResult:
    """Outcome of adding an amount to a game total."""

    delta: int
    new_total: int
    crossed_threshold: bool


def parse_amount(text: str, what: str = "total") -> int:
    """
    Parse a signed integer typed by a user.

    Only an optional sign followed by ASCII digits is accepted; Python's
    more forgiving `int()` spellings (" 5", "1_000", full-width digits) are
    rejected, as is anything outside the 64-bit range totals are stored in.
    """

    if not _INTEGER_RE.fullmatch(text):
        raise InvalidNumberError(text, what)
    digits = text.lstrip("+-").lstrip("0") or "0"
    # 19 significant digits covers the range; longer strings never reach int().
    if len(digits) > 19:
        raise InvalidNumberError(text, what, "out of range")
    value = -int(digits) if text.startswith("-") else int(digits)
    if not MIN_AMOUNT <= value <= MAX_AMOUNT:
        raise InvalidNumberError(text, what, "out of range")
    return value


def _find_user(users: List[User], name: str) -> Optional[User]:
    for user in users:
        if user.name == name:
            return user
    return None


def _require_user(users: List[User], name: str) -> User:
    user = _find_user(users, name)
    if user is None:
        raise UserNotFoundError(name)
    return user


class GameLedger:
    """
    Users -> games -> totals, kept in a pluggable `LedgerBackend`.

    Every operation reloads the full collection from the backend. Mutating
    operations save the full collection back before returning. Load,
    modify and save run under one lock, so concurrent callers in this
    process cannot overwrite each other's updates.
    """

    def __init__(
        self,
        backend: LedgerBackend,
        alert_threshold: int = ALERT_THRESHOLD,
    ) -> None:
        self._backend = backend
        self._alert_threshold = alert_threshold
        self._lock = threading.RLock()

    @property
    def alert_threshold(self) -> int:
        return self._alert_threshold

    @contextmanager
    def _transaction(self) -> Iterator[List[User]]:
        # An exception inside the block skips the save.
        with self._lock:
            users = self._backend.load_users()
            yield users
            self._backend.save_users(users)

    def _snapshot(self) -> List[User]:
        with self._lock:
            return self._backend.load_users()

    # Mutations

    def add_user(self, name: str, game: str, total_text: str) -> int:
        """Create `name` with a first game. Returns the parsed total."""

        with self._transaction() as users:
            total = parse_amount(total_text, "starting total")
            if _find_user(users, name) is not None:
                raise UserAlreadyExistsError(name)

            users.append(User(name=name, games={game: total}))

        logger.info(f"Added new user '{name}' with game '{game}' and total {total}")
        return total

    def add_game(self, name: str, game: str, total_text: str) -> int:
        """Add a game to an existing user. Returns the parsed total."""

        with self._transaction() as users:
            total = parse_amount(total_text, "starting total")
            user = _require_user(users, name)
            if game in user.games:
                raise GameAlreadyExistsError(name, game)

            user.games[game] = total

        logger.info(f"Added game '{game}' with total {total} to user '{name}'")
        return total

    def update_total(self, name: str, game: str, delta_text: str) -> UpdateResult:
        """
        Add `delta_text` (which may be negative) to a game's total.

        `crossed_threshold` is only true for the single update that takes
        the total from below the alert threshold to at or above it.
        """

        with self._transaction() as users:
            delta = parse_amount(delta_text, "additional total")
            user = _require_user(users, name)
            if game not in user.games:
                raise GameNotFoundError(name, game)

            old_total = user.games[game]
            new_total = old_total + delta
            if not MIN_AMOUNT <= new_total <= MAX_AMOUNT:
                raise InvalidNumberError(delta_text, "additional total", "new total out of range")
            user.games[game] = new_total

        crossed = old_total < self._alert_threshold <= new_total
        logger.info(f"Updated {name}'s {game} total from {old_total} to {new_total}")
        if crossed:
            logger.info(f"{name} crossed the {self._alert_threshold} alert threshold in {game}")
        return UpdateResult(delta=delta, new_total=new_total, crossed_threshold=crossed)

    def remove_game(self, name: str, game: str) -> bool:
        """
        Remove one game from a user.

        If that was the user's last game the user goes too, in the same
        save. Returns True when that happened.
        """

        with self._transaction() as users:
            user = _require_user(users, name)
            if game not in user.games:
                raise GameNotFoundError(name, game)

            del user.games[game]
            user_removed = not user.games
            if user_removed:
                users.remove(user)

        logger.info(f"Removed game '{game}' from user '{name}'")
        if user_removed:
            logger.info(f"User '{name}' had no games left and was removed")
        return user_removed

    def delete_user(self, name: str) -> None:
        with self._transaction() as users:
            users.remove(_require_user(users, name))

        logger.info(f"Deleted user '{name}' and all their games")

    # Queries

    def get_users(self) -> List[User]:
        return self._snapshot()

    def get_user_games(self, name: str) -> Dict[str, int]:
        return dict(_require_user(self._snapshot(), name).games)

    def get_game_total(self, name: str, game: str) -> int:
        user = _require_user(self._snapshot(), name)
        if game not in user.games:
            raise GameNotFoundError(name, game)
        return user.games[game]

    def get_user_total_all_games(self, name: str) -> int:
        return _require_user(self._snapshot(), name).total_all_games()
