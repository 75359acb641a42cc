from __future__ import annotations

import json
import os
from typing import Any, List

from domain.errors import PersistenceError
from domain.models import User
from domain.repositories import LedgerBackend
from logger import logger


def _decode_users(data: Any) -> List[User]:
    """
    Convert the parsed document into `User` objects.

    Raises ValueError if the document does not have the expected shape:
    a list of {"user": str, "games": {str: int}} objects.
    """

    if not isinstance(data, list):
        raise ValueError("top level is not a list")

    users: List[User] = []
    for record in data:
        if not isinstance(record, dict):
            raise ValueError("user record is not an object")
        name = record.get("user")
        games = record.get("games")
        if not isinstance(name, str) or not isinstance(games, dict):
            raise ValueError("user record is missing 'user' or 'games'")
        for game, total in games.items():
            # bool is an int subclass; reject it explicitly.
            if not isinstance(total, int) or isinstance(total, bool):
                raise ValueError(f"total for {name}/{game} is not an integer")
        users.append(User(name=name, games=dict(games)))
    return users


def _encode_users(users: List[User]) -> str:
    return json.dumps(
        [{"user": u.name, "games": u.games} for u in users],
        indent=2,
        ensure_ascii=False,
    )


class JsonFileLedgerBackend(LedgerBackend):
    """
    Stores the whole collection as one pretty-printed JSON document.

    Loading is deliberately lossy: a missing, empty, unreadable or
    malformed document is treated as an empty ledger (with a warning for
    the last two cases). Saving replaces the document atomically and
    raises `PersistenceError` on failure.
    """

    def __init__(self, path: str) -> None:
        self._path = path

    def load_users(self) -> List[User]:
        try:
            with open(self._path, encoding="utf-8") as fh:
                contents = fh.read()
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(f"Could not read ledger file {self._path}, starting empty: {exc}")
            return []

        if not contents.strip():
            return []

        try:
            return _decode_users(json.loads(contents))
        except ValueError as exc:
            # json.JSONDecodeError is a ValueError too.
            logger.warning(f"Ledger file {self._path} is malformed, starting empty: {exc}")
            return []

    def save_users(self, users: List[User]) -> None:
        tmp_path = f"{self._path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as fh:
                fh.write(_encode_users(users))
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise PersistenceError(f"Failed to save ledger to {self._path}: {exc}") from exc
