from __future__ import annotations

import sqlite3
from typing import Dict, List

from domain.errors import PersistenceError
from domain.models import User
from domain.repositories import LedgerBackend


class SqliteLedgerBackend(LedgerBackend):
    """
    SQLite-backed implementation of `LedgerBackend`.

    The collection is stored one row per (user, game) in `ledger_games`.
    Position columns keep users and games in the order the ledger saved
    them. Saving rewrites the whole table in a single transaction. It is
    self-initialising: the table is created if needed.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._ensure_table()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_table(self) -> None:
        try:
            with self._get_connection() as conn:
                cur = conn.cursor()
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS ledger_games (
                        user_name TEXT NOT NULL,
                        game_name TEXT NOT NULL,
                        total INTEGER NOT NULL,
                        user_position INTEGER NOT NULL,
                        game_position INTEGER NOT NULL,
                        PRIMARY KEY (user_name, game_name)
                    )
                    """
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to initialise ledger database: {exc}") from exc

    def load_users(self) -> List[User]:
        try:
            with self._get_connection() as conn:
                cur = conn.cursor()
                cur.execute(
                    """
                    SELECT user_name, game_name, total
                    FROM ledger_games
                    ORDER BY user_position, game_position
                    """
                )
                rows = cur.fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to load ledger: {exc}") from exc

        users: Dict[str, User] = {}
        for user_name, game_name, total in rows:
            user = users.setdefault(user_name, User(name=user_name))
            user.games[game_name] = int(total)
        return list(users.values())

    def save_users(self, users: List[User]) -> None:
        rows = [
            (user.name, game, total, user_pos, game_pos)
            for user_pos, user in enumerate(users)
            for game_pos, (game, total) in enumerate(user.games.items())
        ]
        try:
            # The connection context manager commits, or rolls back on error.
            with self._get_connection() as conn:
                cur = conn.cursor()
                cur.execute("DELETE FROM ledger_games")
                cur.executemany(
                    """
                    INSERT INTO ledger_games
                        (user_name, game_name, total, user_position, game_position)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    rows,
                )
        except (sqlite3.Error, OverflowError) as exc:
            raise PersistenceError(f"Failed to save ledger: {exc}") from exc
