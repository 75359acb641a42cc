from __future__ import annotations

from typing import Dict, List

import psycopg2

from domain.errors import PersistenceError
from domain.models import User
from domain.repositories import LedgerBackend


class PostgresLedgerBackend(LedgerBackend):
    """
    Postgres-backed implementation of `LedgerBackend`.

    Uses the same single-table layout as the SQLite backend. Each save
    deletes and re-inserts every row inside one transaction, so readers
    never see a half-written ledger.
    """

    def __init__(self, db_params: dict) -> None:
        self._db_params = db_params
        self._ensure_table()

    def _get_connection(self):
        return psycopg2.connect(**self._db_params)

    def _ensure_table(self) -> None:
        try:
            with self._get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        CREATE TABLE IF NOT EXISTS ledger_games (
                            user_name TEXT NOT NULL,
                            game_name TEXT NOT NULL,
                            total BIGINT NOT NULL,
                            user_position INTEGER NOT NULL,
                            game_position INTEGER NOT NULL,
                            PRIMARY KEY (user_name, game_name)
                        )
                        """
                    )
                    conn.commit()
        except psycopg2.Error as exc:
            raise PersistenceError(f"Failed to initialise ledger database: {exc}") from exc

    def load_users(self) -> List[User]:
        try:
            with self._get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        SELECT user_name, game_name, total
                        FROM ledger_games
                        ORDER BY user_position, game_position
                        """
                    )
                    rows = cur.fetchall()
        except psycopg2.Error as exc:
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
            with self._get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("DELETE FROM ledger_games")
                    cur.executemany(
                        """
                        INSERT INTO ledger_games
                            (user_name, game_name, total, user_position, game_position)
                        VALUES (%s, %s, %s, %s, %s)
                        """,
                        rows,
                    )
                    conn.commit()
        except psycopg2.Error as exc:
            raise PersistenceError(f"Failed to save ledger: {exc}") from exc
