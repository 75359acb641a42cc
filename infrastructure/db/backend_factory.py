from __future__ import annotations

from typing import Optional

import config
from domain.repositories import LedgerBackend
from infrastructure.db.ledger_backend_json import JsonFileLedgerBackend
from infrastructure.db.ledger_backend_memory import InMemoryLedgerBackend
from infrastructure.db.ledger_backend_sqlite import SqliteLedgerBackend


def create_backend(kind: Optional[str] = None) -> LedgerBackend:
    """
    Build the `LedgerBackend` named by `kind` (default: `LEDGER_BACKEND`).

    Postgres is imported lazily so the other backends work without a
    database driver being importable.
    """

    kind = (kind or config.LEDGER_BACKEND).lower()

    if kind == "json":
        return JsonFileLedgerBackend(config.LEDGER_PATH)
    if kind == "sqlite":
        return SqliteLedgerBackend(config.DB_PATH)
    if kind == "memory":
        return InMemoryLedgerBackend()
    if kind == "postgres":
        from infrastructure.db.ledger_backend_postgres import PostgresLedgerBackend

        return PostgresLedgerBackend(config.POSTGRES_PARAMS)

    raise ValueError(f"Unknown LEDGER_BACKEND '{kind}' (expected json, sqlite, postgres or memory)")
