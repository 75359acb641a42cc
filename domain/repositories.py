from __future__ import annotations

from typing import List, Protocol

from .models import User


class LedgerBackend(Protocol):
    """
    Abstraction over where the ledger's user collection lives.

    The ledger always works on the whole collection: it loads every user,
    applies one change and hands the full list back to be saved. Backends
    are responsible for:
    - Returning fresh `User` objects on every load, so callers never share
      state with the stored copy.
    - Preserving the order of users and of each user's games.
    - Raising `PersistenceError` when a write cannot be completed.
    """

    def load_users(self) -> List[User]:
        """Return the complete collection, in stored order."""

        ...

    def save_users(self, users: List[User]) -> None:
        """Replace the stored collection with `users`."""

        ...
