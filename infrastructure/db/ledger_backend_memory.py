from __future__ import annotations

from typing import List, Optional

from domain.models import User
from domain.repositories import LedgerBackend


class InMemoryLedgerBackend(LedgerBackend):
    """
    Process-local `LedgerBackend`, used by tests and the `memory` setting.

    Users are copied on the way in and on the way out, so it behaves like
    a real store: nothing changes until `save_users` is called.
    """

    def __init__(self, users: Optional[List[User]] = None) -> None:
        self._users: List[User] = [u.copy() for u in users or []]
        self.save_count = 0

    def load_users(self) -> List[User]:
        return [u.copy() for u in self._users]

    def save_users(self, users: List[User]) -> None:
        self._users = [u.copy() for u in users]
        self.save_count += 1
