from __future__ import annotations


class LedgerError(Exception):
    """Base class for every failure the ledger reports back to a caller."""


class InvalidNumberError(LedgerError):
    def __init__(self, text: str, what: str = "total", reason: str = "") -> None:
        message = f"Invalid number for {what}: '{text}'"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.text = text


class UserNotFoundError(LedgerError):
    def __init__(self, user_name: str) -> None:
        super().__init__(f"User '{user_name}' not found")
        self.user_name = user_name


class GameNotFoundError(LedgerError):
    def __init__(self, user_name: str, game: str) -> None:
        super().__init__(f"User '{user_name}' doesn't have game '{game}'")
        self.user_name = user_name
        self.game = game


class UserAlreadyExistsError(LedgerError):
    def __init__(self, user_name: str) -> None:
        super().__init__(f"User '{user_name}' already exists")
        self.user_name = user_name


class GameAlreadyExistsError(LedgerError):
    def __init__(self, user_name: str, game: str) -> None:
        super().__init__(f"User {user_name} already has game '{game}'")
        self.user_name = user_name
        self.game = game


class PersistenceError(LedgerError):
    """
    The storage backend could not read or write the ledger.

    This is the one failure an operator may need to act on (disk full,
    permissions, database down); nothing retries it automatically.
    """
