from dataclasses import dataclass, field
from typing import Dict


@dataclass
class User:
    """
    A tracked player and the running total they have logged per game.

    Game names are unique per user and totals are signed integers. A user
    only exists while they own at least one game; the ledger removes them
    once the last game goes away.
    """

    name: str
    games: Dict[str, int] = field(default_factory=dict)

    def total_all_games(self) -> int:
        return sum(self.games.values())

    def copy(self) -> "User":
        return User(name=self.name, games=dict(self.games))
