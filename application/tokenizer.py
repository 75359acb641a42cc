from __future__ import annotations

from typing import List

QUOTE = '"'
SEPARATOR = " "


def tokenize(line: str) -> List[str]:
    """
    Split a chat line into arguments, shell style.

    Spaces separate arguments unless they sit between double quotes, which
    is how multi-word game names survive:

        tokenize('!adduser Q "Tekken 8" 200') -> ['!adduser', 'Q', 'Tekken 8', '200']

    Quote characters are dropped. Runs of spaces never produce empty
    arguments. An unmatched quote is not an error: everything after it is
    treated as quoted.
    """

    tokens: List[str] = []
    current: List[str] = []
    in_quotes = False

    for ch in line:
        if ch == QUOTE:
            in_quotes = not in_quotes
        elif ch == SEPARATOR and not in_quotes:
            if current:
                tokens.append("".join(current))
                current.clear()
        else:
            current.append(ch)

    # Don't forget the last argument.
    if current:
        tokens.append("".join(current))

    return tokens


def quote_token(token: str) -> str:
    """Quote `token` if it needs it to come back out of `tokenize` intact."""

    if SEPARATOR in token:
        return f"{QUOTE}{token}{QUOTE}"
    return token
