"""Token types and the lexer that splits a command line into tokens."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto

__all__ = ["TokenType", "Token", "QuoteError", "check_quotes", "tokenize"]


class TokenType(Enum):
    """Kinds of tokens and redirections known to the shell."""

    PIPE = auto()
    REDIR = auto()
    WORD = auto()
    QUOTE = auto()
    DOLLAR = auto()
    APPEND = auto()
    INFILE = auto()
    OUTFILE = auto()
    HERE_DOC = auto()
    COMMAND = auto()
    COMMAND_ARGS = auto()


@dataclass
class Token:
    """One lexical unit of a command line."""

    type: TokenType
    text: str


class QuoteError(ValueError):
    """Raised when a command line has an unclosed single or double quote."""

    def __init__(self, message: str = "quotes error") -> None:
        super().__init__(message)


_BALANCED_QUOTES = re.compile(r"""(?:[^'"]|'[^']*'|"[^"]*")*""", re.DOTALL)

_TOKEN_PATTERN = re.compile(
    r"""(?P<pipe>\|)"""
    r"""|(?P<redir><<|>>|[<>])"""
    r"""|(?P<word>(?:[^|<> \t\n'"]|'[^']*'|"[^"]*")+)""",
    re.DOTALL,
)


def check_quotes(line: str) -> None:
    """Raise QuoteError unless every quote in ``line`` is closed."""
    if _BALANCED_QUOTES.fullmatch(line) is None:
        raise QuoteError()


def tokenize(line: str) -> list[Token]:
    """Split ``line`` into PIPE, REDIR and WORD tokens.

    Spaces, tabs and newlines separate tokens. A word runs until one of
    those or ``|``, ``<`` or ``>``; quoted parts of a word are kept whole,
    quotes included. ``<<`` and ``>>`` form one redirection token.
    Raises QuoteError if a quote is left open.
    """
    check_quotes(line)
    tokens: list[Token] = []
    for match in _TOKEN_PATTERN.finditer(line):
        kind = match.lastgroup
        if kind == "pipe":
            token_type = TokenType.PIPE
        elif kind == "redir":
            token_type = TokenType.REDIR
        else:
            token_type = TokenType.WORD
        tokens.append(Token(token_type, match.group()))
    return tokens