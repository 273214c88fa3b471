"""Variable, exit-status and quote expansion of tokens and here-document lines."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from minishell.tokens import Token, TokenType

__all__ = [
    "get_value",
    "process_dollar",
    "expand_quote",
    "expand_word",
    "expand_tokens",
    "expand_heredoc_line",
]

_NAME_CHARS = re.compile(r"[A-Za-z0-9_]*")
_QUOTES = ("'", '"')
_BLANKS = (" ", "\t", "\n")


def _starts_name(char: str) -> bool:
    return char == "_" or ("a" <= char.lower() <= "z" and len(char) == 1)


def get_value(env: Mapping[str, str], name: str) -> str | None:
    """Return the value of variable ``name`` in ``env``, or None if it is unset."""
    if not name:
        return None
    return env.get(name)


def process_dollar(
    text: str, env: Mapping[str, str], exit_status: int
) -> tuple[str, int]:
    """Expand the ``$`` that starts ``text``.

    Returns the text to insert and the number of characters consumed.
    ``$`` before a quote is dropped; ``$?`` gives the exit status; ``$NAME``
    gives the variable's value (nothing when unset). A ``$`` at the end or
    before a blank is kept literally; before any other character both are
    dropped.
    """
    following = text[1:2]
    if following in _QUOTES:
        return "", 1
    if following == "?":
        return str(exit_status), 2
    if following and _starts_name(following):
        name = _NAME_CHARS.match(text, 1).group()
        return get_value(env, name) or "", len(name) + 1
    if following == "":
        return "$", 1
    if following in _BLANKS:
        return text[:2], 2
    return "", 2


def expand_quote(
    text: str, env: Mapping[str, str], exit_status: int
) -> tuple[str, int]:
    """Expand the quoted section that starts ``text``.

    Returns the content without its quotes and the number of characters
    consumed, closing quote included. Single quotes keep their content as
    it is; double quotes expand ``$`` forms.
    """
    quote = text[0]
    if quote == "'":
        end = text.find("'", 1)
        if end == -1:
            return text[1:], len(text)
        return text[1:end], end + 1

    parts: list[str] = []
    pos = 1
    while pos < len(text):
        char = text[pos]
        if char == "$":
            if text[pos + 1 : pos + 2] == '"':
                parts.append("$")
                pos += 1
            else:
                value, used = process_dollar(text[pos:], env, exit_status)
                parts.append(value)
                pos += used
            if pos >= len(text):
                break
            char = text[pos]
        if char == '"':
            return "".join(parts), pos + 1
        parts.append(char)
        pos += 1
    return "".join(parts), len(text)


def expand_word(token: Token, env: Mapping[str, str], exit_status: int) -> Token:
    """Return ``token`` with quotes removed and ``$`` forms expanded.

    The result is typed QUOTE or DOLLAR after the last quoted section or
    ``$`` met in the word, and keeps the original type otherwise.
    """
    text = token.text
    token_type = token.type
    parts: list[str] = []
    pos = 0
    while pos < len(text):
        char = text[pos]
        if char in _QUOTES:
            token_type = TokenType.QUOTE
            value, used = expand_quote(text[pos:], env, exit_status)
        elif char == "$":
            token_type = TokenType.DOLLAR
            value, used = process_dollar(text[pos:], env, exit_status)
        else:
            value, used = char, 1
        parts.append(value)
        pos += used
    return Token(token_type, "".join(parts))


def expand_tokens(
    tokens: Iterable[Token], env: Mapping[str, str], exit_status: int
) -> list[Token]:
    """Expand every WORD token and drop variable tokens that came out empty."""
    expanded: list[Token] = []
    for token in tokens:
        if token.type is TokenType.WORD:
            token = expand_word(token, env, exit_status)
        if token.type is TokenType.DOLLAR and not token.text:
            continue
        expanded.append(token)
    return expanded


def expand_heredoc_line(line: str, env: Mapping[str, str], exit_status: int) -> str:
    """Expand ``$`` forms in a here-document line; quotes stay as they are."""
    parts: list[str] = []
    pos = 0
    while pos < len(line):
        if line[pos] == "$":
            value, used = process_dollar(line[pos:], env, exit_status)
        else:
            value, used = line[pos], 1
        parts.append(value)
        pos += used
    return "".join(parts)