"""Syntax checks on a token list before it is expanded and run."""

from __future__ import annotations

from collections.abc import Sequence

from minishell.tokens import Token, TokenType

__all__ = ["ShellSyntaxError", "check_syntax"]


class ShellSyntaxError(ValueError):
    """Raised when pipes or redirections are misplaced."""

    def __init__(self, message: str = "syntax error") -> None:
        super().__init__(message)


def check_syntax(tokens: Sequence[Token]) -> bool:
    """Check the placement of pipes and redirections.

    Returns False when there are no tokens (nothing to run) and True when
    the tokens form a valid line. Raises ShellSyntaxError if a pipe is not
    preceded by a word or is followed by nothing or another pipe, or if a
    redirection is not followed by a word.
    """
    if not tokens:
        return False
    for index, token in enumerate(tokens):
        previous = tokens[index - 1] if index > 0 else None
        following = tokens[index + 1] if index + 1 < len(tokens) else None
        if token.type is TokenType.PIPE:
            if (
                previous is None
                or previous.type is not TokenType.WORD
                or following is None
                or following.type is TokenType.PIPE
            ):
                raise ShellSyntaxError()
        elif token.type is TokenType.REDIR:
            if following is None or following.type is not TokenType.WORD:
                raise ShellSyntaxError()
    return True