"""Grouping of tokens into the commands of a pipeline."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from minishell.tokens import Token, TokenType

__all__ = [
    "Redirection",
    "Command",
    "is_arg",
    "count_commands",
    "split_commands",
    "build_commands",
]

_ARG_TYPES = frozenset({TokenType.WORD, TokenType.QUOTE, TokenType.DOLLAR})

_REDIRECTION_KINDS = {
    "<": TokenType.INFILE,
    ">": TokenType.OUTFILE,
    ">>": TokenType.APPEND,
    "<<": TokenType.HERE_DOC,
}


@dataclass
class Redirection:
    """One redirection of a command: its kind, target and expansion rule."""

    type: TokenType
    text: str
    expansion_rule: TokenType = TokenType.WORD


@dataclass
class Command:
    """A single command of a pipeline with its arguments and redirections."""

    args: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)
    fd_in: int = 0
    fd_out: int = 1
    out_error: bool = False
    pid: int = 0
    pipe: tuple[int, int] | None = None

    @property
    def n_args(self) -> int:
        return len(self.args)


def is_arg(token: Token, previous: Token | None) -> bool:
    """Tell whether ``token`` is a command argument rather than a redirection target."""
    return token.type in _ARG_TYPES and (
        previous is None or previous.type is not TokenType.REDIR
    )


def count_commands(tokens: Sequence[Token]) -> int:
    """Number of commands in the token list: one more than its pipes."""
    return 1 + sum(1 for token in tokens if token.type is TokenType.PIPE)


def split_commands(tokens: Sequence[Token]) -> Iterator[list[Token]]:
    """Yield the tokens of each command, splitting at pipes."""
    segment: list[Token] = []
    for token in tokens:
        if token.type is TokenType.PIPE:
            yield segment
            segment = []
        else:
            segment.append(token)
    yield segment


def _build_command(segment: list[Token]) -> Command:
    command = Command()
    previous: Token | None = None
    for index, token in enumerate(segment):
        if is_arg(token, previous):
            command.args.append(token.text)
        elif token.type is TokenType.REDIR:
            target = segment[index + 1] if index + 1 < len(segment) else None
            kind = _REDIRECTION_KINDS.get(token.text)
            if kind is not None and target is not None and target.type in _ARG_TYPES:
                command.redirections.append(
                    Redirection(kind, target.text, target.type)
                )
        previous = token
    return command


def build_commands(tokens: Sequence[Token]) -> list[Command]:
    """Build one Command for each pipe-separated part of ``tokens``."""
    return [_build_command(segment) for segment in split_commands(tokens)]