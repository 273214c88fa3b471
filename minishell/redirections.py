"""Opening of the files named by input and output redirections."""

from __future__ import annotations

import os
from collections.abc import Iterable

from minishell.commands import Command
from minishell.tokens import TokenType

__all__ = [
    "infile_error",
    "is_builtin",
    "last_is_infile",
    "open_infile",
    "open_outfile",
    "manage_redirections",
]

_BUILTINS = frozenset({"cd", "echo", "pwd", "export", "unset", "env", "exit"})


def infile_error(command: Command) -> bool:
    """Tell whether any input file named by ``command`` does not exist."""
    return any(
        redirection.type is TokenType.INFILE and not os.path.exists(redirection.text)
        for redirection in command.redirections
    )


def is_builtin(command: Command | None) -> bool:
    """Tell whether ``command`` names one of the shell's built-in commands."""
    return bool(command and command.args and command.args[0] in _BUILTINS)


def last_is_infile(command: Command) -> bool:
    """Tell whether the last input redirection is a file rather than a here-document."""
    result = False
    for redirection in command.redirections:
        if redirection.type is TokenType.INFILE:
            result = True
        elif redirection.type is TokenType.HERE_DOC:
            result = False
    return result


def open_infile(path: str) -> int:
    """Open ``path`` for reading and return its descriptor."""
    try:
        return os.open(path, os.O_RDONLY)
    except OSError as exc:
        raise OSError(f"Error opening infile: {path}") from exc


def open_outfile(path: str, append: bool = False) -> int:
    """Open ``path`` for writing, truncating or appending, and return its descriptor.

    Raises IsADirectoryError when ``path`` is a directory and OSError when
    it cannot be opened for writing.
    """
    if os.path.isdir(path):
        raise IsADirectoryError(f"{path}: is a directory")
    flags = os.O_WRONLY | os.O_CREAT | (os.O_APPEND if append else os.O_TRUNC)
    try:
        fd = os.open(path, flags, 0o644)
    except OSError as exc:
        raise OSError(f"Error opening outfile: {path}") from exc
    if not os.access(path, os.W_OK):
        os.close(fd)
        raise OSError(f"Error opening outfile: {path}")
    return fd


def _apply_redirections(command: Command) -> str | None:
    """Open output files in order; return the last existing input file."""
    last_in: str | None = None
    for redirection in command.redirections:
        if redirection.type in (TokenType.OUTFILE, TokenType.APPEND):
            if command.fd_out > 2:
                os.close(command.fd_out)
            try:
                command.fd_out = open_outfile(
                    redirection.text, redirection.type is TokenType.APPEND
                )
            except OSError as exc:
                print(exc)
                command.fd_out = -1
                command.out_error = True
                break
        elif redirection.type is TokenType.INFILE:
            if not os.path.exists(redirection.text):
                print(f"Error: {redirection.text}: No such file or directory")
                break
            last_in = redirection.text
    return last_in


def manage_redirections(commands: Iterable[Command]) -> None:
    """Open every command's redirection files and set its descriptors.

    Output files are opened in order, stopping at the first failure or at
    a missing input file. The last input file is opened only when it comes
    after the command's last here-document.
    """
    for command in commands:
        last_in = _apply_redirections(command)
        if last_in is None or not last_is_infile(command):
            continue
        if command.fd_in > 0:
            os.close(command.fd_in)
        try:
            command.fd_in = open_infile(last_in)
        except OSError as exc:
            print(exc)
            command.fd_in = -1