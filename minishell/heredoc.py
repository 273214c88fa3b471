"""Reading of here-documents into readable file descriptors."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Iterable, Mapping

from minishell.commands import Command
from minishell.expander import expand_heredoc_line
from minishell.redirections import infile_error
from minishell.tokens import TokenType

__all__ = ["HeredocInterrupted", "read_heredoc", "manage_heredocs"]

PROMPT = ">"
INTERRUPTED_STATUS = 130

InputFunc = Callable[[str], "str | None"]


class HeredocInterrupted(Exception):
    """Raised when reading a here-document is interrupted by the user."""

    exit_status = INTERRUPTED_STATUS


def _collect_lines(
    delimiter: str,
    expand: bool,
    env: Mapping[str, str],
    exit_status: int,
    input_func: InputFunc,
) -> str:
    parts: list[str] = []
    while True:
        try:
            line = input_func(PROMPT)
        except EOFError:
            line = None
        except KeyboardInterrupt:
            print()
            raise HeredocInterrupted() from None
        if line is None:
            print(
                "minishell: warning: here-document at line 1 delimited by "
                f"end-of-file (wanted '{delimiter}')"
            )
            break
        if line == delimiter:
            break
        if expand:
            line = expand_heredoc_line(line, env, exit_status)
        parts.append(line + "\n")
    return "".join(parts)


def read_heredoc(
    delimiter: str,
    expand: bool,
    env: Mapping[str, str],
    exit_status: int,
    input_func: InputFunc = input,
) -> int:
    """Read lines until ``delimiter`` and return a descriptor holding them.

    Each line is followed by a newline; ``$`` forms are expanded when
    ``expand`` is true. End of input ends the document with a warning.
    Raises HeredocInterrupted on KeyboardInterrupt and ValueError when
    there is no delimiter.
    """
    if delimiter is None:
        raise ValueError("here-document without delimiter")
    content = _collect_lines(delimiter, expand, env, exit_status, input_func)
    with tempfile.TemporaryFile() as buffer:
        buffer.write(content.encode())
        buffer.flush()
        fd = os.dup(buffer.fileno())
    os.lseek(fd, 0, os.SEEK_SET)
    return fd


def manage_heredocs(
    commands: Iterable[Command],
    env: Mapping[str, str],
    exit_status: int,
    input_func: InputFunc = input,
) -> None:
    """Read every command's here-documents and set its input descriptor.

    Only the last here-document of a command is kept. A command with a
    missing input file keeps no here-document. Raises HeredocInterrupted
    if the user interrupts; commands handled before keep their input.
    """
    for command in commands:
        fd_hd = 0
        for redirection in command.redirections:
            if redirection.type is not TokenType.HERE_DOC:
                continue
            if fd_hd > 0:
                os.close(fd_hd)
                fd_hd = 0
            fd_hd = read_heredoc(
                redirection.text,
                redirection.expansion_rule is not TokenType.QUOTE,
                env,
                exit_status,
                input_func,
            )
            if infile_error(command):
                os.close(fd_hd)
                fd_hd = 0
        if not infile_error(command):
            command.fd_in = fd_hd