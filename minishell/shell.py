"""The interactive shell: read a line, parse it, expand it and run it."""

from __future__ import annotations

import os
import signal
import sys
import threading
from collections.abc import Callable, Mapping, Sequence

from minishell.commands import build_commands
from minishell.executor import BuiltinRunner, Executor, close_redirections
from minishell.expander import expand_tokens
from minishell.heredoc import HeredocInterrupted, manage_heredocs
from minishell.syntax import ShellSyntaxError, check_syntax
from minishell.tokens import QuoteError, tokenize

__all__ = ["Shell", "main"]

PROMPT = "minishell>"
INTERRUPTED_STATUS = 130
ARGUMENTS_MESSAGE = "do not add parameters to executable"


class Shell:
    """State of one shell session: environment, last exit status and input."""

    def __init__(
        self,
        env: Mapping[str, str],
        input_func: Callable[[str], "str | None"] = input,
    ) -> None:
        self.env: dict[str, str] = dict(env)
        self.input_func = input_func
        self.exit_status = 0
        self.private_path: str | None = None
        self.builtin_runner: BuiltinRunner | None = None

    def run_line(self, line: str) -> int:
        """Run one command line and return the resulting exit status."""
        try:
            tokens = tokenize(line)
            if not check_syntax(tokens):
                return self.exit_status
        except (QuoteError, ShellSyntaxError) as exc:
            print(exc, file=sys.stderr)
            return self.exit_status

        tokens = expand_tokens(tokens, self.env, self.exit_status)
        commands = build_commands(tokens)
        self.exit_status = 0
        try:
            manage_heredocs(commands, self.env, self.exit_status, self.input_func)
            executor = Executor(self.env, self.private_path, self.builtin_runner)
            self.exit_status = executor.run(commands)
        except HeredocInterrupted as exc:
            self.exit_status = exc.exit_status
        finally:
            close_redirections(commands)
        return self.exit_status

    def _read_line(self) -> str | None:
        quit_signal = getattr(signal, "SIGQUIT", None)
        in_main = threading.current_thread() is threading.main_thread()
        previous = None
        if in_main and quit_signal is not None:
            previous = signal.signal(quit_signal, signal.SIG_IGN)
        try:
            return self.input_func(PROMPT)
        except EOFError:
            return None
        finally:
            if previous is not None:
                signal.signal(quit_signal, previous)

    def loop(self) -> int:
        """Read and run lines until end of input; return the last exit status."""
        while True:
            try:
                line = self._read_line()
            except KeyboardInterrupt:
                print()
                self.exit_status = INTERRUPTED_STATUS
                continue
            if line is None:
                print("exit")
                return self.exit_status
            self.run_line(line)


def main(argv: Sequence[str] | None = None) -> int:
    """Start an interactive session; the shell takes no arguments."""
    args = sys.argv[1:] if argv is None else list(argv)
    if args:
        print(ARGUMENTS_MESSAGE)
        return 0
    try:
        import readline  # noqa: F401  (line editing and history for input())
    except ImportError:
        pass
    Shell(os.environ).loop()
    return 0


if __name__ == "__main__":
    sys.exit(main())