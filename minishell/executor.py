"""Running of a parsed pipeline: processes, pipes, redirections and built-ins."""

from __future__ import annotations

import os
import signal
import subprocess
import sys
import tempfile
import threading
from collections.abc import Callable, Iterable, Iterator, MutableMapping
from contextlib import contextmanager
from typing import TextIO, Union

from minishell.commands import Command
from minishell.paths import create_path
from minishell.redirections import infile_error, is_builtin, manage_redirections

__all__ = ["Executor", "close_redirections"]

NOT_FOUND_STATUS = 127
EXEC_FAILED_STATUS = 126
SIGNAL_STATUS_BASE = 128
INTERRUPTED_STATUS = 130
QUIT_STATUS = 131

BuiltinRunner = Callable[[list[str], MutableMapping[str, str], TextIO], "int | None"]
_Result = Union[int, "subprocess.Popen[bytes]"]


def close_redirections(commands: Iterable[Command]) -> None:
    """Close every command's redirection descriptors and reset them to the defaults."""
    for command in commands:
        if command.fd_in > 0:
            try:
                os.close(command.fd_in)
            except OSError:
                pass
        if command.fd_out > 1:
            try:
                os.close(command.fd_out)
            except OSError:
                pass
        command.fd_in = 0
        command.fd_out = 1


def _close_quietly(fd: int | None) -> None:
    if fd is None:
        return
    try:
        os.close(fd)
    except OSError:
        pass


class Executor:
    """Runs the commands of one pipeline and reports the final exit status.

    ``builtin_runner`` is called as ``builtin_runner(args, env, stdout)`` for
    built-in commands and returns their exit status. Without it, built-in
    names are looked up and run as external programs.
    """

    def __init__(
        self,
        env: MutableMapping[str, str],
        private_path: str | None = None,
        builtin_runner: BuiltinRunner | None = None,
    ) -> None:
        self.env = env
        self.private_path = private_path
        self.builtin_runner = builtin_runner
        self.signal_status: int | None = None

    def run(self, commands: Iterable[Command]) -> int:
        """Open redirections, start every command and wait for them all."""
        commands = list(commands)
        manage_redirections(commands)
        try:
            with self._execution_signals():
                results = self._launch_all(commands)
                return self._wait_all(results)
        finally:
            close_redirections(commands)

    def _on_signal(self, signum: int, _frame: object) -> None:
        quit_signal = getattr(signal, "SIGQUIT", None)
        self.signal_status = QUIT_STATUS if signum == quit_signal else INTERRUPTED_STATUS

    @contextmanager
    def _execution_signals(self) -> Iterator[None]:
        if threading.current_thread() is not threading.main_thread():
            yield
            return
        signums = [signal.SIGINT]
        if hasattr(signal, "SIGQUIT"):
            signums.append(signal.SIGQUIT)
        previous = {signum: signal.getsignal(signum) for signum in signums}
        for signum in signums:
            signal.signal(signum, self._on_signal)
        try:
            yield
        finally:
            for signum, handler in previous.items():
                signal.signal(signum, handler if handler is not None else signal.SIG_DFL)

    def _runs_in_process(self, command: Command) -> bool:
        return self.builtin_runner is not None and is_builtin(command)

    def _launch_all(self, commands: list[Command]) -> list[_Result]:
        results: list[_Result] = []
        prev_read: int | None = None
        single = len(commands) == 1
        for index, command in enumerate(commands):
            has_next = index + 1 < len(commands)
            next_read: int | None = None
            runnable = (
                bool(command.args)
                and not infile_error(command)
                and not command.out_error
            )
            if runnable:
                if single and self._runs_in_process(command):
                    results.append(self._run_single_builtin(command))
                elif self._runs_in_process(command):
                    status, next_read = self._run_piped_builtin(command, has_next)
                    results.append(status)
                else:
                    result, next_read = self._spawn(command, index, has_next, prev_read)
                    results.append(result)
            _close_quietly(prev_read)
            prev_read = next_read
            close_redirections([command])
        _close_quietly(prev_read)
        return results

    def _call_builtin(
        self, command: Command, env: MutableMapping[str, str], stdout: TextIO
    ) -> int:
        assert self.builtin_runner is not None
        status = self.builtin_runner(list(command.args), env, stdout)
        stdout.flush()
        return 0 if status is None else int(status)

    def _run_single_builtin(self, command: Command) -> int:
        if command.fd_out > 1:
            with os.fdopen(command.fd_out, "w", closefd=False) as stdout:
                return self._call_builtin(command, self.env, stdout)
        return self._call_builtin(command, self.env, sys.stdout)

    def _run_piped_builtin(
        self, command: Command, has_next: bool
    ) -> tuple[int, int | None]:
        env = dict(self.env)
        if command.fd_out > 1:
            with os.fdopen(command.fd_out, "w", closefd=False) as stdout:
                return self._call_builtin(command, env, stdout), None
        if not has_next:
            return self._call_builtin(command, env, sys.stdout), None
        with tempfile.TemporaryFile("w+") as buffer:
            status = self._call_builtin(command, env, buffer)
            read_fd = os.dup(buffer.fileno())
        os.lseek(read_fd, 0, os.SEEK_SET)
        return status, read_fd

    def _spawn(
        self, command: Command, index: int, has_next: bool, prev_read: int | None
    ) -> tuple[_Result, int | None]:
        name = command.args[0]
        path = create_path(name, self.env, self.private_path)
        if path is None:
            sys.stdout.flush()
            sys.stderr.write(f"{name}: No such file or directory\n")
            sys.stderr.flush()
            return NOT_FOUND_STATUS, None

        if command.fd_in > 0:
            stdin: int | None = command.fd_in
        elif prev_read is not None:
            stdin = prev_read
        elif index != 0:
            stdin = subprocess.DEVNULL
        else:
            stdin = None

        read_end: int | None = None
        write_end: int | None = None
        if command.fd_out > 1:
            stdout: int | None = command.fd_out
        elif has_next:
            read_end, write_end = os.pipe()
            stdout = write_end
        else:
            stdout = None

        sys.stdout.flush()
        try:
            process = subprocess.Popen(
                command.args,
                executable=path,
                env=dict(self.env),
                stdin=stdin,
                stdout=stdout,
            )
        except OSError as exc:
            print(f"execve error: {exc}", file=sys.stderr)
            _close_quietly(read_end)
            _close_quietly(write_end)
            return EXEC_FAILED_STATUS, None
        _close_quietly(write_end)
        command.pid = process.pid
        command.pipe = None if read_end is None else (read_end, write_end)
        return process, read_end

    def _wait_all(self, results: list[_Result]) -> int:
        status = 0
        for result in results:
            if isinstance(result, int):
                status = result
                continue
            code = result.wait()
            status = SIGNAL_STATUS_BASE - code if code < 0 else code
            if status == INTERRUPTED_STATUS:
                print()
        return status