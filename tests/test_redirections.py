import os

import pytest

from minishell.commands import Command, Redirection
from minishell.redirections import (
    infile_error,
    is_builtin,
    last_is_infile,
    manage_redirections,
    open_infile,
    open_outfile,
)
from minishell.tokens import TokenType


def _close(*fds):
    for fd in fds:
        if fd > 2:
            os.close(fd)


def _read_fd(fd):
    chunks = []
    while True:
        chunk = os.read(fd, 4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def test_infile_error_false_when_files_exist(tmp_path):
    src = tmp_path / "in.txt"
    src.write_text("data")
    cmd = Command(args=["cat"], redirections=[Redirection(TokenType.INFILE, str(src))])
    assert infile_error(cmd) is False


def test_infile_error_true_for_missing_file(tmp_path):
    cmd = Command(
        args=["cat"],
        redirections=[Redirection(TokenType.INFILE, str(tmp_path / "missing"))],
    )
    assert infile_error(cmd) is True


def test_infile_error_ignores_outfiles(tmp_path):
    cmd = Command(
        args=["ls"],
        redirections=[Redirection(TokenType.OUTFILE, str(tmp_path / "not-yet"))],
    )
    assert infile_error(cmd) is False


@pytest.mark.parametrize(
    "name", ["cd", "echo", "pwd", "export", "unset", "env", "exit"]
)
def test_is_builtin_true(name):
    assert is_builtin(Command(args=[name, "x"])) is True


@pytest.mark.parametrize("name", ["ls", "echoo", "ech", "cdx", "ENV"])
def test_is_builtin_false(name):
    assert is_builtin(Command(args=[name])) is False


def test_is_builtin_without_args():
    assert is_builtin(Command()) is False
    assert is_builtin(None) is False


def test_last_is_infile_orders_redirections():
    infile = Redirection(TokenType.INFILE, "a")
    heredoc = Redirection(TokenType.HERE_DOC, "EOF")
    outfile = Redirection(TokenType.OUTFILE, "b")
    assert last_is_infile(Command(redirections=[heredoc, infile, outfile])) is True
    assert last_is_infile(Command(redirections=[infile, heredoc])) is False
    assert last_is_infile(Command(redirections=[outfile])) is False


def test_open_outfile_truncates(tmp_path):
    target = tmp_path / "out.txt"
    target.write_text("old contents")
    fd = open_outfile(str(target), False)
    os.write(fd, b"new")
    os.close(fd)
    assert target.read_text() == "new"


def test_open_outfile_appends(tmp_path):
    target = tmp_path / "out.txt"
    target.write_text("old")
    fd = open_outfile(str(target), True)
    os.write(fd, b"+more")
    os.close(fd)
    assert target.read_text() == "old+more"


def test_open_outfile_creates_with_mode(tmp_path):
    target = tmp_path / "created.txt"
    old_umask = os.umask(0)
    try:
        fd = open_outfile(str(target))
    finally:
        os.umask(old_umask)
    os.close(fd)
    assert target.exists()
    assert target.stat().st_mode & 0o777 == 0o644


def test_open_outfile_directory(tmp_path):
    with pytest.raises(IsADirectoryError, match="is a directory"):
        open_outfile(str(tmp_path))


def test_open_outfile_unreachable(tmp_path):
    with pytest.raises(OSError, match="Error opening outfile"):
        open_outfile(str(tmp_path / "no-such-dir" / "file"))


def test_open_infile_reads(tmp_path):
    src = tmp_path / "in.txt"
    src.write_bytes(b"payload")
    fd = open_infile(str(src))
    try:
        assert _read_fd(fd) == b"payload"
    finally:
        os.close(fd)


def test_open_infile_missing(tmp_path):
    with pytest.raises(OSError, match="Error opening infile"):
        open_infile(str(tmp_path / "missing"))


def test_manage_redirections_opens_last_outfile(tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    cmd = Command(
        args=["echo"],
        redirections=[
            Redirection(TokenType.OUTFILE, str(first)),
            Redirection(TokenType.OUTFILE, str(second)),
        ],
    )
    manage_redirections([cmd])
    try:
        os.write(cmd.fd_out, b"hi")
    finally:
        _close(cmd.fd_out)
    assert first.exists()
    assert first.read_bytes() == b""
    assert second.read_bytes() == b"hi"
    assert cmd.out_error is False


def test_manage_redirections_opens_last_infile(tmp_path):
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.write_bytes(b"from a")
    b.write_bytes(b"from b")
    cmd = Command(
        args=["cat"],
        redirections=[
            Redirection(TokenType.INFILE, str(a)),
            Redirection(TokenType.INFILE, str(b)),
        ],
    )
    manage_redirections([cmd])
    try:
        assert _read_fd(cmd.fd_in) == b"from b"
    finally:
        _close(cmd.fd_in)


def test_manage_redirections_keeps_heredoc_when_last(tmp_path):
    a = tmp_path / "a"
    a.write_text("x")
    cmd = Command(
        args=["cat"],
        redirections=[
            Redirection(TokenType.INFILE, str(a)),
            Redirection(TokenType.HERE_DOC, "EOF"),
        ],
    )
    manage_redirections([cmd])
    assert cmd.fd_in == 0


def test_manage_redirections_stops_at_missing_infile(tmp_path, capsys):
    missing = tmp_path / "missing"
    after = tmp_path / "after"
    cmd = Command(
        args=["cat"],
        redirections=[
            Redirection(TokenType.INFILE, str(missing)),
            Redirection(TokenType.OUTFILE, str(after)),
        ],
    )
    manage_redirections([cmd])
    out = capsys.readouterr().out
    assert f"Error: {missing}: No such file or directory" in out
    assert not after.exists()
    assert cmd.fd_out == 1
    assert cmd.fd_in == 0


def test_manage_redirections_directory_outfile(tmp_path, capsys):
    cmd = Command(
        args=["echo"], redirections=[Redirection(TokenType.OUTFILE, str(tmp_path))]
    )
    manage_redirections([cmd])
    assert cmd.out_error is True
    assert f"{tmp_path}: is a directory" in capsys.readouterr().out


def test_manage_redirections_handles_each_command(tmp_path):
    out1 = tmp_path / "one"
    out2 = tmp_path / "two"
    cmds = [
        Command(args=["a"], redirections=[Redirection(TokenType.OUTFILE, str(out1))]),
        Command(args=["b"], redirections=[Redirection(TokenType.APPEND, str(out2))]),
    ]
    manage_redirections(cmds)
    try:
        assert all(cmd.fd_out > 2 for cmd in cmds)
    finally:
        _close(*(cmd.fd_out for cmd in cmds))
    assert out1.exists() and out2.exists()