"""Lookup of executables through PATH or a fallback search path."""

from __future__ import annotations

import os
from collections.abc import Mapping

__all__ = ["find_path_dirs", "create_path"]


def find_path_dirs(
    env: Mapping[str, str], private_path: str | None = None
) -> list[str] | None:
    """Return the directories to search for commands.

    Uses ``PATH`` from ``env`` when it is set, otherwise ``private_path``.
    Empty entries are dropped. Returns None when neither is available.
    """
    if "PATH" in env:
        search = env["PATH"]
    elif private_path is not None:
        search = private_path
    else:
        return None
    return [entry for entry in search.split(":") if entry]


def create_path(
    name: str, env: Mapping[str, str], private_path: str | None = None
) -> str | None:
    """Resolve ``name`` to an executable path, or return None.

    A name that is executable as given is returned unchanged. Otherwise
    each search directory is tried in order and, after them, the current
    working directory.
    """
    if os.access(name, os.X_OK):
        return name
    directories = find_path_dirs(env, private_path)
    if directories is None:
        return None
    for directory in [*directories, os.getcwd()]:
        candidate = f"{directory}/{name}"
        if os.access(candidate, os.X_OK):
            return candidate
    return None