"""A small interactive shell: lexer, syntax check, expansion and a pipeline runner."""

__version__ = "0.1.0"

__all__ = [
    "commands",
    "executor",
    "expander",
    "heredoc",
    "paths",
    "redirections",
    "shell",
    "syntax",
    "tokens",
]