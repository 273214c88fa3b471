# minishell

A small interactive shell. It reads a line, splits it into tokens, checks
the syntax, expands `$NAME`, `$?` and quotes, and then runs the resulting
pipeline of external programs with input and output redirections and
here-documents.

## Installing

```
pip install .
```

## Running

```
minishell
```

The shell takes no arguments; if it is given any, it prints
`do not add parameters to executable` and exits. At the `minishell>`
prompt it supports:

- pipelines: `ls -l | grep py | wc -l`
- redirections: `< infile`, `> outfile`, `>> outfile`
- here-documents: `<< END`, read at a `>` prompt; the body is expanded
  unless the delimiter is quoted
- single quotes, which keep their contents as written
- double quotes, which expand `$NAME` and `$?` inside them
- `$?`, the exit status of the last command

Commands are looked up in `PATH` and then in the current directory. A
command that cannot be found prints `name: No such file or directory` and
sets the exit status to 127. An unclosed quote prints `quotes error` and a
misplaced pipe or redirection prints `syntax error`; neither line is run.
Ctrl-C at the prompt sets the exit status to 130. End of input (Ctrl-D)
prints `exit` and leaves the shell. Line editing comes from Python's
`readline` module when it is available.

## What it does not do

The shell has no built-in commands of its own. Names such as `cd`,
`export`, `unset`, `exit`, `env`, `pwd` and `echo` are looked up and run as
external programs like any other, so `cd` and `export` cannot change the
shell's own directory or environment. A caller can supply built-ins by
setting `Shell.builtin_runner` (see below).

## Using it from Python

The stages can be used on their own:

```python
from minishell.tokens import tokenize
from minishell.syntax import check_syntax
from minishell.expander import expand_tokens
from minishell.commands import build_commands

tokens = tokenize('echo "$HOME" | wc -c > out.txt')
check_syntax(tokens)
tokens = expand_tokens(tokens, {"HOME": "/home/user"}, 0)
commands = build_commands(tokens)
```

`tokenize` raises `QuoteError` for unclosed quotes, and `check_syntax`
raises `ShellSyntaxError` for a misplaced pipe or redirection (it returns
`False` for an empty token list). `build_commands` returns one `Command`
per pipe-separated part, each with its `args` and `redirections`.

A `Shell` runs whole lines against an environment and returns the exit
status:

```python
from minishell.shell import Shell

shell = Shell({"PATH": "/usr/bin:/bin"})
status = shell.run_line("echo hello | tr a-z A-Z")
```

Here-documents are read through the shell's `input_func`, which defaults
to `input`. Built-in commands (`cd`, `echo`, `pwd`, `export`, `unset`,
`env`, `exit`) are run in-process when `builtin_runner` is set to a
callable taking `(args, env, stdout)` and returning an exit status:

```python
def builtins(args, env, stdout):
    if args[0] == "echo":
        print(" ".join(args[1:]), file=stdout)
    return 0

shell.builtin_runner = builtins
```

The lower layers are also available: `minishell.paths.create_path`
resolves a command name, `minishell.redirections.manage_redirections`
opens redirection files, `minishell.heredoc.manage_heredocs` reads
here-documents and `minishell.executor.Executor` runs a list of commands.

## Tests

```
pip install .[test]
pytest
```