# minishell

An interactive command shell for POSIX systems. It reads a line at the
`minishell$ ` prompt, splits it into commands joined by pipes, and runs them.

## What it handles

- Pipelines: `ls -l | grep py | wc -l`
- Redirections: `<` input, `>` output (truncate), `>>` append, `<<`
  here-documents. Only the last input and the last output of a command are
  used, but every output file named is created.
- Single and double quotes; a line with unclosed quotes is refused
- Variable expansion with `$NAME` and the last exit status with `$?`
  (no expansion inside single quotes). Lines of a here-document body have
  their first reference expanded.
- Built-in commands: `echo` (with `-n`, `-nn`, ...), `cd`, `pwd`, `export`,
  `unset`, `env` and `exit`. A builtin that is the only command on the line
  runs in the shell itself, so `cd`, `export` and `unset` take effect; inside
  a pipeline it runs on a copy of the shell state.
- Other commands are looked up on `PATH`, or run by relative or absolute path
  when the name holds a `/`
- `Ctrl-C` gives a fresh prompt and sets the status to 130, `Ctrl-\` is
  ignored at the prompt, and `Ctrl-D` prints `exit` and leaves the shell

Here-strings (`<<<`) and `||` are reported as syntax errors; a rejected line
sets the status to 2.

## Install

```
pip install .
```

## Use

Start the shell from a terminal:

```
minishell
```

The shell takes no arguments and refuses to start when its output is not a
terminal. `SHLVL` is raised by one on start. When started with an empty
environment, variables are read from `/etc/environment` instead, and `SHLVL=1`
is added when that file sets none.

The shell can also be driven from Python:

```python
from minishell.environment import ShellState
from minishell.shell import handle_line

state = ShellState.from_environ()
status = handle_line("echo hello | tr a-z A-Z", state)
```

`handle_line` returns the status of the line and records it in
`state.exit_status`; `exit` raises `minishell.errors.ShellExit`.
`minishell.parsing.parse_line` turns a line into a list of
`minishell.commands.Command` objects without running anything.

## What it does not do

There is no `&&`, `;`, background jobs, job control, globbing, backslash
escapes or subshells; such characters are passed along as parts of words. The
shell does not run script files and keeps no history file.

## Tests

```
pip install .[test]
pytest
```