# gotodir

A directory navigator for the shell. `goto` indexes the directory trees under
your workspace roots, remembers which directories you visit, and ranks the
directories matching a query by path match, how recently and how often you
visited them, what you picked for the same query before, and whether the
directory looks like a project (git, Rust, Node, Python, Docker).

## Installation

```
pip install .
```

This installs the `goto` command. The interactive picker needs a POSIX
terminal (`/dev/tty`).

## Workspaces and indexing

```
goto workspace add ~/code        # add a root and index every workspace
goto workspace add -f /          # force past the '/' and ignore-rule guards
goto workspace list
goto workspace remove ~/code     # also drops its entries from the index
goto index                       # re-index every workspace
```

Indexing adds new directories, refreshes known ones and removes indexed
directories under a workspace that were not found again. Hidden directories
(names starting with `.`) are skipped, as are `.git`, `node_modules`,
`target`, `build`, `dist`, `.cache`, `.venv`, `venv` and `__pycache__`.
Symbolic links to directories are not followed.

Ignore rules can be changed in `~/.config/goto/config.toml`:

```toml
[ignore]
use_defaults = true          # false drops the built-in names
names = ["vendor"]           # matched case-insensitively
paths = ["~/big-monorepo"]   # this path and everything below it
```

Without `-f`, `goto workspace add` refuses a path that the ignore rules match.

## Jumping

```
goto my proj            # interactive picker
goto --auto my proj     # print the best existing match, exit 1 if none
goto ../sibling         # queries that are paths (., .., ./, ../, /) are used as they are
```

Query tokens must match the path in order and ignore case. `^foo` anchors a
token to the start of a path segment, `bar$` to its end, `^foo$` to a whole
segment. A query starting with `@name` only returns directories carrying that
tag; the rest of the query filters them further.

With `--auto`, indexed directories that no longer exist are dropped from the
index as they are met. The chosen directory is recorded as a visit and
remembered for the query.

In the picker, Up/Down, Ctrl-N/Ctrl-P and Ctrl-J move the selection, Enter
picks, Esc or Ctrl-C cancels. Editing keys follow readline: Left/Right,
Ctrl-A/E, Ctrl-B/F, Alt-B/F, Backspace, Delete, Ctrl-D, Ctrl-W, Ctrl-K,
Ctrl-U, Alt-D and Ctrl-Y. The popup opens below the prompt if it fits there,
otherwise above it.

`goto` prints the chosen path on standard output.

## Tags

```
goto tag add infra ~/code/infra      # the path must already be indexed
goto tag remove infra ~/code/infra
goto tag list
```

## Other commands

```
goto register .        # record a visit to a directory, adding it to the index
goto doctor            # show workspaces and index size
goto purge             # delete all data, asks for confirmation
goto purge --force
```

## Storage

Data is kept in an SQLite database in the platform's user data directory;
set `GOTO_DB_PATH` to use another file.

## What it does not do

`goto` cannot change the directory of the shell that runs it; it only prints
the path. No shell function or prompt hook is included: to jump, wrap `goto`
in a shell function of your own that `cd`s to its output, and call
`goto register "$PWD"` from your prompt hook if you want plain `cd` visits
counted.