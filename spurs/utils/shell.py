"""Shell quoting utilities."""

import shlex


def escape_for_bash(s: str) -> str:
    """Wrap `s` in single quotes so bash receives it as one argument.

    Embedded single quotes are closed, emitted as `"'"`, and reopened:

        echo '$X="a b"' | grep a   ->   'echo '"'"'$X="a b"'"'"' | grep a'

    which is what `bash -c` needs when the text travels through ssh. Unlike
    `shlex.quote`, the result is always quoted, even for plain words.
    """
    return "'" + s.replace("'", "'\"'\"'") + "'"


def quote_path(path: str) -> str:
    """Safely quote a path for shell commands.

    Args:
        path: File system path to quote

    Returns:
        Shell-safe quoted path
    """
    return shlex.quote(path)


def quote_arg(arg: str) -> str:
    """Safely quote a shell argument.

    Args:
        arg: Argument to quote

    Returns:
        Shell-safe quoted argument
    """
    return shlex.quote(arg)
