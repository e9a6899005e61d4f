"""Parsing of the interactive shell commands."""

import sys
from enum import IntEnum

_LINE_LIMIT = 255
_NAME_LIMIT = 255


class Command(IntEnum):
    """Operations the shell understands."""

    INVALID = -1
    CD_FOLDER = 0
    CD_PARENT = 1
    LS_SELF = 2
    LS_FOLDER = 3
    CAT = 4
    TOUCH = 5
    VIM = 6
    MKDIR = 7
    RMDIR = 8
    RM = 9
    EXIT = 10


_SIMPLE = {
    "cat": Command.CAT,
    "touch": Command.TOUCH,
    "vim": Command.VIM,
    "mkdir": Command.MKDIR,
    "rmdir": Command.RMDIR,
    "rm": Command.RM,
    "exit": Command.EXIT,
}


def parse_command(text):
    """Split a command line into ``(Command, name)``.

    Only the first two whitespace-separated words count; the name is
    cut to 255 characters and is empty when missing.
    """
    words = text.split()
    if not words:
        return Command.INVALID, ""
    verb = words[0]
    name = words[1][:_NAME_LIMIT] if len(words) > 1 else ""

    if verb == "cd":
        return (Command.CD_PARENT if name == ".." else Command.CD_FOLDER), name
    if verb == "ls":
        return (Command.LS_SELF if name in (".", "") else Command.LS_FOLDER), name
    return _SIMPLE.get(verb, Command.INVALID), name


def input_command(stream=None):
    """Read one line from ``stream`` (standard input by default) and parse it."""
    source = sys.stdin if stream is None else stream
    line = source.readline(_LINE_LIMIT)
    return parse_command(line.split("\n", 1)[0])