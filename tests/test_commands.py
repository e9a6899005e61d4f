import io

import pytest

from clusterfs.commands import Command, input_command, parse_command


@pytest.mark.parametrize(
    "text, expected",
    [
        ("cd docs", (Command.CD_FOLDER, "docs")),
        ("cd ..", (Command.CD_PARENT, "..")),
        ("cd", (Command.CD_FOLDER, "")),
        ("ls", (Command.LS_SELF, "")),
        ("ls .", (Command.LS_SELF, ".")),
        ("ls docs", (Command.LS_FOLDER, "docs")),
        ("cat a.txt", (Command.CAT, "a.txt")),
        ("touch a.txt", (Command.TOUCH, "a.txt")),
        ("vim a.txt", (Command.VIM, "a.txt")),
        ("mkdir docs", (Command.MKDIR, "docs")),
        ("rmdir docs", (Command.RMDIR, "docs")),
        ("rm a.txt", (Command.RM, "a.txt")),
        ("exit", (Command.EXIT, "")),
        ("format disk", (Command.INVALID, "disk")),
        ("", (Command.INVALID, "")),
        ("   ", (Command.INVALID, "")),
    ],
)
def test_parse_command(text, expected):
    assert parse_command(text) == expected


def test_extra_words_are_ignored():
    assert parse_command("  mkdir   docs  more words ") == (Command.MKDIR, "docs")


def test_name_is_truncated():
    _, name = parse_command("touch " + "a" * 300)
    assert name == "a" * 255


@pytest.mark.parametrize(
    "text, code",
    [
        ("cd docs", 0),
        ("cd ..", 1),
        ("ls", 2),
        ("ls docs", 3),
        ("cat a.txt", 4),
        ("touch a.txt", 5),
        ("vim a.txt", 6),
        ("mkdir docs", 7),
        ("rmdir docs", 8),
        ("rm a.txt", 9),
        ("exit", 10),
        ("bogus", -1),
    ],
)
def test_command_codes_match_shell_protocol(text, code):
    command, _ = parse_command(text)
    assert command == code


def test_input_command_reads_lines_in_order():
    stream = io.StringIO("mkdir docs\ncd docs\nls\n")
    assert input_command(stream) == (Command.MKDIR, "docs")
    assert input_command(stream) == (Command.CD_FOLDER, "docs")
    assert input_command(stream) == (Command.LS_SELF, "")


def test_input_command_at_end_of_stream():
    assert input_command(io.StringIO("")) == (Command.INVALID, "")