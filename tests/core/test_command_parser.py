# tests/core/test_command_parser.py
from modscan_shell.core.parser import parse_command_line


def test_parse_simple_command():
    assert parse_command_line("nav ls") == [("nav", ["ls"], None)]


def test_parse_command_with_arguments():
    result = parse_command_line("classify /src/tree --fields GroupOwner,type --workers 4")
    assert result == [("classify", ["/src/tree", "--fields", "GroupOwner,type", "--workers", "4"], None)]


def test_parse_sequential_operator():
    assert parse_command_line("classify /a ; schema /a") == [
        ("classify", ["/a"], None),
        ("schema", ["/a"], ";"),
    ]


def test_parse_conditional_operators():
    line = "classify /a && export classify -o out.csv || help"
    assert parse_command_line(line) == [
        ("classify", ["/a"], None),
        ("export", ["classify", "-o", "out.csv"], "&&"),
        ("help", [], "||"),
    ]


def test_parse_quoted_arguments():
    result = parse_command_line('nav cd "Board Support" ; config set debug.level "INFO"')
    assert result == [
        ("nav", ["cd", "Board Support"], None),
        ("config", ["set", "debug.level", "INFO"], ";"),
    ]


def test_parse_unbalanced_quote_falls_back_to_split():
    assert parse_command_line('nav cd "open') == [("nav", ["cd", '"open'], None)]


def test_parse_empty_and_whitespace_input():
    assert parse_command_line("") == []
    assert parse_command_line("    ") == []
