"""Tokenizer tests covering the ``.env`` line grammar.

The valid table mirrors the forms operators write by hand: both key
separators, both quote styles, escapes, inline comments, and stray
whitespace around keys.
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_env_binder.adapters.dotenv.default import parse_env_text
from lib_env_binder.adapters.dotenv.scanner import index_of_non_space, is_space, trim_space, validate_key
from lib_env_binder.adapters.dotenv.tokenizer import get_key_value, get_start, get_value, unescape_double_quoted
from lib_env_binder.domain.errors import InputError, InvalidKey, UnterminatedQuote

VALID_LINES = {
    "FOO=bar": ("FOO", "bar"),
    "FOO =bar": ("FOO", "bar"),
    "FOO= bar": ("FOO", "bar"),
    'FOO="bar"': ("FOO", "bar"),
    "FOO='bar'": ("FOO", "bar"),
    'FOO="escaped\\"bar"': ("FOO", 'escaped"bar'),
    "FOO=\"'d'\"": ("FOO", "'d'"),
    "OPTION_A: 1": ("OPTION_A", "1"),
    "OPTION_A: Foo=bar": ("OPTION_A", "Foo=bar"),
    "OPTION_A=1:B": ("OPTION_A", "1:B"),
    'FOO="bar\\nbaz"': ("FOO", "bar\nbaz"),
    "FOO=foobar=": ("FOO", "foobar="),
    "FOO=bar ": ("FOO", "bar"),
    "KEY=value value": ("KEY", "value value"),
    "FOO=bar # this is foo": ("FOO", "bar"),
    'FOO="bar#baz" # comment': ("FOO", "bar#baz"),
    "FOO='bar#baz' # comment": ("FOO", "bar#baz"),
    'FOO="bar#baz#bang" # comment': ("FOO", "bar#baz#bang"),
    'FOO="ba#r"': ("FOO", "ba#r"),
    "FOO='ba#r'": ("FOO", "ba#r"),
    'FOO="bar\\n\\ b\\az"': ("FOO", "bar\n baz"),
    'FOO="bar\\\\\\n\\ b\\az"': ("FOO", "bar\\\n baz"),
    'FOO="bar\\\\r\\ b\\az"': ("FOO", "bar\\r baz"),
    'FOO="bar\\\\\\r\\ b\\az"': ("FOO", "bar\\\r baz"),
    " KEY =value": ("KEY", "value"),
    "   KEY=value": ("KEY", "value"),
    "\tKEY=value": ("KEY", "value"),
    "FOO.BAR=foobar": ("FOO.BAR", "foobar"),
    "FOO=a#b": ("FOO", "a#b"),
    "FOO='it\\'s'": ("FOO", "it\\'s"),
}

INVALID_LINES = ['="value"', "=value", "value", "\n", "\r\n", "\t\t", "# Comment", "\t # comment", "lower=1", "1KEY=x"]


@pytest.mark.parametrize(("line", "expected"), list(VALID_LINES.items()))
def test_get_key_value_valid_lines(line: str, expected: tuple[str, str]) -> None:
    key, value, _ = get_key_value(line)
    assert (key, value) == expected


@pytest.mark.parametrize("line", INVALID_LINES)
def test_get_key_value_invalid_lines(line: str) -> None:
    with pytest.raises(InvalidKey):
        get_key_value(line)


@pytest.mark.parametrize("line", ['FOO="bar', "FOO='bar", 'FOO="bar\\"'])
def test_unterminated_quotes(line: str) -> None:
    with pytest.raises(UnterminatedQuote):
        get_key_value(line)


def test_key_separator_is_searched_on_current_line_only() -> None:
    with pytest.raises(InvalidKey):
        get_key_value("KEY\nOTHER=1")


def test_get_value_returns_remainder_after_closing_quote() -> None:
    assert get_value("'a b' # c\nNEXT=1") == ("a b", " # c\nNEXT=1")


def test_get_start_skips_comment_block() -> None:
    assert get_start("\n\n  # one\n# two\n\nKEY=1") == "KEY=1"
    assert get_start("") is None
    assert get_start("# trailing comment without newline") is None


def test_unescape_double_quoted_keeps_lone_trailing_backslash() -> None:
    assert unescape_double_quoted("a\\") == "a\\"
    assert unescape_double_quoted("\\r\\n\\t") == "\r\nt"


def test_scanner_helpers() -> None:
    assert is_space("\v") and is_space("\x85")
    assert not is_space("\n")
    assert index_of_non_space("") == -1
    assert trim_space(" \n ") == "\n"
    validate_key("Z")
    with pytest.raises(InvalidKey):
        validate_key("")


def test_parse_env_text_full_file() -> None:
    text = (
        "# database settings\n"
        "DB_HOST=localhost\n"
        "\n"
        "DB_PASSWORD='s3cr#t'  # quoted hash survives\n"
        "EMPTY=\n"
        'GREETING="hello\n'
        'world"\n'
        "PORT: 5432\n"
        "DB_HOST=override\n"
    )
    assert parse_env_text(text) == {
        "DB_HOST": "override",
        "DB_PASSWORD": "s3cr#t",
        "EMPTY": "",
        "GREETING": "hello\nworld",
        "PORT": "5432",
    }


def test_parse_env_text_rejects_garbage_after_quote() -> None:
    with pytest.raises(InputError):
        parse_env_text('FOO="bar" junk\n')


KEYS = st.text(min_size=1, max_size=8, alphabet=st.sampled_from("ABCDEFGHIJKLMNOPQRSTUVWXYZ_0123456789")).filter(
    lambda key: "A" <= key[0] <= "Z"
)
PLAIN_VALUES = st.text(max_size=12, alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz0123456789-_./"))


@given(st.dictionaries(KEYS, PLAIN_VALUES, min_size=1, max_size=6), st.sampled_from(["=", ": ", " = "]))
def test_parse_env_text_handles_random_files(entries: dict[str, str], separator: str) -> None:
    text = "\n".join(f"{key}{separator}{value}" for key, value in entries.items())
    assert parse_env_text(text) == entries


@given(st.dictionaries(KEYS, st.text(max_size=12, alphabet=st.sampled_from("abc #=:\"xyz")), min_size=1, max_size=4))
def test_single_quoted_values_are_literal(entries: dict[str, str]) -> None:
    text = "\n".join(f"{key}='{value}'" for key, value in entries.items())
    assert parse_env_text(text) == entries
