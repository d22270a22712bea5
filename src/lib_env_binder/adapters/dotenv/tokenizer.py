"""Line/value tokenizer for ``.env`` buffers.

Purpose
-------
Extract one ``KEY``/``VALUE`` pair at a time from decoded ``.env`` text. No
state survives between calls: each function receives the remaining text and
hands back what is left after it, so the file parser drives the loop.

Contents
--------
* :class:`ParsedToken` – ``(key, value, remainder)`` produced per call.
* :func:`get_start` – skip blank lines and full-line comments.
* :func:`get_key` – read ``KEY`` up to ``=`` or ``:``.
* :func:`get_value` – read a quoted or unquoted value.
* :func:`get_key_value` – compose the two.
* :func:`unescape_double_quoted` – resolve escapes inside ``"..."``.

Grammar
-------
``KEY=VALUE`` or ``KEY:VALUE`` per line, keys starting with an uppercase
letter. Unquoted values end at the line break or at a ``#`` preceded by
whitespace. Single quotes are literal; double quotes honour ``\\n``, ``\\r``,
``\\\\`` and ``\\X`` escapes. A backslash inside either quote style stops the
next character from closing the value.
"""

from __future__ import annotations

from typing import Final, NamedTuple

from ...domain.errors import InvalidKey, UnterminatedQuote
from .scanner import (
    index_of,
    index_of_any,
    index_of_non_space,
    is_space,
    trim_left_space,
    trim_right_space,
    trim_space,
    validate_key,
)

CHAR_COMMENT: Final[str] = "#"
CHAR_SINGLE_QUOTE: Final[str] = "'"
CHAR_DOUBLE_QUOTE: Final[str] = '"'
KEY_SEPARATORS: Final[tuple[str, ...]] = ("=", ":")

_ESCAPES: Final[dict[str, str]] = {"n": "\n", "r": "\r"}


class ParsedToken(NamedTuple):
    """One extracted pair plus the text still to be tokenized."""

    key: str
    value: str
    remainder: str


def get_start(src: str) -> str | None:
    """Return ``src`` advanced to the next entry, or ``None`` when nothing is left.

    Examples
    --------
    >>> get_start("   # comment\\n   # another\\nKEY=value")
    'KEY=value'
    >>> get_start("  \\t\\n# only a comment") is None
    True
    """

    while True:
        pos = index_of_non_space(src)
        if pos == -1:
            return None
        src = src[pos:]
        if src[0] != CHAR_COMMENT:
            return src
        pos = index_of(src, "\n")
        if pos == -1:
            return None
        src = src[pos:]


def get_key(src: str) -> tuple[str, str]:
    """Return ``(key, remainder)`` where ``remainder`` starts after the separator.

    The separator is searched on the current line only.

    Examples
    --------
    >>> get_key(" OPTION_A : 1")
    ('OPTION_A', ' 1')
    >>> get_key("KEY value")
    Traceback (most recent call last):
    ...
    lib_env_binder.domain.errors.InvalidKey: key-value separator not found in 'KEY value'
    """

    src = trim_left_space(src)
    end_of_line = index_of(src, "\n")
    line = src if end_of_line == -1 else src[:end_of_line]
    separator = index_of_any(line, *KEY_SEPARATORS)
    if separator == -1:
        raise InvalidKey(f"key-value separator not found in {line!r}")
    key = trim_right_space(src[:separator])
    validate_key(key)
    return key, src[separator + 1 :]


def get_value(src: str) -> tuple[str, str]:
    """Return ``(value, remainder)`` for the text following a key separator.

    Examples
    --------
    >>> get_value(" bar # trailing comment\\nNEXT=1")
    ('bar', '\\nNEXT=1')
    >>> get_value(' "bar#baz" # comment')
    ('bar#baz', ' # comment')
    """

    stripped = trim_left_space(src)
    if stripped and stripped[0] in (CHAR_DOUBLE_QUOTE, CHAR_SINGLE_QUOTE):
        return _get_quoted_value(stripped, stripped[0])
    return _get_unquoted_value(src)


def get_key_value(src: str) -> ParsedToken:
    """Extract the next pair, propagating the first tokenizer error.

    Examples
    --------
    >>> get_key_value("FOO='bar'\\nBAZ=1")
    ParsedToken(key='FOO', value='bar', remainder='\\nBAZ=1')
    """

    key, src = get_key(src)
    value, src = get_value(src)
    return ParsedToken(key, value, src)


def unescape_double_quoted(value: str) -> str:
    """Resolve backslash escapes the way double-quoted values expect.

    Examples
    --------
    >>> unescape_double_quoted(r"bar\\\\\\n\\ b\\az")
    'bar\\\\\\n baz'
    """

    chars: list[str] = []
    index = 0
    while index < len(value):
        ch = value[index]
        if ch == "\\" and index + 1 < len(value):
            following = value[index + 1]
            chars.append(_ESCAPES.get(following, following))
            index += 2
            continue
        chars.append(ch)
        index += 1
    return "".join(chars)


def _get_quoted_value(src: str, quote: str) -> tuple[str, str]:
    """Read a value opened by ``quote`` at ``src[0]`` up to its closing quote."""

    index = 1
    while index < len(src):
        ch = src[index]
        if ch == "\\":
            index += 2
            continue
        if ch == quote:
            value = src[1:index]
            if quote == CHAR_DOUBLE_QUOTE:
                value = unescape_double_quoted(value)
            return value, src[index + 1 :]
        index += 1
    raise UnterminatedQuote(f"unterminated closing quote {quote} in {src.splitlines()[0]!r}")


def _get_unquoted_value(src: str) -> tuple[str, str]:
    """Read up to the end of line, dropping a whitespace-led ``#`` comment."""

    end_of_line = index_of_any(src, "\n", "\r")
    if end_of_line == -1:
        end_of_line = len(src)
    line, remainder = src[:end_of_line], src[end_of_line:]

    end_of_value = len(line)
    for index in range(1, len(line)):
        if line[index] == CHAR_COMMENT and is_space(line[index - 1]):
            end_of_value = index
            break
    return trim_space(line[:end_of_value]), remainder
