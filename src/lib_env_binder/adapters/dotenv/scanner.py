"""Character-level helpers shared by the dotenv tokenizer.

The tokenizer walks decoded text one character at a time. These helpers stay
pure and allocation-free apart from their results.

``is_space`` deliberately treats ``\\n`` as structural: newlines delimit
entries, so they are never trimmed away from keys or values. Only
:func:`index_of_non_space` steps over them, because it exists to skip blank
lines between entries.
"""

from __future__ import annotations

from typing import Final

from ...domain.errors import InvalidKey

_SPACES: Final[frozenset[str]] = frozenset("\t\v\f\r \x85\xa0")


def is_space(ch: str) -> bool:
    """Return ``True`` for inline whitespace; ``\\n`` is not whitespace here.

    Examples
    --------
    >>> is_space(" "), is_space("\\t"), is_space("\\xa0"), is_space("\\n")
    (True, True, True, False)
    """

    return ch in _SPACES


def index_of_non_space(src: str) -> int:
    """Return the index of the first character that is neither space nor newline.

    Examples
    --------
    >>> index_of_non_space("  \\n\\tKEY=1")
    4
    >>> index_of_non_space(" \\n ")
    -1
    """

    for index, ch in enumerate(src):
        if ch != "\n" and ch not in _SPACES:
            return index
    return -1


def index_of(src: str, ch: str) -> int:
    """Return the first index of ``ch`` in ``src`` or ``-1``."""

    return src.find(ch)


def index_of_any(src: str, *chars: str) -> int:
    """Return the earliest index of any of ``chars`` in ``src`` or ``-1``.

    Examples
    --------
    >>> index_of_any("value\\r\\nnext", "\\n", "\\r")
    5
    >>> index_of_any("value", "\\n", "\\r")
    -1
    """

    for index, ch in enumerate(src):
        if ch in chars:
            return index
    return -1


def trim_left_space(src: str) -> str:
    """Drop leading :func:`is_space` characters."""

    start = 0
    while start < len(src) and src[start] in _SPACES:
        start += 1
    return src[start:]


def trim_right_space(src: str) -> str:
    """Drop trailing :func:`is_space` characters."""

    end = len(src)
    while end > 0 and src[end - 1] in _SPACES:
        end -= 1
    return src[:end]


def trim_space(src: str) -> str:
    """Drop :func:`is_space` characters from both ends, keeping newlines.

    Examples
    --------
    >>> trim_space("\\t value \\xa0")
    'value'
    """

    return trim_right_space(trim_left_space(src))


def validate_key(key: str) -> None:
    """Raise :class:`InvalidKey` unless ``key`` starts with an ASCII uppercase letter.

    Examples
    --------
    >>> validate_key("DATABASE_URL")
    >>> validate_key("database_url")
    Traceback (most recent call last):
    ...
    lib_env_binder.domain.errors.InvalidKey: invalid key 'database_url': must start with a capital letter
    """

    if not key or not ("A" <= key[0] <= "Z"):
        raise InvalidKey(f"invalid key {key!r}: must start with a capital letter")
