"""Type parser registry.

Purpose
-------
Map a Python type to the function that turns an environment string into a
value of that type. Two immutable tables are built at import time and are safe
to share across threads:

* the **kind table** covers ``bool``, ``int``, ``float``, ``str`` and the
  fixed-width numeric aliases (:data:`Int8` … :data:`Uint64`, :data:`Float32`);
* the **named table** covers types with their own grammar:
  :class:`datetime.timedelta` (Go duration syntax) and
  :class:`zoneinfo.ZoneInfo` (IANA names).

Lookups consult the named table first, then the kind table by exact type, then
the kind table along the type's MRO (``class Port(int)`` resolves to ``int``)
or through a ``NewType`` supertype chain. A miss returns ``None``; callers
decide whether that is fatal.

Every parser raises :class:`ValueError` on malformed input.
"""

from __future__ import annotations

import re
from datetime import timedelta
from fractions import Fraction
from types import MappingProxyType
from typing import Any, Callable, Final, Mapping, NewType
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

ParserFunc = Callable[[str], Any]

Int8 = NewType("Int8", int)
Int16 = NewType("Int16", int)
Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)
Uint = NewType("Uint", int)
Uint8 = NewType("Uint8", int)
Uint16 = NewType("Uint16", int)
Uint32 = NewType("Uint32", int)
Uint64 = NewType("Uint64", int)
Float32 = NewType("Float32", float)

_TRUE_LITERALS: Final[frozenset[str]] = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_LITERALS: Final[frozenset[str]] = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_SIGNED_PATTERN: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_PATTERN: Final[re.Pattern[str]] = re.compile(r"[0-9]+")
_FLOAT32_MAX: Final[float] = 3.4028234663852886e38

_DURATION_UNITS: Final[Mapping[str, int]] = MappingProxyType(
    {
        "ns": 1,
        "us": 1_000,
        "µs": 1_000,
        "μs": 1_000,
        "ms": 1_000_000,
        "s": 1_000_000_000,
        "m": 60 * 1_000_000_000,
        "h": 3600 * 1_000_000_000,
    }
)
_DURATION_PART: Final[re.Pattern[str]] = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]*)")
_MAX_DURATION_NS: Final[int] = 2**63 - 1


def parse_bool(text: str) -> bool:
    """Parse the literals Go's ``strconv.ParseBool`` accepts.

    Examples
    --------
    >>> parse_bool("T"), parse_bool("false"), parse_bool("1")
    (True, False, True)
    """

    if text in _TRUE_LITERALS:
        return True
    if text in _FALSE_LITERALS:
        return False
    raise ValueError(f"invalid syntax for bool: {text!r}")


def parse_int(text: str) -> int:
    """Parse a strict base-10 integer with no width limit.

    Examples
    --------
    >>> parse_int("-42")
    -42
    >>> parse_int("4_2")
    Traceback (most recent call last):
    ...
    ValueError: invalid syntax for int: '4_2'
    """

    if not _SIGNED_PATTERN.fullmatch(text):
        raise ValueError(f"invalid syntax for int: {text!r}")
    return int(text)


def _signed(bits: int) -> ParserFunc:
    low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1

    def parse(text: str) -> int:
        value = parse_int(text)
        if not low <= value <= high:
            raise ValueError(f"value out of range for int{bits}: {text!r}")
        return value

    return parse


def _unsigned(bits: int) -> ParserFunc:
    high = (1 << bits) - 1

    def parse(text: str) -> int:
        if not _UNSIGNED_PATTERN.fullmatch(text):
            raise ValueError(f"invalid syntax for uint{bits}: {text!r}")
        value = int(text)
        if value > high:
            raise ValueError(f"value out of range for uint{bits}: {text!r}")
        return value

    return parse


def parse_float(text: str) -> float:
    """Parse a float; surrounding whitespace and underscores are rejected."""

    if text != text.strip() or "_" in text:
        raise ValueError(f"invalid syntax for float: {text!r}")
    try:
        return float(text)
    except ValueError as exc:
        raise ValueError(f"invalid syntax for float: {text!r}") from exc


def parse_float32(text: str) -> float:
    """Parse a float that must fit the single-precision range."""

    value = parse_float(text)
    if abs(value) > _FLOAT32_MAX and value not in (float("inf"), float("-inf")):
        raise ValueError(f"value out of range for float32: {text!r}")
    return value


def parse_string(text: str) -> str:
    return text


def parse_duration(text: str) -> timedelta:
    """Parse Go duration syntax such as ``1h30m``, ``300ms`` or ``-1.5h``.

    Calendar days are not a fixed duration, so ``d`` is rejected with a hint.

    Examples
    --------
    >>> parse_duration("1h30m")
    datetime.timedelta(seconds=5400)
    >>> parse_duration("1d")
    Traceback (most recent call last):
    ...
    ValueError: use '24h' instead of '1d' for 24 hours: time: unknown unit "d" in duration "1d"
    """

    original = text
    negative = False
    if text[:1] in ("+", "-"):
        negative = text[0] == "-"
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f'time: invalid duration "{original}"')

    total = Fraction(0)
    position = 0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        whole, fraction, unit = match.group(1), match.group(2), match.group(3)
        if not whole and not fraction:
            raise ValueError(f'time: invalid duration "{original}"')
        if not unit:
            raise ValueError(f'time: missing unit in duration "{original}"')
        if unit not in _DURATION_UNITS:
            error = f'time: unknown unit "{unit}" in duration "{original}"'
            if unit == "d":
                error = f"use '24h' instead of '1d' for 24 hours: {error}"
            raise ValueError(error)
        number = Fraction(int(whole or "0"))
        if fraction:
            number += Fraction(int(fraction), 10 ** len(fraction))
        total += number * _DURATION_UNITS[unit]
        position = match.end()

    nanoseconds = int(total)
    if nanoseconds > _MAX_DURATION_NS:
        raise ValueError(f'time: invalid duration "{original}"')
    microseconds = nanoseconds // 1000
    return timedelta(microseconds=-microseconds if negative else microseconds)


def parse_location(text: str) -> ZoneInfo:
    """Resolve an IANA timezone name such as ``Europe/London``."""

    try:
        return ZoneInfo(text)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise ValueError(f"unable to parse Location: {exc}") from exc


KIND_PARSERS: Final[Mapping[Any, ParserFunc]] = MappingProxyType(
    {
        bool: parse_bool,
        int: parse_int,
        Int8: _signed(8),
        Int16: _signed(16),
        Int32: _signed(32),
        Int64: _signed(64),
        Uint: _unsigned(64),
        Uint8: _unsigned(8),
        Uint16: _unsigned(16),
        Uint32: _unsigned(32),
        Uint64: _unsigned(64),
        float: parse_float,
        Float32: parse_float32,
        str: parse_string,
    }
)

NAMED_PARSERS: Final[Mapping[Any, ParserFunc]] = MappingProxyType(
    {
        timedelta: parse_duration,
        ZoneInfo: parse_location,
    }
)


def get_parser(tp: Any) -> ParserFunc | None:
    """Return the parser for ``tp``: named table first, then the kind table.

    Examples
    --------
    >>> get_parser(timedelta) is parse_duration
    True
    >>> get_parser(bool) is parse_bool
    True
    >>> get_parser(list) is None
    True
    """

    parser = NAMED_PARSERS.get(tp)
    if parser is not None:
        return parser
    return get_kind_parser(tp)


def get_kind_parser(tp: Any) -> ParserFunc | None:
    """Return the kind-table parser for ``tp``, following subclasses and ``NewType``.

    Examples
    --------
    >>> class Port(int):
    ...     pass
    >>> get_kind_parser(Port) is parse_int
    True
    >>> get_kind_parser(timedelta) is None
    True
    """

    while tp is not None:
        parser = KIND_PARSERS.get(tp)
        if parser is not None:
            return parser
        if isinstance(tp, type):
            for base in tp.__mro__[1:]:
                parser = KIND_PARSERS.get(base)
                if parser is not None:
                    return parser
            return None
        tp = getattr(tp, "__supertype__", None)
    return None


def convert(value: Any, tp: Any) -> Any:
    """Convert a parsed kind value into the exact field type ``tp``.

    Kind types and ``NewType`` aliases pass through; subclasses such as
    ``IntEnum`` or ``class Port(int)`` are constructed from the parsed value.
    """

    if not isinstance(tp, type) or type(value) is tp:
        return value
    return tp(value)


__all__ = [
    "Float32",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "KIND_PARSERS",
    "NAMED_PARSERS",
    "ParserFunc",
    "Uint",
    "Uint8",
    "Uint16",
    "Uint32",
    "Uint64",
    "convert",
    "get_kind_parser",
    "get_parser",
    "parse_bool",
    "parse_duration",
    "parse_float",
    "parse_int",
    "parse_location",
]
