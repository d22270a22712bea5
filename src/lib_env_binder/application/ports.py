"""Application-layer ports describing the seams callers can plug into.

Purpose
-------
Define the structural contracts the binder and the composition root rely on
so custom types, file access, and side-effecting consumers can be supplied
without the library knowing their concrete implementations.

Contents
--------
* :class:`TextUnmarshaler` – a type that converts an environment string into
  itself, bypassing the built-in parser tables.
* :class:`FileOpener` – opens a ``.env`` path for binary reading.
* :class:`PairCallback` – receives each parsed ``KEY``/``VALUE`` pair.
* :class:`EnvLoader` – produces the environment mapping the binder consumes.
"""

from __future__ import annotations

from typing import BinaryIO, Mapping, Protocol, runtime_checkable


@runtime_checkable
class TextUnmarshaler(Protocol):
    """Populate an existing instance from its textual form.

    Why
    ----
    Types such as IP ranges or log levels have their own grammar. Implementing
    ``unmarshal_text`` lets them take part in binding, as scalars or as list
    elements. The binder creates the instance with a no-argument call when the
    field is unset. Failures should raise :class:`ValueError`.
    """

    def unmarshal_text(self, text: str) -> None:
        """Replace this instance's state with the parsed ``text``."""


class FileOpener(Protocol):
    """Open *path* for binary reading; the result is used as a context manager."""

    def __call__(self, path: str) -> BinaryIO:
        ...


class PairCallback(Protocol):
    """Consume one parsed pair; raising aborts the remaining pairs."""

    def __call__(self, key: str, value: str) -> None:
        ...


class EnvLoader(Protocol):
    """Materialise a flat environment mapping."""

    def load(self) -> Mapping[str, str]:
        """Return a snapshot mapping of variable names to values."""
