"""Process environment adapter.

Purpose
-------
Give the binder a plain mapping instead of live ``os.environ`` access, and
own the only two places the library touches the process environment: the
best-effort ``unset`` side effect and the ``setenv`` callback.

Contents
--------
* :class:`DefaultEnvLoader` – snapshot of ``os.environ`` (or an injected
  mapping).
* :func:`to_map` – ``KEY=VALUE`` strings → mapping.
* :func:`unset_variable` – remove a variable, logging instead of raising.
* :func:`setenv` – ready-made callback for :func:`lib_env_binder.parse_files`.
"""

from __future__ import annotations

import os
from typing import Iterable, Mapping, MutableMapping

from ...observability import log_debug


class DefaultEnvLoader:
    """Snapshot environment variables for one bind call."""

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        """Initialise the loader with a specific ``environ`` mapping for testability.

        Parameters
        ----------
        environ:
            Mapping to read from. Defaults to :data:`os.environ`.
        """

        self._environ = os.environ if environ is None else environ

    def load(self) -> dict[str, str]:
        """Return a copy of the environment so later mutations do not leak in.

        Examples
        --------
        >>> DefaultEnvLoader(environ={"HOST": "localhost"}).load()
        {'HOST': 'localhost'}
        """

        snapshot = dict(self._environ)
        log_debug("env_variables_loaded", source="env", path=None, keys=len(snapshot))
        return snapshot


def to_map(entries: Iterable[str]) -> dict[str, str]:
    """Split ``KEY=VALUE`` entries at the first ``=``; entries without one are dropped.

    Examples
    --------
    >>> to_map(["A=1", "B=x=y", "BROKEN", "EMPTY="])
    {'A': '1', 'B': 'x=y', 'EMPTY': ''}
    """

    result: dict[str, str] = {}
    for entry in entries:
        key, separator, value = entry.partition("=")
        if separator:
            result[key] = value
    return result


def unset_variable(key: str, environ: MutableMapping[str, str] | None = None) -> None:
    """Remove ``key`` from the process environment without ever raising.

    A failed unset does not affect values that are already bound, so it is
    only logged.
    """

    target = os.environ if environ is None else environ
    try:
        target.pop(key, None)
    except (OSError, TypeError) as exc:
        log_debug("env_unset_failed", source="env", path=None, key=key, error=str(exc))


def setenv(key: str, value: str) -> None:
    """Set ``key`` in the process environment; usable as a ``parse_files`` callback."""

    os.environ[key] = value
