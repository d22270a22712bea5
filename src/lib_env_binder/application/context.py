"""Bind options and the per-call context threaded through the binder.

Purpose
-------
Carry the environment mapping, the current key prefix, and the values bound so
far through one recursive bind. Each level of recursion receives a copy with a
longer prefix; the ``raw_values`` dict is shared by reference across the whole
call tree so ``${NAME}`` expansion can see sibling and ancestor fields.

Contents
--------
* :class:`Options` – public knobs: mapping and root prefix.
* :class:`BindContext` – internal per-call state with prefix helpers,
  positional index discovery, variable expansion, and the ``on_unset`` hook
  the composition root wires to the process environment.
* :func:`expand` – ``$NAME`` / ``${NAME}`` substitution.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Callable, Final, Mapping

from ..domain.errors import ExpansionError

_REFERENCE: Final[re.Pattern[str]] = re.compile(r"\$(?:\{([^}]*)\}|([A-Za-z0-9_]+))")


@dataclass(frozen=True)
class Options:
    """Options for :func:`lib_env_binder.parse_with_options`.

    Attributes
    ----------
    env:
        Flat mapping of variable names to values. ``None`` means a snapshot of
        the process environment.
    prefix:
        Prefix prepended to every key of the root dataclass.
    """

    env: Mapping[str, str] | None = None
    prefix: str = ""


@dataclass(frozen=True)
class BindContext:
    """State for one top-level bind call."""

    env: Mapping[str, str]
    prefix: str = ""
    raw_values: dict[str, str] = field(default_factory=dict)
    on_unset: Callable[[str], None] | None = None

    def with_prefix(self, prefix: str) -> BindContext:
        """Return a copy whose prefix is extended by ``prefix``."""

        return replace(self, prefix=self.prefix + prefix)

    def with_trailing_underscore(self) -> BindContext:
        """Return a copy whose non-empty prefix ends with ``_``.

        Examples
        --------
        >>> BindContext(env={}, prefix="SERVERS").with_trailing_underscore().prefix
        'SERVERS_'
        >>> BindContext(env={}).with_trailing_underscore().prefix
        ''
        """

        if self.prefix and not self.prefix.endswith("_"):
            return replace(self, prefix=self.prefix + "_")
        return self

    def with_slice_index(self, index: int) -> BindContext:
        """Return a copy addressing element ``index``: ``PREFIX_`` → ``PREFIX_3_``."""

        return replace(self, prefix=f"{self.prefix}{index}_")

    def indices(self) -> set[int]:
        """Collect the element indices present under the current prefix.

        A key qualifies when it reads ``prefix + <digits> + "_" + rest`` with a
        non-empty ``rest``.

        Examples
        --------
        >>> ctx = BindContext(env={"P_0_FOO": "a", "P_3_BAR_BAZ": "b", "P_X_FOO": "c", "P_1_": "d"}, prefix="P_")
        >>> sorted(ctx.indices())
        [0, 3]
        """

        found: set[int] = set()
        for key in self.env:
            if not key.startswith(self.prefix):
                continue
            head, separator, rest = key[len(self.prefix) :].partition("_")
            if separator and rest and head.isascii() and head.isdigit():
                found.add(int(head))
        return found

    def lookup(self, name: str) -> str:
        """Return the expanded value for ``name``: bound fields first, then the mapping.

        Examples
        --------
        >>> ctx = BindContext(env={"HOST": "localhost", "URL": "http://${HOST}"})
        >>> ctx.lookup("URL")
        'http://localhost'
        """

        return self._lookup(name, frozenset())

    def expand(self, text: str) -> str:
        """Expand ``$NAME`` and ``${NAME}`` references in ``text``."""

        return expand(text, self.lookup)

    def _lookup(self, name: str, resolving: frozenset[str]) -> str:
        if name in resolving:
            raise ExpansionError(f"cyclic variable expansion for {name!r}")
        value = self.raw_values.get(name) or self.env.get(name, "")
        nested = resolving | {name}
        return expand(value, lambda inner: self._lookup(inner, nested))


def expand(text: str, mapping: Callable[[str], str]) -> str:
    """Replace ``$NAME`` and ``${NAME}`` in ``text`` with ``mapping(NAME)``.

    Unknown names expand to whatever ``mapping`` returns (usually ``""``).

    Examples
    --------
    >>> expand("http://${HOST}:$PORT/x", {"HOST": "h", "PORT": "80"}.get)
    'http://h:80/x'
    """

    return _REFERENCE.sub(lambda match: mapping(match.group(1) or match.group(2) or "") or "", text)
