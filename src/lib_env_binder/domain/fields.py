"""Field tag grammar and the per-field :class:`FieldSpec` derived from it.

Purpose
-------
Describe how a dataclass field is bound. Tags live in the field's
``metadata`` under the same keys Go struct tags use, so the grammar stays
identical:

* ``env``: ``key[,option...]``. The first segment is the lookup key or ``-``
  to force-ignore. Options are ``required``, ``expand``, ``init`` and ``unset``.
* ``envDefault``: fallback value when the key is absent or empty.
* ``envPrefix``: prefix applied to this field's key and propagated to nested
  dataclasses and lists of dataclasses.
* ``envSeparator``: element separator for lists and dicts (default ``,``).
* ``envKeyValSeparator``: key/value separator for dicts (default ``:``).

A field with neither an ``env`` nor an ``envPrefix`` tag is ignored.

Contents
--------
* Tag name constants.
* :class:`FieldSpec` – resolved tags for one field in one bind call.
* :func:`env_field` – ``dataclasses.field`` wrapper that writes the tags.
* :func:`parse_field_tags` – metadata → :class:`FieldSpec`.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Final, Mapping

ENV_TAG: Final[str] = "env"
DEFAULT_TAG: Final[str] = "envDefault"
PREFIX_TAG: Final[str] = "envPrefix"
SEPARATOR_TAG: Final[str] = "envSeparator"
KEY_VAL_SEPARATOR_TAG: Final[str] = "envKeyValSeparator"

REQUIRED_OPTION: Final[str] = "required"
EXPAND_OPTION: Final[str] = "expand"
INIT_OPTION: Final[str] = "init"
UNSET_OPTION: Final[str] = "unset"
IGNORE_KEY: Final[str] = "-"

DEFAULT_SEPARATOR: Final[str] = ","
DEFAULT_KEY_VAL_SEPARATOR: Final[str] = ":"


@dataclass(frozen=True)
class FieldSpec:
    """Binding behaviour resolved from one field's tags.

    ``key`` is ``prefix + own_key`` where ``prefix`` is the *enclosing*
    struct's prefix; ``field_prefix`` is this field's own ``envPrefix`` which
    only applies to its descendants.
    """

    own_key: str
    key: str = ""
    field_prefix: str = ""
    default: str = ""
    required: bool = False
    expand: bool = False
    init: bool = False
    unset: bool = False
    ignored: bool = False
    separator: str = DEFAULT_SEPARATOR
    key_val_separator: str = DEFAULT_KEY_VAL_SEPARATOR


def env_field(
    key: str | None = None,
    *,
    required: bool = False,
    expand: bool = False,
    init: bool = False,
    unset: bool = False,
    env_default: str | None = None,
    prefix: str | None = None,
    separator: str | None = None,
    key_val_separator: str | None = None,
    **field_kwargs: Any,
) -> Any:
    """Return a ``dataclasses.field`` carrying binding tags in its metadata.

    Remaining keyword arguments (``default``, ``default_factory``, ``repr`` …)
    are forwarded to :func:`dataclasses.field`.

    Examples
    --------
    >>> f = env_field("PORT", required=True, env_default="8080", default=0)
    >>> dict(f.metadata)
    {'env': 'PORT,required', 'envDefault': '8080'}
    >>> dict(env_field(prefix="DB_", default=None).metadata)
    {'envPrefix': 'DB_'}
    """

    metadata: dict[str, str] = dict(field_kwargs.pop("metadata", None) or {})
    options = [
        name
        for name, enabled in (
            (REQUIRED_OPTION, required),
            (EXPAND_OPTION, expand),
            (INIT_OPTION, init),
            (UNSET_OPTION, unset),
        )
        if enabled
    ]
    if key is not None or options:
        metadata[ENV_TAG] = ",".join([key or "", *options])
    for tag, value in (
        (DEFAULT_TAG, env_default),
        (PREFIX_TAG, prefix),
        (SEPARATOR_TAG, separator),
        (KEY_VAL_SEPARATOR_TAG, key_val_separator),
    ):
        if value is not None:
            metadata[tag] = value
    return dataclasses.field(metadata=metadata, **field_kwargs)


def parse_field_tags(metadata: Mapping[str, Any], prefix: str) -> FieldSpec:
    """Derive a :class:`FieldSpec` from field ``metadata`` under ``prefix``.

    Examples
    --------
    >>> spec = parse_field_tags({"env": "URL,expand,required", "envDefault": "x"}, "APP_")
    >>> spec.key, spec.expand, spec.required, spec.default
    ('APP_URL', True, True, 'x')
    >>> parse_field_tags({"env": "-"}, "").ignored
    True
    >>> parse_field_tags({}, "").ignored
    True
    """

    has_prefix = PREFIX_TAG in metadata
    has_env = ENV_TAG in metadata
    own_key, *options = str(metadata.get(ENV_TAG, "")).split(",")

    if (own_key == IGNORE_KEY or not has_env) and not has_prefix:
        return FieldSpec(own_key=own_key, ignored=True)

    return FieldSpec(
        own_key=own_key,
        key=prefix + own_key,
        field_prefix=str(metadata.get(PREFIX_TAG, "")),
        default=str(metadata.get(DEFAULT_TAG, "")),
        required=REQUIRED_OPTION in options,
        expand=EXPAND_OPTION in options,
        init=INIT_OPTION in options,
        unset=UNSET_OPTION in options,
        separator=str(metadata.get(SEPARATOR_TAG) or DEFAULT_SEPARATOR),
        key_val_separator=str(metadata.get(KEY_VAL_SEPARATOR_TAG) or DEFAULT_KEY_VAL_SEPARATOR),
    )
