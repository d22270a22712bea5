"""Recursive struct binder.

Purpose
-------
Populate a dataclass graph from a flat environment mapping. Every field is
classified by its annotation into one of a small set of shapes and handled in
a fixed order:

1. ``_``-prefixed fields are skipped (unsettable).
2. A non-``None`` ``Optional[Dataclass]`` value is explored with its
   ``envPrefix`` before any tag logic applies.
3. Tags are resolved; a field without ``env`` and ``envPrefix`` is ignored.
4. The value is resolved from the mapping, the default, and expansion; the
   ``required`` check runs on the result.
5. A non-empty value of an ``unset`` field triggers the context's unset hook.
6. The value is converted: text unmarshalers first, then the parser
   registry, then ``list``/``dict`` splitting. A field that received a value
   but has no handler raises :class:`UnsupportedType`.
7. ``None`` ``Optional`` fields tagged ``init`` get a zero value.
8. Dataclass fields recurse with an extended prefix; ``list[Dataclass]``
   fields are rebuilt from positional keys (``PREFIX_<i>_FIELD``).

Contents
--------
* :func:`bind` – entry point for one dataclass instance.
* :func:`unwrap_optional` / :func:`zero_value` – annotation helpers.

System Role
-----------
Pure application logic: no I/O and no logging. The composition root builds the
:class:`BindContext` and maps it onto the process environment.
"""

from __future__ import annotations

import copy
import dataclasses
import types
from typing import Any, Union, get_args, get_origin, get_type_hints

from ..domain.errors import ConversionFailure, FormatError, InvalidTarget, RequiredMissing, UnsupportedType
from ..domain.fields import FieldSpec, parse_field_tags
from ..domain.parsers import ParserFunc, convert, get_kind_parser, get_parser
from .context import BindContext
from .ports import TextUnmarshaler


def bind(target: Any, context: BindContext) -> None:
    """Populate the dataclass instance ``target`` in place.

    Raises
    ------
    InvalidTarget
        ``target`` is not a mutable dataclass instance.
    RequiredMissing, ConversionFailure, FormatError, UnsupportedType
        The first failing field aborts the whole bind.
    """

    _ensure_target(target)
    hints = _type_hints(type(target))
    for field in dataclasses.fields(target):
        _bind_field(target, field, hints.get(field.name, field.type), context)


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Return ``(inner, True)`` for ``Optional[inner]``, else ``(tp, False)``.

    Examples
    --------
    >>> from typing import Optional
    >>> unwrap_optional(Optional[int])
    (<class 'int'>, True)
    >>> unwrap_optional(int | None)
    (<class 'int'>, True)
    >>> unwrap_optional(int)
    (<class 'int'>, False)
    """

    if get_origin(tp) in (Union, types.UnionType):
        args = get_args(tp)
        remaining = [arg for arg in args if arg is not type(None)]
        if len(args) == 2 and len(remaining) == 1:
            return remaining[0], True
    return tp, False


def zero_value(tp: Any) -> Any:
    """Build the empty value for annotation ``tp``.

    ``Optional`` yields ``None``; dataclasses are constructed with zero values
    for every argument lacking a default.

    Examples
    --------
    >>> zero_value(int), zero_value(str), zero_value(list[int]), zero_value(int | None)
    (0, '', [], None)
    """

    _, optional = unwrap_optional(tp)
    if optional:
        return None
    origin = get_origin(tp) or tp
    if origin is list:
        return []
    if origin is dict:
        return {}
    if _is_dataclass_type(tp):
        hints = _type_hints(tp)
        missing = {
            field.name: zero_value(hints.get(field.name, field.type))
            for field in dataclasses.fields(tp)
            if field.init and field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING
        }
        return tp(**missing)
    if _is_class(tp):
        try:
            return tp()
        except TypeError as exc:
            raise UnsupportedType(f"cannot construct {tp.__name__} without arguments") from exc
    supertype = getattr(tp, "__supertype__", None)
    if supertype is not None:
        return zero_value(supertype)
    return None


def _ensure_target(target: Any) -> None:
    if not dataclasses.is_dataclass(target) or isinstance(target, type):
        raise InvalidTarget(f"expected a dataclass instance, got {type(target).__name__}")
    if getattr(target, "__dataclass_params__").frozen:
        raise InvalidTarget(f"cannot bind into frozen dataclass {type(target).__name__}")


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return get_type_hints(cls)
    except NameError as exc:
        raise InvalidTarget(f"cannot resolve annotations of {cls.__name__}: {exc}") from exc


def _bind_field(target: Any, field: dataclasses.Field[Any], hint: Any, context: BindContext) -> None:
    if field.name.startswith("_"):
        return

    inner, optional = unwrap_optional(hint)
    tags = parse_field_tags(field.metadata, context.prefix)

    explored = False
    current = getattr(target, field.name, None)
    if optional and current is not None and _is_dataclass_type(inner):
        bind(current, context.with_prefix(tags.field_prefix))
        explored = True

    if tags.ignored:
        return

    value = _resolve_value(tags, context)
    if value:
        if tags.unset and tags.key and context.on_unset is not None:
            context.on_unset(tags.key)
        _set_field(target, field.name, inner, value, tags)

    _bind_nested(target, field.name, inner, optional, tags, context, explored)


def _resolve_value(tags: FieldSpec, context: BindContext) -> str:
    value = context.env.get(tags.key, "") if tags.own_key else ""
    if not value and tags.default:
        value = tags.default
    if tags.expand:
        value = context.expand(value)
    context.raw_values[tags.own_key] = value
    if tags.required and (not tags.own_key or not value):
        raise RequiredMissing(tags.key)
    return value


def _set_field(target: Any, name: str, tp: Any, value: str, tags: FieldSpec) -> None:
    if _is_text_unmarshaler(tp):
        current = getattr(target, name, None)
        instance = current if isinstance(current, tp) else zero_value(tp)
        setattr(target, name, _unmarshal(instance, value, tags.key, name))
        return

    parser = get_parser(tp)
    if parser is not None:
        setattr(target, name, _parse(parser, tp, value, tags.key, name))
        return

    origin = get_origin(tp) or tp
    if origin is list:
        setattr(target, name, _parse_list(tp, value, tags, name))
    elif origin is dict:
        setattr(target, name, _parse_dict(tp, value, tags, name))
    else:
        raise UnsupportedType(f"unsupported type: {_type_name(tp)} for field {name}", field=name)


def _unmarshal(instance: Any, value: str, key: str, name: str) -> Any:
    try:
        instance.unmarshal_text(value)
    except ValueError as exc:
        raise ConversionFailure(f"failed to unmarshal {key!r} into field {name}: {exc}", key=key, field=name) from exc
    return instance


def _parse(parser: ParserFunc, tp: Any, value: str, key: str, name: str) -> Any:
    try:
        return convert(parser(value), tp)
    except (ValueError, TypeError) as exc:
        raise ConversionFailure(f"failed to parse {key!r} into field {name}: {exc}", key=key, field=name) from exc


def _parse_list(tp: Any, value: str, tags: FieldSpec, name: str) -> list[Any]:
    args = get_args(tp)
    element, _ = unwrap_optional(args[0] if args else str)
    parts = value.split(tags.separator)

    if _is_text_unmarshaler(element):
        return [_unmarshal(zero_value(element), part, tags.key, name) for part in parts]

    parser = get_parser(element)
    if parser is None:
        raise UnsupportedType(f"unsupported element type: {_type_name(element)} for field {name}", field=name)
    return [_parse(parser, element, part, tags.key, name) for part in parts]


def _parse_dict(tp: Any, value: str, tags: FieldSpec, name: str) -> dict[Any, Any]:
    args = get_args(tp)
    key_type, value_type = args if len(args) == 2 else (str, str)
    key_parser = get_kind_parser(key_type)
    if key_parser is None:
        raise UnsupportedType(f"unsupported key type: {_type_name(key_type)} for field {name}", field=name)
    value_parser = get_kind_parser(value_type)
    if value_parser is None:
        raise UnsupportedType(f"unsupported element type: {_type_name(value_type)} for field {name}", field=name)

    result: dict[Any, Any] = {}
    for part in value.split(tags.separator):
        raw_key, separator, raw_value = part.partition(tags.key_val_separator)
        if not separator:
            raise FormatError(f'{part!r} should be in "key{tags.key_val_separator}value" format', entry=part)
        parsed_key = _parse(key_parser, key_type, raw_key, tags.key, name)
        result[parsed_key] = _parse(value_parser, value_type, raw_value, tags.key, name)
    return result


def _bind_nested(
    target: Any,
    name: str,
    tp: Any,
    optional: bool,
    tags: FieldSpec,
    context: BindContext,
    explored: bool,
) -> None:
    current = getattr(target, name, None)
    if current is None and optional and tags.init:
        current = zero_value(tp)
        setattr(target, name, current)

    if _is_dataclass_type(tp):
        if current is not None and not explored:
            bind(current, context.with_prefix(tags.field_prefix))
    elif _is_dataclass_list(tp):
        _bind_dataclass_list(target, name, tp, context.with_prefix(tags.field_prefix))


def _bind_dataclass_list(target: Any, name: str, tp: Any, context: BindContext) -> None:
    context = context.with_trailing_underscore()
    indices = context.indices()
    if not indices:
        return

    element = get_args(tp)[0]
    existing = list(getattr(target, name, None) or [])
    length = max(len(existing), max(indices) + 1)

    # bound elements are deep copies; the field is replaced only once all bind
    rebuilt: list[Any] = []
    for index in range(length):
        if index < len(existing):
            item = copy.deepcopy(existing[index]) if index in indices else existing[index]
        else:
            item = zero_value(element)
        if index in indices:
            bind(item, context.with_slice_index(index))
        rebuilt.append(item)

    setattr(target, name, rebuilt)


def _is_class(tp: Any) -> bool:
    # list[int] passes isinstance(..., type) on 3.10
    return isinstance(tp, type) and get_origin(tp) is None


def _is_dataclass_type(tp: Any) -> bool:
    return _is_class(tp) and dataclasses.is_dataclass(tp)


def _is_dataclass_list(tp: Any) -> bool:
    args = get_args(tp)
    return get_origin(tp) is list and len(args) == 1 and _is_dataclass_type(args[0])


def _is_text_unmarshaler(tp: Any) -> bool:
    return _is_class(tp) and issubclass(tp, TextUnmarshaler)


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)
