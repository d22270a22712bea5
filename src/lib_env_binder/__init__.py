"""Public package surface for ``lib_env_binder``.

Bind environment variables and ``.env`` files into dataclasses using
``env``/``envDefault``/``envPrefix`` field tags. The composition root in
:mod:`lib_env_binder.core` holds the entry points; the error taxonomy lives in
:mod:`lib_env_binder.domain.errors`.
"""

from __future__ import annotations

from .adapters.dotenv.default import DefaultDotEnvLoader, parse_env_bytes, read_env_file
from .adapters.env.default import DefaultEnvLoader, setenv, to_map
from .application.context import Options
from .application.ports import TextUnmarshaler
from .core import (
    load_dotenv,
    parse,
    parse_file,
    parse_file_into,
    parse_files,
    parse_files_into,
    parse_with_options,
)
from .domain.errors import (
    ConversionFailure,
    EmptyInput,
    EnvError,
    ExpansionError,
    FileAccessError,
    FormatError,
    InputError,
    InvalidEncoding,
    InvalidKey,
    InvalidTarget,
    RequiredMissing,
    UnsupportedType,
    UnterminatedQuote,
)
from .domain.fields import FieldSpec, env_field, parse_field_tags
from .domain.parsers import Float32, Int8, Int16, Int32, Int64, Uint, Uint8, Uint16, Uint32, Uint64, get_parser
from .observability import bind_trace_id, get_logger

__all__ = [
    "ConversionFailure",
    "DefaultDotEnvLoader",
    "DefaultEnvLoader",
    "EmptyInput",
    "EnvError",
    "ExpansionError",
    "FieldSpec",
    "FileAccessError",
    "Float32",
    "FormatError",
    "InputError",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "InvalidEncoding",
    "InvalidKey",
    "InvalidTarget",
    "Options",
    "RequiredMissing",
    "TextUnmarshaler",
    "Uint",
    "Uint8",
    "Uint16",
    "Uint32",
    "Uint64",
    "UnsupportedType",
    "UnterminatedQuote",
    "bind_trace_id",
    "env_field",
    "get_logger",
    "get_parser",
    "load_dotenv",
    "parse",
    "parse_env_bytes",
    "parse_field_tags",
    "parse_file",
    "parse_file_into",
    "parse_files",
    "parse_files_into",
    "parse_with_options",
    "read_env_file",
    "setenv",
    "to_map",
]
