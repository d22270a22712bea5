from __future__ import annotations

from lib_env_binder.domain.errors import (
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


def test_error_hierarchy() -> None:
    for input_error in (EmptyInput, InvalidKey, UnterminatedQuote, InvalidEncoding, ExpansionError, FormatError):
        assert issubclass(input_error, InputError)
    for error in (InputError, RequiredMissing, ConversionFailure, UnsupportedType, InvalidTarget, FileAccessError):
        assert issubclass(error, EnvError)


def test_required_missing_names_the_full_key() -> None:
    error = RequiredMissing("APP_PORT")
    assert error.key == "APP_PORT"
    assert str(error) == "required environment variable not set: APP_PORT"


def test_structured_attributes_default_to_empty() -> None:
    assert FormatError("bad").entry == ""
    assert ConversionFailure("bad").key == ""
    assert ConversionFailure("bad", key="PORT", field="port").field == "port"
    assert UnsupportedType("bad", field="blob").field == "blob"
