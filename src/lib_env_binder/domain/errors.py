"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the dotenv tokenizer, the type
parser registry, the struct binder, and consuming applications. The hierarchy
lives in the domain layer so adapters and the application layer can both raise
it without depending on each other.

Contents
--------
* :class:`EnvError` – umbrella base class for every library failure.
* :class:`InputError` – malformed textual input (keys, quotes, empty files,
  map entries, encodings, expansion cycles).
* :class:`RequiredMissing` – a ``required`` field resolved to an empty value.
* :class:`ConversionFailure` – a value was present but could not be converted.
* :class:`UnsupportedType` – a field received a value but has no handler.
* :class:`InvalidTarget` – the bind target is not a mutable dataclass instance.
* :class:`FileAccessError` – a ``.env`` file could not be opened or read.

System Role
-----------
Every layer fails fast: the first error raised anywhere in a tokenizer loop or
a recursive bind aborts the whole operation. Callers catch :class:`EnvError`
to handle all library failures uniformly.
"""

from __future__ import annotations


class EnvError(Exception):
    """Base type for all exceptions emitted by ``lib_env_binder``."""


class InputError(EnvError):
    """Raised when textual input cannot be tokenized or split into parts.

    Typical Sources
    ---------------
    The dotenv tokenizer, the file parser, and the map splitter in the binder.
    """


class EmptyInput(InputError):
    """Raised when a ``.env`` buffer has zero length."""


class InvalidKey(InputError):
    """Raised when a key has no separator or does not start with an uppercase letter."""


class UnterminatedQuote(InputError):
    """Raised when a quoted value has no matching closing quote."""


class InvalidEncoding(InputError):
    """Raised when a ``.env`` buffer is not valid UTF-8."""


class ExpansionError(InputError):
    """Raised when ``${NAME}`` expansion refers back to a name being expanded."""


class FormatError(InputError):
    """Raised when a map entry is not in ``key<sep>value`` form.

    Attributes
    ----------
    entry:
        The offending ``key<sep>value`` fragment.
    """

    def __init__(self, message: str, *, entry: str = "") -> None:
        super().__init__(message)
        self.entry = entry


class RequiredMissing(EnvError):
    """Raised when a field tagged ``required`` resolved to an empty value.

    Attributes
    ----------
    key:
        Full environment key (prefix included) that was looked up.
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"required environment variable not set: {key}")
        self.key = key


class ConversionFailure(EnvError):
    """Raised when a value exists but cannot be parsed into the field type.

    Attributes
    ----------
    key:
        Full environment key the value came from.
    field:
        Name of the dataclass field being populated.
    """

    def __init__(self, message: str, *, key: str = "", field: str = "") -> None:
        super().__init__(message)
        self.key = key
        self.field = field


class UnsupportedType(EnvError):
    """Raised when a field received a value but no parser or container handler applies."""

    def __init__(self, message: str, *, field: str = "") -> None:
        super().__init__(message)
        self.field = field


class InvalidTarget(EnvError):
    """Raised when the bind target is not a mutable dataclass instance."""


class FileAccessError(EnvError):
    """Raised when a ``.env`` file cannot be opened or read.

    The underlying :class:`OSError` is chained as ``__cause__``.
    """
