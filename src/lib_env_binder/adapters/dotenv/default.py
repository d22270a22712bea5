"""`.env` file adapter.

Purpose
-------
Turn ``.env`` files into flat ``KEY -> VALUE`` mappings by driving the
tokenizer over the whole buffer. Parsing is strict: a single malformed line
invalidates the file and no partial mapping is returned.

Contents
--------
* :func:`parse_env_bytes` / :func:`parse_env_text` – buffer → mapping.
* :func:`read_env_file` – open (via an injectable opener), read, and parse.
* :class:`DefaultDotEnvLoader` – multi-file loading with left-to-right
  overwrite and structured logging.

System Role
-----------
Feeds the composition root, which either binds the merged mapping into a
dataclass or hands each pair to a caller-supplied callback.
"""

from __future__ import annotations

from typing import BinaryIO, Final, Iterator, Sequence

from ...application.ports import FileOpener
from ...domain.errors import EmptyInput, FileAccessError, InputError, InvalidEncoding
from ...observability import log_debug, log_error
from .tokenizer import get_key_value, get_start

DEFAULT_FILENAMES: Final[tuple[str, ...]] = (".env",)


def open_binary(path: str) -> BinaryIO:
    """Default :class:`FileOpener`: open ``path`` for binary reading."""

    return open(path, "rb")


def parse_env_bytes(src: bytes) -> dict[str, str]:
    """Parse a raw ``.env`` buffer into a mapping.

    ``\\r\\n`` line endings are normalised to ``\\n`` and the buffer is decoded
    as UTF-8 before tokenizing.

    Raises
    ------
    EmptyInput
        ``src`` has zero length.
    InvalidEncoding
        ``src`` is not valid UTF-8.
    InvalidKey, UnterminatedQuote
        Any line is malformed.

    Examples
    --------
    >>> parse_env_bytes(b"KEY=value\\r\\nANOTHER_KEY='another value'")
    {'KEY': 'value', 'ANOTHER_KEY': 'another value'}
    >>> parse_env_bytes(b"")
    Traceback (most recent call last):
    ...
    lib_env_binder.domain.errors.EmptyInput: empty file
    """

    if not src:
        raise EmptyInput("empty file")
    try:
        text = src.replace(b"\r\n", b"\n").decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidEncoding(f"file is not valid UTF-8: {exc}") from exc
    return parse_env_text(text)


def parse_env_text(text: str) -> dict[str, str]:
    """Parse decoded ``.env`` text; later duplicate keys overwrite earlier ones.

    Examples
    --------
    >>> parse_env_text("# settings\\nFOO=bar # trailing\\nFOO=baz\\nEMPTY=\\n")
    {'FOO': 'baz', 'EMPTY': ''}
    """

    if not text:
        raise EmptyInput("empty file")
    env: dict[str, str] = {}
    remaining: str | None = text
    while True:
        remaining = get_start(remaining)
        if remaining is None:
            return env
        key, value, remaining = get_key_value(remaining)
        env[key] = value


def read_env_file(filename: str, opener: FileOpener | None = None) -> dict[str, str]:
    """Open, read, and parse ``filename``.

    Raises
    ------
    FileAccessError
        The opener or the read failed with :class:`OSError`.
    InputError
        The contents are malformed (see :func:`parse_env_bytes`).
    """

    open_file = opener or open_binary
    try:
        with open_file(filename) as handle:
            payload = handle.read()
    except OSError as exc:
        log_error("dotenv_file_unreadable", source="dotenv", path=filename, error=str(exc))
        raise FileAccessError(f"cannot read env file {filename}: {exc}") from exc

    try:
        env = parse_env_bytes(payload)
    except InputError as exc:
        log_error("dotenv_invalid", source="dotenv", path=filename, error=str(exc))
        raise
    log_debug("dotenv_parsed", source="dotenv", path=filename, keys=sorted(env))
    return env


class DefaultDotEnvLoader:
    """Load one or more ``.env`` files into a flat mapping.

    Why
    ----
    Secrets and local overrides are often split across several files (for
    example ``.env`` plus ``.database.env``). Merging them left to right lets
    later files override earlier ones without touching the process
    environment.
    """

    def __init__(self, *, opener: FileOpener | None = None) -> None:
        """Initialise the loader with an optional *opener* for testability."""

        self._opener = opener or open_binary
        self.last_loaded_paths: list[str] = []

    def load(self, *filenames: str) -> dict[str, str]:
        """Return the merged mapping of *filenames* (default ``.env``).

        Examples
        --------
        >>> import io
        >>> files = {"a.env": b"HOST=a\\nPORT=1", "b.env": b"PORT=2"}
        >>> loader = DefaultDotEnvLoader(opener=lambda name: io.BytesIO(files[name]))
        >>> loader.load("a.env", "b.env")
        {'HOST': 'a', 'PORT': '2'}
        >>> loader.last_loaded_paths
        ['a.env', 'b.env']
        """

        merged: dict[str, str] = {}
        for _, env in self.load_each(*filenames):
            merged.update(env)
        return merged

    def load_each(self, *filenames: str) -> Iterator[tuple[str, dict[str, str]]]:
        """Yield ``(filename, mapping)`` per file, stopping at the first failure."""

        self.last_loaded_paths = []
        for filename in _with_default(filenames):
            env = read_env_file(filename, self._opener)
            self.last_loaded_paths.append(filename)
            yield filename, env


def _with_default(filenames: Sequence[str]) -> Sequence[str]:
    return filenames or DEFAULT_FILENAMES
