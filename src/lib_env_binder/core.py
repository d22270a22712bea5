"""Composition root for ``lib_env_binder``.

Purpose
-------
Provide the public entry points that connect the environment sources (process
environment snapshot, ``.env`` files, explicit mappings) with the recursive
binder, while emitting structured observability signals.

Contents
--------
* :func:`parse` – bind from the process environment.
* :func:`parse_with_options` – bind from :class:`Options` (mapping + prefix).
* :func:`parse_files_into` / :func:`parse_file_into` – bind from ``.env`` files.
* :func:`parse_files` / :func:`parse_file` – hand each pair to a callback.
* :func:`load_dotenv` – export ``.env`` pairs into ``os.environ``.

System Role
-----------
This is the only module that wires adapters into the application layer. In
particular it maps the binder's ``unset`` hook onto the process environment
and reads ``os.environ`` when no explicit mapping is given.
"""

from __future__ import annotations

from typing import Any, Mapping

from .adapters.dotenv.default import DefaultDotEnvLoader, read_env_file
from .adapters.env.default import DefaultEnvLoader, setenv, unset_variable
from .application.binder import bind
from .application.context import BindContext, Options
from .application.ports import FileOpener, PairCallback
from .observability import log_debug, log_info, make_event


def parse(target: Any) -> None:
    """Populate dataclass *target* from the current process environment.

    Examples
    --------
    >>> import os
    >>> from dataclasses import dataclass
    >>> from lib_env_binder.domain.fields import env_field
    >>> @dataclass
    ... class Settings:
    ...     home: str = env_field("LIB_ENV_BINDER_DOCTEST_HOME", env_default="/srv", default="")
    >>> settings = Settings()
    >>> parse(settings)
    >>> settings.home
    '/srv'
    """

    parse_with_options(target, Options())


def parse_with_options(target: Any, options: Options) -> None:
    """Populate dataclass *target* from ``options.env`` under ``options.prefix``.

    Parameters
    ----------
    target:
        A mutable dataclass instance; updated in place.
    options:
        Mapping and root prefix. ``options.env`` of ``None`` snapshots
        :data:`os.environ`.

    Raises
    ------
    lib_env_binder.domain.errors.EnvError
        The first failure aborts the bind; *target* should then be treated as
        unreliable.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> from lib_env_binder.domain.fields import env_field
    >>> @dataclass
    ... class Server:
    ...     port: int = env_field("PORT", env_default="8080", default=0)
    >>> server = Server()
    >>> parse_with_options(server, Options(env={"APP_PORT": "9000"}, prefix="APP_"))
    >>> server.port
    9000
    """

    env: Mapping[str, str] = options.env if options.env is not None else DefaultEnvLoader().load()
    context = BindContext(env=env, prefix=options.prefix, on_unset=unset_variable)
    bind(target, context)
    log_info("environment_bound", **make_event("options", None, {"target": type(target).__name__, "keys": len(env)}))


def parse_files_into(target: Any, *filenames: str, opener: FileOpener | None = None) -> None:
    """Merge *filenames* (default ``.env``) and bind the result into *target*.

    Later files override earlier keys. Process variables are neither read nor
    written, so a required key must be present in one of the files.
    """

    loader = DefaultDotEnvLoader(opener=opener)
    env = loader.load(*filenames)
    log_debug("dotenv_merged", **make_event("dotenv", None, {"files": loader.last_loaded_paths, "keys": len(env)}))
    parse_with_options(target, Options(env=env))


def parse_file_into(target: Any, filename: str, opener: FileOpener | None = None) -> None:
    """Bind a single ``.env`` file into *target*."""

    parse_with_options(target, Options(env=read_env_file(filename, opener)))


def parse_files(callback: PairCallback, *filenames: str, opener: FileOpener | None = None) -> None:
    """Invoke ``callback(key, value)`` for every pair of every file, in file order.

    The first exception raised by a file or by *callback* aborts the remaining
    work and propagates unchanged.

    Examples
    --------
    >>> import io
    >>> seen = []
    >>> parse_files(lambda k, v: seen.append((k, v)), "x.env", opener=lambda _: io.BytesIO(b"A=1\\nB=2"))
    >>> seen
    [('A', '1'), ('B', '2')]
    """

    loader = DefaultDotEnvLoader(opener=opener)
    for _, env in loader.load_each(*filenames):
        _dispatch(callback, env)


def parse_file(callback: PairCallback, filename: str, opener: FileOpener | None = None) -> None:
    """Invoke ``callback(key, value)`` for every pair in *filename*."""

    _dispatch(callback, read_env_file(filename, opener))


def load_dotenv(*filenames: str, opener: FileOpener | None = None) -> None:
    """Export every pair of *filenames* (default ``.env``) into :data:`os.environ`."""

    parse_files(setenv, *filenames, opener=opener)


def _dispatch(callback: PairCallback, env: Mapping[str, str]) -> None:
    for key, value in env.items():
        callback(key, value)


__all__ = [
    "Options",
    "load_dotenv",
    "parse",
    "parse_file",
    "parse_file_into",
    "parse_files",
    "parse_files_into",
    "parse_with_options",
]
