"""CLI adapter for ``lib_env_binder`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators check ``.env`` files without writing Python: parse them with the
same strict tokenizer the library uses, print the merged result as JSON, or
render ``export`` lines for a shell.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_parse` – merges files and prints JSON.
* :func:`cli_export` – prints ``export KEY='value'`` lines per pair.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It calls the composition root and the
dotenv adapter and leaves exit-code policy to ``lib_cli_exit_tools``.
"""

from __future__ import annotations

import json
import shlex
import sys
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.dotenv.default import DefaultDotEnvLoader
from .adapters.env.default import to_map
from .core import parse_files

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

_FILE_ARGUMENT = click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True)


def _resolve_version() -> str:
    """Return the installed package version, or ``"0.0.0"`` for source checkouts."""

    try:
        return metadata.version("lib_env_binder")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Strict .env parser and environment-to-dataclass binder",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_env_binder",
    message="lib_env_binder version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_env_binder")
    except metadata.PackageNotFoundError:
        click.echo("lib_env_binder (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_env_binder')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("parse", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("files", nargs=-1, required=True, type=_FILE_ARGUMENT)
@click.option(
    "--set",
    "overrides",
    multiple=True,
    metavar="KEY=VALUE",
    help="Override or add a variable after the files are merged (repeatable)",
)
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
def cli_parse(files: Sequence[Path], overrides: Sequence[str], indent: Optional[int]) -> None:
    """Merge FILES left to right and print the resulting mapping as JSON.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> runner = CliRunner()
    >>> with runner.isolated_filesystem():
    ...     _ = Path(".env").write_text("HOST=localhost\\n", encoding="utf-8")
    ...     result = runner.invoke(cli, ["parse", ".env", "--set", "PORT=80"])
    >>> result.output.strip()
    '{"HOST": "localhost", "PORT": "80"}'
    """

    env = DefaultDotEnvLoader().load(*[str(path) for path in files])
    env.update(to_map(overrides))
    click.echo(json.dumps(env, indent=indent))


@cli.command("export", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("files", nargs=-1, required=True, type=_FILE_ARGUMENT)
def cli_export(files: Sequence[Path]) -> None:
    """Print one shell ``export`` line per pair of every file, in file order."""

    def emit(key: str, value: str) -> None:
        click.echo(f"export {key}={shlex.quote(value)}")

    parse_files(emit, *[str(path) for path in files])


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_env_binder",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
