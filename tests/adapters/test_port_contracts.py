"""Adapter contract tests for the default ports implementation.

Purpose
-------
Verify the default adapters keep satisfying the application-layer ports in
``src/lib_env_binder/application/ports.py`` so the composition root can swap
them for test doubles without surprises.
"""

from __future__ import annotations

import io
from pathlib import Path

from lib_env_binder.adapters.dotenv.default import open_binary
from lib_env_binder.adapters.env.default import DefaultEnvLoader, setenv
from lib_env_binder.application import ports


class Color:
    def __init__(self) -> None:
        self.rgb = (0, 0, 0)

    def unmarshal_text(self, text: str) -> None:
        self.rgb = tuple(int(text[i : i + 2], 16) for i in (1, 3, 5))


def test_default_env_loader_contract() -> None:
    loader: ports.EnvLoader = DefaultEnvLoader(environ={"A": "1"})
    assert dict(loader.load()) == {"A": "1"}


def test_open_binary_is_a_file_opener(tmp_path: Path) -> None:
    target = tmp_path / "x.env"
    target.write_bytes(b"A=1")
    opener: ports.FileOpener = open_binary
    with opener(str(target)) as handle:
        assert handle.read() == b"A=1"


def test_setenv_is_a_pair_callback() -> None:
    callback: ports.PairCallback = setenv
    assert callable(callback)


def test_text_unmarshaler_is_structural() -> None:
    assert issubclass(Color, ports.TextUnmarshaler)
    assert not issubclass(str, ports.TextUnmarshaler)
    color = Color()
    assert isinstance(color, ports.TextUnmarshaler)
    color.unmarshal_text("#ff8000")
    assert color.rgb == (255, 128, 0)
    assert not isinstance(io.BytesIO(), ports.TextUnmarshaler)
