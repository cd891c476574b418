"""Shared fixtures for webp_batch tests"""

from pathlib import Path

import pytest
from PIL import Image

import webp_batch.codec as codec_module
import webp_batch.settings as settings_module
from webp_batch.codec import Codec
from webp_batch.errors import CodecError


@pytest.fixture(autouse=True)
def isolated_state(tmp_path_factory, monkeypatch):
    """Reset the process-wide codec and keep settings out of ~/.webp-batch."""
    config_dir = tmp_path_factory.mktemp("config")
    monkeypatch.setattr(codec_module, "_codec", None)
    monkeypatch.setattr(settings_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(settings_module, "CONFIG_FILE", config_dir / "config.json")
    monkeypatch.setattr(settings_module, "_settings", None)


def make_image(path: Path, mode: str = "RGB", size=(8, 8), fmt: str | None = None) -> Path:
    """Write a small real image to path (format inferred from suffix unless fmt given)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    color = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30) if mode == "RGB" else 1
    Image.new(mode, size, color).save(path, fmt)
    return path


class FakeCodec(Codec):
    """Records calls and writes a marker file instead of encoding."""

    name = "fake"

    def __init__(self, fail_on: set[str] | None = None):
        super().__init__(".webp")
        self.fail_on = fail_on or set()
        self.calls: list[tuple[Path, Path, int]] = []

    def encode(self, source: Path, destination: Path, quality: int) -> str:
        self.calls.append((source, destination, quality))
        if source.name in self.fail_on:
            raise CodecError(f"cannot decode {source.name}")
        destination.write_bytes(b"WEBP" + source.name.encode())
        return f"fake q={quality}"

    @property
    def sources(self) -> list[str]:
        return [src.name for src, _, _ in self.calls]


@pytest.fixture
def fake_codec() -> FakeCodec:
    return FakeCodec()
