"""Tests for webp_batch.walker module"""

import os
from pathlib import Path

import pytest

import webp_batch.walker as walker_module
from conftest import FakeCodec
from webp_batch.converter import Converter
from webp_batch.models import ConversionStatus, EntryKind
from webp_batch.walker import Walker, list_directory


def touch(path: Path, data: bytes = b"x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


def make_walker(codec: FakeCodec, **kwargs) -> Walker:
    return Walker(Converter(codec), **kwargs)


@pytest.fixture
def sorted_listing(monkeypatch):
    """Make listing order deterministic (alphabetical) for ordering tests."""
    original = walker_module.list_directory

    def listing(path):
        return sorted(original(path), key=lambda e: e.name)

    monkeypatch.setattr(walker_module, "list_directory", listing)


class TestListDirectory:
    def test_classifies_files_and_directories(self, tmp_path):
        touch(tmp_path / "a.png")
        (tmp_path / "sub").mkdir()
        kinds = {e.name: e.kind for e in list_directory(tmp_path)}
        assert kinds == {"a.png": EntryKind.FILE, "sub": EntryKind.DIRECTORY}

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlink_is_other(self, tmp_path):
        target = touch(tmp_path / "real.png")
        (tmp_path / "link.png").symlink_to(target)
        kinds = {e.name: e.kind for e in list_directory(tmp_path)}
        assert kinds["link.png"] is EntryKind.OTHER

    def test_missing_directory_raises_os_error(self, tmp_path):
        with pytest.raises(OSError):
            list_directory(tmp_path / "missing")


class TestExtensionFiltering:
    def test_only_png_and_jpg_are_converted(self, tmp_path, fake_codec):
        for name in ("a.png", "b.jpg", "c.gif", "d.txt"):
            touch(tmp_path / name)

        report = make_walker(fake_codec).walk(tmp_path)

        assert sorted(fake_codec.sources) == ["a.png", "b.jpg"]
        assert len(report.results) == 2
        assert not (tmp_path / "c.webp").exists()
        assert not (tmp_path / "d.webp").exists()

    def test_match_is_case_sensitive_by_default(self, tmp_path, fake_codec):
        touch(tmp_path / "upper.PNG")
        touch(tmp_path / "photo.JPG")
        touch(tmp_path / "photo2.jpeg")

        make_walker(fake_codec).walk(tmp_path)

        assert fake_codec.calls == []

    def test_ignore_case_matches_uppercase(self, tmp_path, fake_codec):
        touch(tmp_path / "upper.PNG")
        touch(tmp_path / "photo.jpeg")

        make_walker(fake_codec, ignore_case=True).walk(tmp_path)

        assert fake_codec.sources == ["upper.PNG"]

    def test_suffix_match_on_names_containing_extension(self, tmp_path, fake_codec):
        touch(tmp_path / "notapng.png")
        touch(tmp_path / "png.txt")

        make_walker(fake_codec).walk(tmp_path)

        assert fake_codec.sources == ["notapng.png"]

    def test_custom_source_extensions(self, tmp_path, fake_codec):
        touch(tmp_path / "a.png")
        touch(tmp_path / "b.bmp")

        make_walker(fake_codec, source_exts=(".bmp",)).walk(tmp_path)

        assert fake_codec.sources == ["b.bmp"]

    def test_directory_named_like_image_is_traversed(self, tmp_path, fake_codec):
        touch(tmp_path / "folder.png" / "inner.jpg")

        make_walker(fake_codec).walk(tmp_path)

        assert fake_codec.sources == ["inner.jpg"]


class TestRecursion:
    def test_converts_at_every_depth(self, tmp_path, fake_codec):
        touch(tmp_path / "a.png")
        touch(tmp_path / "sub" / "b.jpg")
        touch(tmp_path / "sub" / "sub2" / "c.png")

        report = make_walker(fake_codec).walk(tmp_path)

        assert sorted(fake_codec.sources) == ["a.png", "b.jpg", "c.png"]
        assert (tmp_path / "a.webp").exists()
        assert (tmp_path / "sub" / "b.webp").exists()
        assert (tmp_path / "sub" / "sub2" / "c.webp").exists()
        assert report.count(ConversionStatus.CONVERTED) == 3

    def test_no_duplicate_visits(self, tmp_path, fake_codec):
        touch(tmp_path / "a.png")
        touch(tmp_path / "x" / "a.png")
        touch(tmp_path / "x" / "y" / "a.png")

        make_walker(fake_codec).walk(tmp_path)

        sources = [src for src, _, _ in fake_codec.calls]
        assert len(sources) == len(set(sources)) == 3

    def test_depth_first_in_listing_order(self, tmp_path, fake_codec, sorted_listing):
        touch(tmp_path / "a.png")
        touch(tmp_path / "m" / "b.png")
        touch(tmp_path / "m" / "n" / "c.png")
        touch(tmp_path / "m" / "o.png")
        touch(tmp_path / "z.png")

        make_walker(fake_codec).walk(tmp_path)

        assert fake_codec.sources == ["a.png", "b.png", "c.png", "o.png", "z.png"]

    def test_deep_tree_does_not_hit_recursion_limit(self, tmp_path, fake_codec):
        deep = tmp_path
        for i in range(300):
            deep = deep / f"d{i}"
        touch(deep / "leaf.png")

        make_walker(fake_codec).walk(tmp_path)

        assert fake_codec.sources == ["leaf.png"]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_ignores_symlinked_directories(self, tmp_path, fake_codec):
        touch(tmp_path / "real" / "a.png")
        (tmp_path / "loop").symlink_to(tmp_path, target_is_directory=True)

        make_walker(fake_codec).walk(tmp_path)

        assert fake_codec.sources == ["a.png"]


class TestFaultIsolation:
    def test_unreadable_subdirectory_does_not_stop_scan(self, tmp_path, fake_codec, monkeypatch):
        touch(tmp_path / "a.png")
        touch(tmp_path / "sub" / "b.png")
        touch(tmp_path / "sub2" / "c.png")
        original = walker_module.list_directory
        blocked = tmp_path / "sub"

        def listing(path):
            if Path(path) == blocked:
                raise PermissionError(13, "Permission denied", str(path))
            return original(path)

        monkeypatch.setattr(walker_module, "list_directory", listing)

        report = make_walker(fake_codec).walk(tmp_path)

        assert sorted(fake_codec.sources) == ["a.png", "c.png"]
        assert len(report.errors) == 1
        assert report.errors[0].path == blocked
        assert report.errors[0].reason == "Permission denied"

    def test_missing_root_returns_error_report(self, tmp_path, fake_codec):
        report = make_walker(fake_codec).walk(tmp_path / "missing")
        assert report.results == []
        assert len(report.errors) == 1

    def test_root_that_is_a_file_returns_error_report(self, tmp_path, fake_codec):
        f = touch(tmp_path / "a.png")
        report = make_walker(fake_codec).walk(f)
        assert fake_codec.calls == []
        assert len(report.errors) == 1

    def test_failed_file_does_not_stop_siblings(self, tmp_path, sorted_listing):
        codec = FakeCodec(fail_on={"b.png"})
        for name in ("a.png", "b.png", "c.png"):
            touch(tmp_path / name)

        report = make_walker(codec).walk(tmp_path)

        assert codec.sources == ["a.png", "b.png", "c.png"]
        statuses = [r.status for r in report.results]
        assert statuses == [
            ConversionStatus.CONVERTED,
            ConversionStatus.FAILED,
            ConversionStatus.CONVERTED,
        ]

    def test_unreadable_directory_is_logged(self, tmp_path, fake_codec, caplog):
        with caplog.at_level("ERROR", logger="webp_batch.walker"):
            make_walker(fake_codec).walk(tmp_path / "missing")
        assert str(tmp_path / "missing") in caplog.text

    def test_unexpected_codec_exception_does_not_stop_siblings(self, tmp_path, sorted_listing):
        codec = FakeCodec()
        original_encode = codec.encode

        def encode(source, destination, quality):
            if source.name == "b.png":
                raise RuntimeError("decoder crashed")
            return original_encode(source, destination, quality)

        codec.encode = encode
        for name in ("a.png", "b.png", "c.png"):
            touch(tmp_path / name)

        report = make_walker(codec).walk(tmp_path)

        assert [r.status for r in report.results] == [
            ConversionStatus.CONVERTED,
            ConversionStatus.FAILED,
            ConversionStatus.CONVERTED,
        ]
        assert (tmp_path / "c.webp").exists()
