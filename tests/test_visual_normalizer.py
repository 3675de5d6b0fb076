"""Tests for the image normalizer."""

from pathlib import Path

import pytest
from PIL import Image

from sitecompare.errors import DecodeError
from sitecompare.visual.normalizer import load_rgba, normalize_image


class TestNormalizeImage:
    """Tests for normalize_image."""

    @pytest.mark.parametrize("size", [(800, 600), (1920, 1080), (375, 2400), (1280, 800)])
    def test_resizes_to_canonical_dimensions(self, tmp_path: Path, make_png, size):
        path = make_png(tmp_path / "shot.png", size, (10, 120, 200, 255))

        normalize_image(path, 1280, 800)

        with Image.open(path) as img:
            assert img.size == (1280, 800)

    def test_idempotent_on_dimensions(self, tmp_path: Path, make_png):
        path = make_png(tmp_path / "shot.png", (800, 600))

        normalize_image(path, 1280, 800)
        normalize_image(path, 1280, 800)

        with Image.open(path) as img:
            assert img.size == (1280, 800)

    def test_canonical_input_is_unchanged(self, tmp_path: Path, make_png):
        path = make_png(tmp_path / "shot.png", (1280, 800), (30, 60, 90, 255))
        before = load_rgba(path).tobytes()

        normalize_image(path, 1280, 800)

        assert load_rgba(path).tobytes() == before

    def test_deterministic_output(self, tmp_path: Path, make_png):
        a = make_png(tmp_path / "a.png", (1920, 1080), (200, 10, 10, 255))
        b = make_png(tmp_path / "b.png", (1920, 1080), (200, 10, 10, 255))

        normalize_image(a, 1280, 800)
        normalize_image(b, 1280, 800)

        assert a.read_bytes() == b.read_bytes()

    def test_pads_with_transparent_background(self, tmp_path: Path, make_png):
        """A 4:3 image is pillarboxed; the side bars are fully transparent."""
        path = make_png(tmp_path / "shot.png", (800, 600), (0, 0, 0, 255))

        normalize_image(path, 1280, 800)

        img = load_rgba(path)
        assert img.getpixel((0, 400))[3] == 0
        assert img.getpixel((640, 400)) == (0, 0, 0, 255)

    def test_output_is_rgba_png(self, tmp_path: Path):
        path = tmp_path / "shot.png"
        Image.new("RGB", (640, 480), (1, 2, 3)).save(path)

        normalize_image(path, 1280, 800)

        with Image.open(path) as img:
            assert img.format == "PNG"
            assert img.mode == "RGBA"


class TestDecodeErrors:
    """Undecodable input raises DecodeError."""

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(DecodeError, match="missing.png"):
            normalize_image(tmp_path / "missing.png", 1280, 800)

    def test_not_an_image(self, tmp_path: Path):
        path = tmp_path / "corrupt.png"
        path.write_text("<html>not a png</html>")

        with pytest.raises(DecodeError):
            normalize_image(path, 1280, 800)

    def test_decode_error_keeps_path(self, tmp_path: Path):
        path = tmp_path / "corrupt.png"
        path.write_bytes(b"\x00\x01\x02")

        with pytest.raises(DecodeError) as exc_info:
            load_rgba(path)
        assert exc_info.value.path == str(path)
