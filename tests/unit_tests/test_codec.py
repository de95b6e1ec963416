"""Unit tests for the Pillow decode / WebP encode collaborators."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Callable

import pytest
from PIL import Image

from webpc.codec import WEBP_MAX_DIMENSION, RawImage, decode, encode_webp
from webpc.errors import DecodeError, EncodeError
from webpc.formats import SourceFormat


def _open_webp(data: bytes) -> Image.Image:
    im = Image.open(io.BytesIO(data))
    im.load()
    return im


def test_decode_jpeg_to_rgb(make_image: Callable[..., Path], tmp_path: Path) -> None:
    """Decode a JPEG into a single RGB frame of the same size."""
    data = make_image(tmp_path / "a.jpg", size=(20, 10)).read_bytes()

    raw = decode(data, SourceFormat.JPEG)

    assert raw.size == (20, 10)
    assert raw.image.mode == "RGB"
    assert not raw.is_animated


def test_decode_png_keeps_alpha(make_image: Callable[..., Path], tmp_path: Path) -> None:
    """Keep transparency for RGBA PNGs."""
    data = make_image(tmp_path / "a.png", mode="RGBA", color=(1, 2, 3, 0)).read_bytes()

    raw = decode(data, SourceFormat.PNG)

    assert raw.image.mode == "RGBA"


def test_decode_rejects_corrupt_bytes() -> None:
    """Raise DecodeError for data that is not an image."""
    with pytest.raises(DecodeError, match="cannot decode jpeg"):
        decode(b"definitely not a jpeg", SourceFormat.JPEG)


def test_decode_rejects_truncated_png(make_image: Callable[..., Path], tmp_path: Path) -> None:
    """Raise DecodeError when the pixel data is cut short."""
    data = make_image(tmp_path / "a.png", size=(64, 64)).read_bytes()

    with pytest.raises(DecodeError):
        decode(data[: len(data) // 2], SourceFormat.PNG)


def test_decode_uses_declared_format_only(make_image: Callable[..., Path], tmp_path: Path) -> None:
    """A PNG named .jpg fails instead of being decoded as PNG."""
    data = make_image(tmp_path / "a.png").read_bytes()

    with pytest.raises(DecodeError):
        decode(data, SourceFormat.JPEG)


def _animated_gif(tmp_path: Path) -> bytes:
    frames = [Image.new("RGB", (8, 8), c) for c in ((255, 0, 0), (0, 255, 0), (0, 0, 255))]
    path = tmp_path / "anim.gif"
    frames[0].save(path, format="GIF", save_all=True, append_images=frames[1:], duration=50, loop=0)
    return path.read_bytes()


def test_decode_gif_first_frame_by_default(tmp_path: Path) -> None:
    """Keep only the first frame unless all_frames is requested."""
    raw = decode(_animated_gif(tmp_path), SourceFormat.GIF)

    assert len(raw.frames) == 1


def test_decode_gif_all_frames(tmp_path: Path) -> None:
    """Collect every frame with its duration."""
    raw = decode(_animated_gif(tmp_path), SourceFormat.GIF, all_frames=True)

    assert raw.is_animated
    assert len(raw.frames) == 3
    assert len(raw.durations) == 3


def test_encode_webp_produces_webp() -> None:
    """Encode a frame into bytes Pillow reads back as WebP."""
    raw = RawImage(frames=(Image.new("RGB", (9, 7), (10, 20, 30)),))

    im = _open_webp(encode_webp(raw, 80))

    assert im.format == "WEBP"
    assert im.size == (9, 7)


def test_encode_webp_is_deterministic() -> None:
    """Same input and settings give the same bytes."""
    raw = RawImage(frames=(Image.new("RGB", (9, 7), (10, 20, 30)),))

    assert encode_webp(raw, 75) == encode_webp(raw, 75)


def test_encode_webp_animated(tmp_path: Path) -> None:
    """Write every frame when the raw image is animated."""
    raw = decode(_animated_gif(tmp_path), SourceFormat.GIF, all_frames=True)

    im = _open_webp(encode_webp(raw, 80))

    assert getattr(im, "n_frames", 1) == 3


def test_encode_webp_rejects_oversized_images() -> None:
    """Raise EncodeError past the WebP dimension limit."""
    raw = RawImage(frames=(Image.new("L", (WEBP_MAX_DIMENSION + 1, 1)),))

    with pytest.raises(EncodeError, match="exceeds"):
        encode_webp(raw, 80)
