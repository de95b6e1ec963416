"""
Pillow-backed decode / encode collaborators.

The engine only relies on the two contracts below, so either function can
be swapped (tests inject fakes):

    decode(data, fmt) -> RawImage        raises DecodeError
    encode_webp(raw, quality) -> bytes   raises EncodeError
"""
from __future__ import annotations

import io
import struct
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, ImageOps, ImageSequence, features

from .errors import DecodeError, EncodeError
from .formats import SourceFormat
from .settings import DEFAULT_QUALITY


# libwebp refuses anything larger on either side.
WEBP_MAX_DIMENSION = 16383

# Pillow plugins surface malformed input through all of these.
_DECODE_ERRORS = (
    OSError,
    ValueError,
    SyntaxError,
    EOFError,
    struct.error,
    Image.DecompressionBombError,
)


@dataclass(frozen=True)
class RawImage:
    frames: Tuple[Image.Image, ...]
    durations: Tuple[int, ...] = ()
    loop: int = 0
    exif: Optional[bytes] = None
    icc_profile: Optional[bytes] = None

    @property
    def image(self) -> Image.Image:
        return self.frames[0]

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    @property
    def is_animated(self) -> bool:
        return len(self.frames) > 1


def decode(data: bytes, fmt: SourceFormat, all_frames: bool = False) -> RawImage:
    """
    Decode `data` with the decoder for `fmt` only.

    A file whose content does not match its extension fails here rather
    than being silently decoded as something else.
    """
    try:
        with Image.open(io.BytesIO(data), formats=[fmt.pil_format]) as im:
            im.load()

            if all_frames and getattr(im, "n_frames", 1) > 1:
                frames = []
                durations = []
                for frame in ImageSequence.Iterator(im):
                    frames.append(frame.convert(_target_mode(frame)))
                    durations.append(int(frame.info.get("duration", 100)))
                return RawImage(
                    frames=tuple(frames),
                    durations=tuple(durations),
                    loop=int(im.info.get("loop", 0)),
                    exif=im.info.get("exif"),
                    icc_profile=im.info.get("icc_profile"),
                )

            # JPEG orientation lives in EXIF; bake it into the pixels.
            oriented = ImageOps.exif_transpose(im) if fmt is SourceFormat.JPEG else im
            return RawImage(
                frames=(oriented.convert(_target_mode(oriented)),),
                exif=oriented.info.get("exif"),
                icc_profile=oriented.info.get("icc_profile"),
            )
    except _DECODE_ERRORS as e:
        raise DecodeError(f"cannot decode {fmt.value}: {e}") from e


def encode_webp(
    raw: RawImage,
    quality: int = DEFAULT_QUALITY,
    *,
    lossless: bool = False,
    method: int = 4,
    keep_metadata: bool = False,
) -> bytes:
    if not features.check("webp"):
        raise EncodeError("Pillow was built without WebP support")

    w, h = raw.size
    if w > WEBP_MAX_DIMENSION or h > WEBP_MAX_DIMENSION:
        raise EncodeError(f"{w}x{h} exceeds the WebP limit of {WEBP_MAX_DIMENSION} pixels per side")

    kwargs: dict = {
        "quality": int(quality),
        "lossless": bool(lossless),
        "method": int(method),
    }

    if keep_metadata:
        if raw.exif is not None:
            kwargs["exif"] = raw.exif
        if raw.icc_profile is not None:
            kwargs["icc_profile"] = raw.icc_profile

    if raw.is_animated:
        kwargs["save_all"] = True
        kwargs["append_images"] = list(raw.frames[1:])
        kwargs["duration"] = list(raw.durations)
        kwargs["loop"] = raw.loop

    buf = io.BytesIO()
    try:
        raw.image.save(buf, format="WEBP", **kwargs)
    except (OSError, ValueError) as e:
        raise EncodeError(f"WebP encoding failed: {e}") from e
    return buf.getvalue()


def _target_mode(im: Image.Image) -> str:
    # WebP holds RGB or RGBA; keep alpha only when the source has it.
    return "RGBA" if _has_alpha(im) else "RGB"


def _has_alpha(im: Image.Image) -> bool:
    if im.mode in ("RGBA", "LA", "PA", "RGBa", "La"):
        return True
    if im.mode == "P" and "transparency" in im.info:
        return True
    return False
