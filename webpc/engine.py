from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional

from .codec import RawImage, decode, encode_webp
from .errors import ConversionError, ReadError, WriteError
from .formats import SourceFormat
from .paths import ensure_parent_dirs
from .results import ConversionOutcome, ConversionTask, Converted, Failed
from .settings import ConvertSettings


logger = logging.getLogger(__name__)

Decoder = Callable[[bytes, SourceFormat], RawImage]
Encoder = Callable[[RawImage, int], bytes]


def convert(
    task: ConversionTask,
    settings: Optional[ConvertSettings] = None,
    decoder: Optional[Decoder] = None,
    encoder: Optional[Encoder] = None,
) -> ConversionOutcome:
    """
    Read, decode, encode and write one file.

    Never raises for a problem with the file itself: every per-file failure
    comes back as a Failed outcome tagged with the step that broke.
    """
    s = settings or ConvertSettings()
    decoder = decoder or _default_decoder(s)
    encoder = encoder or _default_encoder(s)

    try:
        data = _read_bytes(task.source_path)
        raw = decoder(data, task.format)
        payload = encoder(raw, s.quality)
        _write_bytes(task.output_path, payload)
    except ConversionError as e:
        logger.warning("Failed (%s) %s: %s", e.cause.value, task.source_path, e)
        return Failed(src_path=task.source_path, cause=e.cause, detail=str(e))

    logger.debug("Converted %s -> %s", task.source_path, task.output_path)
    return Converted(
        src_path=task.source_path,
        out_path=task.output_path,
        src_bytes=len(data),
        out_bytes=len(payload),
    )


def _default_decoder(s: ConvertSettings) -> Decoder:
    def _decode(data: bytes, fmt: SourceFormat) -> RawImage:
        return decode(data, fmt, all_frames=s.animated_gif and fmt is SourceFormat.GIF)
    return _decode


def _default_encoder(s: ConvertSettings) -> Encoder:
    def _encode(raw: RawImage, quality: int) -> bytes:
        return encode_webp(
            raw,
            quality,
            lossless=s.lossless,
            method=s.method,
            keep_metadata=not s.strip_metadata,
        )
    return _encode


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise ReadError(f"cannot read {path}: {e}", path=path) from e


def _write_bytes(out_path: Path, payload: bytes) -> None:
    ensure_parent_dirs(out_path)

    # Write to a temp file next to the target, then rename over it, so a
    # crash never leaves a half-written .webp behind.
    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=".webpc_", suffix=".tmp", dir=str(out_path.parent))
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
        Path(tmp_name).replace(out_path)
    except OSError as e:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        raise WriteError(f"cannot write {out_path}: {e}", path=out_path) from e
