from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional, Union


class SourceFormat(Enum):
    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"

    @property
    def pil_format(self) -> str:
        # Pillow registers decoders under upper-case names.
        return self.value.upper()


# Adding a format = one enum member + one row here + a decoder Pillow knows.
EXT_TO_FORMAT = {
    ".jpg": SourceFormat.JPEG,
    ".jpeg": SourceFormat.JPEG,
    ".png": SourceFormat.PNG,
    ".gif": SourceFormat.GIF,
}


def classify(path: Union[str, Path]) -> Optional[SourceFormat]:
    """Return the source format for a path's extension, or None if unsupported."""
    return EXT_TO_FORMAT.get(Path(path).suffix.lower())
