from __future__ import annotations

from dataclasses import dataclass


DEFAULT_QUALITY = 80


@dataclass(frozen=True)
class ConvertSettings:
    """
    All user-configurable knobs for a batch.

    Pure data object (validation only, no behaviour) so the CLI, presets and
    tests can all build one the same way.
    """

    # ----- WebP encoding -----
    quality: int = DEFAULT_QUALITY  # 0-100, ignored for size when lossless
    lossless: bool = False
    method: int = 4  # 0-6, higher = smaller but slower

    # ----- GIF -----
    # False: first frame only. True: keep every frame as an animated WebP.
    animated_gif: bool = False

    # ----- Metadata -----
    # Stripping keeps outputs byte-stable; keeping copies EXIF and ICC over.
    strip_metadata: bool = True

    # ----- Batch -----
    workers: int = 1
    # Skip the output root during the walk when it sits inside the source root.
    exclude_output_dir: bool = True

    def __post_init__(self) -> None:
        if not 0 <= self.quality <= 100:
            raise ValueError(f"quality must be 0-100, got {self.quality}")
        if not 0 <= self.method <= 6:
            raise ValueError(f"method must be 0-6, got {self.method}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
