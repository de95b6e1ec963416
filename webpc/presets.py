from __future__ import annotations

from .settings import ConvertSettings


PRESET_NAMES = ("web", "small", "lossless", "animated")


def apply_preset(name: str, base: ConvertSettings) -> ConvertSettings:
    name = name.lower()

    if name == "web":
        return base.__class__(
            **{**base.__dict__,
               "quality": 80,
               "lossless": False,
               "strip_metadata": True}
        )

    if name == "small":
        return base.__class__(
            **{**base.__dict__,
               "quality": 60,
               "lossless": False,
               "method": 6,
               "strip_metadata": True}
        )

    if name == "lossless":
        return base.__class__(
            **{**base.__dict__,
               "quality": 100,
               "lossless": True,
               "method": 6}
        )

    if name == "animated":
        return base.__class__(
            **{**base.__dict__,
               "animated_gif": True}
        )

    raise ValueError(f"Unknown preset: {name}")
