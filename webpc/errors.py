from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from .results import FailureCause


class WebpcError(Exception):
    """Base class for everything this package raises."""


# ----- Batch-level (fatal) -----

class BatchError(WebpcError):
    """Aborts the whole batch before any file is converted."""

    def __init__(self, path: Union[str, Path], message: str) -> None:
        self.path = Path(path)
        super().__init__(f"{message}: {self.path}")


class InvalidSourceRoot(BatchError):
    def __init__(self, path: Union[str, Path], message: str = "source root is not a directory") -> None:
        super().__init__(path, message)


class OutputRootUncreatable(BatchError):
    def __init__(self, path: Union[str, Path], message: str = "cannot create output root") -> None:
        super().__init__(path, message)


class PathError(WebpcError):
    """A source path does not live under the source root."""


# ----- Per-file -----

class ConversionError(WebpcError):
    """
    Raised inside the conversion of a single file.

    Never escapes the engine: it is turned into a Failed outcome there.
    """

    cause: FailureCause

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        self.path = path
        super().__init__(message)


class ReadError(ConversionError):
    cause = FailureCause.READ


class DecodeError(ConversionError):
    cause = FailureCause.DECODE


class EncodeError(ConversionError):
    cause = FailureCause.ENCODE


class WriteError(ConversionError):
    cause = FailureCause.WRITE
