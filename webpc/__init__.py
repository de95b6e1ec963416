from .batch import BatchConverter, convert_all
from .errors import (
    InvalidSourceRoot,
    OutputRootUncreatable,
    PathError,
    WebpcError,
)
from .formats import SourceFormat, classify
from .paths import ensure_parent_dirs, mirror
from .results import BatchReport, ConversionTask, Converted, Failed, FailureCause, Skipped
from .settings import ConvertSettings
from .walker import walk

__version__ = "1.0.0"

__all__ = [
    "BatchConverter",
    "BatchReport",
    "ConversionTask",
    "ConvertSettings",
    "Converted",
    "Failed",
    "FailureCause",
    "InvalidSourceRoot",
    "OutputRootUncreatable",
    "PathError",
    "Skipped",
    "SourceFormat",
    "WebpcError",
    "classify",
    "convert_all",
    "ensure_parent_dirs",
    "mirror",
    "walk",
]
