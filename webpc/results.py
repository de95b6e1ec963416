from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import ClassVar, List, Literal, Tuple, Union

from .formats import SourceFormat


Status = Literal["converted", "skipped", "failed"]

UNSUPPORTED_EXTENSION = "unsupported-extension"


class FailureCause(Enum):
    READ = "read"
    DECODE = "decode"
    ENCODE = "encode"
    WRITE = "write"


@dataclass(frozen=True)
class ConversionTask:
    source_path: Path
    output_path: Path
    format: SourceFormat


# One outcome per file the walker yields. All three are immutable so they
# can be handed across worker threads without copying.

@dataclass(frozen=True)
class Converted:
    status: ClassVar[Status] = "converted"

    src_path: Path
    out_path: Path
    src_bytes: int = 0
    out_bytes: int = 0

    @property
    def saved_bytes(self) -> int:
        return max(0, self.src_bytes - self.out_bytes)


@dataclass(frozen=True)
class Skipped:
    status: ClassVar[Status] = "skipped"

    src_path: Path
    reason: str = UNSUPPORTED_EXTENSION


@dataclass(frozen=True)
class Failed:
    status: ClassVar[Status] = "failed"

    src_path: Path
    cause: FailureCause
    detail: str


ConversionOutcome = Union[Converted, Skipped, Failed]


@dataclass(frozen=True)
class BatchReport:
    """
    Everything that happened in one batch.

    `outcomes` is in walk order for a sequential run. With a worker pool only
    the counts are guaranteed to match a sequential run, not the order.
    """
    source_root: Path
    output_root: Path
    outcomes: Tuple[ConversionOutcome, ...] = ()

    @property
    def converted(self) -> int:
        return sum(1 for o in self.outcomes if isinstance(o, Converted))

    @property
    def skipped(self) -> int:
        return sum(1 for o in self.outcomes if isinstance(o, Skipped))

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def failures(self) -> List[Failed]:
        return [o for o in self.outcomes if isinstance(o, Failed)]

    @property
    def total_files(self) -> int:
        return len(self.outcomes)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    @property
    def total_src_bytes(self) -> int:
        return sum(o.src_bytes for o in self.outcomes if isinstance(o, Converted))

    @property
    def total_out_bytes(self) -> int:
        return sum(o.out_bytes for o in self.outcomes if isinstance(o, Converted))

    @property
    def saved_bytes(self) -> int:
        return max(0, self.total_src_bytes - self.total_out_bytes)

    @property
    def saved_percent(self) -> float:
        if self.total_src_bytes <= 0:
            return 0.0
        return (self.saved_bytes / self.total_src_bytes) * 100.0

    def skip_reasons(self) -> dict[str, int]:
        reasons: dict[str, int] = {}
        for o in self.outcomes:
            if isinstance(o, Skipped):
                reasons[o.reason] = reasons.get(o.reason, 0) + 1
        return reasons
