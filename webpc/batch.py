from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Union

from .engine import Decoder, Encoder, convert
from .errors import InvalidSourceRoot, OutputRootUncreatable
from .formats import classify
from .paths import mirror
from .results import (
    BatchReport,
    ConversionOutcome,
    ConversionTask,
    Failed,
    FailureCause,
    Skipped,
    UNSUPPORTED_EXTENSION,
)
from .settings import ConvertSettings
from .walker import walk


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ConversionOutcome], None]


class _Accumulator:
    """Collects outcomes; appends are serialized so workers may share it."""

    def __init__(self, progress_callback: Optional[ProgressCallback] = None) -> None:
        self._outcomes: List[ConversionOutcome] = []
        self._lock = threading.Lock()
        self._progress_callback = progress_callback

    def add(self, outcome: ConversionOutcome) -> None:
        with self._lock:
            self._outcomes.append(outcome)
        if self._progress_callback:
            self._progress_callback(outcome)

    def snapshot(self) -> tuple:
        with self._lock:
            return tuple(self._outcomes)


class BatchConverter:
    """
    Convert every JPEG/PNG/GIF under source_dir into a WebP under output_dir,
    keeping the relative layout:

        src/a/b/cat.png  ->  out/a/b/cat.webp

    Fatal problems (bad source root, output root that cannot be created)
    raise before any file is touched. Everything that goes wrong with a
    single file ends up in the returned BatchReport instead.
    """

    def __init__(
        self,
        source_dir: Union[str, Path],
        output_dir: Union[str, Path],
        settings: Optional[ConvertSettings] = None,
        decoder: Optional[Decoder] = None,
        encoder: Optional[Encoder] = None,
    ) -> None:
        self.source_dir = Path(source_dir)
        self.output_dir = Path(output_dir)
        self.settings = settings or ConvertSettings()
        self._decoder = decoder
        self._encoder = encoder

    # ----- Public API -----

    def convert_all(self, progress_callback: Optional[ProgressCallback] = None) -> BatchReport:
        self._prepare_roots()

        acc = _Accumulator(progress_callback)

        def on_walk_error(path: Path, exc: OSError) -> None:
            logger.warning("Cannot read %s: %s", path, exc)
            acc.add(Failed(src_path=path, cause=FailureCause.READ, detail=str(exc)))

        paths = walk(self.source_dir, exclude_dir=self._excluded_dir(), onerror=on_walk_error)

        logger.info("Converting %s -> %s", self.source_dir, self.output_dir)

        # Output path -> the source that claimed it first in walk order.
        claimed: Dict[Path, Path] = {}

        if self.settings.workers > 1:
            self._run_pool(paths, acc, claimed)
        else:
            for path in paths:
                acc.add(self._process(path, claimed))

        report = BatchReport(
            source_root=self.source_dir,
            output_root=self.output_dir,
            outcomes=acc.snapshot(),
        )
        logger.info(
            "Done: %d converted, %d skipped, %d failed",
            report.converted,
            report.skipped,
            report.failed,
        )
        return report

    def convert_file(self, path: Union[str, Path]) -> ConversionOutcome:
        """
        Convert a single file under the source root into its mirrored location.

        Raises PathError if `path` is outside the source root.
        """
        self._prepare_roots()
        return self._process(Path(path))

    # ----- Internals -----

    def _prepare_roots(self) -> None:
        src = self.source_dir
        if not src.exists():
            raise InvalidSourceRoot(src, "source root does not exist")
        if not src.is_dir():
            raise InvalidSourceRoot(src, "source root is not a directory")

        out = self.output_dir
        if out.exists() and not out.is_dir():
            raise OutputRootUncreatable(out, "output root exists and is not a directory")
        try:
            out.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputRootUncreatable(out, f"cannot create output root ({e})") from e

    def _excluded_dir(self) -> Optional[Path]:
        if not self.settings.exclude_output_dir:
            return None
        src = self.source_dir.resolve()
        out = self.output_dir.resolve()
        # Converting in place: .webp outputs are skipped by extension anyway.
        if out == src or not out.is_relative_to(src):
            return None
        return out

    def _build_task(self, path: Path) -> Optional[ConversionTask]:
        fmt = classify(path)
        if fmt is None:
            return None
        return ConversionTask(
            source_path=path,
            output_path=mirror(self.source_dir, path, self.output_dir),
            format=fmt,
        )

    def _plan(
        self, path: Path, claimed: Optional[Dict[Path, Path]] = None
    ) -> Union[ConversionTask, ConversionOutcome]:
        """
        Turn a walked path into a task, or into an outcome when there is
        nothing to dispatch.

        `claimed` maps each output path handed out so far in this batch to
        the source that got it. A later source mirroring to the same output
        (cat.jpg + cat.png -> cat.webp) fails instead of overwriting it.
        Always called from the walking thread, so it needs no lock.
        """
        task = self._build_task(path)
        if task is None:
            logger.debug("Skipped %s: %s", path, UNSUPPORTED_EXTENSION)
            return Skipped(src_path=path, reason=UNSUPPORTED_EXTENSION)

        if claimed is not None:
            first = claimed.setdefault(task.output_path, path)
            if first != path:
                detail = f"output {task.output_path} collides with {first}"
                logger.warning("Failed (write) %s: %s", path, detail)
                return Failed(src_path=path, cause=FailureCause.WRITE, detail=detail)

        return task

    def _process(self, path: Path, claimed: Optional[Dict[Path, Path]] = None) -> ConversionOutcome:
        planned = self._plan(path, claimed)
        if isinstance(planned, ConversionTask):
            return self._convert(planned)
        return planned

    def _convert(self, task: ConversionTask) -> ConversionOutcome:
        return convert(task, self.settings, decoder=self._decoder, encoder=self._encoder)

    def _run_pool(self, paths, acc: _Accumulator, claimed: Dict[Path, Path]) -> None:
        workers = self.settings.workers
        max_in_flight = workers * 2
        in_flight: Set[Future] = set()

        def drain(done: Set[Future]) -> None:
            for f in done:
                acc.add(f.result())

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="webpc") as pool:
            for path in paths:
                planned = self._plan(path, claimed)
                if not isinstance(planned, ConversionTask):
                    acc.add(planned)
                    continue

                in_flight.add(pool.submit(self._convert, planned))
                if len(in_flight) >= max_in_flight:
                    done, in_flight = wait(in_flight, return_when=FIRST_COMPLETED)
                    drain(done)

            done, _ = wait(in_flight)
            drain(done)


def convert_all(
    source_dir: Union[str, Path],
    output_dir: Union[str, Path],
    settings: Optional[ConvertSettings] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> BatchReport:
    """Functional shortcut for BatchConverter(source_dir, output_dir, settings).convert_all()."""
    return BatchConverter(source_dir, output_dir, settings).convert_all(progress_callback)
