from __future__ import annotations

import csv
import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .results import BatchReport, Converted, Failed, Skipped


@dataclass(frozen=True)
class FileReport:
    src_path: str
    status: str
    out_path: Optional[str] = None
    src_bytes: int = 0
    out_bytes: int = 0
    reason: Optional[str] = None
    cause: Optional[str] = None
    detail: Optional[str] = None


CSV_FIELDS = [
    "src_path",
    "status",
    "out_path",
    "src_bytes",
    "out_bytes",
    "reason",
    "cause",
    "detail",
]


def file_reports(report: BatchReport) -> List[FileReport]:
    files: List[FileReport] = []
    for o in report.outcomes:
        if isinstance(o, Converted):
            files.append(
                FileReport(
                    src_path=str(o.src_path),
                    status=o.status,
                    out_path=str(o.out_path),
                    src_bytes=o.src_bytes,
                    out_bytes=o.out_bytes,
                )
            )
        elif isinstance(o, Skipped):
            files.append(FileReport(src_path=str(o.src_path), status=o.status, reason=o.reason))
        elif isinstance(o, Failed):
            files.append(
                FileReport(
                    src_path=str(o.src_path),
                    status=o.status,
                    cause=o.cause.value,
                    detail=o.detail,
                )
            )
    return files


def build_report_dict(report: BatchReport) -> dict:
    created_utc = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")

    summary = {
        "source_root": str(report.source_root),
        "output_root": str(report.output_root),
        "total_files": report.total_files,
        "converted": report.converted,
        "skipped": report.skipped,
        "failed": report.failed,
        "total_src_bytes": report.total_src_bytes,
        "total_out_bytes": report.total_out_bytes,
        "saved_bytes": report.saved_bytes,
        "saved_percent": round(report.saved_percent, 2),
    }

    return {
        "created_utc": created_utc,
        "summary": summary,
        "files": [asdict(f) for f in file_reports(report)],
    }


def save_report_json(report: BatchReport, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as f:
        json.dump(build_report_dict(report), f, indent=2, ensure_ascii=False)


def save_report_csv(report: BatchReport, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for fr in file_reports(report):
            writer.writerow(asdict(fr))
