"""Unit tests for batch report aggregation and export."""

from __future__ import annotations

import csv
import json
from pathlib import Path

from webpc.report import build_report_dict, save_report_csv, save_report_json
from webpc.results import BatchReport, Converted, Failed, FailureCause, Skipped


def _report() -> BatchReport:
    return BatchReport(
        source_root=Path("src"),
        output_root=Path("out"),
        outcomes=(
            Converted(Path("src/a.png"), Path("out/a.webp"), src_bytes=1000, out_bytes=400),
            Skipped(Path("src/notes.txt")),
            Failed(Path("src/bad.jpg"), FailureCause.DECODE, "cannot decode jpeg"),
            Converted(Path("src/b.gif"), Path("out/b.webp"), src_bytes=500, out_bytes=600),
            Failed(Path("src/c.png"), FailureCause.WRITE, "disk full"),
        ),
    )


def test_counts_and_failures_in_order() -> None:
    """Count each outcome kind and keep failures in walk order."""
    r = _report()

    assert (r.total_files, r.converted, r.skipped, r.failed) == (5, 2, 1, 2)
    assert [f.src_path.name for f in r.failures] == ["bad.jpg", "c.png"]
    assert [f.cause for f in r.failures] == [FailureCause.DECODE, FailureCause.WRITE]
    assert r.ok is False
    assert r.skip_reasons() == {"unsupported-extension": 1}


def test_byte_totals() -> None:
    """Sum sizes over converted files only."""
    r = _report()

    assert r.total_src_bytes == 1500
    assert r.total_out_bytes == 1000
    assert r.saved_bytes == 500
    assert round(r.saved_percent, 2) == 33.33


def test_empty_report_is_ok() -> None:
    """An empty batch has zero counts and is ok."""
    r = BatchReport(source_root=Path("s"), output_root=Path("o"))

    assert (r.converted, r.skipped, r.failed) == (0, 0, 0)
    assert r.ok is True
    assert r.saved_percent == 0.0


def test_outcome_status_tags() -> None:
    """Each outcome carries its status tag."""
    statuses = [o.status for o in _report().outcomes]

    assert statuses == ["converted", "skipped", "failed", "converted", "failed"]


def test_build_report_dict() -> None:
    """Serialize summary and per-file rows."""
    d = build_report_dict(_report())

    assert d["created_utc"].endswith("Z")
    assert d["summary"]["converted"] == 2
    assert d["summary"]["failed"] == 2
    assert d["files"][2] == {
        "src_path": str(Path("src/bad.jpg")),
        "status": "failed",
        "out_path": None,
        "src_bytes": 0,
        "out_bytes": 0,
        "reason": None,
        "cause": "decode",
        "detail": "cannot decode jpeg",
    }


def test_save_report_json_and_csv(tmp_path: Path) -> None:
    """Write both report formats, creating parent directories."""
    json_path = tmp_path / "reports" / "r.json"
    csv_path = tmp_path / "reports" / "r.csv"

    save_report_json(_report(), json_path)
    save_report_csv(_report(), csv_path)

    data = json.loads(json_path.read_text(encoding="utf-8"))
    assert len(data["files"]) == 5

    with csv_path.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [r["status"] for r in rows] == ["converted", "skipped", "failed", "converted", "failed"]
    assert rows[4]["cause"] == "write"
