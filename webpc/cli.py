from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from .batch import BatchConverter
from .errors import BatchError
from .presets import PRESET_NAMES, apply_preset
from .report import save_report_csv, save_report_json
from .results import BatchReport
from .settings import DEFAULT_QUALITY, ConvertSettings


EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_FATAL = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="webpc",
        description="Batch-convert JPEG/PNG/GIF trees to WebP",
    )
    sub = p.add_subparsers(dest="command", required=True)

    conv = sub.add_parser("convert", help="Convert every image under SOURCE into OUTPUT")
    conv.add_argument("source", help="Source directory (scanned recursively)")
    conv.add_argument("output", help="Output directory (mirrors the source layout)")
    conv.add_argument("-v", "--verbose", action="store_true", help="Log every file")

    # Encoder knobs. None means "use the preset / default".
    conv.add_argument("--preset", choices=PRESET_NAMES, default=None, help="Start from a named preset")
    conv.add_argument("--quality", type=int, default=None, help=f"WebP quality (0-100), default {DEFAULT_QUALITY}")
    conv.add_argument("--method", type=int, default=None, help="WebP method (0-6), default 4")
    conv.add_argument("--lossless", action="store_true", help="WebP lossless mode")
    conv.add_argument("--animated-gif", action="store_true", help="Keep all GIF frames (default: first frame)")
    conv.add_argument("--keep-metadata", action="store_true", help="Copy EXIF / ICC profile into outputs")

    # Batch
    conv.add_argument("--workers", type=int, default=1, help="Parallel conversions (default 1)")
    conv.add_argument(
        "--include-output-dir",
        action="store_true",
        help="Also walk the output dir when it sits inside the source dir",
    )
    conv.add_argument("--strict", action="store_true", help="Exit 1 if any file failed")
    conv.add_argument("--no-progress", action="store_true", help="Hide the progress bar")

    # Reports
    conv.add_argument("--report-json", type=Path, default=None, help="Write a JSON report here")
    conv.add_argument("--report-csv", type=Path, default=None, help="Write a CSV report here")

    return p


def settings_from_args(args: argparse.Namespace) -> ConvertSettings:
    s = ConvertSettings(
        workers=int(args.workers),
        exclude_output_dir=not bool(args.include_output_dir),
    )
    if args.preset:
        s = apply_preset(args.preset, s)

    overrides: dict = {}
    if args.quality is not None:
        overrides["quality"] = int(args.quality)
    if args.method is not None:
        overrides["method"] = int(args.method)
    if args.lossless:
        overrides["lossless"] = True
    if args.animated_gif:
        overrides["animated_gif"] = True
    if args.keep_metadata:
        overrides["strip_metadata"] = False

    return s.__class__(**{**s.__dict__, **overrides})


def print_summary(report: BatchReport) -> None:
    print("\n=== Batch Summary ===")
    print("Total found:", report.total_files)
    print("Converted  :", report.converted)
    print("Skipped    :", report.skipped)
    print("Failed     :", report.failed)
    print(f"Saved      : {report.saved_bytes} bytes ({report.saved_percent:.1f}%)")

    reasons = report.skip_reasons()
    if reasons:
        print("\nSkip reasons:")
        for k, v in sorted(reasons.items(), key=lambda x: (-x[1], x[0])):
            print(f"  {k}: {v}")

    if report.failures:
        print("\nFailures:")
        for f in report.failures:
            print(f"  [{f.cause.value}] {f.src_path}: {f.detail}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "convert":
        try:
            settings = settings_from_args(args)
        except ValueError as e:
            print(f"error: {e}", file=sys.stderr)
            return EXIT_FATAL

        converter = BatchConverter(args.source, args.output, settings)

        try:
            with logging_redirect_tqdm(), tqdm(unit="file", disable=bool(args.no_progress)) as bar:
                report = converter.convert_all(progress_callback=lambda _outcome: bar.update(1))
        except BatchError as e:
            print(f"error: {e}", file=sys.stderr)
            return EXIT_FATAL

        print_summary(report)

        try:
            if args.report_json:
                save_report_json(report, args.report_json)
                print("\nReport written:", args.report_json)
            if args.report_csv:
                save_report_csv(report, args.report_csv)
                print("CSV written   :", args.report_csv)
        except OSError as e:
            print(f"error: cannot write report: {e}", file=sys.stderr)
            return EXIT_FATAL

        if args.strict and not report.ok:
            return EXIT_FAILURES
        return EXIT_OK

    parser.print_help()
    return EXIT_FATAL
