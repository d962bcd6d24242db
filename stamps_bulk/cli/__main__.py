from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import AppConfig, ConfigError, load_config
from ..logging.init import log_summary, setup_logging
from ..services.attachments import match_attachments
from ..services.orchestrator import (
    ProcessingError,
    build_attachment_store,
    load_records,
    run_pipeline,
)
from ..services.serializer import estimate_total_size
from ..services.summary import format_file_size, render_summary_line
from ..services.template import generate_template
from ..services.validator import validate_records

"""CLI entrypoint.

Flow:
- Load .env (STAMPS_* overrides) and the YAML config
- --template PATH: write the Excel template and exit
- --inspect-data: print headers, a validated preview and attachment matching, then exit
- Otherwise run the pipeline and print the SUMMARY line

Exit codes: 0 success, 1 fatal error, 2 validation errors present.
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_VALIDATION_ERRORS = 2

DEFAULT_CONFIG = Path("config/stamps.yml")
PREVIEW_ROWS = 5


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv.

    既存の環境変数を優先する (override=False)。CI で export した値を .env で潰さないため。
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Excel -> bulk stamping XML generator")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG, help="YAML config path (default: config/stamps.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print headers, first rows and attachment matching then exit")
    p.add_argument("--allow-errors", action="store_true", help="Generate XML even when validation errors exist")
    p.add_argument("--template", type=Path, metavar="PATH", help="Write the Excel input template to PATH and exit")
    return p.parse_args(argv)


def _inspect_data(cfg: AppConfig) -> int:
    table, records = load_records(cfg)
    store = build_attachment_store(cfg)
    report = validate_records(records, store, cfg.profile)

    print(f"FILE: {Path(cfg.input_file).name} SHEET: {table.sheet_name}")
    print(f"  columns={table.columns}")
    print(f"  records={len(records)}")
    for record in records[:PREVIEW_ROWS]:
        print(
            f"    row={record.row_number} refNo={record.ref_no} dateSigned={record.instrument_date}"
            f" transferor={record.transferor.name} transferee={record.transferee.name}"
            f" consideration={record.consideration} attachment={record.attachment}"
        )
        for issue in report.issues_for_row(record.row_number):
            print(f"      {issue.severity.value}: {issue.field_name} {issue.error_type.value} {issue.message}")
    print(
        f"  validation profile={cfg.validation_profile} valid={report.valid_count}/{len(records)}"
        f" errors={report.error_count} warnings={report.warning_count}"
    )

    match = match_attachments(records, store)
    print(f"  attachments required={len(match.required)} matched={len(match.matched)} missing={len(match.missing)}")
    for name in match.missing:
        print(f"    missing: {name}")
    for name in match.unused:
        print(f"    unused: {name}")
    print(f"  estimated_output={format_file_size(estimate_total_size(records, store))}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみ sys.argv を読む (テストで main([]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        setup_logging(debug=True)
        logger.debug("debug mode enabled")

    if args.template is not None:
        try:
            generate_template(args.template)
        except OSError as e:
            logger.error(f"template: {e}")
            return EXIT_FATAL
        return EXIT_SUCCESS_ALL

    _load_env_file(Path(".env"))
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        try:
            return _inspect_data(cfg)
        except ProcessingError as e:
            logger.error(f"inspect: {e}")
            return EXIT_FATAL

    logger.info(f"Processing: {cfg.input_file} -> {cfg.output_directory}")
    try:
        result = run_pipeline(cfg, allow_errors=args.allow_errors)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    if result.issue_log is not None:
        logger.info(f"issue log: {result.issue_log}")

    summary_line = render_summary_line(result)
    # log_summary adds the "SUMMARY" label itself
    log_summary(summary_line.removeprefix("SUMMARY "))

    if result.error_count > 0:
        return EXIT_VALIDATION_ERRORS
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
