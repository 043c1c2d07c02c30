from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from inventory.fetch import DEFAULT_CSV_URL, download_csv, download_csv_if_needed
from inventory.loader import load_work_items
from scanner import __version__
from scanner.common import setup_logging
from scanner.config import load_config
from scanner.console import console, make_progress, print_analysis, print_summary
from scanner.dispatch import run_batch
from scanner.errors import ScanError
from scanner.pipeline import ItemPipeline
from scanner.report import load_report, write_report
from scanner.summary import categorize, summarize

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def cmd_update_source(args: argparse.Namespace) -> int:
    status = download_csv_if_needed(args.url, args.output, args.force)
    if status == "downloaded":
        console.print("CSV source downloaded successfully.")
    else:
        console.print(f"CSV source file '{args.output}' already exists, skipping download.")
    return 0


def cmd_process(args: argparse.Namespace) -> int:
    config = load_config(
        args.config,
        quiet=args.quiet,
        attempts=args.retries,
        delay_seconds=args.retry_delay,
        clone_timeout=args.clone_timeout,
    )

    if args.download:
        download_csv(args.url, args.input)
        console.print("Downloaded CSV file before processing.")

    items = load_work_items(args.input)
    console.print(f"Processing {len(items)} records using {args.workers} workers...")

    pipeline = ItemPipeline(config)
    with make_progress() as progress:
        task = progress.add_task("Processing modules", total=len(items))
        result = run_batch(
            items,
            pipeline,
            args.workers,
            on_progress=lambda done, total: progress.update(task, completed=done),
        )

    write_report(result.outcomes, args.output)
    logger.info("Wrote %d results to %s", len(result.outcomes), args.output)
    print_summary(summarize(result.outcomes), str(args.output))
    if result.interrupted:
        console.print("[yellow]Run interrupted; unfinished modules are marked as cancelled.[/yellow]")
        return EXIT_INTERRUPTED
    return 0


def cmd_analysis(args: argparse.Namespace) -> int:
    outcomes = load_report(args.input)
    config = load_config(args.config)
    print_analysis(categorize(outcomes), config.tracked_providers.keys())
    return 0


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="avm-version-check",
        description="Check Terraform Azure Verified Modules against provider version constraints",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default="INFO", help="logging level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--log-file", default=None, help="also write logs to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    update = sub.add_parser("update-source", help="Download/update the module CSV file from a remote source")
    update.add_argument("-u", "--url", default=DEFAULT_CSV_URL, help="URL of the CSV file to download")
    update.add_argument("-o", "--output", default="modules.csv", help="Local filename to save the CSV")
    update.add_argument("-f", "--force", action="store_true", default=False, help="Force download even if the file already exists")
    update.set_defaults(func=cmd_update_source)

    process = sub.add_parser("process", help="Clone modules, check provider constraints and write JSON results")
    process.add_argument("-i", "--input", default="modules.csv", help="Input CSV file containing Terraform modules")
    process.add_argument("-o", "--output", default="output.json", help="Output JSON file for results")
    process.add_argument("-w", "--workers", type=_positive_int, default=5, help="Number of concurrent workers")
    process.add_argument("-q", "--quiet", action="store_true", default=False, help="Suppress warning logs during processing")
    process.add_argument("-d", "--download", action="store_true", default=False, help="Download the CSV file before processing (overwrites existing file)")
    process.add_argument("-u", "--url", default=DEFAULT_CSV_URL, help="URL of the CSV file to download if --download is set")
    process.add_argument("--config", default=None, help="YAML file with tracked provider minimum versions")
    process.add_argument("--clone-timeout", type=float, default=None, help="Seconds before a single clone is abandoned (0 disables)")
    process.add_argument("--retries", type=_positive_int, default=None, help="Clone attempts per repository")
    process.add_argument("--retry-delay", type=float, default=None, help="Seconds to wait between clone attempts")
    process.set_defaults(func=cmd_process)

    analysis = sub.add_parser("analysis", help="Perform detailed analysis on the JSON output from 'process'")
    analysis.add_argument("-i", "--input", default="output.json", help="Input JSON file with processed results")
    analysis.add_argument("--config", default=None, help="YAML file with tracked provider minimum versions")
    analysis.set_defaults(func=cmd_analysis)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    setup_logging(args.log_level, args.log_file)

    try:
        return args.func(args)
    except ScanError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
