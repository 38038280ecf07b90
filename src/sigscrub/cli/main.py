from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from rich.console import Console
from rich.table import Table

from sigscrub.core.config import DEFAULT_CONFIG_PATH, Settings, load_config
from sigscrub.core.limiter import MAX_CONCURRENT, MIN_CONCURRENT
from sigscrub.core.pipeline import DEFAULT_MAX_CONCURRENT, run_tree
from sigscrub.core.processor import PROCESSORS
from sigscrub.core.schemas import RunSummary
from sigscrub.utils.logs import ERROR_LOG, INFO_LOG, close_logging, setup_logging

console = Console()


def concurrency_arg(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if not MIN_CONCURRENT <= n <= MAX_CONCURRENT:
        raise argparse.ArgumentTypeError(f"must be between {MIN_CONCURRENT} and {MAX_CONCURRENT}, got {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="sigscrub", description="Replace a signature string in files under a directory tree")
    ap.add_argument("root_path", help="Root directory containing the files to rewrite")
    ap.add_argument("-m", "--max-concurrent", type=concurrency_arg, default=DEFAULT_MAX_CONCURRENT,
                    help=f"Maximum files processed at once ({MIN_CONCURRENT}-{MAX_CONCURRENT})")
    ap.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="Config file, created with defaults if missing")
    ap.add_argument("--log-dir", default=".", help=f"Directory for {INFO_LOG} and {ERROR_LOG}")
    ap.add_argument("--strategy", choices=sorted(PROCESSORS), default=None,
                    help="Rewrite strategy (overrides the config file)")
    ap.add_argument("--drain-per-directory", action="store_true",
                    help="Finish every file of a directory before listing the next one")
    return ap


def render_summary_console(summary: RunSummary, settings: Settings) -> None:
    console.print(f"\n[bold]Root:[/bold] {summary.root}   [bold]Strategy:[/bold] {settings.strategy}")

    t = Table(title="Summary", show_lines=False)
    t.add_column("Metric")
    t.add_column("Count", justify="right")
    rows = [
        ("Directories listed", summary.dirs_listed),
        ("Directories unreadable", summary.dirs_unreadable),
        ("Directories already visited", summary.dirs_revisited),
        ("Files seen", summary.files_seen),
        ("Files matched", summary.files_matched),
        ("Succeeded", summary.succeeded),
        ("Failed", summary.failed),
        ("Unit faults", summary.faults),
        ("Peak in flight", summary.peak_in_flight),
    ]
    for label, count in rows:
        t.add_row(label, str(count))
    console.print(t)

    if summary.failed or summary.dirs_unreadable or summary.faults:
        console.print(f"[red]Some paths were not processed, see {ERROR_LOG}.[/red]")


def main(argv: list[str] | None = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    root = Path(args.root_path)
    if not root.is_dir():
        ap.error(f"not a directory: {root}")

    try:
        handlers = setup_logging(Path(args.log_dir))
    except OSError as e:
        console.print(f"[red]Cannot open log files: {e}[/red]")
        raise SystemExit(1)

    try:
        settings = Settings.from_config(load_config(Path(args.config)), strategy=args.strategy)
        summary = asyncio.run(
            run_tree(
                root,
                settings,
                max_concurrent=args.max_concurrent,
                drain_each_directory=args.drain_per_directory,
            )
        )
    finally:
        close_logging(handlers)

    render_summary_console(summary, settings)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
