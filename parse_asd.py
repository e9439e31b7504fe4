#!/usr/bin/env python3
"""
SmartTrak .asd log decoder CLI.

Usage:
    python parse_asd.py show dives.asd                      # Header + dive summaries
    python parse_asd.py show dives.asd --variant legacy     # Older 316-byte layout
    python parse_asd.py scan dives.asd --device-id 0x04692c61
    python parse_asd.py export dives.asd -o dive.xml        # divelogs.de XML
    python parse_asd.py plot dives.asd -o profile.png       # Depth/temperature chart
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import matplotlib
matplotlib.use('Agg')  # Headless rendering
import matplotlib.pyplot as plt

from divelogs import from_dive, to_xml
from smarttrak import DecodeError, DecodeResult, load_effective_config, load_logbook, load_records

logger = logging.getLogger("parse_asd")


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Set up logging configuration."""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=log_format,
        handlers=handlers,
    )


def log_events(result: DecodeResult) -> None:
    """Echo a dive's diagnostic events at DEBUG level."""
    for event in result.events:
        logger.debug(f"[{event.kind} @ {event.offset}] {event.message}")


def print_dive(index: int, result: DecodeResult) -> None:
    dive = result.dive
    print(f"=== Dive #{index} ===")
    print(f"Main info: Date: {dive.time}; Sequence: {dive.sequence}; Duration: {dive.duration};")
    print(
        f"Temperatures: Min: {dive.min_temperature:.1f}; Max: {dive.max_temperature:.1f}; "
        f"Deco: {dive.deco_temperature:.1f}; Air: {dive.air_temperature:.1f};"
    )
    print(f"Depths: Average: {dive.average_depth:.1f}; Max: {dive.max_depth:.1f};")
    print(f"Gas: {dive.percent_o2}% O2, {dive.percent_he}% He; Water: {dive.water_type.name.lower()}")
    print(f"Samples: {len(dive.profile)}")


def load_results(args, settings: dict) -> List[DecodeResult]:
    """Decode the input either as a stream or by scanning for records."""
    decoder = settings["decoder"]
    if getattr(args, "scan", False) or args.command == "scan":
        return [r for _, r in load_records(args.input, decoder)]

    logbook = load_logbook(args.input, decoder)
    print(f"Logbook: {logbook.header.name}")
    for event in logbook.events:
        logger.debug(event.message)
    return list(logbook.results)


def select(results: List[DecodeResult], index: int) -> DecodeResult:
    if not results:
        raise ValueError("No dives found")
    if not 1 <= index <= len(results):
        raise ValueError(f"Dive index {index} out of range (1-{len(results)})")
    return results[index - 1]


def plot_profile(result: DecodeResult, output_path: str) -> None:
    """Save a depth/temperature chart of one dive."""
    dive = result.dive
    minutes = [(p.time - dive.time).total_seconds() / 60.0 for p in dive.profile]
    depths = [p.depth for p in dive.profile]
    temps = [p.temperature for p in dive.profile]

    _fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(minutes, depths, color="tab:blue", label="Depth")
    bookmarks = [(m, p.depth) for m, p in zip(minutes, dive.profile) if p.bookmark]
    if bookmarks:
        ax.scatter(*zip(*bookmarks), color="red", s=30, zorder=5, label="Bookmark")
    ax.invert_yaxis()
    ax.set_xlabel("Time (min)")
    ax.set_ylabel("Depth (m)")
    ax.set_title(f"Dive #{dive.sequence} - {dive.time:%Y-%m-%d %H:%M}")
    ax.grid(True, alpha=0.3)

    ax_temp = ax.twinx()
    ax_temp.plot(minutes, temps, color="tab:orange", linestyle="--", label="Temperature")
    ax_temp.set_ylabel("Temperature (°C)")

    ax.legend(loc="lower left")
    plt.tight_layout()
    plt.savefig(output_path, dpi=150)
    plt.close()


def cmd_show(args, settings: dict) -> None:
    results = load_results(args, settings)
    for i, result in enumerate(results, 1):
        print_dive(i, result)
        log_events(result)


def cmd_export(args, settings: dict) -> None:
    result = select(load_results(args, settings), args.index)
    log_events(result)
    data = from_dive(
        result.dive,
        location=args.location if args.location is not None else settings["location"],
        site=args.site if args.site is not None else settings["site"],
    )
    xml = to_xml(data)
    if args.output:
        Path(args.output).write_text(xml, encoding="utf-8")
        print(f"Wrote {len(data.samples)} samples to {args.output}")
    else:
        print(xml)


def cmd_plot(args, settings: dict) -> None:
    result = select(load_results(args, settings), args.index)
    plot_profile(result, args.output)
    print(f"Saved profile chart to {args.output}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Decode SmartTrak .asd dive logs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python parse_asd.py show dives.asd
  python parse_asd.py scan dives.asd --device-id 0x04692c61 --workers 4
  python parse_asd.py export dives.asd --index 2 -o dive.xml
  python parse_asd.py plot dives.asd -o profile.png
        """
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("input", type=str, help="Path to .asd file")
    common.add_argument(
        "--config", type=str, default=None,
        help="Path to config YAML (default: config.yaml beside the project)"
    )
    common.add_argument(
        "--variant", choices=["tagged", "legacy"], default=None,
        help="Record layout (default: tagged)"
    )
    common.add_argument(
        "--scan", action="store_true",
        help="Locate records by device id instead of reading the stream"
    )
    common.add_argument("--device-id", type=str, default=None, help="Device id for --scan (e.g. 0x04692c61)")
    common.add_argument("--workers", type=int, default=None, help="Threads used by --scan")
    common.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    common.add_argument("--log-file", type=str, default=None, help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("show", parents=[common], help="Print header and dive summaries")
    subparsers.add_parser("scan", parents=[common], help="Scan a raw file for records by device id")

    export_parser = subparsers.add_parser("export", parents=[common], help="Export a dive as divelogs.de XML")
    export_parser.add_argument("--index", type=int, default=1, help="Dive to export, 1-based (default: 1)")
    export_parser.add_argument("-o", "--output", type=str, default=None, help="Output file (default: stdout)")
    export_parser.add_argument("--location", type=str, default=None, help="Dive location text")
    export_parser.add_argument("--site", type=str, default=None, help="Dive site text")

    plot_parser = subparsers.add_parser("plot", parents=[common], help="Plot a dive profile to PNG")
    plot_parser.add_argument("--index", type=int, default=1, help="Dive to plot, 1-based (default: 1)")
    plot_parser.add_argument("-o", "--output", type=str, default="profile.png", help="Output PNG path")

    return parser


COMMANDS = {
    "show": cmd_show,
    "scan": cmd_show,
    "export": cmd_export,
    "plot": cmd_plot,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(args.verbose, args.log_file)

    try:
        settings = load_effective_config(
            config_path=args.config,
            variant=args.variant,
            workers=args.workers,
            device_id=args.device_id,
        )
        logger.debug(f"Config source: {settings['source']} ({settings['config_path']})")
        COMMANDS[args.command](args, settings)
    except (DecodeError, OSError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
