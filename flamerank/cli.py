"""
flamerank.cli - Command-line interface for flamerank.

This module provides a CLI for analyzing Speedscope profiles and printing
the ranked hotspots as a table or as JSON.

Usage:
    flamerank <input_file> [--output/-o <file>] [--top/-n <count>] [--format <format>]

Examples:
    flamerank profile.speedscope.json
    flamerank profile.speedscope.json -o hotspots.json --format json
    flamerank profile.speedscope.json -n 5
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from flamerank.core.errors import SpeedscopeParseError
from flamerank.core.parser import ProfileSummary, SpeedscopeParser

logger = logging.getLogger(__name__)

TABLE_COLUMNS = (
    ("Rank", 4),
    ("Name", 32),
    ("File", 24),
    ("Self", 12),
    ("Total", 12),
    ("Samples", 8),
    ("Incl%", 7),
    ("Excl%", 7),
)


def parse_args(args: List[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: List of arguments (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="flamerank",
        description="Rank the hottest functions of a Speedscope profile",
        epilog="Example: flamerank profile.speedscope.json -n 10",
    )

    parser.add_argument(
        "input_file",
        type=str,
        help="Path to the input profile (Speedscope JSON format)",
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output file path (defaults to stdout)",
    )

    parser.add_argument(
        "-n", "--top",
        type=int,
        default=None,
        help="Maximum number of hotspots to print (default: all)",
    )

    parser.add_argument(
        "--format",
        type=str,
        choices=["table", "json"],
        default="table",
        help="Output format: text table or json (default: table)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    return parser.parse_args(args)


def load_profile(input_path: str) -> ProfileSummary:
    """Load and analyze a Speedscope profile from a JSON file.

    Args:
        input_path: Path to the input JSON file

    Returns:
        Parsed ProfileSummary

    Raises:
        FileNotFoundError: If the input file doesn't exist
        json.JSONDecodeError: If the file contains invalid JSON
        SpeedscopeParseError: If the profile cannot be analyzed
    """
    path = Path(input_path)

    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    with open(path, "r", encoding="utf-8") as f:
        json_str = f.read()

    parser = SpeedscopeParser()
    return parser.parse_json(json_str)


def generate_table_output(summary: ProfileSummary, top: int | None = None) -> str:
    """Render ranked hotspots as a fixed-width text table.

    Args:
        summary: Parsed profile summary
        top: Maximum number of rows, None for all

    Returns:
        The table, followed by a totals line
    """
    header = " ".join(title.ljust(width) for title, width in TABLE_COLUMNS)
    lines = [header, "-" * len(header)]

    for hotspot in summary.top(top):
        values = (
            str(hotspot.rank),
            hotspot.name,
            hotspot.file,
            f"{hotspot.selfTimeMs:g}",
            f"{hotspot.totalTimeMs:g}",
            str(hotspot.sampleCount),
            f"{hotspot.inclusivePct:.2f}",
            f"{hotspot.exclusivePct:.2f}",
        )
        cells = []
        for value, (_, width) in zip(values, TABLE_COLUMNS):
            if len(value) > width:
                value = value[: width - 1] + "~"
            cells.append(value.ljust(width))
        lines.append(" ".join(cells).rstrip())

    lines.append("")
    lines.append(
        f"Total observed: {summary.totalSamples}  "
        f"Profiles: {summary.profileCount}  "
        f"Hotspots: {summary.hotspot_count}"
    )
    return "\n".join(lines)


def generate_json_output(summary: ProfileSummary, top: int | None = None) -> str:
    """Render the summary as JSON.

    Args:
        summary: Parsed profile summary
        top: Maximum number of hotspots, None for all

    Returns:
        JSON string with the summary fields and hotspot records
    """
    output = summary.to_dict()
    output["hotspots"] = [hotspot.to_dict() for hotspot in summary.top(top)]
    return json.dumps(output, indent=2)


def write_output(content: str, output_path: str | None) -> None:
    """Write content to output file or stdout.

    Args:
        content: The content to write
        output_path: Path to output file, or None for stdout
    """
    if output_path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
    else:
        print(content)


def main(args: List[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    try:
        parsed_args = parse_args(args)

        if parsed_args.verbose:
            logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)
            print(f"Loading profile from: {parsed_args.input_file}", file=sys.stderr)

        summary = load_profile(parsed_args.input_file)

        if parsed_args.verbose:
            print(
                f"Ranked {summary.hotspot_count} hotspots across "
                f"{summary.profileCount} profiles",
                file=sys.stderr,
            )

        if parsed_args.format == "json":
            output = generate_json_output(summary, parsed_args.top)
        else:
            output = generate_table_output(summary, parsed_args.top)

        write_output(output, parsed_args.output)

        if parsed_args.verbose and parsed_args.output:
            print(f"Output written to: {parsed_args.output}", file=sys.stderr)

        return 0

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in input file: {e}", file=sys.stderr)
        return 2

    except SpeedscopeParseError as e:
        print(f"Error: Invalid profile: {e}", file=sys.stderr)
        return 3

    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 4


if __name__ == "__main__":
    sys.exit(main())
