"""Command-line entry point for generating an STN-i file from irace runs."""

from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path

from .analysis import STNAnalysis, STNResult, run_stn_pipeline
from .config import Criteria, STNConfig, parse_type_priority
from .errors import DomainError, ParseError, SourceError
from .reporting import format_network_summary, summarize_network, write_stn_file
from .synthetic_data import load_synthetic_experiment

DEFAULTS = STNConfig()


def format_duration(seconds: float) -> str:
    """Format duration in seconds to human-readable string."""
    if seconds < 60:
        return f"{seconds:.2f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes}m {secs:.1f}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        return f"{hours}h {minutes}m"


def print_header(text: str, width: int = 70) -> None:
    """Print a formatted section header."""
    print("\n" + "=" * width)
    print(f"  {text}")
    print("=" * width)


def print_summary(result: STNResult, output_path: Path, elapsed: float) -> None:
    print_header("STN-i Summary")
    print(f"\nRuntime: {format_duration(elapsed)}")
    print(f"STN file: {output_path}")
    print(f"Criteria: {result.config.criteria} (significance {result.config.significance})")
    print(f"Type priority: {' < '.join(result.config.type_priority)}")
    print()
    print(format_network_summary(summarize_network(result.edges, result.aggregator)))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m stn_i",
        description="Consolidate irace runs into a Search Trajectory Network (STN-i) file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --input runs/ --parameters parameters.csv --output out/
  %(prog)s --input runs/ --parameters parameters.csv --output out/ --criteria median --significance 3
  %(prog)s --input runs/ --parameters parameters.csv --output out/ --type-priority START,STANDARD,END
  %(prog)s --synthetic --output out/          # Built-in demo experiment
        """,
    )
    parser.add_argument("--input", type=Path, help="Folder with one sub-directory per irace run.")
    parser.add_argument("--parameters", type=Path, help="Parameter definitions file.")
    parser.add_argument("--output", type=Path, required=True, help="Folder for the STN file (created if missing).")
    parser.add_argument(
        "--output-file",
        default=DEFAULTS.output_file,
        help="Name of the STN file (default: %(default)s).",
    )
    parser.add_argument(
        "--criteria",
        default=DEFAULTS.criteria,
        choices=[c.value for c in Criteria],
        help="Reduction of a location's qualities (default: %(default)s).",
    )
    parser.add_argument(
        "--significance",
        type=int,
        default=DEFAULTS.significance,
        help="Decimals kept for fitness values (default: %(default)s).",
    )
    parser.add_argument(
        "--type-priority",
        default=",".join(DEFAULTS.type_priority),
        help="START/STANDARD/END from lowest to highest rank (default: %(default)s).",
    )
    parser.add_argument(
        "--original-elite",
        action="store_true",
        help="Report each configuration's own elite flag instead of the location's.",
    )
    parser.add_argument(
        "--original-type",
        action="store_true",
        help="Report each configuration's own type instead of the location's.",
    )
    parser.add_argument(
        "--parameters-sep",
        default=DEFAULTS.parameters_sep,
        help="Field separator of the parameters file (default: '%(default)s').",
    )
    parser.add_argument("--workers", type=int, default=DEFAULTS.workers, help="Threads per pass (default: %(default)s).")
    parser.add_argument("--synthetic", action="store_true", help="Use the built-in synthetic experiment.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Report skipped configurations and details.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress everything except errors.")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.synthetic and (args.input is None or args.parameters is None):
        parser.error("--input and --parameters are required unless --synthetic is given")

    if args.quiet:
        os.environ["STN_VERBOSITY"] = "0"
    elif args.verbose:
        os.environ["STN_VERBOSITY"] = "2"
    else:
        os.environ["STN_VERBOSITY"] = "1"

    try:
        config = STNConfig(
            criteria=args.criteria,
            significance=args.significance,
            type_priority=parse_type_priority(args.type_priority),
            original_elite=args.original_elite,
            original_type=args.original_type,
            output_file=args.output_file,
            parameters_sep=args.parameters_sep,
            workers=args.workers,
        )
    except ValueError as e:
        print(f"Error: Invalid option: {e}", file=sys.stderr)
        return 2

    if args.output.exists() and not args.output.is_dir():
        print(
            f"Error: Output path exists but is not a directory: {args.output}\n"
            f"Please specify a different path or remove the existing file.",
            file=sys.stderr,
        )
        return 1

    if not args.quiet:
        print_header("STN-i Generator")

    start_time = time.time()
    try:
        if args.synthetic:
            catalog, runs = load_synthetic_experiment()
            result = STNAnalysis(config).run(catalog, runs)
        else:
            result = run_stn_pipeline(args.input, args.parameters, config)
        if not args.output.exists():
            args.output.mkdir(parents=True, exist_ok=True)
            if not args.quiet:
                print(f"Output folder created: {args.output}")
        output_path = write_stn_file(
            result.edges,
            args.output / config.output_file,
            extended=config.original_mode,
        )
    except ParseError as e:
        print(f"\nError: Invalid parameter definitions:\n{e}", file=sys.stderr)
        return 1
    except SourceError as e:
        print(f"\nError: Invalid run results:\n{e}", file=sys.stderr)
        return 1
    except DomainError as e:
        print(f"\nError: Cannot encode a configuration:\n{e}", file=sys.stderr)
        return 1
    except FileNotFoundError as e:
        print(
            f"\nError after {format_duration(time.time() - start_time)}:\n"
            f"File not found: {e}\n"
            f"Please check the --input and --parameters paths.",
            file=sys.stderr,
        )
        return 1
    except ValueError as e:
        print(f"\nError: Invalid input data: {e}", file=sys.stderr)
        return 1

    elapsed = time.time() - start_time
    if args.quiet:
        print(output_path)
    else:
        print_summary(result, output_path, elapsed)
        print_header("Done")
        print(f"STN file saved in: {output_path.resolve()}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
