#!/usr/bin/env python3
"""
numsteps - step-by-step numerical methods from the command line.

Usage:
    numsteps bisection -p function="x^2 - 4" -p lowerBound=0 -p upperBound=3
    numsteps newton-raphson -p function="cos(x) - x" -p initialGuess=1 -s
    numsteps gauss-seidel --matrix "4,1,1;1,5,1;1,1,6" --constants "8,10,12"
    numsteps --list-methods
"""

import argparse
import logging
import sys

logger = logging.getLogger("numsteps.cli")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="numsteps",
        description="Numerical methods with a step-by-step trace",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  numsteps bisection -p function="x^3 - x - 2" -p lowerBound=1 -p upperBound=2
  numsteps secant -p function="x^2 - 4" -p x0=1 -p x1=3 -s
  numsteps gauss-jordan --matrix "2,1;1,3" --constants "3,5" -f latex
  numsteps jacobi --matrix "4,1,1;1,5,1;1,1,6" --constants "8,10,12" -t
  numsteps --list-methods
        """,
    )

    # Positional: method to run
    parser.add_argument(
        "method",
        nargs="?",
        help="Method identifier (see --list-methods)",
    )

    # Method parameters
    parser.add_argument(
        "-p",
        "--param",
        metavar="KEY=VALUE",
        action="append",
        help="Method parameter (e.g., -p function='x^2-4' -p lowerBound=0)",
    )

    parser.add_argument(
        "--matrix",
        metavar="ROWS",
        help="Coefficient matrix, rows separated by ';' (e.g., '2,1;1,3')",
    )

    parser.add_argument(
        "--constants",
        metavar="VALUES",
        help="Constants vector, comma separated (e.g., '3,5')",
    )

    parser.add_argument(
        "--best-effort",
        action="store_true",
        help="Bisection: report the last estimate instead of failing",
    )

    # Output format
    parser.add_argument(
        "-f",
        "--format",
        choices=["text", "latex", "json"],
        default="text",
        help="Output format (default: text)",
    )

    # Show steps
    parser.add_argument(
        "-s",
        "--steps",
        action="store_true",
        help="Show solution steps",
    )

    # Show iteration table
    parser.add_argument(
        "-t",
        "--table",
        action="store_true",
        help="Show the iteration table",
    )

    parser.add_argument(
        "--list-methods",
        action="store_true",
        help="List available methods and their parameters",
    )

    # Version
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    # Verbose
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log dispatch details to stderr",
    )

    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Also write log output to a file",
    )

    return parser


def parse_value(text: str):
    """Turn a CLI value into an int or float where possible."""
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def parse_vector(text: str) -> list:
    return [parse_value(v) for v in text.split(",") if v.strip()]


def parse_matrix(text: str) -> list:
    return [parse_vector(row) for row in text.split(";") if row.strip()]


def list_methods() -> int:
    """Print every method with its parameters."""
    from numsteps.models import MethodFamily
    from numsteps.utils.constants import METHOD_CATALOG, get_method_info, list_methods as catalog_methods

    for family in MethodFamily:
        label = family.name.replace("_", " ")
        print(f"\n{label}")
        print("-" * len(label))
        for name in catalog_methods(family):
            info = get_method_info(name)
            print(f"  {name}: {info['description']}")
            print(f"    required: {', '.join(info['required'])}")
            if info["optional"]:
                optional = ", ".join(f"{k}={v}" for k, v in info["optional"].items())
                print(f"    optional: {optional}")

    print(f"\nTotal: {len(METHOD_CATALOG)} methods")
    return 0


def solve_method_cli(
    method: str,
    params: dict,
    output_format: str,
    show_steps: bool,
    show_table: bool,
) -> int:
    """Run a method and print the result."""
    from numsteps.models import SolveRequest
    from numsteps.output.exporter import ExportOptions, SolutionExporter
    from numsteps.solvers import get_default_registry
    from numsteps.utils.errors import format_error_for_user

    registry = get_default_registry()
    result = registry.run(SolveRequest(method=method, params=params))

    if not result.success:
        print(f"Error: {format_error_for_user(result.error)}", file=sys.stderr)
        if result.error.technical_details:
            logger.debug(result.error.technical_details)
        return 1

    options = ExportOptions(include_steps=show_steps, include_table=show_table)
    exporter = SolutionExporter(result.solution, options)

    if output_format == "json":
        print(exporter.to_json())
    elif output_format == "latex":
        print(exporter.to_latex())
    else:  # text
        print(exporter.to_text())

    return 0


def main(argv=None):
    """Main entry point."""
    from numsteps.logging_config import setup_logging

    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        log_file=args.log_file,
    )

    if args.list_methods:
        return list_methods()

    if not args.method:
        parser.print_usage(sys.stderr)
        print("Error: a method is required (see --list-methods)", file=sys.stderr)
        return 1

    params = {}
    for item in args.param or []:
        if "=" not in item:
            print(f"Error: Invalid parameter format: {item}", file=sys.stderr)
            print("Expected format: KEY=VALUE (e.g., lowerBound=0)", file=sys.stderr)
            return 1
        key, value = item.split("=", 1)
        key = key.strip()
        # Functions stay text even when they look numeric
        params[key] = value.strip() if key == "function" else parse_value(value)

    if args.matrix:
        params["matrix"] = parse_matrix(args.matrix)
    if args.constants:
        params["constants"] = parse_vector(args.constants)
    if args.best_effort:
        params["bestEffort"] = True

    return solve_method_cli(
        method=args.method,
        params=params,
        output_format=args.format,
        show_steps=args.steps,
        show_table=args.table,
    )


if __name__ == "__main__":
    sys.exit(main() or 0)
