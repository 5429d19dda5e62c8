import argparse
import logging
import sys
from pathlib import Path

from lark.exceptions import LarkError

from src.cfgdot.cfg_debug import debug_method
from src.cfgdot.dot_exporter import DotGraphConfig, DotGraphExporter
from src.cfgdot.listing_parser import ListingParser

LOG = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="cfgdot",
        description="Export decompiled method control flow graphs as Graphviz DOT files"
    )
    parser.add_argument(
        "listing_file",
        type=Path,
        help="Method listing to export (e.g. methods.cfg)"
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=Path("."),
        help="Output directory (default: current directory)"
    )
    parser.add_argument(
        "--regions",
        action="store_true",
        help="Draw the structured region tree as nested clusters"
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Print raw instructions instead of the fallback pretty printer"
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print a plain text dump of every method"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Debug output"
    )
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.debug else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    try:
        source = args.listing_file.read_text(encoding="utf-8")
    except OSError as e:
        print(f"Error reading listing file: {e}", file=sys.stderr)
        return 1

    try:
        methods = ListingParser().parse(source)
    except (LarkError, ValueError) as e:
        print(f"Error parsing listing file: {e}", file=sys.stderr)
        return 1

    if args.dump:
        for method in methods:
            print(debug_method(method))

    config = DotGraphConfig(out_dir=args.output, use_regions=args.regions, raw_insns=args.raw)
    exporter = DotGraphExporter(config)

    status = 0
    for method in methods:
        try:
            path = exporter.visit(method)
        except OSError as e:
            print(f"Error writing graph for {method.full_name}: {e}", file=sys.stderr)
            status = 1
            continue
        if path is None:
            LOG.info("Skipped %s", method.full_name)
        else:
            print(path)
    return status


if __name__ == "__main__":
    sys.exit(main())
