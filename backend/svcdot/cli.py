"""
svcdot command line interface.

Prints the service dependency graph of the local repository (or of a
repository dump) as a dot file on standard output:

    svcdot -x omit_net_deps,consolidate_inetd_svcs | dot -Tps > smf.ps
    svcdot -L | dot -Tps > legend.ps
"""

import argparse
import logging
import sys
from typing import List, Optional

from svcdot.compiler.compiler import compile_graph, write_legend
from svcdot.config import LOG_LEVEL, REPOSITORY
from svcdot.errors import OptionsError, RegistryError
from svcdot.registry import open_registry
from svcdot.schemas import SIMPLIFY_OPTIONS, GraphOptions

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="svcdot",
        description="Print the SMF service dependency graph as a Graphviz dot file.",
        epilog="Where opts is a comma-separated list of\n"
        + "".join(f"  {name}\n" for name in SIMPLIFY_OPTIONS),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-s", dest="size", metavar="width,height",
        help="Size, in inches, the graph should be limited to",
    )
    parser.add_argument(
        "-l", dest="legend_file", metavar="legend.ps",
        help="PostScript file to place on the graph as its legend",
    )
    parser.add_argument(
        "-x", dest="simplify", action="append", default=[], metavar="opts",
        help="Simplify the graph (see below)",
    )
    parser.add_argument(
        "-L", dest="legend_only", action="store_true",
        help="Print only the legend graph",
    )
    parser.add_argument(
        "-r", "--repository", default=REPOSITORY, metavar="FILE",
        help="Read a YAML/JSON repository dump instead of the live repository",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Log progress to stderr (repeat for debug output)",
    )
    return parser


def configure_logging(verbose: int):
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = getattr(logging, LOG_LEVEL, logging.WARNING)

    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(name)s: %(levelname)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    if args.legend_only:
        if args.size is not None or args.legend_file is not None or args.simplify:
            parser.error("-L cannot be combined with -s, -l or -x")
        write_legend(sys.stdout)
        return 0

    try:
        options = GraphOptions.from_simplify(
            args.simplify, size=args.size, legend_file=args.legend_file
        )
    except OptionsError as e:
        parser.error(str(e))

    logger.debug(f"Simplifications: {options.simplifications() or 'none'}")

    try:
        registry = open_registry(args.repository)
        compile_graph(registry, options, sys.stdout)
    except RegistryError as e:
        sys.stdout.flush()
        print(f"svcdot: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
