"""Console entry point: mcp-server-mxliff [-d DIR ...], or python -m mcp_server_mxliff."""

import argparse
import asyncio

from .cache import existing_directories, set_search_directories
from .constants import SEARCH_DIRS_ENV
from .server import main


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-server-mxliff",
        description="Serve MXLIFF (Memsource/Phrase) translation files to MCP clients over stdio.",
    )
    parser.add_argument(
        "-d", "--directory",
        action="append",
        default=[],
        dest="directories",
        metavar="PATH",
        help=(
            "Folder where file names passed by the client are looked up; repeatable. "
            f"Without it, {SEARCH_DIRS_ENV} and then the usual user folders are searched."
        ),
    )
    return parser


def run(argv=None):
    args = build_arg_parser().parse_args(argv)
    set_search_directories(existing_directories(args.directories))
    asyncio.run(main())


if __name__ == "__main__":
    run()
