"""Command line interface: ``srcboot ORIGIN [ARGS...]``."""

import argparse
from typing import List, Optional, Sequence

from srcboot.config import LauncherConfig
from srcboot.location import Anchor
from srcboot.pipeline import main as launch_main


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="srcboot",
        description="Compile the sources of a program and run its entry point in-process.",
        epilog="The program is read from <base>/<NAME>/src, where <base> is ORIGIN's directory "
        "(or ORIGIN itself if it is a directory) and NAME is ORIGIN's stem.",
    )
    parser.add_argument(
        "origin", help="Location of the launcher: a file, a directory, an archive or a file: URI"
    )
    parser.add_argument("--entry", default=None, help="Entry point as <module>::<function>")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level of the launcher",
    )
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Arguments for the program")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    ns = parser.parse_args(argv)

    args: List[str] = list(ns.args)
    if args and args[0] == "--":
        args = args[1:]

    try:
        config = LauncherConfig.from_env(entry_point=ns.entry)
    except ValueError as e:
        parser.error(str(e))
    launch_main(args, anchor=Anchor.from_path(ns.origin), config=config, log_level=ns.log_level)


if __name__ == "__main__":
    main()
