import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console

from deptree.core.cache import MetadataCache
from deptree.core.errors import InputError
from deptree.core.manifest import MANIFEST_FILE, load_manifest
from deptree.core.service import build_trees


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="deptree", description="Browse the npm dependency tree of a package.json.")
    parser.add_argument("path", nargs="?", default=MANIFEST_FILE, type=Path, help="path to package.json")
    parser.add_argument("--json", action="store_true", help="print the resolved trees as JSON instead of opening the UI")
    return parser.parse_args(argv)


def print_json(path: Path) -> int:
    console = Console()
    try:
        analysis = load_manifest(path)
    except InputError as e:
        console.print(f"[bold red]Error:[/] {e}")
        return 1

    forest = asyncio.run(build_trees(analysis.roots, MetadataCache()))
    console.print_json(data={"dependencyTrees": [tree.to_dict() for tree in forest]})
    return 0


def main(argv=None):
    """ Entrypoint when is installed via pip """
    args = parse_args(argv)

    # Log to a file, the terminal belongs to the UI
    logging.basicConfig(
        filename="debug.log",
        level=logging.DEBUG,
        filemode="w",
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if args.json:
        sys.exit(print_json(args.path))

    from deptree.app import DeptreeApp
    app = DeptreeApp(args.path)
    app.run()


# Development mode
if __name__ == "__main__":
    main()
