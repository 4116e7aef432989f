from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import config
from adapters.java_adapter import JavaAdapter
from implementor.errors import CompilationError, ImplerError
from implementor.implementor import Implementor

logger = logging.getLogger("implgen.cli")

USAGE_HINT = (
    "Please provide the canonical class name and root path for implementing into a .java file, "
    "or '-jar', the canonical class name and path to a .jar file for implementing into a .jar file"
)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="impl-gen",
        description="Generate <Name>Impl stubs for a Java class or interface.",
        epilog=USAGE_HINT,
    )
    parser.add_argument("-jar", dest="jar", action="store_true", help="Compile and pack the implementation into a .jar file.")
    parser.add_argument("type_name", help="Canonical name of the class or interface, e.g. java.util.List")
    parser.add_argument("output", help="Root directory for the .java file, or the .jar path with -jar.")
    parser.add_argument(
        "-s", "--source-path",
        dest="source_path",
        action="append",
        type=Path,
        help="Java source root to read types from (repeatable). Defaults to IMPLGEN_SOURCE_PATH.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    adapter = JavaAdapter()
    adapter.load_sources(args.source_path or config.SOURCE_PATH)
    logger.debug("indexed %d types", len(adapter.known_types()))

    impler = Implementor(adapter)
    try:
        if args.jar:
            out = impler.implement_jar(args.type_name, Path(args.output))
        else:
            out = impler.implement(args.type_name, Path(args.output))
    except CompilationError as e:
        print(f"Error occurred while trying to implement: {e}")
        if e.diagnostics:
            print(e.diagnostics, file=sys.stderr)
        return 1
    except ImplerError as e:
        print(f"Error occurred while trying to implement: {e}")
        return 1

    print(out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
