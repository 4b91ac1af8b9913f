"""Command line entry point: serialize a JSON tree description to Lua."""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from treescript.api import MetadataService
from treescript.catalog import BUILTIN_DUMP
from treescript.errors import SerializationError
from treescript.loader import build_tree, load_document
from treescript.options import Options
from treescript.serialize import Serializer
from treescript.tree import InMemoryHost

logger = logging.getLogger("treescript")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treescript",
        description="Generate a Lua script that rebuilds an instance tree.",
    )
    parser.add_argument("tree", help="JSON tree description")
    parser.add_argument("-o", "--output", help="directory to write the script files to")
    parser.add_argument("--api", help="JSON API dump to use instead of the built-in one")
    parser.add_argument("--compact", action="store_true", help="size-optimized output with short names")
    parser.add_argument("--parent", action="store_true", help="restore the root's original parent")
    parser.add_argument("--module", action="store_true", help="produce a ModuleScript returning the root")
    parser.add_argument("--plugin-context", action="store_true", help="serialize with plugin access")
    parser.add_argument("--json", action="store_true", help="print the output container tree as JSON")
    parser.add_argument("-v", "--verbose-log", action="store_true", help="log debug messages")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose_log else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        metadata = MetadataService.from_json(args.api) if args.api else MetadataService(BUILTIN_DUMP)
        host = InMemoryHost(metadata, elevated=args.plugin_context)
        roots = build_tree(load_document(args.tree), host)
    except (OSError, ValidationError, ValueError, AttributeError) as e:
        print(f"treescript: {e}", file=sys.stderr)
        return 2
    if not roots:
        print("treescript: the tree description has no roots", file=sys.stderr)
        return 2

    options = Options(
        verbose=not args.compact,
        parent=args.parent,
        module=args.module,
        context=args.plugin_context,
    )
    serializer = Serializer(host, metadata, options, prewarm=False)
    try:
        container = serializer.serialize(roots[0])
    except SerializationError as e:
        print(f"treescript: {e}", file=sys.stderr)
        return 1

    if args.output:
        path = container.write_to(args.output)
        logger.info("wrote %s", path)
    elif args.json:
        print(container.model_dump_json(indent=2))
    elif container.is_split:
        print("treescript: output was split into modules; use --output or --json", file=sys.stderr)
        return 1
    else:
        print(container.source)
    return 0
