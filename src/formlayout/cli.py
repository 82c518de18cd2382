"""CLI entry point for inspecting stored forms."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from formlayout import __version__, logger
from formlayout.engine import LayoutEngine
from formlayout.logging import configure_logging
from formlayout.persistence import JsonFileFormStore
from formlayout.projector import schema_json
from formlayout.settings import get_settings


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="formlayout")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    list_parser = subparsers.add_parser("list", help="List forms stored in a directory")
    list_parser.add_argument("--store", type=Path, default=None, dest="store_dir")

    schema_parser = subparsers.add_parser("schema", help="Print the rendering schema of a stored form")
    schema_parser.add_argument("--store", type=Path, default=None, dest="store_dir")
    schema_parser.add_argument("--form", required=True, dest="form_id")
    schema_parser.add_argument("--steps", action="store_true", dest="with_steps")

    return parser


def _run_schema(engine: LayoutEngine, args: argparse.Namespace) -> int:
    """Load a stored form and print its schema.

    Args:
        engine (LayoutEngine): Engine bound to the form store.
        args (argparse.Namespace): Parsed CLI args.

    Returns:
        int: Exit code.
    """
    result = engine.load_form(args.form_id)
    if not result.ok:
        logger.error("Could not load form", extra={"form_id": args.form_id, "reason": result.message})
        return 1
    sys.stdout.write(schema_json(engine.document, with_steps=args.with_steps) + "\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv (list[str] | None): Arguments, defaults to `sys.argv[1:]`.

    Returns:
        int: Exit code (0 for success, 1 for error).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command not in {"list", "schema"}:
        parser.print_help()
        return 0

    store = JsonFileFormStore(root=args.store_dir or Path(settings.forms_dir))
    if args.command == "list":
        for form_id in store.list_forms():
            sys.stdout.write(form_id + "\n")
        return 0

    engine = LayoutEngine(store=store, settings=settings)
    return _run_schema(engine, args)


if __name__ == "__main__":
    raise SystemExit(main())
