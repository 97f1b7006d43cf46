"""
Command-line tool for elv archives.

Commands:
- pack: Build an archive from a directory and verify it
- validate: Check one or more archives
- show: Print the config and entry sizes of an archive

Usage:
    elvdoc pack format/elvdoc invoice.elv
    elvdoc validate invoice.tar.gz other.tar.gz
    elvdoc show invoice.tar.gz

Invariants:
    - Exit code 0 on success, 1 on any failure or invalid archive
    - Settings come from ELVDOC_* environment variables (see config.py)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

import json_log_formatter

from ..archive import build_and_verify, create_archive_from_dir, validate
from ..bundle import AssetRole
from ..codec import load_config, read_archive
from ..config import Settings, get_settings
from ..errors import ElvDocError

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings, verbose: bool = False) -> None:
    """Configure root logging from settings.

    Args:
        settings: CLI settings
        verbose: Force DEBUG level
    """
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]


def cmd_pack(args: argparse.Namespace, settings: Settings) -> int:
    """Build an archive from a source directory."""
    options = {"mtime": settings.source_mtime, "compresslevel": settings.compresslevel}
    try:
        if args.no_verify:
            target = create_archive_from_dir(args.destination, args.source_dir, **options)
        else:
            target = build_and_verify(args.destination, args.source_dir, **options)
    except ElvDocError as e:
        logger.error(f"Pack failed: {e.message}", extra=e.details)
        print(f"Pack failed: {e.message}")
        return 1

    print(f"Archive written to {target}")
    return 0


def cmd_validate(args: argparse.Namespace, settings: Settings) -> int:
    """Validate each path and report the verdict."""
    failures = 0
    for path in args.paths:
        ok = validate(path)
        if not ok:
            failures += 1
        print(f"{path}: {'valid' if ok else 'invalid'}")
    return 1 if failures else 0


def cmd_show(args: argparse.Namespace, settings: Settings) -> int:
    """Print the decoded config and entry sizes of an archive."""
    try:
        bundle = read_archive(args.path)
        config = load_config(bundle.config)
    except ElvDocError as e:
        print(f"Cannot show {args.path}: {e.message}")
        for error in getattr(e, "errors", []):
            print(f"  - {error}")
        return 1

    print(f"version: {config.version}")
    print(f"elvdoc: {json.dumps(config.elvdoc, default=str)}")
    print("entries:")
    for role in AssetRole:
        size = len(bundle.get(role).encode("utf-8"))
        print(f"  {role.entry_name} ({size} bytes)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="elvdoc", description="Build and validate elv archives")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    pack = subparsers.add_parser("pack", help="Build an archive from a directory")
    pack.add_argument("source_dir", help="Directory with template.html, style.css, function.js, config.yaml")
    pack.add_argument("destination", help="Output path (.elv is expanded to .tar.gz)")
    pack.add_argument("--no-verify", action="store_true", help="Skip validation after writing")
    pack.set_defaults(handler=cmd_pack)

    check = subparsers.add_parser("validate", help="Validate archives")
    check.add_argument("paths", nargs="+", help="Archive paths (.tar.gz)")
    check.set_defaults(handler=cmd_validate)

    show = subparsers.add_parser("show", help="Show archive contents")
    show.add_argument("path", help="Archive path")
    show.set_defaults(handler=cmd_show)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings, verbose=args.verbose)
    sys.exit(args.handler(args, settings))


if __name__ == "__main__":
    main()
