"""Main CLI entry point for the site catalog."""

import argparse
import logging
import sys

from .commands.catalog import setup_catalog_commands


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="catalog", description="Browse, search and read series from supported sites"
    )
    parser.add_argument("--registry", default="data/sites.json", help="User site registry file")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    setup_catalog_commands(subparsers)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    # Execute command
    if hasattr(args, "func"):
        return args.func(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
