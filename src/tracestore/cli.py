"""
Tracestore CLI — Command-Line Interface
=======================================

Command-line interface for inspecting and installing the span index template.

Usage:
    tracestore describe
    tracestore template 5.0.0 --replicas 0
    tracestore template 2.4.0 --no-strict-trace-id
    tracestore --hosts es1,es2 --cluster zipkin ensure

Options that are not given fall back to the ES_* environment variables.
"""

import argparse
import logging
import os
from typing import List, Optional

from .config import StorageConfig
from .exceptions import InvalidVersionError, StorageError


def get_hosts(args) -> Optional[List[str]]:
    """Extract hosts from args."""
    if args.hosts:
        return [h.strip() for h in args.hosts.split(",") if h.strip()]
    return None


def build_config(args) -> StorageConfig:
    """Merge command-line options over the environment."""
    strict = False if getattr(args, "no_strict_trace_id", False) else None
    return StorageConfig.from_env(
        cluster=args.cluster,
        hosts=get_hosts(args),
        index=args.index,
        index_shards=getattr(args, "shards", None),
        index_replicas=getattr(args, "replicas", None),
        strict_trace_id=strict,
    )


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging from --log-level or LOG_LEVEL."""
    lvl = (level or os.getenv("LOG_LEVEL") or "WARNING").upper()
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def cmd_describe(args) -> int:
    """Show the connection target without connecting."""
    from .lazy_client import LazyClient

    print(LazyClient(build_config(args)))
    return 0


def cmd_template(args) -> int:
    """Print the template for an engine version."""
    from .template import render_template

    try:
        print(render_template(args.version, build_config(args)))
    except InvalidVersionError as e:
        print(f"Error: {e}")
        return 2
    return 0


def cmd_ensure(args) -> int:
    """Connect and install the template."""
    from .lazy_client import LazyClient

    config = build_config(args)
    with LazyClient(config) as lazy:
        try:
            client = lazy.get()
            version = client.version()
        except StorageError as e:
            print(f"Error: {e}")
            return 1

        print(f"Cluster: {lazy}")
        print(f"Version: {version}")
        print(f"Template: {lazy.template_name} ({config.index}-*)")
        print(f"  Shards: {config.index_shards}")
        print(f"  Replicas: {config.index_replicas}")
        print(f"  Strict trace id: {config.strict_trace_id}")
    return 0


def _add_layout_options(parser):
    parser.add_argument("--shards", type=int, default=None, help="Primary shards")
    parser.add_argument("--replicas", type=int, default=None, help="Replica shards")
    parser.add_argument(
        "--no-strict-trace-id",
        dest="no_strict_trace_id",
        action="store_true",
        help="Tokenize trace ids so 64-bit and 128-bit ids match"
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="tracestore",
        description="Tracestore — Elasticsearch span index template management"
    )

    # Global options
    parser.add_argument(
        "--hosts",
        help="Elasticsearch hosts (comma-separated)",
        default=None
    )
    parser.add_argument("--cluster", help="Cluster name", default=None)
    parser.add_argument("--index", help="Index family name", default=None)
    parser.add_argument(
        "--log-level",
        dest="log_level",
        help="Logging level (default: LOG_LEVEL or WARNING)",
        default=None
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("describe", help="Show cluster name and hosts")

    template_parser = subparsers.add_parser("template", help="Print the index template")
    template_parser.add_argument("version", help="Elasticsearch version, e.g. 5.0.0")
    _add_layout_options(template_parser)

    ensure_parser = subparsers.add_parser("ensure", help="Connect and install the index template")
    _add_layout_options(ensure_parser)

    # Parse and dispatch
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        if args.command == "describe":
            return cmd_describe(args)
        elif args.command == "template":
            return cmd_template(args)
        elif args.command == "ensure":
            return cmd_ensure(args)
    except StorageError as e:
        print(f"Error: {e}")
        return 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
