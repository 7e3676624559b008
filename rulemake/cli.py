"""Command line entry point: build targets or serve them over HTTP."""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import replace
from pathlib import Path

from .build import BuildError, Pipeline
from .config import BuildConfig, get_config, set_config
from .fsx import LocalFileSystem
from .loader import RulesLoadError, load_rules
from .log import console_logger


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--rules", help="Rules reference, module:attr or file.py:attr (default: $RULEMAKE_RULES)")
    parser.add_argument("--root", help="Directory targets are resolved against (default: $RULEMAKE_ROOT or .)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for trace)")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rulemake", description="Rule-driven incremental builds")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser("build", help="Build targets and print their content")
    _add_common_options(build_parser)
    build_parser.add_argument("targets", nargs="+", help="Targets to build")
    build_parser.add_argument("-o", "--output", help="Write content to this file instead of stdout")
    build_parser.add_argument("--sequential", action="store_true", help="Resolve dependencies one at a time")

    serve_parser = subparsers.add_parser("serve", help="Build targets on request over HTTP")
    _add_common_options(serve_parser)
    serve_parser.add_argument("--host", help="Interface to bind (default: $RULEMAKE_HOST)")
    serve_parser.add_argument("--port", type=int, help="Port to listen on (default: $RULEMAKE_PORT)")
    return parser


def _config_from_args(args: argparse.Namespace) -> BuildConfig:
    config = get_config()
    overrides = {}
    if args.rules:
        overrides["rules"] = args.rules
    if args.root:
        overrides["root_dir"] = args.root
    if args.verbose:
        overrides["log_level"] = "trace" if args.verbose > 1 else "debug"
    if getattr(args, "sequential", False):
        overrides["concurrent"] = False
    if getattr(args, "host", None):
        overrides["host"] = args.host
    if getattr(args, "port", None):
        overrides["port"] = args.port
    config = replace(config, **overrides)
    set_config(config)
    return config


def _make_pipeline(config: BuildConfig) -> Pipeline:
    if not config.rules:
        raise RulesLoadError("No rules given (use --rules or set RULEMAKE_RULES)")
    return Pipeline(
        load_rules(config.rules),
        logger=console_logger(config.log_level),
        fs=LocalFileSystem(config.root_path),
        concurrent=config.concurrent,
    )


async def _build(pipeline: Pipeline, targets: list[str]) -> bytes:
    entries = await pipeline.exec_many(targets)
    chunks = [await entry.contents() for entry in entries]
    return b"".join(chunks)


def run_build(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    try:
        pipeline = _make_pipeline(config)
        content = asyncio.run(_build(pipeline, args.targets))
    except (BuildError, RulesLoadError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.output:
        Path(args.output).write_bytes(content)
    else:
        sys.stdout.buffer.write(content)
        sys.stdout.flush()
    return 0


def run_serve(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    if not config.rules:
        print("error: No rules given (use --rules or set RULEMAKE_RULES)", file=sys.stderr)
        return 1

    from .server import main as serve

    serve()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.command == "build":
        return run_build(args)
    return run_serve(args)


if __name__ == "__main__":
    sys.exit(main())
