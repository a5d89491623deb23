import argparse
import sys
import time
from typing import Optional

from . import __version__
from .config import Defaults, load_defaults
from .errors import SessionLogError
from .level import Level
from .logutil import set_level
from .registry import Registry


def _build_registry(args: argparse.Namespace) -> Registry:
    defaults = Defaults()
    config_path = getattr(args, "config", None)
    if config_path:
        defaults = load_defaults(config_path)
    if getattr(args, "dir", None):
        defaults.directory = args.dir
    if getattr(args, "background", False):
        defaults.background = True
    return Registry(defaults)


def _parse_level(value: str) -> Level:
    try:
        return Level.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def cmd_log(args: argparse.Namespace) -> int:
    registry = _build_registry(args)
    logger = registry.get_or_create(args.name)
    if args.log_level is not None:
        logger.log_level = args.log_level
    if args.write_level is not None:
        logger.write_level = args.write_level
    try:
        logger.log(args.level, args.message)
    finally:
        registry.close()
    return 0


def cmd_demo(args: argparse.Namespace) -> int:
    registry = _build_registry(args)
    logger = registry.get_or_create("demo")
    logger.log_level = Level.DEBUG
    logger.write_level = Level.DEBUG
    try:
        logger.info("demo starting")
        with logger.session("outer") as outer:
            outer.info("loading configuration")
            with outer.session("inner") as inner:
                for i in range(args.count):
                    inner.verbose(f"step {i}")
                    time.sleep(0.001)
            with outer.session("empty"):
                pass
            outer.warning("outer done")
        logger.info("demo finished")
    finally:
        registry.close()
    print(f"[sessionlog] report written under {logger.directory}", file=sys.stderr)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sessionlog", description="Session-buffered logging")
    parser.add_argument("--version", action="version", version=f"sessionlog {__version__}")
    parser.add_argument("--config", help="TOML file with a [sessionlog] defaults table")
    parser.add_argument("--diagnostics", metavar="LEVEL", help="Threshold for sessionlog's own diagnostics (e.g. debug)")
    sub = parser.add_subparsers(dest="cmd")

    log_parser = sub.add_parser("log", help="Emit one message through a logger entry")
    log_parser.add_argument("name", help="Logger entry name")
    log_parser.add_argument("message")
    log_parser.add_argument("--level", type=_parse_level, default=Level.INFO, help="Message level (default: info)")
    log_parser.add_argument("--log-level", type=_parse_level, help="Console threshold for the entry")
    log_parser.add_argument("--write-level", type=_parse_level, help="File threshold for the entry")
    log_parser.add_argument("--dir", help="Log directory (default: ./logs)")
    log_parser.add_argument("--background", action="store_true", help="Write files from a background worker")
    log_parser.set_defaults(func=cmd_log)

    demo_parser = sub.add_parser("demo", help="Write a nested session report")
    demo_parser.add_argument("--dir", help="Log directory (default: ./logs)")
    demo_parser.add_argument("--count", type=int, default=3, help="Messages in the inner session")
    demo_parser.add_argument("--background", action="store_true", help="Write files from a background worker")
    demo_parser.set_defaults(func=cmd_demo)

    # Bench subcommand (lightweight wrapper around bench/benchmark.py)
    bench_parser = sub.add_parser("bench", help="Run a quick write throughput benchmark")
    bench_parser.add_argument("--lines", type=int, default=10000, help="Synthetic lines to write")
    bench_parser.add_argument("--session-size", type=int, default=0, help="Group lines into sessions of this size")
    bench_parser.add_argument("--background", action="store_true", help="Use the background writer")

    def _cmd_bench(a: argparse.Namespace) -> int:  # pragma: no cover - covered via integration test
        try:
            from bench.benchmark import run, synthetic_lines
        except ImportError as exc:
            print(f"[sessionlog] bench harness import failed: {exc}", file=sys.stderr)
            return 2
        run(list(synthetic_lines(a.lines)), a.session_size, a.background)
        return 0

    bench_parser.set_defaults(func=_cmd_bench)

    version_parser = sub.add_parser("version", help="Show version and exit")
    version_parser.set_defaults(func=lambda _: (print(f"sessionlog {__version__}"), 0)[1])

    return parser


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "cmd", None):  # No subcommand provided
        parser.print_help()
        return 0
    try:
        if args.diagnostics:
            set_level(args.diagnostics)
        return args.func(args)
    except (SessionLogError, OSError, ValueError) as exc:
        print(f"[sessionlog] {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
