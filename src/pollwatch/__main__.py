"""Command-line entry point for the polling file watcher."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .config import ConfigError, load_config, merge_cli
from .monitor import FileWatcher
from .paths import PatternError, expand_pattern, read_path_list

logger = logging.getLogger("pollwatch")


class _ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit with status 1."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="pollwatch",
        usage="%(prog)s [options] pattern cmd [args...]",
        description=(
            "Run a command each time a watched file changes. "
            "'%%' in the command is replaced by the changed path, '\\%%' is a literal '%%'. "
            "When standard input is not a terminal, paths are read from it one per line "
            "and every argument belongs to the command."
        ),
    )
    parser.add_argument(
        "-d",
        dest="poll_interval",
        metavar="SECONDS",
        default=None,
        help="Delay in whole seconds between each poll (default: 1)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log the watch set, each detected change and each invocation",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML file providing defaults for the watch options",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR); overrides -v",
    )
    parser.add_argument(
        "--no-stdin",
        action="store_true",
        help="Always expand the pattern, even when standard input is not a terminal",
    )
    parser.add_argument("args", nargs=argparse.REMAINDER, help=argparse.SUPPRESS)
    return parser


def main(argv: Optional[List[str]] = None, stdin: Optional[TextIO] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    stream = sys.stdin if stdin is None else stdin

    logging.basicConfig(
        level=_log_level(args.log_level, args.verbose),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    use_stdin = not args.no_stdin and not _is_terminal(stream)
    positionals = list(args.args)
    if use_stdin:
        pattern = None
        command = positionals
    else:
        pattern = positionals[0] if positionals else None
        command = positionals[1:]

    try:
        defaults = load_config(Path(args.config)) if args.config else {}
        if not use_stdin and pattern is None and "pattern" not in defaults:
            parser.error("a pattern and a command are required")
        config = merge_cli(
            defaults,
            pattern=pattern,
            command=command,
            poll_interval=args.poll_interval,
            verbose=args.verbose,
        )
    except ConfigError as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc

    if config.verbose and args.log_level is None:
        logging.getLogger().setLevel(logging.INFO)

    if use_stdin:
        paths = read_path_list(getattr(stream, "buffer", stream))
        if not paths:
            logger.error("no paths read from standard input")
            raise SystemExit(1)
    else:
        try:
            paths = expand_pattern(config.pattern or "")
        except PatternError as exc:
            logger.error("bad pattern: %s", exc)
            raise SystemExit(1) from exc
        if not paths:
            logger.error("could not match file pattern: %r", config.pattern)
            raise SystemExit(1)

    config.paths = list(paths)
    for path in paths:
        logger.info("Watching %s", path)

    watcher = FileWatcher(config, paths)
    watcher.run()


def _log_level(name: Optional[str], verbose: bool) -> int:
    if name:
        return getattr(logging, name.upper(), logging.INFO)
    return logging.INFO if verbose else logging.WARNING


def _is_terminal(stream: Optional[TextIO]) -> bool:
    if stream is None:
        return True
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


if __name__ == "__main__":
    main()
