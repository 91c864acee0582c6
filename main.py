#!/usr/bin/env python3
"""logpretty: render JSON log lines as readable, colored text.

    node server.js | logpretty
    logpretty app.log other.log
"""

import logging
import os
import signal
import sys
from argparse import ArgumentParser

from logpretty.config import COLOR_MODES, load_config, load_yaml_config
from logpretty.formatter import RecordFormatter
from logpretty.pipeline import LinePipeline, PipelineStats, read_chunks
from logpretty.styles import Styler

logger = logging.getLogger("logpretty")

STDIN = "-"


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="logpretty",
        description="Pretty-print line-delimited JSON logs; other lines pass through.",
    )
    parser.add_argument(
        "files",
        nargs="*",
        help="Log files to render (default: stdin, '-' also means stdin)",
    )
    parser.add_argument(
        "--color",
        choices=COLOR_MODES,
        default=None,
        help="Colorize output (default: auto, i.e. only on a terminal)",
    )
    parser.add_argument(
        "--short-message",
        type=int,
        default=None,
        help="Longest message kept on the summary line (default: 60)",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Bytes per read (default: 65536)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Write debug diagnostics to stderr",
    )
    return parser


def render_stream(source, out, formatter: RecordFormatter, chunk_size: int) -> PipelineStats:
    """Pipe one binary source through a fresh pipeline into out."""
    pipeline = LinePipeline(formatter)
    for block in pipeline.transform(read_chunks(source, chunk_size)):
        out.write(block)
        out.flush()
    return pipeline.stats


def run(args) -> int:
    paths = args.files or [STDIN]
    missing = [p for p in paths if p != STDIN and not os.path.isfile(p)]
    if missing:
        print(f"Error: file not found: {missing[0]}", file=sys.stderr)
        return 1

    config = load_config(args, load_yaml_config(args.config))
    logging.getLogger().setLevel(config.log_level)

    out = sys.stdout.buffer
    formatter = RecordFormatter(
        styler=Styler(enabled=config.use_color(sys.stdout.isatty())),
        short_message_length=config.short_message_length,
    )

    if STDIN in paths:
        # Let the upstream process handle Ctrl+C; we render until its output ends
        signal.signal(signal.SIGINT, signal.SIG_IGN)

    for path in paths:
        if path == STDIN:
            stats = render_stream(sys.stdin.buffer, out, formatter, config.chunk_size)
        else:
            with open(path, "rb") as f:
                stats = render_stream(f, out, formatter, config.chunk_size)
        logger.debug("%s: %d lines, %d records, %d passthrough, %d format errors",
                     path, stats.lines, stats.records, stats.passthrough, stats.format_errors)
    return 0


def main():
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s [LOGPRETTY] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    parser = build_parser()
    args = parser.parse_args()
    try:
        code = run(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        code = 2
    except KeyboardInterrupt:
        code = 0
    except BrokenPipeError:
        # Python flushes stdout at exit; point it at devnull so that flush cannot fail
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        code = 0
    sys.exit(code)


if __name__ == "__main__":
    main()
