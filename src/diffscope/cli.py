"""
diffscope command line.

Runs the preparation pipeline stages on files and prints JSON to stdout.

Usage:
    diffscope parse changes.diff
    diffscope context --diff changes.diff --file src/calc.go
    diffscope chunk big_change.diff --language go --max-tokens 500
    diffscope prioritize README.md src/app.py src/app_test.py
    diffscope tokens changes.diff --model gpt-4
"""

import argparse
import json
import sys
from pathlib import Path

import structlog

from .chunker import Chunker
from .config import PrepConfig
from .context_builder import ContextBuilder
from .errors import DiffscopeError
from .file_classifier import FilePrioritizer
from .git_diff import DiffParser
from .languages import detect_language
from .log import configure_logging
from .models import FileInfo
from .tokens import TokenEstimator

logger = structlog.get_logger(__name__)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2))


def cmd_parse(args: argparse.Namespace, config: PrepConfig) -> None:
    diff = DiffParser().parse_file(args.diff_file)
    _print_json(diff.to_dict())


def cmd_context(args: argparse.Namespace, config: PrepConfig) -> None:
    diff_text = Path(args.diff).read_text(encoding="utf-8", errors="replace")
    full_content = Path(args.file).read_bytes()
    language = args.language or detect_language(args.file)

    builder = ContextBuilder(args.max_length or config.max_context_length)
    request = builder.build_enhanced_request(diff_text, language, args.file, full_content)
    print(request.model_dump_json(indent=2))


def cmd_chunk(args: argparse.Namespace, config: PrepConfig) -> None:
    text = Path(args.file).read_text(encoding="utf-8", errors="replace")
    chunker = Chunker(
        max_chunk_tokens=args.max_tokens or config.max_chunk_tokens,
        language=args.language or detect_language(args.file),
        estimator=TokenEstimator.for_model(config.model),
        strict_budget=args.strict or config.strict_chunk_budget,
    )
    _print_json([chunk.to_dict() for chunk in chunker.chunk_diff(text)])


def cmd_prioritize(args: argparse.Namespace, config: PrepConfig) -> None:
    files = [FileInfo(path=p, language=detect_language(p)) for p in args.paths]
    for f in FilePrioritizer().prioritize(files):
        print(f.path)


def cmd_tokens(args: argparse.Namespace, config: PrepConfig) -> None:
    text = Path(args.file).read_text(encoding="utf-8", errors="replace")
    model = args.model or config.model
    config.model = model

    tokens = TokenEstimator.for_model(model).estimate_tokens(text)
    budget = config.budget()
    _print_json(
        {
            "file": args.file,
            "model": model,
            "tokens": tokens,
            "max_tokens": budget.max_tokens,
            "available": budget.available,
            "fits": budget.can_fit(tokens),
        }
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="diffscope",
        description="Prepare diffs and source files for AI code review",
    )
    parser.add_argument(
        "--log-format",
        choices=["console", "json"],
        default=None,
        help="Log output format (default: DIFFSCOPE_LOG_FORMAT or console)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Minimum log level (default: DIFFSCOPE_LOG_LEVEL or INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse", help="Parse a unified diff into JSON")
    p.add_argument("diff_file", type=Path, help="Path to the diff")
    p.set_defaults(func=cmd_parse)

    p = sub.add_parser("context", help="Build an enhanced review request")
    p.add_argument("--diff", required=True, help="Path to the file's diff")
    p.add_argument("--file", required=True, help="Path to the full new file")
    p.add_argument("--language", default="", help="Language tag (default: from extension)")
    p.add_argument("--max-length", type=int, default=0, help="Context length cap in characters")
    p.set_defaults(func=cmd_context)

    p = sub.add_parser("chunk", help="Split a diff or file into token-bounded chunks")
    p.add_argument("file", help="Path to the diff or source file")
    p.add_argument("--language", default="", help="Language tag (default: from extension)")
    p.add_argument("--max-tokens", type=int, default=0, help="Token budget per chunk")
    p.add_argument("--strict", action="store_true", help="Re-split every chunk over budget")
    p.set_defaults(func=cmd_chunk)

    p = sub.add_parser("prioritize", help="Order paths by review priority")
    p.add_argument("paths", nargs="+", help="File paths")
    p.set_defaults(func=cmd_prioritize)

    p = sub.add_parser("tokens", help="Estimate tokens for a file")
    p.add_argument("file", help="Path to the file")
    p.add_argument("--model", default="", help="Model name for density and context window")
    p.set_defaults(func=cmd_tokens)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = PrepConfig.from_env()
    except DiffscopeError as e:
        configure_logging(args.log_format or "console", args.log_level or "INFO")
        logger.error("Invalid configuration", error=str(e))
        return 1

    configure_logging(args.log_format or config.log_format, args.log_level or config.log_level)

    try:
        args.func(args, config)
    except (DiffscopeError, OSError) as e:
        logger.error("Command failed", command=args.command, error=str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
