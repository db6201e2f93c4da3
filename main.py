"""CLI entry point for Promptline."""

from __future__ import annotations

import argparse
import sys

from config import settings
from core.errors import PromptlineError
from core.options import create_execution_options
from orchestration.cli_runner import parse_bindings, run
from orchestration.prompt_task import VersioningOptions


def _read_template(value: str) -> str:
    if value.startswith("@"):
        with open(value[1:], encoding="utf-8") as f:
            return f.read()
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="promptline",
        description="Render a prompt template, send it to a model and print the result.",
    )
    parser.add_argument(
        "--template", required=True, help="Template text, or @path to read it from a file"
    )
    parser.add_argument("--model", required=True, help="Model identifier")
    parser.add_argument(
        "--var",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Template binding; dotted keys build nested values",
    )
    parser.add_argument(
        "--inputs", default=None, help="JSONL file with one bindings object per line"
    )
    parser.add_argument(
        "--concurrency", type=int, default=settings.DEFAULT_CONCURRENCY
    )
    parser.add_argument("--max-tokens", type=int, default=None)
    parser.add_argument("--temperature", type=float, default=None)
    parser.add_argument("--system", default=None, help="System message")
    parser.add_argument(
        "--raw", action="store_true", help="Print the model reply without normalization"
    )
    parser.add_argument(
        "--version-dir",
        default=None,
        help="Write an execution record into this directory",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse command-line arguments and run Promptline."""
    args = build_parser().parse_args(argv)
    try:
        options = create_execution_options(
            model=args.model,
            max_tokens=args.max_tokens,
            temperature=args.temperature,
            system=args.system,
            raw_output=args.raw,
        )
        bindings = parse_bindings(args.var)
        versioning = VersioningOptions(
            enabled=args.version_dir is not None,
            store_path=args.version_dir or settings.PROMPT_VERSIONS_DIR,
        )
        run(
            _read_template(args.template),
            options,
            bindings,
            args.inputs,
            args.concurrency,
            versioning,
        )
    except (PromptlineError, ValueError, OSError) as exc:
        print(f"promptline: error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
