"""CLI entrypoints for closuregen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError
from .generator import GenerationResult, Generator
from .logging import configure_logging
from .stores.build_file import render_yaml


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="closuregen",
        description="Generate Closure build rules from goog.provide/goog.require declarations.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    update_parser = subparsers.add_parser(
        "update",
        help="Generate or update build files for a source tree.",
    )
    _add_verbose_option(update_parser, suppress_default=True)
    update_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )
    update_parser.add_argument(
        "--js-prefix",
        default=None,
        help="Prefix of ES module identifiers in the current workspace.",
    )
    update_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the generated rules without writing build files.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for closuregen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "update":
        dry_run = bool(getattr(args, "dry_run", False))
        try:
            result = Generator().run(args.path, js_prefix=args.js_prefix, dry_run=dry_run)
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except ConfigError as exc:
            parser.exit(1, f"closuregen update failed: {exc}\n")
        _print_result(result)
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _print_result(result: GenerationResult) -> None:
    if result.dry_run:
        for directory in result.directories:
            print(f"# {directory.rel or '.'}")
            print(render_yaml({"rules": [rule.to_dict() for rule in directory.rules]}))

    for diagnostic in result.diagnostics:
        print(f"{diagnostic.kind}: {diagnostic.message}", file=sys.stderr)

    summary = (
        f"Generated {result.rule_count} rules in {len(result.directories)} directories"
    )
    if result.diagnostics:
        summary += f" ({len(result.diagnostics)} diagnostics)"
    if result.dry_run:
        summary += " (dry-run)"
    else:
        summary += f"; wrote {len(result.written)} build files under {_relativize(result.root)}"
    print(summary)


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
