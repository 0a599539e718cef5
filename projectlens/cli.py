"""CLI entrypoints for projectlens commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import ConfigError, ServerConfig, load_config
from .logging import configure_logging
from .orchestrator import Orchestrator


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


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .projectlens.yml or the directory containing it (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="projectlens",
        description="Serve a bounded model of a project over a WebSocket channel.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the project-analysis message server.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_config_option(serve_parser)
    serve_parser.add_argument("--host", help="Interface to bind (overrides configuration).")
    serve_parser.add_argument("--port", type=int, help="TCP port to listen on (overrides configuration).")
    serve_parser.add_argument("--log-file", type=Path, help="Also write logs to this file.")

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a project once and print the payload as JSON.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_config_option(analyze_parser)
    analyze_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    analyze_parser.add_argument("--files", action="store_true", help="Include file content samples.")
    analyze_parser.add_argument(
        "--dependencies", action="store_true", help="Include dependency manifests."
    )
    analyze_parser.add_argument("--errors", action="store_true", help="Include heuristic findings.")

    return parser


def _load_config(parser: argparse.ArgumentParser, location: str) -> ServerConfig:
    try:
        return load_config(Path(location))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for projectlens commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    config = _load_config(parser, args.config)

    if args.command == "serve":
        config = config.with_overrides(host=args.host, port=args.port, log_file=args.log_file)
        configure_logging(verbose=bool(args.verbose), log_file=config.log_file)

        from .service import run_service

        run_service(config)
    elif args.command == "analyze":
        configure_logging(verbose=bool(args.verbose))
        orchestrator = Orchestrator(config)
        try:
            outcome = orchestrator.analyze(
                args.path,
                include_files=args.files,
                include_dependencies=args.dependencies,
                include_errors=args.errors,
            )
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        print(json.dumps(outcome.analysis, indent=2, default=str))
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
