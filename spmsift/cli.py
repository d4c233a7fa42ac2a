"""CLI entrypoints for spmsift commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import ConfigError
from .logging import configure_logging
from .models import severity_from_code
from .orchestrator import (
    EmptyInputError,
    InvalidScanPathError,
    Orchestrator,
    PackageNotFoundError,
    ValidationOptions,
)
from .report import ReportRenderer
from .routing import DEFAULT_PLAN
from .routing.constants import VERIFICATION_CHECKLIST


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


def _add_path_argument(parser: argparse.ArgumentParser, help_text: str) -> None:
    parser.add_argument("path", nargs="?", default=".", help=help_text)


def _subcommand(subparsers, name: str, help_text: str) -> argparse.ArgumentParser:
    sub = subparsers.add_parser(name, help=help_text)
    _add_verbose_option(sub, suppress_default=True)
    return sub


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spmsift",
        description="Condense Swift Package Manager output and lint package and TCA patterns.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .spmsift.yml file (defaults to the package root).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = _subcommand(subparsers, "analyze", "Run dump-package and show-dependencies and report.")
    _add_path_argument(analyze, "Path to the package directory (defaults to current directory).")
    analyze.add_argument("--json", action="store_true", help="Output in JSON format.")
    analyze.add_argument(
        "--hang-detection", action="store_true", help="Include hang detection recommendations."
    )

    parse = _subcommand(subparsers, "parse", "Parse Swift Package Manager output from stdin.")
    parse.add_argument(
        "-f",
        "--format",
        choices=("json", "summary", "detailed"),
        default="json",
        help="Output format (default: json).",
    )
    parse.add_argument("--target", default=None, help="Restrict results to a single target.")
    parse.add_argument("--raw", action="store_true", help="Include the raw input in JSON output.")

    validate = _subcommand(subparsers, "validate", "Validate package configuration and sources.")
    _add_path_argument(validate, "Path to the package directory (defaults to current directory).")
    validate.add_argument("--deep", action="store_true", help="Also run dependency resolution.")
    validate.add_argument(
        "--check-resolved", action="store_true", help="Check Package.resolved for branch dependencies."
    )
    validate.add_argument(
        "--flag-branch-deps", action="store_true", help="Flag branch dependencies as anti-patterns."
    )
    validate.add_argument(
        "--macro-diagnostics", action="store_true", help="Detect Swift macro compilation issues."
    )
    validate.add_argument(
        "--tca-patterns",
        action="store_true",
        help="Detect TCA composition and dependency access issues.",
    )
    validate.add_argument(
        "--strict", action="store_true", help="Exit non-zero when any error is reported."
    )
    validate.add_argument("--json", action="store_true", help="Output in JSON format.")

    optimize = _subcommand(subparsers, "optimize", "Suggest package configuration improvements.")
    _add_path_argument(optimize, "Path to the package directory (defaults to current directory).")
    optimize.add_argument("--apply", action="store_true", help="Attempt to apply optimizations.")

    patterns = _subcommand(subparsers, "tca-patterns", "Validate TCA usage in Swift sources.")
    _add_path_argument(patterns, "Swift file or directory to scan (defaults to current directory).")
    patterns.add_argument(
        "--severity",
        choices=("error", "warning", "info"),
        default="warning",
        help="Minimum severity to report (default: warning).",
    )
    patterns.add_argument(
        "--show-positives", action="store_true", help="Show detected modern TCA patterns."
    )
    patterns.add_argument(
        "--strict", action="store_true", help="Exit non-zero when any issue is found."
    )

    router = _subcommand(subparsers, "reading-router", "Route a task description to documentation.")
    router.add_argument("task", help="Task description to classify.")
    router.add_argument(
        "--case-studies",
        type=Path,
        default=None,
        help="Directory holding DISCOVERY-*.md case studies.",
    )

    serve = _subcommand(subparsers, "serve", "Run the HTTP service.")
    serve.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for spmsift commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    orchestrator = Orchestrator(config_path=args.config)
    renderer = ReportRenderer()

    try:
        if args.command == "analyze":
            _run_analyze(parser, orchestrator, renderer, args)
        elif args.command == "parse":
            _run_parse(parser, orchestrator, renderer, args)
        elif args.command == "validate":
            _run_validate(parser, orchestrator, renderer, args)
        elif args.command == "optimize":
            result = orchestrator.run_optimize(args.path)
            print(renderer.optimization(result.recommendations, apply=args.apply))
        elif args.command == "tca-patterns":
            _run_patterns(parser, orchestrator, renderer, args)
        elif args.command == "reading-router":
            decision = orchestrator.run_route(args.task, case_study_dir=args.case_studies)
            print(
                renderer.reading_plan(
                    decision, default_plan=DEFAULT_PLAN, checklist=VERIFICATION_CHECKLIST
                )
            )
        elif args.command == "serve":
            from .service import run_service

            run_service(host=args.host, port=args.port)
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except PackageNotFoundError as exc:
        parser.exit(1, f"❌ {exc}\nRun spmsift from a package root or pass its path.\n")
    except FileNotFoundError as exc:
        parser.exit(1, f"❌ Error: {exc}\n")
    except InvalidScanPathError as exc:
        parser.exit(1, f"❌ {exc}\nPass a .swift file or a directory containing Swift sources.\n")
    except ConfigError as exc:
        parser.exit(1, f"spmsift {args.command} failed: {exc}\nFix the configuration file and retry.\n")


def _run_analyze(parser, orchestrator: Orchestrator, renderer: ReportRenderer, args) -> None:
    report = orchestrator.run_analyze(args.path, hang_detection=args.hang_detection)
    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(renderer.analysis(report, hang_detection=args.hang_detection))


def _run_parse(parser, orchestrator: Orchestrator, renderer: ReportRenderer, args) -> None:
    text = sys.stdin.read()
    try:
        result = orchestrator.run_parse(text, target=args.target, include_raw=args.raw)
    except EmptyInputError:
        print(json.dumps({"error": "No input received"}))
        parser.exit(1)
    if args.format == "summary":
        print(renderer.parse_summary(result))
    elif args.format == "detailed":
        print(renderer.parse_detailed(result))
    else:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


def _run_validate(parser, orchestrator: Orchestrator, renderer: ReportRenderer, args) -> None:
    options = ValidationOptions(
        deep=args.deep,
        check_resolved=args.check_resolved,
        flag_branch_deps=args.flag_branch_deps,
        macro_diagnostics=args.macro_diagnostics,
        tca_patterns=args.tca_patterns,
    )
    result = orchestrator.run_validate(args.path, options)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(renderer.validation(result))
    if args.strict and result.has_errors:
        parser.exit(1)


def _run_patterns(parser, orchestrator: Orchestrator, renderer: ReportRenderer, args) -> None:
    scan = orchestrator.run_patterns(args.path, min_severity=severity_from_code(args.severity))
    print(renderer.patterns(scan, show_positives=args.show_positives))
    if args.strict and scan.issue_count > 0:
        parser.exit(1)
    if scan.error_count > 0:
        parser.exit(1)


if __name__ == "__main__":
    main(sys.argv[1:])
