"""schema-registry CLI: CI gates for the schema registry."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from schema_registry_policy import __version__
from schema_registry_policy.config import RegistryConfig
from schema_registry_policy.models import (
    CompatibilityReport,
    HistoryUnavailableError,
    RegistryUnavailableError,
)
from schema_registry_policy.release import check_release_tag
from schema_registry_policy.report import (
    render_report,
    render_summary,
    report_to_json,
    summary_to_json,
)
from schema_registry_policy.runner import RegistryCompatibilityRunner
from schema_registry_policy.schemas import generate

logger = logging.getLogger("schema_registry_policy.cli")

DEFAULT_PACKAGE_JSON = Path("packages/ts/package.json")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schema-registry",
        description="Compatibility, deprecation and release checks for the schema registry",
    )
    parser.add_argument("--version", action="version", version=f"schema-registry {__version__}")
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Registry repository root (default: $SCHEMA_REGISTRY_ROOT or '.')",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="warning",
        help="Logging verbosity on stderr",
    )
    parser.add_argument(
        "--now",
        type=datetime.fromisoformat,
        default=None,
        help="Evaluate dates as of this ISO 8601 timestamp instead of the current time",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    compat = subparsers.add_parser(
        "compat", help="Check backward compatibility against a base reference"
    )
    compat.add_argument("--base-ref", default=None, help="Base reference (default: main)")
    compat.add_argument("--format", choices=["text", "json"], default="text")

    deprecations = subparsers.add_parser(
        "deprecations", help="Validate deprecation metadata and version overlap"
    )
    deprecations.add_argument("--format", choices=["text", "json"], default="text")
    deprecations.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Also write the JSON deprecation report to this path",
    )

    subparsers.add_parser(
        "validate", help="Validate schema structure, venue enums and examples"
    )

    changelog = subparsers.add_parser(
        "changelog", help="Require a CHANGELOG entry when schemas changed"
    )
    changelog.add_argument("--base-ref", default=None, help="Base reference (default: main)")

    check_tag = subparsers.add_parser(
        "check-tag", help="Check the package version matches the release tag"
    )
    check_tag.add_argument(
        "tag",
        nargs="?",
        default=None,
        help="Release tag (default: $GITHUB_REF_NAME)",
    )
    check_tag.add_argument(
        "--package-version",
        default=None,
        help="Version to compare (default: read from --package-json)",
    )
    check_tag.add_argument(
        "--package-json",
        type=Path,
        default=DEFAULT_PACKAGE_JSON,
        help="package.json holding the published version, relative to the root",
    )

    gen = subparsers.add_parser(
        "generate-schemas", help="Write JSON Schemas for the report models"
    )
    gen.add_argument("--out", type=Path, required=True)
    gen.add_argument("--check", action="store_true", help="Check for drift only")

    return parser


def _config(args: argparse.Namespace) -> RegistryConfig:
    overrides: Dict[str, Any] = {}
    if args.root is not None:
        overrides["root"] = args.root
    if args.now is not None:
        overrides["now"] = args.now
    if getattr(args, "base_ref", None):
        overrides["base_ref"] = args.base_ref
    return RegistryConfig(**overrides)


def _emit_report(report: CompatibilityReport, fmt: str, title: str) -> int:
    if fmt == "json":
        sys.stdout.write(report_to_json(report))
    else:
        sys.stdout.write(render_report(report, title=title))
    return report.exit_code


def _cmd_compat(runner: RegistryCompatibilityRunner, args: argparse.Namespace) -> int:
    return _emit_report(runner.run(), args.format, "Compatibility report")


def _cmd_deprecations(runner: RegistryCompatibilityRunner, args: argparse.Namespace) -> int:
    summary = runner.run_deprecations()
    if args.report is not None:
        args.report.write_text(
            summary_to_json(summary, report_date=runner.config.current_time()),
            encoding="utf-8",
        )
        print(f"Report saved to: {args.report}", file=sys.stderr)
    if args.format == "json":
        sys.stdout.write(summary_to_json(summary))
    else:
        sys.stdout.write(render_summary(summary))
    return summary.report.exit_code


def _cmd_validate(runner: RegistryCompatibilityRunner, args: argparse.Namespace) -> int:
    return _emit_report(runner.run_validation(), "text", "Schema validation")


def _cmd_changelog(runner: RegistryCompatibilityRunner, args: argparse.Namespace) -> int:
    return _emit_report(runner.run_changelog(), "text", "Changelog check")


def _package_version(config: RegistryConfig, args: argparse.Namespace) -> Optional[str]:
    if args.package_version:
        return str(args.package_version)
    path = config.resolve(args.package_json)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"ERROR: Cannot read version from {path}: {e}", file=sys.stderr)
        return None
    version = data.get("version") if isinstance(data, dict) else None
    if not isinstance(version, str):
        print(f"ERROR: {path} has no 'version' string", file=sys.stderr)
        return None
    return version


def _cmd_check_tag(config: RegistryConfig, args: argparse.Namespace) -> int:
    tag = args.tag or os.environ.get("GITHUB_REF_NAME")
    if not tag:
        print("ERROR: No tag provided. Set GITHUB_REF_NAME or pass it as an argument.",
              file=sys.stderr)
        return 1
    version = _package_version(config, args)
    if version is None:
        return 1
    report = CompatibilityReport(issues=tuple(check_release_tag(version, tag)))
    if report.passed:
        print(f"Version OK: {version} matches tag {tag}")
        return 0
    return _emit_report(report, "text", "Release tag check")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point; returns the process exit status."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "generate-schemas":
        gen_args = ["--out", str(args.out)] + (["--check"] if args.check else [])
        return generate.main(gen_args)

    config = _config(args)
    logger.debug("Running %s in %s", args.command, config.root)
    if args.command == "check-tag":
        return _cmd_check_tag(config, args)

    runner = RegistryCompatibilityRunner(config)
    commands = {
        "compat": _cmd_compat,
        "deprecations": _cmd_deprecations,
        "validate": _cmd_validate,
        "changelog": _cmd_changelog,
    }
    try:
        return commands[args.command](runner, args)
    except (RegistryUnavailableError, HistoryUnavailableError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
