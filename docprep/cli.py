"""CLI entrypoints for docprep commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import ConfigError, load_config, with_scratch_dir
from .errors import PrepareError
from .logging import configure_logging
from .models import SelectionManifest
from .preparer import Preparer
from .summary import PreparedSummary


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


def _add_output_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the manifest preview as JSON.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a docprep.yml configuration file.",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print the compact prepared summary (paths, sizes, hashes) as JSON.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docprep",
        description="Extract project archives and select files for documentation prompts.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write timestamped logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    prepare_parser = subparsers.add_parser(
        "prepare",
        help="Fetch and extract an archive, then select files for a project.",
    )
    _add_verbose_option(prepare_parser, suppress_default=True)
    _add_output_options(prepare_parser)
    prepare_parser.add_argument(
        "archive",
        help="URL or local path of the ZIP archive.",
    )
    prepare_parser.add_argument(
        "--project-id",
        required=True,
        help="Project identifier used to name the extraction directory.",
    )
    prepare_parser.add_argument(
        "--scratch-dir",
        type=Path,
        default=None,
        help="Directory holding downloaded archives and extraction roots.",
    )

    scan_parser = subparsers.add_parser(
        "scan",
        help="Select files from an already extracted directory.",
    )
    _add_verbose_option(scan_parser, suppress_default=True)
    _add_output_options(scan_parser)
    scan_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory to scan (defaults to current directory).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docprep commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")

    if args.command == "prepare":
        if args.scratch_dir is not None:
            config = with_scratch_dir(config, args.scratch_dir)
        preparer = Preparer(config)
        try:
            manifest = preparer.prepare(args.project_id, args.archive)
        except ValueError as exc:
            parser.exit(1, f"{exc}\n")
        except PrepareError as exc:
            parser.exit(1, f"docprep prepare failed: {exc}\nRun with --verbose for more details.\n")
    elif args.command == "scan":
        preparer = Preparer(config)
        try:
            manifest = preparer.prepare_extracted(Path(args.path).name or "local", args.path)
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")

    if args.summary:
        print(PreparedSummary.from_manifest(manifest).dumps())
        return
    _print_manifest(manifest, as_json=bool(args.json))


def _print_manifest(manifest: SelectionManifest, *, as_json: bool) -> None:
    if as_json:
        print(json.dumps(manifest.to_preview(), indent=2))
        return
    print(
        f"Prepared {manifest.count} of {manifest.considered} files "
        f"({manifest.total_bytes} bytes)"
    )
    for item in manifest.files:
        print(f"  {item.path} [{item.language}, {item.size} bytes]")
    for warning in manifest.warnings:
        print(f"  warning: {warning.path}: {warning.reason}")


if __name__ == "__main__":
    main(sys.argv[1:])
