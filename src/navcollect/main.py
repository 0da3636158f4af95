from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from navcollect.app import collect_navmeshes, read_collected_overrides
from navcollect.config import (
    ConfigurationError,
    configure_logging,
    get_storage_config,
    load_settings,
    save_settings,
)
from navcollect.domain.errors import ConcurrentRunRejectedError, OutputWriteError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError("Worker count must be at least 1")
    return parsed


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Collect winning navmesh overrides")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log excluded navmeshes")
    parser.add_argument(
        "--log-file",
        type=Path,
        help=(
            "Also write the log to this file, truncated on start "
            "(collect defaults to NavmeshCollector.log in the data dir)"
        ),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    collect = subparsers.add_parser("collect", help="Collect navmeshes into the output container")
    collect.add_argument(
        "--load-order",
        type=Path,
        help="JSON load-order dump to read (defaults to $NAVCOLLECT_LOAD_ORDER)",
    )
    collect.add_argument(
        "--settings",
        type=Path,
        help="Settings document to use (defaults to settings.json in the data dir)",
    )
    collect.add_argument(
        "--output",
        type=Path,
        help="Output container path (defaults to NavmeshCollector.db in the data dir)",
    )
    collect.add_argument(
        "--creation-club",
        type=Path,
        help="Creation Club listings file whose plugins count as base plugins",
    )
    collect.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Classify candidates on this many threads",
    )

    settings = subparsers.add_parser("settings", help="Settings document commands")
    settings_sub = settings.add_subparsers(dest="settings_command", required=True)
    for name, help_text in (
        ("init", "Write a settings document with default values"),
        ("show", "Print the effective settings document"),
    ):
        sub = settings_sub.add_parser(name, help=help_text)
        sub.add_argument("--path", type=Path, help="Settings document path")

    show_output = subparsers.add_parser("show-output", help="List collected navmeshes")
    show_output.add_argument("--output", type=Path, help="Output container path")

    return parser.parse_args(list(argv))


def _settings_path(args: argparse.Namespace) -> Path:
    return args.path or get_storage_config().settings_path()


def _run_settings_command(args: argparse.Namespace) -> None:
    path = _settings_path(args)
    if args.settings_command == "init":
        if path.exists():
            raise ConfigurationError(f"Settings document already exists: {path}")
        save_settings(load_settings(path), path)
    else:
        document = load_settings(path).model_dump_json(by_alias=True, indent=2)
        sys.stdout.write(document + "\n")


def _run_show_output(args: argparse.Namespace) -> None:
    output = args.output or get_storage_config().output_path(ensure=False)
    for override in read_collected_overrides(output):
        sys.stdout.write(f"{override.key}\t{override.source}\n")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    log_file = parsed_args.log_file
    if log_file is None and parsed_args.command == "collect":
        log_file = get_storage_config().log_path()
    configure_logging(
        level=logging.DEBUG if parsed_args.verbose else logging.INFO,
        log_file=log_file,
    )

    try:
        if parsed_args.command == "collect":
            collect_navmeshes(
                load_order_path=parsed_args.load_order,
                settings_path=parsed_args.settings,
                output_path=parsed_args.output,
                creation_club_path=parsed_args.creation_club,
                max_workers=parsed_args.workers,
            )
        elif parsed_args.command == "settings":
            _run_settings_command(parsed_args)
        elif parsed_args.command == "show-output":
            _run_show_output(parsed_args)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except ConcurrentRunRejectedError:
        log.exception("Collection already running")
        sys.exit(1)
    except OutputWriteError:
        log.exception("Could not write output")
        sys.exit(1)
    except Exception:
        log.exception("Fatal error during collection")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
