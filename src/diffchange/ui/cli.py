from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import find_dotenv, load_dotenv

from diffchange.app import (
    accept_all_mass_changes,
    compare_files,
    export_merged,
    open_file_cache,
    restore_cached_file,
    review_payload,
)
from diffchange.config import ConfigurationError, configure_logging, get_view_config
from diffchange.domain.model import Source
from diffchange.domain.session import ReconciliationSession
from diffchange.ui.render import (
    TextRenderSink,
    format_cached_files,
    format_change_groups,
    format_statistics,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Review and reconcile record-level diffs")
    subparsers = parser.add_subparsers(dest="command", required=True)

    compare = subparsers.add_parser("compare", help="Upload two files and review their diff")
    compare.add_argument("old", type=Path, help="File holding the OLD version")
    compare.add_argument("new", type=Path, help="File holding the NEW version")
    compare.add_argument(
        "--output",
        type=Path,
        help="Directory to write the merged export into",
    )
    compare.add_argument(
        "--accept-mass",
        choices=[source.value for source in Source],
        help="Accept every repeated change from the given side before exporting",
    )
    compare.add_argument(
        "--no-cache",
        action="store_true",
        help="Do not keep a copy of the input files in the recent files cache",
    )

    review = subparsers.add_parser("review", help="Review a saved diff payload (JSON)")
    review.add_argument("payload", type=Path, help="Path to the JSON diff payload")
    review.add_argument("--search", type=str, help="Only show records containing this text")
    review.add_argument(
        "--only-changes",
        action="store_true",
        help="Only show records with changes",
    )
    review.add_argument(
        "--only-changed-fields",
        action="store_true",
        help="Hide fields that are the same on both sides",
    )
    review.add_argument(
        "--accept-mass",
        choices=[source.value for source in Source],
        help="Accept every repeated change from the given side",
    )
    review.add_argument(
        "--output",
        type=Path,
        help="Directory to write the merged export into",
    )

    recent = subparsers.add_parser("recent", help="Manage recently used input files")
    recent_sub = recent.add_subparsers(dest="recent_command", required=True)
    recent_sub.add_parser("list", help="List cached files, newest first")
    recent_remove = recent_sub.add_parser("remove", help="Remove a cached file")
    recent_remove.add_argument("file_id", type=int, help="Id of the cached file")
    recent_restore = recent_sub.add_parser("restore", help="Write a cached file back to disk")
    recent_restore.add_argument("file_id", type=int, help="Id of the cached file")
    recent_restore.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Directory to restore the file into",
    )

    return parser.parse_args(list(argv))


def _validate_inputs(args: argparse.Namespace) -> None:
    if args.command == "compare":
        for path in (args.old, args.new):
            if not path.is_file():
                raise ValueError(f"Input file not found: {path}")
    elif args.command == "review" and not args.payload.is_file():
        raise ValueError(f"Payload file not found: {args.payload}")


def _finish_review(
    session: ReconciliationSession,
    sink: TextRenderSink,
    *,
    accept_mass: str | None,
    output: Path | None,
) -> None:
    sink.write_lines([format_statistics(session.statistics)])
    if accept_mass is not None:
        groups = session.group_similar_changes()
        sink.write_lines(format_change_groups(groups))
        accept_all_mass_changes(session, accept_mass)
    sink.render(session.render_plan())
    if session.status.text:
        sink.write_lines([session.status.text])
    if output is not None:
        target = export_merged(session, output)
        sink.write_lines([f"Exported to {target}"])


def _run_recent(args: argparse.Namespace, sink: TextRenderSink) -> None:
    cache = open_file_cache()
    if args.recent_command == "list":
        sink.write_lines(format_cached_files(cache.list()))
    elif args.recent_command == "remove":
        if not cache.remove(args.file_id):
            raise LookupError(f"No cached file with id {args.file_id}")
        sink.write_lines([f"Removed cached file #{args.file_id}"])
    elif args.recent_command == "restore":
        target = restore_cached_file(cache, args.file_id, args.output)
        sink.write_lines([f"Restored to {target}"])
    else:
        raise ValueError(f"Unsupported recent command: {args.recent_command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        _validate_inputs(parsed_args)
        session = ReconciliationSession(config=get_view_config())
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    sink = TextRenderSink()
    try:
        if parsed_args.command == "compare":
            cache = None if parsed_args.no_cache else open_file_cache()
            compare_files(session, parsed_args.old, parsed_args.new, cache=cache)
            _finish_review(
                session,
                sink,
                accept_mass=parsed_args.accept_mass,
                output=parsed_args.output,
            )
        elif parsed_args.command == "review":
            review_payload(session, parsed_args.payload)
            session.set_change_filters(
                only_changes=parsed_args.only_changes,
                only_changed_fields=parsed_args.only_changed_fields,
            )
            if parsed_args.search:
                session.submit_search(parsed_args.search)
            _finish_review(
                session,
                sink,
                accept_mass=parsed_args.accept_mass,
                output=parsed_args.output,
            )
        elif parsed_args.command == "recent":
            _run_recent(parsed_args, sink)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console entry point: load ``.env`` from the working directory, then run ``main``."""
    load_dotenv(find_dotenv(usecwd=True))
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
