"""Command-line front door for drivepicker.

Runs one picker session against the live API: lists a folder, optionally
expands subfolders and indexes or de-indexes a node, then prints the rows.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import httpx
import loguru

from . import config
from .api import HttpClient, build_picker_deps
from .errors import PickerError, ValidationError, is_missing_env_error
from .runtime import PREFETCH_CANCEL_DEBOUNCE_SECONDS, PREFETCH_DELAY_SECONDS, PickerSession
from .tree_model import FileNode, FilterParams, format_display_row

SETUP_HINT = (
    f"Set {config.BACKEND_URL_ENV} and {config.ACCESS_TOKEN_ENV} in the environment, "
    f"optionally {config.INDEXING_PARAMS_ENV} as a JSON object."
)


def configure_logging(verbose: bool) -> None:
    """Replace loguru's default sink with one stderr sink at the chosen level."""
    loguru.logger.remove()
    loguru.logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def render_rows(session: PickerSession) -> str:
    lines = [format_display_row(row, row.kind == "node" and session.is_indexed(row.node)) for row in session.rows]
    return "\n".join(lines) + ("\n" if lines else "")


def _resolve_node(session: PickerSession, resource_id: str) -> FileNode:
    node = session.find_node(resource_id)
    if node is None:
        raise SystemExit(f"Resource not visible in this listing: {resource_id}")
    return node


async def run_session(args: argparse.Namespace, settings: config.Settings) -> str:
    """Drive one session from parsed arguments and return the rendered rows."""
    saved_filters = config.load_default_filters()
    filters = FilterParams(
        query=args.query or "",
        status=args.status or saved_filters.status,
        type=args.type or saved_filters.type,
    )
    async with HttpClient(settings.access_token) as client:
        session = PickerSession(
            build_picker_deps(settings, client),
            sort_order=args.order or config.load_sort_order(),
            prefetch_delay=config.load_prefetch_delay(PREFETCH_DELAY_SECONDS),
            cancel_debounce=config.load_cancel_debounce(PREFETCH_CANCEL_DEBOUNCE_SECONDS),
        )
        try:
            if args.folder is None:
                session.start()
            else:
                session.navigate(args.folder, args.name)
            session.set_filters(filters.query, filters.status, filters.type)
            await session.wait_idle()
            if session.error is not None:
                raise session.error

            for folder_id in args.expand:
                session.toggle_folder(folder_id)
                await session.wait_idle()

            if args.index:
                knowledge_base_id = await session.request_index(_resolve_node(session, args.index))
                loguru.logger.info(f"Knowledge base: {knowledge_base_id}")
                if args.deindex:
                    result = await session.request_deindex(_resolve_node(session, args.deindex))
                    if result.error_count:
                        loguru.logger.warning(f"{result.error_count} item(s) could not be removed")
            elif args.deindex:
                raise SystemExit("--deindex needs --index in the same session")
            await session.wait_idle()
            return render_rows(session)
        finally:
            session.close()


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and print the picker rows for a Drive folder."""
    parser = argparse.ArgumentParser(description="Browse and index a Google Drive connection.")
    parser.add_argument("folder", nargs="?", default=None, help="Folder id to open. Defaults to the root.")
    parser.add_argument("--name", default=None, help="Display name for the opened folder breadcrumb.")
    parser.add_argument("--query", default=None, help="Case-insensitive name filter.")
    parser.add_argument("--status", choices=["all", "indexed", "not-indexed"], default=None)
    parser.add_argument("--type", choices=["all", "folder", "file", "pdf", "csv", "txt"], default=None)
    parser.add_argument("--order", choices=["asc", "desc"], default=None, help="Name sort order.")
    parser.add_argument("--expand", action="append", default=[], metavar="ID", help="Expand a folder (repeatable).")
    parser.add_argument("--index", metavar="ID", default=None, help="Index a visible file or folder.")
    parser.add_argument("--deindex", metavar="ID", default=None, help="Remove a visible node after --index.")
    parser.add_argument("--save-prefs", action="store_true", help="Persist --order/--status/--type as defaults.")
    parser.add_argument("--verbose", action="store_true", help="Log debug output to stderr.")
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    if args.save_prefs:
        if args.order:
            config.save_sort_order(args.order)
        defaults = config.load_default_filters()
        config.save_default_filters(
            FilterParams(status=args.status or defaults.status, type=args.type or defaults.type)
        )

    try:
        settings = config.load_settings()
        output = asyncio.run(run_session(args, settings))
    except ValidationError as exc:
        raise SystemExit(str(exc)) from exc
    except (PickerError, httpx.HTTPError) as exc:
        if is_missing_env_error(exc) or is_missing_env_error(getattr(exc, "cause", None)):
            raise SystemExit(f"{exc}\n{SETUP_HINT}") from exc
        raise SystemExit(str(exc)) from exc
    sys.stdout.write(output)


__all__ = ["configure_logging", "render_rows", "run_session", "main"]
