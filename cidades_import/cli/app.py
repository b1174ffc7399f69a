from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Callable, Iterator
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from ..config.flows import FLOWS, get_flow
from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..db.batch_write import BatchMetrics, write_payload
from ..db.connection import db_connection
from ..db.queries import fetch_city_statuses, fetch_reference_cities
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.config_models import ImportConfig
from ..models.import_payload import ImportPayload
from ..models.reference import ReferenceCity
from ..services.session import ImportSession
from ..services.summary import render_preview, render_summary_line
from ..services.templates import write_template

"""CLI entrypoint.

    cidades-import preview FLOW FILE      parse + match, print preview, write nothing
    cidades-import import FLOW FILE       preview, confirm, bulk write
    cidades-import template FLOW          write modelo_<flow>.csv
    cidades-import status                 print id/status_prefeito of every city as JSON

Database access is skipped (mock mode) when DISABLE_DB_CONNECT=1 or when the
connection fails; matching then runs against an empty reference set and a
confirmed import fails with exit code 1.
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


class MockModeError(RuntimeError):
    pass


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env with python-dotenv; its values win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="cidades-import",
        description="CSV import for municipality records (cities, council members, election results)",
    )
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to import.yml")
    sub = p.add_subparsers(dest="command", required=True)

    flows = sorted(FLOWS)
    preview = sub.add_parser("preview", help="Parse and match a file without writing")
    preview.add_argument("flow", choices=flows)
    preview.add_argument("file", type=Path)

    imp = sub.add_parser("import", help="Parse, match and write the matched rows")
    imp.add_argument("flow", choices=flows)
    imp.add_argument("file", type=Path)
    imp.add_argument("--yes", "-y", action="store_true", help="Confirm without prompting")

    tpl = sub.add_parser("template", help="Write the CSV template of a flow")
    tpl.add_argument("flow", choices=flows)
    tpl.add_argument("--output", "-o", type=Path, default=Path("."))

    sub.add_parser("status", help="Print id and status_prefeito of every city as JSON")
    return p.parse_args(argv)


@contextmanager
def _cursor(cfg: ImportConfig, logger: Any) -> Iterator[Any]:
    """Yield a live cursor, or None in mock mode."""
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> mock mode")
        yield None
        return
    with ExitStack() as stack:
        try:
            cur = stack.enter_context(db_connection(cfg.database))
        except Exception as e:
            logger.info(f"DB connection failed -> fallback to mock mode: {e}")
            cur = None
        yield cur


def _reference(cursor: Any, cfg: ImportConfig) -> list[ReferenceCity]:
    if cursor is None:
        return []
    return fetch_reference_cities(cursor, cfg.tables.cidades)


def _print_messages(logger: Any, session: ImportSession) -> None:
    for message in session.errors:
        logger.warning(message)
    summary = session.summary
    if summary is not None:
        logger.info(
            f"matched={summary.matched} new={summary.new} existing={summary.existing} "
            f"cities={summary.distinct_ids}"
        )
    if summary is not None and summary.unmatched_names:
        shown = summary.unmatched_names[:10]
        more = len(summary.unmatched_names) - len(shown)
        suffix = f" ... e mais {more}" if more > 0 else ""
        logger.warning(f"não encontrados ({summary.unmatched}): {', '.join(shown)}{suffix}")


def _log_batch(logger: Any) -> Callable[[BatchMetrics], None]:
    def callback(m: BatchMetrics) -> None:
        logger.debug(f"batch table={m.table} rows={m.batch_size} elapsed={m.elapsed_seconds:.3f}s")

    return callback


def _confirm_prompt(payload: ImportPayload) -> bool:
    answer = input(f"Importar {payload.total_rows} registro(s)? [s/N] ")
    return answer.strip().lower() in ("s", "sim", "y", "yes")


def _run_import(args: argparse.Namespace, cfg: ImportConfig, logger: Any) -> int:
    flow = get_flow(args.flow)
    path: Path = args.file
    if not path.is_file():
        logger.error(f"file not found: {path}")
        return EXIT_FATAL
    if path.suffix.lower() != ".csv":
        logger.error(f"not a .csv file: {path}")
        return EXIT_FATAL

    error_log = ErrorLogBuffer(cfg.logs_directory)
    written = 0
    summary, rejected = None, 0
    code = EXIT_SUCCESS_ALL
    with _cursor(cfg, logger) as cursor:
        mode = "live" if cursor is not None else "mock"
        try:
            reference = _reference(cursor, cfg)
        except psycopg2.Error as e:
            logger.error(f"reference query failed: {e}")
            return EXIT_FATAL
        session = ImportSession(
            flow,
            reference=reference,
            csv_config=cfg.csv,
            error_log=error_log,
        )
        if not session.load(path.name, path.read_bytes()):
            for message in session.errors:
                logger.error(message)
            code = EXIT_FATAL
        else:
            print(render_preview(flow, session.summary, cfg.csv.preview_rows))
            _print_messages(logger, session)
            summary, rejected = session.summary, session.rejected
            payload = session.payload
            logger.info(
                f"mode={mode} payload cidades_upsert={len(payload.city_upserts)} "
                f"cidades_update={len(payload.city_updates)} vereadores={len(payload.vereadores)}"
            )
            if rejected or summary.unmatched:
                code = EXIT_PARTIAL_FAILURE

            if args.command == "import":
                if payload.is_empty():
                    logger.warning("nothing to import")
                    code = EXIT_PARTIAL_FAILURE
                elif not (args.yes or _confirm_prompt(payload)):
                    logger.info("import cancelled")
                    session.reset()
                    code = EXIT_PARTIAL_FAILURE
                else:
                    def writer(p: ImportPayload) -> Any:
                        if cursor is None:
                            raise MockModeError("no database connection (mock mode)")
                        return write_payload(
                            cursor, p, cfg.tables, cfg.page_size, _log_batch(logger)
                        )

                    if session.confirm(writer):
                        written = session.write_result.total_rows
                        logger.info(f"import committed rows={written}")
                    else:
                        for message in session.errors:
                            logger.error(message)
                        code = EXIT_FATAL

    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"error log: {log_path}")
    summary_line = render_summary_line(flow.name, path.name, summary, rejected, written)
    log_summary(summary_line[len("SUMMARY "):])
    return code


def _run_status(cfg: ImportConfig, logger: Any) -> int:
    with _cursor(cfg, logger) as cursor:
        statuses = [] if cursor is None else fetch_city_statuses(cursor, cfg.tables.cidades)
    print(json.dumps(statuses, ensure_ascii=False))
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not pick up pytest's own argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.command == "template":
        flow = get_flow(args.flow)
        try:
            target = write_template(flow, args.output)
        except OSError as e:
            logger.error(f"template: {e}")
            return EXIT_FATAL
        logger.info(f"template written: {target}")
        return EXIT_SUCCESS_ALL

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "status":
        return _run_status(cfg, logger)
    return _run_import(args, cfg, logger)

