from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..excel.errors import StoreError
from ..logging.init import log_summary, set_debug, setup_logging
from ..services.context import StoreContext, open_store
from ..services.failures import record_failure
from ..services.status import validate_workbook, workbook_status
from ..services.summary import render_summary_line

"""Operator CLI for the proposal workbook.

Commands:
  init                  create/load the workbook, add missing sheets, seed
  status                per-sheet row/column counts + SUMMARY line
  check                 confirm the workbook can be opened
  show SHEET            print headers and the first rows of a sheet
  validate              report missing sheets (exit 2) and header drift
  reset --yes           destroy all data and rebuild with seed rows
  backup / backups      create a backup / list backups
  restore BACKUP_ID     replace the workbook with a backup

Exit codes: 0 success, 1 fatal (config or store failure), 2 validation issues.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_VALIDATION_ISSUES = 2


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so PROPOSAL_STORE_WORKBOOK set there overrides the config file."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="proposal-store", description="Proposal workbook store")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to store.yml")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)
    sub.add_parser("init", help="Create or load the workbook and seed empty sheets")
    sub.add_parser("status", help="Show sheet row/column counts")
    sub.add_parser("check", help="Check that the workbook can be opened")
    show = sub.add_parser("show", help="Print a sheet's headers and first rows")
    show.add_argument("sheet")
    show.add_argument("--limit", type=int, default=5)
    sub.add_parser("validate", help="Compare the workbook to the required sheets")
    reset = sub.add_parser("reset", help="Destroy all data and rebuild the workbook")
    reset.add_argument("--yes", action="store_true", help="Confirm the destructive reset")
    sub.add_parser("backup", help="Copy the workbook into the backup directory")
    sub.add_parser("backups", help="List backups, newest first")
    restore = sub.add_parser("restore", help="Replace the workbook with a backup")
    restore.add_argument("backup_id")
    return p.parse_args(argv)


async def _cmd_init(ctx: StoreContext, args: argparse.Namespace) -> int:
    result = await ctx.bootstrapper.initialize_workbook()
    logger = setup_logging()
    if result.added_sheets and not result.created:
        logger.info(f"added sheets: {', '.join(result.added_sheets)}")
    for sheet, count in result.seeded.items():
        logger.info(f"seeded {count} row(s) into {sheet}")
    logger.info(f"workbook ready: {result.path} sheets={result.sheets}")
    return EXIT_SUCCESS


async def _cmd_status(ctx: StoreContext, args: argparse.Namespace) -> int:
    logger = setup_logging()
    status = await workbook_status(ctx.accessor)
    for s in status.sheets:
        if s.exists:
            logger.info(f"{s.sheet_name}: rows={s.row_count} columns={s.column_count}")
        else:
            logger.warning(f"{s.sheet_name}: missing")
    log_summary(render_summary_line(status)[len("SUMMARY "):])
    return EXIT_SUCCESS


async def _cmd_check(ctx: StoreContext, args: argparse.Namespace) -> int:
    info = await ctx.accessor.check_connection()
    setup_logging().info(f"workbook available: {info.path} sheets={info.sheets}")
    return EXIT_SUCCESS


async def _cmd_show(ctx: StoreContext, args: argparse.Namespace) -> int:
    data = await ctx.accessor.get_sheet_data(args.sheet)
    print(f"SHEET: {data.sheet_name} rows={data.row_count}")
    print(f"  headers={data.headers}")
    for index, record in enumerate(data.records()[: max(args.limit, 0)], start=1):
        print(f"  [{index}] {record}")
    return EXIT_SUCCESS


async def _cmd_validate(ctx: StoreContext, args: argparse.Namespace) -> int:
    logger = setup_logging()
    report = await validate_workbook(ctx.accessor)
    for issue in report.issues:
        logger.error(issue.message)
    for warning in report.warnings:
        logger.warning(warning.message)
    log_summary(
        f"status={report.status} checked={report.checked_sheets} "
        f"issues={len(report.issues)} warnings={len(report.warnings)}"
    )
    return EXIT_SUCCESS if report.valid else EXIT_VALIDATION_ISSUES


async def _cmd_reset(ctx: StoreContext, args: argparse.Namespace) -> int:
    logger = setup_logging()
    if not args.yes:
        logger.error("reset destroys all workbook data; re-run with --yes to confirm")
        return EXIT_FATAL
    result = await ctx.bootstrapper.reset_workbook()
    logger.info(f"workbook reset: {result.path} seeded={result.seeded}")
    return EXIT_SUCCESS


async def _cmd_backup(ctx: StoreContext, args: argparse.Namespace) -> int:
    info = await ctx.backups.create_backup()
    setup_logging().info(f"backup_id={info.backup_id} size={info.size_bytes} path={info.path}")
    return EXIT_SUCCESS


async def _cmd_backups(ctx: StoreContext, args: argparse.Namespace) -> int:
    backups = ctx.backups.list_backups()
    if not backups:
        print("no backups")
    for b in backups:
        print(f"{b.backup_id} size={b.size_bytes} created={b.created.isoformat()}")
    return EXIT_SUCCESS


async def _cmd_restore(ctx: StoreContext, args: argparse.Namespace) -> int:
    info = await ctx.backups.restore_backup(args.backup_id)
    setup_logging().info(f"restored from {info.backup_id}")
    return EXIT_SUCCESS


COMMANDS = {
    "init": _cmd_init,
    "status": _cmd_status,
    "check": _cmd_check,
    "show": _cmd_show,
    "validate": _cmd_validate,
    "reset": _cmd_reset,
    "backup": _cmd_backup,
    "backups": _cmd_backups,
    "restore": _cmd_restore,
}


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # Only read sys.argv when no argv was passed; an explicit [] must stay empty
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    ctx = open_store(cfg)
    try:
        return asyncio.run(COMMANDS[args.command](ctx, args))
    except StoreError as e:
        record_failure(
            ctx.error_log, ctx.store.path.name, e, args.command,
            sheet=getattr(args, "sheet", None),
        )
        return EXIT_FATAL
    finally:
        ctx.error_log.flush()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
