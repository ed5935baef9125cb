import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .env import get_settings, load_env
from .errors import CommandLineError, DuplicateKeyError, SearchTermTooLong, TooManyInvalidAttempts
from .formatting import render_employee_table, render_search_results, render_title_ranges
from .logger import get_logger
from .query import is_title_search, search
from .seed import seed_if_empty
from .store import RecordStore, open_store
from .workflow import AddEmployeeWorkflow

USAGE = 'Usage: roster [-list | -titles | -list "search_term" | -add]'
INVALID_COMMAND = "Invalid command. Use -list, -titles, or -add"


def _report_store_error(error: Exception, command: str) -> None:
    logger = get_logger()
    logger.record_error(type(error).__name__)
    logger.error("Store error", command=command, error=type(error).__name__)


def cmd_list(store: RecordStore, args: argparse.Namespace) -> int:
    if args.list_term is not None and args.list_term.strip():
        return cmd_search(store, args.list_term)

    try:
        rows = store.all_employees_with_active_assignment()
        overlaps = store.employees_with_overlapping_assignments()
    except SQLAlchemyError as e:
        _report_store_error(e, "-list")
        print("Error retrieving employee data")
        return 0

    if overlaps:
        get_logger().warning(
            "Employees with overlapping active assignments",
            employee_ids=[employee_id for employee_id, _ in overlaps],
        )
    for line in render_employee_table(rows):
        print(line)
    return 0


def cmd_search(store: RecordStore, term: str) -> int:
    by_title = is_title_search(term)
    try:
        result = search(store, term)
    except SearchTermTooLong:
        print("Search term too long")
        return 0
    except SQLAlchemyError as e:
        _report_store_error(e, "-list")
        print("Error searching by title" if by_title else "Error searching employees")
        return 0

    if not result.rows:
        print("No employees found with that title" if result.kind == "title" else "No employees found")
        return 0
    for line in render_search_results(result.rows):
        print(line)
    return 0


def cmd_titles(store: RecordStore, args: argparse.Namespace) -> int:
    try:
        ranges = store.title_salary_ranges()
    except SQLAlchemyError as e:
        _report_store_error(e, "-titles")
        print("Error retrieving title data")
        return 0

    if not ranges:
        print("No active titles found")
        return 0
    for line in render_title_ranges(ranges):
        print(line)
    return 0


def cmd_add(store: RecordStore, args: argparse.Namespace) -> int:
    workflow = AddEmployeeWorkflow(store, input_fn=input, output_fn=print)
    try:
        result = workflow.run()
        result.raise_for_status()
    except TooManyInvalidAttempts:
        print("Error: Too many invalid attempts")
        return 0
    except DuplicateKeyError:
        print("Error: SSN already exists")
        return 0
    except SQLAlchemyError as e:
        _report_store_error(e, "-add")
        print("Error: Failed to add employee")
        return 0

    print("Employee added successfully!")
    return 0


COMMAND_HANDLERS = {
    "-list": cmd_list,
    "-titles": cmd_titles,
    "-add": cmd_add,
}


class RosterArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises CommandLineError instead of exiting."""

    def error(self, message):
        raise CommandLineError(message)


def build_parser() -> argparse.ArgumentParser:
    """
    Options only. The command and its search term are left over by
    parse_known_args and read positionally by _split_command.
    """
    parser = RosterArgumentParser(
        prog="roster",
        description="Employee roster: list, search and add employees",
        epilog=USAGE,
        allow_abbrev=False,
    )
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--db", help="Path to SQLite database (default: $ROSTER_DB or employee.db)")
    parser.add_argument("--no-seed", action="store_true", help="Do not fill an empty database with sample data")
    return parser


def _split_command(tokens: List[str]) -> Tuple[Optional[str], Optional[str], List[str]]:
    """
    Split leftover tokens into (command, search term, ignored).

    Only the first token names the command. -list takes the next token as
    its search term even when it starts with a dash; anything after that
    is ignored.
    """
    if not tokens:
        return None, None, []
    command = tokens[0].lower()
    rest = tokens[1:]
    if command == "-list" and rest:
        return command, rest[0], rest[1:]
    return command, None, rest


def main(argv: Optional[List[str]] = None) -> int:
    # Load .env if present (ROSTER_DB, ROSTER_LOG_LEVEL, etc.)
    load_env()
    settings = get_settings()
    logger = get_logger()
    logger.configure(
        level=settings.log_level,
        log_dir=settings.log_dir,
        enable_file=settings.log_to_file,
    )

    argv = sys.argv[1:] if argv is None else list(argv)
    if not argv:
        print(USAGE)
        return 0

    try:
        args, tokens = build_parser().parse_known_args(argv)
    except CommandLineError as e:
        logger.warning("Unparseable command line", error=str(e))
        print(INVALID_COMMAND)
        return 0
    if args.version:
        print(__version__)
        return 0

    command, args.list_term, ignored = _split_command(tokens)
    if command is None:
        print(USAGE)
        return 0
    if command not in COMMAND_HANDLERS:
        logger.warning("Unrecognized command", command=command)
        print(INVALID_COMMAND)
        return 0
    if ignored:
        logger.info("Ignoring extra arguments", command=command, arguments=ignored)

    logger.record_operation(command)
    db_path = Path(args.db) if args.db else settings.db_path
    try:
        with open_store(db_path) as store:
            if settings.seed_on_empty and not args.no_seed:
                seed_if_empty(store)
            return COMMAND_HANDLERS[command](store, args)
    except Exception as e:
        # Never echo exception details to stdout
        logger.record_error(type(e).__name__)
        logger.critical("Application error", command=command, error=type(e).__name__)
        print("Application error")
        return 1
    finally:
        logger.log_metrics_summary()


if __name__ == "__main__":
    sys.exit(main())
