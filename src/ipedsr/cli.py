"""
IPEDSR command line.

Inspect the survey registry and the survey tables present in an IPEDS
DuckDB database.

Usage:
    ipedsr surveys [--category personnel]
    ipedsr info salaries
    ipedsr tables salaries --from 2015 --to 2020
    ipedsr consolidate salaries --from 2015 --limit 20
    ipedsr consolidate vartable --materialize vartable_all
    ipedsr coverage
    ipedsr case-check directory

Options:
    --db PATH           Database file (defaults to IPEDS_DB_PATH)
    --registry PATH     Survey registry YAML (defaults to the packaged one)
    --log-level LEVEL   Logging level
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import duckdb
import pandas as pd

from ipedsr.config import config, load_registry, get_default_registry, SurveyRegistry
from ipedsr.config.config_loader import ConfigurationError
from ipedsr.config.logging_config import setup_logging, get_logger
from ipedsr.database import Catalog, get_connection
from ipedsr.exceptions import IpedsError
from ipedsr.surveys import SurveyQuery

logger = get_logger("cli")


def _print_rule() -> None:
    print("=" * 70)


def cmd_surveys(args, registry: SurveyRegistry) -> int:
    """List registered surveys."""
    summaries = registry.list_surveys(category=args.category)
    print("\nAvailable IPEDS Surveys:")
    _print_rule()
    for summary in summaries:
        print(f"{summary.id:<25} {summary.description}")
    _print_rule()

    lineages = registry.list_lineages()
    if lineages and args.category is None:
        print("\nLineages:")
        for lineage in lineages:
            eras = ", ".join(f"{s.label} -> {s.survey_id}" for s in lineage.segments)
            print(f"{lineage.id:<25} {eras}")
    return 0


def cmd_info(args, registry: SurveyRegistry) -> int:
    """Show a survey definition."""
    print(registry.format_info(args.survey))
    return 0


def cmd_tables(args, surveys: SurveyQuery) -> int:
    """List a survey's tables."""
    handles = surveys.get_tables(args.survey, args.year_min, args.year_max)
    if not handles:
        print(f"No tables found for {args.survey}")
        return 0
    for handle in handles:
        year = handle.year if handle.year is not None else "-"
        print(f"{handle.name:<30} {year}")
    print(f"\n{len(handles)} table(s)")
    return 0


def cmd_consolidate(args, surveys: SurveyQuery) -> int:
    """Consolidate a survey, printing a preview or materializing it."""
    relation = surveys.get_consolidated(args.survey, args.year_min, args.year_max)

    for warning in relation.warnings:
        print(f"WARNING: skipped {warning.table_name}: {warning.message}", file=sys.stderr)
    for drift in relation.type_drift:
        print(
            f"WARNING: {drift.column} has types {', '.join(drift.distinct_types)}",
            file=sys.stderr,
        )

    if relation.is_empty:
        print(f"No tables found for {args.survey}")
        return 0

    if args.materialize:
        count = relation.materialize(args.materialize)
        print(f"Created {args.materialize} from {len(relation.tables)} tables ({count:,} rows)")
        return 0

    print(f"Tables:  {', '.join(relation.tables)}")
    print(f"Columns: {len(relation.columns)}")
    print(f"Rows:    {relation.row_count():,}")
    if args.limit:
        with pd.option_context("display.max_columns", 20, "display.width", 120):
            print(relation.to_df(limit=args.limit))
    return 0


def cmd_coverage(args, surveys: SurveyQuery) -> int:
    """Show year coverage of every survey."""
    report = surveys.coverage_report()
    with pd.option_context("display.max_rows", None, "display.width", 120):
        print(report.to_string(index=False))
    return 0


def cmd_case_check(args, surveys: SurveyQuery) -> int:
    """List tables a survey misses only because of name case."""
    mismatches = surveys.find_case_mismatches(args.survey)
    if not mismatches:
        print(f"No case mismatches for {args.survey}")
        return 0
    print(f"Tables matching {args.survey} only case-insensitively:")
    for name in mismatches:
        print(f"  - {name}")
    return 1


REGISTRY_COMMANDS = {
    "surveys": cmd_surveys,
    "info": cmd_info,
}

CATALOG_COMMANDS = {
    "tables": cmd_tables,
    "consolidate": cmd_consolidate,
    "coverage": cmd_coverage,
    "case-check": cmd_case_check,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ipedsr",
        description="Inspect IPEDS survey tables in a DuckDB database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Database path (default: IPEDS_DB_PATH)",
    )
    parser.add_argument(
        "--registry",
        type=Path,
        default=None,
        help="Survey registry YAML file",
    )
    parser.add_argument(
        "--log-level",
        default=config.app.log_level,
        help="Logging level",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("surveys", help="List registered surveys")
    p.add_argument("--category", help="Only list surveys in this category")

    p = sub.add_parser("info", help="Show a survey definition")
    p.add_argument("survey")

    def add_years(p: argparse.ArgumentParser) -> None:
        p.add_argument("--from", dest="year_min", type=int, default=None, help="First year")
        p.add_argument("--to", dest="year_max", type=int, default=None, help="Last year")

    p = sub.add_parser("tables", help="List tables of a survey")
    p.add_argument("survey")
    add_years(p)

    p = sub.add_parser("consolidate", help="Stack a survey's years into one relation")
    p.add_argument("survey")
    add_years(p)
    p.add_argument("--materialize", metavar="TABLE", help="Write the result to TABLE")
    p.add_argument("--limit", type=int, default=10, help="Preview rows (0 for none)")

    sub.add_parser("coverage", help="Year coverage of every survey")

    p = sub.add_parser("case-check", help="Find tables missed because of name case")
    p.add_argument("survey")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, log_file=config.app.log_file)

    try:
        registry_path = args.registry or config.app.registry_path
        registry = load_registry(registry_path) if registry_path else get_default_registry()
        if args.command in REGISTRY_COMMANDS:
            return REGISTRY_COMMANDS[args.command](args, registry)

        read_only = not (args.command == "consolidate" and args.materialize)
        with get_connection(args.db, read_only=read_only) as conn:
            return CATALOG_COMMANDS[args.command](args, SurveyQuery(Catalog(conn), registry))

    except (IpedsError, ConfigurationError) as e:
        logger.error(str(e))
        return 2
    except duckdb.Error as e:
        logger.error(f"Database error: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
