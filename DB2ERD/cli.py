"""Command-line entry point: analyze a database and write the ER model.

Examples:
    python -m DB2ERD --engine sqlite --path inventory.db --dot out/inventory
    python -m DB2ERD --host db.local --user app --database shop --owner public --json model.json
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from DB2ERD.analysis import DbAnalyzer, ProgressEvent
from DB2ERD.config import get_config, load_settings
from DB2ERD.ir.models import ERDDataModel
from DB2ERD.sources import ConnectionOptions
from DB2ERD.utils.error_handling import ERDError
from DB2ERD.utils.logging import setup_logging
from DB2ERD.writers import GraphvizModelWriter, NullModelWriter


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="DB2ERD",
        description="Reconstruct an ER data model from a database catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--engine", choices=["postgresql", "sqlite"], default="postgresql")
    parser.add_argument("--path", default=None, help="SQLite database file")
    parser.add_argument("--host", default=None, help="PostgreSQL host (default: config.yaml)")
    parser.add_argument("--port", type=int, default=None, help="PostgreSQL port (default: config.yaml)")
    parser.add_argument("--user", dest="user_name", default=None)
    parser.add_argument("--password", default=None)
    parser.add_argument("--database", default=None, help="Catalog/database name (default: user name)")
    parser.add_argument("--owner", default=None, help="Schema to analyze (default: user name, 'main' for sqlite)")
    parser.add_argument("--dot", default=None, help="Write Graphviz source to this path")
    parser.add_argument("--render", choices=["svg", "png", "jpg", "pdf"], default=None,
                        help="Also render the diagram (needs the Graphviz 'dot' executable)")
    parser.add_argument("--json", dest="json_path", default=None, help="Write the model snapshot as JSON")
    parser.add_argument("--config", default=None, help="Alternative config.yaml")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    return parser.parse_args(argv)


def _print_progress(event: ProgressEvent) -> None:
    stream = sys.stderr if event.severity == "error" else sys.stdout
    print(f"[{event.severity.upper()}] {event.message}", file=stream)


async def run(args: argparse.Namespace) -> int:
    overrides = {"log_level": args.log_level} if args.log_level else {}
    settings = load_settings(args.config, **overrides)
    setup_logging(
        level=settings.log_level,
        format_type=settings.log_format,
        log_to_file=settings.log_to_file,
        log_file=settings.log_file,
    )

    postgres_defaults = get_config("postgresql", args.config) or {}
    try:
        options = ConnectionOptions(
            engine=args.engine,
            path=args.path,
            host=args.host or postgres_defaults.get("host", "localhost"),
            port=args.port or postgres_defaults.get("port", 5432),
            connect_timeout=postgres_defaults.get("connect_timeout", 10),
            user_name=args.user_name,
            password=args.password,
            database=args.database,
            owner=args.owner,
        )
    except ValidationError as e:
        print(f"Invalid connection options: {e}", file=sys.stderr)
        return 2

    if args.dot:
        writer = GraphvizModelWriter(
            output_path=args.dot,
            format=args.render or "svg",
            render=args.render is not None,
        )
    else:
        writer = NullModelWriter()

    model = ERDDataModel(name=settings.model_name)
    analyzer = DbAnalyzer(options, model, writer=writer, settings=settings)
    try:
        report = await analyzer.run(_print_progress)
    except ERDError as e:
        print(f"Analysis failed: {e}", file=sys.stderr)
        return 1

    if args.json_path:
        json_path = Path(args.json_path)
        json_path.parent.mkdir(parents=True, exist_ok=True)
        json_path.write_text(model.to_snapshot().model_dump_json(indent=2), encoding="utf-8")

    print("=" * 80)
    print(f"Entities:      {report.entities}")
    print(f"Columns:       {report.columns}")
    print(f"Relationships: {report.relationships}")
    if report.unresolved:
        print(f"Unresolved references: {len(report.unresolved)}")
        for ref in report.unresolved:
            print(f"  - {ref.foreign_key_name}: {ref.table_name}.{ref.column_name} -> "
                  f"{ref.ref_table_name}.{ref.ref_column_name}")
    print("=" * 80)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    return asyncio.run(run(parse_args(argv)))
