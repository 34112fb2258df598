# main.py

import argparse
import json
import sys

from rich.console import Console
from rich.table import Table

from voter_vault.analytics import generate_insights, summarize
from voter_vault.config import get_config
from voter_vault.exceptions import VoterVaultError
from voter_vault.logger import get_logger
from voter_vault.models import IngestionReport, VoterRecord
from voter_vault.persistence import create_repository, export_backup, restore_backup
from voter_vault.processors import IngestionOrchestrator, SourceFile, VoterExtractor
from voter_vault.processors.ai_extractor import is_authorization_error
from voter_vault.utils import iter_source_files

console = Console(force_terminal=True)
logger = get_logger("voter_vault")


def print_voters(voters: list[VoterRecord], title: str) -> None:
    table = Table(title=title)
    for column in ("EPIC", "Name", "Age", "Gender", "Parent/Spouse", "Part", "Serial"):
        table.add_column(column)
    for v in voters:
        table.add_row(v.epic_no, v.name, str(v.age), v.gender, v.parent_spouse_name, v.part_no, v.serial_no)
    console.print(table)


def print_report(report: IngestionReport) -> None:
    console.print(
        f"[bold]{report.stats.total_extracted}[/bold] extracted, "
        f"[bold green]{report.stats.total_saved}[/bold green] stored"
    )

    files = Table(title="Files")
    files.add_column("File")
    files.add_column("Records", justify="right")
    files.add_column("Status")
    for f in report.files:
        status = f.status if not f.error else f"{f.status}: {f.error}"
        files.add_row(f.name, str(f.count), status)
    console.print(files)

    for entry in report.log:
        console.print(f"[dim]❯ {entry}[/dim]")

    if report.preview:
        print_voters(report.preview, "Preview (last file)")


def cmd_ingest(args, config, repository) -> int:
    sources = [SourceFile.from_path(p) for path in args.files for p in iter_source_files(path)]
    if not sources:
        console.print("[yellow]No supported files found[/yellow]")
        return 1

    orchestrator = IngestionOrchestrator(repository, extractor=VoterExtractor(config.ai), config=config)
    logger.info(f"🛡️ Ingesting {len(sources)} file(s)")
    try:
        report = orchestrator.ingest(sources)
    except Exception as e:
        if not is_authorization_error(e):
            raise
        print_report(orchestrator.report())
        console.print("[red]AI credential rejected. Set a valid AI_API_KEY and retry.[/red]")
        return 2

    print_report(report)
    return 0


def cmd_search(args, config, repository) -> int:
    print_voters(repository.search(args.query), f"Search: {args.query}")
    return 0


def cmd_list(args, config, repository) -> int:
    print_voters(repository.list_all()[: args.limit], "Voters")
    return 0


def cmd_delete(args, config, repository) -> int:
    if repository.delete(args.epic):
        console.print(f"Deleted {args.epic}")
        return 0
    console.print(f"[yellow]{args.epic} not found[/yellow]")
    return 1


def cmd_truncate(args, config, repository) -> int:
    if not args.yes:
        console.print("[yellow]Refusing to delete every record without --yes[/yellow]")
        return 1
    console.print(f"Deleted {repository.delete_all()} records")
    return 0


def cmd_export(args, config, repository) -> int:
    path = export_backup(repository, args.destination)
    console.print(f"Backup written to {path}")
    return 0


def cmd_restore(args, config, repository) -> int:
    console.print(f"Restored {restore_backup(repository, args.file)} records")
    return 0


def cmd_stats(args, config, repository) -> int:
    console.print_json(json.dumps(summarize(repository.list_all()), ensure_ascii=False))
    return 0


def cmd_insights(args, config, repository) -> int:
    result = generate_insights(repository.list_all(), config.ai)
    if result is None:
        console.print("[yellow]Store is empty[/yellow]")
        return 1
    console.print_json(json.dumps(result["stats"], ensure_ascii=False))
    console.print(result["aiInsights"])
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Voter Vault ingestion")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("ingest", help="Ingest spreadsheets, PDFs or page images")
    p.add_argument("files", nargs="+", help="Files or directories, processed in the given order")
    p.set_defaults(func=cmd_ingest)

    p = sub.add_parser("search", help="Search by name or EPIC number")
    p.add_argument("query")
    p.set_defaults(func=cmd_search)

    p = sub.add_parser("list", help="List most recently updated voters")
    p.add_argument("--limit", type=int, default=50)
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("delete", help="Delete one voter")
    p.add_argument("epic")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("truncate", help="Delete every voter")
    p.add_argument("--yes", action="store_true")
    p.set_defaults(func=cmd_truncate)

    p = sub.add_parser("export", help="Write a JSON backup")
    p.add_argument("destination", nargs="?", default=".")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("restore", help="Upsert records from a JSON backup")
    p.add_argument("file")
    p.set_defaults(func=cmd_restore)

    p = sub.add_parser("stats", help="Summary statistics")
    p.set_defaults(func=cmd_stats)

    p = sub.add_parser("insights", help="Summary statistics with AI commentary")
    p.set_defaults(func=cmd_insights)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()

    try:
        repository = create_repository(config)
        if config.store_backend == "postgres":
            repository.init_db()
        return args.func(args, config, repository)
    except VoterVaultError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
