#!/usr/bin/env python3
"""
Certificate Verification CLI
============================

Command-line interface for verifying certificate submissions against a
JSON dataset or a SQL database.
"""

import sys
import json
import asyncio
import argparse
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.logging import RichHandler

from . import __version__
from .core import ConfigLoader, setup_ipo_logging
from .exceptions import CertVerifyError
from .models import CandidateSubmission, CertificateRecord, VerificationResult
from .loaders import load_dataset, InMemoryLedger, HttpLedgerClient
from .database import Database, SqlRecordRepository, SqlInstitutionRepository
from .engine import EngineSettings, VerificationOrchestrator, VerificationContext, compute_digest
from .output import ReportGenerator


console = Console()


def setup_logging(config: ConfigLoader, verbose: bool = False) -> None:
    """Setup IPO logging with a rich console handler."""
    level = 'DEBUG' if verbose else config.get('log_level')
    setup_ipo_logging(
        log_dir=config.get('log_dir'),
        log_level=level,
        console_output=config.get('log_console'),
        console_handler=RichHandler(rich_tracebacks=True, console=console),
    )


def display_result(result: VerificationResult) -> None:
    """Display verification result with rich formatting."""
    status_color = "green" if result.is_valid else "red"
    status_symbol = "✓" if result.is_valid else "✗"
    verdict = "VALID" if result.is_valid else "NOT VALID"

    panel = Panel(
        f"[{status_color} bold]{status_symbol} {verdict}[/{status_color} bold]\n"
        f"State: {result.state.value}\n"
        f"Overall confidence: {result.overall_confidence}%\n"
        f"Risk: {result.risk_level} ({result.risk_score})",
        title="Verification Result",
        border_style=status_color
    )
    console.print(panel)

    if result.checks:
        check_table = Table(title="Checks", show_header=True, header_style="bold")
        check_table.add_column("Check", style="cyan")
        check_table.add_column("Passed", justify="center")
        check_table.add_column("Confidence", justify="right")
        check_table.add_column("Message", style="white")

        for name, check in result.checks.items():
            check_table.add_row(
                name,
                "[green]yes[/green]" if check.passed else "[red]no[/red]",
                f"{check.confidence}%",
                check.message,
            )
        console.print(check_table)

    if result.anomalies:
        anomaly_table = Table(title="Anomalies", show_header=True, header_style="bold red")
        anomaly_table.add_column("#", style="dim", width=4)
        anomaly_table.add_column("Type", style="red")
        anomaly_table.add_column("Severity")
        anomaly_table.add_column("Risk", justify="right")
        anomaly_table.add_column("Description", style="white")

        for finding in result.anomalies:
            anomaly_table.add_row(
                str(finding.priority),
                finding.anomaly_type.value,
                finding.severity.value,
                str(finding.risk_score),
                finding.description,
            )
        console.print(anomaly_table)

    for reason in result.flagged_reasons:
        console.print(f"[yellow]Flagged:[/yellow] {reason}")


def read_json(path: Path) -> dict:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def load_submission(path: Path) -> CandidateSubmission:
    """Read a submission file: either declared fields or an OCR result with extractedFields."""
    data = read_json(path)
    if 'extractedFields' in data or 'extracted_fields' in data:
        declared = data.get('declared') or {}
        return CandidateSubmission.from_ocr(data, **declared)
    return CandidateSubmission.from_dict(data)


def build_repositories(config: ConfigLoader, dataset: Optional[Path]):
    """Repositories from a JSON dataset, or from the configured database."""
    if dataset is not None:
        return load_dataset(dataset, enforce_unique_numbers=False)

    database = Database.from_config(config)
    return SqlRecordRepository(database), SqlInstitutionRepository(database)


async def run_verification(
    submission: CandidateSubmission,
    config: ConfigLoader,
    dataset: Optional[Path],
    ledger_file: Optional[Path],
    timeout: Optional[float],
) -> VerificationResult:
    records, institutions = build_repositories(config, dataset)
    settings = EngineSettings.from_config(config)

    if ledger_file is not None:
        ledger = InMemoryLedger.from_file(ledger_file)
    elif config.get('ledger_url'):
        ledger = HttpLedgerClient.from_config(config)
    else:
        ledger = None

    orchestrator = VerificationOrchestrator(records, institutions, ledger, settings)
    context = VerificationContext(requested_by='cli', timeout=timeout)
    try:
        return await orchestrator.verify(submission, context)
    finally:
        if isinstance(ledger, HttpLedgerClient):
            await ledger.close()


def verify_command(
    submission_path: Path,
    dataset: Optional[Path],
    ledger_file: Optional[Path],
    output_report: Optional[Path],
    timeout: Optional[float],
    verbose: bool
) -> int:
    """Verify a single submission."""
    config = ConfigLoader()
    setup_logging(config, verbose)

    for path in (submission_path, dataset, ledger_file):
        if path is not None and not path.exists():
            console.print(f"[red]Error:[/red] File not found: {path}")
            return 1

    console.print(f"\n[bold]Verifying Certificate[/bold]")
    console.print(f"Submission: {submission_path}")
    console.print(f"Records: {dataset or 'database'}")
    console.print()

    submission = load_submission(submission_path)
    result = asyncio.run(run_verification(submission, config, dataset, ledger_file, timeout))

    display_result(result)

    if output_report:
        path = ReportGenerator().generate_report(result, output_report)
        console.print(f"\n[green]Report saved:[/green] {path}")

    return 0 if result.is_valid else 1


def digest_command(record_path: Path) -> int:
    """Print the canonical digest of a record."""
    if not record_path.exists():
        console.print(f"[red]Error:[/red] File not found: {record_path}")
        return 1

    data = read_json(record_path)
    if 'id' in data:
        record = CertificateRecord.from_dict(data)
    else:
        record = CandidateSubmission.from_dict(data).as_record()

    console.print(compute_digest(record))
    return 0


def main():
    """Main CLI entry point."""

    parser = argparse.ArgumentParser(
        description="Certificate Verification - authenticate academic certificates against institutional records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Verify against a JSON dataset
  certverify verify --dataset records.json --submission submission.json

  # Include a ledger file and save a report
  certverify verify --dataset records.json --submission ocr.json \\
      --ledger ledger.json --output report.json

  # Verify against CERTVERIFY_DATABASE_URL / CERTVERIFY_LEDGER_URL
  certverify verify --submission submission.json

  # Compute the digest of a record
  certverify digest --record record.json
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'certverify {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # Verify command
    verify_parser = subparsers.add_parser(
        'verify',
        help='Verify a certificate submission'
    )
    verify_parser.add_argument(
        '-s', '--submission',
        type=Path,
        required=True,
        help='Submission JSON (declared fields or OCR result with extractedFields)'
    )
    verify_parser.add_argument(
        '-d', '--dataset',
        type=Path,
        help='Dataset JSON with institutions, certificates and blacklist (default: database)'
    )
    verify_parser.add_argument(
        '-l', '--ledger',
        type=Path,
        help='Ledger JSON mapping digest to payload (default: CERTVERIFY_LEDGER_URL)'
    )
    verify_parser.add_argument(
        '-o', '--output',
        type=Path,
        help='Output report file path'
    )
    verify_parser.add_argument(
        '-t', '--timeout',
        type=float,
        help='Verification deadline in seconds'
    )
    verify_parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    # Digest command
    digest_parser = subparsers.add_parser(
        'digest',
        help='Compute the canonical digest of a record'
    )
    digest_parser.add_argument(
        '-r', '--record',
        type=Path,
        required=True,
        help='Record JSON'
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == 'verify':
            return verify_command(
                submission_path=args.submission,
                dataset=args.dataset,
                ledger_file=args.ledger,
                output_report=args.output,
                timeout=args.timeout,
                verbose=args.verbose
            )

        elif args.command == 'digest':
            return digest_command(args.record)

    except KeyboardInterrupt:
        console.print("\n[yellow]Verification interrupted by user[/yellow]")
        return 130

    except (CertVerifyError, OSError, ValueError) as e:
        console.print(f"\n[red bold]Error:[/red bold] {str(e)}")
        if getattr(args, 'verbose', False):
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
