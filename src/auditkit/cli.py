"""Command-line interface for auditkit."""

import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from auditkit import __version__
from auditkit.cache import ReportCache
from auditkit.compliance.mapper import FrameworkMappingTable
from auditkit.compliance.models import framework_key
from auditkit.config import ScanConfig, load_config
from auditkit.errors import AuditKitError
from auditkit.models import ComplianceReport
from auditkit.reporter import create_reporter

console = Console()
logger = logging.getLogger(__name__)


def _configure_logging(verbose: int, level: str = "WARNING") -> None:
    """Send log records to stderr through rich."""
    if verbose > 1:
        level = "DEBUG"
    elif verbose == 1:
        level = "INFO"
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_table(mapping_file: Optional[str]) -> FrameworkMappingTable:
    if mapping_file:
        return FrameworkMappingTable.from_yaml(mapping_file)
    return FrameworkMappingTable.default()


def _output_report(report: ComplianceReport, format: str, output: Optional[str]) -> None:
    """Output a report in the specified format."""
    reporter = create_reporter(format)
    content = reporter.generate(report)

    if output:
        Path(output).write_text(content, encoding="utf-8")
        console.print(f"[green]Report written to {output}[/green]")
    elif format == "json":
        click.echo(content)
    else:
        console.print(content, markup=False, highlight=False, soft_wrap=True)


@click.group()
@click.version_option(version=__version__, prog_name="auditkit")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML configuration file",
)
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (-vv for debug)")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], verbose: int) -> None:
    """auditkit - Cloud compliance scanning and scoring."""
    try:
        config = load_config(config_path)
    except AuditKitError as e:
        raise click.ClickException(str(e)) from e
    _configure_logging(verbose, config.log_level)
    ctx.obj = config


@main.group()
def scan() -> None:
    """Run compliance scans."""
    pass


@scan.command("aws")
@click.option("--framework", "-F", help="Compliance framework (default: soc2)")
@click.option("--profile", help="AWS profile name")
@click.option("--region", help="AWS region")
@click.option(
    "--format",
    "-f",
    type=click.Choice(["json", "table"]),
    default="table",
    help="Output format",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Write output to file",
)
@click.option("--max-workers", type=click.IntRange(min=1), help="Checkers run concurrently")
@click.option("--timeout", type=float, help="Seconds each checker may run")
@click.option(
    "--mapping-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Custom framework mapping table (YAML)",
)
@click.option("--allow-partial", is_flag=True, help="Report partial results if cancelled")
@click.option("--no-cache", is_flag=True, help="Do not save the report to the local cache")
@click.pass_obj
def scan_aws(
    config: ScanConfig,
    framework: Optional[str],
    profile: Optional[str],
    region: Optional[str],
    format: str,
    output: Optional[str],
    max_workers: Optional[int],
    timeout: Optional[float],
    mapping_file: Optional[str],
    allow_partial: bool,
    no_cache: bool,
) -> None:
    """Scan an AWS account against a compliance framework.

    Exit codes:
      - Exit 0: Every automatable requirement passed
      - Exit 1: At least one requirement failed
      - Exit 2: Scan error
    """
    import boto3

    from auditkit.checks.registry import CheckerRegistry, get_account_id
    from auditkit.context import ScanContext
    from auditkit.runner import CheckerRunner
    from auditkit.scanner import run_compliance_scan

    framework = framework or config.framework
    is_machine_format = format == "json"
    context = ScanContext()

    try:
        table = _load_table(mapping_file or config.mapping_file)
        session = boto3.Session(
            profile_name=profile or config.profile,
            region_name=region or config.region,
        )
        account_id = get_account_id(session)

        if not is_machine_format:
            console.print(
                f"[blue]Scanning AWS account {account_id} against {framework}...[/blue]"
            )

        registry = CheckerRegistry.from_session(session, region or config.region)
        runner = CheckerRunner(
            max_workers=max_workers or config.max_workers,
            checker_timeout=timeout if timeout is not None else config.checker_timeout,
        )
        report = run_compliance_scan(
            registry.get_all(),
            framework,
            table=table,
            provider="aws",
            account_id=account_id,
            runner=runner,
            context=context,
            allow_partial=allow_partial or config.allow_partial,
        )
    except KeyboardInterrupt:
        context.cancel()
        click.echo("ERROR: Scan interrupted", err=True)
        sys.exit(2)
    except Exception as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(2)

    if config.cache_enabled and not no_cache:
        try:
            path = ReportCache(config.cache_path).save(report)
            logger.info(f"Report cached at {path}")
        except AuditKitError as e:
            logger.warning(f"Could not cache report: {e}")

    _output_report(report, format, output)

    if report.has_failures:
        if not is_machine_format:
            console.print(
                f"\n[red]{report.summary.failed} requirement(s) failed[/red]"
            )
        sys.exit(1)
    elif not is_machine_format:
        console.print("\n[green]No failing requirements[/green]")


@main.command()
@click.option(
    "--mapping-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Custom framework mapping table (YAML)",
)
@click.pass_obj
def frameworks(config: ScanConfig, mapping_file: Optional[str]) -> None:
    """List supported compliance frameworks."""
    try:
        table = _load_table(mapping_file or config.mapping_file)
    except AuditKitError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(2)

    output = Table(title="Supported Frameworks", show_header=True, header_style="bold cyan")
    output.add_column("Framework")
    output.add_column("Requirements", justify="right")

    for name in table.frameworks():
        output.add_row(name, str(len(table.requirements(name))))

    console.print(output)


@main.group()
def cache() -> None:
    """Manage cached compliance reports."""
    pass


@cache.command("list")
@click.pass_obj
def cache_list(config: ScanConfig) -> None:
    """List cached reports."""
    try:
        info = ReportCache(config.cache_path).info()
    except AuditKitError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(2)

    if not info["scans"]:
        console.print(f"[yellow]No cached scans in {info['cache_path']}[/yellow]")
        return

    output = Table(title=f"Cached Scans ({info['cache_path']})", header_style="bold cyan")
    output.add_column("Timestamp")
    output.add_column("Provider")
    output.add_column("Account")
    output.add_column("Framework")
    output.add_column("Score", justify="right")

    for item in info["scans"]:
        score = item["score"]
        output.add_row(
            datetime.fromisoformat(item["timestamp"]).strftime("%Y-%m-%d %H:%M"),
            item["provider"],
            item["account"],
            item["framework"],
            "N/A" if score is None else f"{score:.1f}%",
        )

    console.print(output)


@cache.command("show")
@click.option("--provider", default="aws", help="Cloud provider")
@click.option("--account", "account_id", help="Account ID")
@click.option("--framework", "-F", help="Compliance framework")
@click.option(
    "--file",
    "file_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Show a specific cached report file",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["json", "table"]),
    default="table",
    help="Output format",
)
@click.pass_obj
def cache_show(
    config: ScanConfig,
    provider: str,
    account_id: Optional[str],
    framework: Optional[str],
    file_path: Optional[str],
    format: str,
) -> None:
    """Show the latest cached report for an account."""
    if not file_path and not account_id:
        raise click.UsageError("Either --account or --file is required")

    report_cache = ReportCache(config.cache_path)
    age: Optional[timedelta] = None
    try:
        if file_path:
            report = report_cache.load_file(file_path)
        else:
            framework = framework_key(framework or config.framework)
            report = report_cache.load_latest(provider, account_id, framework)
            age = report_cache.scan_age(provider, account_id, framework)
    except AuditKitError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(2)

    if format == "table" and age is not None:
        console.print(f"[dim]Cached report, {_format_age(age)} old[/dim]")

    _output_report(report, format, None)


@cache.command("clear")
@click.option(
    "--older-than",
    type=click.IntRange(min=0),
    help="Only remove reports older than this many days",
)
@click.pass_obj
def cache_clear(config: ScanConfig, older_than: Optional[int]) -> None:
    """Remove cached reports."""
    report_cache = ReportCache(config.cache_path)
    try:
        if older_than is not None:
            removed = report_cache.clear_older_than(timedelta(days=older_than))
        else:
            removed = report_cache.clear()
    except AuditKitError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(2)

    console.print(f"[green]Removed {removed} cached file(s)[/green]")


@main.command()
def version() -> None:
    """Show version information."""
    click.echo(f"auditkit version {__version__}")


def _format_age(age: timedelta) -> str:
    hours = int(age.total_seconds() // 3600)
    if hours >= 48:
        return f"{hours // 24} days"
    if hours >= 1:
        return f"{hours} hours"
    return f"{int(age.total_seconds() // 60)} minutes"


if __name__ == "__main__":
    main()
