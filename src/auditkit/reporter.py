"""Compliance report generators."""

import json
from abc import ABC, abstractmethod

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from auditkit.models import ComplianceReport, RemediationItem, RequirementVerdict, Severity, Status


class ReportGenerator(ABC):
    """Abstract base class for report generators."""

    @abstractmethod
    def generate(self, report: ComplianceReport) -> str:
        """Generate output from a compliance report.

        Args:
            report: The compliance report to render.

        Returns:
            Formatted report as a string.
        """
        pass


class JSONReporter(ReportGenerator):
    """Generate JSON format reports."""

    def __init__(self, indent: int = 2) -> None:
        """Initialize JSON reporter.

        Args:
            indent: JSON indentation level.
        """
        self.indent = indent

    def generate(self, report: ComplianceReport) -> str:
        """Generate JSON report."""
        return json.dumps(report.to_dict(), indent=self.indent)


class TableReporter(ReportGenerator):
    """Generate rich table format reports for CLI output."""

    STATUS_COLORS = {
        Status.PASS: "green",
        Status.FAIL: "red bold",
        Status.WARN: "yellow",
        Status.MANUAL: "cyan",
        Status.INFO: "dim",
    }

    SEVERITY_COLORS = {
        Severity.CRITICAL: "red bold",
        Severity.HIGH: "red",
        Severity.MEDIUM: "yellow",
        Severity.LOW: "blue",
    }

    def __init__(self, show_details: bool = True, width: int = 120) -> None:
        """Initialize table reporter.

        Args:
            show_details: Whether to show evidence and remediation detail.
            width: Console width used for rendering.
        """
        self.show_details = show_details
        self.console = Console(record=True, force_terminal=True, width=width)

    def generate(self, report: ComplianceReport) -> str:
        """Generate table report."""
        self._render_summary(report)
        self._render_verdicts(report.verdicts)

        if report.remediations:
            self._render_remediations(report.remediations)

        if report.failures:
            self._render_omitted(report)

        if report.unmapped_checks and self.show_details:
            self._render_unmapped(report.unmapped_checks, report.framework)

        return self.console.export_text()

    def _render_summary(self, report: ComplianceReport) -> None:
        """Render summary panel."""
        summary = report.summary
        text = Text()
        text.append(f"Account: {report.account_id} ({report.provider})\n")
        text.append(f"Framework: {report.framework}\n")
        text.append(f"Scanned: {report.timestamp.strftime('%Y-%m-%d %H:%M:%S UTC')}\n\n")

        text.append("Score: ", style="bold")
        if summary.score_available:
            text.append(f"{summary.score_label}\n", style=self._score_style(summary.score))
        else:
            text.append("N/A", style="dim")
            text.append(" (no automatable requirements)\n", style="dim")

        text.append(f"  Passed: {summary.passed}\n", style="green")
        text.append(f"  Failed: {summary.failed}\n", style="red")
        text.append(f"  Warnings: {summary.warned}\n", style="yellow")
        text.append(f"  Manual: {summary.manual}\n", style="cyan")
        text.append(f"  Total: {summary.total}\n")
        if report.checkers_attempted is not None:
            text.append(
                f"\nCheckers: {report.checkers_succeeded}/{report.checkers_attempted} succeeded"
            )

        self.console.print(
            Panel(text, title="Compliance Scan Summary", border_style="blue")
        )

    def _render_verdicts(self, verdicts: tuple[RequirementVerdict, ...]) -> None:
        """Render requirement verdicts table."""
        table = Table(
            title="Requirements",
            show_header=True,
            header_style="bold cyan",
        )

        table.add_column("Requirement", width=22)
        table.add_column("Status", width=8)
        table.add_column("Severity", width=10)
        table.add_column("Title", width=30)
        if self.show_details:
            table.add_column("Evidence")

        for verdict in verdicts:
            row = [
                verdict.requirement_id,
                Text(verdict.status.value, style=self.STATUS_COLORS[verdict.status]),
                self._severity_text(verdict.severity),
                verdict.title,
            ]
            if self.show_details:
                row.append(verdict.evidence)
            table.add_row(*row)

        self.console.print(table)

    def _render_remediations(self, items: tuple[RemediationItem, ...]) -> None:
        """Render prioritized remediation table."""
        table = Table(
            title="Remediation (highest impact first)",
            show_header=True,
            header_style="bold cyan",
        )

        table.add_column("#", width=3)
        table.add_column("Severity", width=10)
        table.add_column("Priority", width=10)
        table.add_column("Requirement", width=22)
        table.add_column("Action")

        for position, item in enumerate(items, start=1):
            action = "\n".join(item.actions) or "Review failing checks"
            if self.show_details and item.console_urls:
                action += "\n" + "\n".join(item.console_urls)
            table.add_row(
                str(position),
                self._severity_text(item.severity),
                item.priority.value,
                item.requirement_id,
                action,
            )

        self.console.print(table)

    def _render_omitted(self, report: ComplianceReport) -> None:
        """Render checkers that produced no results."""
        text = Text()
        for failure in report.failures:
            text.append(f"• {failure.checker_name}: ", style="bold")
            text.append(f"{failure.error}\n", style="red")

        self.console.print(
            Panel(
                text,
                title="Omitted Checkers (not reflected in score)",
                border_style="red",
            )
        )

    def _render_unmapped(self, check_ids: tuple[str, ...], framework: str) -> None:
        """Render checks with no requirement in this framework."""
        text = Text()
        for check_id in check_ids:
            text.append(f"• {check_id}\n", style="dim")

        self.console.print(
            Panel(text, title=f"Checks not mapped to {framework}", border_style="dim")
        )

    def _severity_text(self, severity) -> Text:
        if severity is None:
            return Text("-", style="dim")
        return Text(severity.value, style=self.SEVERITY_COLORS[severity])

    def _score_style(self, score: float) -> str:
        if score >= 90:
            return "green bold"
        if score >= 70:
            return "yellow bold"
        return "red bold"


def create_reporter(format: str, show_details: bool = True) -> ReportGenerator:
    """Create a reporter for the specified format.

    Args:
        format: Output format ('json' or 'table').
        show_details: Whether to show full details (for table format).

    Returns:
        Appropriate ReportGenerator instance.

    Raises:
        ValueError: If format is not supported.
    """
    if format == "json":
        return JSONReporter()
    elif format == "table":
        return TableReporter(show_details=show_details)
    else:
        raise ValueError(f"Unsupported format: {format}. Use 'json' or 'table'.")
