"""
Audit Console - Terminal Output

Logging setup for the engine plus rich-rendered tables for scan results.
Log lines go to stderr so JSON/CSV written to stdout stays machine-readable.
"""

import logging
import sys
from datetime import datetime

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from risk_config import RiskBand, get_settings

VERSION = "1.0.0"

console = Console()

BAND_STYLES = {
    RiskBand.CRITICAL: "bold white on red",
    RiskBand.HIGH: "bold bright_red",
    RiskBand.MEDIUM: "yellow",
    RiskBand.LOW: "cyan",
}


class AuditFormatter(logging.Formatter):
    """Compact timestamp + three-letter level formatter."""

    LEVELS = {
        logging.DEBUG: "DBG",
        logging.INFO: "INF",
        logging.WARNING: "WRN",
        logging.ERROR: "ERR",
        logging.CRITICAL: "CRT",
    }

    def format(self, record):
        level_str = self.LEVELS.get(record.levelno, "???")
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]
        return f"  {timestamp} {level_str} {record.name}: {record.getMessage()}"


class AuditLogger(logging.Logger):
    """Logger with the audit formatter attached to stderr."""

    def __init__(self, name: str = "audit", level: int = logging.INFO):
        super().__init__(name, level)
        self._setup_handler()

    def _setup_handler(self):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(AuditFormatter())
        self.addHandler(handler)


def _level_from_settings() -> int:
    return getattr(logging, get_settings().log_level, logging.INFO)


# Global logger instance
logger = AuditLogger(level=_level_from_settings())


def band_text(band: RiskBand) -> str:
    style = BAND_STYLES.get(band, "white")
    return f"[{style}]{band.value.upper():<8}[/{style}]"


def print_scan_header(title: str, source: str, subject_count: int):
    """Print the scan configuration panel."""
    body = (
        f"[cyan]Source[/cyan]      {source}\n"
        f"[cyan]Subjects[/cyan]    {subject_count:,}\n"
        f"[cyan]Timestamp[/cyan]   {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
    )
    console.print(Panel(body, title=f"[bold]{title.upper()}[/bold]", border_style="bright_yellow"))


def print_assessments(assessments, show_findings: bool = True):
    """Table of assessments, highest score first, with findings underneath."""
    table = Table(box=box.SIMPLE_HEAVY, header_style="bold white")
    table.add_column("RISK")
    table.add_column("SCORE", justify="right")
    table.add_column("SUBJECT")
    table.add_column("TYPE")
    table.add_column("SIGNALS")

    ordered = sorted(assessments, key=lambda a: (-a.score, a.subject_id))
    for a in ordered:
        fired = ", ".join(s.name for s in a.signals if s.triggered) or "-"
        table.add_row(band_text(a.band), str(a.score), a.subject_id, a.subject_type.value, fired)
    console.print(table)

    if not show_findings:
        return
    for a in ordered:
        if not a.findings:
            continue
        console.print(f"  [bold]{a.subject_id}[/bold]")
        for finding in a.findings:
            console.print(f"    {band_text(finding.severity)} {finding.category}: {finding.description}")
        for rec in a.recommendations:
            console.print(f"    [green]→[/green] {rec}")
        for issue in a.compliance_issues:
            console.print(f"    [red]![/red] {issue}")


def print_patterns(patterns):
    """Table of cross-record patterns."""
    if not patterns:
        console.print("  [dim]No cross-record patterns detected[/dim]")
        return
    table = Table(box=box.SIMPLE_HEAVY, header_style="bold white")
    table.add_column("SEVERITY")
    table.add_column("PATTERN")
    table.add_column("AFFECTED")
    table.add_column("DESCRIPTION")
    for p in patterns:
        table.add_row(
            band_text(p.severity), p.type, ", ".join(sorted(p.affected_subject_ids)), p.description
        )
    console.print(table)


def print_news(insights):
    """Table of scored news items, most relevant first."""
    table = Table(box=box.SIMPLE_HEAVY, header_style="bold white")
    table.add_column("RISK")
    table.add_column("RELEVANCE", justify="right")
    table.add_column("CATEGORY")
    table.add_column("COUNTRY")
    table.add_column("TITLE")
    for item in insights:
        table.add_row(
            band_text(item.assessment.band),
            str(item.assessment.score),
            item.context.category,
            item.context.country,
            item.article.title,
        )
    console.print(table)


def print_scan_results(assessments):
    """Band breakdown summary."""
    counts = {band: 0 for band in RiskBand}
    for a in assessments:
        counts[a.band] += 1

    table = Table(title="RISK BREAKDOWN", box=box.MINIMAL, show_header=False)
    table.add_column("band")
    table.add_column("count", justify="right")
    for band in reversed(list(RiskBand)):
        style = BAND_STYLES[band] if counts[band] else "dim"
        table.add_row(f"[{style}]{band.value.upper()}[/{style}]", str(counts[band]))
    console.print(table)


def print_footer():
    console.rule(f"[dim]audit-scan v{VERSION}[/dim]")
