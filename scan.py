"""
Audit Risk Scanner

Scores an exported batch of vendors, transactions and documents (or a live
news feed) and reports the results.

Usage:
    # Score every vendor in an export and list cross-record patterns
    audit-scan vendors export.json

    # Only show HIGH and CRITICAL documents, as JSON
    audit-scan documents export.json --threshold high --format json

    # Cross-record patterns and department clusters only
    audit-scan patterns transactions.csv

    # Score the latest fraud news for India
    audit-scan news --category corruption --country India

Exit code: 2 when any critical result, 1 when any high result, else 0.
"""

import argparse
import asyncio
import csv
import io
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import httpx

from alerts import build_alerts
from console import (
    console,
    logger,
    print_assessments,
    print_footer,
    print_news,
    print_patterns,
    print_scan_header,
    print_scan_results,
)
from data_sources import FALLBACK_ARTICLES, NewsAPIClient, RecordLoadError, load_batch
from detectors.patterns import analyze_batch_patterns, build_department_clusters
from risk_config import RiskBand, get_settings
from risk_scorer import RiskScorer

BANDS = [band.value for band in RiskBand]


def exit_code(bands) -> int:
    bands = list(bands)
    if RiskBand.CRITICAL in bands:
        return 2
    if RiskBand.HIGH in bands:
        return 1
    return 0


def filter_by_threshold(assessments, threshold: str):
    minimum = RiskBand(threshold).rank
    return [a for a in assessments if a.band.rank >= minimum]


async def fetch_news_insights(
    scorer: RiskScorer,
    client: NewsAPIClient,
    category: str = "all",
    country: str = "worldwide",
):
    """Score the live feed; fall back to the offline article set if it fails."""
    try:
        articles = await client.search_articles(category=category, country=country)
        error = None
    except httpx.HTTPError as e:
        logger.warning(f"news feed unavailable, using cached articles: {e}")
        articles = FALLBACK_ARTICLES
        error = "Using cached data - live feed temporarily unavailable"
    return scorer.assess_articles(articles), error


def _write(payload, rows, args, stem: str):
    """Emit JSON or CSV to stdout, or to a timestamped file under --output."""
    if args.format == "json":
        text = json.dumps(payload, indent=2, default=str)
        suffix = "json"
    else:
        buffer = io.StringIO()
        csv.writer(buffer).writerows(rows)
        text = buffer.getvalue()
        suffix = "csv"

    if args.output:
        output_dir = Path(args.output)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / f"{stem}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.{suffix}"
        output_file.write_text(text, encoding="utf-8")
        console.print(f"[green]Report saved to:[/green] {output_file}")
    else:
        sys.stdout.write(text if text.endswith("\n") else text + "\n")


def _assessment_rows(assessments):
    rows = [["band", "score", "subject_id", "subject_type", "signals", "recommendations"]]
    for a in assessments:
        rows.append([
            a.band.value,
            a.score,
            a.subject_id,
            a.subject_type.value,
            "|".join(s.name for s in a.triggered_signals),
            "|".join(a.recommendations),
        ])
    return rows


def run_vendors(args, scorer: RiskScorer) -> int:
    batch = load_batch(args.file)
    assessments = scorer.assess_vendors(batch.vendors, batch.transactions)
    patterns = analyze_batch_patterns(batch.transactions, batch.documents)
    reported = filter_by_threshold(assessments, args.threshold)

    if args.format == "console":
        print_scan_header("vendor risk scan", str(args.file), len(assessments))
        print_assessments(reported)
        console.rule("CROSS-RECORD PATTERNS")
        print_patterns(patterns)
        print_scan_results(assessments)
        print_footer()
    else:
        _write(
            {
                "assessments": [a.to_dict() for a in reported],
                "patterns": [p.to_dict() for p in patterns],
                "alerts": [alert.to_dict() for alert in build_alerts(assessments)],
            },
            _assessment_rows(reported),
            args,
            "vendor_scan",
        )
    return exit_code(a.band for a in reported)


def run_documents(args, scorer: RiskScorer) -> int:
    batch = load_batch(args.file, kind="documents")
    assessments = scorer.assess_documents(batch.documents, batch.transactions, batch.vendors)
    reported = filter_by_threshold(assessments, args.threshold)

    if args.format == "console":
        print_scan_header("document risk scan", str(args.file), len(assessments))
        print_assessments(reported)
        print_scan_results(assessments)
        print_footer()
    else:
        _write(
            {
                "assessments": [a.to_dict() for a in reported],
                "alerts": [alert.to_dict() for alert in build_alerts(assessments)],
            },
            _assessment_rows(reported),
            args,
            "document_scan",
        )
    return exit_code(a.band for a in reported)


def run_patterns(args, scorer: RiskScorer) -> int:
    batch = load_batch(args.file)
    patterns = analyze_batch_patterns(batch.transactions, batch.documents)
    clusters = build_department_clusters(batch.transactions)

    if args.format == "console":
        print_scan_header("pattern scan", str(args.file), len(batch.transactions))
        print_patterns(patterns)
        console.rule("DEPARTMENT CLUSTERS")
        for c in clusters:
            console.print(
                f"  [cyan]{c.department:<30}[/cyan] {c.transaction_count:>5} txns  "
                f"₹{c.total_amount:>16,.0f}  {len(c.vendor_ids)} vendors"
            )
        print_footer()
    else:
        rows = [["type", "severity", "affected", "description"]]
        rows += [
            [p.type, p.severity.value, "|".join(sorted(p.affected_subject_ids)), p.description]
            for p in patterns
        ]
        _write(
            {
                "patterns": [p.to_dict() for p in patterns],
                "clusters": [
                    {
                        "department": c.department,
                        "transaction_count": c.transaction_count,
                        "total_amount": c.total_amount,
                        "vendor_ids": sorted(c.vendor_ids),
                    }
                    for c in clusters
                ],
            },
            rows,
            args,
            "pattern_scan",
        )
    return exit_code(p.severity for p in patterns)


def run_news(args, scorer: RiskScorer) -> int:
    async def _run():
        client = NewsAPIClient()
        try:
            return await fetch_news_insights(scorer, client, args.category, args.country)
        finally:
            await client.close()

    insights, error = asyncio.run(_run())
    minimum = RiskBand(args.threshold).rank
    insights = [i for i in insights if i.assessment.band.rank >= minimum]

    if args.format == "console":
        print_scan_header("news relevance scan", f"{args.category} / {args.country}", len(insights))
        if error:
            console.print(f"[yellow]{error}[/yellow]")
        print_news(insights)
        print_footer()
    else:
        rows = [["risk_level", "relevance", "category", "country", "title"]]
        rows += [
            [i.assessment.band.value, i.assessment.score, i.context.category, i.context.country, i.article.title]
            for i in insights
        ]
        _write({"articles": [i.to_dict() for i in insights], "error": error}, rows, args, "news_scan")
    # News relevance is informational and never fails the run
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="audit-scan",
        description="Heuristic fraud-risk scoring for vendors, documents and news",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--threshold", "-t", default="low", choices=BANDS,
                        help="Minimum band to report (default: low)")
    common.add_argument("--format", "-f", default="console", choices=["console", "json", "csv"],
                        help="Output format (default: console)")
    common.add_argument("--output", "-o", default=None,
                        help="Directory for json/csv reports (default: stdout)")
    common.add_argument("--workers", "-w", type=int, default=None,
                        help="Scoring threads (default: AUDIT_MAX_WORKERS or CPU-based)")

    subparsers = parser.add_subparsers(dest="command")

    vendors = subparsers.add_parser("vendors", parents=[common], help="Score vendors in an export")
    vendors.add_argument("file", help="JSON export with vendors and transactions")

    documents = subparsers.add_parser("documents", parents=[common], help="Score uploaded documents")
    documents.add_argument("file", help="JSON or CSV export of documents")

    patterns = subparsers.add_parser("patterns", parents=[common], help="Cross-record patterns only")
    patterns.add_argument("file", help="JSON or CSV export of transactions")

    news = subparsers.add_parser("news", parents=[common], help="Score the live news feed")
    news.add_argument("--category", "-c", default="all",
                      choices=["all", "fraud", "corruption", "compliance",
                               "government-spending", "investigation", "policy"])
    news.add_argument("--country", default="worldwide")

    return parser


COMMANDS = {
    "vendors": run_vendors,
    "documents": run_documents,
    "patterns": run_patterns,
    "news": run_news,
}


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    settings = get_settings()
    scorer = RiskScorer(
        thresholds=settings.vendor_thresholds,
        max_workers=args.workers or settings.max_workers,
    )

    try:
        return COMMANDS[args.command](args, scorer)
    except RecordLoadError as e:
        logger.error(str(e))
        return 3


if __name__ == "__main__":
    sys.exit(main())
