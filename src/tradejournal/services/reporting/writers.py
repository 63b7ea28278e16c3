"""File writers for journal reports."""

from pathlib import Path

import structlog

from tradejournal.libraries.performance.models import JournalReport

logger = structlog.get_logger()


def write_json_report(report: JournalReport, output_path: Path) -> Path:
    """
    Write the full report as JSON.

    Decimals are serialized as strings so no precision is lost; an infinite
    profit factor is written as "Infinity".

    Args:
        report: Report to serialize
        output_path: Destination file; parent directories are created

    Returns:
        The path written
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(report.model_dump_json(indent=2), encoding="utf-8")

    logger.debug("reporting.json_written", path=str(output_path))
    return output_path
