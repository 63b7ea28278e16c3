"""Journal file loader.

Reads the journal's JSON export into TradeRecord instances. Two layouts are
accepted:

    [ {"id": 1, "strategyName": "...", ...}, ... ]
    {"trades": [ ... ], ...}

Records are validated on load; one bad record fails the whole file.
"""

import json
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from tradejournal.libraries.performance.models import TradeRecord

logger = structlog.get_logger()


def _extract_records(document: Any, path: Path) -> list[Any]:
    if isinstance(document, list):
        return document
    if isinstance(document, dict) and isinstance(document.get("trades"), list):
        return document["trades"]
    raise ValueError(f"{path}: expected a list of trades or an object with a 'trades' list")


def parse_trades(records: list[Any]) -> list[TradeRecord]:
    """
    Validate raw trade dictionaries.

    Raises:
        ValueError: If a record is not an object or fails validation; the
            message names the record's position
    """
    trades: list[TradeRecord] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValueError(f"Trade at index {index} is not an object: {record!r}")
        try:
            trades.append(TradeRecord.model_validate(record))
        except ValidationError as e:
            raise ValueError(f"Invalid trade at index {index} (id={record.get('id')}): {e}") from e
    return trades


def load_trades(path: Path | str) -> list[TradeRecord]:
    """
    Load trades from a journal JSON export.

    Args:
        path: JSON file path

    Returns:
        Trades in file order

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON, has an unexpected layout
            or contains an invalid trade
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Journal file not found: {path}")

    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{path}: invalid JSON ({e})") from e

    trades = parse_trades(_extract_records(document, path))

    logger.info(
        "journal_loader.loaded",
        path=str(path),
        trades=len(trades),
        priced=sum(1 for t in trades if t.is_priced),
    )
    return trades
