"""Write scrape results to JSON and CSV files."""

from __future__ import annotations

import csv
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence, Union

from maps_scraper.etl.transform import to_csv_rows, to_records
from maps_scraper.models import SearchResult

logger = logging.getLogger(__name__)


def _output_path(output_dir: Union[str, Path], suffix: str, timestamp: Optional[str] = None) -> Path:
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    stamp = timestamp or datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    return directory.joinpath(f"result-{stamp}.{suffix}")


def save_json(
    results: Sequence[Optional[SearchResult]], output_dir: Union[str, Path], *, timestamp: Optional[str] = None
) -> Path:
    path = _output_path(output_dir, "json", timestamp)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(to_records(results), fh, ensure_ascii=False, indent=2)
    logger.info("Results saved to %s", path)
    return path


def save_csv(
    results: Sequence[Optional[SearchResult]], output_dir: Union[str, Path], *, timestamp: Optional[str] = None
) -> Path:
    path = _output_path(output_dir, "csv", timestamp)
    fieldnames, rows = to_csv_rows(results)
    with path.open("w", encoding="utf-8", newline="") as fh:
        writer = csv.DictWriter(fh, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)
    logger.info("Results saved to %s", path)
    return path
