#!/usr/bin/env python3
"""
CSV helpers for tag vocabularies and batch reports.

A vocabulary CSV lists tags already in use, one per row, in a column named
"tag" (or the first column when there is no such header). A report CSV has one
row per tagged document with the columns "document", "tags" and "error".
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

import pandas as pd


REPORT_COLUMNS = ["document", "tags", "error"]


@dataclass
class DocumentTags:
    """Tagging outcome for one document."""
    document: str
    tags: List[str]
    error: Optional[str] = None


def is_empty_value(val) -> bool:
    """True for blank strings and for cells pandas treats as missing."""
    if isinstance(val, str):
        return val.strip() == ""
    return val is None or (pd.api.types.is_scalar(val) and bool(pd.isna(val)))


def load_existing_tags(csv_path: Union[str, Path]) -> List[str]:
    """
    Load a tag vocabulary from CSV.

    Args:
        csv_path: Path to the vocabulary file

    Returns:
        Unique, non-empty tags in file order
    """
    df = pd.read_csv(csv_path, dtype=str)
    if df.columns.empty:
        return []

    column = "tag" if "tag" in df.columns else df.columns[0]

    tags = []
    seen = set()
    for val in df[column]:
        if is_empty_value(val):
            continue
        tag = val.strip()
        if tag not in seen:
            seen.add(tag)
            tags.append(tag)
    return tags


def write_tag_report(results: Iterable[DocumentTags], output_path: Union[str, Path]) -> pd.DataFrame:
    """
    Write tagging results to CSV.

    Args:
        results: One DocumentTags per processed document
        output_path: Destination CSV file (parent directories are created)

    Returns:
        The DataFrame that was written
    """
    rows = [
        {
            "document": result.document,
            "tags": ", ".join(result.tags),
            "error": result.error or "",
        }
        for result in results
    ]
    df = pd.DataFrame(rows, columns=REPORT_COLUMNS)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False)
    return df
