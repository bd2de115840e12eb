"""
FAQ Sheet Source
================
Loads FAQ rows from the team spreadsheet.

The sheet is read as CSV, either from a published Google Sheets export URL
(fetched with httpx) or from a local file. Three columns are used:
category, question, answer. Header names are matched case-insensitively
and a few common aliases are accepted.

Rows with an empty question or answer are skipped; the load as a whole
only fails when the sheet cannot be fetched or has no usable header.
"""

import asyncio
import csv
import io
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

import httpx
from pydantic import ValidationError

from knowledge_sources.cleaner import clean_text
from knowledge_sources.errors import KnowledgeSourceError
from murphybot.models.knowledge import FaqItem

logger = logging.getLogger(__name__)

COLUMN_ALIASES: Dict[str, tuple] = {
    "category": ("category", "topic", "section", "area"),
    "question": ("question", "questions", "q", "faq"),
    "answer": ("answer", "answers", "a", "response"),
}

_GOOGLE_SHEET_RE = re.compile(r"https://docs\.google\.com/spreadsheets/d/([\w-]+)")
_GID_RE = re.compile(r"[#&?]gid=(\d+)")


def to_csv_export_url(url: str) -> str:
    """
    Turn a Google Sheets edit/share link into its CSV export URL.

    Published ("output=csv") and non-Google URLs are returned unchanged.
    """
    match = _GOOGLE_SHEET_RE.match(url)
    if not match or "output=csv" in url or "format=csv" in url:
        return url

    export = f"https://docs.google.com/spreadsheets/d/{match.group(1)}/export?format=csv"
    gid = _GID_RE.search(url)
    if gid:
        export += f"&gid={gid.group(1)}"
    return export


def _resolve_columns(fieldnames: List[str]) -> Dict[str, Optional[str]]:
    normalized = {(name or "").strip().lower(): name for name in fieldnames}
    resolved: Dict[str, Optional[str]] = {}
    for column, aliases in COLUMN_ALIASES.items():
        resolved[column] = next((normalized[a] for a in aliases if a in normalized), None)
    return resolved


def parse_faq_csv(text: str) -> List[FaqItem]:
    """
    Parse CSV text into FAQ items.

    Args:
        text: CSV content with a header row

    Returns:
        Valid FAQ items in sheet order; ids are "faq-<sheet row number>"

    Raises:
        KnowledgeSourceError: if the question or answer column is missing
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    columns = _resolve_columns(reader.fieldnames or [])

    if columns["question"] is None or columns["answer"] is None:
        raise KnowledgeSourceError(
            f"FAQ sheet needs question and answer columns, got headers: {reader.fieldnames}"
        )

    items: List[FaqItem] = []
    skipped = 0
    # Row 1 is the header
    for row_number, row in enumerate(reader, start=2):
        category = clean_text(row.get(columns["category"])) if columns["category"] else ""
        try:
            items.append(FaqItem(
                id=f"faq-{row_number}",
                category=category or None,
                question=clean_text(row.get(columns["question"])),
                answer=(row.get(columns["answer"]) or "").strip(),
            ))
        except ValidationError:
            skipped += 1

    if skipped:
        logger.warning(f"FAQ sheet: skipped {skipped} incomplete rows")

    return items


class FaqSheetSource:
    """
    Loader for the FAQ collection.

    Args:
        location: CSV URL (http/https) or local file path
        timeout: HTTP timeout in seconds
    """

    def __init__(self, location: str, timeout: float = 20.0):
        self.location = location.strip()
        self.timeout = timeout

    @property
    def is_remote(self) -> bool:
        return self.location.startswith(("http://", "https://"))

    async def fetch_text(self) -> str:
        if self.is_remote:
            url = to_csv_export_url(self.location)
            try:
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    response = await client.get(url)
                    response.raise_for_status()
            except httpx.HTTPError as e:
                raise KnowledgeSourceError(f"Failed to fetch FAQ sheet: {e}") from e
            return response.text

        path = Path(self.location)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as e:
            raise KnowledgeSourceError(f"Failed to read FAQ file {path}: {e}") from e

    async def load(self) -> List[FaqItem]:
        text = await self.fetch_text()
        items = parse_faq_csv(text)
        logger.info(f"FAQ sheet: parsed {len(items)} rows")
        return items

