"""
Text Cleaner
============
Light normalization applied to FAQ cells and SOP documents at ingest.
"""

import re
from typing import Optional

SUMMARY_MAX_CHARS = 280


def clean_text(text: Optional[str]) -> str:
    """
    Collapse all whitespace (including newlines) into single spaces.

    Args:
        text: Raw input text. None or empty returns an empty string.
    """
    if not text:
        return ""
    # Spreadsheet exports sometimes carry non-breaking spaces
    text = text.replace("\u00a0", " ")
    return re.sub(r"\s+", " ", text).strip()


def clean_document(text: Optional[str]) -> str:
    """
    Normalize a multi-line document while keeping paragraph breaks.

    - Unify line endings
    - Strip trailing spaces on each line
    - Reduce 3+ consecutive newlines to exactly two
    """
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\u00a0", " ")
    text = "\n".join(line.rstrip() for line in text.split("\n"))
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def strip_markdown(text: str) -> str:
    """Remove the markdown syntax that reads badly in a one-line summary"""
    text = re.sub(r"^\s{0,3}#{1,6}\s*", "", text, flags=re.MULTILINE)
    text = re.sub(r"^\s*([-*+]|\d+[.)])\s+", "", text, flags=re.MULTILINE)
    text = re.sub(r"\[([^\]]+)\]\([^)]+\)", r"\1", text)
    text = re.sub(r"[*_`]{1,3}", "", text)
    return text


def summarize(text: str, max_chars: int = SUMMARY_MAX_CHARS) -> str:
    """First paragraph of `text`, flattened and cut at a word boundary"""
    for paragraph in clean_document(text).split("\n\n"):
        flat = clean_text(strip_markdown(paragraph))
        if flat:
            break
    else:
        return ""

    if len(flat) <= max_chars:
        return flat

    cut = flat[:max_chars].rsplit(" ", 1)[0].rstrip(",.;:-")
    return cut + "…"
