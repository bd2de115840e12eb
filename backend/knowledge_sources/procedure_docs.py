"""
Procedure Folder Source
=======================
Loads SOP documents from a folder of markdown / text files.

Document layout (all header lines optional):

    # Open House Checklist
    Tags: open house, marketing
    Link: https://drive.example.com/open-house

    Body text...

- title: first markdown heading, else the file name
- tags: comma-separated "Tags:" line
- source_link: "Link:" line, else `link_base_url` + relative path when set
- summary: first paragraph of the body, truncated
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from pydantic import ValidationError

from knowledge_sources.cleaner import clean_document, clean_text, summarize
from knowledge_sources.errors import KnowledgeSourceError
from murphybot.models.knowledge import ProcedureItem

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIXES = (".md", ".markdown", ".txt")

_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s+(.+?)\s*#*\s*$")
_META_RE = re.compile(r"^\s*(tags|link)\s*:\s*(.*)$", re.IGNORECASE)

# Header lines are only looked for at the top of a document
HEADER_SCAN_LINES = 8


def title_from_filename(path: Path) -> str:
    """'open-house_checklist.md' -> 'Open House Checklist'"""
    words = re.sub(r"[-_]+", " ", path.stem).split()
    return " ".join(w if w.isupper() else w.capitalize() for w in words)


def parse_procedure(text: str, doc_id: str, link_base_url: str = "") -> Optional[ProcedureItem]:
    """
    Parse one SOP document.

    Args:
        text: Raw document text
        doc_id: Relative path of the document, used as id and link suffix
        link_base_url: Base URL for documents without a Link: line

    Returns:
        ProcedureItem, or None when the document has no body
    """
    lines = clean_document(text).split("\n")

    title = ""
    tags: List[str] = []
    link = ""
    body_start = 0

    for index, line in enumerate(lines[:HEADER_SCAN_LINES]):
        if not line.strip():
            body_start = index + 1
            continue

        heading = _HEADING_RE.match(line)
        if heading and not title:
            title = clean_text(heading.group(1))
            body_start = index + 1
            continue

        meta = _META_RE.match(line)
        if meta:
            key, value = meta.group(1).lower(), meta.group(2).strip()
            if key == "tags":
                tags = [t.strip().lower() for t in value.split(",") if t.strip()]
            else:
                link = value
            body_start = index + 1
            continue

        break

    content = "\n".join(lines[body_start:]).strip()
    if not title:
        title = title_from_filename(Path(doc_id))
    if not link and link_base_url:
        link = link_base_url.rstrip("/") + "/" + quote(doc_id)

    try:
        return ProcedureItem(
            id=doc_id,
            title=title,
            summary=summarize(content),
            tags=frozenset(tags),
            content=content,
            source_link=link or None,
        )
    except ValidationError:
        return None


class ProcedureFolderSource:
    """
    Loader for the procedure collection.

    Args:
        directory: Folder scanned recursively for documents
        link_base_url: Optional base URL for canonical document links
    """

    def __init__(self, directory: str, link_base_url: str = ""):
        self.directory = Path(directory).expanduser()
        self.link_base_url = link_base_url

    def _read_all(self) -> List[ProcedureItem]:
        if not self.directory.is_dir():
            raise KnowledgeSourceError(f"Procedures folder not found: {self.directory}")

        items: List[ProcedureItem] = []
        for path in sorted(self.directory.rglob("*")):
            if not path.is_file() or path.suffix.lower() not in DOCUMENT_SUFFIXES:
                continue

            doc_id = path.relative_to(self.directory).as_posix()
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping unreadable SOP {doc_id}: {e}")
                continue

            item = parse_procedure(text, doc_id, self.link_base_url)
            if item is None:
                logger.warning(f"Skipping empty SOP {doc_id}")
                continue
            items.append(item)

        return items

    async def load(self) -> List[ProcedureItem]:
        items = await asyncio.to_thread(self._read_all)
        logger.info(f"Procedures folder: parsed {len(items)} documents")
        return items
