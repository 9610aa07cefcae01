"""Serialize linked documents and write them to disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .document import document_to_dict
from .markdown import document_to_markdown
from .models import Document

log = logging.getLogger(__name__)

_EXTENSIONS = {"json": ".json", "markdown": ".md"}


def make_output_name(source: Path, fmt: str = "json") -> str:
    """Output filename for an input document, e.g. 'page.json' -> 'page.md'."""
    return Path(source).stem + _EXTENSIONS[fmt]


def serialize(document: Document, fmt: str = "json") -> str:
    match fmt:
        case "json":
            return json.dumps(document_to_dict(document), indent=2, ensure_ascii=False) + "\n"
        case "markdown":
            return document_to_markdown(document) + "\n"
    raise ValueError(f"Unknown output format: {fmt!r}")


def write_output(
    document: Document,
    source: Path,
    output_dir: Path,
    *,
    fmt: str = "json",
    dry_run: bool = False,
) -> Path:
    """Write the linked document. Returns the path written."""
    content = serialize(document, fmt)
    filepath = output_dir / make_output_name(source, fmt)

    if dry_run:
        log.info("[DRY RUN] Would write %s (%d chars)", filepath, len(content))
        return filepath

    output_dir.mkdir(parents=True, exist_ok=True)
    filepath.write_text(content, encoding="utf-8")
    log.info("Wrote %s (%d chars)", filepath, len(content))
    return filepath
