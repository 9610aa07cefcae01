"""Orchestrator: load definitions -> prune -> rewrite -> reduce -> clean up -> write."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from .candidates import DEFAULT_REGEXPS_MAX, prune_definitions
from .cleanup import flatten_empty_divs, flatten_nested_links, flatten_skipped_spans
from .config import Config
from .definitions import build_definitions, load_pairs, make_subset
from .document import parse_document
from .link_state import LinkState, content_digest
from .models import Definition, Document
from .reducer import annotate_first_links
from .rewriter import rewrite_document
from .writer import write_output

log = logging.getLogger(__name__)


def link_document(
    document: Document,
    definitions: Sequence[Definition],
    *,
    site_url: str | None = None,
    max_workers: int | None = None,
    regexps_max: int = DEFAULT_REGEXPS_MAX,
    keep_skipped_spans: bool = False,
    link_headings: bool = False,
) -> Document:
    """Turn the first occurrence of each defined term into a link.

    Args:
        document: The parsed document.
        definitions: Output of build_definitions, longest pattern first.
        site_url: Own-site URL prefix; existing links under it count as
            root-relative when suppressing self-links.
        max_workers: Parallelism of the definition filter (None = CPU count).
        regexps_max: Filter chunk size below which patterns are tested singly.
        keep_skipped_spans: Leave demoted repeats wrapped in
            ``link-auto-skipped`` spans, for debugging.
        link_headings: Also link terms inside headings.

    Returns:
        The linked document, or ``document`` itself if no definition can match.
    """
    candidates = prune_definitions(
        document,
        definitions,
        site_url=site_url,
        max_workers=max_workers,
        regexps_max=regexps_max,
    )
    if not candidates:
        log.debug("No definitions can match, leaving document unchanged")
        return document

    linked = rewrite_document(document, candidates, include_headings=link_headings)
    linked = annotate_first_links(linked)
    linked = flatten_nested_links(linked)
    if not keep_skipped_spans:
        linked = flatten_skipped_spans(linked)
    return flatten_empty_divs(linked)


def load_definitions(config: Config) -> list[Definition]:
    """Build the definition table named by the config. Raises DefinitionError."""
    pairs = load_pairs(config.definitions_path)
    subset = make_subset(config.exclude_patterns, config.exclude_targets)
    return build_definitions(pairs, subset)


def collect_inputs(paths: Iterable[Path]) -> list[Path]:
    """Expand directories to the JSON documents directly inside them."""
    inputs: list[Path] = []
    for path in paths:
        path = Path(path)
        if path.is_dir():
            inputs.extend(sorted(path.glob("*.json")))
        else:
            inputs.append(path)
    return inputs


def _settings_fingerprint(config: Config, definitions: Sequence[Definition]) -> bytes:
    """Everything besides the input itself that changes the output."""
    return json.dumps(
        {
            "definitions": [[d.pattern, d.target] for d in definitions],
            "format": config.output_format,
            "site_url": config.site_url,
            "keep_skipped_spans": config.keep_skipped_spans,
            "link_headings": config.link_headings,
        },
        sort_keys=True,
    ).encode("utf-8")


def _remove_stale_output(previous: str | None, current: Path) -> None:
    """Delete an earlier output of the same input written under another name."""
    if not previous:
        return
    old_path = Path(previous)
    if old_path == current or not old_path.exists():
        return
    old_path.unlink()
    log.info("Removed stale output %s", old_path)


def run_link(
    config: Config,
    state: LinkState,
    inputs: Iterable[Path],
    *,
    dry_run: bool = False,
) -> int:
    """Run a single linking pass. Returns the number of documents written."""
    sources = collect_inputs(inputs)
    if not sources:
        log.warning("No input documents found")
        return 0

    definitions = load_definitions(config)
    if not definitions:
        log.warning("Definition table %s is empty", config.definitions_path)

    fingerprint = _settings_fingerprint(config, definitions)

    written = 0
    for source in sources:
        try:
            raw = source.read_bytes()
            digest = content_digest(raw, fingerprint)
            if not state.needs_link(source, digest):
                log.debug("%s is up to date", source)
                continue

            document = parse_document(json.loads(raw))
            linked = link_document(
                document,
                definitions,
                site_url=config.site_url,
                max_workers=config.workers,
                regexps_max=config.regexps_max,
                keep_skipped_spans=config.keep_skipped_spans,
                link_headings=config.link_headings,
            )

            filepath = write_output(
                linked, source, config.output_dir, fmt=config.output_format, dry_run=dry_run,
            )
            if not dry_run:
                _remove_stale_output(state.get_previous_output(source), filepath)
                state.record_link(source, digest, filepath)

            written += 1

        except Exception:
            log.error("Failed to link document %s", source, exc_info=True)

    log.info("Linking complete: %d documents written", written)
    return written
