"""Prune the definition table down to what can possibly match a document.

Two cheap whole-document checks run before any tree rewriting:

1. Definitions whose target is already linked somewhere in the document are
   dropped. A manual link opts that target out of automatic linking, which is
   also how a page suppresses links to itself.
2. Definitions whose pattern does not match the document's plain-text
   rendering are dropped. The plain text contains every text run of the tree,
   so a pattern that misses it cannot match any node.

Step 2 is a divide-and-conquer search: a chunk of definitions is tested with a
single alternation first, and only chunks whose alternation matches are split
further. Since usually only a small fraction of a large table matches a given
document, most chunks are discarded in one regex pass.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

from .definitions import guard
from .document import extract_link_targets, render_plain_text
from .models import Definition, Document

log = logging.getLogger(__name__)

DEFAULT_REGEXPS_MAX = 32


def normalize_target(target: str, site_url: str | None) -> str:
    """Rewrite an absolute URL on our own site to a root-relative path."""
    if site_url and target.startswith(site_url):
        return "/" + target[len(site_url):].lstrip("/")
    return target


def filter_existing(
    definitions: Sequence[Definition],
    existing_targets: Iterable[str],
    site_url: str | None = None,
) -> list[Definition]:
    """Drop definitions whose target the document already links to.

    Both sides are compared in root-relative form, so an absolute own-site
    link suppresses a relative definition target and vice versa.
    """
    present = {normalize_target(t, site_url) for t in existing_targets}
    return [d for d in definitions if normalize_target(d.target, site_url) not in present]


# Backreferences and conditionals by group number; joining patterns renumbers
# their groups, so these would silently point at another pattern's group.
_NUMBERED_GROUP_REFERENCE = re.compile(r"\\[1-9]|\(\?\(\d")


def combinable(definitions: Sequence[Definition]) -> bool:
    """Whether the patterns can be joined into one alternation unchanged."""
    return not any(_NUMBERED_GROUP_REFERENCE.search(d.pattern) for d in definitions)


def combined_pattern(definitions: Sequence[Definition]) -> re.Pattern:
    """One guarded alternation matching wherever any of the definitions does."""
    return re.compile(guard("|".join(f"(?:{d.pattern})" for d in definitions)))


def chunk(definitions: Sequence[Definition], workers: int) -> list[list[Definition]]:
    """Split into roughly ``workers`` chunks of at least two definitions."""
    size = max(len(definitions) // max(workers, 1), 2)
    return [list(definitions[i:i + size]) for i in range(0, len(definitions), size)]


def default_workers() -> int:
    return os.cpu_count() or 1


def filter_matches(
    definitions: Sequence[Definition],
    plain: str,
    *,
    max_workers: int | None = None,
    regexps_max: int = DEFAULT_REGEXPS_MAX,
) -> list[Definition]:
    """Keep exactly the definitions whose pattern matches ``plain``.

    Args:
        definitions: Definitions in priority order.
        plain: The document's plain-text rendering.
        max_workers: Worker threads for the top-level fan-out; defaults to
            the CPU count. 1 runs everything on the calling thread.
        regexps_max: Below this many definitions a matching chunk is tested
            one definition at a time instead of being split again.

    Returns:
        The matching definitions, in their original priority order.
    """
    workers = max_workers or default_workers()

    def search(ds: list[Definition], skip_check: bool = False) -> list[Definition]:
        if not ds:
            return []
        if len(ds) == 1:
            return ds if ds[0].regex.search(plain) else []
        # The full table's alternation is huge and slow: split it untested
        if not skip_check:
            if not combinable(ds):
                log.debug("Patterns with numbered group references, testing %d one by one", len(ds))
                return [d for d in ds if d.regex.search(plain)]
            try:
                combined = combined_pattern(ds)
            except re.error:
                # Named groups or backreferences do not survive alternation
                log.debug("Cannot combine %d patterns, testing one by one", len(ds))
                return [d for d in ds if d.regex.search(plain)]
            if not combined.search(plain):
                return []
            if len(ds) <= 2 or len(ds) < regexps_max or workers == 1:
                return [d for d in ds if d.regex.search(plain)]
        result: list[Definition] = []
        for part in chunk(ds, workers):
            result.extend(search(part))
        return result

    definitions = list(definitions)
    if workers == 1 or len(definitions) < 2:
        found = search(definitions, skip_check=True)
    else:
        # Only the top level fans out; recursion inside a worker stays on that
        # worker's thread, so the bounded pool never waits on itself.
        parts = chunk(definitions, workers)
        found = []
        with ThreadPoolExecutor(max_workers=workers) as executor:
            for survivors in executor.map(search, parts):
                found.extend(survivors)

    keep = {id(d) for d in found}
    return [d for d in definitions if id(d) in keep]


def prune_definitions(
    document: Document,
    definitions: Sequence[Definition],
    *,
    site_url: str | None = None,
    max_workers: int | None = None,
    regexps_max: int = DEFAULT_REGEXPS_MAX,
) -> list[Definition]:
    """Run both pruning steps for one document."""
    remaining = filter_existing(definitions, extract_link_targets(document), site_url)
    log.debug(
        "%d of %d definitions left after removing already-linked targets",
        len(remaining), len(definitions),
    )
    if not remaining:
        return []

    plain = render_plain_text(document)
    remaining = filter_matches(
        remaining, plain, max_workers=max_workers, regexps_max=regexps_max,
    )
    log.debug("%d definitions match the document text", len(remaining))
    return remaining
