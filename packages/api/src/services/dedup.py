# This project was developed with assistance from AI tools.
"""Duplicate detection for ingestion candidates.

The same physical file regularly shows up twice: once in the loan's Drive
folder and again as a mail attachment, or in consecutive listings of the same
folder. A candidate is a duplicate when

- an existing document came from the same channel with the same source
  reference (exact fast path), or
- the normalized names match and the sizes agree within a small tolerance.
  Unknown sizes count as agreeing.

Soft-deleted documents still count, so a rescan never resurrects something a
user deleted.
"""

import re
from collections.abc import Iterable
from typing import Protocol

from db.enums import SourceChannel

DEFAULT_SIZE_TOLERANCE_BYTES = 1024

# Sender display names may contain parentheses, so everything after the first
# " (from " belongs to the suffix.
_PROVENANCE_RE = re.compile(r"\s+\(from .*\)\s*$", re.IGNORECASE)


class _DocumentLike(Protocol):
    source_channel: SourceChannel
    source_ref: str
    name: str
    size_bytes: int | None


def with_provenance(filename: str, sender: str) -> str:
    """Display name for a mail-sourced document: ``"<filename> (from <sender>)"``."""
    return f"{filename} (from {sender})"


def strip_provenance(name: str) -> str:
    return _PROVENANCE_RE.sub("", name or "").strip()


def normalize_name(name: str) -> str:
    """Comparison key for a document name: provenance suffix removed, lowercased."""
    return strip_provenance(name).lower()


def _sizes_agree(a: int | None, b: int | None, tolerance: int) -> bool:
    if a is None or b is None:
        return True
    return abs(a - b) <= tolerance


def find_duplicate(
    existing: Iterable[_DocumentLike],
    candidate: _DocumentLike,
    tolerance_bytes: int = DEFAULT_SIZE_TOLERANCE_BYTES,
):
    """Return the existing document the candidate duplicates, or None."""
    existing = list(existing)

    for doc in existing:
        if doc.source_channel == candidate.source_channel and doc.source_ref == candidate.source_ref:
            return doc

    key = normalize_name(candidate.name)
    if not key:
        return None
    for doc in existing:
        if normalize_name(doc.name) == key and _sizes_agree(
            doc.size_bytes, candidate.size_bytes, tolerance_bytes
        ):
            return doc
    return None


def is_duplicate(
    existing: Iterable[_DocumentLike],
    candidate: _DocumentLike,
    tolerance_bytes: int = DEFAULT_SIZE_TOLERANCE_BYTES,
) -> bool:
    return find_duplicate(existing, candidate, tolerance_bytes) is not None
