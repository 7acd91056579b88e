# This project was developed with assistance from AI tools.
"""Filename-based document classifier.

A deterministic, ordered rule table over the lowercased filename; the first
matching rule wins and anything unmatched is ``other``. Misclassification is
corrected by a human reclassifying the document, never silently.
"""

import re
from dataclasses import dataclass

from db.enums import DocumentCategory

_TOKEN_SPLIT_RE = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class ClassificationRule:
    category: DocumentCategory
    # Matched anywhere in the lowercased name
    keywords: tuple[str, ...] = ()
    # Matched only as whole tokens (short words that hide inside other words)
    tokens: tuple[str, ...] = ()

    def matches(self, lowered: str, tokens: set[str]) -> bool:
        return any(k in lowered for k in self.keywords) or any(t in tokens for t in self.tokens)


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        DocumentCategory.BORROWER,
        keywords=("license", "passport", "llc", "entity", "incorporation", "articles"),
        tokens=("id", "ein"),
    ),
    ClassificationRule(DocumentCategory.PROPERTY, keywords=("property", "appraisal", "survey")),
    ClassificationRule(DocumentCategory.TITLE, keywords=("title", "deed", "escrow")),
    ClassificationRule(DocumentCategory.INSURANCE, keywords=("insurance", "policy", "binder")),
    ClassificationRule(DocumentCategory.LOAN, keywords=("loan", "mortgage", "note")),
    ClassificationRule(DocumentCategory.BANKING, keywords=("bank", "statement", "financial")),
)


def classify(name: str) -> DocumentCategory:
    """Best-guess category for a filename."""
    lowered = (name or "").lower()
    tokens = set(_TOKEN_SPLIT_RE.split(lowered))
    for rule in CLASSIFICATION_RULES:
        if rule.matches(lowered, tokens):
            return rule.category
    return DocumentCategory.OTHER
