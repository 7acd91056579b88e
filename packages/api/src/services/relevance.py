# This project was developed with assistance from AI tools.
"""Mailbox relevance filter.

Decides whether a message belongs to one loan. Any single signal is enough:
a missed document is expensive while a false positive only costs a human a
glance, so the filter is tuned for recall. Signals are checked in order and
the first hit wins:

1. property address (street part, with number-less and abbreviated variants)
   appears in the subject
2. loan number appears in the subject
3. borrower name appears in the subject, sender or recipients
4. one of the loan's contact emails appears in sender, recipients or cc

Blank identity fields are skipped, never matched as an empty string. Nothing
is cached: the same message is evaluated independently for every loan.
"""

import enum
import re

from ..schemas.loan import LoanIdentity
from ..schemas.upstream import MailCandidate

# Shorter variants (e.g. a bare house number) would match far too much mail.
_MIN_VARIANT_LENGTH = 4

_STREET_SUFFIXES: dict[str, str] = {
    "drive": "dr",
    "street": "st",
    "avenue": "ave",
    "road": "rd",
    "boulevard": "blvd",
}

_WHITESPACE_RE = re.compile(r"\s+")
_HOUSE_NUMBER_RE = re.compile(r"^\d+[a-z]?\s+")
_ABBREVIATE_RE = re.compile(r"\b(" + "|".join(_STREET_SUFFIXES) + r")\b")
_EXPAND_RE = re.compile(r"\b(" + "|".join(_STREET_SUFFIXES.values()) + r")\b\.?")
_EXPANSIONS = {short: full for full, short in _STREET_SUFFIXES.items()}
# A bare suffix such as "road" would match "roadmap".
_SUFFIX_WORDS = set(_STREET_SUFFIXES) | set(_STREET_SUFFIXES.values())


class RelevanceSignal(str, enum.Enum):
    ADDRESS = "address"
    LOAN_NUMBER = "loan_number"
    BORROWER_NAME = "borrower_name"
    CONTACT_EMAIL = "contact_email"


def _normalize(text: str | None) -> str:
    return _WHITESPACE_RE.sub(" ", (text or "").lower()).strip()


def address_variants(address: str | None) -> set[str]:
    """Lowercase substrings that identify a street address in a subject line.

    Everything after the first comma (city, state, zip) is dropped so two
    loans in the same town do not match each other's mail.
    """
    street = _normalize((address or "").split(",", 1)[0])
    if not street:
        return set()

    bases = {street, _HOUSE_NUMBER_RE.sub("", street)}
    variants: set[str] = set()
    for base in bases:
        variants.add(base)
        variants.add(_ABBREVIATE_RE.sub(lambda m: _STREET_SUFFIXES[m.group(1)], base))
        variants.add(_EXPAND_RE.sub(lambda m: _EXPANSIONS[m.group(1)], base))

    return {
        v.strip()
        for v in variants
        if len(v.strip()) >= _MIN_VARIANT_LENGTH
        and any(c.isalpha() for c in v)
        and v.strip() not in _SUFFIX_WORDS
    }


def _contains(needle: str, *haystacks: str | None) -> bool:
    return any(needle in _normalize(h) for h in haystacks if h)


def match_reason(identity: LoanIdentity, candidate: MailCandidate) -> RelevanceSignal | None:
    """Return the first signal tying the candidate to the loan, or None."""
    subject = _normalize(candidate.subject)

    if subject and any(v in subject for v in address_variants(identity.property_address)):
        return RelevanceSignal.ADDRESS

    loan_number = _normalize(identity.loan_number)
    if loan_number and loan_number in subject:
        return RelevanceSignal.LOAN_NUMBER

    borrower = _normalize(identity.borrower_name)
    if borrower and _contains(borrower, candidate.subject, candidate.sender, candidate.to):
        return RelevanceSignal.BORROWER_NAME

    for email in identity.contact_emails:
        needle = _normalize(email)
        if needle and _contains(needle, candidate.sender, candidate.to, candidate.cc):
            return RelevanceSignal.CONTACT_EMAIL

    return None


def is_relevant(identity: LoanIdentity, candidate: MailCandidate) -> bool:
    return match_reason(identity, candidate) is not None
