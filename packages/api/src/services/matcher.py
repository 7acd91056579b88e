# This project was developed with assistance from AI tools.
"""Automatic requirement matching.

Maps a document name to the checklist requirement it most likely satisfies.
Funder quirks are data: each funder has an ordered rule table that is tried
before the base table, and adding a funder means adding rows, not branches.
A miss simply leaves the document unassigned for a human to file.
"""

import logging
import re
from dataclasses import dataclass

from ..schemas.requirement import DocumentRequirement
from .catalog import normalize_funder_id, resolve_requirements
from .dedup import strip_provenance

logger = logging.getLogger(__name__)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class MatchRule:
    """``requirement_id`` matches when any keyword or whole-word token appears."""

    requirement_id: str
    keywords: tuple[str, ...] = ()
    tokens: tuple[str, ...] = ()


@dataclass(frozen=True)
class _NormalizedName:
    spaced: str
    compact: str
    tokens: frozenset[str]

    @classmethod
    def of(cls, name: str) -> "_NormalizedName":
        spaced = _NON_ALNUM_RE.sub(" ", strip_provenance(name).lower()).strip()
        return cls(spaced=spaced, compact=spaced.replace(" ", ""), tokens=frozenset(spaced.split()))


def _rule_matches(rule: MatchRule, name: _NormalizedName) -> bool:
    for keyword in rule.keywords:
        kw_spaced = _NON_ALNUM_RE.sub(" ", keyword.lower()).strip()
        if kw_spaced in name.spaced or kw_spaced.replace(" ", "") in name.compact:
            return True
    return any(t in name.tokens for t in rule.tokens)


BASE_MATCH_RULES: tuple[MatchRule, ...] = (
    MatchRule("drivers_license", keywords=("driver", "license", "passport")),
    MatchRule("articles_org", keywords=("articles of organization", "articles of incorporation", "articles")),
    MatchRule("operating_agreement", keywords=("operating agreement",)),
    MatchRule("good_standing", keywords=("good standing",)),
    MatchRule("ein_letter", keywords=("ein letter", "cp575", "cp 575"), tokens=("ein",)),
    MatchRule("bank_statements", keywords=("bank statement", "bank stmt")),
    MatchRule("voided_check", keywords=("voided check", "voided cheque", "void check")),
    MatchRule(
        "property_ownership",
        keywords=("settlement statement", "closing disclosure", "deed"),
        tokens=("hud", "hud1"),
    ),
    MatchRule("current_leases", keywords=("lease agreement",), tokens=("lease", "leases")),
    MatchRule("appraisal", keywords=("appraisal",)),
    MatchRule("flood_policy", keywords=("flood",)),
    MatchRule("insurance_policy", keywords=("insurance", "policy", "binder", "declarations")),
    MatchRule("payoff_statement", keywords=("payoff",), tokens=("vom",)),
)

FUNDER_MATCH_RULES: dict[str, tuple[MatchRule, ...]] = {
    "kiavi": (
        MatchRule("kiavi_auth_form", keywords=("borrowing authorization", "authorization form")),
        MatchRule("kiavi_disclosure", keywords=("disclosure",)),
    ),
    "visio": (
        MatchRule("vfs_application", keywords=("vfs", "loan application")),
        MatchRule("broker_submission", keywords=("broker submission",)),
        MatchRule("broker_w9", keywords=("w9",)),
        MatchRule("plaid_liquidity", keywords=("plaid", "liquidity")),
        MatchRule("rent_collection_proof", keywords=("rent collection", "rent deposit")),
    ),
    "roc_capital": (
        MatchRule("roc_background", keywords=("background", "credit link")),
        MatchRule("ach_consent", tokens=("ach",)),
        MatchRule("property_tax_doc", keywords=("property tax", "tax bill")),
        MatchRule("rent_collection_3mo", keywords=("rent collection", "rent roll")),
        MatchRule("security_deposit_proof", keywords=("security deposit",)),
    ),
    "ahl": (
        MatchRule("ahl_entity_resolution", keywords=("entity resolution", "resolution")),
        MatchRule("ahl_business_purpose", keywords=("business purpose",)),
        MatchRule("ahl_liquidity_proof", keywords=("proof of funds", "funds to close", "liquidity")),
        MatchRule("ahl_piti_reserves", keywords=("piti", "reserves")),
        MatchRule("ahl_vom_12mo", tokens=("vom",)),
        MatchRule("ahl_mortgage_statements", keywords=("mortgage statement",)),
    ),
}


def match_rules_for(funder_id: str | None) -> tuple[MatchRule, ...]:
    """Funder rules first, then the base rules."""
    return FUNDER_MATCH_RULES.get(normalize_funder_id(funder_id), ()) + BASE_MATCH_RULES


def match_requirement(funder_id: str | None, document_name: str) -> DocumentRequirement | None:
    """Return the requirement a document name most likely satisfies, or None."""
    name = _NormalizedName.of(document_name)
    if not name.spaced:
        return None
    by_id = {r.id: r for r in resolve_requirements(funder_id)}
    for rule in match_rules_for(funder_id):
        if rule.requirement_id in by_id and _rule_matches(rule, name):
            logger.debug("Matched %r to requirement %s", document_name, rule.requirement_id)
            return by_id[rule.requirement_id]
    return None
