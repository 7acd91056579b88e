# This project was developed with assistance from AI tools.
"""Per-funder document requirement catalog.

Every funder's checklist is the lender-agnostic base list followed by that
funder's own additions (tagged ``funder_specific``). Lookups are keyed by the
normalized (lowercase) funder id; an unknown or missing funder resolves to the
base list. Adding a funder is a data change to ``FUNDERS``.
"""

from dataclasses import dataclass

from db.enums import RequirementCategory

from ..schemas.requirement import DocumentRequirement, FunderSummary

_BE = RequirementCategory.BORROWER_ENTITY
_FIN = RequirementCategory.FINANCIALS
_PROP = RequirementCategory.PROPERTY
_APPR = RequirementCategory.APPRAISAL
_INS = RequirementCategory.INSURANCE
_TITLE = RequirementCategory.TITLE
_PAYOFF = RequirementCategory.PAYOFF
_LENDER = RequirementCategory.LENDER_SPECIFIC


def _req(id: str, name: str, category: RequirementCategory, required: bool = True, **kwargs):
    return DocumentRequirement(id=id, name=name, category=category, required=required, **kwargs)


def _lender(id: str, name: str, required: bool = True, description: str | None = None):
    return DocumentRequirement(
        id=id,
        name=name,
        category=_LENDER,
        required=required,
        funder_specific=True,
        description=description,
    )


BASE_REQUIREMENTS: tuple[DocumentRequirement, ...] = (
    # Borrower & entity
    _req("drivers_license", "Driver's License (front and back)", _BE),
    _req("articles_org", "Articles of Organization / Incorporation", _BE),
    _req("operating_agreement", "Operating Agreement", _BE),
    _req("good_standing", "Certificate of Good Standing", _BE),
    _req("ein_letter", "EIN Letter from IRS", _BE),
    # Financials
    _req("bank_statements", "2 most recent Bank Statements", _FIN),
    _req("voided_check", "Voided Check", _FIN),
    # Property ownership
    _req("property_ownership", "HUD or Other Documentation of Property Ownership", _PROP),
    _req("current_leases", "All Current Leases", _PROP),
    # Appraisal
    _req("appraisal", "Appraisal (Ordered through AMC)", _APPR),
    # Insurance
    _req("insurance_policy", "Insurance Policy", _INS),
    _req("insurance_contact", "Insurance Agent Contact Info", _INS),
    _req("flood_policy", "Flood Policy (If applicable)", _INS, required=False),
    _req("flood_contact", "Flood Insurance Agent Contact Info", _INS, required=False),
    # Title
    _req("title_contact", "Title Agent Contact Info", _TITLE),
    # Payoff (if refinancing)
    _req("lender_contact", "Current Lender Contact Info", _PAYOFF, required=False),
    _req("payoff_statement", "Payoff Statement and VOM", _PAYOFF, required=False),
)


@dataclass(frozen=True)
class Funder:
    """A lender whose checklist extends the base requirements."""

    id: str
    display_name: str
    additions: tuple[DocumentRequirement, ...] = ()

    @property
    def requirements(self) -> list[DocumentRequirement]:
        return [*BASE_REQUIREMENTS, *self.additions]


FUNDERS: dict[str, Funder] = {
    "kiavi": Funder(
        id="kiavi",
        display_name="Kiavi",
        additions=(
            _lender("kiavi_auth_form", "Signed/Completed Borrowing Authorization Form"),
            _lender("kiavi_disclosure", "Signed/Completed Disclosure Form"),
        ),
    ),
    "visio": Funder(
        id="visio",
        display_name="Visio",
        additions=(
            _lender("vfs_application", "VFS Loan Application"),
            _lender("broker_submission", "Broker Submission Form"),
            _lender("broker_w9", "Broker W9"),
            _lender("plaid_liquidity", "Proof of Liquidity (via Plaid)"),
            _lender(
                "rent_collection_proof",
                "Proof of Rent Collection Deposits",
                required=False,
                description="Required if lease rents > market rents",
            ),
        ),
    ),
    "roc_capital": Funder(
        id="roc_capital",
        display_name="ROC Capital",
        additions=(
            _lender("roc_background", "Completed Roc Capital Background/Credit Link"),
            _lender("ach_consent", "ACH Consent Form"),
            _lender("property_tax_doc", "Property Tax Document"),
            _lender(
                "rent_collection_3mo",
                "Proof of 3 Months Rent Collection",
                required=False,
                description="For all units",
            ),
            _lender(
                "security_deposit_proof",
                "Proof of Receipt of Security Deposit",
                required=False,
                description="New Leases < 30 days",
            ),
        ),
    ),
    "ahl": Funder(
        id="ahl",
        display_name="AHL (American Heritage Lending)",
        additions=(
            _lender("ahl_entity_resolution", "Entity Resolution (AHL template)"),
            _lender(
                "ahl_business_purpose",
                "Borrower's Statement of Business Purpose (AHL template)",
            ),
            _lender("ahl_liquidity_proof", "Proof of Liquidity / Funds to Close"),
            _lender(
                "ahl_piti_reserves",
                "6 Months PITI Reserves",
                description="Must be documented",
            ),
            _lender("ahl_vom_12mo", "VOM showing 12 months payment history", required=False),
            _lender(
                "ahl_mortgage_statements",
                "2 Recent Mortgage Statements",
                required=False,
                description="For any open accounts on background check",
            ),
        ),
    ),
    # Velocity currently uses the base checklist unchanged
    "velocity": Funder(id="velocity", display_name="Velocity"),
}


def normalize_funder_id(funder_id: str | None) -> str:
    return (funder_id or "").strip().lower()


def get_funder(funder_id: str | None) -> Funder | None:
    return FUNDERS.get(normalize_funder_id(funder_id))


def resolve_requirements(funder_id: str | None) -> list[DocumentRequirement]:
    """Return the ordered checklist for a funder (base list when unknown)."""
    funder = get_funder(funder_id)
    if funder is None:
        return list(BASE_REQUIREMENTS)
    return funder.requirements


def list_funders() -> list[FunderSummary]:
    return [
        FunderSummary(id=f.id, name=f.display_name, requirement_count=len(f.requirements))
        for f in FUNDERS.values()
    ]


def get_funder_display_name(funder_id: str | None) -> str:
    funder = get_funder(funder_id)
    return funder.display_name if funder else (funder_id or "")


def get_categories() -> list[RequirementCategory]:
    """Checklist sections in display order."""
    return list(RequirementCategory)


def get_category_display_name(category: RequirementCategory | str) -> str:
    try:
        return RequirementCategory.display_names()[RequirementCategory(category)]
    except ValueError:
        return str(category)
