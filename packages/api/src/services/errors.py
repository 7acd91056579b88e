# This project was developed with assistance from AI tools.
"""Domain exceptions shared by the tracking services.

Routes translate these into HTTP problem responses; sync adapters never let
them escape as a failed sync (they report an outcome instead).
"""


class LoanNotFound(Exception):
    """Raised when a loan id does not exist."""


class DocumentNotFound(Exception):
    """Raised when a document id does not exist (or belongs to another loan)."""


class RequirementNotFound(Exception):
    """Raised when a requirement name is not on the loan's resolved checklist."""


class InvalidRequirement(Exception):
    """Raised when a custom requirement name is blank or clashes with an existing one."""


class DocumentUploadError(Exception):
    """Raised when a document upload fails validation."""
