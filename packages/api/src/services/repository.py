# This project was developed with assistance from AI tools.
"""Loan and document persistence.

``LoanRepository`` is the storage capability the tracking services depend on;
``SqlLoanRepository`` implements it on an ``AsyncSession``. Every write is
committed immediately so the persisted record is the single source of truth
for assignments and completion state.
"""

import logging
from typing import Any, Protocol

from db import Contact, Document, Loan
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.document import DocumentCandidate, IngestedDocument
from ..schemas.loan import LoanIdentity, LoanRecord
from ..schemas.requirement import DocumentRequirement

logger = logging.getLogger(__name__)

# Columns a caller may patch through update_document / update_loan
_DOCUMENT_PATCHABLE = {"name", "mime_type", "size_bytes", "category", "deleted", "storage_key"}
# Tracking columns go through save_tracking; identity fields are not patched here
_LOAN_PATCHABLE = {"drive_folder"}


class LoanRepository(Protocol):
    async def get_loan(self, loan_id: int, *, for_update: bool = False) -> LoanRecord | None: ...

    async def get_identity(self, loan_id: int) -> LoanIdentity | None: ...

    async def list_loan_ids(self) -> list[int]: ...

    async def update_loan(self, loan_id: int, patch: dict[str, Any]) -> None: ...

    async def save_tracking(
        self,
        loan_id: int,
        *,
        assignments: dict[str, list[int]],
        completed: list[str],
        custom: list[DocumentRequirement],
    ) -> None: ...

    async def list_documents(
        self, loan_id: int, *, include_deleted: bool = True
    ) -> list[IngestedDocument]: ...

    async def get_document(self, document_id: int) -> IngestedDocument | None: ...

    async def persist_document(
        self, loan_id: int, candidate: DocumentCandidate
    ) -> IngestedDocument: ...

    async def update_document(
        self, document_id: int, patch: dict[str, Any]
    ) -> IngestedDocument | None: ...

    async def rollback(self) -> None: ...


def _to_record(loan: Loan) -> LoanRecord:
    return LoanRecord(
        id=loan.id,
        funder=loan.funder,
        borrower_name=loan.borrower_name or "",
        property_address=loan.property_address,
        loan_number=loan.loan_number,
        drive_folder=loan.drive_folder,
        requirement_assignments=dict(loan.requirement_assignments or {}),
        completed_requirements=list(loan.completed_requirements or []),
        custom_requirements=[
            DocumentRequirement.model_validate(r) for r in loan.custom_requirements or []
        ],
    )


def _check_patch(patch: dict[str, Any], allowed: set[str]) -> None:
    unknown = set(patch) - allowed
    if unknown:
        raise ValueError(f"Cannot patch fields: {', '.join(sorted(unknown))}")


class SqlLoanRepository:
    """``LoanRepository`` backed by the ``loans``/``contacts``/``documents`` tables."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _load_loan(self, loan_id: int, for_update: bool = False) -> Loan | None:
        stmt = select(Loan).where(Loan.id == loan_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_loan(self, loan_id: int, *, for_update: bool = False) -> LoanRecord | None:
        loan = await self._load_loan(loan_id, for_update)
        return _to_record(loan) if loan is not None else None

    async def get_identity(self, loan_id: int) -> LoanIdentity | None:
        loan = await self._load_loan(loan_id)
        if loan is None:
            return None
        result = await self._session.execute(
            select(Contact.email).where(Contact.loan_id == loan_id, Contact.email.is_not(None))
        )
        emails = {e.strip().lower() for e in result.scalars().all() if e and e.strip()}
        return LoanIdentity(
            property_address=loan.property_address,
            loan_number=loan.loan_number,
            borrower_name=loan.borrower_name or "",
            contact_emails=emails,
        )

    async def list_loan_ids(self) -> list[int]:
        result = await self._session.execute(select(Loan.id).order_by(Loan.id))
        return list(result.scalars().all())

    async def update_loan(self, loan_id: int, patch: dict[str, Any]) -> None:
        _check_patch(patch, _LOAN_PATCHABLE)
        loan = await self._load_loan(loan_id)
        if loan is None:
            return
        for key, value in patch.items():
            setattr(loan, key, value)
        await self._session.commit()

    async def save_tracking(
        self,
        loan_id: int,
        *,
        assignments: dict[str, list[int]],
        completed: list[str],
        custom: list[DocumentRequirement],
    ) -> None:
        loan = await self._load_loan(loan_id)
        if loan is None:
            return
        # Assign fresh containers so SQLAlchemy sees the JSON columns as changed
        loan.requirement_assignments = {k: list(v) for k, v in assignments.items()}
        loan.completed_requirements = list(completed)
        loan.custom_requirements = [r.model_dump(mode="json") for r in custom]
        await self._session.commit()

    async def list_documents(
        self, loan_id: int, *, include_deleted: bool = True
    ) -> list[IngestedDocument]:
        stmt = select(Document).where(Document.loan_id == loan_id)
        if not include_deleted:
            stmt = stmt.where(Document.deleted.is_(False))
        stmt = stmt.order_by(Document.observed_at, Document.id)
        result = await self._session.execute(stmt)
        return [IngestedDocument.model_validate(d) for d in result.scalars().all()]

    async def get_document(self, document_id: int) -> IngestedDocument | None:
        doc = await self._session.get(Document, document_id)
        return IngestedDocument.model_validate(doc) if doc is not None else None

    async def persist_document(
        self, loan_id: int, candidate: DocumentCandidate
    ) -> IngestedDocument:
        doc = Document(
            loan_id=loan_id,
            source_channel=candidate.source_channel,
            source_ref=candidate.source_ref,
            name=candidate.name,
            mime_type=candidate.mime_type,
            size_bytes=candidate.size_bytes,
            category=candidate.category,
            storage_key=candidate.storage_key,
            deleted=False,
        )
        if candidate.observed_at is not None:
            doc.observed_at = candidate.observed_at
        self._session.add(doc)
        await self._session.commit()
        await self._session.refresh(doc)
        logger.info("Persisted document %s for loan %s (%s)", doc.id, loan_id, candidate.source_channel.value)
        return IngestedDocument.model_validate(doc)

    async def update_document(
        self, document_id: int, patch: dict[str, Any]
    ) -> IngestedDocument | None:
        _check_patch(patch, _DOCUMENT_PATCHABLE)
        doc = await self._session.get(Document, document_id)
        if doc is None:
            return None
        for key, value in patch.items():
            setattr(doc, key, value)
        await self._session.commit()
        await self._session.refresh(doc)
        return IngestedDocument.model_validate(doc)

    async def rollback(self) -> None:
        """Discard a failed transaction so the session can be reused."""
        await self._session.rollback()
