# This project was developed with assistance from AI tools.
"""
Loan document tracker -- domain models

A loan carries its own checklist state (requirement assignments, manual
completion marks and custom requirements) as JSON columns; ingested documents
and loan contacts live in their own tables keyed by loan id.
"""

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import DocumentCategory, SourceChannel


class Loan(Base):
    """Loan file tracked against a funder's document checklist."""

    __tablename__ = "loans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    borrower_name = Column(String(255), nullable=False, default="")
    property_address = Column(Text, nullable=True)
    loan_number = Column(String(100), nullable=True, index=True)
    funder = Column(String(100), nullable=True)
    drive_folder = Column(String(255), nullable=True)
    # {requirement_name: [document_id, ...]}
    requirement_assignments = Column(JSON, nullable=False, default=dict)
    # [requirement_name, ...]
    completed_requirements = Column(JSON, nullable=False, default=list)
    # [{"id": ..., "name": ..., "category": "custom", "required": true}, ...]
    custom_requirements = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    contacts = relationship("Contact", back_populates="loan", cascade="all, delete-orphan")
    documents = relationship("Document", back_populates="loan", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Loan(id={self.id}, borrower='{self.borrower_name}')>"


class Contact(Base):
    """Party on a loan (title agent, insurance agent, borrower...)."""

    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    loan_id = Column(
        Integer, ForeignKey("loans.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    company = Column(String(255), nullable=True)
    role = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    loan = relationship("Loan", back_populates="contacts")

    def __repr__(self):
        return f"<Contact(id={self.id}, email='{self.email}')>"


class Document(Base):
    """Document ingested for a loan from Drive, Gmail or a direct upload."""

    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint("loan_id", "source_channel", "source_ref", name="uq_document_source"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    loan_id = Column(
        Integer, ForeignKey("loans.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    source_channel = Column(
        Enum(SourceChannel, name="source_channel", native_enum=False),
        nullable=False,
    )
    source_ref = Column(String(500), nullable=False)
    name = Column(String(500), nullable=False)
    mime_type = Column(String(255), nullable=True)
    size_bytes = Column(BigInteger, nullable=True)
    category = Column(
        Enum(DocumentCategory, name="document_category", native_enum=False),
        nullable=False,
        default=DocumentCategory.OTHER,
    )
    storage_key = Column(String(500), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False)
    observed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    loan = relationship("Loan", back_populates="documents")

    def __repr__(self):
        return f"<Document(id={self.id}, name='{self.name}', channel='{self.source_channel}')>"
