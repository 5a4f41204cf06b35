"""SQLAlchemy models for the ledgermatch record store."""

from datetime import datetime, UTC
from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    UniqueConstraint,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Company(Base):
    """Company model."""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    tax_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    bank_accounts = relationship("BankAccount", back_populates="company")
    accounting_entries = relationship("AccountingEntry", back_populates="company")


class BankAccount(Base):
    """Bank account model."""

    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    name = Column(String, unique=True, nullable=False)
    bank_name = Column(String, nullable=False)
    account_number = Column(String, nullable=True)
    currency = Column(String(3), nullable=False, default="CLP")
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    company = relationship("Company", back_populates="bank_accounts")
    transactions = relationship("BankTransaction", back_populates="bank_account")


class BankTransaction(Base):
    """Bank statement line model."""

    __tablename__ = "bank_transactions"

    id = Column(Integer, primary_key=True)
    # Nullable for legacy rows imported before accounts were linked
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    transaction_date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    description = Column(String, nullable=True)
    reference_number = Column(String, nullable=True)
    transaction_type = Column(String, nullable=False, default="other")
    status = Column(String, nullable=False, default="pending")
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_bank_transactions_account_status", "bank_account_id", "status"),
    )

    bank_account = relationship("BankAccount", back_populates="transactions")


class AccountingEntry(Base):
    """Accounting entry model."""

    __tablename__ = "accounting_entries"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    description = Column(String, nullable=True)
    reference = Column(String, nullable=True)
    document_type = Column(String, nullable=False, default="other")
    document_direction = Column(String, nullable=True)
    status = Column(String, nullable=False, default="pending")
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_accounting_entries_company_status", "company_id", "status"),
    )

    company = relationship("Company", back_populates="accounting_entries")


class Reconciliation(Base):
    """Match between one bank transaction and one accounting entry.

    Rows only exist while the match is active, so the unique constraints
    enforce at most one active match per record.
    """

    __tablename__ = "reconciliations"

    id = Column(Integer, primary_key=True)
    bank_transaction_id = Column(Integer, ForeignKey("bank_transactions.id"), nullable=False)
    accounting_entry_id = Column(Integer, ForeignKey("accounting_entries.id"), nullable=False)
    # Denormalized; historical rows may lack it until backfilled
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    method = Column(String, nullable=False)
    confidence_score = Column(Integer, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("bank_transaction_id", name="uq_reconciliation_bank_transaction"),
        UniqueConstraint("accounting_entry_id", name="uq_reconciliation_accounting_entry"),
    )

    bank_transaction = relationship("BankTransaction")
    accounting_entry = relationship("AccountingEntry")


class ReconciliationSettings(Base):
    """Per-company auto-reconcile parameters."""

    __tablename__ = "reconciliation_settings"

    company_id = Column(Integer, ForeignKey("companies.id"), primary_key=True)
    tolerance_days = Column(Integer, nullable=False, default=7)
    amount_tolerance = Column(Numeric(6, 4), nullable=False)
    min_match_score = Column(Integer, nullable=False, default=70)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)


class ReconciliationRule(Base):
    """User-defined reconciliation rule, owned by a company."""

    __tablename__ = "reconciliation_rules"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    rule_name = Column(String, nullable=False)
    description_pattern = Column(String, nullable=True)
    amount_pattern = Column(String, nullable=True)
    transaction_type = Column(String, nullable=True)
    rule_priority = Column(Integer, nullable=False, default=100)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("company_id", "rule_name", name="uq_reconciliation_rule_name"),
        Index("ix_reconciliation_rules_company_priority", "company_id", "rule_priority"),
    )


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
