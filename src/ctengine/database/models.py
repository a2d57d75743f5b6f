"""SQLAlchemy models for ctengine database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Engine,
    JSON,
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class TrialBalanceRow(Base):
    """Trial balance row of a (company, period) ledger snapshot."""

    __tablename__ = "trial_balance_entries"

    id = Column(Integer, primary_key=True)
    company_id = Column(String, nullable=False)
    period_id = Column(String, nullable=False)
    position = Column(Integer, nullable=False)
    account_code = Column(String, nullable=False)
    account_name = Column(String, nullable=False)
    debit = Column(Numeric(18, 2), nullable=False)
    credit = Column(Numeric(18, 2), nullable=False)
    source = Column(String, nullable=False)
    document_ref = Column(String, nullable=True)
    adjustment_refs = Column(JSON, nullable=False, default=list)

    __table_args__ = (
        UniqueConstraint("company_id", "period_id", "account_code", name="uq_ledger_account"),
    )

    # Relationships
    contributions = relationship(
        "LedgerContribution",
        back_populates="row",
        cascade="all, delete-orphan",
        order_by="LedgerContribution.position",
    )


class LedgerContribution(Base):
    """One entry's contribution to a trial balance row."""

    __tablename__ = "ledger_contributions"

    id = Column(Integer, primary_key=True)
    row_id = Column(Integer, ForeignKey("trial_balance_entries.id"), nullable=False)
    position = Column(Integer, nullable=False)
    entry_id = Column(String, nullable=False)
    source = Column(String, nullable=False)
    debit = Column(Numeric(18, 2), nullable=False)
    credit = Column(Numeric(18, 2), nullable=False)
    reference = Column(String, nullable=True)
    document_ref = Column(String, nullable=True)

    # Relationships
    row = relationship("TrialBalanceRow", back_populates="contributions")


class AppliedEntry(Base):
    """Entry or extraction batch ID already merged into a ledger."""

    __tablename__ = "applied_entries"

    id = Column(Integer, primary_key=True)
    company_id = Column(String, nullable=False)
    period_id = Column(String, nullable=False)
    entry_id = Column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("company_id", "period_id", "entry_id", name="uq_applied_entry"),
    )


class JournalEntryRecord(Base):
    """Accepted journal entry. Rows are written once and never updated."""

    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True)
    company_id = Column(String, nullable=False)
    period_id = Column(String, nullable=False)
    entry_id = Column(String, nullable=False)
    entry_date = Column(Date, nullable=False)
    description = Column(String, nullable=False)
    reference = Column(String, nullable=False)
    source = Column(String, nullable=False)
    recorded_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        UniqueConstraint("company_id", "period_id", "entry_id", name="uq_journal_entry"),
    )

    # Relationships
    lines = relationship(
        "JournalLineRecord",
        back_populates="journal",
        cascade="all, delete-orphan",
        order_by="JournalLineRecord.position",
    )


class JournalLineRecord(Base):
    """Line of a stored journal entry."""

    __tablename__ = "journal_lines"

    id = Column(Integer, primary_key=True)
    journal_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False)
    position = Column(Integer, nullable=False)
    account_code = Column(String, nullable=False)
    account_name = Column(String, nullable=True)
    debit = Column(Numeric(18, 2), nullable=False)
    credit = Column(Numeric(18, 2), nullable=False)

    # Relationships
    journal = relationship("JournalEntryRecord", back_populates="lines")


# Seconds a SQLite writer waits for another connection to release its lock
SQLITE_BUSY_TIMEOUT = 30


def create_database_engine(database_url: str) -> Engine:
    """Create an engine and make sure the tables exist."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Pooled connections are handed to whichever thread opens a session
        connect_args["check_same_thread"] = False
        connect_args["timeout"] = SQLITE_BUSY_TIMEOUT
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory bound to an engine."""
    return sessionmaker(bind=engine)
