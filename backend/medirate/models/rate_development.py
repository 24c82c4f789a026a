"""
MediRate Admin Backend — Rate Development Record Models
=========================================================

What:  ORM mappings of the three rate-development tables the admin dashboard
       curates: BillTrack50 bills, provider alerts, and state plan amendments.
Who:   Used by RecordService for delete-by-equality statements.

Only the identifying column of each table is mapped. The tables carry many
more columns (titles, states, dates) that this service never reads or writes.
"""

from sqlalchemy import BigInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from medirate.database import Base


class Bill(Base):
    """A tracked legislative bill, identified by its source URL."""

    __tablename__ = "bill_track_50"

    url: Mapped[str] = mapped_column(Text, primary_key=True)

    def __repr__(self) -> str:
        return f"<Bill(url='{self.url}')>"


class ProviderAlert(Base):
    """A provider-facing rate alert."""

    __tablename__ = "provider_alerts"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)

    def __repr__(self) -> str:
        return f"<ProviderAlert(id={self.id})>"


class StatePlanAmendment(Base):
    """A Medicaid state plan amendment record."""

    __tablename__ = "state_plan_amendments"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)

    def __repr__(self) -> str:
        return f"<StatePlanAmendment(id={self.id})>"
