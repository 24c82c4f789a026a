"""
MediRate Admin Backend — User Model
=====================================

What:  ORM mapping of the `User` table (quoted, PascalCase columns).
Who:   Used by UserService for role lookups and role updates.

Role values:
    user                  Regular subscriber
    subscription_manager  Manages a subscription; lands on /settings

Attribute names are snake_case; the column names keep the table's casing.
"""

from datetime import datetime

from sqlalchemy import BigInteger, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from medirate.database import Base


class User(Base):
    __tablename__ = "User"

    user_id: Mapped[int] = mapped_column("UserID", BigInteger, primary_key=True)
    email: Mapped[str] = mapped_column("Email", Text, nullable=False)
    role: Mapped[str | None] = mapped_column("Role", Text, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(
        "UpdatedAt", TIMESTAMP(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<User(user_id={self.user_id}, email='{self.email}', role='{self.role}')>"
