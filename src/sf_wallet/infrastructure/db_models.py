"""SQLAlchemy ORM model for project_wallets.

Maps to the table created by Alembic migration 003.
DO NOT add/remove columns here without a corresponding migration.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.sf_common.database import Base


class ProjectWalletORM(Base):
    __tablename__ = "project_wallets"

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    project_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("projects.id"), unique=True, nullable=False
    )
    virtual_balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    advance_received: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    pending_dues: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_loans_given: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_loans_received: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    version: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
