# wavy/models/cra.py

from __future__ import annotations
import uuid
import datetime as dt
from datetime import datetime
from typing import List

from sqlalchemy import String, Text, DateTime, Date, Numeric, ForeignKey, UUID, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from ..db.base import Base


class CraReport(Base):
    """Monthly activity report (Compte-Rendu d'Activité) of one consultant for one client."""
    __tablename__ = "cra_reports"
    __table_args__ = (
        # NULL client ids are not covered by the constraint; the service checks those.
        UniqueConstraint("user_id", "month", "client_id", name="uq_cra_user_month_client"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True)
    month: Mapped[str] = mapped_column(String(7), nullable=False)  # YYYY-MM
    company_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    worked_days: Mapped[float] = mapped_column(Numeric(5, 1, asdecimal=False), default=0, nullable=False)
    absent_days: Mapped[float] = mapped_column(Numeric(5, 1, asdecimal=False), default=0, nullable=False)
    monthly_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="draft", nullable=False)  # draft / submitted / approved / rejected
    admin_comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    # --- Client validation by emailed token ---
    client_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    validation_token: Mapped[str | None] = mapped_column(String(100), unique=True, index=True, nullable=True)
    token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    client_validation_status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)
    validated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    days: Mapped[List["CraDayDetail"]] = relationship(
        back_populates="report", cascade="all, delete-orphan", order_by="CraDayDetail.date"
    )


class CraDayDetail(Base):
    __tablename__ = "cra_day_details"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    cra_report_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("cra_reports.id", ondelete="CASCADE"), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    state: Mapped[str] = mapped_column(String(20), nullable=False)  # worked / absent / ...
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    report: Mapped["CraReport"] = relationship(back_populates="days")
