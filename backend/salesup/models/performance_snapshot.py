# backend/salesup/models/performance_snapshot.py
from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, Numeric, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from salesup.db.base import Base
from salesup.core.clock import utcnow


class PerformanceSnapshot(Base):
    """One row per (agent, period); overwritten on every recalculation."""

    __tablename__ = "performance_snapshots"
    __table_args__ = (
        UniqueConstraint("agent_id", "period", name="uq_performance_snapshots_agent_period"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    agent_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    period: Mapped[str] = mapped_column(String(16), nullable=False, default="monthly")
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    total_contracts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_upgrades: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_revenue: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    insurance_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    upgrade_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    average_upgrade_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    revenue_per_contract: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    consistency_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    performance_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    calculated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
