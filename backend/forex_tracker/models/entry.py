from sqlalchemy import Integer, Date, DateTime, Float, String, func
from sqlalchemy.orm import Mapped, mapped_column
from forex_tracker.db.base import Base

class Entry(Base):
    __tablename__ = "ledger_entries"
    # Assigned by the tracker, not the database: ids order same-day entries.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    date: Mapped[Date] = mapped_column(Date, index=True)
    type: Mapped[str] = mapped_column(String(16))
    balance: Mapped[float] = mapped_column(Float, default=0.0)
    amount: Mapped[float] = mapped_column(Float, default=0.0)
    pnl: Mapped[float] = mapped_column(Float, default=0.0)
    daily_gain: Mapped[float] = mapped_column(Float, default=0.0)
    amount_to_target: Mapped[float] = mapped_column(Float, default=0.0)
    milestone: Mapped[str] = mapped_column(String(256), default="")
    milestone_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())
