from sqlalchemy import Integer, DateTime, Float, String, func
from sqlalchemy.orm import Mapped, mapped_column
from forex_tracker.db.base import Base

class GoalSetting(Base):
    __tablename__ = "goals"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    position: Mapped[int] = mapped_column(Integer, index=True)
    level: Mapped[str] = mapped_column(String(64))
    start_balance: Mapped[float] = mapped_column(Float)
    target_balance: Mapped[float] = mapped_column(Float)
    status: Mapped[str] = mapped_column(String(16), default="Not Started")
    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())
