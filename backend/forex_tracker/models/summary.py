from sqlalchemy import Integer, DateTime, Float, String, func
from sqlalchemy.orm import Mapped, mapped_column
from forex_tracker.db.base import Base

class TrackerSummary(Base):
    __tablename__ = "tracker_summary"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    latest_balance: Mapped[float] = mapped_column(Float, default=0.0)
    target_status: Mapped[str] = mapped_column(String(64))
    current_target: Mapped[float] = mapped_column(Float, default=0.0)
    start_for_target: Mapped[float] = mapped_column(Float, default=0.0)
    progress_to_target: Mapped[float] = mapped_column(Float, default=0.0)
    updated_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())
