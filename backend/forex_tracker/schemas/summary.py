from pydantic import BaseModel
from datetime import date
from typing import Literal

from forex_tracker.schemas.entry import EntryOut

class SummaryOut(BaseModel):
    latest_balance: float
    target_status: str
    current_target: float
    start_for_target: float
    progress_to_target: float

class StreakOut(BaseModel):
    type: Literal["winning", "losing", "none"]
    count: int

class MonthlyPnl(BaseModel):
    month: str
    pnl: float

class PerformanceOut(BaseModel):
    total_pnl: float
    win_rate: float
    best_day: float
    worst_day: float
    avg_daily: float
    total_trading_days: int
    winning_trades: int
    losing_trades: int
    deposits: float
    withdrawals: float
    net_deposits: float
    streak: StreakOut
    monthly: list[MonthlyPnl]
    recent: list[EntryOut]

class CalendarDay(BaseModel):
    date: date
    pnl: float
