from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from forex_tracker.api.deps import db, mutate
from forex_tracker.api.routes.entries import entry_out
from forex_tracker.schemas.summary import CalendarDay, PerformanceOut, SummaryOut
from forex_tracker.services.performance import calendar_pnl, monthly_pnl, performance, recent_activity
from forex_tracker.services.store import load_state
from forex_tracker.services.tracker import CheckProgress

router = APIRouter(prefix="/summary", tags=["summary"])


def summary_out(sm) -> SummaryOut:
    return SummaryOut(**asdict(sm))


@router.get("", response_model=SummaryOut)
def summary(s: Session = Depends(db)):
    return summary_out(load_state(s).summary)


@router.post("/check", response_model=SummaryOut)
def check_progress(s: Session = Depends(db)):
    return summary_out(mutate(s, CheckProgress()).summary)


@router.get("/performance", response_model=PerformanceOut)
def performance_summary(s: Session = Depends(db)):
    entries = load_state(s).entries
    return PerformanceOut(
        **performance(entries),
        monthly=monthly_pnl(entries),
        recent=[entry_out(e) for e in recent_activity(entries)],
    )


@router.get("/calendar", response_model=list[CalendarDay])
def calendar(
    year: int | None = Query(None),
    month: int | None = Query(None, ge=1, le=12),
    s: Session = Depends(db),
):
    days = calendar_pnl(load_state(s).entries, year=year, month=month)
    return [CalendarDay(date=d, pnl=p) for d, p in days.items()]
