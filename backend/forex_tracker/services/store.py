from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from forex_tracker.core.config import settings
from forex_tracker.models.entry import Entry
from forex_tracker.models.goal_setting import GoalSetting
from forex_tracker.models.summary import TrackerSummary
from forex_tracker.services.advancement import Summary
from forex_tracker.services.goals import Goal
from forex_tracker.services.ledger import LedgerEntry
from forex_tracker.services.tracker import Mutation, SameDayPolicy, TrackerState, apply_mutation
from forex_tracker.utils.timezone import today_local

SUMMARY_ROW_ID = 1


def _entry_from_row(r: Entry) -> LedgerEntry:
    return LedgerEntry(
        id=int(r.id),
        date=r.date,
        kind=r.type,
        balance=float(r.balance or 0),
        amount=float(r.amount or 0),
        pnl=float(r.pnl or 0),
        daily_gain=float(r.daily_gain or 0),
        amount_to_target=float(r.amount_to_target or 0),
        milestone=r.milestone or "",
        milestone_value=float(r.milestone_value) if r.milestone_value is not None else None,
    )


def _copy_entry(row: Entry, e: LedgerEntry) -> None:
    row.date = e.date
    row.type = e.kind
    row.balance = e.balance
    row.amount = e.amount
    row.pnl = e.pnl
    row.daily_gain = e.daily_gain
    row.amount_to_target = e.amount_to_target
    row.milestone = e.milestone
    row.milestone_value = e.milestone_value


def load_state(s: Session) -> TrackerState:
    entry_rows = s.execute(select(Entry).order_by(Entry.id.asc())).scalars().all()
    goal_rows = s.execute(select(GoalSetting).order_by(GoalSetting.position.asc(), GoalSetting.id.asc())).scalars().all()
    summary_row = s.execute(select(TrackerSummary).where(TrackerSummary.id == SUMMARY_ROW_ID)).scalar_one_or_none()

    goals = [
        Goal(
            level=g.level,
            start_balance=float(g.start_balance),
            target_balance=float(g.target_balance),
            status=g.status,
        )
        for g in goal_rows
    ]

    summary = Summary()
    if summary_row is not None:
        summary = Summary(
            latest_balance=float(summary_row.latest_balance or 0),
            target_status=summary_row.target_status,
            current_target=float(summary_row.current_target or 0),
            start_for_target=float(summary_row.start_for_target or 0),
            progress_to_target=float(summary_row.progress_to_target or 0),
        )

    return TrackerState(entries=[_entry_from_row(r) for r in entry_rows], goals=goals, summary=summary)


def save_state(s: Session, state: TrackerState) -> None:
    existing = {int(r.id): r for r in s.execute(select(Entry)).scalars().all()}
    keep = {e.id for e in state.entries}

    for entry_id, row in existing.items():
        if entry_id not in keep:
            s.delete(row)

    for e in state.entries:
        row = existing.get(e.id)
        if row is None:
            row = Entry(id=e.id)
            s.add(row)
        _copy_entry(row, e)

    # Goals carry no identity of their own besides their position.
    s.execute(delete(GoalSetting))
    for position, g in enumerate(state.goals):
        s.add(
            GoalSetting(
                position=position,
                level=g.level,
                start_balance=g.start_balance,
                target_balance=g.target_balance,
                status=g.status,
            )
        )

    sm = state.summary
    row = s.execute(select(TrackerSummary).where(TrackerSummary.id == SUMMARY_ROW_ID)).scalar_one_or_none()
    if row is None:
        row = TrackerSummary(id=SUMMARY_ROW_ID)
        s.add(row)
    row.latest_balance = sm.latest_balance
    row.target_status = sm.target_status
    row.current_target = sm.current_target
    row.start_for_target = sm.start_for_target
    row.progress_to_target = sm.progress_to_target

    s.commit()


def run_mutation(s: Session, mutation: Mutation) -> TrackerState:
    return apply_mutation(
        load_state(s),
        mutation,
        today=today_local(),
        policy=SameDayPolicy.from_settings(settings),
        on_settled=lambda st: save_state(s, st),
    )
