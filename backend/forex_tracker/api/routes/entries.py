from fastapi import APIRouter, Depends, Query
from datetime import date
from sqlalchemy.orm import Session

from forex_tracker.api.deps import db, mutate
from forex_tracker.schemas.entry import EntryIn, EntryOut
from forex_tracker.services.ledger import LedgerEntry
from forex_tracker.services.store import load_state
from forex_tracker.services.tracker import AddEntry, DeleteEntry, EditEntry, EntryInput

router = APIRouter(prefix="/entries", tags=["entries"])


def entry_out(e: LedgerEntry) -> EntryOut:
    return EntryOut(
        id=e.id,
        date=e.date,
        type=e.kind,
        balance=e.balance,
        amount=e.amount,
        pnl=e.pnl,
        daily_gain=e.daily_gain,
        amount_to_target=e.amount_to_target,
        milestone=e.milestone,
        milestone_value=e.milestone_value,
    )


def _entry_input(body) -> EntryInput:
    return EntryInput(
        date=body.date,
        kind=body.type,
        balance=getattr(body, "balance", None),
        pnl=getattr(body, "pnl", None),
        amount=getattr(body, "amount", None),
        milestone=body.milestone,
        milestone_value=body.milestone_value,
    )


def _by_id(entries: list[LedgerEntry], entry_id: int) -> EntryOut:
    return entry_out(next(e for e in entries if e.id == entry_id))


@router.get("", response_model=list[EntryOut])
def list_entries(
    start: date | None = Query(None),
    end: date | None = Query(None),
    s: Session = Depends(db),
):
    entries = load_state(s).entries
    if start is not None:
        entries = [e for e in entries if e.date >= start]
    if end is not None:
        entries = [e for e in entries if e.date <= end]
    entries = sorted(entries, key=lambda e: (e.date, e.id), reverse=True)
    return [entry_out(e) for e in entries]


@router.post("", response_model=EntryOut)
def add_entry(body: EntryIn, s: Session = Depends(db)):
    st = mutate(s, AddEntry(_entry_input(body)))
    return _by_id(st.entries, max(e.id for e in st.entries))


@router.put("/{entry_id}", response_model=EntryOut)
def edit_entry(entry_id: int, body: EntryIn, s: Session = Depends(db)):
    st = mutate(s, EditEntry(entry_id, _entry_input(body)))
    return _by_id(st.entries, entry_id)


@router.delete("/{entry_id}")
def delete_entry(entry_id: int, s: Session = Depends(db)):
    mutate(s, DeleteEntry(entry_id))
    return {"ok": True}
