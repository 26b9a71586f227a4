from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Literal, Sequence

from forex_tracker.services.goals import COMPLETED, IN_PROGRESS, Goal, ladder

EntryKind = Literal["starting", "trade", "deposit", "withdrawal"]

STARTING: EntryKind = "starting"
TRADE: EntryKind = "trade"
DEPOSIT: EntryKind = "deposit"
WITHDRAWAL: EntryKind = "withdrawal"

ENTRY_KINDS: tuple[str, ...] = (STARTING, TRADE, DEPOSIT, WITHDRAWAL)

# Width of ledger_entries.milestone.
MAX_MILESTONE_LENGTH = 256


@dataclass(frozen=True)
class LedgerEntry:
    id: int
    date: date
    kind: EntryKind
    # Authoritative for starting entries; raw user input for trades until
    # recalculated; derived for deposits and withdrawals.
    balance: float = 0.0
    # Transaction delta of a deposit or withdrawal, always positive.
    amount: float = 0.0
    pnl: float = 0.0
    daily_gain: float = 0.0
    amount_to_target: float = 0.0
    milestone: str = ""
    milestone_value: float | None = None


def chronological(entries: Sequence[LedgerEntry]) -> list[LedgerEntry]:
    return sorted(entries, key=lambda e: (e.date, e.id))


def latest_entry(entries: Sequence[LedgerEntry]) -> LedgerEntry | None:
    if not entries:
        return None
    return max(entries, key=lambda e: (e.date, e.id))


def opening_balance(entries: Sequence[LedgerEntry], goals: Sequence[Goal]) -> float:
    ordered = chronological(entries)
    if ordered and ordered[0].kind == STARTING:
        return ordered[0].balance

    current = next((g for g in goals if g.status == IN_PROGRESS), None)
    if current is not None:
        return current.start_balance

    steps = ladder(goals)
    if not steps:
        return 0.0
    # A finished ladder stays on its top goal, as the summary does.
    if all(g.status == COMPLETED for g in steps):
        return steps[-1].start_balance
    return steps[0].start_balance


def active_step(goals: Sequence[Goal], balance: float) -> Goal | None:
    steps = ladder(goals)
    if not steps:
        return None
    for g in steps:
        if g.target_balance > balance:
            return g
    return steps[-1]


def amount_to_target(goals: Sequence[Goal], balance: float) -> float:
    step = active_step(goals, balance)
    if step is None:
        return 0.0
    return max(step.target_balance - balance, 0.0)


def daily_gain(balance: float, previous: float) -> float:
    if previous <= 0:
        return 0.0
    return ((balance - previous) / previous) * 100


def _apply(entry: LedgerEntry, previous: float, goals: Sequence[Goal]) -> LedgerEntry:
    pnl = 0.0
    gain = 0.0

    if entry.kind == STARTING:
        balance = entry.balance
    elif entry.kind == DEPOSIT:
        balance = previous + entry.amount
    elif entry.kind == WITHDRAWAL:
        balance = previous - entry.amount
    elif entry.kind == TRADE:
        if entry.pnl:
            pnl = entry.pnl
            balance = previous + pnl
        else:
            pnl = entry.balance - previous
            # Rebuilt from pnl so a second pass lands on the same float.
            balance = previous + pnl
        gain = daily_gain(balance, previous)
    else:
        raise ValueError(f"unknown entry kind: {entry.kind!r}")

    return replace(
        entry,
        balance=balance,
        pnl=pnl,
        daily_gain=gain,
        amount_to_target=amount_to_target(goals, balance),
    )


def recalculate(entries: Sequence[LedgerEntry], goals: Sequence[Goal]) -> list[LedgerEntry]:
    if not entries:
        return []

    previous = opening_balance(entries, goals)
    computed: dict[int, LedgerEntry] = {}
    for e in chronological(entries):
        out = _apply(e, previous, goals)
        computed[e.id] = out
        previous = out.balance

    return [computed[e.id] for e in entries]


def balance_before(
    entries: Sequence[LedgerEntry],
    goals: Sequence[Goal],
    day: date,
    entry_id: int,
    kind: EntryKind | None = None,
) -> float:
    # entries must already be recalculated
    earlier = [e for e in chronological(entries) if (e.date, e.id) < (day, entry_id)]
    if earlier:
        return earlier[-1].balance
    if kind == STARTING:
        return 0.0
    # The placed entry becomes the first one, so the seed comes from the
    # goals and never from a later starting entry.
    return opening_balance([], goals)
