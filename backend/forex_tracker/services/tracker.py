from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Sequence, Union

from forex_tracker.core.errors import NotFoundError, TrackerError, ValidationError
from forex_tracker.services.advancement import Summary, active_level, advance, log_transition, summarize
from forex_tracker.services.goals import Goal, add_goal, parse_amount, remove_goal
from forex_tracker.services.ledger import (
    DEPOSIT,
    ENTRY_KINDS,
    MAX_MILESTONE_LENGTH,
    STARTING,
    TRADE,
    WITHDRAWAL,
    LedgerEntry,
    balance_before,
    latest_entry,
    recalculate,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackerState:
    entries: list[LedgerEntry] = field(default_factory=list)
    goals: list[Goal] = field(default_factory=list)
    summary: Summary = field(default_factory=Summary)


@dataclass(frozen=True)
class SameDayPolicy:
    one_trade_per_day: bool = True
    one_starting_per_day: bool = True
    # A starting balance shares its date with no other entry.
    starting_exclusive: bool = True

    @classmethod
    def from_settings(cls, st) -> "SameDayPolicy":
        return cls(
            one_trade_per_day=bool(st.one_trade_per_day),
            one_starting_per_day=bool(st.one_starting_per_day),
            starting_exclusive=bool(st.starting_exclusive),
        )


@dataclass(frozen=True)
class EntryInput:
    date: date | str | None
    kind: str
    balance: float | None = None
    pnl: float | None = None
    amount: float | None = None
    milestone: str | None = None
    milestone_value: float | None = None


@dataclass(frozen=True)
class AddEntry:
    entry: EntryInput


@dataclass(frozen=True)
class EditEntry:
    entry_id: int
    entry: EntryInput


@dataclass(frozen=True)
class DeleteEntry:
    entry_id: int


@dataclass(frozen=True)
class AddGoal:
    level: str | None
    start_balance: float | str | None
    target_balance: float | str | None


@dataclass(frozen=True)
class RemoveGoal:
    index: int


@dataclass(frozen=True)
class ReplaceAll:
    entries: list[LedgerEntry]
    goals: list[Goal]


@dataclass(frozen=True)
class CheckProgress:
    pass


Mutation = Union[AddEntry, EditEntry, DeleteEntry, AddGoal, RemoveGoal, ReplaceAll, CheckProgress]


def next_entry_id(entries: Sequence[LedgerEntry]) -> int:
    return max((e.id for e in entries), default=0) + 1


def _money(v: float) -> str:
    return f"${v:,.2f}"


def _parse_day(v) -> date:
    if v is None or v == "":
        raise ValidationError("date_required", "Date is required")
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    try:
        return date.fromisoformat(str(v).strip()[:10])
    except ValueError:
        raise ValidationError("date_invalid", f"Invalid date: {v}")


def _optional_amount(v, name: str) -> float | None:
    if v is None or (isinstance(v, str) and not v.strip()):
        return None
    return parse_amount(v, name)


def _check_same_day(others: list[LedgerEntry], kind: str, policy: SameDayPolicy) -> None:
    if not others:
        return
    has_trade = any(e.kind == TRADE for e in others)
    has_starting = any(e.kind == STARTING for e in others)

    if kind == TRADE and policy.one_trade_per_day and has_trade:
        raise ValidationError("duplicate_trade_day", "Only one trade entry allowed per day")
    if kind == STARTING and policy.one_starting_per_day and has_starting:
        raise ValidationError("duplicate_starting_day", "Only one starting balance entry allowed per day")
    if policy.starting_exclusive:
        if kind == STARTING and any(e.kind != STARTING for e in others):
            raise ValidationError(
                "starting_day_taken",
                "Cannot add starting balance on a day with existing trades, deposits, or withdrawals",
            )
        if kind != STARTING and has_starting:
            raise ValidationError("starting_day_exclusive", "Cannot add entries on a day with a starting balance")


def build_entry(
    entries: Sequence[LedgerEntry],
    goals: Sequence[Goal],
    inp: EntryInput,
    entry_id: int,
    *,
    today: date | None,
    policy: SameDayPolicy,
) -> LedgerEntry:
    kind = (inp.kind or "").strip().lower()
    if kind not in ENTRY_KINDS:
        raise ValidationError("entry_type_invalid", f"Unknown entry type: {inp.kind}")

    day = _parse_day(inp.date)
    if today is not None and day > today:
        raise ValidationError("future_date", "Entries cannot be dated in the future")

    others = recalculate([e for e in entries if e.id != entry_id], goals)
    _check_same_day([e for e in others if e.date == day], kind, policy)

    balance = 0.0
    amount = 0.0
    pnl = 0.0

    if kind == STARTING:
        balance = parse_amount(inp.balance, "Balance")
    elif kind in (DEPOSIT, WITHDRAWAL):
        amount = parse_amount(inp.amount, "Amount")
        if amount <= 0:
            raise ValidationError("amount_not_positive", "Amount must be greater than zero")
        if kind == WITHDRAWAL:
            available = balance_before(others, goals, day, entry_id, kind)
            if amount > available:
                raise ValidationError(
                    "withdrawal_exceeds_balance",
                    f"Withdrawal of {_money(amount)} exceeds the current balance of {_money(available)}",
                )
    else:
        raw_balance = _optional_amount(inp.balance, "Balance")
        raw_pnl = _optional_amount(inp.pnl, "P&L")
        if raw_balance is None and raw_pnl is None:
            raise ValidationError("trade_value_required", "Either balance or P&L is required for trades")
        if raw_pnl is not None:
            pnl = raw_pnl
        if raw_balance is None:
            balance = balance_before(others, goals, day, entry_id, kind) + pnl
        else:
            balance = raw_balance

    milestone = (inp.milestone or "").strip()
    if len(milestone) > MAX_MILESTONE_LENGTH:
        raise ValidationError("milestone_too_long", f"Milestone must be at most {MAX_MILESTONE_LENGTH} characters")
    milestone_value = _optional_amount(inp.milestone_value, "Milestone value")

    return LedgerEntry(
        id=entry_id,
        date=day,
        kind=kind,
        balance=balance,
        amount=amount,
        pnl=pnl,
        milestone=milestone,
        milestone_value=milestone_value,
    )


def _find(entries: Sequence[LedgerEntry], entry_id: int) -> LedgerEntry:
    for e in entries:
        if e.id == entry_id:
            return e
    raise NotFoundError("entry_not_found", f"No entry with id {entry_id}")


def _latest_balance(entries: Sequence[LedgerEntry]) -> float:
    latest = latest_entry(entries)
    return latest.balance if latest is not None else 0.0


def settle(entries: Sequence[LedgerEntry], goals: Sequence[Goal]) -> TrackerState:
    # Without a starting entry the seed follows the goal in progress, so
    # recalculate and advance until the ladder stops moving.
    before = active_level(goals)
    current = list(goals)
    computed = recalculate(entries, current)
    latest_balance = _latest_balance(computed)

    passes = len(current) + 2
    for _ in range(passes):
        moved = advance(current, latest_balance, bool(computed))
        if moved == current:
            break
        current = moved
        computed = recalculate(entries, current)
        latest_balance = _latest_balance(computed)
    else:
        logger.warning(
            "goal ladder did not settle after %d passes at balance %.2f", passes, latest_balance
        )

    log_transition(before, active_level(current), latest_balance)
    return TrackerState(entries=computed, goals=current, summary=summarize(current, latest_balance))


def _mutate(state: TrackerState, mutation, today: date | None, policy: SameDayPolicy):
    entries = list(state.entries)
    goals = list(state.goals)

    if isinstance(mutation, AddEntry):
        entry_id = next_entry_id(entries)
        entries.append(build_entry(entries, goals, mutation.entry, entry_id, today=today, policy=policy))
    elif isinstance(mutation, EditEntry):
        _find(entries, mutation.entry_id)
        # Only new entries are held to the "not in the future" rule.
        edited = build_entry(entries, goals, mutation.entry, mutation.entry_id, today=None, policy=policy)
        entries = [edited if e.id == edited.id else e for e in entries]
    elif isinstance(mutation, DeleteEntry):
        _find(entries, mutation.entry_id)
        entries = [e for e in entries if e.id != mutation.entry_id]
    elif isinstance(mutation, AddGoal):
        goals = add_goal(goals, mutation.level, mutation.start_balance, mutation.target_balance)
    elif isinstance(mutation, RemoveGoal):
        goals = remove_goal(goals, mutation.index)
    elif isinstance(mutation, ReplaceAll):
        entries = list(mutation.entries)
        goals = list(mutation.goals)
    elif isinstance(mutation, CheckProgress):
        pass
    else:
        raise TypeError(f"unsupported mutation: {type(mutation).__name__}")

    return entries, goals


def apply_mutation(
    state: TrackerState,
    mutation: Mutation,
    *,
    today: date | None = None,
    policy: SameDayPolicy | None = None,
    on_settled: Callable[[TrackerState], None] | None = None,
) -> TrackerState:
    """Apply one user action and return the settled state.

    ``state`` is left untouched; a rejected mutation raises before anything is
    built or persisted. ``on_settled`` receives the new state once it is final.
    """
    try:
        entries, goals = _mutate(state, mutation, today, policy or SameDayPolicy())
    except TrackerError as e:
        logger.info("rejected %s: %s", type(mutation).__name__, e.message)
        raise

    new_state = settle(entries, goals)
    if on_settled is not None:
        on_settled(new_state)
    return new_state
