from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Sequence

from forex_tracker.services.ledger import DEPOSIT, STARTING, TRADE, WITHDRAWAL, LedgerEntry


def _trades(entries: Sequence[LedgerEntry]) -> list[LedgerEntry]:
    return [e for e in entries if e.kind == TRADE]


def current_streak(entries: Sequence[LedgerEntry]) -> dict:
    # Most recent first; flat days neither extend nor break a streak.
    trades = sorted(
        (e for e in _trades(entries) if e.pnl != 0),
        key=lambda e: (e.date, e.id),
        reverse=True,
    )
    if not trades:
        return {"type": "none", "count": 0}

    winning = trades[0].pnl > 0
    count = 0
    for t in trades:
        if (t.pnl > 0) != winning:
            break
        count += 1
    return {"type": "winning" if winning else "losing", "count": count}


def performance(entries: Sequence[LedgerEntry]) -> dict:
    trades = _trades(entries)
    total = sum(t.pnl for t in trades)
    wins = [t for t in trades if t.pnl > 0]
    losses = [t for t in trades if t.pnl < 0]

    deposits = sum(e.balance for e in entries if e.kind == STARTING)
    deposits += sum(e.amount for e in entries if e.kind == DEPOSIT)
    withdrawals = sum(e.amount for e in entries if e.kind == WITHDRAWAL)

    return {
        "total_pnl": total,
        "win_rate": (len(wins) / len(trades) * 100.0) if trades else 0.0,
        "best_day": max((t.pnl for t in trades), default=0.0),
        "worst_day": min((t.pnl for t in trades), default=0.0),
        "avg_daily": (total / len(trades)) if trades else 0.0,
        "total_trading_days": len(trades),
        "winning_trades": len(wins),
        "losing_trades": len(losses),
        "deposits": deposits,
        "withdrawals": withdrawals,
        "net_deposits": deposits - withdrawals,
        "streak": current_streak(entries),
    }


def monthly_pnl(entries: Sequence[LedgerEntry]) -> list[dict]:
    by_month: dict[str, float] = defaultdict(float)
    for t in _trades(entries):
        by_month[f"{t.date.year}-{t.date.month:02d}"] += t.pnl
    return [{"month": k, "pnl": v} for k, v in sorted(by_month.items())]


def recent_activity(entries: Sequence[LedgerEntry], limit: int = 5) -> list[LedgerEntry]:
    return sorted(entries, key=lambda e: (e.date, e.id), reverse=True)[:limit]


def calendar_pnl(entries: Sequence[LedgerEntry], year: int | None = None, month: int | None = None) -> dict[date, float]:
    out: dict[date, float] = {}
    for t in sorted(_trades(entries), key=lambda e: (e.date, e.id)):
        if year is not None and t.date.year != year:
            continue
        if month is not None and t.date.month != month:
            continue
        out[t.date] = out.get(t.date, 0.0) + t.pnl
    return out
