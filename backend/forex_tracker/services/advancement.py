from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from forex_tracker.services.goals import (
    COMPLETED,
    IN_PROGRESS,
    NOT_STARTED,
    Goal,
    goal_progress,
    ladder,
    with_status,
)

logger = logging.getLogger(__name__)

NO_GOALS = "No Goals Set"


@dataclass(frozen=True)
class Summary:
    latest_balance: float = 0.0
    target_status: str = NO_GOALS
    current_target: float = 0.0
    start_for_target: float = 0.0
    progress_to_target: float = 0.0


def active_level(goals: Sequence[Goal]) -> str | None:
    for g in ladder(goals):
        if g.status == IN_PROGRESS:
            return g.level
    return None


def _resume_index(steps: list[Goal], latest_balance: float) -> int | None:
    for i, g in enumerate(steps):
        if g.status == IN_PROGRESS:
            return i
    for i, g in enumerate(steps):
        if g.status != COMPLETED:
            return i
    # Every goal completed: stays that way while the top target holds.
    if latest_balance >= steps[-1].target_balance:
        return None
    return len(steps) - 1


def _statuses(n: int, idx: int | None) -> list[str]:
    if idx is None:
        return [COMPLETED] * n
    return [COMPLETED] * idx + [IN_PROGRESS] + [NOT_STARTED] * (n - idx - 1)


def advance(goals: Sequence[Goal], latest_balance: float, has_entries: bool) -> list[Goal]:
    # Both loops are bounded by the number of goals, so overlapping or gapped
    # ranges still terminate. Goals come back in storage order.
    if not goals:
        return []

    positions = sorted(range(len(goals)), key=lambda i: (goals[i].target_balance, goals[i].start_balance))
    steps = [goals[i] for i in positions]
    n = len(steps)

    if not has_entries:
        idx: int | None = 0
    else:
        idx = _resume_index(steps, latest_balance)

        for _ in range(n):
            if idx is None or latest_balance < steps[idx].target_balance:
                break
            if idx + 1 < n:
                idx += 1
            else:
                idx = None

        for _ in range(n):
            if idx is None or idx == 0 or latest_balance >= steps[idx].start_balance:
                break
            idx -= 1

    out = list(goals)
    for pos, status in zip(positions, _statuses(n, idx)):
        out[pos] = with_status(goals[pos], status)
    return out


def summarize(goals: Sequence[Goal], latest_balance: float) -> Summary:
    if not goals:
        return Summary(latest_balance=latest_balance)

    steps = ladder(goals)
    current = next((g for g in steps if g.status == IN_PROGRESS), None)
    if current is None:
        current = steps[-1]

    return Summary(
        latest_balance=latest_balance,
        target_status=current.level,
        current_target=current.target_balance,
        start_for_target=current.start_balance,
        progress_to_target=goal_progress(current, latest_balance),
    )


def log_transition(before: str | None, after: str | None, latest_balance: float) -> None:
    if before == after:
        return
    logger.info("active goal changed from %s to %s at balance %.2f", before, after, latest_balance)
