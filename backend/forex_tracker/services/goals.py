from __future__ import annotations

import math
import re
from dataclasses import dataclass, replace
from typing import Literal, Sequence

from forex_tracker.core.errors import NotFoundError, ValidationError

GoalStatus = Literal["Not Started", "In Progress", "Completed"]

NOT_STARTED: GoalStatus = "Not Started"
IN_PROGRESS: GoalStatus = "In Progress"
COMPLETED: GoalStatus = "Completed"

GOAL_STATUSES: tuple[str, ...] = (NOT_STARTED, IN_PROGRESS, COMPLETED)

# Width of goals.level and tracker_summary.target_status.
MAX_LEVEL_LENGTH = 64


@dataclass(frozen=True)
class Goal:
    level: str
    start_balance: float
    target_balance: float
    status: GoalStatus = NOT_STARTED


def parse_amount(v, field: str) -> float:
    if v is None or isinstance(v, bool):
        raise ValidationError("field_required", f"{field} is required")
    if isinstance(v, str):
        v = v.strip().replace(",", "")
        if not v:
            raise ValidationError("field_required", f"{field} is required")
    try:
        out = float(v)
    except (TypeError, ValueError):
        raise ValidationError("not_a_number", f"{field} must be a valid number")
    if math.isnan(out) or math.isinf(out):
        raise ValidationError("not_a_number", f"{field} must be a valid number")
    return out


def step_index(level: str) -> int | None:
    digits = re.sub(r"\D", "", level or "")
    if not digits:
        return None
    n = int(digits)
    return n or None


def chain_order(goals: Sequence[Goal]) -> list[Goal]:
    indexes = [step_index(g.level) for g in goals]
    if goals and all(i is not None for i in indexes):
        return [g for _, _, g in sorted(zip(indexes, range(len(goals)), goals))]
    return sorted(goals, key=lambda g: g.level.casefold())


def ladder(goals: Sequence[Goal]) -> list[Goal]:
    # sorted() is stable, so equal ranges keep storage order
    return sorted(goals, key=lambda g: (g.target_balance, g.start_balance))


def _format_money(v: float) -> str:
    return f"${v:,.2f}"


def add_goal(goals: Sequence[Goal], level, start_balance, target_balance) -> list[Goal]:
    name = str(level).strip() if level is not None else ""
    if not name or start_balance in (None, "") or target_balance in (None, ""):
        raise ValidationError("goal_fields_required", "All fields are required")
    if len(name) > MAX_LEVEL_LENGTH:
        raise ValidationError("goal_level_too_long", f"Goal name must be at most {MAX_LEVEL_LENGTH} characters")

    start = parse_amount(start_balance, "Start balance")
    target = parse_amount(target_balance, "Target balance")

    if target <= start:
        raise ValidationError("goal_target_not_above_start", "Target balance must be greater than start balance")

    if any(g.level.lower() == name.lower() for g in goals):
        raise ValidationError("goal_exists", "Goal name already exists")

    if goals:
        last = chain_order(goals)[-1]
        if start != last.target_balance:
            raise ValidationError(
                "goal_chain_broken",
                f"Start balance should be {_format_money(last.target_balance)} (matching {last.level} target balance)",
            )

    status = IN_PROGRESS if not goals else NOT_STARTED
    return [*goals, Goal(level=name, start_balance=start, target_balance=target, status=status)]


def remove_goal(goals: Sequence[Goal], index: int) -> list[Goal]:
    if index < 0 or index >= len(goals):
        raise NotFoundError("goal_not_found", f"No goal at position {index}")
    return [g for i, g in enumerate(goals) if i != index]


def with_status(goal: Goal, status: GoalStatus) -> Goal:
    if goal.status == status:
        return goal
    return replace(goal, status=status)


def suggest_next_goal(goals: Sequence[Goal]) -> tuple[str, float | None]:
    if not goals:
        return "Step1", None

    indexes = sorted(i for i in (step_index(g.level) for g in goals) if i is not None)
    name = f"Step{indexes[-1] + 1}" if indexes else f"Step{len(goals) + 1}"
    return name, chain_order(goals)[-1].target_balance


def multiplier(goal: Goal) -> str:
    if goal.start_balance == 0:
        return ""
    return f"{goal.target_balance / goal.start_balance:.1f}x"


def profit_target(goal: Goal) -> float:
    return goal.target_balance - goal.start_balance


def goal_progress(goal: Goal, latest_balance: float) -> float:
    span = goal.target_balance - goal.start_balance
    if span <= 0:
        return 1.0 if latest_balance >= goal.target_balance else 0.0
    return min(max((latest_balance - goal.start_balance) / span, 0.0), 1.0)
