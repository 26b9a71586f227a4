from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from forex_tracker.api.deps import db, mutate
from forex_tracker.schemas.goal import GoalCreate, GoalOut, NextGoalOut
from forex_tracker.services.goals import goal_progress, multiplier, profit_target, suggest_next_goal
from forex_tracker.services.store import load_state
from forex_tracker.services.tracker import AddGoal, RemoveGoal, TrackerState

router = APIRouter(prefix="/goals", tags=["goals"])


def _goals_out(st: TrackerState) -> list[GoalOut]:
    latest = st.summary.latest_balance
    return [
        GoalOut(
            index=i,
            level=g.level,
            start_balance=g.start_balance,
            target_balance=g.target_balance,
            status=g.status,
            progress=goal_progress(g, latest),
            multiplier=multiplier(g),
            profit_target=profit_target(g),
        )
        for i, g in enumerate(st.goals)
    ]


@router.get("", response_model=list[GoalOut])
def list_goals(s: Session = Depends(db)):
    return _goals_out(load_state(s))


@router.get("/next", response_model=NextGoalOut)
def next_goal(s: Session = Depends(db)):
    level, start = suggest_next_goal(load_state(s).goals)
    return NextGoalOut(level=level, start_balance=start)


@router.post("", response_model=list[GoalOut])
def add_goal(body: GoalCreate, s: Session = Depends(db)):
    return _goals_out(mutate(s, AddGoal(body.level, body.start_balance, body.target_balance)))


@router.delete("/{index}", response_model=list[GoalOut])
def remove_goal(index: int, s: Session = Depends(db)):
    return _goals_out(mutate(s, RemoveGoal(index)))
