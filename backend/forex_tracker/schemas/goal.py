from pydantic import BaseModel
from typing import Literal

GoalStatus = Literal["Not Started", "In Progress", "Completed"]

class GoalCreate(BaseModel):
    level: str | None = None
    start_balance: float | None = None
    target_balance: float | None = None

class GoalOut(BaseModel):
    index: int
    level: str
    start_balance: float
    target_balance: float
    status: GoalStatus
    progress: float
    multiplier: str
    profit_target: float

class NextGoalOut(BaseModel):
    level: str
    start_balance: float | None
