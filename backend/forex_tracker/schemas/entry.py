from pydantic import BaseModel, Field, field_validator
from datetime import date
from typing import Annotated, Literal, Union

EntryType = Literal["starting", "trade", "deposit", "withdrawal"]

class _EntryBase(BaseModel):
    date: date
    milestone: str | None = None
    milestone_value: float | None = None

    @field_validator("milestone")
    @classmethod
    def milestone_trim(cls, v: str | None):
        if v is None:
            return None
        v = v.strip()
        return v or None

class StartingIn(_EntryBase):
    type: Literal["starting"]
    balance: float

class TradeIn(_EntryBase):
    type: Literal["trade"]
    balance: float | None = None
    pnl: float | None = None

class DepositIn(_EntryBase):
    type: Literal["deposit"]
    amount: float

class WithdrawalIn(_EntryBase):
    type: Literal["withdrawal"]
    amount: float

EntryIn = Annotated[Union[StartingIn, TradeIn, DepositIn, WithdrawalIn], Field(discriminator="type")]

class EntryOut(BaseModel):
    id: int
    date: date
    type: EntryType
    balance: float
    amount: float
    pnl: float
    daily_gain: float
    amount_to_target: float
    milestone: str
    milestone_value: float | None
