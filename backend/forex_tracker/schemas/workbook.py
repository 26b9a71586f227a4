from pydantic import BaseModel

class ImportOut(BaseModel):
    entries: int
    goals: int
