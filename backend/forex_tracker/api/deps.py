from fastapi import HTTPException
from sqlalchemy.orm import Session

from forex_tracker.core.errors import NotFoundError, TrackerError
from forex_tracker.db.session import SessionLocal
from forex_tracker.services.store import run_mutation
from forex_tracker.services.tracker import Mutation, TrackerState

def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()

def http_error(e: TrackerError) -> HTTPException:
    status = 404 if isinstance(e, NotFoundError) else 400
    return HTTPException(status_code=status, detail=e.as_detail())

def mutate(s: Session, mutation: Mutation) -> TrackerState:
    try:
        return run_mutation(s, mutation)
    except TrackerError as e:
        raise http_error(e)
