import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from forex_tracker.core.config import settings
from forex_tracker.api.routes.entries import router as entries_router
from forex_tracker.api.routes.goals import router as goals_router
from forex_tracker.api.routes.summary import router as summary_router
from forex_tracker.api.routes.workbook import router as workbook_router

logging.basicConfig(
    level=getattr(logging, (settings.log_level or "INFO").upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Forex Account Tracker")

origins = [o.strip() for o in (settings.cors_origins or "").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
@app.get("/api/health")
def health():
    return {"status": "ok"}

app.include_router(entries_router)
app.include_router(goals_router)
app.include_router(summary_router)
app.include_router(workbook_router)
