from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from io import BytesIO
from sqlalchemy.orm import Session

from forex_tracker.api.deps import db, http_error, mutate
from forex_tracker.core.errors import ValidationError
from forex_tracker.schemas.workbook import ImportOut
from forex_tracker.services.store import load_state
from forex_tracker.services.tracker import ReplaceAll
from forex_tracker.services.workbook import build_workbook, export_filename, read_workbook
from forex_tracker.utils.timezone import today_local

router = APIRouter(prefix="/workbook", tags=["workbook"])


@router.get("")
def export_workbook(s: Session = Depends(db)):
    buf = BytesIO()
    build_workbook(load_state(s), buf)
    buf.seek(0)

    filename = export_filename(today_local())
    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("", response_model=ImportOut)
async def import_workbook(request: Request, s: Session = Depends(db)):
    data = await request.body()
    try:
        entries, goals = read_workbook(data)
    except ValidationError as e:
        raise http_error(e)
    st = mutate(s, ReplaceAll(entries=entries, goals=goals))
    return ImportOut(entries=len(st.entries), goals=len(st.goals))
