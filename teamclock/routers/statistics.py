from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import AuthContext, get_current_user
from ..schemas.ticket import WorkLogWithTicket
from ..services import reporting

router = APIRouter(prefix="/api", tags=["statistics"])


@router.get("/statistics")
async def statistics(
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    ctx: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    start, end = reporting.resolve_range(start_date, end_date, ctx.tz)
    report = reporting.build_statistics(db, ctx, start, end)
    return JSONResponse(report.model_dump(mode="json", by_alias=True))


@router.get("/work-logs")
async def work_logs(
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    ctx: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    logs = reporting.list_work_logs(db, ctx, start_date, end_date)
    return JSONResponse({"workLogs": [WorkLogWithTicket.model_validate(log).model_dump(mode="json") for log in logs]})
