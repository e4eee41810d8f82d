from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import AuthContext, get_current_user
from ..schemas.session import ClockInRequest, WorkSessionRead
from ..schemas.ticket import WorkLogWithTicket
from ..services import work_sessions as service

router = APIRouter(prefix="/api/work-sessions", tags=["work-sessions"])


def _session_json(session) -> dict | None:
    if session is None:
        return None
    return WorkSessionRead.model_validate(session).model_dump(mode="json")


@router.post("/clock-in")
async def clock_in(
    payload: ClockInRequest | None = Body(default=None),
    ctx: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    session = service.clock_in(db, ctx, payload.project_id if payload else None)
    return JSONResponse({"workSession": _session_json(session), "elapsedTime": service.elapsed_seconds(session)})


@router.post("/clock-out")
async def clock_out(ctx: AuthContext = Depends(get_current_user), db: Session = Depends(get_db)):
    session = service.clock_out(db, ctx)
    return JSONResponse({"workSession": _session_json(session), "totalDuration": session.total_duration})


@router.get("/active")
async def active_session(ctx: AuthContext = Depends(get_current_user), db: Session = Depends(get_db)):
    # clients poll this; nothing is held server-side between calls
    session = service.get_active_session(db, ctx)
    if session is None:
        return JSONResponse({"workSession": None, "elapsedTime": 0})
    return JSONResponse({"workSession": _session_json(session), "elapsedTime": service.elapsed_seconds(session)})


@router.get("")
async def session_history(ctx: AuthContext = Depends(get_current_user), db: Session = Depends(get_db)):
    history = []
    for session, logs in service.list_sessions(db, ctx):
        row = _session_json(session)
        row["work_logs"] = [WorkLogWithTicket.model_validate(log).model_dump(mode="json") for log in logs]
        history.append(row)
    return JSONResponse({"workSessions": history})
