from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import AuthContext, get_current_user
from ..schemas.ticket import PauseRequest, TicketCreate, TicketRead, TicketUpdate, WorkLogRead
from ..services import ticket_timer
from ..services import tickets as ticket_service

router = APIRouter(prefix="/api/tickets", tags=["tickets"])


def _ticket_json(ticket, work_logs=None) -> dict:
    data = TicketRead.model_validate(ticket).model_dump(mode="json")
    if work_logs is not None:
        data["work_logs"] = [WorkLogRead.model_validate(log).model_dump(mode="json") for log in work_logs]
    return data


@router.post("")
async def create_ticket(
    payload: TicketCreate,
    ctx: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ticket = ticket_service.create_ticket(db, ctx, payload)
    return JSONResponse({"ticket": _ticket_json(ticket, [])}, status_code=201)


@router.patch("/{ticket_id}")
async def update_ticket(
    ticket_id: int,
    payload: TicketUpdate,
    ctx: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ticket = ticket_service.update_ticket(db, ctx, ticket_id, payload)
    return JSONResponse({"ticket": _ticket_json(ticket, ticket_timer.ticket_work_logs(db, ticket.id))})


@router.post("/{ticket_id}/start")
async def start_ticket(
    ticket_id: int,
    ctx: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    # one running ticket per user: the other timers close in the same transaction as the start
    ticket_timer.ensure_startable(db, ctx, ticket_id)
    ticket_timer.pause_other_timers(db, ctx, ticket_id, commit=False)
    work_log, ticket = ticket_timer.start_ticket(db, ctx, ticket_id)
    return JSONResponse(
        {
            "workLog": WorkLogRead.model_validate(work_log).model_dump(mode="json"),
            "ticket": _ticket_json(ticket),
        }
    )


@router.post("/{ticket_id}/pause")
async def pause_ticket(
    ticket_id: int,
    payload: PauseRequest | None = Body(default=None),
    ctx: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    work_log, ticket = ticket_timer.pause_ticket(db, ctx, ticket_id, payload.description if payload else None)
    return JSONResponse(
        {
            "workLog": WorkLogRead.model_validate(work_log).model_dump(mode="json"),
            "ticket": _ticket_json(ticket, ticket_timer.ticket_work_logs(db, ticket.id)),
        }
    )
