from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..deps import AuthContext
from ..errors import InvalidInput, ProjectNotFound, TicketNotFound
from ..models import Project, Ticket
from ..schemas.ticket import TicketCreate, TicketUpdate
from .teams import require_team_member

logger = logging.getLogger(__name__)


def _project_for(db: Session, ctx: AuthContext, project_id: int) -> Project:
    project = db.query(Project).filter(Project.id == project_id).one_or_none()
    if project is None:
        raise ProjectNotFound()
    require_team_member(db, ctx, project.team_id)
    return project


def create_ticket(db: Session, ctx: AuthContext, payload: TicketCreate) -> Ticket:
    _project_for(db, ctx, payload.project_id)
    ticket = Ticket(
        project_id=payload.project_id,
        title=payload.title.strip(),
        description=(payload.description or "").strip() or None,
        priority=payload.priority,
        assigned_to_user_id=payload.assigned_to_user_id,
        status=payload.status,
        total_duration=0,
    )
    db.add(ticket)
    db.commit()
    logger.info("User %s created ticket %s", ctx.user_id, ticket.id)
    return ticket


def update_ticket(db: Session, ctx: AuthContext, ticket_id: int, payload: TicketUpdate) -> Ticket:
    ticket = db.query(Ticket).filter(Ticket.id == ticket_id).one_or_none()
    if ticket is None:
        raise TicketNotFound()
    _project_for(db, ctx, ticket.project_id)

    changes = payload.model_dump(exclude_unset=True)
    if "title" in changes and changes["title"] is not None:
        ticket.title = changes["title"].strip() or ticket.title
    if "description" in changes:
        ticket.description = (changes["description"] or "").strip() or None
    status = changes.get("status")
    if status is not None and status != ticket.status:
        # "active" belongs to the timer; it is never set or cleared by hand
        if status == "active" or ticket.status == "active":
            raise InvalidInput("Use start/pause to change whether a ticket is active")
        ticket.status = status
    if changes.get("priority") is not None:
        ticket.priority = changes["priority"]
    if "assigned_to_user_id" in changes:
        ticket.assigned_to_user_id = changes["assigned_to_user_id"]
    db.commit()
    return ticket
