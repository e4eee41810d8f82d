from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..deps import AuthContext
from ..errors import ProjectNotFound
from ..models import Project, ProjectMember, TeamMember, Ticket
from ..schemas.team import ProjectMemberRead
from .teams import require_team_member

logger = logging.getLogger(__name__)


def create_project(db: Session, ctx: AuthContext, team_id: int, name: str, description: str | None = None) -> Project:
    require_team_member(db, ctx, team_id)
    project = Project(
        team_id=team_id,
        name=name.strip(),
        description=(description or "").strip() or None,
        created_by=ctx.user_id,
    )
    project.members.append(
        ProjectMember(user_id=ctx.user_id, role="owner", is_online=False, full_name=ctx.full_name, email=ctx.email)
    )
    db.add(project)
    db.commit()
    logger.info("User %s created project %s in team %s", ctx.user_id, project.id, team_id)
    return project


def get_project(db: Session, ctx: AuthContext, project_id: int) -> Project:
    project = db.query(Project).filter(Project.id == project_id).one_or_none()
    if project is None:
        raise ProjectNotFound()
    require_team_member(db, ctx, project.team_id)
    return project


def project_tickets(db: Session, project_ids: list[int]) -> list[Ticket]:
    """Tickets with their logs, most recently worked on first."""
    if not project_ids:
        return []
    return (
        db.query(Ticket)
        .options(selectinload(Ticket.work_logs))
        .filter(Ticket.project_id.in_(project_ids))
        .order_by(Ticket.last_worked_on.desc().nulls_last(), Ticket.created_at.desc(), Ticket.id.desc())
        .all()
    )


def project_members(db: Session, project: Project) -> list[ProjectMemberRead]:
    """Project members plus team members not yet in the project.

    Members are optional enrichment: a failed lookup is logged and yields
    an empty list rather than failing the project response.
    """
    try:
        members = db.query(ProjectMember).filter(ProjectMember.project_id == project.id).all()
        team_rows = db.query(TeamMember).filter(TeamMember.team_id == project.team_id).all()
    except SQLAlchemyError:
        logger.exception("Error fetching members for project %s", project.id)
        db.rollback()
        return []

    result = [
        ProjectMemberRead(
            id=str(member.id),
            project_id=project.id,
            user_id=member.user_id,
            role=member.role,
            is_online=member.is_online,
            full_name=member.full_name,
            email=member.email,
            joined_at=member.joined_at,
        )
        for member in members
    ]
    seen = {member.user_id for member in members}
    for row in team_rows:
        if row.user_id in seen:
            continue
        seen.add(row.user_id)
        result.append(
            ProjectMemberRead(
                id=f"tm-{row.user_id}",
                project_id=project.id,
                user_id=row.user_id,
                role="member",
                is_online=False,
                full_name=row.full_name,
                email=row.email or "",
                joined_at=row.joined_at or project.created_at,
            )
        )
    return result
