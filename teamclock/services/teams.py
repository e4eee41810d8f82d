from __future__ import annotations

import logging
import re
import secrets
import string

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..deps import AuthContext
from ..errors import AlreadyTeamMember, Conflict, InvalidInput, PermissionDenied, TeamNotFound
from ..models import Project, ProjectMember, Team, TeamMember

logger = logging.getLogger(__name__)

INVITE_CODE_LENGTH = 6
INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits
_NON_ALNUM = re.compile(r"[^A-Z0-9]")
_MAX_CODE_ATTEMPTS = 10


def normalize_invite_code(raw: str | None) -> str:
    """Uppercase and strip everything but A-Z/0-9; the result must be 6 chars."""
    if not raw or not isinstance(raw, str):
        raise InvalidInput("Invite code is required")
    code = _NON_ALNUM.sub("", raw.upper())
    if len(code) != INVITE_CODE_LENGTH:
        raise InvalidInput("Invalid invite code format")
    return code


def generate_invite_code() -> str:
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


def _membership(db: Session, team_id: int, user_id: int) -> TeamMember | None:
    return (
        db.query(TeamMember)
        .filter(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
        .one_or_none()
    )


def require_team_member(db: Session, ctx: AuthContext, team_id: int) -> TeamMember:
    member = _membership(db, team_id, ctx.user_id)
    if member is None:
        raise PermissionDenied("Not a member of this team")
    return member


def list_teams(db: Session, ctx: AuthContext) -> list[Team]:
    return (
        db.query(Team)
        .join(TeamMember, TeamMember.team_id == Team.id)
        .filter(TeamMember.user_id == ctx.user_id)
        .order_by(Team.created_at.desc(), Team.id.desc())
        .all()
    )


def create_team(db: Session, ctx: AuthContext, name: str) -> Team:
    for _ in range(_MAX_CODE_ATTEMPTS):
        team = Team(name=name.strip(), invite_code=generate_invite_code(), created_by=ctx.user_id)
        team.members.append(
            TeamMember(user_id=ctx.user_id, role="owner", full_name=ctx.full_name, email=ctx.email)
        )
        db.add(team)
        try:
            db.commit()
        except IntegrityError:
            # invite code collision, draw another one
            db.rollback()
            continue
        logger.info("User %s created team %s", ctx.user_id, team.id)
        return team
    raise Conflict("Could not allocate a unique invite code")


def join_team_by_code(db: Session, ctx: AuthContext, raw_code: str | None) -> Team:
    code = normalize_invite_code(raw_code)
    team = db.query(Team).filter(Team.invite_code == code).one_or_none()
    if team is None:
        raise TeamNotFound("Team not found with this invite code")
    if _membership(db, team.id, ctx.user_id) is not None:
        raise AlreadyTeamMember()

    db.add(TeamMember(team_id=team.id, user_id=ctx.user_id, role="member", full_name=ctx.full_name, email=ctx.email))
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise AlreadyTeamMember() from exc
    logger.info("User %s joined team %s", ctx.user_id, team.id)
    return team


def get_team(db: Session, ctx: AuthContext, team_id: int) -> Team:
    require_team_member(db, ctx, team_id)
    team = db.query(Team).filter(Team.id == team_id).one_or_none()
    if team is None:
        raise TeamNotFound()
    return team


def team_projects(db: Session, team_id: int) -> list[Project]:
    return (
        db.query(Project)
        .filter(Project.team_id == team_id)
        .order_by(Project.created_at.desc(), Project.id.desc())
        .all()
    )


def team_members(db: Session, ctx: AuthContext, team_id: int) -> list[ProjectMember]:
    """Members of every project in the team, one entry per user."""
    require_team_member(db, ctx, team_id)
    rows = (
        db.query(ProjectMember)
        .join(Project, Project.id == ProjectMember.project_id)
        .filter(Project.team_id == team_id)
        .order_by(ProjectMember.id.asc())
        .all()
    )
    unique: dict[int, ProjectMember] = {}
    for row in rows:
        unique.setdefault(row.user_id, row)
    return list(unique.values())
