from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import AuthContext, get_current_user
from ..schemas.team import MemberRead, ProjectCreate, ProjectRead, TeamCreate, TeamJoin, TeamRead
from ..schemas.ticket import TicketWithLogs
from ..services import projects as project_service
from ..services import teams as team_service

router = APIRouter(prefix="/api/teams", tags=["teams"])


def _team_json(team) -> dict:
    return TeamRead.model_validate(team).model_dump(mode="json")


def _project_json(project) -> dict:
    return ProjectRead.model_validate(project).model_dump(mode="json")


@router.get("")
async def list_teams(ctx: AuthContext = Depends(get_current_user), db: Session = Depends(get_db)):
    return JSONResponse({"teams": [_team_json(team) for team in team_service.list_teams(db, ctx)]})


@router.post("")
async def create_team(
    payload: TeamCreate,
    ctx: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    team = team_service.create_team(db, ctx, payload.name)
    return JSONResponse({"team": _team_json(team)}, status_code=201)


@router.post("/join")
async def join_team(
    payload: TeamJoin,
    ctx: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    team = team_service.join_team_by_code(db, ctx, payload.invite_code)
    return JSONResponse({"team": _team_json(team)})


@router.get("/{team_id}")
async def team_detail(team_id: int, ctx: AuthContext = Depends(get_current_user), db: Session = Depends(get_db)):
    team = team_service.get_team(db, ctx, team_id)
    projects = team_service.team_projects(db, team.id)
    return JSONResponse({"team": _team_json(team), "projects": [_project_json(p) for p in projects]})


@router.get("/{team_id}/projects")
async def list_projects(team_id: int, ctx: AuthContext = Depends(get_current_user), db: Session = Depends(get_db)):
    team_service.require_team_member(db, ctx, team_id)
    projects = team_service.team_projects(db, team_id)
    return JSONResponse({"projects": [_project_json(p) for p in projects]})


@router.post("/{team_id}/projects")
async def create_project(
    team_id: int,
    payload: ProjectCreate,
    ctx: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    project = project_service.create_project(db, ctx, team_id, payload.name, payload.description)
    return JSONResponse({"project": _project_json(project)}, status_code=201)


@router.get("/{team_id}/members")
async def list_members(team_id: int, ctx: AuthContext = Depends(get_current_user), db: Session = Depends(get_db)):
    members = team_service.team_members(db, ctx, team_id)
    return JSONResponse({"members": [MemberRead.model_validate(m).model_dump(mode="json") for m in members]})


@router.get("/{team_id}/tickets")
async def list_tickets(team_id: int, ctx: AuthContext = Depends(get_current_user), db: Session = Depends(get_db)):
    team_service.require_team_member(db, ctx, team_id)
    project_ids = [project.id for project in team_service.team_projects(db, team_id)]
    tickets = [
        TicketWithLogs.model_validate(ticket).model_dump(mode="json")
        for ticket in project_service.project_tickets(db, project_ids)
    ]
    return JSONResponse({"tickets": tickets})
