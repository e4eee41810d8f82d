from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import AuthContext, get_current_user
from ..schemas.team import ProjectRead
from ..schemas.ticket import TicketWithLogs
from ..services import projects as project_service

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.get("/{project_id}")
async def project_detail(project_id: int, ctx: AuthContext = Depends(get_current_user), db: Session = Depends(get_db)):
    project = project_service.get_project(db, ctx, project_id)
    tickets = [
        TicketWithLogs.model_validate(ticket).model_dump(mode="json")
        for ticket in project_service.project_tickets(db, [project.id])
    ]

    data = ProjectRead.model_validate(project).model_dump(mode="json")
    data["project_members"] = [m.model_dump(mode="json") for m in project_service.project_members(db, project)]
    data["tickets"] = tickets
    return JSONResponse({"project": data})
