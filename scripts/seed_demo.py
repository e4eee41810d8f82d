"""Seed a demo user with a team, a project and a few tickets."""

from teamclock.db import SessionLocal
from teamclock.models import Project, ProjectMember, Team, TeamMember, Ticket, User
from teamclock.routers.auth import get_password_hash
from teamclock.services.teams import generate_invite_code

DEMO_EMAIL = "demo@example.com"
DEFAULT_PASSWORD = "demo1234"
DEMO_TICKETS = (
    ("Set up CI pipeline", "high"),
    ("Write onboarding docs", "medium"),
    ("Triage bug backlog", "low"),
)


def ensure_user(session) -> User:
    user = session.query(User).filter(User.email == DEMO_EMAIL).one_or_none()
    if user:
        return user
    user = User(
        email=DEMO_EMAIL,
        full_name="Demo User",
        password_hash=get_password_hash(DEFAULT_PASSWORD),
        timezone="UTC",
    )
    session.add(user)
    session.flush()
    return user


def ensure_team(session, user: User) -> Team:
    team = session.query(Team).filter(Team.name == "Demo Team").one_or_none()
    if team:
        return team
    team = Team(name="Demo Team", invite_code=generate_invite_code(), created_by=user.id)
    team.members.append(TeamMember(user_id=user.id, role="owner", full_name=user.full_name, email=user.email))
    session.add(team)
    session.flush()
    return team


def ensure_project(session, team: Team, user: User) -> Project:
    project = session.query(Project).filter(Project.team_id == team.id, Project.name == "Demo Project").one_or_none()
    if project:
        return project
    project = Project(team_id=team.id, name="Demo Project", created_by=user.id)
    project.members.append(ProjectMember(user_id=user.id, role="owner", full_name=user.full_name, email=user.email))
    session.add(project)
    session.flush()
    return project


def ensure_tickets(session, project: Project, user: User) -> None:
    existing = {t.title for t in session.query(Ticket).filter(Ticket.project_id == project.id)}
    for title, priority in DEMO_TICKETS:
        if title in existing:
            continue
        session.add(
            Ticket(
                project_id=project.id,
                title=title,
                priority=priority,
                assigned_to_user_id=user.id,
                status="open",
                total_duration=0,
            )
        )


def main() -> None:
    with SessionLocal() as session:
        user = ensure_user(session)
        team = ensure_team(session, user)
        project = ensure_project(session, team, user)
        ensure_tickets(session, project, user)
        session.commit()
        print(f"Demo login: {DEMO_EMAIL} / {DEFAULT_PASSWORD} (team invite code {team.invite_code})")


if __name__ == "__main__":
    main()
