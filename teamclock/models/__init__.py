from sqlalchemy.orm import declarative_base

Base = declarative_base()

from .project import Project, ProjectMember  # noqa: E402,F401
from .team import Team, TeamMember  # noqa: E402,F401
from .ticket import Ticket  # noqa: E402,F401
from .user import User  # noqa: E402,F401
from .work_log import WorkLog  # noqa: E402,F401
from .work_session import WorkSession  # noqa: E402,F401
