"""Error taxonomy shared by services and routers.

Services raise these; the handlers registered in ``main`` turn them into
``{"error", "details", "code", "hint"}`` JSON bodies.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for failures that map onto an HTTP response."""

    status_code = 500
    message = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        details: str | None = None,
        code: str | None = None,
        hint: str | None = None,
    ):
        self.message = message or self.message
        self.details = details
        self.code = code
        self.hint = hint
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.message}
        for key in ("details", "code", "hint"):
            value = getattr(self, key)
            if value is not None:
                body[key] = value
        return body


class Unauthenticated(AppError):
    status_code = 401
    message = "Unauthorized"


class PermissionDenied(AppError):
    status_code = 403
    message = "Permission denied"


class NotFound(AppError):
    status_code = 404
    message = "Not found"


class InvalidInput(AppError):
    status_code = 400
    message = "Invalid request"


class Conflict(AppError):
    status_code = 409
    message = "Conflict"


class UpstreamFailure(AppError):
    status_code = 500
    message = "Database request failed"


class TicketNotFound(NotFound):
    message = "Ticket not found"


class ProjectNotFound(NotFound):
    message = "Project not found"


class TeamNotFound(NotFound):
    message = "Team not found"


class NoActiveSession(NotFound):
    message = "No active work session found"


class NoActiveWorkLog(NotFound):
    message = "No active work log found for this ticket"


class MustClockInFirst(InvalidInput):
    message = "You must clock in before working on tickets"


class TicketClosed(InvalidInput):
    message = "Cannot start work on closed ticket"


class SessionAlreadyActive(Conflict):
    message = "You already have an active work session"


class TimerAlreadyRunning(Conflict):
    message = "A timer is already running for this ticket"


class AlreadyTeamMember(Conflict):
    message = "You are already a member of this team"
