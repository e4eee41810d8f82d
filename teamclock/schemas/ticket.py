from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import UtcDateTime

TicketStatus = Literal["open", "active", "close"]
TicketPriority = Literal["low", "medium", "high", "critical"]


class TicketRef(BaseModel):
    id: int
    title: str
    project_id: int

    model_config = ConfigDict(from_attributes=True)


class WorkLogRead(BaseModel):
    id: int
    ticket_id: int
    user_id: int
    work_session_id: int | None = None
    start_time: UtcDateTime
    end_time: UtcDateTime | None = None
    duration: int | None = None
    description: str | None = None

    model_config = ConfigDict(from_attributes=True)


class WorkLogWithTicket(WorkLogRead):
    tickets: TicketRef | None = Field(default=None, validation_alias="ticket")


class TicketRead(BaseModel):
    id: int
    project_id: int
    title: str
    description: str | None = None
    status: TicketStatus
    priority: TicketPriority
    assigned_to_user_id: int | None = None
    total_duration: int = 0
    last_worked_on: UtcDateTime | None = None
    created_at: UtcDateTime | None = None

    model_config = ConfigDict(from_attributes=True)


class TicketWithLogs(TicketRead):
    work_logs: list[WorkLogRead] = Field(default_factory=list)


class TicketCreate(BaseModel):
    project_id: int = Field(alias="projectId")
    title: str = Field(..., min_length=1)
    description: str | None = None
    priority: TicketPriority = "medium"
    assigned_to_user_id: int = Field(alias="assignedToUserId")
    status: Literal["open", "close"] = "open"

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("title")
    @classmethod
    def title_strip(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Title is required")
        return cleaned


class TicketUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    status: TicketStatus | None = None
    priority: TicketPriority | None = None
    assigned_to_user_id: int | None = Field(default=None, alias="assignedToUserId")

    model_config = ConfigDict(populate_by_name=True)


class PauseRequest(BaseModel):
    description: str | None = Field(default=None, max_length=2000)
