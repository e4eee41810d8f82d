from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import UtcDateTime


def _strip_required(value: str, label: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{label} is required")
    return cleaned


class TeamCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def name_strip(cls, value: str) -> str:
        return _strip_required(value, "Team name")


class TeamJoin(BaseModel):
    invite_code: str = Field(alias="inviteCode")

    model_config = ConfigDict(populate_by_name=True)


class TeamRead(BaseModel):
    id: int
    name: str
    invite_code: str
    created_by: int | None = None
    created_at: UtcDateTime | None = None

    model_config = ConfigDict(from_attributes=True)


class MemberRead(BaseModel):
    user_id: int
    full_name: str | None = None
    email: str | None = None
    is_online: bool = False

    model_config = ConfigDict(from_attributes=True)


class ProjectCreate(BaseModel):
    name: str
    description: str | None = None

    @field_validator("name")
    @classmethod
    def name_strip(cls, value: str) -> str:
        return _strip_required(value, "Project name")


class ProjectRead(BaseModel):
    id: int
    team_id: int
    name: str
    description: str | None = None
    created_by: int | None = None
    created_at: UtcDateTime | None = None

    model_config = ConfigDict(from_attributes=True)


class ProjectMemberRead(BaseModel):
    id: str
    project_id: int
    user_id: int
    role: str
    is_online: bool = False
    full_name: str | None = None
    email: str | None = None
    joined_at: UtcDateTime | None = None
