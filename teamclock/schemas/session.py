from pydantic import BaseModel, ConfigDict, Field

from .common import UtcDateTime


class ClockInRequest(BaseModel):
    project_id: int | None = Field(default=None, alias="projectId")

    model_config = ConfigDict(populate_by_name=True)


class WorkSessionRead(BaseModel):
    id: int
    user_id: int
    project_id: int | None = None
    clock_in_time: UtcDateTime
    clock_out_time: UtcDateTime | None = None
    total_duration: int | None = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
