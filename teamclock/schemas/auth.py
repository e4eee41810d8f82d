from pydantic import BaseModel, EmailStr, Field, field_validator

from ..services.timefmt import is_known_timezone


class SignupForm(BaseModel):
    email: EmailStr
    full_name: str | None = None
    password: str = Field(..., min_length=8)
    timezone: str | None = None

    @field_validator("timezone")
    @classmethod
    def timezone_known(cls, value: str | None) -> str | None:
        value = (value or "").strip()
        if not value:
            return None
        if not is_known_timezone(value):
            raise ValueError(f"Unknown timezone: {value}")
        return value


class LoginForm(BaseModel):
    email: EmailStr
    password: str
