from __future__ import annotations
from datetime import date, datetime, timezone
from typing import Any, List, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

MIN_PASSWORD_LENGTH = 6

_datetime_adapter = TypeAdapter(datetime)


def _checked_email(value: str) -> str:
    # validated, but stored exactly as sent: email is a case-sensitive key
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(f"Invalid email: {exc}")
    return value


def _date_part(value: Any) -> Any:
    """Accept full ISO timestamps (e.g. from JS Date.toISOString()) and keep the date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        try:
            return _datetime_adapter.validate_python(value).date()
        except PydanticValidationError:
            raise ValueError("Invalid value for dueDate")
    return value


class ApiModel(BaseModel):
    # camelCase on the wire, snake_case in code; both accepted on input
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# --- auth ---

class SignupRequest(ApiModel):
    """
    /auth/signup request body.
    The role/teacherId rule is applied by the authorization policy, not here.
    """
    email: str
    password: str
    role: str
    teacher_id: Optional[int] = Field(None, alias="teacherId")

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _checked_email(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return value


class LoginRequest(ApiModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _checked_email(value)


class UserPublic(ApiModel):
    """User as returned to clients. Never carries the password hash."""
    id: int
    email: str
    role: str
    teacher_id: Optional[int] = Field(None, alias="teacherId")


class AuthResponse(ApiModel):
    success: bool = True
    message: str
    token: str
    user: UserPublic


class MeResponse(ApiModel):
    success: bool = True
    user: UserPublic


# --- tasks ---

class TaskCreate(ApiModel):
    title: str
    description: Optional[str] = None
    due_date: Optional[date] = Field(None, alias="dueDate")

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Title is required")
        return value

    @field_validator("due_date", mode="before")
    @classmethod
    def validate_due_date(cls, value: Any) -> Any:
        return _date_part(value)


class TaskUpdate(ApiModel):
    """Partial update; only keys present in the body are applied (exclude_unset)."""
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[date] = Field(None, alias="dueDate")
    progress: Optional[float] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: Optional[str]) -> str:
        if value is None or not value.strip():
            raise ValueError("Title cannot be empty")
        return value

    @field_validator("due_date", mode="before")
    @classmethod
    def validate_due_date(cls, value: Any) -> Any:
        return _date_part(value)


class TaskOwner(ApiModel):
    id: int
    email: str
    role: str


class TaskOut(ApiModel):
    id: int
    owner_id: int = Field(..., alias="ownerId")
    owner: Optional[TaskOwner] = None
    title: str
    description: Optional[str] = None
    due_date: Optional[date] = Field(None, alias="dueDate")
    progress: Optional[float] = None
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite drops the offset; stored values are always UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class TaskResponse(ApiModel):
    success: bool = True
    message: str
    task: TaskOut


class TaskListResponse(ApiModel):
    success: bool = True
    tasks: List[TaskOut]


# --- directory ---

class TeacherInfo(ApiModel):
    id: int
    email: str


class TeacherListResponse(ApiModel):
    success: bool = True
    teachers: List[TeacherInfo]


class MessageResponse(ApiModel):
    success: bool = True
    message: str
