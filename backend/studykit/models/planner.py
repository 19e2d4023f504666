"""Planner task models"""
from datetime import date
from enum import Enum
from typing import Optional
import uuid

from pydantic import BaseModel, EmailStr, Field, field_validator

# Identifiers stay below 2**53 so browsers can read them as plain numbers
_TASK_ID_MASK = (1 << 53) - 1


def generate_task_id() -> int:
    """Random task identifier, unique across dates for all practical purposes"""
    return uuid.uuid4().int & _TASK_ID_MASK


def validate_planner_date(value: str) -> str:
    """Check a planner date key is a real YYYY-MM-DD date"""
    if not isinstance(value, str) or not value.strip():
        raise ValueError("date is required")
    value = value.strip()
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD")
    if parsed.isoformat() != value:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD")
    return value


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class PlannerTask(BaseModel):
    """One to-do item stored inside a planner day"""
    id: int = Field(default_factory=generate_task_id)
    subject: str
    priority: Priority = Priority.MEDIUM
    notes: Optional[str] = None
    completed: bool = False
    notified: bool = False

    @field_validator("subject")
    @classmethod
    def subject_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("subject is required")
        return value.strip()

    def to_document(self) -> dict:
        return self.model_dump(mode="json")


class PlannerTaskCreate(BaseModel):
    """Payload for adding a task to a date"""
    date: str
    subject: str
    priority: Priority = Priority.MEDIUM
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def date_format(cls, value: str) -> str:
        return validate_planner_date(value)

    @field_validator("subject")
    @classmethod
    def subject_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("subject is required")
        return value.strip()


class PlannerTaskUpdate(BaseModel):
    """Toggle completion and/or move a task to another date"""
    completed: Optional[bool] = None
    newDate: Optional[str] = None

    @field_validator("newDate")
    @classmethod
    def new_date_format(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return validate_planner_date(value)


class NotifyRequest(BaseModel):
    """Reminder request for a task on a given date"""
    date: str
    email: Optional[EmailStr] = None

    @field_validator("date")
    @classmethod
    def date_format(cls, value: str) -> str:
        return validate_planner_date(value)


class ImportResult(BaseModel):
    """Outcome of a destructive planner import"""
    success: bool = True
    deleted: int
    inserted: int
    dates: int
    tasks: int
