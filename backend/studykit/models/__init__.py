"""Data models for the student life toolkit"""
from studykit.models.planner import (
    ImportResult,
    NotifyRequest,
    PlannerTask,
    PlannerTaskCreate,
    PlannerTaskUpdate,
    Priority,
)
from studykit.models.resources import (
    BudgetEntryCreate,
    BudgetSummary,
    ClassSessionCreate,
    QuizQuestionCreate,
    UserUpsert,
)
from studykit.models.suggestion import SuggestionRequest, SuggestionResponse

__all__ = [
    "ImportResult",
    "NotifyRequest",
    "PlannerTask",
    "PlannerTaskCreate",
    "PlannerTaskUpdate",
    "Priority",
    "BudgetEntryCreate",
    "BudgetSummary",
    "ClassSessionCreate",
    "QuizQuestionCreate",
    "UserUpsert",
    "SuggestionRequest",
    "SuggestionResponse",
]
