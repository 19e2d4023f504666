"""Models for the single-document resources: users, classes, budget, questions"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from studykit.models.planner import validate_planner_date


def _required_text(value: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError("field is required")
    return str(value).strip()


class UserUpsert(BaseModel):
    """User profile as sent by the frontend after sign-in"""
    email: EmailStr
    displayName: Optional[str] = None
    photoURL: Optional[str] = None


class ClassSessionCreate(BaseModel):
    """Class schedule entry; every field is required for create and update"""
    name: str
    instructor: str
    day: str
    startTime: str
    endTime: str
    color: str

    @field_validator("name", "instructor", "day", "startTime", "endTime", "color")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _required_text(value)


class BudgetType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class BudgetEntryCreate(BaseModel):
    """Income or expense line in the budget ledger"""
    type: BudgetType
    amount: float = Field(gt=0)
    category: str
    date: str
    description: Optional[str] = None

    @field_validator("category")
    @classmethod
    def category_not_blank(cls, value: str) -> str:
        return _required_text(value)

    @field_validator("date")
    @classmethod
    def date_format(cls, value: str) -> str:
        return validate_planner_date(value)


class BudgetSummary(BaseModel):
    income: float = 0.0
    expense: float = 0.0
    balance: float = 0.0
    entries: int = 0


class QuestionType(str, Enum):
    MCQ = "mcq"
    TRUE_FALSE = "true_false"
    SHORT = "short"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuizQuestionCreate(BaseModel):
    """Question for the quiz bank"""
    question: str
    type: QuestionType = QuestionType.MCQ
    options: List[str] = []
    answer: str
    subject: Optional[str] = None
    difficulty: Difficulty = Difficulty.MEDIUM

    @field_validator("question", "answer")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _required_text(value)

    @model_validator(mode="after")
    def check_options(self):
        options = [option.strip() for option in self.options if option and option.strip()]
        if self.type == QuestionType.TRUE_FALSE:
            options = ["True", "False"]
            self.answer = self.answer.capitalize()
        elif self.type == QuestionType.MCQ and len(options) < 2:
            raise ValueError("Multiple choice questions need at least two options")
        if self.type != QuestionType.SHORT and self.answer not in options:
            raise ValueError("answer must be one of the options")
        self.options = options
        return self
