"""AI study suggestion models"""
from pydantic import BaseModel
from typing import List, Optional, Union


class SuggestionRequest(BaseModel):
    """Snapshot of the student's week used to prompt for study tips"""
    totalClasses: int = 0
    totalTasks: int = 0
    completedTasks: int = 0
    exams: List[Union[dict, str]] = []
    weeklyPerformance: List[Union[dict, str]] = []
    weakTopics: List[str] = []
    budgetBalance: Optional[float] = None


class SuggestionResponse(BaseModel):
    """Parsed study tips"""
    tips: List[str]
