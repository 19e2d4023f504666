"""AI study tip generation"""
import re
from typing import List, Optional, Union

import openai
from openai import OpenAI

from studykit.config import settings
from studykit.errors import SuggestionError, UpstreamQuotaError
from studykit.models.suggestion import SuggestionRequest
from studykit.utils.monitoring import StructuredLogger

_openai_client: Optional[OpenAI] = None

# "1.", "2)", "-", "*" and "•" list markers
_ENUMERATION_RE = re.compile(r"^\s*(?:\d+[.)](?!\d)\s*|[-*•]\s+)")

SYSTEM_PROMPT = """You are a friendly study coach for university students.
Give short, practical, encouraging study tips based on the student's week.
Return one tip per line, at most 6 tips, no introduction and no closing remarks."""


def get_openai_client() -> OpenAI:
    """Get or create the OpenAI client"""
    global _openai_client
    if _openai_client is None:
        if not settings.OPENAI_API_KEY:
            raise SuggestionError("AI suggestions are not configured")
        _openai_client = OpenAI(api_key=settings.OPENAI_API_KEY)
    return _openai_client


def _describe(item: Union[dict, str]) -> str:
    if isinstance(item, dict):
        return ", ".join(f"{key}: {value}" for key, value in item.items())
    return str(item)


def build_prompt(request: SuggestionRequest) -> str:
    """Turn the weekly snapshot into the user prompt"""
    lines = [
        f"Classes this week: {request.totalClasses}",
        f"Planner tasks: {request.totalTasks} ({request.completedTasks} completed)",
    ]
    if request.exams:
        lines.append("Upcoming exams:")
        lines.extend(f"- {_describe(exam)}" for exam in request.exams)
    if request.weeklyPerformance:
        lines.append("Weekly performance:")
        lines.extend(f"- {_describe(entry)}" for entry in request.weeklyPerformance)
    if request.weakTopics:
        lines.append(f"Weak topics: {', '.join(request.weakTopics)}")
    if request.budgetBalance is not None:
        lines.append(f"Budget balance: {request.budgetBalance:.2f}")

    return "Suggest study tips for this student:\n" + "\n".join(lines)


def parse_tips(text: str) -> List[str]:
    """Split model output into tips, dropping enumeration markers and blank lines"""
    tips = []
    for line in (text or "").splitlines():
        tip = _ENUMERATION_RE.sub("", line, count=1).strip()
        if tip:
            tips.append(tip)
    return tips


def _is_quota_error(error: Exception) -> bool:
    if isinstance(error, openai.RateLimitError):
        return True
    if isinstance(error, openai.APIStatusError):
        return error.status_code == 429 or getattr(error, "code", None) == "insufficient_quota"
    return False


def generate_study_tips(request: SuggestionRequest) -> List[str]:
    """
    Ask the language model for study tips

    Args:
        request: Weekly snapshot of classes, tasks, exams and weak topics

    Returns:
        List of tips

    Raises:
        UpstreamQuotaError: the provider rejected the call for quota or rate limits
        SuggestionError: any other upstream failure or an empty reply
    """
    client = get_openai_client()
    user_prompt = build_prompt(request)

    StructuredLogger.log_event(
        "ai_suggestion_start",
        "Generating study tips",
        metadata={"model": settings.OPENAI_MODEL, "weak_topics": len(request.weakTopics)},
    )

    try:
        response = client.chat.completions.create(
            model=settings.OPENAI_MODEL,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            temperature=0.7,
            max_tokens=400,
        )
    except openai.OpenAIError as e:
        if _is_quota_error(e):
            StructuredLogger.log_event(
                "ai_suggestion_quota",
                f"AI provider quota exceeded: {str(e)}",
                level="WARNING",
            )
            raise UpstreamQuotaError("AI quota exceeded, please try again later") from e
        StructuredLogger.log_error(e, context={"function": "generate_study_tips"})
        raise SuggestionError("Failed to generate suggestions") from e

    content = response.choices[0].message.content if response.choices else None
    tips = parse_tips(content or "")
    if not tips:
        raise SuggestionError("AI returned no suggestions")

    StructuredLogger.log_event(
        "ai_suggestion_success",
        f"Generated {len(tips)} study tips",
        metadata={"tip_count": len(tips)},
    )
    return tips
