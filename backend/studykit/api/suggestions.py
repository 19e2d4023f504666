"""AI study suggestion API endpoints"""
from fastapi import APIRouter, HTTPException, status
from studykit.errors import ToolkitError
from studykit.models.suggestion import SuggestionRequest, SuggestionResponse
from studykit.services.suggestions import generate_study_tips
from studykit.utils.monitoring import StructuredLogger

router = APIRouter()


@router.post("/suggest", response_model=SuggestionResponse)
def suggest_study_tips(request: SuggestionRequest):
    """Generate study tips from the student's weekly snapshot"""
    # Sync handler: FastAPI runs it in the threadpool while the OpenAI call blocks
    try:
        return SuggestionResponse(tips=generate_study_tips(request))
    except ToolkitError:
        raise
    except Exception as e:
        StructuredLogger.log_error(e, context={"function": "suggest_study_tips"})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate suggestions: {str(e)}",
        )
