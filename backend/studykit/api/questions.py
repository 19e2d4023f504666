"""Quiz question bank API endpoints"""
from fastapi import APIRouter, HTTPException, Depends, Query, status
from typing import Optional
from studykit.database import DocumentStore, get_store
from studykit.errors import ToolkitError
from studykit.models.resources import QuizQuestionCreate
from studykit.services.resources import DocumentResource, question_resource
from studykit.utils.monitoring import StructuredLogger

router = APIRouter()


def get_questions(store: DocumentStore = Depends(get_store)) -> DocumentResource:
    return question_resource(store)


@router.get("")
async def list_questions(
    subject: Optional[str] = Query(None, description="Only questions for this subject"),
    questions: DocumentResource = Depends(get_questions),
):
    """Get the question bank"""
    try:
        return await questions.list({"subject": subject} if subject else None)
    except ToolkitError:
        raise
    except Exception as e:
        StructuredLogger.log_error(e, context={"function": "list_questions"})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch questions: {str(e)}",
        )


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_question(
    payload: QuizQuestionCreate,
    questions: DocumentResource = Depends(get_questions),
):
    """Add a question to the bank"""
    try:
        return await questions.create(payload.model_dump(mode="json"))
    except ToolkitError:
        raise
    except Exception as e:
        StructuredLogger.log_error(e, context={"function": "add_question"})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to add question: {str(e)}",
        )


@router.delete("/{question_id}")
async def delete_question(
    question_id: str,
    questions: DocumentResource = Depends(get_questions),
):
    """Delete a question"""
    try:
        await questions.delete(question_id)
        return {"message": "Question deleted"}
    except ToolkitError:
        raise
    except Exception as e:
        StructuredLogger.log_error(e, context={"function": "delete_question"})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete question: {str(e)}",
        )
