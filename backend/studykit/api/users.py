"""User profile API endpoints"""
from fastapi import APIRouter, HTTPException, Depends, status
from typing import List
from studykit.database import DocumentStore, get_store
from studykit.errors import ToolkitError
from studykit.models.resources import UserUpsert
from studykit.services.resources import UserService
from studykit.utils.monitoring import StructuredLogger

router = APIRouter()


def get_user_service(store: DocumentStore = Depends(get_store)) -> UserService:
    return UserService(store)


@router.post("")
async def save_user(
    user: UserUpsert,
    users: UserService = Depends(get_user_service),
):
    """Create or update a user profile, keyed by email"""
    try:
        result = await users.upsert(user)
        return {
            "success": True,
            "message": "User saved successfully",
            "data": result,
        }
    except ToolkitError:
        raise
    except Exception as e:
        StructuredLogger.log_error(e, context={"function": "save_user", "email": user.email})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save user: {str(e)}",
        )


@router.get("", response_model=List[dict])
async def list_users(users: UserService = Depends(get_user_service)):
    """Get all users"""
    return await users.list()
