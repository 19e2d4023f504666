"""Class schedule API endpoints"""
from fastapi import APIRouter, HTTPException, Depends, status
from studykit.database import DocumentStore, get_store
from studykit.errors import ToolkitError
from studykit.models.resources import ClassSessionCreate
from studykit.services.resources import DocumentResource, class_resource
from studykit.utils.monitoring import StructuredLogger

router = APIRouter()


def get_classes(store: DocumentStore = Depends(get_store)) -> DocumentResource:
    return class_resource(store)


def _failure(e: Exception, function: str, action: str) -> HTTPException:
    StructuredLogger.log_error(e, context={"function": function})
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(e)}",
    )


@router.get("")
async def list_classes(classes: DocumentResource = Depends(get_classes)):
    """Get all classes"""
    try:
        return await classes.list()
    except ToolkitError:
        raise
    except Exception as e:
        raise _failure(e, "list_classes", "fetch classes")


@router.get("/{class_id}")
async def get_class(class_id: str, classes: DocumentResource = Depends(get_classes)):
    """Get a single class"""
    try:
        return await classes.get(class_id)
    except ToolkitError:
        raise
    except Exception as e:
        raise _failure(e, "get_class", "fetch class")


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_class(
    payload: ClassSessionCreate,
    classes: DocumentResource = Depends(get_classes),
):
    """Add a new class"""
    try:
        return await classes.create(payload.model_dump())
    except ToolkitError:
        raise
    except Exception as e:
        raise _failure(e, "add_class", "add class")


@router.put("/{class_id}")
async def update_class(
    class_id: str,
    payload: ClassSessionCreate,
    classes: DocumentResource = Depends(get_classes),
):
    """Update a class and return the new version"""
    try:
        return await classes.update(class_id, payload.model_dump())
    except ToolkitError:
        raise
    except Exception as e:
        raise _failure(e, "update_class", "update class")


@router.delete("/{class_id}")
async def delete_class(class_id: str, classes: DocumentResource = Depends(get_classes)):
    """Delete a class"""
    try:
        await classes.delete(class_id)
        return {"message": "Class deleted"}
    except ToolkitError:
        raise
    except Exception as e:
        raise _failure(e, "delete_class", "delete class")
