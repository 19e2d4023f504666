"""Dashboard feed API endpoints"""
from fastapi import APIRouter, HTTPException, Depends, Body, status
from typing import Any, Dict
from studykit.database import DocumentStore, get_store
from studykit.errors import ToolkitError
from studykit.services.resources import DocumentResource, dashboard_resource
from studykit.utils.monitoring import StructuredLogger

router = APIRouter()


def get_dashboard(store: DocumentStore = Depends(get_store)) -> DocumentResource:
    return dashboard_resource(store)


@router.post("")
async def add_dashboard_item(
    item: Dict[str, Any] = Body(...),
    dashboard: DocumentResource = Depends(get_dashboard),
):
    """Add a dashboard item"""
    try:
        created = await dashboard.create(item)
        return {
            "success": True,
            "message": "Dashboard item added",
            "data": created,
        }
    except ToolkitError:
        raise
    except Exception as e:
        StructuredLogger.log_error(e, context={"function": "add_dashboard_item"})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to add dashboard item: {str(e)}",
        )


@router.get("")
async def list_dashboard_items(dashboard: DocumentResource = Depends(get_dashboard)):
    """Get all dashboard items"""
    try:
        return await dashboard.list()
    except ToolkitError:
        raise
    except Exception as e:
        StructuredLogger.log_error(e, context={"function": "list_dashboard_items"})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch dashboard items: {str(e)}",
        )
