"""Planner API endpoints"""
from fastapi import APIRouter, HTTPException, Depends, status
from fastapi.responses import JSONResponse
from typing import Dict, List
from studykit.database import DocumentStore, get_store
from studykit.errors import ToolkitError, ValidationError
from studykit.models.planner import (
    ImportResult,
    NotifyRequest,
    PlannerTask,
    PlannerTaskCreate,
    PlannerTaskUpdate,
    validate_planner_date,
)
from studykit.services.planner import PlannerService
from studykit.utils.monitoring import StructuredLogger

router = APIRouter()

EXPORT_FILENAME = "planner-export.json"


def get_planner_service(store: DocumentStore = Depends(get_store)) -> PlannerService:
    return PlannerService(store)


def _path_date(task_date: str) -> str:
    try:
        return validate_planner_date(task_date)
    except ValueError as e:
        raise ValidationError(str(e))


def _server_error(e: Exception, function: str, action: str) -> HTTPException:
    StructuredLogger.log_error(e, context={"function": function})
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(e)}",
    )


@router.get("", response_model=Dict[str, List[PlannerTask]])
async def list_planner_tasks(planner: PlannerService = Depends(get_planner_service)):
    """Get every planner day with its tasks"""
    try:
        return await planner.list_all()
    except ToolkitError:
        raise
    except Exception as e:
        raise _server_error(e, "list_planner_tasks", "fetch planner tasks")


@router.post("", response_model=PlannerTask, status_code=status.HTTP_201_CREATED)
async def add_planner_task(
    payload: PlannerTaskCreate,
    planner: PlannerService = Depends(get_planner_service),
):
    """Add a task to a date"""
    try:
        return await planner.add_task(payload)
    except ToolkitError:
        raise
    except Exception as e:
        raise _server_error(e, "add_planner_task", "add task")


@router.get("/export")
async def export_planner(planner: PlannerService = Depends(get_planner_service)):
    """Download the full planner as a JSON file"""
    try:
        state = await planner.export_tasks()
    except ToolkitError:
        raise
    except Exception as e:
        raise _server_error(e, "export_planner", "export planner")

    return JSONResponse(
        content=state,
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@router.post("/import", response_model=ImportResult)
async def import_planner(
    payload: Dict[str, List[PlannerTask]],
    planner: PlannerService = Depends(get_planner_service),
):
    """Replace the whole planner with the uploaded {date: tasks} mapping"""
    try:
        return await planner.import_tasks(payload)
    except ToolkitError:
        raise
    except Exception as e:
        raise _server_error(e, "import_planner", "import planner")


@router.post("/notify/{task_id}", response_model=PlannerTask)
async def notify_planner_task(
    task_id: int,
    payload: NotifyRequest,
    planner: PlannerService = Depends(get_planner_service),
):
    """Email a reminder for a task; each task is notified at most once"""
    try:
        return await planner.send_notification(payload.date, task_id, payload.email)
    except ToolkitError:
        raise
    except Exception as e:
        raise _server_error(e, "notify_planner_task", "send notification")


@router.put("/{task_date}/{task_id}", response_model=PlannerTask)
async def update_planner_task(
    task_date: str,
    task_id: int,
    update: PlannerTaskUpdate,
    planner: PlannerService = Depends(get_planner_service),
):
    """Toggle completion and/or move a task to another date"""
    try:
        return await planner.update_task(_path_date(task_date), task_id, update)
    except ToolkitError:
        raise
    except Exception as e:
        raise _server_error(e, "update_planner_task", "update task")


@router.delete("/{task_date}/{task_id}")
async def delete_planner_task(
    task_date: str,
    task_id: int,
    planner: PlannerService = Depends(get_planner_service),
):
    """Delete a task; deleting a missing task still succeeds"""
    try:
        removed = await planner.delete_task(_path_date(task_date), task_id)
        return {"success": True, "removed": removed, "message": "Task deleted"}
    except ToolkitError:
        raise
    except Exception as e:
        raise _server_error(e, "delete_planner_task", "delete task")
