"""Planner task store: date-keyed task lists with move, import, export and reminders"""
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

import pydantic
from fastapi.concurrency import run_in_threadpool
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from studykit.database import PLANNER, DocumentStore
from studykit.errors import (
    AlreadyNotifiedError,
    MailDeliveryError,
    NotFoundError,
    PlannerStepError,
    ValidationError,
    persistence_errors,
)
from studykit.models.planner import (
    ImportResult,
    PlannerTask,
    PlannerTaskCreate,
    PlannerTaskUpdate,
    generate_task_id,
    validate_planner_date,
)
from studykit.services.email import EmailService
from studykit.utils.monitoring import StructuredLogger


class MoveStep(str, Enum):
    INSERTED_AT_DESTINATION = "inserted_at_destination"
    REMOVED_FROM_SOURCE = "removed_from_source"


class ImportStep(str, Enum):
    CLEARED = "cleared"
    INSERTED = "inserted"


def _find_task(day: Optional[dict], task_id: int) -> Optional[dict]:
    for task in (day or {}).get("tasks") or []:
        if task.get("id") == task_id:
            return task
    return None


class PlannerService:
    """
    Planner operations over the monthlyPlannerTasks collection.

    Each planner day is one document `{date, tasks: [...]}`. Days whose tasks
    have all been removed keep an empty list, so export/import round-trips them.
    """

    def __init__(self, store: DocumentStore):
        self.collection = store.collection(PLANNER)

    async def list_all(self) -> Dict[str, List[dict]]:
        """Return every planner day as {date: tasks}, ordered by date"""
        with persistence_errors("fetch planner tasks"):
            days = await self.collection.find({}).to_list(length=None)

        planner: Dict[str, List[dict]] = {}
        for day in sorted(days, key=lambda d: d.get("date", "")):
            planner[day["date"]] = day.get("tasks") or []
        return planner

    async def export_tasks(self) -> Dict[str, List[dict]]:
        return await self.list_all()

    async def get_task(self, task_date: str, task_id: int) -> dict:
        with persistence_errors("fetch planner task"):
            day = await self.collection.find_one({"date": task_date})
        if day is None:
            raise NotFoundError(f"No planner entries for {task_date}")
        task = _find_task(day, task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    async def add_task(self, payload: PlannerTaskCreate) -> dict:
        """Append a new task to its date, creating the planner day if needed"""
        task = PlannerTask(
            subject=payload.subject,
            priority=payload.priority,
            notes=payload.notes,
        ).to_document()

        with persistence_errors("add planner task"):
            await self.collection.update_one(
                {"date": payload.date},
                {"$push": {"tasks": task}},
                upsert=True,
            )

        StructuredLogger.log_planner_event(
            "planner_task_added",
            f"Added task {task['id']} on {payload.date}",
            task_date=payload.date,
            task_id=task["id"],
        )
        return task

    async def set_completed(self, task_date: str, task_id: int, completed: bool) -> dict:
        with persistence_errors("update planner task"):
            day = await self.collection.find_one_and_update(
                {"date": task_date, "tasks.id": task_id},
                {"$set": {"tasks.$.completed": completed}},
                return_document=ReturnDocument.AFTER,
            )
        task = _find_task(day, task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    async def update_task(self, task_date: str, task_id: int, update: PlannerTaskUpdate) -> dict:
        """Move and/or toggle completion; with nothing to change returns the task"""
        if update.newDate is not None and update.newDate != task_date:
            moved = await self.move_task(task_date, task_id, update.newDate)
            task_id = moved["id"]
            task_date = update.newDate
        if update.completed is not None:
            return await self.set_completed(task_date, task_id, update.completed)
        return await self.get_task(task_date, task_id)

    async def _run_step(self, operation: str, step: Enum, completed: List[str], action) -> Any:
        try:
            result = await action
        except PyMongoError as e:
            StructuredLogger.log_error(
                e,
                context={"operation": operation, "step": step.value, "completed_steps": completed},
            )
            raise PlannerStepError(operation, step.value, completed) from e
        completed.append(step.value)
        return result

    async def move_task(self, task_date: str, task_id: int, new_date: str) -> dict:
        """
        Move a task to another date.

        The destination insert runs before the source removal, so an
        interruption between the two leaves a duplicate rather than losing
        the task. A failed step raises PlannerStepError listing what completed.
        When the destination already holds a task with the same id, the moved
        task is given a fresh id so ids stay unique within the day.
        """
        task = await self.get_task(task_date, task_id)
        if new_date == task_date:
            return task

        with persistence_errors("fetch planner day"):
            destination = await self.collection.find_one({"date": new_date})
        taken = {t.get("id") for t in (destination or {}).get("tasks") or []}
        if task_id in taken:
            new_id = generate_task_id()
            while new_id in taken:
                new_id = generate_task_id()
            task = {**task, "id": new_id}

        completed: List[str] = []
        await self._run_step(
            "move",
            MoveStep.INSERTED_AT_DESTINATION,
            completed,
            self.collection.update_one(
                {"date": new_date},
                {"$push": {"tasks": task}},
                upsert=True,
            ),
        )
        await self._run_step(
            "move",
            MoveStep.REMOVED_FROM_SOURCE,
            completed,
            self.collection.update_one(
                {"date": task_date},
                {"$pull": {"tasks": {"id": task_id}}},
            ),
        )

        StructuredLogger.log_planner_event(
            "planner_task_moved",
            f"Moved task {task_id} from {task_date} to {new_date}",
            task_date=new_date,
            task_id=task["id"],
            metadata={"from": task_date, "previous_id": task_id},
        )
        return task

    async def delete_task(self, task_date: str, task_id: int) -> bool:
        """Remove a task; deleting something already gone still succeeds"""
        with persistence_errors("delete planner task"):
            result = await self.collection.update_one(
                {"date": task_date},
                {"$pull": {"tasks": {"id": task_id}}},
            )
        return bool(result.modified_count)

    @staticmethod
    def _validate_import(state: Mapping[str, List[Any]]) -> List[dict]:
        documents = []
        id_dates: Dict[int, str] = {}
        for raw_date, raw_tasks in state.items():
            try:
                task_date = validate_planner_date(raw_date)
            except ValueError as e:
                raise ValidationError(str(e))
            if raw_tasks is None:
                raw_tasks = []
            if not isinstance(raw_tasks, list):
                raise ValidationError(f"Tasks for {task_date} must be a list")

            tasks = []
            for raw_task in raw_tasks:
                try:
                    task = raw_task if isinstance(raw_task, PlannerTask) else PlannerTask.model_validate(raw_task)
                except pydantic.ValidationError as e:
                    raise ValidationError(f"Invalid task on {task_date}: {e.errors()[0]['msg']}")
                if task.id in id_dates:
                    first_date = id_dates[task.id]
                    where = task_date if first_date == task_date else f"{first_date} and {task_date}"
                    raise ValidationError(f"Duplicate task id {task.id} on {where}")
                id_dates[task.id] = task_date
                tasks.append(task.to_document())
            documents.append({"date": task_date, "tasks": tasks})

        documents.sort(key=lambda d: d["date"])
        return documents

    async def import_tasks(self, state: Mapping[str, List[Any]]) -> ImportResult:
        """
        Replace the whole planner with the given {date: tasks} mapping.

        The payload is validated before anything is written. The clear and
        insert steps are not atomic; a failure raises PlannerStepError.
        """
        documents = self._validate_import(state)

        completed: List[str] = []
        cleared = await self._run_step(
            "import", ImportStep.CLEARED, completed, self.collection.delete_many({})
        )
        if documents:
            await self._run_step(
                "import", ImportStep.INSERTED, completed, self.collection.insert_many(documents)
            )
        else:
            completed.append(ImportStep.INSERTED.value)

        result = ImportResult(
            deleted=cleared.deleted_count,
            inserted=len(documents),
            dates=len(documents),
            tasks=sum(len(d["tasks"]) for d in documents),
        )
        StructuredLogger.log_event(
            "planner_imported",
            f"Imported {result.tasks} tasks across {result.dates} dates",
            metadata=result.model_dump(),
        )
        return result

    async def send_notification(self, task_date: str, task_id: int, email: Optional[str] = None) -> dict:
        """
        Email a reminder for a task and mark it notified.

        The notified flag is claimed with a conditional update before sending,
        so two concurrent requests cannot both send. If delivery fails the
        claim is released and MailDeliveryError is raised.
        """
        task = await self.get_task(task_date, task_id)
        if task.get("notified"):
            raise AlreadyNotifiedError("Notification already sent for this task")

        recipient = email or EmailService.default_recipient()
        if not recipient:
            raise ValidationError("No recipient email provided")

        with persistence_errors("claim task notification"):
            claimed = await self.collection.find_one_and_update(
                {"date": task_date, "tasks": {"$elemMatch": {"id": task_id, "notified": False}}},
                {"$set": {"tasks.$.notified": True}},
                return_document=ReturnDocument.AFTER,
            )
        if claimed is None:
            raise AlreadyNotifiedError("Notification already sent for this task")

        sent = await run_in_threadpool(
            EmailService.send_task_reminder_email,
            recipient,
            task_date,
            task["subject"],
            task.get("priority", "Medium"),
            task.get("notes"),
        )
        if not sent:
            with persistence_errors("release task notification"):
                await self.collection.update_one(
                    {"date": task_date, "tasks.id": task_id},
                    {"$set": {"tasks.$.notified": False}},
                )
            raise MailDeliveryError("Failed to send notification email")

        StructuredLogger.log_planner_event(
            "planner_notification_sent",
            f"Reminder sent for task {task_id} on {task_date}",
            task_date=task_date,
            task_id=task_id,
            metadata={"to_email": recipient},
        )
        return _find_task(claimed, task_id)
