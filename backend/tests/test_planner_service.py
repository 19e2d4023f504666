"""Tests for the planner task store"""
import pytest
from unittest.mock import patch
from pymongo.errors import PyMongoError

from studykit.database import PLANNER
from studykit.errors import (
    AlreadyNotifiedError,
    MailDeliveryError,
    NotFoundError,
    PlannerStepError,
    ValidationError,
)
from studykit.models.planner import PlannerTaskCreate, PlannerTaskUpdate, Priority

SEND_REMINDER = "studykit.services.planner.EmailService.send_task_reminder_email"


async def _add(planner, date="2025-09-01", subject="Read chapter 3", **kwargs):
    return await planner.add_task(PlannerTaskCreate(date=date, subject=subject, **kwargs))


async def _planner_days(store):
    return await store.collection(PLANNER).find({}).to_list(length=None)


class FailingPullCollection:
    """Delegates to a real collection but fails every $pull update"""

    def __init__(self, collection):
        self._collection = collection

    def __getattr__(self, name):
        return getattr(self._collection, name)

    async def update_one(self, query, update, upsert=False):
        if "$pull" in update:
            raise PyMongoError("connection reset")
        return await self._collection.update_one(query, update, upsert=upsert)


@pytest.mark.asyncio
async def test_add_task_creates_singleton_day(planner, store):
    """First task on a date creates exactly one planner day"""
    task = await _add(planner)

    days = await _planner_days(store)
    assert len(days) == 1
    assert days[0]["date"] == "2025-09-01"
    assert days[0]["tasks"] == [task]
    assert task["completed"] is False
    assert task["notified"] is False
    assert task["priority"] == "Medium"


@pytest.mark.asyncio
async def test_add_task_appends_to_existing_day(planner, store):
    first = await _add(planner, subject="Lab report")
    second = await _add(planner, subject="Flashcards", priority=Priority.HIGH, notes="Bio")

    days = await _planner_days(store)
    assert len(days) == 1
    assert [t["id"] for t in days[0]["tasks"]] == [first["id"], second["id"]]
    assert second["priority"] == "High"
    assert second["notes"] == "Bio"
    assert first["id"] != second["id"]


def test_add_task_requires_date_and_subject():
    with pytest.raises(ValueError):
        PlannerTaskCreate(date="2025-09-01", subject="   ")
    with pytest.raises(ValueError):
        PlannerTaskCreate(date="", subject="Essay")
    with pytest.raises(ValueError):
        PlannerTaskCreate(date="2025-13-01", subject="Essay")


@pytest.mark.asyncio
async def test_list_all_groups_by_date(planner):
    await _add(planner, date="2025-09-02", subject="B")
    await _add(planner, date="2025-09-01", subject="A")

    state = await planner.list_all()
    assert list(state.keys()) == ["2025-09-01", "2025-09-02"]
    assert state["2025-09-01"][0]["subject"] == "A"


@pytest.mark.asyncio
async def test_list_all_empty_store(planner):
    assert await planner.list_all() == {}


@pytest.mark.asyncio
async def test_toggle_completed_is_idempotent(planner):
    task = await _add(planner)

    updated = await planner.set_completed("2025-09-01", task["id"], True)
    assert updated["completed"] is True
    again = await planner.set_completed("2025-09-01", task["id"], True)
    assert again["completed"] is True
    assert (await planner.get_task("2025-09-01", task["id"]))["completed"] is True


@pytest.mark.asyncio
async def test_toggle_missing_task_raises_not_found(planner):
    task = await _add(planner)

    with pytest.raises(NotFoundError):
        await planner.set_completed("2025-09-01", task["id"] + 1, True)
    with pytest.raises(NotFoundError):
        await planner.set_completed("2030-01-01", task["id"], True)


@pytest.mark.asyncio
async def test_move_task_preserves_fields(planner):
    task = await _add(planner, priority=Priority.LOW, notes="pages 10-20")
    await _add(planner, subject="Stays behind")

    moved = await planner.move_task("2025-09-01", task["id"], "2025-09-05")

    state = await planner.list_all()
    assert task["id"] not in [t["id"] for t in state["2025-09-01"]]
    assert state["2025-09-05"] == [moved]
    assert moved == task


@pytest.mark.asyncio
async def test_move_appends_to_existing_destination(planner):
    existing = await _add(planner, date="2025-09-05", subject="Already there")
    task = await _add(planner)

    await planner.move_task("2025-09-01", task["id"], "2025-09-05")

    state = await planner.list_all()
    assert [t["id"] for t in state["2025-09-05"]] == [existing["id"], task["id"]]
    assert state["2025-09-01"] == []


@pytest.mark.asyncio
async def test_move_to_same_date_is_noop(planner):
    task = await _add(planner)

    await planner.move_task("2025-09-01", task["id"], "2025-09-01")

    assert await planner.list_all() == {"2025-09-01": [task]}


@pytest.mark.asyncio
async def test_move_missing_task_raises_not_found(planner):
    with pytest.raises(NotFoundError):
        await planner.move_task("2025-09-01", 42, "2025-09-02")


@pytest.mark.asyncio
async def test_move_onto_day_holding_same_id_assigns_new_id(planner, store):
    """Days stored before ids were checked across dates can share an id"""
    await store.collection(PLANNER).insert_many([
        {"date": "2025-09-01", "tasks": [{"id": 1, "subject": "Math", "priority": "Medium",
                                          "notes": None, "completed": False, "notified": False}]},
        {"date": "2025-09-02", "tasks": [{"id": 1, "subject": "Physics", "priority": "Medium",
                                          "notes": None, "completed": False, "notified": False}]},
    ])

    moved = await planner.move_task("2025-09-01", 1, "2025-09-02")

    assert moved["id"] != 1
    assert moved["subject"] == "Math"
    state = await planner.list_all()
    assert state["2025-09-01"] == []
    assert [(t["id"], t["subject"]) for t in state["2025-09-02"]] == [(1, "Physics"), (moved["id"], "Math")]

    assert await planner.delete_task("2025-09-02", 1) is True
    assert (await planner.list_all())["2025-09-02"] == [moved]


@pytest.mark.asyncio
async def test_update_task_toggles_renumbered_task_after_move(planner, store):
    await store.collection(PLANNER).insert_many([
        {"date": "2025-09-01", "tasks": [{"id": 5, "subject": "Essay", "priority": "High",
                                          "notes": None, "completed": False, "notified": False}]},
        {"date": "2025-09-08", "tasks": [{"id": 5, "subject": "Lab", "priority": "Low",
                                          "notes": None, "completed": False, "notified": False}]},
    ])

    updated = await planner.update_task("2025-09-01", 5, PlannerTaskUpdate(completed=True, newDate="2025-09-08"))

    assert updated["subject"] == "Essay"
    assert updated["completed"] is True
    lab = await planner.get_task("2025-09-08", 5)
    assert lab["subject"] == "Lab"
    assert lab["completed"] is False


@pytest.mark.asyncio
async def test_move_reports_completed_steps_on_failure(planner, monkeypatch):
    """A failed source removal leaves the copy at the destination and says so"""
    task = await _add(planner)
    monkeypatch.setattr(planner, "collection", FailingPullCollection(planner.collection))

    with pytest.raises(PlannerStepError) as exc_info:
        await planner.move_task("2025-09-01", task["id"], "2025-09-03")

    assert exc_info.value.completed_steps == ["inserted_at_destination"]
    assert exc_info.value.failed_step == "removed_from_source"
    state = await planner.list_all()
    assert state["2025-09-03"] == [task]
    assert state["2025-09-01"] == [task]


@pytest.mark.asyncio
async def test_update_task_moves_then_toggles(planner):
    task = await _add(planner)

    updated = await planner.update_task(
        "2025-09-01", task["id"], PlannerTaskUpdate(completed=True, newDate="2025-09-10")
    )

    assert updated["completed"] is True
    state = await planner.list_all()
    assert state["2025-09-10"][0]["id"] == task["id"]
    assert state["2025-09-01"] == []


@pytest.mark.asyncio
async def test_delete_twice_is_idempotent(planner):
    task = await _add(planner)
    other = await _add(planner, subject="Keep me")

    assert await planner.delete_task("2025-09-01", task["id"]) is True
    state_after_first = await planner.list_all()
    assert await planner.delete_task("2025-09-01", task["id"]) is False
    assert await planner.list_all() == state_after_first == {"2025-09-01": [other]}


@pytest.mark.asyncio
async def test_delete_last_task_keeps_empty_day(planner):
    task = await _add(planner)

    await planner.delete_task("2025-09-01", task["id"])

    assert await planner.list_all() == {"2025-09-01": []}


@pytest.mark.asyncio
async def test_delete_on_unknown_date_succeeds(planner):
    assert await planner.delete_task("2031-01-01", 1) is False
    assert await planner.list_all() == {}


@pytest.mark.asyncio
async def test_import_replaces_state(planner):
    await _add(planner, date="2025-08-30", subject="Old task")
    payload = {
        "2025-09-01": [{"id": 7, "subject": "Essay draft", "priority": "High"}],
        "2025-09-02": [],
    }

    result = await planner.import_tasks(payload)

    assert result.deleted == 1
    assert result.inserted == 2
    assert result.tasks == 1
    state = await planner.export_tasks()
    assert set(state.keys()) == {"2025-09-01", "2025-09-02"}
    assert state["2025-09-02"] == []
    assert state["2025-09-01"] == [{
        "id": 7,
        "subject": "Essay draft",
        "priority": "High",
        "notes": None,
        "completed": False,
        "notified": False,
    }]


@pytest.mark.asyncio
async def test_import_of_export_round_trips(planner):
    first = await _add(planner, notes="ch. 4")
    await _add(planner, date="2025-09-04", subject="Quiz prep")
    await planner.set_completed("2025-09-01", first["id"], True)
    await planner.delete_task("2025-09-04", (await planner.list_all())["2025-09-04"][0]["id"])

    exported = await planner.export_tasks()
    await planner.import_tasks(exported)

    assert await planner.export_tasks() == exported


@pytest.mark.asyncio
async def test_import_generates_missing_ids(planner):
    await planner.import_tasks({"2025-09-01": [{"subject": "A"}, {"subject": "B"}]})

    tasks = (await planner.list_all())["2025-09-01"]
    assert len({t["id"] for t in tasks}) == 2


@pytest.mark.asyncio
async def test_invalid_import_leaves_state_untouched(planner):
    task = await _add(planner)

    with pytest.raises(ValidationError):
        await planner.import_tasks({"not-a-date": []})
    with pytest.raises(ValidationError):
        await planner.import_tasks({"2025-09-02": [{"subject": ""}]})
    with pytest.raises(ValidationError):
        await planner.import_tasks({"2025-09-02": [{"id": 1, "subject": "A"}, {"id": 1, "subject": "B"}]})
    with pytest.raises(ValidationError):
        await planner.import_tasks({
            "2025-09-02": [{"id": 1, "subject": "A"}],
            "2025-09-03": [{"id": 1, "subject": "B"}],
        })

    assert await planner.list_all() == {"2025-09-01": [task]}


@pytest.mark.asyncio
async def test_notify_twice_raises_already_notified(planner):
    task = await _add(planner)

    with patch(SEND_REMINDER, return_value=True) as mock_send:
        notified = await planner.send_notification("2025-09-01", task["id"], "student@example.com")
        assert notified["notified"] is True

        with pytest.raises(AlreadyNotifiedError):
            await planner.send_notification("2025-09-01", task["id"], "student@example.com")

    assert mock_send.call_count == 1
    args = mock_send.call_args.args
    assert args[0] == "student@example.com"
    assert args[2] == "Read chapter 3"
    assert (await planner.get_task("2025-09-01", task["id"]))["notified"] is True


@pytest.mark.asyncio
async def test_notify_missing_task_or_date(planner):
    task = await _add(planner)

    with patch(SEND_REMINDER, return_value=True) as mock_send:
        with pytest.raises(NotFoundError):
            await planner.send_notification("2025-10-01", task["id"], "student@example.com")
        with pytest.raises(NotFoundError):
            await planner.send_notification("2025-09-01", task["id"] + 1, "student@example.com")

    mock_send.assert_not_called()


@pytest.mark.asyncio
async def test_notify_delivery_failure_releases_claim(planner):
    task = await _add(planner)

    with patch(SEND_REMINDER, return_value=False):
        with pytest.raises(MailDeliveryError):
            await planner.send_notification("2025-09-01", task["id"], "student@example.com")

    assert (await planner.get_task("2025-09-01", task["id"]))["notified"] is False

    with patch(SEND_REMINDER, return_value=True):
        notified = await planner.send_notification("2025-09-01", task["id"], "student@example.com")
    assert notified["notified"] is True


@pytest.mark.asyncio
async def test_notify_without_recipient(planner):
    task = await _add(planner)

    with patch("studykit.services.planner.EmailService.default_recipient", return_value=None):
        with pytest.raises(ValidationError):
            await planner.send_notification("2025-09-01", task["id"])

    assert (await planner.get_task("2025-09-01", task["id"]))["notified"] is False


@pytest.mark.asyncio
async def test_notify_missing_task_without_recipient_is_not_found(planner):
    with patch("studykit.services.planner.EmailService.default_recipient", return_value=None), \
            patch(SEND_REMINDER, return_value=True) as mock_send:
        with pytest.raises(NotFoundError):
            await planner.send_notification("2025-09-01", 99)

    mock_send.assert_not_called()


@pytest.mark.asyncio
async def test_rejected_import_is_not_logged_as_error(planner):
    with patch("studykit.utils.monitoring.StructuredLogger.log_error") as mock_log_error:
        with pytest.raises(ValidationError):
            await planner.import_tasks({"2025-09-01": [{"id": 1, "subject": ""}]})

    mock_log_error.assert_not_called()


@pytest.mark.asyncio
async def test_planner_events_carry_date_and_task_id(planner):
    with patch("studykit.utils.monitoring.StructuredLogger.log_event") as mock_log_event:
        task = await _add(planner, date="2025-09-04")

    kwargs = mock_log_event.call_args.kwargs
    assert mock_log_event.call_args.args[0] == "planner_task_added"
    assert kwargs["metadata"] == {"date": "2025-09-04", "task_id": task["id"]}
