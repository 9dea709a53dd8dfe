"""Tests for task mutations: history diffs, direct notifications, audit events."""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from app.core.exceptions import ForbiddenError, NotFoundError
from app.models.comment import Comment
from app.models.history import History, HistoryAction
from app.models.notification import Notification, NotificationType
from app.models.system_event import SystemEvent, SystemEventType
from app.models.task import Task, TaskPriority, TaskStatus
from app.schemas.task import TaskCreate, TaskUpdate
from app.services.event_service import event_recorder
from app.services.task_service import diff_history, normalize_value, task_service


def _update_from(task_obj: Task, **changes) -> TaskUpdate:
    payload = {
        "title": task_obj.title,
        "description": task_obj.description,
        "status": task_obj.status,
        "priority": task_obj.priority,
        "project_id": task_obj.project_id,
        "assigned_to_id": task_obj.assigned_to_id,
        "due_date": task_obj.due_date,
        "estimated_hours": task_obj.estimated_hours,
    }
    payload.update(changes)
    return TaskUpdate(**payload)


async def _create(db_session, test_project, actor, **fields):
    data = TaskCreate(project_id=test_project.id, title=fields.pop("title", "Write docs"), **fields)
    created = await task_service.create_task(db_session, data, actor)
    await event_recorder.drain()
    return created


def test_normalize_value():
    assert normalize_value(None) == ""
    assert normalize_value(TaskStatus.COMPLETED) == "COMPLETED"
    naive = datetime(2026, 1, 2, 3, 4, 5)
    aware = datetime(2026, 1, 2, 5, 4, 5, tzinfo=timezone(timedelta(hours=2)))
    assert normalize_value(naive) == normalize_value(aware)


def test_diff_history_counts_only_changed_tracked_fields():
    old = {"status": TaskStatus.PENDING, "title": "A", "priority": TaskPriority.LOW, "assigned_to_id": None, "due_date": None}
    new = dict(old, status=TaskStatus.IN_PROGRESS, title="B")

    entries = diff_history(1, None, old, new)

    assert [entry["action"] for entry in entries] == [HistoryAction.STATUS_CHANGED, HistoryAction.TITLE_CHANGED]
    assert entries[0]["old_value"] == "PENDING"
    assert entries[0]["new_value"] == "IN_PROGRESS"
    assert diff_history(1, None, old, dict(old)) == []


@pytest.mark.asyncio
async def test_create_task_with_assignee(db_session, test_project, test_user, other_user, admin_user, fetch_rows):
    """Creating an assigned task writes history, notifies the assignee and records an event."""
    created = await _create(db_session, test_project, test_user, assigned_to_id=other_user.id)

    history = await fetch_rows(History, task_id=created.id)
    assert len(history) == 1
    assert history[0].action == HistoryAction.CREATED
    assert history[0].old_value == ""
    assert history[0].new_value == "Write docs"

    assigned = await fetch_rows(Notification, user_id=other_user.id)
    assert [n.type for n in assigned] == [NotificationType.TASK_ASSIGNED]

    events = await fetch_rows(SystemEvent, task_id=created.id)
    assert len(events) == 1
    assert events[0].type == SystemEventType.TASK_CREATED
    assert events[0].processed is True
    assert events[0].processed_at is not None

    admin_rows = await fetch_rows(Notification, user_id=admin_user.id)
    assert [n.type for n in admin_rows] == [NotificationType.TASK_CREATED]


@pytest.mark.asyncio
async def test_create_task_unknown_project(db_session, test_user, fetch_rows):
    with pytest.raises(NotFoundError):
        await task_service.create_task(db_session, TaskCreate(project_id=999, title="Orphan"), test_user)
    await event_recorder.drain()
    assert await fetch_rows(Task) == []
    assert await fetch_rows(SystemEvent) == []


@pytest.mark.asyncio
async def test_complete_task_notifies_assignee(db_session, test_project, test_user, other_user, fetch_rows):
    created = await _create(db_session, test_project, test_user, assigned_to_id=other_user.id)

    await task_service.update_task(
        db_session, created.id, _update_from(created, status=TaskStatus.COMPLETED), test_user
    )
    await event_recorder.drain()

    history = await fetch_rows(History, task_id=created.id)
    changes = [h for h in history if h.action != HistoryAction.CREATED]
    assert len(changes) == 1
    assert changes[0].action == HistoryAction.STATUS_CHANGED
    assert changes[0].old_value == "PENDING"
    assert changes[0].new_value == "COMPLETED"

    completed = await fetch_rows(Notification, user_id=other_user.id, type=NotificationType.TASK_COMPLETED)
    assert len(completed) == 1

    # Saving the completed task again changes nothing.
    again = await task_service.update_task(db_session, created.id, _update_from(created), test_user)
    await event_recorder.drain()
    assert again.status == TaskStatus.COMPLETED
    assert len(await fetch_rows(Notification, user_id=other_user.id, type=NotificationType.TASK_COMPLETED)) == 1
    assert len(await fetch_rows(History, task_id=created.id)) == 2


@pytest.mark.asyncio
async def test_update_without_tracked_changes_writes_no_history(db_session, test_project, test_user, fetch_rows):
    created = await _create(db_session, test_project, test_user, due_date=datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc))

    await task_service.update_task(
        db_session,
        created.id,
        _update_from(created, description="More words", estimated_hours=3, actual_hours=1.5),
        test_user,
    )
    await event_recorder.drain()

    history = await fetch_rows(History, task_id=created.id)
    assert [h.action for h in history] == [HistoryAction.CREATED]
    events = await fetch_rows(SystemEvent, type=SystemEventType.TASK_UPDATED)
    assert len(events) == 1


@pytest.mark.asyncio
async def test_update_several_fields(db_session, test_project, test_user, other_user, fetch_rows):
    created = await _create(db_session, test_project, test_user)
    due = datetime(2026, 12, 24, 18, 0, tzinfo=timezone.utc)

    await task_service.update_task(
        db_session,
        created.id,
        _update_from(
            created,
            title="Write better docs",
            priority=TaskPriority.CRITICAL,
            assigned_to_id=other_user.id,
            due_date=due,
        ),
        test_user,
    )
    await event_recorder.drain()

    actions = {h.action for h in await fetch_rows(History, task_id=created.id)}
    assert actions == {
        HistoryAction.CREATED,
        HistoryAction.TITLE_CHANGED,
        HistoryAction.PRIORITY_CHANGED,
        HistoryAction.ASSIGNED,
        HistoryAction.DUE_DATE_CHANGED,
    }
    assigned = await fetch_rows(Notification, user_id=other_user.id)
    assert [n.type for n in assigned] == [NotificationType.TASK_ASSIGNED]


@pytest.mark.asyncio
async def test_reassign_and_unassign(db_session, test_project, test_user, other_user, admin_user, fetch_rows):
    created = await _create(db_session, test_project, test_user, assigned_to_id=other_user.id)

    await task_service.update_task(
        db_session, created.id, _update_from(created, assigned_to_id=admin_user.id), test_user
    )
    await event_recorder.drain()
    to_admin = await fetch_rows(Notification, user_id=admin_user.id, type=NotificationType.TASK_ASSIGNED)
    assert len(to_admin) == 1

    await task_service.update_task(db_session, created.id, _update_from(created, assigned_to_id=None), test_user)
    await event_recorder.drain()

    assert len(await fetch_rows(Notification, type=NotificationType.TASK_ASSIGNED)) == 2
    assigned_history = await fetch_rows(History, task_id=created.id, action=HistoryAction.ASSIGNED)
    assert assigned_history[-1].old_value == str(admin_user.id)
    assert assigned_history[-1].new_value == ""


@pytest.mark.asyncio
async def test_update_by_non_creator_is_forbidden(db_session, test_project, test_user, other_user, fetch_rows):
    created = await _create(db_session, test_project, test_user)
    task_id = created.id

    with pytest.raises(ForbiddenError):
        await task_service.update_task(db_session, task_id, _update_from(created, title="Hijacked"), other_user)
    await event_recorder.drain()

    assert (await fetch_rows(Task))[0].title == "Write docs"
    assert len(await fetch_rows(History, task_id=task_id)) == 1
    assert await fetch_rows(SystemEvent, type=SystemEventType.TASK_UPDATED) == []


@pytest.mark.asyncio
async def test_update_missing_task(db_session, test_project, test_user):
    data = TaskUpdate(project_id=test_project.id, title="Nope")
    with pytest.raises(NotFoundError):
        await task_service.update_task(db_session, 12345, data, test_user)


@pytest.mark.asyncio
async def test_delete_by_non_creator_has_no_side_effects(db_session, test_project, test_user, other_user, fetch_rows):
    created = await _create(db_session, test_project, test_user)
    task_id = created.id

    with pytest.raises(ForbiddenError):
        await task_service.delete_task(db_session, task_id, other_user)
    await event_recorder.drain()

    assert len(await fetch_rows(Task)) == 1
    assert len(await fetch_rows(History, task_id=task_id)) == 1
    assert await fetch_rows(SystemEvent, type=SystemEventType.TASK_DELETED) == []


@pytest.mark.asyncio
async def test_delete_task_cascades(db_session, test_project, test_user, fetch_rows):
    created = await _create(db_session, test_project, test_user)
    db_session.add(Comment(text="first", task_id=created.id, user_id=test_user.id))
    await db_session.commit()

    result = await task_service.delete_task(db_session, created.id, test_user)
    await event_recorder.drain()

    assert result["id"] == created.id
    assert await fetch_rows(Task) == []
    assert await fetch_rows(Comment) == []
    assert await fetch_rows(History) == []

    events = await fetch_rows(SystemEvent, type=SystemEventType.TASK_DELETED)
    assert len(events) == 1
    assert events[0].task_id == created.id
    assert events[0].project_id == test_project.id


@pytest.mark.asyncio
async def test_failed_notification_rolls_back_update(db_session, test_project, test_user, other_user, monkeypatch, session_factory):
    """A failure after the row update undoes the whole mutation."""
    created = await _create(db_session, test_project, test_user)
    task_id = created.id

    from app.crud.notification import notification as notification_crud

    async def broken_create(*args, **kwargs):
        raise RuntimeError("insert failed")

    monkeypatch.setattr(notification_crud, "create", broken_create)

    with pytest.raises(RuntimeError):
        await task_service.update_task(
            db_session,
            created.id,
            _update_from(created, title="Renamed", assigned_to_id=other_user.id),
            test_user,
        )
    await event_recorder.drain()

    async with session_factory() as db:
        count = await db.scalar(select(func.count(History.id)).where(History.task_id == task_id))
        stored = await db.get(Task, task_id)
    assert count == 1
    assert stored.title == "Write docs"
    assert stored.assigned_to_id is None
