"""Tests for comment mutations."""
import pytest

from app.core.exceptions import ForbiddenError, NotFoundError
from app.models.comment import Comment
from app.models.notification import Notification, NotificationType
from app.models.system_event import SystemEvent, SystemEventType
from app.models.task import Task
from app.schemas.comment import CommentCreate
from app.services.comment_service import comment_service
from app.services.event_service import event_recorder


@pytest.fixture
def make_task(db_session, test_project, test_user):
    async def _make(assigned_to_id=None):
        task_obj = Task(
            title="Fix login",
            project_id=test_project.id,
            created_by_id=test_user.id,
            assigned_to_id=assigned_to_id,
        )
        db_session.add(task_obj)
        await db_session.commit()
        await db_session.refresh(task_obj)
        return task_obj

    return _make


@pytest.mark.asyncio
async def test_comment_notifies_assignee(db_session, make_task, test_user, other_user, fetch_rows):
    task_obj = await make_task(assigned_to_id=other_user.id)

    created = await comment_service.create_comment(
        db_session, CommentCreate(task_id=task_obj.id, text="Looks good"), test_user
    )
    await event_recorder.drain()

    assert created.user_id == test_user.id
    notifications = await fetch_rows(Notification)
    assert [(n.user_id, n.type) for n in notifications] == [(other_user.id, NotificationType.COMMENT_ADDED)]

    events = await fetch_rows(SystemEvent)
    assert len(events) == 1
    assert events[0].type == SystemEventType.COMMENT_ADDED
    assert events[0].task_id == task_obj.id
    assert events[0].processed is True


@pytest.mark.asyncio
async def test_assignee_commenting_is_not_notified(db_session, make_task, other_user, fetch_rows):
    task_obj = await make_task(assigned_to_id=other_user.id)

    await comment_service.create_comment(db_session, CommentCreate(task_id=task_obj.id, text="On it"), other_user)
    await event_recorder.drain()

    assert await fetch_rows(Notification) == []
    assert len(await fetch_rows(Comment)) == 1


@pytest.mark.asyncio
async def test_comment_on_missing_task(db_session, test_user, fetch_rows):
    with pytest.raises(NotFoundError):
        await comment_service.create_comment(db_session, CommentCreate(task_id=999, text="Hello"), test_user)
    await event_recorder.drain()
    assert await fetch_rows(Comment) == []
    assert await fetch_rows(SystemEvent) == []


@pytest.mark.asyncio
async def test_delete_comment_permissions(db_session, make_task, test_user, other_user, admin_user, fetch_rows):
    task_obj = await make_task()
    by_other = await comment_service.create_comment(
        db_session, CommentCreate(task_id=task_obj.id, text="from bob"), other_user
    )
    by_owner = await comment_service.create_comment(
        db_session, CommentCreate(task_id=task_obj.id, text="from alice"), test_user
    )
    other_id, owner_id = by_other.id, by_owner.id
    await event_recorder.drain()

    # Neither author nor task creator.
    with pytest.raises(ForbiddenError):
        await comment_service.delete_comment(db_session, owner_id, admin_user)
    await db_session.refresh(test_user)

    # Task creator may remove someone else's comment.
    await comment_service.delete_comment(db_session, other_id, test_user)
    # Author may remove their own.
    await comment_service.delete_comment(db_session, owner_id, test_user)

    assert await fetch_rows(Comment) == []

    with pytest.raises(NotFoundError):
        await comment_service.delete_comment(db_session, owner_id, test_user)
