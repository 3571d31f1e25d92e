import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException
from sqlalchemy.orm import Session

import teamspace.api.v1.tasks as task_routes
from teamspace.models import Notification, NotificationType, Task, TaskStatus
from teamspace.schemas import TaskCreate, TaskUpdate


def _create_task(session: Session, actor, project, broadcaster, **fields):
    task_in = TaskCreate(project_id=project.id, title=fields.pop("title", "Write copy"), **fields)
    return asyncio.run(task_routes.create_task(task_in, actor, session, broadcaster)).data


def _update_task(session: Session, task_id: int, actor, broadcaster, **fields):
    return asyncio.run(task_routes.update_task(task_id, TaskUpdate(**fields), actor, session, broadcaster)).data


def _assert_completion_invariant(session: Session):
    for task in session.query(Task).all():
        assert (task.status == TaskStatus.DONE) == (task.completed_at is not None)


def test_assigning_on_create_notifies_assignee_once(db_session: Session, admin, editor, make_project, broadcaster):
    project = make_project(admin, members=[editor])

    task = _create_task(db_session, admin, project, broadcaster, assigned_to=editor.id)

    assert task.assigned_to == editor.id
    assert task.assignee_name == "Bob Builder"
    notifications = db_session.query(Notification).filter(Notification.user_id == editor.id).all()
    assert len(notifications) == 1
    assert notifications[0].type == NotificationType.TASK_ASSIGNED
    assert notifications[0].title == "New Task Assigned"
    assert notifications[0].message == 'You\'ve been assigned to "Write copy" in Launch'
    assert notifications[0].task_id == task.id

    pushed = broadcaster.named("notification")
    assert len(pushed) == 1
    payload, room = pushed[0]
    assert room == f"user:{editor.id}"
    assert payload["type"] == "task_assigned"
    assert payload["message"] == "New task assigned: Write copy"
    assert payload["task"]["assignedTo"] == editor.id
    assert broadcaster.named("task_updated") == []


def test_self_assignment_does_not_notify(db_session: Session, admin, make_project, broadcaster):
    project = make_project(admin)

    _create_task(db_session, admin, project, broadcaster, assigned_to=admin.id)

    assert db_session.query(Notification).count() == 0
    assert broadcaster.events == []


def test_reassignment_notifies_new_assignee(db_session: Session, admin, editor, make_user, make_project, broadcaster):
    carol = make_user("Carol", "carol@example.com")
    project = make_project(admin, members=[editor, carol])
    task = _create_task(db_session, admin, project, broadcaster, assigned_to=editor.id)

    _update_task(db_session, task.id, admin, broadcaster, title="Write better copy")
    _update_task(db_session, task.id, admin, broadcaster, assigned_to=carol.id)

    carol_notifications = db_session.query(Notification).filter(Notification.user_id == carol.id).all()
    assert [n.title for n in carol_notifications] == ["Task Assigned"]
    assert db_session.query(Notification).filter(Notification.user_id == editor.id).count() == 1
    assert broadcaster.named("task_updated") == []


def test_completed_at_follows_status(db_session: Session, admin, make_project, broadcaster):
    project = make_project(admin)
    task = _create_task(db_session, admin, project, broadcaster)
    assert task.completed_at is None

    done = _update_task(db_session, task.id, admin, broadcaster, status=TaskStatus.DONE)
    assert done.completed_at is not None
    _assert_completion_invariant(db_session)

    still_done = _update_task(db_session, task.id, admin, broadcaster, status=TaskStatus.DONE, title="Renamed")
    assert still_done.completed_at == done.completed_at

    reopened = _update_task(db_session, task.id, admin, broadcaster, status=TaskStatus.IN_PROGRESS)
    assert reopened.completed_at is None
    _assert_completion_invariant(db_session)

    created_done = _create_task(db_session, admin, project, broadcaster, title="Already done", status=TaskStatus.DONE)
    assert created_done.completed_at is not None
    _assert_completion_invariant(db_session)


def test_completion_is_broadcast_to_project_room(db_session: Session, admin, editor, make_project, broadcaster):
    project = make_project(admin, members=[editor])
    task = _create_task(db_session, admin, project, broadcaster, assigned_to=editor.id)

    _update_task(db_session, task.id, editor, broadcaster, status=TaskStatus.DONE)
    _update_task(db_session, task.id, editor, broadcaster, description="follow-up notes")

    completed = broadcaster.named("task_completed")
    assert len(completed) == 1
    payload, room = completed[0]
    assert room == f"project:{project.id}"
    assert payload["task"]["status"] == "done"
    assert payload["completedBy"]["id"] == editor.id


def test_toggle_cycles_status(db_session: Session, admin, make_project, broadcaster):
    project = make_project(admin)
    task = _create_task(db_session, admin, project, broadcaster)

    seen = []
    for _ in range(3):
        toggled = asyncio.run(task_routes.toggle_task(task.id, admin, db_session, broadcaster)).data
        seen.append(toggled.status)
        _assert_completion_invariant(db_session)

    assert seen == [TaskStatus.IN_PROGRESS, TaskStatus.DONE, TaskStatus.NEW]
    assert len(broadcaster.named("task_completed")) == 1


def test_clearing_assignee_and_due_date(db_session: Session, admin, editor, make_project, broadcaster):
    project = make_project(admin, members=[editor])
    due = datetime(2030, 1, 1, tzinfo=timezone.utc)
    task = _create_task(db_session, admin, project, broadcaster, assigned_to=editor.id, due_date=due)
    assert task.due_date is not None

    cleared = _update_task(db_session, task.id, admin, broadcaster, assigned_to=None, due_date=None)
    assert cleared.assigned_to is None
    assert cleared.due_date is None
    assert cleared.title == "Write copy"


def test_list_filters_and_membership(db_session: Session, admin, editor, make_user, make_project, broadcaster):
    shared = make_project(admin, name="Shared", members=[editor])
    private = make_project(admin, name="Private")
    soon = datetime.now(timezone.utc) + timedelta(days=1)
    later = datetime.now(timezone.utc) + timedelta(days=30)

    _create_task(db_session, admin, shared, broadcaster, title="Soon", assigned_to=editor.id, due_date=soon)
    _create_task(db_session, admin, shared, broadcaster, title="Later", due_date=later)
    _create_task(db_session, admin, private, broadcaster, title="Secret")

    visible = asyncio.run(task_routes.list_tasks(None, None, None, None, editor, db_session))
    assert sorted(task.title for task in visible.data) == ["Later", "Soon"]

    assigned = asyncio.run(task_routes.list_tasks(None, None, editor.id, None, admin, db_session))
    assert [task.title for task in assigned.data] == ["Soon"]

    due_before = asyncio.run(
        task_routes.list_tasks(shared.id, None, None, soon + timedelta(hours=1), admin, db_session)
    )
    assert [task.title for task in due_before.data] == ["Soon"]

    mine = asyncio.run(task_routes.list_my_tasks(editor, db_session))
    assert [task.title for task in mine.data] == ["Soon"]

    board = asyncio.run(task_routes.list_project_tasks(shared.id, editor, db_session)).data
    assert len(board.all) == 2
    assert len(board.by_status["new"]) == 2
    assert board.by_status["done"] == []

    with pytest.raises(HTTPException) as exc:
        asyncio.run(task_routes.list_project_tasks(private.id, editor, db_session))
    assert exc.value.status_code == 403


def test_overdue_flag(db_session: Session, admin, make_project, broadcaster):
    project = make_project(admin)
    past = datetime.now(timezone.utc) - timedelta(days=2)

    overdue = _create_task(db_session, admin, project, broadcaster, due_date=past)
    assert overdue.is_overdue

    finished = _update_task(db_session, overdue.id, admin, broadcaster, status=TaskStatus.DONE)
    assert not finished.is_overdue


def test_delete_requires_creator_or_admin(db_session: Session, admin, editor, make_user, make_project, broadcaster):
    carol = make_user("Carol", "carol@example.com")
    project = make_project(admin, members=[editor, carol])
    task = _create_task(db_session, editor, project, broadcaster)

    with pytest.raises(HTTPException) as exc:
        asyncio.run(task_routes.delete_task(task.id, carol, db_session))
    assert exc.value.status_code == 403
    assert exc.value.detail == "Not authorized to delete this task"

    asyncio.run(task_routes.delete_task(task.id, editor, db_session))
    assert db_session.get(Task, task.id) is None


def test_create_task_in_missing_project(db_session: Session, admin, broadcaster):
    with pytest.raises(HTTPException) as exc:
        asyncio.run(task_routes.create_task(TaskCreate(project_id=999, title="Orphan"), admin, db_session, broadcaster))
    assert exc.value.status_code == 404
    assert exc.value.detail == "Project not found"
