"""End-to-end walk through a project launch, driving the route handlers directly."""
import asyncio

from sqlalchemy.orm import Session

import teamspace.api.v1.messages as message_routes
import teamspace.api.v1.notifications as notification_routes
import teamspace.api.v1.projects as project_routes
import teamspace.api.v1.tasks as task_routes
from teamspace.models import NotificationType, TaskStatus
from teamspace.schemas import MemberAdd, MessageCreate, ProjectCreate, TaskCreate, TaskUpdate


def test_launch_project_flow(db_session: Session, admin, editor, broadcaster):
    project = asyncio.run(
        project_routes.create_project(ProjectCreate(name="Launch", category="tech"), admin, db_session)
    ).data
    assert project.task_count == 0
    assert project.member_count == 1

    asyncio.run(project_routes.add_project_member(project.id, MemberAdd(user_id=editor.id), admin, db_session, broadcaster))

    task = asyncio.run(
        task_routes.create_task(
            TaskCreate(project_id=project.id, title="Write copy", assigned_to=editor.id),
            admin,
            db_session,
            broadcaster,
        )
    ).data
    inbox = asyncio.run(notification_routes.list_notifications(1, 20, editor, db_session))
    assert [item.type for item in inbox.data].count(NotificationType.TASK_ASSIGNED) == 1
    assert broadcaster.named("task_updated") == []

    message = asyncio.run(
        message_routes.send_message(
            MessageCreate(project_id=project.id, content="@bob check this"), admin, db_session, broadcaster
        )
    ).data
    assert editor.id in message.mentions
    inbox = asyncio.run(notification_routes.list_notifications(1, 20, editor, db_session))
    assert [item.type for item in inbox.data].count(NotificationType.MESSAGE_MENTION) == 1
    assert [room for _, room in broadcaster.named("new_message")] == [f"project:{project.id}"]

    done = asyncio.run(
        task_routes.update_task(task.id, TaskUpdate(status=TaskStatus.DONE), editor, db_session, broadcaster)
    ).data
    assert done.completed_at is not None
    completed = broadcaster.named("task_completed")
    assert len(completed) == 1
    assert completed[0][1] == f"project:{project.id}"
    assert broadcaster.named("task_updated") == []

    overview = asyncio.run(project_routes.list_projects(None, None, editor, db_session)).data
    assert overview[0].task_count == 1
    assert overview[0].completed_count == 1
