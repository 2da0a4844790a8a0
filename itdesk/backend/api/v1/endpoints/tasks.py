"""
Task API Endpoints.
"""

from fastapi import APIRouter, Query

from itdesk.backend.core.dependencies import DbSession, NotifierDep, TasksUser
from itdesk.backend.models.enums import TaskStatus
from itdesk.backend.schemas.base import ApiResponse
from itdesk.backend.schemas.task import (
    TaskAssign,
    TaskCommentCreate,
    TaskCommentResponse,
    TaskCreate,
    TaskResponse,
    TaskStatusUpdate,
)
from itdesk.backend.services.task import TaskService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[TaskResponse]],
    summary="List tasks",
    description="Newest first, optionally filtered by status.",
)
async def list_tasks(
    db: DbSession,
    user: TasksUser,
    status: TaskStatus | None = Query(default=None),
) -> ApiResponse[list[TaskResponse]]:
    tasks = await TaskService(db).list_tasks(status)
    return ApiResponse(data=[TaskResponse.model_validate(task) for task in tasks])


@router.post(
    "",
    response_model=ApiResponse[TaskResponse],
    status_code=201,
    summary="Create a task",
)
async def create_task(
    data: TaskCreate,
    db: DbSession,
    user: TasksUser,
    notifier: NotifierDep,
) -> ApiResponse[TaskResponse]:
    task = await TaskService(db, notifier).create(
        title=data.title,
        creator_id=user.id,
        description=data.description,
        assigned_to_user_id=data.assigned_to_user_id,
        status=data.status,
    )
    return ApiResponse(data=TaskResponse.model_validate(task))


@router.get(
    "/{task_id}",
    response_model=ApiResponse[TaskResponse],
    summary="Get a task",
)
async def get_task(task_id: int, db: DbSession, user: TasksUser) -> ApiResponse[TaskResponse]:
    task = await TaskService(db).get(task_id)
    return ApiResponse(data=TaskResponse.model_validate(task))


@router.patch(
    "/{task_id}",
    response_model=ApiResponse[TaskResponse],
    summary="Change task status",
)
async def update_task_status(
    task_id: int,
    data: TaskStatusUpdate,
    db: DbSession,
    user: TasksUser,
    notifier: NotifierDep,
) -> ApiResponse[TaskResponse]:
    task = await TaskService(db, notifier).update_status(task_id, data.status)
    return ApiResponse(data=TaskResponse.model_validate(task))


@router.patch(
    "/{task_id}/assign",
    response_model=ApiResponse[TaskResponse],
    summary="Assign a task",
)
async def assign_task(
    task_id: int,
    data: TaskAssign,
    db: DbSession,
    user: TasksUser,
    notifier: NotifierDep,
) -> ApiResponse[TaskResponse]:
    task = await TaskService(db, notifier).assign(task_id, data.user_id)
    return ApiResponse(data=TaskResponse.model_validate(task))


@router.get(
    "/{task_id}/comments",
    response_model=ApiResponse[list[TaskCommentResponse]],
    summary="List comments",
)
async def list_comments(task_id: int, db: DbSession, user: TasksUser) -> ApiResponse[list[TaskCommentResponse]]:
    comments = await TaskService(db).list_comments(task_id)
    return ApiResponse(data=[TaskCommentResponse.model_validate(c) for c in comments])


@router.post(
    "/{task_id}/comments",
    response_model=ApiResponse[TaskCommentResponse],
    status_code=201,
    summary="Add a comment",
)
async def add_comment(
    task_id: int,
    data: TaskCommentCreate,
    db: DbSession,
    user: TasksUser,
    notifier: NotifierDep,
) -> ApiResponse[TaskCommentResponse]:
    comment = await TaskService(db, notifier).add_comment(task_id, user.id, data.comment)
    return ApiResponse(data=TaskCommentResponse.model_validate(comment))
