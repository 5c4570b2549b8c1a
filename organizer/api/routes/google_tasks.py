import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query

from organizer.core.config import get_settings
from organizer.schemas.auth import CurrentUserResponse
from organizer.schemas.calendar import CalendarDaysResponse
from organizer.schemas.google_tasks import (
    TaskCreateRequest,
    TaskDeleteResponse,
    TaskListsResponse,
    TaskResponse,
    TasksResponse,
    TaskUpdateRequest,
)
from organizer.services.auth_service import require_current_user, require_google_access_token
from organizer.services.calendar_view_service import CalendarViewService, raise_for_google_error
from organizer.services.google_api_client import GoogleApiError
from organizer.services.google_tasks_client import GoogleTasksClient

router = APIRouter(prefix="/google-tasks", tags=["google-tasks"])
logger = logging.getLogger(__name__)

_EXPIRED_DETAIL = "Google Tasks access expired. Please re-authenticate."


@router.get("/lists", response_model=TaskListsResponse)
def list_task_lists(
    current_user: CurrentUserResponse = Depends(require_current_user),
    google_access_token: str = Depends(require_google_access_token),
) -> TaskListsResponse:
    client = _build_client(google_access_token)
    try:
        task_lists = client.list_task_lists()
    except GoogleApiError as exc:
        raise_for_google_error(exc, expired_detail=_EXPIRED_DETAIL)
    return TaskListsResponse.model_validate({"task_lists": task_lists})


@router.get("/lists/{task_list_id}/tasks", response_model=TasksResponse)
def list_tasks(
    task_list_id: str,
    current_user: CurrentUserResponse = Depends(require_current_user),
    google_access_token: str = Depends(require_google_access_token),
) -> TasksResponse:
    client = _build_client(google_access_token)
    try:
        tasks = client.list_tasks(task_list_id)
    except GoogleApiError as exc:
        raise_for_google_error(exc, expired_detail=_EXPIRED_DETAIL)
    return TasksResponse.model_validate({"tasks": tasks})


@router.get("/lists/{task_list_id}/days", response_model=CalendarDaysResponse)
def list_task_days(
    task_list_id: str,
    time_min: datetime = Query(...),
    time_max: datetime = Query(...),
    timezone: str | None = Query(default=None),
    current_user: CurrentUserResponse = Depends(require_current_user),
    google_access_token: str = Depends(require_google_access_token),
) -> CalendarDaysResponse:
    service = CalendarViewService()
    view_timezone = service.resolve_timezone(timezone)
    window_min, window_max = service.resolve_window(time_min, time_max, view_timezone)
    client = _build_client(google_access_token)
    try:
        tasks = client.list_tasks(task_list_id)
    except GoogleApiError as exc:
        raise_for_google_error(exc, expired_detail=_EXPIRED_DETAIL)
    # Only tasks with a due date have a day to land on.
    due_tasks = [task for task in tasks if task.get("due")]
    logger.info("Google task days built user_id=%s tasks=%s", current_user.id, len(due_tasks))
    return service.build_days_response(
        due_tasks,
        time_min=window_min,
        time_max=window_max,
        view_timezone=view_timezone,
    )


@router.post("/lists/{task_list_id}/tasks", response_model=TaskResponse)
def create_task(
    task_list_id: str,
    payload: TaskCreateRequest,
    current_user: CurrentUserResponse = Depends(require_current_user),
    google_access_token: str = Depends(require_google_access_token),
) -> TaskResponse:
    client = _build_client(google_access_token)
    try:
        task = client.create_task(
            task_list_id,
            title=payload.title,
            notes=payload.notes,
            due=payload.due,
        )
    except GoogleApiError as exc:
        raise_for_google_error(exc, expired_detail=_EXPIRED_DETAIL)
    logger.info("Google task created user_id=%s task_list_id=%s", current_user.id, task_list_id)
    return TaskResponse.model_validate({"task": task})


@router.patch("/lists/{task_list_id}/tasks/{task_id}", response_model=TaskResponse)
def update_task(
    task_list_id: str,
    task_id: str,
    payload: TaskUpdateRequest,
    current_user: CurrentUserResponse = Depends(require_current_user),
    google_access_token: str = Depends(require_google_access_token),
) -> TaskResponse:
    client = _build_client(google_access_token)
    try:
        task = client.update_task(task_list_id, task_id, payload.model_dump(exclude_unset=True))
    except GoogleApiError as exc:
        raise_for_google_error(exc, expired_detail=_EXPIRED_DETAIL)
    logger.info("Google task updated user_id=%s task_id=%s", current_user.id, task_id)
    return TaskResponse.model_validate({"task": task})


@router.delete("/lists/{task_list_id}/tasks/{task_id}", response_model=TaskDeleteResponse)
def delete_task(
    task_list_id: str,
    task_id: str,
    current_user: CurrentUserResponse = Depends(require_current_user),
    google_access_token: str = Depends(require_google_access_token),
) -> TaskDeleteResponse:
    client = _build_client(google_access_token)
    try:
        client.delete_task(task_list_id, task_id)
    except GoogleApiError as exc:
        raise_for_google_error(exc, expired_detail=_EXPIRED_DETAIL)
    logger.info("Google task deleted user_id=%s task_id=%s", current_user.id, task_id)
    return TaskDeleteResponse(success=True)


def _build_client(google_access_token: str) -> GoogleTasksClient:
    settings = get_settings()
    return GoogleTasksClient(
        access_token=google_access_token,
        timeout_seconds=settings.google_api_timeout_seconds,
        api_base_url=settings.google_tasks_api_base_url,
    )
