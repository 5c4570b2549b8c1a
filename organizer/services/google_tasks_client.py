from typing import Any
from urllib import parse

from organizer.services.google_api_client import GoogleApiClient, extract_items

DEFAULT_TASK_LIST_ID = "@default"


class GoogleTasksClient(GoogleApiClient):
    service_name = "Google Tasks API"

    def __init__(
        self,
        *,
        access_token: str,
        timeout_seconds: float = 10.0,
        api_base_url: str = "https://tasks.googleapis.com/tasks/v1",
    ) -> None:
        super().__init__(
            access_token=access_token,
            api_base_url=api_base_url,
            timeout_seconds=timeout_seconds,
        )

    def list_task_lists(self) -> list[dict[str, Any]]:
        response_payload = self._request_json(
            "GET",
            "/users/@me/lists",
            default_error="Failed to fetch task lists",
        )
        task_lists: list[dict[str, Any]] = []
        for raw_list in extract_items(response_payload):
            task_lists.append(
                {
                    "id": raw_list.get("id"),
                    "title": raw_list.get("title"),
                    "updated": raw_list.get("updated"),
                },
            )
        return task_lists

    def list_tasks(self, task_list_id: str) -> list[dict[str, Any]]:
        list_id = _normalize_task_list_id(task_list_id)
        response_payload = self._request_json(
            "GET",
            _tasks_path(list_id),
            query=[("showCompleted", "true"), ("showHidden", "true")],
            default_error="Failed to fetch tasks",
        )
        return [_reshape_task(raw_task, list_id) for raw_task in extract_items(response_payload)]

    def create_task(
        self,
        task_list_id: str,
        *,
        title: str,
        notes: str | None = None,
        due: str | None = None,
    ) -> dict[str, Any]:
        list_id = _normalize_task_list_id(task_list_id)
        payload: dict[str, Any] = {"title": title, "notes": notes or ""}
        if due:
            payload["due"] = due
        response_payload = self._request_json(
            "POST",
            _tasks_path(list_id),
            payload=payload,
            default_error="Failed to create task",
        )
        return _reshape_task(response_payload, list_id)

    def update_task(
        self,
        task_list_id: str,
        task_id: str,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        list_id = _normalize_task_list_id(task_list_id)
        payload: dict[str, Any] = {}
        for field_name in ("title", "notes", "due"):
            if field_name in changes:
                payload[field_name] = changes[field_name]
        if "status" in changes:
            payload["status"] = _normalize_status(changes["status"])
        response_payload = self._request_json(
            "PATCH",
            f"{_tasks_path(list_id)}/{parse.quote(task_id, safe='')}",
            payload=payload,
            default_error="Failed to update task",
        )
        return _reshape_task(response_payload, list_id)

    def delete_task(self, task_list_id: str, task_id: str) -> None:
        list_id = _normalize_task_list_id(task_list_id)
        self._request_json(
            "DELETE",
            f"{_tasks_path(list_id)}/{parse.quote(task_id, safe='')}",
            default_error="Failed to delete task",
        )


def _reshape_task(raw_task: dict[str, Any], task_list_id: str) -> dict[str, Any]:
    return {
        "id": raw_task.get("id"),
        "title": raw_task.get("title"),
        "notes": raw_task.get("notes"),
        "status": _normalize_status(raw_task.get("status")),
        "due": raw_task.get("due"),
        "completed": raw_task.get("completed"),
        "updated": raw_task.get("updated"),
        "position": raw_task.get("position"),
        "task_list_id": task_list_id,
    }


def _normalize_status(raw_status: Any) -> str:
    return "completed" if raw_status == "completed" else "needsAction"


def _normalize_task_list_id(task_list_id: str) -> str:
    cleaned = (task_list_id or "").strip()
    return cleaned or DEFAULT_TASK_LIST_ID


def _tasks_path(task_list_id: str) -> str:
    return f"/lists/{parse.quote(task_list_id, safe='@')}/tasks"
