import json
import logging
from typing import Any
from urllib import error, parse, request

logger = logging.getLogger(__name__)


class GoogleApiError(Exception):
    def __init__(self, message: str, *, status_code: int = 502, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class GoogleApiClient:
    service_name = "Google API"

    def __init__(
        self,
        *,
        access_token: str,
        api_base_url: str,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.access_token = access_token
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def _request_json(
        self,
        method: str,
        path: str,
        *,
        query: list[tuple[str, str]] | None = None,
        payload: dict[str, Any] | None = None,
        default_error: str = "Google API request failed",
    ) -> dict[str, Any]:
        target = f"{self.api_base_url}{path}"
        if query:
            target = f"{target}?{parse.urlencode(query)}"

        raw_payload: bytes | None = None
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }
        if payload is not None:
            raw_payload = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"

        req = request.Request(target, data=raw_payload, method=method, headers=headers)

        try:
            with request.urlopen(req, timeout=self.timeout_seconds) as response:
                response_body = response.read()
        except TimeoutError as exc:
            raise GoogleApiError(f"{self.service_name} request timed out.", status_code=504) from exc
        except error.HTTPError as exc:
            body = exc.read().decode("utf-8", errors="ignore")
            logger.warning(
                "%s error method=%s path=%s status_code=%s body=%s",
                self.service_name,
                method,
                path,
                exc.code,
                body,
            )
            raise GoogleApiError(
                extract_error_message(body, default_error),
                status_code=exc.code,
                details=body or None,
            ) from exc
        except error.URLError as exc:
            raise GoogleApiError(
                f"{self.service_name} connection error: {exc.reason}",
            ) from exc

        if not response_body.strip():
            return {}

        try:
            parsed_body = json.loads(response_body.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise GoogleApiError(f"{self.service_name} returned invalid JSON.") from exc

        if not isinstance(parsed_body, dict):
            raise GoogleApiError(f"{self.service_name} response is not a JSON object.")
        return parsed_body


def extract_error_message(body: str, default_message: str) -> str:
    if not body.strip():
        return default_message
    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        return body
    if not isinstance(payload, dict):
        return body
    raw_error = payload.get("error")
    if isinstance(raw_error, dict):
        message = raw_error.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    if isinstance(raw_error, str) and raw_error.strip():
        return raw_error.strip()
    return default_message


def extract_items(payload: dict[str, Any]) -> list[dict[str, Any]]:
    raw_items = payload.get("items")
    if not isinstance(raw_items, list):
        return []
    return [item for item in raw_items if isinstance(item, dict)]
