"""Async Canvas LMS REST client with typed errors at the HTTP boundary."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import TypeVar, cast

import httpx
from pydantic import ValidationError

from canvai.application.errors import AuthError, NotFoundError, TransportError
from canvai.domain.canvas import (
    Announcement,
    Assignment,
    CanvasCredentials,
    CanvasFile,
    CanvasModel,
    Course,
    UserProfile,
)
from canvai.domain.documents import SourceFile

LOGGER = logging.getLogger(__name__)

TModel = TypeVar("TModel", bound=CanvasModel)

PAGE_SIZE = 100
ANNOUNCEMENTS_PAGE_SIZE = 10
_MAX_PAGES = 50


def normalize_domain(domain: str) -> str:
    """Strip scheme, whitespace and trailing slashes from a Canvas domain."""
    normalized = domain.strip()
    for scheme in ("https://", "http://"):
        if normalized.lower().startswith(scheme):
            normalized = normalized[len(scheme) :]
            break
    normalized = normalized.rstrip("/")
    if not normalized:
        raise ValueError("Canvas domain must not be empty")
    return normalized


class CanvasClient:
    """Read-only access to courses, coursework and files of the token owner."""

    def __init__(
        self,
        credentials: CanvasCredentials,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._base_url = f"https://{normalize_domain(credentials.domain)}/api/v1"
        self._token = credentials.token
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout_seconds)
        self._owns_client = http_client is None

    async def __aenter__(self) -> CanvasClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close owned HTTP client."""
        if self._owns_client:
            await self._http_client.aclose()

    async def get_current_user(self) -> UserProfile:
        """Return the profile of the token owner; validates the token."""
        response = await self._get(self._url("users/self/profile"))
        payload = _read_json(response)
        if not isinstance(payload, dict):
            raise TransportError("Canvas profile response must be a JSON object.")
        try:
            return UserProfile.model_validate(payload)
        except ValidationError as exc:
            raise TransportError("Canvas returned an unexpected profile payload.") from exc

    async def list_courses(self) -> list[Course]:
        """Return active enrollments with embedded term information."""
        items = await self._get_all(
            "courses",
            {"enrollment_state": "active", "include[]": "term"},
        )
        visible = [item for item in items if not item.get("access_restricted_by_date")]
        return _validate_items(Course, visible, resource="course")

    async def list_assignments(self, course: Course) -> list[Assignment]:
        """Return all assignments of ``course`` ordered by due date."""
        items = await self._get_all(
            f"courses/{course.id}/assignments",
            {"order_by": "due_at"},
        )
        for item in items:
            item.setdefault("course_id", course.id)
            item["course_name"] = course.name
        return _validate_items(Assignment, items, resource="assignment")

    async def list_announcements(self, course: Course) -> list[Announcement]:
        """Return the most recent announcements of ``course``."""
        response = await self._get(
            self._url(f"courses/{course.id}/discussion_topics"),
            params={"only_announcements": "true", "per_page": ANNOUNCEMENTS_PAGE_SIZE},
        )
        items = _read_object_list(response)
        for item in items:
            item["course_id"] = course.id
            item["course_name"] = course.name
        return _validate_items(Announcement, items, resource="announcement")

    async def list_files(self, course_id: int) -> list[CanvasFile]:
        """Return the file listing of a course."""
        try:
            items = await self._get_all(f"courses/{course_id}/files", {})
        except NotFoundError as exc:
            raise NotFoundError(
                f"Course {course_id} not found or you don't have permission to access it.",
                status_code=exc.status_code,
            ) from exc
        return _validate_items(CanvasFile, items, resource="file")

    async def course_files(self, course_id: int) -> list[SourceFile]:
        """Return course files as source files with unpopulated content."""
        return [
            SourceFile(
                id=str(file.id),
                name=file.display_name,
                url=file.url,
                mime_type=file.content_type or "unknown",
            )
            for file in await self.list_files(course_id)
        ]

    async def download(self, url: str) -> bytes:
        """Fetch raw file bytes, following storage redirects."""
        response = await self._get(url, follow_redirects=True, not_found="File not found.")
        return response.content

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path}"

    async def _get_all(self, path: str, params: dict[str, str | int]) -> list[dict[str, object]]:
        url: str | None = self._url(path)
        query: dict[str, str | int] | None = {**params, "per_page": PAGE_SIZE}
        items: list[dict[str, object]] = []
        pages = 0
        while url is not None and pages < _MAX_PAGES:
            response = await self._get(url, params=query)
            items.extend(_read_object_list(response))
            pages += 1
            # The next link already carries the full query string.
            url = response.links.get("next", {}).get("url")
            query = None
        return items

    async def _get(
        self,
        url: str,
        *,
        params: dict[str, str | int] | None = None,
        follow_redirects: bool = False,
        not_found: str | None = None,
    ) -> httpx.Response:
        try:
            response = await self._http_client.get(
                url,
                params=params,
                headers={
                    "Authorization": f"Bearer {self._token}",
                    "Accept": "application/json",
                },
                follow_redirects=follow_redirects,
            )
        except httpx.TooManyRedirects as exc:
            LOGGER.warning("event=canvas_request_failed error_type=%s", exc.__class__.__name__)
            raise TransportError("Canvas redirected too many times.") from exc
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            LOGGER.warning("event=canvas_request_failed error_type=%s", exc.__class__.__name__)
            raise TransportError(
                "Unable to connect to Canvas. Check your network connection and Canvas URL."
            ) from exc

        _raise_for_status(response, not_found=not_found)
        return response


def _raise_for_status(response: httpx.Response, *, not_found: str | None = None) -> None:
    status_code = response.status_code
    if status_code < 400:
        return

    LOGGER.warning(
        "event=canvas_request_rejected path=%s status_code=%s",
        response.request.url.path,
        status_code,
    )
    if status_code == 401:
        raise AuthError(
            "Invalid Canvas API token. Please check your Canvas settings.",
            status_code=status_code,
        )
    if status_code == 403:
        raise AuthError("Access to this Canvas resource is forbidden.", status_code=status_code)
    if status_code == 404:
        raise NotFoundError(
            not_found or f"Resource not found: {response.request.url.path}",
            status_code=status_code,
        )

    message = f"Canvas request failed with status={status_code}."
    detail = _extract_error_detail(response)
    if detail:
        message = f"{message} detail={detail}"
    raise TransportError(message, status_code=status_code)


def _extract_error_detail(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        text = response.text.strip()
        return _truncate_error_detail(text) if text else None

    if not isinstance(payload, dict):
        return None
    errors = cast(dict[str, object], payload).get("errors")
    if isinstance(errors, list) and errors:
        first = cast(list[object], errors)[0]
        if isinstance(first, dict):
            message = cast(dict[str, object], first).get("message")
            if isinstance(message, str) and message.strip():
                return _truncate_error_detail(message.strip())
    message = cast(dict[str, object], payload).get("message")
    if isinstance(message, str) and message.strip():
        return _truncate_error_detail(message.strip())
    return None


def _truncate_error_detail(value: str, *, max_length: int = 300) -> str:
    if len(value) <= max_length:
        return value
    return f"{value[:max_length]}..."


def _read_json(response: httpx.Response) -> object:
    try:
        return response.json()
    except ValueError as exc:
        raise TransportError("Canvas returned invalid JSON payload.") from exc


def _read_object_list(response: httpx.Response) -> list[dict[str, object]]:
    payload = _read_json(response)
    if not isinstance(payload, list):
        raise TransportError("Canvas list response must be a JSON array.")
    return [
        {str(key): value for key, value in cast(dict[object, object], item).items()}
        for item in cast(list[object], payload)
        if isinstance(item, dict)
    ]


def _validate_items(
    model: type[TModel],
    items: list[dict[str, object]],
    *,
    resource: str,
) -> list[TModel]:
    validated: list[TModel] = []
    for item in items:
        try:
            validated.append(model.model_validate(item))
        except ValidationError as exc:
            LOGGER.warning(
                "event=canvas_item_skipped resource=%s item_id=%s error_count=%s",
                resource,
                item.get("id", "-"),
                exc.error_count(),
            )
    return validated
