"""Aggregate Canvas courses, assignments and announcements for the current term."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime
from typing import Protocol, TypeVar

from canvai.application.credentials import CanvasCredentialStore
from canvai.application.errors import AggregationError, CanvasError, MissingCredentialsError
from canvai.domain.canvas import (
    Announcement,
    Assignment,
    CanvasCredentials,
    Course,
    DashboardSnapshot,
    Term,
)

LOGGER = logging.getLogger(__name__)

TItem = TypeVar("TItem")

_OLDEST = datetime.min.replace(tzinfo=UTC)


class CanvasDashboardApi(Protocol):
    """Subset of the Canvas client used by the aggregator."""

    async def list_courses(self) -> list[Course]:
        ...

    async def list_assignments(self, course: Course) -> list[Assignment]:
        ...

    async def list_announcements(self, course: Course) -> list[Announcement]:
        ...

    async def aclose(self) -> None:
        ...


CanvasApiFactory = Callable[[CanvasCredentials], CanvasDashboardApi]


def select_current_term(courses: Sequence[Course], marker: str | None = None) -> Term | None:
    """Choose the current term among the terms of ``courses``.

    A term whose name contains ``marker`` (case-insensitive) wins outright;
    otherwise the term with the most courses wins, first-seen on ties.
    """
    terms: dict[int, Term] = {}
    counts: dict[int, int] = {}
    for course in courses:
        term = course.resolved_term
        terms.setdefault(term.id, term)
        counts[term.id] = counts.get(term.id, 0) + 1

    if marker:
        needle = marker.casefold()
        for term in terms.values():
            if needle in term.name.casefold():
                return term

    best: Term | None = None
    best_count = 0
    for term_id, term in terms.items():
        if counts[term_id] > best_count:
            best = term
            best_count = counts[term_id]
    return best


class DashboardAggregator:
    """Fan out Canvas requests and build a term-filtered dashboard snapshot."""

    def __init__(
        self,
        credentials: CanvasCredentialStore,
        client_factory: CanvasApiFactory,
        *,
        current_term_marker: str | None = None,
        now: Callable[[], datetime] = lambda: datetime.now(tz=UTC),
    ) -> None:
        self._credentials = credentials
        self._client_factory = client_factory
        self._current_term_marker = current_term_marker
        self._now = now

    async def aggregate(self) -> DashboardSnapshot:
        """Fetch and assemble a fresh snapshot; raise ``AggregationError`` on total failure."""
        credentials = self._credentials.get_canvas_credentials()
        if credentials is None:
            raise MissingCredentialsError(
                "Canvas credentials not found. Run `canvai login` first."
            )

        client = self._client_factory(credentials)
        try:
            return await self._aggregate(client)
        finally:
            await client.aclose()

    async def _aggregate(self, client: CanvasDashboardApi) -> DashboardSnapshot:
        try:
            courses = await client.list_courses()
        except CanvasError as exc:
            raise AggregationError(f"Could not load courses from Canvas: {exc}") from exc

        assignment_lists, announcement_lists = await asyncio.gather(
            asyncio.gather(
                *(
                    _per_course(client.list_assignments, course, "assignments")
                    for course in courses
                )
            ),
            asyncio.gather(
                *(
                    _per_course(client.list_announcements, course, "announcements")
                    for course in courses
                )
            ),
        )

        now = self._now()
        current_term = select_current_term(courses, self._current_term_marker)
        term_course_ids = {
            course.id
            for course in courses
            if current_term is not None and course.resolved_term.id == current_term.id
        }

        term_courses = sorted(
            (course for course in courses if course.id in term_course_ids),
            key=lambda course: course.name.casefold(),
        )
        assignments = sorted(
            (
                assignment
                for items in assignment_lists
                for assignment in items
                if assignment.course_id in term_course_ids
                and assignment.due_at is not None
                and assignment.due_at > now
            ),
            key=lambda assignment: assignment.due_at or _OLDEST,
        )
        announcements = sorted(
            (
                announcement
                for items in announcement_lists
                for announcement in items
                if announcement.course_id in term_course_ids
            ),
            key=lambda announcement: announcement.posted_at or _OLDEST,
            reverse=True,
        )

        snapshot = DashboardSnapshot(
            courses=term_courses,
            current_term=current_term,
            assignments=assignments,
            announcements=announcements,
            last_fetched=now,
        )
        LOGGER.info(
            (
                "event=dashboard_aggregated term_id=%s courses=%s "
                "assignments=%s announcements=%s"
            ),
            current_term.id if current_term is not None else "-",
            len(snapshot.courses),
            len(snapshot.assignments),
            len(snapshot.announcements),
        )
        return snapshot


async def _per_course(
    fetch: Callable[[Course], Awaitable[list[TItem]]],
    course: Course,
    resource: str,
) -> list[TItem]:
    try:
        return await fetch(course)
    except CanvasError as exc:
        LOGGER.warning(
            "event=dashboard_course_fetch_skipped course_id=%s resource=%s error_type=%s",
            course.id,
            resource,
            exc.__class__.__name__,
        )
        return []
