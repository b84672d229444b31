"""Canvas LMS data contracts and dashboard snapshot schema."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class CanvasCredentials:
    """Canvas instance domain and personal access token."""

    domain: str
    token: str


class CanvasModel(BaseModel):
    """Base for Canvas payloads; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class UserProfile(CanvasModel):
    """Profile of the token owner."""

    id: int
    name: str
    primary_email: str | None = None


class Term(CanvasModel):
    """Academic enrollment term (for example a semester)."""

    id: int
    name: str
    start_at: datetime | None = None
    end_at: datetime | None = None


class Course(CanvasModel):
    """Active course enrollment with its term."""

    id: int
    name: str
    course_code: str = ""
    enrollment_term_id: int
    term: Term | None = None

    @property
    def resolved_term(self) -> Term:
        """Return embedded term or a placeholder built from the term id."""
        if self.term is not None:
            return self.term
        return Term(id=self.enrollment_term_id, name=f"Term {self.enrollment_term_id}")


class Assignment(CanvasModel):
    """Course assignment."""

    id: int
    name: str
    course_id: int
    due_at: datetime | None = None
    html_url: str = ""
    points_possible: float | None = None
    course_name: str | None = None


class Announcement(CanvasModel):
    """Course announcement."""

    id: int
    title: str
    course_id: int
    message: str = ""
    posted_at: datetime | None = None
    html_url: str = ""
    course_name: str | None = None


class CanvasFile(CanvasModel):
    """Entry of a course file listing."""

    id: int
    display_name: str
    filename: str = ""
    url: str = ""
    size: int = 0
    content_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("content-type", "content_type"),
    )
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DashboardSnapshot(BaseModel):
    """One timestamped aggregation of dashboard data for the current term."""

    courses: list[Course]
    current_term: Term | None
    assignments: list[Assignment]
    announcements: list[Announcement]
    last_fetched: datetime
