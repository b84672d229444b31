"""Command line interface for CanvAI."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from canvai.application.course_chat import CourseChatCommand, CourseChatUseCase
from canvai.application.document_summary import summarize_file
from canvai.application.document_types import classify
from canvai.application.errors import AggregationError, AuthError, CanvasError
from canvai.application.file_selection import FileSelection
from canvai.application.llm import ChatMessage, LLMError, LLMServiceProvider
from canvai.domain.canvas import CanvasCredentials, DashboardSnapshot
from canvai.domain.documents import SourceFile
from canvai.infrastructure.canvas import CanvasClient
from canvai.infrastructure.config import load_app_config
from canvai.infrastructure.factory import (
    create_canvas_client,
    create_content_resolver,
    create_credential_store,
    create_dashboard_cache,
    create_llm_service,
)
from canvai.infrastructure.logging_config import configure_logging
from canvai.infrastructure.security import KeyringCredentialStore

LOGGER = logging.getLogger(__name__)

console = Console()
app = typer.Typer(help="CanvAI - Canvas dashboard and course document chat")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Configure logging for every command."""
    configure_logging(verbose=verbose)


@app.command()
def login(
    domain: str = typer.Option(..., help="Canvas domain, e.g. canvas.university.edu"),
    token: str = typer.Option(..., prompt=True, hide_input=True, help="Canvas access token"),
) -> None:
    """Validate and store Canvas credentials."""
    config = load_app_config()
    credentials = CanvasCredentials(domain=domain.strip(), token=token.strip())

    async def _validate() -> str:
        async with create_canvas_client(credentials, config) as client:
            profile = await client.get_current_user()
            return profile.name

    try:
        name = asyncio.run(_validate())
    except AuthError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    except CanvasError as exc:
        console.print(f"[red]Could not reach Canvas: {exc}[/red]")
        raise typer.Exit(code=1) from exc

    create_credential_store(config).set_canvas_credentials(credentials)
    create_dashboard_cache(config).clear()
    LOGGER.info("event=canvas_login_succeeded domain=%s", credentials.domain)
    console.print(f"Signed in to [bold]{domain}[/bold] as [bold]{name}[/bold].")


@app.command()
def logout() -> None:
    """Remove stored credentials and cached dashboard data."""
    config = load_app_config()
    create_credential_store(config).delete_canvas_credentials()
    create_dashboard_cache(config).clear()
    console.print("Signed out.")


@app.command("set-llm-key")
def set_llm_key(
    provider: LLMServiceProvider = typer.Argument(..., help="LLM provider"),
    api_key: str = typer.Option(..., prompt=True, hide_input=True, help="Provider API key"),
) -> None:
    """Store an LLM provider API key in the keyring."""
    create_credential_store(load_app_config()).set_key(provider, api_key)
    console.print(f"Stored API key for [bold]{provider.value}[/bold].")


@app.command()
def dashboard(
    refresh: bool = typer.Option(False, "--refresh", help="Ignore cached data"),
) -> None:
    """Show current-term courses, upcoming assignments and announcements."""
    cache = create_dashboard_cache(load_app_config())
    try:
        snapshot = asyncio.run(cache.refresh() if refresh else cache.get())
    except AggregationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    _print_snapshot(snapshot)


@app.command()
def files(course_id: int = typer.Argument(..., help="Canvas course id")) -> None:
    """List course files and how their text would be extracted."""
    config = load_app_config()
    credentials = _require_credentials(create_credential_store(config))

    async def _list() -> list[SourceFile]:
        async with create_canvas_client(credentials, config) as client:
            return await client.course_files(course_id)

    course_files = _run_canvas(_list())
    if not course_files:
        console.print("[yellow]No files available for this course.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Type")
    for file in course_files:
        table.add_row(file.id, file.name, classify(file.name).value, file.mime_type)
    console.print(table)


@app.command()
def read(
    course_id: int = typer.Argument(..., help="Canvas course id"),
    file_id: str = typer.Argument(..., help="Canvas file id"),
) -> None:
    """Print the extracted text of one course file."""
    config = load_app_config()
    credentials = _require_credentials(create_credential_store(config))

    async def _read() -> str:
        async with create_canvas_client(credentials, config) as client:
            course_files = await client.course_files(course_id)
            selection = FileSelection(create_content_resolver(client), course_files)
            file = await selection.select(file_id)
            return file.content or ""

    console.print(_run_canvas(_read()), markup=False, highlight=False)


@app.command()
def ask(
    course_id: int = typer.Argument(..., help="Canvas course id"),
    question: str = typer.Argument(..., help="Question for the course assistant"),
    file_ids: Optional[List[str]] = typer.Option(
        None, "--file", "-f", help="File id to attach as context (repeatable)"
    ),
    course_name: Optional[str] = typer.Option(None, help="Course name used in the prompt"),
) -> None:
    """Ask the course assistant a question about selected files."""
    config = load_app_config()
    store = create_credential_store(config)
    credentials = _require_credentials(store)

    async def _ask() -> ChatMessage:
        async with create_canvas_client(credentials, config) as client:
            selection = await _select_files(client, course_id, file_ids or [])
            service = create_llm_service(config, store)
            try:
                use_case = CourseChatUseCase(
                    service,
                    selection,
                    prompt_max_chars=config.prompt_max_chars,
                )
                return await use_case.execute(
                    CourseChatCommand(
                        course_name=course_name or f"course {course_id}",
                        history=[ChatMessage(role="user", content=question)],
                    )
                )
            finally:
                await service.aclose()

    try:
        reply = _run_canvas(_ask())
    except LLMError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    console.print(reply.content, markup=False, highlight=False)


@app.command()
def summarize(
    course_id: int = typer.Argument(..., help="Canvas course id"),
    file_id: str = typer.Argument(..., help="Canvas file id"),
    course_name: Optional[str] = typer.Option(None, help="Course name used in the prompt"),
) -> None:
    """Summarize one course file with the configured LLM."""
    config = load_app_config()
    store = create_credential_store(config)
    credentials = _require_credentials(store)

    async def _summarize() -> str:
        async with create_canvas_client(credentials, config) as client:
            course_files = await client.course_files(course_id)
            selection = FileSelection(create_content_resolver(client), course_files)
            service = create_llm_service(config, store)
            try:
                return await summarize_file(
                    service,
                    selection,
                    file_id,
                    course_name=course_name or f"course {course_id}",
                    max_chars=config.prompt_max_chars,
                )
            finally:
                await service.aclose()

    try:
        summary = _run_canvas(_summarize())
    except LLMError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    console.print(summary, markup=False, highlight=False)


async def _select_files(
    client: CanvasClient,
    course_id: int,
    file_ids: list[str],
) -> FileSelection | None:
    if not file_ids:
        return None
    course_files = await client.course_files(course_id)
    selection = FileSelection(create_content_resolver(client), course_files)
    await asyncio.gather(*(selection.select(file_id) for file_id in file_ids))
    return selection


def _require_credentials(store: KeyringCredentialStore) -> CanvasCredentials:
    credentials = store.get_canvas_credentials()
    if credentials is None:
        console.print("[red]Canvas credentials not found. Run `canvai login` first.[/red]")
        raise typer.Exit(code=1)
    return credentials


def _run_canvas(coroutine):  # type: ignore[no-untyped-def]
    try:
        return asyncio.run(coroutine)
    except KeyError as exc:
        console.print(f"[red]{exc.args[0]}[/red]")
        raise typer.Exit(code=1) from exc
    except CanvasError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc


def _print_snapshot(snapshot: DashboardSnapshot) -> None:
    term_name = snapshot.current_term.name if snapshot.current_term else "No current term"
    console.print(f"[bold]{term_name}[/bold] (updated {snapshot.last_fetched:%Y-%m-%d %H:%M})")

    courses = Table(title="Courses", show_header=True, header_style="bold magenta")
    courses.add_column("Id")
    courses.add_column("Code")
    courses.add_column("Name")
    for course in snapshot.courses:
        courses.add_row(str(course.id), course.course_code, course.name)
    console.print(courses)

    assignments = Table(title="Upcoming assignments", show_header=True, header_style="bold magenta")
    assignments.add_column("Due")
    assignments.add_column("Course")
    assignments.add_column("Assignment")
    for assignment in snapshot.assignments:
        due = f"{assignment.due_at:%Y-%m-%d %H:%M}" if assignment.due_at else "-"
        assignments.add_row(due, assignment.course_name or str(assignment.course_id), assignment.name)
    console.print(assignments)

    announcements = Table(title="Announcements", show_header=True, header_style="bold magenta")
    announcements.add_column("Posted")
    announcements.add_column("Course")
    announcements.add_column("Title")
    for announcement in snapshot.announcements:
        posted = f"{announcement.posted_at:%Y-%m-%d}" if announcement.posted_at else "-"
        announcements.add_row(
            posted,
            announcement.course_name or str(announcement.course_id),
            announcement.title,
        )
    console.print(announcements)
