"""
Main CLI entry point for fossapi.

Usage:
    fossapi get project "custom+1/my-project"
    fossapi list dependencies "custom+1/my-project$main" --count 50
    fossapi list issues --category vulnerability --project "custom+1/my-project"
    fossapi update project "custom+1/my-project" --title "New title"
    fossapi mcp
    fossapi mock-server --port 8080
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Annotated, Any, Optional

import typer
from rich.console import Console

from fossapi import __version__
from fossapi.adapters.http import FossaClient
from fossapi.domain.exceptions import ConfigError, FossaError
from fossapi.domain.pagination import DEFAULT_PAGE_SIZE, Page
from fossapi.log import configure_logging

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="fossapi",
    help="FOSSA API client: projects, revisions, dependencies and issues.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
get_app = typer.Typer(help="Fetch a single entity.", no_args_is_help=True)
list_app = typer.Typer(help="List entities one page at a time.", no_args_is_help=True)
update_app = typer.Typer(help="Update an entity.", no_args_is_help=True)
app.add_typer(get_app, name="get")
app.add_typer(list_app, name="list")
app.add_typer(update_app, name="update")

console = Console()
err_console = Console(stderr=True)


class Category(str, Enum):
    """Issue category options."""

    vulnerability = "vulnerability"
    licensing = "licensing"
    quality = "quality"


class CliState:
    """Options shared by every command."""

    def __init__(self, json_output: bool = False, verbose: bool = False) -> None:
        self.json_output = json_output
        self.verbose = verbose


def build_client() -> FossaClient:
    """Client configured from FOSSA_API_KEY / FOSSA_API_URL / FOSSA_TIMEOUT."""
    return FossaClient.from_env()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"fossapi version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output JSON instead of tables."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log requests and responses to stderr."),
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    FOSSA API client.

    Reads the API token from [bold]FOSSA_API_KEY[/bold] and the base URL from
    [bold]FOSSA_API_URL[/bold] (default https://app.fossa.com/api).

    Examples:

        fossapi get project "custom+1/my-project"

        fossapi --json list issues --category licensing
    """
    configure_logging(verbose)
    ctx.obj = CliState(json_output=json_output, verbose=verbose)


@contextmanager
def _handle_errors() -> Iterator[None]:
    try:
        yield
    except ConfigError as e:
        err_console.print(f"[red]Configuration error: {e.message}[/red]")
        if e.config_key == "FOSSA_API_KEY":
            err_console.print("Set FOSSA_API_KEY to your FOSSA API token.")
        raise typer.Exit(1) from e
    except FossaError as e:
        err_console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1) from e


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj if isinstance(ctx.obj, CliState) else CliState()


def _emit(ctx: typer.Context, value: Any, render: Callable[[Any], None]) -> None:
    if _state(ctx).json_output:
        from fossapi.renderers.json_renderer import JsonRenderer

        typer.echo(JsonRenderer().render(value))
    else:
        render(value)


def _terminal() -> Any:
    from fossapi.renderers.terminal import TerminalRenderer

    return TerminalRenderer(console=console)


def _collect(ops: Any, query: Any, page: int, count: int, all_pages: bool) -> Page[Any]:
    """One page, or every page folded into a single page when ``all_pages``."""
    from fossapi.operations import fetch_all

    if not all_pages:
        return ops.list_page(query, page=page, count=count)
    items = fetch_all(ops, query)
    return Page.build(items, page=0, count=max(len(items), 1), total=len(items), has_more=False)


PageOption = Annotated[int, typer.Option("--page", "-p", min=0, help="0-indexed page number.")]
CountOption = Annotated[
    int, typer.Option("--count", "-n", min=1, help="Items per page (max 100).")
]
AllOption = Annotated[bool, typer.Option("--all", help="Fetch every page.")]


# --- get ---


@get_app.command("project")
def get_project(
    ctx: typer.Context,
    locator: Annotated[str, typer.Argument(help="Project locator, e.g. custom+1/my-project.")],
) -> None:
    """Show one project."""
    from fossapi.operations import ProjectOps

    with _handle_errors(), build_client() as client:
        project = ProjectOps(client).get(locator)
    _emit(ctx, project, _terminal().render_project)


@get_app.command("revision")
def get_revision(
    ctx: typer.Context,
    locator: Annotated[str, typer.Argument(help="Revision locator, e.g. custom+1/my-project$main.")],
) -> None:
    """Show one revision."""
    from fossapi.operations import RevisionOps

    with _handle_errors(), build_client() as client:
        revision = RevisionOps(client).get(locator)
    _emit(ctx, revision, _terminal().render_revision)


@get_app.command("issue")
def get_issue(
    ctx: typer.Context,
    issue_id: Annotated[str, typer.Argument(metavar="ID", help="Numeric issue id.")],
    category: Annotated[
        Optional[Category],
        typer.Option("--category", "-c", help="Issue category."),
    ] = None,
) -> None:
    """Show one issue."""
    from fossapi.operations import IssueOps

    with _handle_errors(), build_client() as client:
        issue = IssueOps(client).get(issue_id, category=category.value if category else None)
    _emit(ctx, issue, _terminal().render_issue)


# --- list ---


@list_app.command("projects")
def list_projects(
    ctx: typer.Context,
    title: Annotated[Optional[str], typer.Option("--title", "-t", help="Filter by title.")] = None,
    page: PageOption = 0,
    count: CountOption = DEFAULT_PAGE_SIZE,
    all_pages: AllOption = False,
) -> None:
    """List projects."""
    from fossapi.domain.queries import ProjectListQuery
    from fossapi.operations import ProjectOps

    with _handle_errors(), build_client() as client:
        result = _collect(ProjectOps(client), ProjectListQuery(title=title), page, count, all_pages)
    _emit(ctx, result, _terminal().render_projects)


@list_app.command("revisions")
def list_revisions(
    ctx: typer.Context,
    project: Annotated[str, typer.Argument(help="Project locator.")],
    page: PageOption = 0,
    count: CountOption = DEFAULT_PAGE_SIZE,
    all_pages: AllOption = False,
) -> None:
    """List the revisions of a project."""
    from fossapi.domain.locator import parse_project
    from fossapi.domain.queries import RevisionListQuery
    from fossapi.operations import RevisionOps

    with _handle_errors(), build_client() as client:
        query = RevisionListQuery(project=parse_project(project))
        result = _collect(RevisionOps(client), query, page, count, all_pages)
    _emit(ctx, result, _terminal().render_revisions)


@list_app.command("dependencies")
def list_dependencies(
    ctx: typer.Context,
    revision: Annotated[str, typer.Argument(help="Revision locator.")],
    page: PageOption = 0,
    count: CountOption = DEFAULT_PAGE_SIZE,
    all_pages: AllOption = False,
) -> None:
    """List the dependencies of a revision."""
    from fossapi.domain.locator import parse_revision
    from fossapi.domain.queries import DependencyListQuery
    from fossapi.operations import DependencyOps

    with _handle_errors(), build_client() as client:
        query = DependencyListQuery(revision=parse_revision(revision))
        result = _collect(DependencyOps(client), query, page, count, all_pages)
    _emit(ctx, result, _terminal().render_dependencies)


@list_app.command("issues")
def list_issues(
    ctx: typer.Context,
    category: Annotated[
        Optional[Category],
        typer.Option("--category", "-c", help="Issue category."),
    ] = None,
    project: Annotated[
        Optional[str],
        typer.Option("--project", help="Only issues affecting this project."),
    ] = None,
    page: PageOption = 0,
    count: CountOption = DEFAULT_PAGE_SIZE,
    all_pages: AllOption = False,
) -> None:
    """List issues, optionally by category and project."""
    from fossapi.domain.locator import parse_project
    from fossapi.domain.models import IssueCategory
    from fossapi.domain.queries import IssueListQuery
    from fossapi.operations import IssueOps

    with _handle_errors(), build_client() as client:
        query = IssueListQuery(
            category=IssueCategory(category.value) if category else None,
            project=parse_project(project) if project else None,
        )
        result = _collect(IssueOps(client), query, page, count, all_pages)
    _emit(ctx, result, _terminal().render_issues)


# --- update ---


@update_app.command("project")
def update_project(
    ctx: typer.Context,
    locator: Annotated[str, typer.Argument(help="Project locator.")],
    title: Annotated[Optional[str], typer.Option("--title", help="New title.")] = None,
    description: Annotated[
        Optional[str], typer.Option("--description", help="New description.")
    ] = None,
    url: Annotated[Optional[str], typer.Option("--url", help="New URL.")] = None,
    public: Annotated[
        Optional[bool],
        typer.Option("--public/--private", help="Project visibility."),
    ] = None,
) -> None:
    """
    Update a project. Only the options given are changed.

    Examples:

        fossapi update project "custom+1/my-project" --title "My Project"

        fossapi update project "custom+1/my-project" --private
    """
    from fossapi.domain.models import ProjectUpdateParams, load_entity
    from fossapi.operations import ProjectOps

    with _handle_errors():
        params = load_entity(
            ProjectUpdateParams,
            {"title": title, "description": description, "url": url, "public": public},
        )
    if params.is_empty:
        err_console.print(
            "[yellow]Nothing to update. Pass --title, --description, --url or --public/--private.[/yellow]"
        )
        raise typer.Exit(1)

    with _handle_errors(), build_client() as client:
        project = ProjectOps(client).update(locator, params)
    if not _state(ctx).json_output:
        console.print(f"[green]Updated {project.id}[/green]")
    _emit(ctx, project, _terminal().render_project)


# --- servers ---


@app.command()
def mcp() -> None:
    """
    Run the MCP tool server on stdio.

    Exposes get, list and update tools to MCP clients.
    """
    from fossapi.mcp_server import run_server

    with _handle_errors():
        client = build_client()
    with client:
        run_server(client)


@app.command("mock-server")
def mock_server(
    host: Annotated[str, typer.Option("--host", help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", help="Port to listen on.")] = 8080,
    token: Annotated[
        Optional[str],
        typer.Option("--token", help="Require this bearer token on every request."),
    ] = None,
    empty: Annotated[
        bool,
        typer.Option("--empty", help="Start without the default fixtures."),
    ] = False,
) -> None:
    """
    Serve the in-memory mock FOSSA API over HTTP.

    Point the client at it with FOSSA_API_URL=http://HOST:PORT.
    """
    from fossapi.mock import MockServer

    server = MockServer.empty(required_token=token) if empty else MockServer(required_token=token)
    console.print(f"[bold]Mock FOSSA API[/bold] on [cyan]http://{host}:{port}[/cyan]")
    server.serve(host=host, port=port)


if __name__ == "__main__":
    app()
