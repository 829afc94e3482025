"""
Terminal renderer using Rich.

Detail panels for single entities and tables for pages of results.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from fossapi.domain.models import (
    Dependency,
    Issue,
    IssueCategory,
    IssueSeverity,
    Project,
    Revision,
)
from fossapi.domain.pagination import Page


def _fmt(value: Any) -> str:
    if value is None or value == "" or value == []:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    return str(value)


class TerminalRenderer:
    """Renders fossapi entities to the terminal."""

    SEVERITY_COLORS = {
        IssueSeverity.CRITICAL: "red bold",
        IssueSeverity.HIGH: "red",
        IssueSeverity.MEDIUM: "yellow",
        IssueSeverity.LOW: "blue",
    }

    CATEGORY_COLORS = {
        IssueCategory.VULNERABILITY: "red",
        IssueCategory.LICENSING: "magenta",
        IssueCategory.QUALITY: "cyan",
    }

    def __init__(self, console: Console | None = None) -> None:
        """
        Initialize the terminal renderer.

        Args:
            console: Rich console to use (creates new one if None).
        """
        self.console = console or Console()

    # --- Single entities ---

    def render_project(self, project: Project) -> None:
        rows: list[tuple[str, Any]] = [
            ("Locator", project.id),
            ("Title", project.title),
            ("Description", project.description),
            ("Branch", project.branch),
            ("Type", project.project_type),
            ("URL", project.url),
            ("Public", project.public),
            ("Last analyzed", project.last_analyzed),
            ("Latest revision", project.latest_revision_locator),
            ("Build status", project.latest_build_status),
            ("Labels", project.labels),
            ("Teams", project.teams),
        ]
        if project.issues is not None:
            counts = project.issues
            rows.append(
                (
                    "Issues",
                    f"{counts.total} total ({counts.security} security, "
                    f"{counts.licensing} licensing, {counts.quality} quality)",
                )
            )
        self._render_detail("Project", rows)

    def render_revision(self, revision: Revision) -> None:
        self._render_detail(
            "Revision",
            [
                ("Locator", revision.locator),
                ("Project", revision.project_locator),
                ("Ref", revision.ref),
                ("Resolved", revision.resolved),
                ("Source", revision.source.value if revision.source else None),
                ("Source type", revision.source_type),
                ("Unresolved issues", revision.unresolved_issue_count),
                ("Author", revision.author),
                ("Message", revision.message),
                ("Error", revision.error),
                ("Created", revision.created_at),
                ("Updated", revision.updated_at),
            ],
        )

    def render_issue(self, issue: Issue) -> None:
        rows: list[tuple[str, Any]] = [
            ("ID", issue.id),
            ("Category", self._category_text(issue.issue_type)),
            ("Source", issue.source.id),
            ("Title", issue.title),
            ("Severity", self._severity_text(issue.severity)),
            ("Active / ignored", f"{issue.statuses.active} / {issue.statuses.ignored}"),
            ("Direct / deep", f"{issue.depths.direct} / {issue.depths.deep}"),
        ]
        if issue.issue_type == IssueCategory.VULNERABILITY:
            rows += [
                ("CVE", issue.cve),
                ("CVSS", issue.cvss),
                ("CWEs", issue.cwes),
                ("Details", issue.details),
            ]
        elif issue.issue_type == IssueCategory.LICENSING:
            rows.append(("License", issue.license))
        else:
            rows.append(("Rule", issue.quality_rule))
        self._render_detail("Issue", rows)

    def _render_detail(self, title: str, rows: list[tuple[str, Any]]) -> None:
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Field", style="bold")
        table.add_column("Value")
        for label, value in rows:
            table.add_row(label, value if isinstance(value, Text) else _fmt(value))
        self.console.print(Panel(table, title=f"[bold]{title}[/bold]", border_style="blue"))

    # --- Pages ---

    def render_projects(self, page: Page[Project]) -> None:
        table = Table(title="Projects")
        table.add_column("Locator", style="cyan")
        table.add_column("Title")
        table.add_column("Branch")
        table.add_column("Issues", justify="right")
        table.add_column("Last analyzed")
        for project in page.items:
            total = project.issues.total if project.issues else None
            table.add_row(
                str(project.id),
                project.title,
                _fmt(project.branch),
                _fmt(total),
                _fmt(project.last_analyzed) if project.is_analyzed else "never",
            )
        self._render_table(table, page)

    def render_revisions(self, page: Page[Revision]) -> None:
        table = Table(title="Revisions")
        table.add_column("Locator", style="cyan")
        table.add_column("Resolved")
        table.add_column("Source type")
        table.add_column("Unresolved issues", justify="right")
        table.add_column("Created")
        for revision in page.items:
            table.add_row(
                str(revision.locator),
                _fmt(revision.resolved),
                _fmt(revision.source_type),
                str(revision.unresolved_issue_count),
                _fmt(revision.created_at),
            )
        self._render_table(table, page)

    def render_dependencies(self, page: Page[Dependency]) -> None:
        table = Table(title="Dependencies")
        table.add_column("Locator", style="cyan")
        table.add_column("Depth", justify="right")
        table.add_column("Licenses")
        table.add_column("Issues", justify="right")
        for dep in page.items:
            depth = Text(str(dep.depth), style="bold" if dep.is_direct else "dim")
            table.add_row(
                str(dep.locator),
                depth,
                _fmt(dep.license_names),
                str(len(dep.issues)),
            )
        self._render_table(table, page)

    def render_issues(self, page: Page[Issue]) -> None:
        table = Table(title="Issues")
        table.add_column("ID", justify="right")
        table.add_column("Category")
        table.add_column("Severity")
        table.add_column("Source", style="cyan")
        table.add_column("Detail")
        for issue in page.items:
            detail = issue.cve or issue.license or issue.title
            table.add_row(
                str(issue.id),
                self._category_text(issue.issue_type),
                self._severity_text(issue.severity),
                str(issue.source.id),
                _fmt(detail),
            )
        self._render_table(table, page)

    def _render_table(self, table: Table, page: Page[Any]) -> None:
        if not page.items:
            self.console.print(f"[yellow]No {str(table.title).lower()} found.[/yellow]")
            return
        self.console.print(table)
        footer = f"Page {page.page}, {len(page.items)} item(s)"
        if page.total is not None:
            footer += f" of {page.total}"
        if page.has_more:
            footer += f" | next: --page {page.page + 1}"
        self.console.print(f"[dim]{footer}[/dim]")

    def _severity_text(self, severity: IssueSeverity | None) -> Text:
        if severity is None:
            return Text("-", style="dim")
        return Text(severity.value.upper(), style=self.SEVERITY_COLORS[severity])

    def _category_text(self, category: IssueCategory) -> Text:
        return Text(category.value, style=self.CATEGORY_COLORS[category])
