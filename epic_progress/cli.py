import logging
from enum import Enum
from pathlib import Path
from typing import NoReturn, Optional

import requests
import typer

from .config import ConfigError, Settings, load_settings
from .domain import IssueRef
from .epic import build_resolver, compute_progress
from .github import GitHubClient, GitHubError
from .progress import format_summary, progress_bar
from .refs import RefError, parse_issue_ref

app = typer.Typer(help="Epic Progress CLI")

FATAL_ERRORS = (RefError, GitHubError, requests.RequestException)


class OutputFormat(str, Enum):
    text = "text"
    json = "json"
    yaml = "yaml"


def fail(message) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


def parse_root(text: str) -> IssueRef:
    try:
        return parse_issue_ref(text)
    except RefError as e:
        fail(e)


def load_client_settings(config: Optional[Path], **overrides) -> Settings:
    try:
        settings = load_settings(config, **overrides)
        settings.require_token()
    except ConfigError as e:
        fail(e)
    return settings


def make_client(settings: Settings) -> GitHubClient:
    return GitHubClient(settings.token, api_url=settings.api_url, timeout=settings.timeout)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Also show HTTP details."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show warnings and errors."),
):
    """Weighted completion of GitHub Epics and their sub-issues."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


@app.command()
def progress(
    epic: str = typer.Argument(..., help="Epic issue URL or owner/repo#number."),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project board URL or node id."),
    milestone: Optional[str] = typer.Option(None, "--milestone", "-m", help="Only count issues in this milestone."),
    status_field: Optional[str] = typer.Option(None, "--status-field", help="Board field holding the status."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file."),
    output: OutputFormat = typer.Option(OutputFormat.text, "--format", "-f", help="Output format."),
):
    """Show the weighted progress of an Epic."""
    root = parse_root(epic)
    settings = load_client_settings(config, project=project, milestone=milestone, status_field=status_field)
    try:
        result = compute_progress(
            root,
            make_client(settings),
            board=settings.project,
            milestone=settings.milestone,
            status_field=settings.status_field,
        )
    except FATAL_ERRORS as e:
        fail(e)

    if output is OutputFormat.json:
        typer.echo(result.to_json())
    elif output is OutputFormat.yaml:
        typer.echo(result.to_yaml(), nl=False)
    else:
        typer.echo(format_summary(result))


@app.command()
def status(
    issue: str = typer.Argument(..., help="Issue URL or owner/repo#number."),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project board URL or node id."),
    milestone: Optional[str] = typer.Option(None, "--milestone", "-m", help="Milestone the issue must belong to."),
    status_field: Optional[str] = typer.Option(None, "--status-field", help="Board field holding the status."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file."),
):
    """Show the status category of a single issue."""
    ref = parse_root(issue)
    settings = load_client_settings(config, project=project, milestone=milestone, status_field=status_field)
    try:
        resolver = build_resolver(make_client(settings), settings.project, settings.milestone, settings.status_field)
    except FATAL_ERRORS as e:
        fail(e)
    category = resolver.resolve(ref)
    typer.echo(f"{ref}: {category.value if category else 'skipped'}")


@app.command()
def bar(percent: int = typer.Argument(..., min=0, max=100, help="Completion percentage.")):
    """Print the progress bar for a percentage."""
    typer.echo(f"{percent}% {progress_bar(percent)}")


if __name__ == "__main__":
    app()
