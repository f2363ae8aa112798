"""
repostudy - Guided study of GitHub repositories from the terminal.

Usage:
    repostudy study https://github.com/owner/repo   # Interactive session
    repostudy notes repos                            # Repositories with notes
    repostudy notes list REPO                        # Notes of one repository
    repostudy notes search QUERY [--repo REPO]       # Search notes
    repostudy notes export REPO [--format json]      # Combine notes into one file
    repostudy formats                                # Export formats
"""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from config import get_settings
from repostudy.cli.context import (
    build_github_client,
    build_note_store,
    build_session_store,
    configure_logging,
)
from repostudy.cli.interactive import HELP_TEXT, THEME, StudyShell
from repostudy.core.exceptions import RepoStudyError
from repostudy.export.pipeline import FORMATS

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="repostudy",
    help="📖 repostudy - Guided study of GitHub repositories",
    add_completion=False,
    rich_markup_mode="rich",
)

notes_app = typer.Typer(
    name="notes",
    help="🗒 Browse, search and export stored notes",
)
app.add_typer(notes_app, name="notes")

console = Console()


def fail(error: Exception) -> typer.Exit:
    console.print(f"[{THEME['error']}]✗ {escape(str(error))}[/]")
    return typer.Exit(1)


# =============================================================================
# Study Session
# =============================================================================


@app.command()
def study(
    url: Annotated[str, typer.Argument(help="GitHub repository URL")],
) -> None:
    """
    Start an interactive learning session for a repository.

    Examples:
        repostudy study https://github.com/pallets/flask
        repostudy study https://github.com/encode/httpx/tree/master
    """
    try:
        asyncio.run(_run_study_session(url))
    except RepoStudyError as e:
        raise fail(e) from e


async def _run_study_session(url: str) -> None:
    settings = get_settings()
    github = build_github_client(settings)
    try:
        store = build_session_store(settings, github)
        with console.status(f"[{THEME['primary']}]Analyzing {url}...[/]"):
            session = await store.create(url)

        repo = session.repo_info
        path = session.learning_path
        console.print(Panel(
            f"[bold]{repo.owner}/{repo.name}[/]\n"
            f"{repo.description or 'No description provided'}\n\n"
            f"Language: {repo.primary_language}  ·  "
            f"Files: {repo.stats.total_files}  ·  Lines: {repo.stats.total_lines}\n"
            f"Difficulty: {path.difficulty}  ·  "
            f"{path.total_steps} steps  ·  ~{path.estimated_total}",
            title="📖 Learning session",
            border_style=THEME["primary"],
        ))
        console.print(f"[{THEME['dim']}]{escape(HELP_TEXT)}[/]")

        shell = StudyShell(store, session.id, console=console)
        while True:
            try:
                line = Prompt.ask(f"[bold {THEME['accent']}]repostudy[/]", console=console)
            except (EOFError, KeyboardInterrupt):
                break
            if not await shell.handle(line):
                break

        store.close(session.id)
        console.print(f"[{THEME['success']}]Session closed. Notes are in {settings.notes_dir}[/]")
    finally:
        await github.close()


# =============================================================================
# Notes Commands
# =============================================================================


@notes_app.command("repos")
def notes_repos() -> None:
    """List repositories that have stored notes."""
    repos = build_note_store(get_settings()).list_repositories()
    if not repos:
        console.print(f"[{THEME['dim']}]No notes stored yet[/]")
        return

    table = Table(title="Repositories")
    table.add_column("Repository", style=THEME["primary"])
    table.add_column("Notes", justify="right")
    table.add_column("Last updated")
    for repo in repos:
        table.add_row(repo["name"], str(repo["notes_count"]), repo["last_updated"].strftime("%Y-%m-%d %H:%M"))
    console.print(table)


@notes_app.command("list")
def notes_list(
    repo: Annotated[str, typer.Argument(help="Repository name")],
) -> None:
    """List the notes of one repository, newest first."""
    notes = build_note_store(get_settings()).list(repo)
    if not notes:
        console.print(f"[{THEME['dim']}]No notes for {repo}[/]")
        return

    table = Table(title=f"{repo} notes")
    table.add_column("File", style=THEME["primary"])
    table.add_column("Modified")
    for note in notes:
        table.add_row(note.file_name, note.last_modified.strftime("%Y-%m-%d %H:%M:%S"))
    console.print(table)


@notes_app.command("search")
def notes_search(
    query: Annotated[str, typer.Argument(help="Text to search for")],
    repo: Annotated[
        str | None, typer.Option("--repo", "-r", help="Only search this repository")
    ] = None,
) -> None:
    """Case-insensitive search across stored notes."""
    results = build_note_store(get_settings()).search(query, repo_name=repo)
    if not results:
        console.print(f"[{THEME['dim']}]No notes match '{escape(query)}'[/]")
        return

    console.print(f"[{THEME['success']}]{len(results)} match(es)[/]")
    for note in results:
        console.print(f"[bold {THEME['primary']}]{note.repo}[/] {note.file_name}")
        console.print(f"  [{THEME['dim']}]{escape(note.snippet or '')}[/]", highlight=False)


@notes_app.command("delete")
def notes_delete(
    repo: Annotated[str, typer.Argument(help="Repository name")],
    file_name: Annotated[str, typer.Argument(help="Note file name")],
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Skip confirmation")
    ] = False,
) -> None:
    """Delete one stored note."""
    if not yes and not typer.confirm(f"Delete {file_name} from {repo}?"):
        raise typer.Exit(0)
    try:
        build_note_store(get_settings()).delete(repo, file_name)
    except RepoStudyError as e:
        raise fail(e) from e
    console.print(f"[{THEME['success']}]✓ Deleted {file_name}[/]")


@notes_app.command("export")
def notes_export(
    repo: Annotated[str, typer.Argument(help="Repository name")],
    format: Annotated[
        str, typer.Option("--format", "-f", help="markdown, md or json")
    ] = "markdown",
) -> None:
    """Combine every note of a repository into a single file."""
    try:
        artifact = build_note_store(get_settings()).export_all(repo, format)
    except RepoStudyError as e:
        raise fail(e) from e
    console.print(
        f"[{THEME['success']}]✓ Exported {repo}:[/] {artifact.path} ({artifact.byte_length} bytes)"
    )


# =============================================================================
# Misc
# =============================================================================


@app.command()
def formats() -> None:
    """List the session export formats."""
    table = Table(title="Export formats")
    table.add_column("Format", style=THEME["primary"])
    table.add_column("Extension")
    table.add_column("Description")
    for tag, spec in FORMATS.items():
        table.add_row(tag, spec.extension, spec.description)
    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


@app.callback()
def callback(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Debug logging")
    ] = False,
) -> None:
    """
    📖 repostudy - Guided study of GitHub repositories

    \b
    Quick Start:
      repostudy study https://github.com/owner/repo
      repostudy notes repos
    """
    configure_logging(get_settings(), verbose=verbose)
    logger.debug("Logging configured")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
