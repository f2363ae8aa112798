"""
Interactive study shell.

Reads one command per line and drives a SessionStore session:

    next              show the next learning step
    note <text>       save a note
    ask <question>    ask about the repository (answer is saved)
    stats             show progress
    export [format]   export notes (default: markdown)
    formats           list export formats
    publish [kind]    post to X.com: summary (default), article or qa
    help              show this help
    quit              leave the session
"""

from __future__ import annotations

import textwrap

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from repostudy.core.exceptions import RepoStudyError
from repostudy.sessions.session_store import PathCompleted, SessionStore

THEME = {
    "primary": "#00D4FF",
    "accent": "#FFD700",
    "success": "#00FF88",
    "warning": "#FFA500",
    "error": "#FF4444",
    "dim": "#666666",
}

HELP_TEXT = textwrap.dedent(__doc__.split("\n\n", 2)[2]).strip()


class StudyShell:
    """Line-oriented command dispatcher for one session."""

    def __init__(self, store: SessionStore, session_id: str, console: Console | None = None):
        self.store = store
        self.session_id = session_id
        self.console = console or Console()
        self.commands = {
            "next": self.cmd_next,
            "note": self.cmd_note,
            "ask": self.cmd_ask,
            "stats": self.cmd_stats,
            "export": self.cmd_export,
            "formats": self.cmd_formats,
            "publish": self.cmd_publish,
            "help": self.cmd_help,
        }

    async def handle(self, line: str) -> bool:
        """Run one command line; returns False when the user quits."""
        command, _, arg = line.strip().partition(" ")
        command = command.lower()
        if not command:
            return True
        if command in ("quit", "exit", "q"):
            return False

        handler = self.commands.get(command)
        if handler is None:
            self.console.print(f"[{THEME['warning']}]Unknown command: {escape(command)}[/] (type 'help')")
            return True

        try:
            await handler(arg.strip())
        except RepoStudyError as e:
            self.console.print(f"[{THEME['error']}]✗ {escape(str(e))}[/]")
        return True

    # =========================================================================
    # Commands
    # =========================================================================

    async def cmd_next(self, arg: str) -> None:
        result = self.store.advance(self.session_id)
        if isinstance(result, PathCompleted):
            self.console.print(f"[{THEME['success']}]🎉 {result.message}[/]")
            return
        self.console.print(Panel(
            Markdown(result.step.content),
            title=f"[bold {THEME['primary']}]{result.message}[/]",
            subtitle=f"{result.step.description} · ~{result.step.estimated_minutes} min",
            border_style=THEME["primary"],
        ))

    async def cmd_note(self, arg: str) -> None:
        if not arg:
            self.console.print(f"[{THEME['warning']}]Usage: note <text>[/]")
            return
        stored = self.store.add_note(self.session_id, arg)
        self.console.print(f"[{THEME['success']}]✓ Note saved:[/] {stored.file_name}")

    async def cmd_ask(self, arg: str) -> None:
        if not arg:
            self.console.print(f"[{THEME['warning']}]Usage: ask <question>[/]")
            return
        result = await self.store.add_qa(self.session_id, arg)
        self.console.print(Panel(escape(result.answer), title="Answer", border_style=THEME["accent"]))
        if result.related_files:
            self.console.print(f"[{THEME['dim']}]Related files: {', '.join(result.related_files)}[/]")

    async def cmd_stats(self, arg: str) -> None:
        stats = self.store.stats(self.session_id)
        table = Table(title=f"{stats.repo_info.name} progress", show_header=False)
        table.add_column("Metric", style=THEME["primary"])
        table.add_column("Value")
        table.add_row("Steps", f"{stats.completed_steps}/{stats.total_steps}")
        table.add_row("Progress", f"{stats.percentage}%")
        table.add_row("Notes", str(stats.notes_count))
        self.console.print(table)

    async def cmd_export(self, arg: str) -> None:
        artifact = self.store.export(self.session_id, arg or "markdown")
        self.console.print(
            f"[{THEME['success']}]✓ Exported as {artifact.format}:[/] {artifact.path} "
            f"({artifact.byte_length} bytes)"
        )

    async def cmd_formats(self, arg: str) -> None:
        self.console.print(", ".join(self.store.supported_formats()))

    async def cmd_publish(self, arg: str) -> None:
        kind = arg.lower() or "summary"
        if kind == "summary":
            result = await self.store.publish(self.session_id)
        elif kind == "article":
            result = await self.store.publish_technical_article(self.session_id)
        elif kind == "qa":
            result = await self.store.publish_qa_summary(self.session_id)
        else:
            self.console.print(f"[{THEME['warning']}]Unknown publish kind: {escape(kind)}[/] (summary, article, qa)")
            return
        if not result.success:
            self.console.print(f"[{THEME['error']}]✗ Publishing failed: {escape(result.error or '')}[/]")
            return
        self.console.print(f"[{THEME['success']}]✓ Published:[/] {result.url or result.id}")

    async def cmd_help(self, arg: str) -> None:
        self.console.print(HELP_TEXT, markup=False)
