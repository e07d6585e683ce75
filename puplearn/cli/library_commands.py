"""
CLI Library Commands.

Commands:
    puplearn folders list|create|rename|delete
    puplearn sets list|create|show|favorite|move|delete
    puplearn cards add|edit|delete|import
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from rich import print as rprint
from rich.panel import Panel
from rich.table import Table

from puplearn.cli.common import cli_errors, console
from puplearn.library.library_service import LibraryService

folders_app = typer.Typer(name="folders", help="Organize study sets into folders", no_args_is_help=True)
sets_app = typer.Typer(name="sets", help="Create and manage study sets", no_args_is_help=True)
cards_app = typer.Typer(name="cards", help="Add, edit and import flashcards", no_args_is_help=True)


def _get_library_service() -> LibraryService:
    return LibraryService()


# =============================================================================
# Folders
# =============================================================================


@folders_app.command("list")
def folders_list() -> None:
    """List folders in display order."""
    with cli_errors():
        folders = _get_library_service().list_folders()

    if not folders:
        rprint("[yellow]No folders yet.[/yellow]")
        return

    by_id = {f.id: f for f in folders}
    table = Table(title="Folders")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Parent")
    table.add_column("Sets", justify="right")
    for folder in folders:
        parent = by_id[folder.parent_id].name if folder.parent_id in by_id else ""
        table.add_row(folder.id, folder.name, parent, str(folder.study_set_count))
    console.print(table)


@folders_app.command("create")
def folders_create(
    name: str = typer.Argument(..., help="Folder name"),
    parent: Optional[str] = typer.Option(None, "--parent", "-p", help="Parent folder ID"),
) -> None:
    """Create a folder."""
    with cli_errors():
        folder = _get_library_service().create_folder(name, parent_id=parent)
    rprint(f"[green]Created folder[/green] {folder.name} [dim]({folder.id})[/dim]")


@folders_app.command("rename")
def folders_rename(
    folder_id: str = typer.Argument(..., help="Folder ID"),
    name: str = typer.Argument(..., help="New name"),
) -> None:
    """Rename a folder."""
    with cli_errors():
        folder = _get_library_service().rename_folder(folder_id, name)
    rprint(f"[green]Renamed folder to[/green] {folder.name}")


@folders_app.command("delete")
def folders_delete(
    folder_id: str = typer.Argument(..., help="Folder ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a folder and its sub-folders. Study sets inside are kept."""
    if not yes and not typer.confirm("Delete this folder and its sub-folders?"):
        raise typer.Exit(0)
    with cli_errors():
        _get_library_service().delete_folder(folder_id)
    rprint("[green]Folder deleted.[/green]")


# =============================================================================
# Study sets
# =============================================================================


@sets_app.command("list")
def sets_list(
    folder: Optional[str] = typer.Option(None, "--folder", "-f", help="Only sets in this folder"),
    favorites: bool = typer.Option(False, "--favorites", help="Only favorite sets"),
) -> None:
    """List study sets."""
    with cli_errors():
        study_sets = _get_library_service().list_study_sets(folder_id=folder, favorites_only=favorites)

    if not study_sets:
        rprint("[yellow]No study sets found.[/yellow]")
        rprint("[dim]Create one with [cyan]puplearn sets create TITLE[/cyan][/dim]")
        return

    table = Table(title="Study Sets")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Cards", justify="right")
    table.add_column("Fav", justify="center")
    table.add_column("Last studied")
    for s in study_sets:
        table.add_row(
            s.id,
            s.title,
            str(s.card_count),
            "*" if s.is_favorite else "",
            s.last_accessed.strftime("%Y-%m-%d %H:%M") if s.last_accessed else "-",
        )
    console.print(table)


@sets_app.command("create")
def sets_create(
    title: str = typer.Argument(..., help="Study set title"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    folder: Optional[str] = typer.Option(None, "--folder", "-f", help="Folder ID"),
) -> None:
    """Create a study set."""
    with cli_errors():
        study_set = _get_library_service().create_study_set(title, description, folder_id=folder)
    rprint(f"[green]Created study set[/green] {study_set.title} [dim]({study_set.id})[/dim]")


@sets_app.command("show")
def sets_show(study_set_id: str = typer.Argument(..., help="Study set ID")) -> None:
    """Show a study set and its flashcards."""
    with cli_errors():
        study_set = _get_library_service().get_study_set(study_set_id)

    header = f"[bold]{study_set.title}[/bold]"
    if study_set.description:
        header += f"\n[dim]{study_set.description}[/dim]"
    console.print(Panel(header, border_style="blue"))

    if not study_set.flashcards:
        rprint("[yellow]No flashcards yet.[/yellow]")
        return

    table = Table()
    table.add_column("#", justify="right", style="dim")
    table.add_column("ID", style="dim")
    table.add_column("Question")
    table.add_column("Answer")
    for i, card in enumerate(study_set.flashcards, 1):
        table.add_row(str(i), card.id, card.question, card.answer)
    console.print(table)


@sets_app.command("favorite")
def sets_favorite(study_set_id: str = typer.Argument(..., help="Study set ID")) -> None:
    """Toggle the favorite flag."""
    with cli_errors():
        study_set = _get_library_service().toggle_favorite(study_set_id)
    state = "added to" if study_set.is_favorite else "removed from"
    rprint(f"{study_set.title} {state} favorites")


@sets_app.command("move")
def sets_move(
    study_set_id: str = typer.Argument(..., help="Study set ID"),
    folder: Optional[str] = typer.Option(None, "--folder", "-f", help="Target folder (omit to unfile)"),
) -> None:
    """Move a study set into a folder."""
    with cli_errors():
        _get_library_service().move_study_set(study_set_id, folder)
    rprint("[green]Study set moved.[/green]")


@sets_app.command("delete")
def sets_delete(
    study_set_id: str = typer.Argument(..., help="Study set ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a study set with all its cards and sessions."""
    if not yes and not typer.confirm("Delete this study set and all its cards?"):
        raise typer.Exit(0)
    with cli_errors():
        _get_library_service().delete_study_set(study_set_id)
    rprint("[green]Study set deleted.[/green]")


# =============================================================================
# Flashcards
# =============================================================================


@cards_app.command("add")
def cards_add(
    study_set_id: str = typer.Argument(..., help="Study set ID"),
    question: str = typer.Argument(..., help="Question (front)"),
    answer: str = typer.Argument(..., help="Answer (back)"),
) -> None:
    """Add one flashcard."""
    with cli_errors():
        card = _get_library_service().add_flashcard(study_set_id, question, answer)
    rprint(f"[green]Added card[/green] [dim]({card.id})[/dim]")


@cards_app.command("edit")
def cards_edit(
    flashcard_id: str = typer.Argument(..., help="Flashcard ID"),
    question: Optional[str] = typer.Option(None, "--question", "-q"),
    answer: Optional[str] = typer.Option(None, "--answer", "-a"),
) -> None:
    """Edit a flashcard."""
    with cli_errors():
        _get_library_service().update_flashcard(flashcard_id, question, answer)
    rprint("[green]Card updated.[/green]")


@cards_app.command("delete")
def cards_delete(flashcard_id: str = typer.Argument(..., help="Flashcard ID")) -> None:
    """Delete a flashcard."""
    with cli_errors():
        _get_library_service().delete_flashcard(flashcard_id)
    rprint("[green]Card deleted.[/green]")


@cards_app.command("import")
def cards_import(
    study_set_id: str = typer.Argument(..., help="Study set ID"),
    source: Optional[Path] = typer.Argument(
        None, exists=True, dir_okay=False, help="Text file to import (reads stdin when omitted)"
    ),
) -> None:
    """
    Bulk import flashcards from pasted text.

    Supports "Q:/A:" blocks, "question | answer", "question - answer",
    "term: definition" and numbered lists.
    """
    text = source.read_text(encoding="utf-8") if source else sys.stdin.read()
    with cli_errors():
        result = _get_library_service().import_text(study_set_id, text)
    rprint(f"[green]Imported {result.count} flashcards[/green] [dim]({result.detected_format})[/dim]")
