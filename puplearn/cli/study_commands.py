"""
Flip mode study commands.

Commands:
    puplearn study SET_ID [--shuffle] [--focus]   Self-graded flip cards
    puplearn history [SET_ID]                      Recent flip sessions
"""
from __future__ import annotations

from typing import Optional

import typer
from rich import print as rprint
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from puplearn.cli.common import STYLES, cli_errors, console
from puplearn.library.library_service import LibraryService
from puplearn.study.flip_session import FlipCard, FlipDeck, FlipSummary
from puplearn.study.study_service import StudyService


def _get_study_service() -> StudyService:
    return StudyService()


def _show_front(deck: FlipDeck, focus: bool) -> None:
    card = deck.current
    position = f"{deck.index + 1}/{len(deck)}"
    if focus:
        console.clear()
        console.print(f"\n[dim]{position}[/dim]\n")
        console.print(f"[bold]{card.question}[/bold]\n")
        return

    title = "[bold cyan]FLASHCARD[/bold cyan]"
    if deck.restudy:
        title += " [red](Review Mode)[/red]"
    console.print(Panel(card.question, title=title, subtitle=f"[dim]{position}[/dim]", border_style="cyan"))


def _show_back(deck: FlipDeck, focus: bool) -> None:
    card = deck.current
    if focus:
        console.print(f"[blue]{card.answer}[/blue]\n")
    else:
        console.print(Panel(card.answer, title="Answer", border_style="blue"))


def _run_deck(deck: FlipDeck, focus: bool) -> bool:
    """Go through the deck. Returns False if the learner quit early."""
    while True:
        _show_front(deck, focus)
        reply = Prompt.ask("[dim]Enter to flip, p for previous, q to quit[/dim]", default="")
        choice = reply.strip().lower()
        if choice == "q":
            return False
        if choice == "p":
            deck.previous()
            continue

        deck.flip()
        _show_back(deck, focus)
        is_correct = Confirm.ask("Did you know it?", default=True)
        deck.mark(is_correct)
        style = STYLES["correct"] if is_correct else STYLES["incorrect"]
        console.print(f"[{style}]{'Got it' if is_correct else 'Missed'}[/{style}]")

        if deck.next() is None:
            return True


def _display_summary(summary: FlipSummary) -> None:
    console.print(Panel(
        f"[bold]Session Complete![/bold]\n\n"
        f"Cards: {summary.total_cards}\n"
        f"Correct: {summary.correct_cards}\n"
        f"Wrong: {summary.wrong_cards}\n"
        f"Accuracy: {summary.accuracy}%",
        title="Summary",
        border_style="green",
    ))


def study(
    study_set_id: str = typer.Argument(..., help="Study set ID"),
    shuffle: bool = typer.Option(False, "--shuffle", "-s", help="Shuffle the cards"),
    focus: bool = typer.Option(False, "--focus", "-f", help="Focus mode: one card, no frames"),
) -> None:
    """
    Study with self-graded flip cards.

    Flip each card, say whether you knew it, and restudy the ones you missed.
    """
    with cli_errors():
        study_set = LibraryService().get_study_set(study_set_id)

    if not study_set.flashcards:
        rprint("[yellow]This study set has no flashcards yet.[/yellow]")
        raise typer.Exit(1)

    deck = FlipDeck([FlipCard(c.id, c.question, c.answer) for c in study_set.flashcards])
    if shuffle:
        deck.shuffle()

    service = _get_study_service()
    while True:
        finished = _run_deck(deck, focus)
        summary = deck.summary()
        if summary.results:
            with cli_errors():
                service.record_session(study_set.id, summary)
        if not finished:
            rprint("\n[yellow]Session ended early.[/yellow]")
            return

        _display_summary(summary)
        restudy = deck.restudy_wrong()
        if restudy is None or not Confirm.ask("Restudy the cards you missed?", default=False):
            return
        deck = restudy


def history(
    study_set_id: Optional[str] = typer.Argument(None, help="Limit to one study set"),
    limit: int = typer.Option(10, "--limit", "-l", help="Number of sessions to show"),
) -> None:
    """Show recent flip sessions."""
    with cli_errors():
        sessions = _get_study_service().list_sessions(study_set_id, limit=limit)

    if not sessions:
        rprint("[yellow]No study sessions yet.[/yellow]")
        return

    table = Table(title="Recent Study Sessions")
    table.add_column("When")
    table.add_column("Study set", style="bold")
    table.add_column("Correct", justify="right", style="green")
    table.add_column("Wrong", justify="right", style="red")
    table.add_column("Total", justify="right")
    for s in sessions:
        table.add_row(
            s.created_at.strftime("%Y-%m-%d %H:%M"),
            s.study_set_title,
            str(s.correct_cards),
            str(s.wrong_cards),
            str(s.total_cards),
        )
    console.print(table)
