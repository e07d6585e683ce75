"""
Learn Mode command.

Presents the card picked by the scheduler, grades it (self-graded by
default, typed with --typed), and repeats until every card is mastered.
Afterwards offers a review pass over the cards that were missed.
"""
from __future__ import annotations

from typing import Optional

import typer
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from puplearn.cli.common import STYLES, cli_errors, console, format_progress_bar
from puplearn.core.errors import CardContentMissingError
from puplearn.learning.learn_service import LearnService
from puplearn.learning.scheduler import LearnCard, LearnModeScheduler
from puplearn.learning.session_machine import LearnSessionSnapshot

QUIT_KEYS = ("q", "quit")


def _get_learn_service() -> LearnService:
    return LearnService()


def _display_header(snapshot: LearnSessionSnapshot) -> None:
    summary = LearnModeScheduler(snapshot.mastery_goal).calculate_progress(snapshot.cards)
    bar = format_progress_bar(summary.percent_complete)
    console.print(
        f"[dim]Mastered {summary.mastered_count}/{summary.total_count}[/dim] "
        f"{bar} {summary.percent_complete}%"
    )


def _display_card(card: LearnCard, mastery_goal: int) -> None:
    streak = card.progress.correct_streak
    console.print(Panel(
        card.question or "",
        title="[bold cyan]LEARN[/bold cyan]",
        subtitle=f"[dim]streak {streak}/{mastery_goal}[/dim]",
        border_style="cyan",
        padding=(1, 2),
    ))


def _ask(card: LearnCard, typed: bool) -> bool | None:
    """Grade one card. Returns None when the learner quits."""
    if typed:
        reply = Prompt.ask("Your answer [dim](q to quit)[/dim]", default="")
        if reply.strip().lower() in QUIT_KEYS:
            return None
        is_correct = LearnModeScheduler.check_answer(reply, card.answer or "")
        console.print(f"[bold]Answer:[/bold] {card.answer}")
        return is_correct

    reply = Prompt.ask("[dim]Press Enter to reveal (q to quit)[/dim]", default="")
    if reply.strip().lower() in QUIT_KEYS:
        return None
    console.print(Panel(card.answer or "", title="Answer", border_style="blue"))
    return Confirm.ask("Did you get it right?", default=True)


def _run_loop(service: LearnService, snapshot: LearnSessionSnapshot, typed: bool) -> bool:
    """Drive one session to completion. Returns False if the learner quit."""
    while True:
        try:
            card = service.get_next_card(snapshot.id)
        except CardContentMissingError as e:
            console.print(f"[{STYLES['warning']}]{e}[/{STYLES['warning']}]")
            return True

        if card is None:
            return True

        console.print()
        _display_header(snapshot)
        _display_card(card, snapshot.mastery_goal)

        outcome = _ask(card, typed)
        if outcome is None:
            console.print("\n[yellow]Session paused. Run the same command to resume.[/yellow]")
            return False

        progress = service.submit_answer(snapshot.id, card.progress.id, outcome)
        if outcome:
            note = " Mastered!" if progress.mastered else ""
            console.print(f"[{STYLES['correct']}]Correct![/{STYLES['correct']}]{note}")
        else:
            console.print(f"[{STYLES['incorrect']}]Not quite.[/{STYLES['incorrect']}]")

        snapshot = service.get_session(snapshot.id)


def _display_complete(snapshot: LearnSessionSnapshot) -> None:
    summary = LearnModeScheduler(snapshot.mastery_goal).calculate_progress(snapshot.cards)
    missed = [c for c in snapshot.cards if c.progress.total_incorrect > 0]
    answered = sum(c.progress.attempts for c in snapshot.cards)
    console.print(Panel(
        f"[bold]Mastered {summary.mastered_count}/{summary.total_count} cards[/bold]\n\n"
        f"Answers given: {answered}\n"
        f"Cards missed at least once: {len(missed)}",
        title="Learn Mode Complete",
        border_style="green",
    ))


def learn(
    study_set_id: str = typer.Argument(..., help="Study set ID"),
    goal: Optional[int] = typer.Option(
        None, "--goal", "-g", min=1, help="Correct answers in a row to master a card"
    ),
    typed: bool = typer.Option(False, "--typed", "-t", help="Type answers instead of self-grading"),
) -> None:
    """
    Adaptive Learn Mode.

    Cards you miss come back more often; a card is mastered after GOAL
    correct answers in a row. Quitting keeps your progress.
    """
    service = _get_learn_service()

    with cli_errors():
        snapshot = service.create_session(study_set_id, mastery_goal=goal)

        while True:
            finished = _run_loop(service, snapshot, typed)
            if not finished:
                return

            snapshot = service.get_session(snapshot.id)
            _display_complete(snapshot)

            if any(c.progress.total_incorrect > 0 for c in snapshot.cards):
                if Confirm.ask("Review the cards you missed?", default=False):
                    snapshot = service.review_wrong(snapshot.id)
                    continue

            if Confirm.ask("Start over?", default=False):
                snapshot = service.restart_session(snapshot.id)
                continue
            return
