"""
PupLearn: flashcard study from the terminal.

Commands:
- puplearn sets / cards / folders   Manage the library
- puplearn learn SET_ID             Adaptive Learn Mode
- puplearn study SET_ID             Self-graded flip cards (--focus for focus mode)
- puplearn history                  Recent flip sessions
- puplearn init-db                  Create database tables
"""
from __future__ import annotations

import typer
from rich import print as rprint

from puplearn import __version__
from puplearn.cli.common import configure_logging
from puplearn.cli.learn_commands import learn
from puplearn.cli.library_commands import cards_app, folders_app, sets_app
from puplearn.cli.study_commands import history, study
from puplearn.db.database import init_db

app = typer.Typer(
    name="puplearn",
    help="PupLearn: flashcard study sets with adaptive Learn Mode",
    no_args_is_help=True,
)

app.add_typer(sets_app, name="sets")
app.add_typer(cards_app, name="cards")
app.add_typer(folders_app, name="folders")
app.command("learn")(learn)
app.command("study")(study)
app.command("history")(history)


@app.callback()
def _setup() -> None:
    """Configure logging and make sure the tables exist."""
    configure_logging()
    init_db()


@app.command("init-db")
def init_db_command() -> None:
    """Create database tables (safe to run repeatedly)."""
    init_db()
    rprint("[green]Database ready.[/green]")


@app.command("version")
def version() -> None:
    """Show the installed version."""
    rprint(f"puplearn {__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
