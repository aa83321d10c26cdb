import logging
import time
from datetime import datetime
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from studydeck.answer_checker import local_answer_check
from studydeck.clock import SystemClock
from studydeck.config import settings
from studydeck.content_generator import StudyAction, get_content_generator
from studydeck.crud import (
    create_deck, list_decks, delete_deck, save_deck_with_flashcards,
    add_flashcard, get_deck, get_deck_flashcards, get_due_cards,
    record_study_session, get_study_stats
)
from studydeck.database import SessionLocal, init_db
from studydeck.database import reset_db as drop_and_recreate
from studydeck.deck_parser import DeckParser
from studydeck.errors import StudyDeckError
from studydeck.repository import SqlReviewStateRepository
from studydeck.review_service import ReviewService
from studydeck.schemas import DeckCreate, FlashcardCreate, StudySessionCreate
from studydeck.sm2 import ReviewScheduler

app = typer.Typer(help="StudyDeck CLI - flashcards with SM-2 spaced repetition")
console = Console()
clock = SystemClock()


def _fail(error: Exception):
    console.print(f"[red]✗[/red] {error}")
    raise typer.Exit(code=1)


def _format_time(moment: Optional[datetime]) -> str:
    if moment is None:
        return "-"
    return moment.strftime("%Y-%m-%d %H:%M")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show info-level logs")):
    """Configure logging for every command"""
    logging.basicConfig(
        level="INFO" if verbose else settings.log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.command()
def init():
    """Initialize database tables"""
    init_db()
    console.print("[green]✓[/green] Database initialized successfully!")


@app.command()
def reset_db():
    """Delete all data and reinitialize database (WARNING: irreversible!)"""
    confirm = typer.confirm("⚠️  This will DELETE ALL DATA. Are you sure?")
    if not confirm:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    console.print("[yellow]Dropping and recreating all tables...[/yellow]")
    drop_and_recreate()
    console.print("[green]✓[/green] Database reset complete! All data deleted.")


@app.command("create-deck")
def create_deck_cmd(
    title: str = typer.Option(..., prompt="Deck title"),
    topic: Optional[str] = typer.Option(None, help="Deck topic"),
    description: Optional[str] = typer.Option(None, help="Short description")
):
    """Create an empty flashcard deck"""
    db = SessionLocal()
    try:
        deck = create_deck(db, DeckCreate(
            user_id=settings.default_user_id, title=title, topic=topic, description=description
        ))
        console.print(f"[green]✓[/green] Deck created! ID: {deck.id}")
    except StudyDeckError as e:
        _fail(e)
    finally:
        db.close()


@app.command("list-decks")
def list_decks_cmd():
    """List your decks"""
    db = SessionLocal()
    try:
        decks = list_decks(db, settings.default_user_id)
        if not decks:
            console.print("[yellow]No decks yet. Create one with create-deck or import-deck.[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("Title", style="green")
        table.add_column("Topic", style="yellow")
        table.add_column("Cards", style="blue", justify="right")
        table.add_column("Updated")

        for deck in decks:
            table.add_row(
                str(deck.id), deck.title, deck.topic or "-",
                str(deck.flashcard_count), _format_time(deck.updated_at)
            )
        console.print(table)
    finally:
        db.close()


@app.command("delete-deck")
def delete_deck_cmd(
    deck_id: int,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation")
):
    """Delete a deck and all of its cards"""
    if not yes and not typer.confirm(f"Delete deck {deck_id} and all its cards?"):
        console.print("[yellow]Cancelled.[/yellow]")
        return

    db = SessionLocal()
    try:
        if delete_deck(db, deck_id):
            console.print(f"[green]✓[/green] Deck {deck_id} deleted")
        else:
            console.print(f"[red]✗[/red] Deck ID {deck_id} not found")
            raise typer.Exit(code=1)
    finally:
        db.close()


@app.command("add-card")
def add_card_cmd(
    deck_id: int = typer.Option(..., prompt="Deck ID"),
    question: str = typer.Option(..., prompt="Question"),
    answer: str = typer.Option(..., prompt="Answer"),
    hint: Optional[str] = typer.Option(None, help="Optional hint")
):
    """Add a flashcard to a deck"""
    db = SessionLocal()
    try:
        card = add_flashcard(db, deck_id, FlashcardCreate(question=question, answer=answer, hint=hint))
        console.print(f"[green]✓[/green] Card added! ID: {card.id} (due now)")
    except StudyDeckError as e:
        _fail(e)
    finally:
        db.close()


@app.command("list-cards")
def list_cards_cmd(deck_id: int):
    """Show every card of a deck with its review schedule"""
    db = SessionLocal()
    try:
        deck = get_deck(db, deck_id)
        if not deck:
            console.print(f"[red]✗[/red] Deck ID {deck_id} not found")
            raise typer.Exit(code=1)

        now = clock.now()
        table = Table(show_header=True, header_style="bold magenta", title=deck.title)
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("Question", style="green")
        table.add_column("Reps", justify="right")
        table.add_column("Easiness", justify="right")
        table.add_column("Interval", justify="right")
        table.add_column("✓/✗", justify="right")
        table.add_column("Next review", style="yellow")

        for card in get_deck_flashcards(db, deck_id):
            state = card.review_state
            table.add_row(
                str(card.id),
                card.question[:50],
                str(state.repetitions),
                f"{state.easiness_factor:.2f}",
                f"{state.interval_days:g}d",
                f"{state.times_correct}/{state.times_incorrect}",
                ReviewScheduler.time_until_review(state.next_review_date, now),
            )
        console.print(table)
    finally:
        db.close()


@app.command("import-deck")
def import_deck_cmd(
    file_path: str = typer.Option(..., prompt="Flashcard file path (.csv or .xlsx)"),
    title: str = typer.Option(..., prompt="Deck title"),
    topic: Optional[str] = typer.Option(None, help="Deck topic")
):
    """Import a deck from a CSV or Excel table (question, answer, hint columns)"""
    db = SessionLocal()
    try:
        console.print("[yellow]Parsing flashcards...[/yellow]")
        rows = DeckParser.auto_parse(file_path)
        if not rows:
            console.print("[yellow]No flashcards found in file.[/yellow]")
            return
        console.print(f"[green]✓[/green] Extracted {len(rows)} flashcards")

        deck = save_deck_with_flashcards(
            db,
            DeckCreate(user_id=settings.default_user_id, title=title, topic=topic),
            [FlashcardCreate(**row) for row in rows]
        )
        console.print(f"[green]✓[/green] Deck imported! ID: {deck.id}")
    except StudyDeckError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def due(deck_id: int):
    """Show cards due for review"""
    db = SessionLocal()
    try:
        now = clock.now()
        cards = get_due_cards(db, deck_id, now)
        if not cards:
            console.print("[green]Nothing due. Come back later![/green]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("Question", style="green")
        table.add_column("Due", style="yellow")
        table.add_column("Days Overdue", style="red", justify="right")

        for card in cards:
            next_review = card.review_state.next_review_date
            overdue = ReviewScheduler.get_days_overdue(next_review, now)
            table.add_row(
                str(card.id),
                card.question[:50],
                _format_time(next_review) if next_review else "New",
                str(overdue) if overdue > 0 else "Today",
            )
        console.print(table)
        console.print(f"{len(cards)} card(s) due")
    finally:
        db.close()


@app.command()
def review(
    card_id: int,
    quality: Optional[int] = typer.Option(None, help="Quality rating 0-5"),
    correct: Optional[bool] = typer.Option(None, "--correct/--missed", help="Binary outcome instead of a rating")
):
    """Record one review of a card and reschedule it"""
    if (quality is None) == (correct is None):
        console.print("[red]✗[/red] Give either --quality or --correct/--missed")
        raise typer.Exit(code=1)

    db = SessionLocal()
    try:
        service = ReviewService(SqlReviewStateRepository(db), clock)
        state = service.record_review(card_id, correct if quality is None else quality)
        console.print("[green]✓[/green] Review recorded!")
        console.print(f"  Next review: {_format_time(state.next_review_date)} (in {state.interval_days:g} day(s))")
        console.print(f"  Repetitions: {state.repetitions}")
        console.print(f"  Easiness: {state.easiness_factor:.2f}")
    except StudyDeckError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def study(
    deck_id: int,
    limit: int = typer.Option(20, help="Maximum cards in this session"),
    typed: bool = typer.Option(False, "--typed", help="Type answers and have them checked")
):
    """Study the due cards of a deck and record the session"""
    db = SessionLocal()
    try:
        deck = get_deck(db, deck_id)
        if not deck:
            console.print(f"[red]✗[/red] Deck ID {deck_id} not found")
            raise typer.Exit(code=1)

        cards = get_due_cards(db, deck_id, clock.now())[:limit]
        if not cards:
            console.print("[green]Nothing due. Come back later![/green]")
            return

        service = ReviewService(SqlReviewStateRepository(db), clock)
        started = time.monotonic()
        correct_count = 0

        for i, card in enumerate(cards, 1):
            console.print(f"\n[bold]Card {i}/{len(cards)}[/bold]")
            console.print(f"[cyan]Q:[/cyan] {card.question}")
            if card.hint:
                console.print(f"[dim]Hint: {card.hint}[/dim]")

            if typed:
                attempt = typer.prompt("Your answer", default="", show_default=False)
                check = local_answer_check(attempt, card.answer)
                verdict = "[green]looks right[/green]" if check.is_correct else "[red]looks wrong[/red]"
                console.print(f"[cyan]A:[/cyan] {card.answer}  ({verdict}, {check.match_ratio:.0%} match)")
                got_it = typer.confirm("Count it as correct?", default=check.is_correct)
            else:
                typer.prompt("Press Enter to reveal", default="", show_default=False)
                console.print(f"[cyan]A:[/cyan] {card.answer}")
                got_it = typer.confirm("Did you get it right?")

            state = service.record_review(card.id, got_it)
            correct_count += int(got_it)
            console.print(f"[dim]Next review {ReviewScheduler.time_until_review(state.next_review_date, clock.now()).lower()}[/dim]")

        record_study_session(db, StudySessionCreate(
            user_id=settings.default_user_id,
            deck_id=deck_id,
            session_type="flashcards",
            cards_studied=len(cards),
            correct_answers=correct_count,
            total_questions=len(cards),
            duration_seconds=int(time.monotonic() - started),
            completed_at=clock.now(),
        ))
        console.print(f"\n[green]✓[/green] Session complete: {correct_count}/{len(cards)} correct")
    except StudyDeckError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def generate(
    action: StudyAction = typer.Argument(..., help="What to generate"),
    topic: str = typer.Option(..., prompt="Topic or content"),
    difficulty: Optional[str] = typer.Option(None, help="e.g. easy, medium, hard"),
    grade_level: Optional[str] = typer.Option(None, help="Target grade level")
):
    """Generate study content with the configured AI provider"""
    try:
        console.print(f"[yellow]Generating {action.value} with {settings.ai_provider} (this may take a moment)...[/yellow]")
        text = get_content_generator().generate_content(action, topic, difficulty, grade_level)
        console.print(text)
    except StudyDeckError as e:
        _fail(e)


@app.command("generate-deck")
def generate_deck_cmd(
    topic: str = typer.Option(..., prompt="Topic"),
    title: Optional[str] = typer.Option(None, help="Deck title (defaults to the topic)"),
    count: Optional[int] = typer.Option(None, help="Number of flashcards")
):
    """Generate flashcards with AI and save them as a new deck"""
    db = SessionLocal()
    try:
        console.print(f"[yellow]Generating flashcards with {settings.ai_provider}...[/yellow]")
        cards = get_content_generator().generate_flashcards(topic, count)
        if not cards:
            console.print("[yellow]The model returned no usable flashcards.[/yellow]")
            raise typer.Exit(code=1)

        deck = save_deck_with_flashcards(
            db,
            DeckCreate(user_id=settings.default_user_id, title=title or topic, topic=topic),
            cards
        )
        console.print(f"[green]✓[/green] Deck created with {len(cards)} flashcards! ID: {deck.id}")
    except StudyDeckError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def stats():
    """View study statistics and streak"""
    db = SessionLocal()
    try:
        today = clock.now().date()
        summary = get_study_stats(db, settings.default_user_id, today)

        console.print("\n[bold]Study Statistics[/bold]\n")
        console.print(f"  Sessions: {summary.total_sessions}")
        console.print(f"  Cards studied: {summary.total_cards_studied}")
        console.print(f"  Correct answers: {summary.total_correct}")
        console.print(f"  Accuracy: {summary.average_accuracy:.1f}%")
        console.print(f"  Streak: {summary.streak_days} day(s) 🔥")

        if summary.recent_sessions:
            console.print("\n[cyan]Recent Sessions:[/cyan]")
            for session in summary.recent_sessions[:5]:
                console.print(
                    f"  {_format_time(session['completed_at'])} - {session['session_type']} - "
                    f"{session['correct_answers']}/{session['total_questions']} correct"
                )
    finally:
        db.close()


if __name__ == "__main__":
    app()
