"""Typer CLI application for StudyVerse."""

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import IntPrompt
from rich.table import Table

from studyverse.config.settings import get_settings
from studyverse.errors import HistoryNotFound, StudyVerseError
from studyverse.export.docx_generator import export_history_item
from studyverse.models.account import PLAN_CATALOG, Identity, PlanType
from studyverse.models.study import (
    ArtifactKind,
    HistoryItem,
    QuizDifficulty,
    QuizItem,
    StudyRequest,
)
from studyverse.orchestration.content import ContentGenerationOrchestrator
from studyverse.orchestration.quiz import QuizGenerationOrchestrator
from studyverse.session.context import SessionContext
from studyverse.session.quiz_session import QuizSession
from studyverse.storage.gateway import JsonFileGateway

app = typer.Typer(
    name="studyverse",
    help="AI study companion: summaries, essay outlines and quizzes",
    add_completion=False,
)

console = Console()


@app.callback()
def callback(
    ctx: typer.Context,
    account: Optional[str] = typer.Option(
        None,
        "--account",
        "-a",
        help="Account id; omit to use the guest account",
        envvar="STUDYVERSE_ACCOUNT",
    ),
    name: str = typer.Option("", "--name", help="Display name for a new profile"),
    email: str = typer.Option("", "--email", help="Email of the account"),
    data_dir: Optional[str] = typer.Option(
        None,
        "--data-dir",
        help="Directory for profile and history documents",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """
    StudyVerse - generate study material and track your progress.
    """
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    identity = Identity(uid=account, display_name=name, email=email) if account else None
    gateway = JsonFileGateway(data_dir or settings.data_dir)
    ctx.obj = SessionContext(gateway, identity=identity, settings=settings)


def study_request_options(
    subject: str,
    grade: str,
    chapter: str,
    board: str,
    language: str,
    author: str,
    questions: Optional[int] = None,
    difficulty: Optional[QuizDifficulty] = None,
) -> StudyRequest:
    return StudyRequest(
        subject=subject,
        grade_class=grade,
        chapter_name=chapter,
        board=board,
        language=language,
        author=author,
        question_count=questions,
        difficulty=difficulty,
    )


SUBJECT = typer.Option("", "--subject", "-s", help="Subject, e.g. History")
GRADE = typer.Option("", "--grade", "-g", help="Class / grade, e.g. 10th Grade")
CHAPTER = typer.Option("", "--chapter", "-c", help="Chapter name")
BOARD = typer.Option("", "--board", "-b", help="Education board, e.g. CBSE")
LANGUAGE = typer.Option("English", "--language", "-l", help="Answer language")
AUTHOR = typer.Option("", "--author", help="Textbook author or publisher")


def fail(error: StudyVerseError) -> None:
    console.print(f"\n[red]Error:[/red] {error.user_message}", style="bold")
    raise typer.Exit(code=1)


def stream_artifact(ctx: typer.Context, request: StudyRequest, kind: ArtifactKind) -> None:
    """Run a streamed generation, rendering the document as it grows."""
    session: SessionContext = ctx.obj
    orchestrator = ContentGenerationOrchestrator()

    document = ""
    try:
        stream = orchestrator.generate(session, request, kind)
        with Live(Markdown(""), console=console, refresh_per_second=8) as live:
            for document in stream:
                live.update(Markdown(document))
    except StudyVerseError as e:
        fail(e)

    console.print(
        f"\n[green]✓[/green] {kind.value} saved as [cyan]{session.current_history_id}[/cyan]"
        f"  ({session.ledger.credits} generations remaining)"
    )


@app.command()
def summary(
    ctx: typer.Context,
    subject: str = SUBJECT,
    grade: str = GRADE,
    chapter: str = CHAPTER,
    board: str = BOARD,
    language: str = LANGUAGE,
    author: str = AUTHOR,
) -> None:
    """Generate a chapter summary."""
    request = study_request_options(subject, grade, chapter, board, language, author)
    stream_artifact(ctx, request, ArtifactKind.SUMMARY)


@app.command()
def essay(
    ctx: typer.Context,
    subject: str = SUBJECT,
    grade: str = GRADE,
    chapter: str = CHAPTER,
    board: str = BOARD,
    language: str = LANGUAGE,
    author: str = AUTHOR,
) -> None:
    """Generate an essay outline."""
    request = study_request_options(subject, grade, chapter, board, language, author)
    stream_artifact(ctx, request, ArtifactKind.ESSAY)


@app.command()
def quiz(
    ctx: typer.Context,
    subject: str = SUBJECT,
    grade: str = GRADE,
    chapter: str = CHAPTER,
    board: str = BOARD,
    language: str = LANGUAGE,
    author: str = AUTHOR,
    questions: int = typer.Option(
        10,
        "--questions",
        "-q",
        help="Number of questions",
        min=1,
        max=50,
    ),
    difficulty: QuizDifficulty = typer.Option(
        QuizDifficulty.MEDIUM,
        "--difficulty",
        "-d",
        help="Quiz difficulty",
        case_sensitive=False,
    ),
    play: bool = typer.Option(True, "--play/--no-play", help="Take the quiz right away"),
) -> None:
    """Generate a multiple choice quiz and take it."""
    session: SessionContext = ctx.obj
    request = study_request_options(
        subject, grade, chapter, board, language, author, questions, difficulty
    )

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("[cyan]Designing challenging questions...", total=None)
            QuizGenerationOrchestrator().generate(session, request)
            progress.update(task, description="[green]Quiz ready!")
    except StudyVerseError as e:
        fail(e)

    item = session.history.get(session.current_history_id)
    console.print(
        f"\n[green]✓[/green] Quiz saved as [cyan]{item.id}[/cyan]"
        f"  ({session.ledger.credits} generations remaining)"
    )
    if play:
        play_quiz(session.start_quiz(item))


def play_quiz(quiz_session: QuizSession) -> None:
    """Interactive loop over the quiz state machine."""
    while not quiz_session.completed:
        question = quiz_session.current_question
        console.print(
            f"\n[bold]Question {quiz_session.current_index + 1} of {quiz_session.total}[/bold]"
        )
        console.print(question.question)
        for index, option in enumerate(question.options, 1):
            console.print(f"  {index}. {option}")

        choice = IntPrompt.ask(
            "Your answer",
            choices=[str(i) for i in range(1, len(question.options) + 1)],
            console=console,
        )
        quiz_session.select_option(choice - 1)

        if quiz_session.last_answer_correct:
            console.print("[green]Correct![/green]")
        else:
            console.print(f"[red]Incorrect.[/red] Answer: {question.correct_option}")
        if question.explanation:
            console.print(f"[dim]{question.explanation}[/dim]")
        try:
            quiz_session.advance()
        except StudyVerseError as e:
            fail(e)

    display_quiz_result(quiz_session)


def display_quiz_result(quiz_session: QuizSession) -> None:
    title = "Past Result" if quiz_session.is_replay else "Quiz Completed!"
    body = (
        f"[bold]{quiz_session.score} / {quiz_session.total}[/bold]"
        f"  ({quiz_session.percentage}%)\n{quiz_session.result_message}"
    )
    console.print()
    console.print(Panel(body, title=title, border_style="green"))


@app.command()
def history(
    ctx: typer.Context,
    kind: Optional[ArtifactKind] = typer.Option(
        None,
        "--type",
        "-t",
        help="Only show one artifact type",
        case_sensitive=False,
    ),
) -> None:
    """List generated artifacts, newest first."""
    session: SessionContext = ctx.obj
    items = session.history.filter_by_type(kind) if kind else session.history.list_items()

    stats = Table(title="Dashboard", border_style="cyan")
    for artifact_kind in ArtifactKind:
        stats.add_column(artifact_kind.value, style="white")
    stats.add_row(*(str(count) for count in session.history.stats().values()))
    console.print(stats)

    if not items:
        console.print("\n[yellow]No history yet.[/yellow]")
        return

    table = Table(title="History", border_style="green")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Type", style="white")
    table.add_column("Title", style="white")
    table.add_column("Details", style="white")
    table.add_column("Created", style="white")
    table.add_column("Score", style="white", no_wrap=True)

    for item in items:
        score = ""
        if isinstance(item, QuizItem) and item.score is not None:
            score = f"{item.score}/{len(item.content)}"
        table.add_row(
            item.id,
            item.type.value,
            item.title,
            item.subtitle,
            item.created_at.strftime("%Y-%m-%d %H:%M"),
            score,
        )

    console.print()
    console.print(table)


def load_item(session: SessionContext, item_id: str) -> HistoryItem:
    try:
        return session.open_history_item(item_id)
    except HistoryNotFound as e:
        console.print(f"[red]Error:[/red] {e}", style="bold")
        raise typer.Exit(code=1)


@app.command()
def show(
    ctx: typer.Context,
    item_id: str = typer.Argument(..., help="History item id"),
    retake: bool = typer.Option(False, "--retake", help="Start a fresh attempt of a scored quiz"),
) -> None:
    """Open a stored artifact; quizzes are replayed or played."""
    session: SessionContext = ctx.obj
    item = load_item(session, item_id)

    console.print(Panel(f"{item.title}\n[dim]{item.subtitle}[/dim]", border_style="cyan"))
    if isinstance(item, QuizItem):
        quiz_session = session.start_quiz(item)
        if quiz_session.is_replay and not retake:
            display_quiz_result(quiz_session)
            return
        quiz_session.reset()
        play_quiz(quiz_session)
    elif isinstance(item.content, str):
        console.print(Markdown(item.content))
    else:
        for message in item.content:
            console.print(f"[bold]{message.role}:[/bold] {message.text}")


@app.command()
def credits(ctx: typer.Context) -> None:
    """Show remaining generations and plan."""
    session: SessionContext = ctx.obj
    profile = session.ledger.profile

    table = Table(title="Account", show_header=False, border_style="cyan")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Account", session.scope.account_id or "guest")
    if profile.display_name:
        table.add_row("Name", profile.display_name)
    table.add_row("Plan", profile.plan_type.value)
    table.add_row("Generations remaining", str(profile.credits))
    console.print(table)


@app.command()
def upgrade(
    ctx: typer.Context,
    plan: PlanType = typer.Option(
        PlanType.SCHOLAR,
        "--plan",
        "-p",
        help="Plan to purchase",
        case_sensitive=False,
    ),
) -> None:
    """Apply a plan purchase to the account."""
    session: SessionContext = ctx.obj
    try:
        profile = session.ledger.upgrade(plan)
    except StudyVerseError as e:
        fail(e)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}", style="bold")
        raise typer.Exit(code=1)
    console.print(
        f"[green]✓[/green] {profile.plan_type.value} plan active,"
        f" {profile.credits} generations remaining"
    )


@app.command()
def plans() -> None:
    """List purchasable plans."""
    table = Table(title="Plans", border_style="cyan")
    table.add_column("Plan", style="cyan")
    table.add_column("Price", style="white")
    table.add_column("Generations", style="white")
    table.add_column("Features", style="white")
    for offer in PLAN_CATALOG.values():
        table.add_row(
            offer.plan.value,
            f"₹{offer.price}",
            "Unlimited" if offer.is_unlimited else str(offer.generations),
            ", ".join(offer.features),
        )
    console.print(table)


@app.command()
def export(
    ctx: typer.Context,
    item_id: str = typer.Argument(..., help="History item id"),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file name (without extension)",
    ),
    include_answers: bool = typer.Option(
        True,
        "--with-answers/--no-answers",
        help="Include the answer key for quizzes",
    ),
) -> None:
    """Export a stored artifact to DOCX."""
    session: SessionContext = ctx.obj
    item = load_item(session, item_id)
    try:
        path = export_history_item(item, output, include_answers=include_answers)
    except OSError as e:
        console.print(f"\n[red]Error during export:[/red] {e}", style="bold")
        raise typer.Exit(code=1)
    console.print(f"\n[green]✓[/green] Exported to: {path}")


@app.command()
def info() -> None:
    """Display information about StudyVerse."""
    info_text = """
[bold cyan]StudyVerse[/bold cyan]
Version: 0.1.0

[bold]Generators:[/bold]
  • Summary - streamed chapter notes
  • Essay - streamed essay outline
  • Quiz - multiple choice questions with explanations

[bold]Features:[/bold]
  • One generation costs one credit, charged only on success
  • History of every artifact, with quiz scores
  • Replay past quiz results or retake them
  • DOCX export
    """
    console.print(Panel(info_text, title="StudyVerse Info", border_style="cyan"))


if __name__ == "__main__":
    app()
