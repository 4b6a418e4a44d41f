"""Interactive CLI application."""
import random
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from n3_chronos.curriculum import find_chapter, load_curriculum
from n3_chronos.db import DEFAULT_DB_PATH
from n3_chronos.engine import ProgressEngine
from n3_chronos.logging_config import init_logging
from n3_chronos.models import LEARNING_STATUSES, QuizAnswer, SKILLS
from n3_chronos.store import SqliteStore

CURRICULUM_PATH_KEY = "n3-chronos-curriculum-path"
ASSESSMENT_SIZE = 10

console = Console()


def describe(item) -> str:
    """Answer side of an item: its reading and meaning where the content has them."""
    details = item.details
    parts = []
    for key in ("furigana", "reading", "on_yomi", "kun_yomi", "formation"):
        if details.get(key):
            parts.append(f"[cyan]{key}:[/cyan] {details[key]}")
    meaning = details.get("meaning") or details.get("meaning_vi") or details.get("meaning_en")
    if meaning:
        parts.append(f"[green]{meaning}[/green]")
    return "\n".join(parts) or "[dim]No details[/dim]"


def show_welcome(engine: ProgressEngine):
    summary = engine.summary()
    console.print(Panel(
        f"[bold]N3 Chronos[/bold]\n[dim]Japanese vocabulary, grammar and kanji[/dim]\n\n"
        f"Level {summary['level']}  |  XP {summary['xp']}/{summary['xp_to_next_level']}  |  "
        f"Streak {summary['streak']}  |  Due {summary['due']}",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("quiz", "Quiz a chapter"),
        ("review", "Review due items"),
        ("practice", "Log a practice answer"),
        ("chapters", "Chapter progress"),
        ("mark", "Set an item's status"),
        ("dashboard", "Performance analytics"),
        ("import", "Load a curriculum file"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def show_notification(notification):
    console.print(Panel(
        f"[bold]{notification.name}[/bold]\n{notification.description}",
        border_style="yellow",
    ))


def run_self_graded_quiz(items: list) -> list[QuizAnswer]:
    if not items:
        console.print("[yellow]Nothing to quiz right now![/yellow]")
        return []
    answers = []
    console.print(f"\n[bold]Quiz[/bold] - {len(items)} items\n")
    for i, item in enumerate(items, 1):
        console.print(Panel(item.label, title=f"{i}/{len(items)} · {item.kind}", border_style="cyan"))
        Prompt.ask("[dim]Press Enter to reveal[/dim]", default="")
        console.print(Panel(describe(item), border_style="green"))
        knew = Prompt.ask("Did you know it?", choices=["y", "n"])
        answers.append(QuizAnswer(item.id, knew == "y"))
    score = sum(1 for a in answers if a.correct)
    console.print(f"[bold]Score: {score}/{len(answers)} ({score/len(answers)*100:.0f}%)[/bold]\n")
    return answers


def record_answers(engine: ProgressEngine, answers: list[QuizAnswer]) -> None:
    if not answers:
        return
    score = sum(1 for a in answers if a.correct)
    engine.record_quiz_result(score, len(answers), answers)


def cmd_assessment(engine: ProgressEngine):
    pool = [item for chapter in engine.chapters for item in chapter.items]
    if not pool:
        console.print("[yellow]Import a curriculum first to take the placement test.[/yellow]")
        return
    console.print(Panel(
        "A short placement test. Items you already know start further along.",
        title="Initial Assessment", border_style="blue",
    ))
    items = random.sample(pool, min(ASSESSMENT_SIZE, len(pool)))
    answers = run_self_graded_quiz(items)
    engine.finish_assessment(answers)
    console.print("[green]Assessment complete![/green]")


def cmd_quiz(engine: ProgressEngine):
    unlocked = [c for c in engine.chapters if engine.is_unlocked(c)]
    if not unlocked:
        console.print("[yellow]No chapters available. Import a curriculum first.[/yellow]")
        return
    for c in unlocked:
        console.print(f"  [cyan]{c.chapter}[/cyan]) {c.title}")
    number = IntPrompt.ask("Select chapter", choices=[str(c.chapter) for c in unlocked])
    count = IntPrompt.ask("Number of items", default=10)
    if count < 1:
        console.print("[red]Choose at least one item.[/red]")
        return
    chapter = find_chapter(engine.chapters, number)
    items = random.sample(chapter.items, min(count, len(chapter.items)))
    record_answers(engine, run_self_graded_quiz(items))


def cmd_review(engine: ProgressEngine):
    console.print("\n[bold]Review[/bold]")
    items = engine.review_items()[:15]
    record_answers(engine, run_self_graded_quiz(items))


def cmd_practice(engine: ProgressEngine):
    answer = Prompt.ask("Was your practice answer correct?", choices=["y", "n"])
    engine.record_practice_result(answer == "y")
    console.print("[green]Logged.[/green]")


def cmd_chapters(engine: ProgressEngine):
    if not engine.chapters:
        console.print("[yellow]No curriculum loaded.[/yellow]")
        return
    table = Table(title="Chapters")
    table.add_column("#", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Mastered", justify="right")
    table.add_column("Status")
    for chapter in engine.chapters:
        progress = engine.chapter_progress(chapter)
        status = "[green]Open[/green]" if engine.is_unlocked(chapter) else "[red]Locked[/red]"
        table.add_row(
            str(chapter.chapter),
            chapter.title,
            f"{progress.mastered}/{progress.total} ({progress.percentage*100:.0f}%)",
            status,
        )
    console.print(table)


def cmd_mark(engine: ProgressEngine):
    item_id = Prompt.ask("Item id")
    if item_id not in engine.item_map:
        console.print(f"[red]Unknown item: {item_id}[/red]")
        return
    status = Prompt.ask("Status", choices=["mastered", "review"])
    engine.manual_set_status(item_id, status)
    console.print(f"[green]{item_id} is now {engine.item_status(item_id)}[/green]")


def cmd_dashboard(engine: ProgressEngine):
    summary = engine.summary()
    data = engine.performance_snapshot()
    console.print(Panel(
        f"[bold]Level {summary['level']}[/bold]  XP {summary['xp']}/{summary['xp_to_next_level']}  |  "
        f"Streak {summary['streak']}  |  Achievements {summary['achievements']}  |  "
        f"Due {summary['due']}",
        title="Performance Dashboard", border_style="blue",
    ))
    console.print(f"\n  Overall accuracy: [bold]{data.overall_accuracy:.1f}%[/bold]\n")

    table = Table(title="Accuracy by Skill")
    table.add_column("Skill", style="cyan")
    table.add_column("Accuracy", justify="right")
    for skill in SKILLS:
        table.add_row(skill.capitalize(), f"{data.skill_accuracy[skill]:.1f}%")
    console.print(table)

    if data.weakest_items:
        console.print("\n[bold]Weakest Items:[/bold]")
        for weak in data.weakest_items:
            h = weak.progress.history
            console.print(f"  [red]{h.correct}✓ {h.incorrect}✗[/red] {weak.item.label} ({weak.item.kind})")

    counts = {status: 0 for status in LEARNING_STATUSES}
    for item_id in engine.item_map:
        counts[engine.item_status(item_id)] += 1
    console.print("\n  " + "  |  ".join(f"{s}: [bold]{n}[/bold]" for s, n in counts.items()))


def cmd_import(engine: ProgressEngine, file_path: str | None = None):
    file_path = file_path or Prompt.ask("Curriculum file (.json/.yaml)")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    chapters = load_curriculum(file_path)
    engine.set_curriculum(chapters)
    engine.store.save(CURRICULUM_PATH_KEY, str(Path(file_path).resolve()))
    console.print(f"[green]Loaded {len(chapters)} chapters ({len(engine.item_map)} items)[/green]")


def main():
    init_logging()
    store = SqliteStore(DEFAULT_DB_PATH)
    engine = ProgressEngine(store)
    engine.sink.subscribe(show_notification)

    curriculum_path = sys.argv[1] if len(sys.argv) > 1 else store.load(CURRICULUM_PATH_KEY, None)
    if curriculum_path:
        try:
            cmd_import(engine, curriculum_path)
        except (OSError, ValueError) as e:
            console.print(f"[red]Could not load curriculum: {e}[/red]")

    if engine.user_stats.is_new_user:
        cmd_assessment(engine)
    engine.check_daily_login()

    show_welcome(engine)

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="review").strip().lower()
        try:
            if choice == "quiz":
                cmd_quiz(engine)
            elif choice == "review":
                cmd_review(engine)
            elif choice == "practice":
                cmd_practice(engine)
            elif choice == "chapters":
                cmd_chapters(engine)
            elif choice == "mark":
                cmd_mark(engine)
            elif choice == "dashboard":
                cmd_dashboard(engine)
            elif choice == "import":
                cmd_import(engine)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]またね！[/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
        engine.sink.prune()


if __name__ == "__main__":
    main()
