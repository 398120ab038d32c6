"""
prep-engine: command line interface for the scheduling pipeline.

Commands:
- prep-engine run    - Run the pipeline on a JSON answer snapshot
- prep-engine due    - List due reviews from a persisted SRS schedule
"""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from prep_engine.config import get_settings
from prep_engine.core.clock import fixed_clock, system_clock
from prep_engine.core.errors import InputValidationError
from prep_engine.delivery.scheduler import SRSScheduler
from prep_engine.pipeline.runner import PipelineResult, PipelineRunner
from prep_engine.pipeline.schemas import parse_schedule

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="prep-engine",
    help="Adaptive learning scheduler for interview preparation",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


SEVERITY_STYLES = {
    "critical": "bold red",
    "high": "yellow",
    "medium": "cyan",
}


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        err_console.print(f"[red]File not found:[/red] {escape(str(path))}")
        raise typer.Exit(code=2)
    except json.JSONDecodeError as e:
        err_console.print(f"[red]Invalid JSON in {escape(str(path))}:[/red] {escape(str(e))}")
        raise typer.Exit(code=2)


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else get_settings().log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )


# =============================================================================
# Display Helpers
# =============================================================================


def display_result(result: PipelineResult) -> None:
    """Render a completed run as panels and tables."""
    summary = result.summary
    console.print(Panel(
        f"Readiness: [bold]{summary.readiness_score}%[/bold]\n"
        f"Strengths: {summary.strength_count}  |  Weaknesses: {summary.weakness_count}  |  "
        f"Gaps: {summary.gap_count}\n"
        f"Answers: {summary.total_answers} ({summary.overall_accuracy}% correct)  |  "
        f"Avg time: {summary.avg_time_per_question_ms}ms",
        title=f"Learning Path - {escape(result.user_id)}",
        title_align="left",
        border_style="cyan",
    ))

    if not summary.has_enough_data:
        console.print(
            f"[yellow]Only {summary.total_answers} answers so far; "
            f"keep practicing before relying on this path.[/yellow]"
        )

    if result.mastery:
        table = Table(title="Topic Mastery")
        table.add_column("Topic")
        table.add_column("Attempts", justify="right")
        table.add_column("Accuracy", justify="right")
        table.add_column("Mastery", justify="right")
        for tag, stats in result.topic_stats.items():
            table.add_row(
                escape(tag), str(stats.attempts), f"{stats.accuracy}%", f"{stats.mastery}%"
            )
        console.print(table)

    if result.knowledge_gaps:
        table = Table(title="Knowledge Gaps")
        table.add_column("Topic")
        table.add_column("Severity")
        table.add_column("Errors", justify="right")
        table.add_column("Difficulty")
        table.add_column("Recommendation")
        for gap in result.knowledge_gaps:
            style = SEVERITY_STYLES.get(gap.severity.value, "white")
            table.add_row(
                escape(gap.topic),
                f"[{style}]{gap.severity.value}[/{style}]",
                str(gap.error_count),
                gap.common_difficulty.value,
                escape(gap.recommendation),
            )
        console.print(table)

    for phase in result.recommended_path:
        console.print(
            f"[bold]Phase {phase.phase_number}: {phase.name}[/bold] "
            f"[dim]({phase.difficulty.value}, {phase.estimated_time})[/dim] - "
            f"{escape(', '.join(phase.focus_topics))}"
        )

    if result.review_queue:
        display_due(list(result.review_queue), title="Review Queue")

    for criteria in result.next_question_criteria:
        console.print(
            f"[green]→[/green] {criteria.count} x {criteria.difficulty.value} "
            f"({escape(', '.join(criteria.tags))}) [dim]{escape(criteria.reason)}[/dim]"
        )


def display_due(due: list, title: str = "Due Reviews") -> None:
    """Render due reviews as a table."""
    table = Table(title=title)
    table.add_column("Question")
    table.add_column("Level", justify="right")
    table.add_column("Overdue (days)", justify="right")
    for item in due:
        table.add_row(escape(item.question_id), str(item.level), str(item.overdue_days))
    console.print(table)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def run(
    input_file: Path = typer.Argument(..., help="JSON file with the run input"),
    now_ms: Optional[int] = typer.Option(None, "--now-ms", help="Fixed clock (epoch ms)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write result JSON here"),
    as_json: bool = typer.Option(False, "--json", help="Print raw result JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Run the adaptive learning pipeline on an answer snapshot."""
    _configure_logging(verbose)

    payload = _load_json(input_file)
    if not isinstance(payload, dict):
        err_console.print("[red]Input must be a JSON object[/red]")
        raise typer.Exit(code=2)

    clock = fixed_clock(now_ms) if now_ms is not None else system_clock
    result = PipelineRunner(clock=clock).run_payload(payload)
    rendered = json.dumps(result.to_dict(), indent=2, sort_keys=True)

    if output:
        output.write_text(rendered + "\n", encoding="utf-8")
        logger.info(f"Wrote result to {output}")

    if as_json:
        typer.echo(rendered)
    elif result.success:
        display_result(result)

    if not result.success:
        err_console.print(f"[bold red]Pipeline failed:[/bold red] {escape(result.error or '')}")
        raise typer.Exit(code=1)


@app.command()
def due(
    schedule_file: Path = typer.Argument(..., help="JSON object of SRS records keyed by question id"),
    now_ms: Optional[int] = typer.Option(None, "--now-ms", help="Fixed clock (epoch ms)"),
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Maximum rows to show"),
) -> None:
    """List questions due for review, most overdue first."""
    _configure_logging(False)

    payload = _load_json(schedule_file)
    if not isinstance(payload, dict):
        err_console.print("[red]Schedule must be a JSON object[/red]")
        raise typer.Exit(code=2)

    try:
        schedule = parse_schedule(payload)
    except InputValidationError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    now = now_ms if now_ms is not None else system_clock()
    scheduler = SRSScheduler(get_settings().get_srs_config())
    due_items = scheduler.due_reviews(schedule, now)
    stats = scheduler.schedule_stats(schedule, now)

    console.print(
        f"[bold]{stats.due}[/bold] due of {stats.total} scheduled "
        f"([green]{stats.mastered} mastered[/green])"
    )
    if due_items:
        display_due(due_items[:limit])


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
