from __future__ import annotations

from typing import Iterable

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from scanner.models import Outcome
from scanner.summary import Categories, Summary

console = Console()


def make_progress(target: Console | None = None) -> Progress:
    return Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=target or console,
    )


def print_summary(summary: Summary, output_path: str, target: Console | None = None) -> None:
    out = target or console
    out.print(f"\nProcessing complete. Results written to '{escape(output_path)}'")
    out.print("Summary:")
    out.print(f"  - Unreachable repos: {summary.unreachable}")
    out.print(f"  - Not-compatible repos: {summary.non_compliant}")
    out.print(f"  - Dormant repos (6+ months): {summary.dormant}")


def _activity_line(outcome: Outcome) -> str:
    owner = outcome.item.fields.get("PrimaryModuleOwnerGHHandle", "")
    return (
        f"  - {escape(outcome.repo_url)} "
        f"(LastCommit: {escape(outcome.last_commit_date or '')} by {escape(outcome.last_commit_author or '')}) "
        f"[Owner: {escape(owner)}]"
    )


def _section(out: Console, title: str, style: str, lines: Iterable[str]) -> None:
    out.print(f"[{style}]{title}[/{style}]")
    for line in lines:
        out.print(line, highlight=False)
    out.print()


def print_analysis(cats: Categories, tracked: Iterable[str], target: Console | None = None) -> None:
    out = target or console
    tracked_names = "/".join(tracked)

    out.print("\n[cyan]🔎 Detailed Analysis:[/cyan]")
    out.print(f"  [green]Repositories processed:[/green] {cats.total}")
    out.print(f"  [red]Unreachable repositories:[/red] {len(cats.unreachable)}")
    out.print(f"  [red]Not compatible with {escape(tracked_names)}:[/red] {len(cats.non_compliant)}")
    out.print(f"  [yellow]Dormant (6+ months):[/yellow] {len(cats.dormant)}")
    out.print()

    if cats.non_compliant:
        _section(out, "❌ Not Compatible Repositories:", "red", (_activity_line(o) for o in cats.non_compliant))
    if cats.dormant:
        _section(out, "😴 Dormant Repositories (6+ months):", "yellow", (_activity_line(o) for o in cats.dormant))
    if cats.unreachable:
        _section(
            out,
            "🚫 Unreachable Repositories:",
            "red",
            (f"  - {escape(o.repo_url)} [Error: {escape(o.error or '')}]" for o in cats.unreachable),
        )

    out.print("[green]✅ Analysis complete.[/green]")
