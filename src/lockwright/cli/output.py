"""Rich output formatting helpers for the lockwright CLI."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from lockwright.solver import OperationKind, Resolution, Transaction

_OPERATION_STYLES: dict[str, str] = {
    "install": "green",
    "upgrade": "cyan",
    "downgrade": "yellow",
    "uninstall": "red",
}

console = Console()


def operation_style(kind: OperationKind, direction: str | None = None) -> str:
    """Return the Rich style string for an operation."""
    if kind is OperationKind.UPDATE:
        return _OPERATION_STYLES.get(direction or "upgrade", "white")
    return _OPERATION_STYLES.get(kind.value, "white")


def print_resolution_summary(resolution: Resolution) -> None:
    """Print the decision set of a successful resolution as a table."""
    decisions = resolution.decisions
    stats = resolution.stats
    title = "Resolution successful" if resolution.solved else "Lock file is up to date"
    console.print(Panel(f"[bold green]{title}[/bold green]", title="Dependency Resolution"))
    if decisions is None or not len(decisions):
        console.print("[dim]No packages to install.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Package", style="bold")
    table.add_column("Version")
    for name, version in decisions.as_dict().items():
        table.add_row(escape(name), escape(version))
    console.print(table)
    if resolution.solved:
        console.print(
            f"[bold]{len(decisions)}[/bold] packages | {stats.decisions} decisions | "
            f"{stats.conflicts} conflicts | {stats.elapsed:.2f}s"
        )


def print_problems(resolution: Resolution) -> None:
    """Print why a resolution failed."""
    console.print(Panel("[bold red]Resolution failed[/bold red]", title="Dependency Resolution"))
    console.print("Your requirements could not be resolved to an installable set of packages.")
    _print_problem_lines(resolution)


def _print_problem_lines(resolution: Resolution) -> None:
    for index, problem in enumerate(resolution.problems, start=1):
        console.print(f"\n  [bold]Problem {index}[/bold]")
        for line in problem.lines():
            console.print(f"    [red]- {escape(line)}[/red]", highlight=False)


def print_timeout(resolution: Resolution) -> None:
    stats = resolution.stats
    console.print(
        Panel(
            f"[bold yellow]Resolution timed out[/bold yellow] after "
            f"{stats.decisions} decisions ({stats.elapsed:.2f}s)",
            title="Dependency Resolution",
        )
    )


def print_transaction(transaction: Transaction) -> None:
    """Print the lock changes a resolution implies."""
    if not transaction:
        console.print("[dim]Nothing to modify in lock file.[/dim]")
        return
    console.print(
        f"Lock file operations: {len(transaction.installs)} installs, "
        f"{len(transaction.updates)} updates, {len(transaction.uninstalls)} removals"
    )
    for operation in transaction:
        style = operation_style(operation.kind, operation.direction)
        console.print(Text(f"  - {operation}", style=style))


def print_why_not(package: str, constraint: str, resolution: Resolution) -> None:
    """Print whether *package* at *constraint* fits the project, and what blocks it."""
    target = escape(f"{package} {constraint}")
    if resolution.success:
        version = resolution.unwrap().as_dict().get(package, "")
        console.print(
            f"[bold green]{target} can be installed[/bold green] {escape(version)}", highlight=False
        )
        return
    console.print(f"[bold red]{target} cannot be installed:[/bold red]", highlight=False)
    _print_problem_lines(resolution)


def print_lock_status(fresh: bool, errors: list[str]) -> None:
    """Print the outcome of ``lockwright check``."""
    if fresh:
        console.print("[bold green]composer.lock is up to date.[/bold green]")
    else:
        console.print(
            "[bold red]composer.lock is not up to date with composer.json.[/bold red]"
        )
    for error in errors:
        console.print(f"  [yellow]- {escape(error)}[/yellow]", highlight=False)
