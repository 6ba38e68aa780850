from __future__ import annotations
from rich.console import Console
from rich.markup import escape

from .models import ExecutionResult, HostTarget, RunReport


console = Console()


def print_banner(key_paths: list[str], targets: list[HostTarget]) -> None:
    """Show which keys and hosts a run will use."""
    console.print(f"[bold magenta]Keys:[/bold magenta]  {escape(', '.join(key_paths))}")
    console.print(
        f"[bold magenta]Hosts:[/bold magenta] "
        f"{escape(', '.join(t.display_name for t in targets))}"
    )


def print_command(command: str) -> None:
    console.print(f">>> {command}", markup=False, highlight=False)


def print_result(result: ExecutionResult) -> None:
    """Print one host's block as soon as it arrives."""
    console.print(f"[cyan]{escape(result.host)}:[/cyan]", highlight=False)

    if not result.success:
        console.print(result.error or "connection failed", style="red", markup=False)
        return

    if result.exit_status not in (0, None):
        console.print(f"(exit {result.exit_status})", style="yellow", markup=False)
    output = result.output.rstrip("\n")
    if output:
        console.print(output, markup=False, highlight=False)


def print_timeout(missing: list[HostTarget]) -> None:
    console.print("[bold red]Timed out![/bold red]")
    for target in missing:
        console.print(f"  no result from {target.display_name}", style="red", markup=False)


def print_summary(report: RunReport) -> None:
    console.print(
        f"[dim]({report.successful}/{report.total_hosts} ok, "
        f"{report.failed} failed, {len(report.missing)} missing, "
        f"{report.duration:.2f}s)[/dim]"
    )


def print_log_warning(error: OSError) -> None:
    console.print(f"Session logging stopped: {error}", style="yellow", markup=False)
