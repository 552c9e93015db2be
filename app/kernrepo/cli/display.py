"""Rich display functions for plans and sync results."""

from rich.table import Table

from kernrepo.core.planner import SyncPlan
from kernrepo.core.state import ResolvedSet
from kernrepo.core.transaction import TransactionResult
from kernrepo.utils.formatting import console, format_age


def create_plan_table(plan: SyncPlan, dry_run: bool = False) -> Table:
    """Create a Rich table displaying a sync plan.

    Args:
        plan: Plan to display.
        dry_run: Whether this is a dry-run (changes table title).

    Returns:
        Rich Table with one row per token.
    """
    title = "Sync Plan (Dry Run)" if dry_run else "Sync Plan"

    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Action", width=10, justify="center")
    table.add_column("Family", no_wrap=True)
    table.add_column("Version")

    for token in plan.to_download:
        table.add_row("[added]+download[/added]", token.family, f"[added]{token.version}[/added]")
    for token in plan.to_delete:
        table.add_row("[removed]-delete[/removed]", token.family, f"[removed]{token.version}[/removed]")
    for token in plan.to_keep:
        table.add_row("[kept]=keep[/kept]", token.family, f"[muted]{token.version}[/muted]")
    for family in plan.unavailable:
        table.add_row("[warning]?missing[/warning]", family, "[muted]not in catalog[/muted]")

    return table


def create_state_table(current: ResolvedSet, age_seconds: float | None) -> Table:
    """Create a Rich table of the currently mirrored kernels.

    Args:
        current: Mirrored token per family.
        age_seconds: Age of the last check in seconds, None if never.

    Returns:
        Rich Table with one row per family.
    """
    if age_seconds is None:
        title = "Mirrored Kernels (never checked)"
    else:
        title = f"Mirrored Kernels (last check: {format_age(age_seconds)} ago)"

    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Family", no_wrap=True)
    table.add_column("Version")

    for family in sorted(current):
        table.add_row(family, current[family].version)

    return table


def print_result_summary(result: TransactionResult) -> None:
    """Print a one-line summary of a transaction.

    Args:
        result: Transaction outcome.
    """
    parts: list[str] = []
    if result.downloaded:
        parts.append(f"[added]{len(result.downloaded)} downloaded[/added]")
    if result.deleted:
        parts.append(f"[removed]{len(result.deleted)} deleted[/removed]")
    if result.published:
        parts.append(f"[info]{len(result.published)} published[/info]")
    if result.failed is not None:
        parts.append(f"[error]{result.failed.raw} failed[/error]")

    if parts:
        console.print(f"[bold]Summary:[/bold] {', '.join(parts)}")
