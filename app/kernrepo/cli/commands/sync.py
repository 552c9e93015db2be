"""Sync command implementation.

Runs the full synchronization pipeline: lock, load state, fetch the
catalog, resolve versions, plan, download, publish and persist.
"""

from __future__ import annotations

import logging
from typing import Annotated

import typer
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TransferSpeedColumn,
)

from kernrepo.cli.display import create_plan_table, print_result_summary
from kernrepo.cli.prompt import TerminalPrompter
from kernrepo.core.cancel import CancelToken, cancel_on_signals
from kernrepo.core.config import require_families, require_settings
from kernrepo.core.engine import SyncEngine, SyncReport
from kernrepo.core.errors import (
    FetchError,
    InteractiveTimeoutError,
    LockBusyError,
    RepositoryError,
    SyncCancelled,
    TokenParseError,
)
from kernrepo.core.session import SyncSession
from kernrepo.remote.fetcher import HttpFetcher
from kernrepo.repository.repo_tools import RepoToolsDatabase
from kernrepo.utils.formatting import (
    console,
    format_age,
    print_error,
    print_info,
    print_success,
    print_warning,
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Synchronize the local repository with the archive.",
    invoke_without_command=True,
)


def _create_progress() -> Progress:
    """Create the download progress display."""
    return Progress(
        TextColumn("[info]{task.description}[/]"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        console=console,
        transient=True,
    )


def _report(report: SyncReport, dry_run: bool) -> None:
    """Print what the run did."""
    if report.skipped:
        print_info(
            f"Last check was {format_age(report.age.total_seconds())} ago. "
            "Nothing to do (use --force to check anyway)."
        )
        return

    plan = report.plan
    if plan is None:
        return

    for family in plan.unavailable:
        print_warning(f"{family} is configured but not listed in the catalog.")

    if plan.is_noop:
        print_success("Repository is up to date. Nothing to do.")
        return

    console.print()
    console.print(create_plan_table(plan, dry_run=dry_run))

    if dry_run:
        print_info("\nDry-run mode: No changes were made.")
        return

    if report.result is not None:
        print_result_summary(report.result)


@app.callback(invoke_without_command=True)
def sync(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Check the archive even if the last check was recent.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show the plan only, no changes.",
        ),
    ] = False,
    prefer_newest: Annotated[
        bool | None,
        typer.Option(
            "--prefer-newest/--no-prefer-newest",
            help="Pick the newest version when several are listed.",
        ),
    ] = None,
    prefer_current: Annotated[
        bool | None,
        typer.Option(
            "--prefer-current/--no-prefer-current",
            help="Keep the mirrored version while it is still listed.",
        ),
    ] = None,
) -> None:
    """Synchronize the local repository with the archive.

    Keeps exactly one version of every configured kernel family in the
    repository directory and database.

    Examples:
        kernrepo sync                   # Check if due, then sync
        kernrepo sync --force           # Check now
        kernrepo sync --dry-run         # Show the plan only
        kernrepo sync --prefer-newest   # Never prompt on ambiguity
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = require_settings()
    families = require_families(settings)
    if not families:
        print_warning(
            f"No kernel families configured (lines starting with '{settings.family_prefix}')."
        )

    database = RepoToolsDatabase(settings.database_path)
    if not dry_run and not database.is_available():
        print_error("repo-add/repo-remove not found. Install pacman to manage the database.")
        raise typer.Exit(code=1)

    cancel = CancelToken()
    with HttpFetcher(progress=_create_progress()) as fetcher:
        session = SyncSession(
            settings=settings,
            families=families,
            fetcher=fetcher,
            database=database,
            prompter=TerminalPrompter(cancel=cancel),
            cancel=cancel,
        )

        with cancel_on_signals(session.cancel):
            try:
                report = SyncEngine(session).run(
                    force=force,
                    dry_run=dry_run,
                    prefer_newest=prefer_newest,
                    prefer_current=prefer_current,
                )
            except LockBusyError as e:
                print_error(str(e))
                raise typer.Exit(code=1) from e
            except SyncCancelled as e:
                print_warning(f"{e}. Lock released.")
                raise typer.Exit(code=0) from e
            except InteractiveTimeoutError as e:
                print_error(f"{e}. No changes were made.")
                raise typer.Exit(code=1) from e
            except TokenParseError as e:
                print_error(f"Catalog cannot be trusted: {e}")
                raise typer.Exit(code=1) from e
            except FetchError as e:
                print_error(f"Catalog unavailable: {e}")
                raise typer.Exit(code=1) from e
            except RepositoryError as e:
                print_error(f"Repository database update failed: {e}")
                raise typer.Exit(code=1) from e
            except (OSError, RuntimeError) as e:
                print_error(str(e))
                raise typer.Exit(code=1) from e

    _report(report, dry_run)

    if report.error is not None:
        print_error(str(report.error))
        raise typer.Exit(code=1)
