"""Status command for showing the mirrored kernels."""

import json
from datetime import timedelta
from typing import Annotated

import typer

from kernrepo.cli.display import create_state_table
from kernrepo.core.config import require_families, require_settings
from kernrepo.core.lock import LockGuard
from kernrepo.core.paths import get_lock_path
from kernrepo.core.state import StateStore
from kernrepo.utils.formatting import console, print_info, print_warning

app = typer.Typer(
    name="status",
    help="Show mirrored kernels and the last check.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def status(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show mirrored kernels and the age of the last check.

    Examples:
        kernrepo status             # Table of mirrored kernels
        kernrepo status --json      # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = require_settings()
    families = require_families(settings)
    state = StateStore()
    current = state.load()
    age = state.age_since_last_check()
    age_seconds = None if age == timedelta.max else age.total_seconds()
    lock_age = LockGuard(get_lock_path()).age()

    if json_output:
        data = {
            "repository": str(settings.repo_dir),
            "database": str(settings.database_path),
            "configured": families,
            "current": {family: token.raw for family, token in sorted(current.items())},
            "last_check_seconds": age_seconds,
            "sync_running": lock_age is not None,
        }
        console.print_json(json.dumps(data))
        return

    console.print(create_state_table(current, age_seconds))

    untracked = sorted(set(current) - set(families))
    if untracked:
        print_warning(f"No longer configured, pruned on next sync: {', '.join(untracked)}")
    pending = sorted(set(families) - set(current))
    if pending:
        print_info(f"Configured but not mirrored yet: {', '.join(pending)}")
    if lock_age is not None:
        print_info(f"A sync holds the lock ({int(lock_age.total_seconds())}s old).")
