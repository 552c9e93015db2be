"""Init command implementation.

Writes a default settings file and seeds the kernels list from the bundled
sample.
"""

from typing import Annotated

import typer

from kernrepo.core.config import ConfigError, save_settings, seed_kernels_file
from kernrepo.core.paths import ensure_config_dir, get_kernels_path, get_settings_path
from kernrepo.models.settings import Settings
from kernrepo.utils.formatting import print_error, print_info, print_success

app = typer.Typer(
    name="init",
    help="Create default configuration files.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing settings with defaults.",
        ),
    ] = False,
) -> None:
    """Create default configuration files.

    Writes ~/.config/kernrepo/config.toml and, if missing, the kernels list
    (lines starting with the family prefix name the mirrored kernels).

    Examples:
        kernrepo init               # Create missing files
        kernrepo init --force       # Reset settings to defaults
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        ensure_config_dir()
    except RuntimeError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    settings_path = get_settings_path()
    try:
        if settings_path.exists() and not force:
            print_info(f"Settings already exist: {settings_path} (use --force to reset)")
        else:
            save_settings(Settings(), settings_path)
            print_success(f"Settings written: {settings_path}")

        kernels_existed = get_kernels_path().exists()
        kernels_path = seed_kernels_file()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if kernels_existed:
        print_info(f"Kernels list already exists: {kernels_path}")
    else:
        print_success(f"Kernels list created: {kernels_path}")
