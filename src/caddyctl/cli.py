"""caddyctl CLI - label files, proxy entries and container reloads."""

from __future__ import annotations

import shlex
from dataclasses import replace
from pathlib import Path

import typer

from caddyctl import __version__, ui
from caddyctl.config import CaddyctlConfig, Settings, load_config
from caddyctl.errors import CaddyctlError
from caddyctl.reload import ReloadStep, run_reload
from caddyctl.store import add_entry, create_label

app = typer.Typer(
    name="caddyctl",
    help="Manage Caddy reverse-proxy label files and reload Caddy inside Docker.",
    no_args_is_help=True,
)


def _version_option_callback(value: bool) -> None:
    """Handle eager --version option."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _fail(exc: CaddyctlError) -> typer.Exit:
    ui.error(str(exc))
    return typer.Exit(1)


@app.callback()
def _cli_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging on stderr."),
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="YAML settings file (defaults to $CADDYCTL_CONFIG when set).",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show caddyctl version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
) -> None:
    """Load settings once per invocation."""
    _ = version
    ui.configure_logging(verbose)
    try:
        ctx.obj = load_config(config_file)
    except CaddyctlError as exc:
        raise _fail(exc) from exc


def _settings(ctx: typer.Context, directory: Path | None, ext: str | None, force: bool, quiet: bool) -> Settings:
    config: CaddyctlConfig = ctx.obj
    settings = replace(config.settings, force=force, quiet=quiet)
    if directory is not None:
        settings = replace(settings, directory=directory)
    if ext is not None:
        settings = replace(settings, extension=ext)
    return settings


@app.command("label")
def label(
    ctx: typer.Context,
    name: str = typer.Argument(..., metavar="NAME"),
    directory: Path | None = typer.Option(
        None, "--dir", "-d", help="Directory where the label file will be created (default: /srv/proxy/sites)."
    ),
    ext: str | None = typer.Option(None, "--ext", help="File extension (default: .caddy)."),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite the file if it already exists."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print warnings and errors."),
) -> None:
    """Create an (empty) label file to group multiple entries.

    Does not overwrite an existing file unless --force is given.
    """
    settings = _settings(ctx, directory, ext, force, quiet)
    try:
        path = create_label(name, settings)
    except CaddyctlError as exc:
        raise _fail(exc) from exc
    ui.success(f"File created: {path}", quiet=settings.quiet)


def _warn_duplicate(path: Path, upstream: str) -> None:
    ui.warning(f"upstream {upstream} already used in this label file ({path})")


@app.command("new-entry")
def new_entry(
    ctx: typer.Context,
    label_name: str = typer.Argument(..., metavar="LABEL"),
    host: str = typer.Argument(..., metavar="HOST"),
    upstream: str = typer.Argument(..., metavar="UPSTREAM", help="ip or ip:port"),
    directory: Path | None = typer.Option(
        None, "--dir", "-d", help="Directory where the label file resides (default: /srv/proxy/sites)."
    ),
    ext: str | None = typer.Option(None, "--ext", help="File extension for the label (default: .caddy)."),
    force: bool = typer.Option(False, "--force", "-f", help="Replace the entry if it already exists."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print warnings and errors."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the proposed diff without writing."),
) -> None:
    """Append or replace a reverse_proxy block for HOST inside a label file.

    Creates the label file if it does not exist. Fails if a block for HOST
    already exists unless --force is used. Warns if UPSTREAM is already
    assigned elsewhere in the same label.
    """
    settings = _settings(ctx, directory, ext, force, quiet)
    try:
        result = add_entry(
            label_name,
            host,
            upstream,
            settings,
            dry_run=dry_run,
            on_duplicate=_warn_duplicate,
        )
    except CaddyctlError as exc:
        raise _fail(exc) from exc

    if dry_run:
        ui.console.print(f"Dry run: proposed changes for {result.path}", style="yellow", markup=False, highlight=False, soft_wrap=True)
        ui.print_diff(ui.unified_diff(result.old_content, result.new_content, path=result.path))
        return

    ui.success(f"Entry {result.action}: {host} → {upstream} in {result.path}", quiet=settings.quiet)


app.command("newEntry", hidden=True)(new_entry)


@app.command("reload")
def reload(
    ctx: typer.Context,
    container: str | None = typer.Option(
        None, "--container", "-c", help="Docker container name running Caddy (default: caddy)."
    ),
    caddyfile: str | None = typer.Option(
        None, "--config", "-f", help="Path to the Caddyfile inside the container (default: /etc/caddy/Caddyfile)."
    ),
    tty: bool | None = typer.Option(
        None, "--tty/--no-tty", help="Attach a TTY (-t) in addition to -i for docker exec (default: tty)."
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print errors."),
) -> None:
    """Format, validate and reload the Caddy config inside Docker.

    Runs in the target container, stopping at the first failure:

    1) caddy fmt --overwrite <Caddyfile>

    2) caddy validate --config <Caddyfile>

    3) caddy reload --config <Caddyfile>
    """
    config: CaddyctlConfig = ctx.obj
    settings = replace(config.reload, quiet=quiet)
    if container is not None:
        settings = replace(settings, container=container)
    if caddyfile is not None:
        settings = replace(settings, config=caddyfile)
    if tty is not None:
        settings = replace(settings, tty=tty)

    def _announce(step: ReloadStep) -> None:
        if not settings.quiet:
            ui.console.print(f"→ {shlex.join(['docker', *step.args])}", markup=False, highlight=False, soft_wrap=True)

    try:
        run_reload(settings, on_step=_announce)
    except CaddyctlError as exc:
        raise _fail(exc) from exc

    ui.success("Caddy configuration reloaded successfully.", quiet=settings.quiet)


def main() -> None:
    app()


if __name__ == "__main__":

    main()
