"""Click CLI group for managing a Sieve script repository."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TextIO

import click

from sievedir.config import get_settings, validate_settings
from sievedir.errors import ConfigError, ScriptIOError
from sievedir.logging import bind_context, configure_logging
from sievedir.store import (
    Outcome,
    activate,
    check_script,
    count_other_scripts,
    deactivate,
    delete_script,
    get_active,
    get_script,
    is_active,
    list_scripts,
    put_script,
    rename_script,
    script_exists,
    valid_name,
)

_OUTCOME_MESSAGES = {
    Outcome.NOTFOUND: "script not found",
    Outcome.INVALID: "script is invalid",
    Outcome.FAIL: "script processing failed",
    Outcome.IOERROR: "I/O error, see log for details",
}


def _checked_name(name: str) -> str:
    if not valid_name(name):
        raise click.ClickException(f"invalid script name: {name!r}")
    return name


def _raise_for(outcome: Outcome, subject: str) -> None:
    if outcome is Outcome.OK:
        return
    raise click.ClickException(f"{subject}: {_OUTCOME_MESSAGES[outcome]} ({outcome.value})")


def _raise_invalid(name: str, errors: list[str]) -> None:
    for line in errors:
        click.echo(line, err=True)
    raise click.ClickException(f"{name}: {_OUTCOME_MESSAGES[Outcome.INVALID]}")


@click.group()
@click.option(
    "--dir",
    "sieve_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Script repository directory (default: SIEVEDIR).",
)
@click.pass_context
def cli(ctx: click.Context, sieve_dir: Path | None) -> None:
    """Manage the Sieve scripts of one mailbox."""
    settings = get_settings()
    try:
        validate_settings(settings)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    ctx.obj = (sieve_dir or settings.sieve_path()).expanduser()
    bind_context(sievedir=str(ctx.obj))


@cli.command("list")
@click.option("--json", "json_output", is_flag=True, help="Print scripts as JSON.")
@click.pass_obj
def list_command(sievedir: Path, json_output: bool) -> None:
    """List installed scripts, marking the active one."""
    scripts = list_scripts(sievedir)
    if json_output:
        payload = [{"name": item.name, "active": item.active} for item in scripts]
        click.echo(json.dumps(payload, indent=2, sort_keys=True))
        return
    for item in scripts:
        click.echo(f"{item.name} (active)" if item.active else item.name)


@cli.command()
@click.argument("name")
@click.pass_obj
def show(sievedir: Path, name: str) -> None:
    """Print the stored source of a script."""
    try:
        content = get_script(sievedir, _checked_name(name))
    except ScriptIOError as exc:
        raise click.ClickException(str(exc)) from exc
    if content is None:
        raise click.ClickException(f"{name}: {_OUTCOME_MESSAGES[Outcome.NOTFOUND]}")
    click.echo(content.decode("utf-8", errors="replace"), nl=False)


@cli.command()
@click.argument("name")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--activate", "make_active", is_flag=True, help="Activate after installing.")
@click.pass_obj
def put(sievedir: Path, name: str, source: TextIO, make_active: bool) -> None:
    """Compile SOURCE (default: stdin) and install it as NAME."""
    _checked_name(name)
    result = put_script(sievedir, name, source.read())
    if result.outcome is Outcome.INVALID:
        _raise_invalid(name, result.errors)
    _raise_for(result.outcome, name)
    click.echo(f"installed {name}")
    if make_active:
        _raise_for(activate(sievedir, name), name)
        click.echo(f"activated {name}")


@cli.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
def check(source: TextIO) -> None:
    """Check that SOURCE (default: stdin) compiles, without installing it."""
    result = check_script(source.read())
    if result.outcome is Outcome.INVALID:
        _raise_invalid(source.name, result.errors)
    _raise_for(result.outcome, source.name)
    click.echo("ok")


@cli.command()
@click.argument("name")
@click.option("--force", is_flag=True, help="Delete even if the script is active.")
@click.pass_obj
def delete(sievedir: Path, name: str, force: bool) -> None:
    """Delete a script and its compiled form."""
    _checked_name(name)
    if is_active(sievedir, name):
        if not force:
            raise click.ClickException(f"{name} is active; deactivate it first or use --force")
        _raise_for(deactivate(sievedir), name)
    _raise_for(delete_script(sievedir, name), name)
    click.echo(f"deleted {name}")


@cli.command()
@click.argument("oldname")
@click.argument("newname")
@click.pass_obj
def rename(sievedir: Path, oldname: str, newname: str) -> None:
    """Rename a script, moving the active designation with it."""
    _checked_name(oldname)
    _checked_name(newname)
    if oldname != newname and script_exists(sievedir, newname):
        raise click.ClickException(f"script already exists: {newname}")
    _raise_for(rename_script(sievedir, oldname, newname), oldname)
    click.echo(f"renamed {oldname} to {newname}")


@cli.command("activate")
@click.argument("name")
@click.pass_obj
def activate_command(sievedir: Path, name: str) -> None:
    """Make NAME the script run at delivery."""
    _checked_name(name)
    if not script_exists(sievedir, name):
        _raise_for(Outcome.NOTFOUND, name)
    _raise_for(activate(sievedir, name), name)
    click.echo(f"activated {name}")


@cli.command("deactivate")
@click.pass_obj
def deactivate_command(sievedir: Path) -> None:
    """Turn off the active script."""
    _raise_for(deactivate(sievedir), "deactivate")
    click.echo("no script active")


@cli.command()
@click.pass_obj
def active(sievedir: Path) -> None:
    """Print the name of the active script."""
    name = get_active(sievedir)
    click.echo(name if name is not None else "(none)")


@cli.command()
@click.option("--exclude", type=str, default=None, help="Script name not to count.")
@click.pass_obj
def count(sievedir: Path, exclude: str | None) -> None:
    """Count installed scripts."""
    click.echo(str(count_other_scripts(sievedir, exclude)))


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    cli()
