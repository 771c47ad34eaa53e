"""
Main entry point for the pathmutex program. Accessed by 'pathmutex' in the command line.
"""
from functools import update_wrapper
import os
from pathlib import Path
import subprocess
import sys
import click
import yaml

from pathmutex.core.errors import LockError, LockTimeoutError
from pathmutex.core.runtime import build_runtime, Runtime
from pathmutex.core.settings import LockSettings, save_settings
from pathmutex.core.strategies import get_strategy, strategy_registry

EX_TEMPFAIL = 75  # sysexits.h: temporary failure, try again later


def pass_runtime(f):
    """
    Decorator to pass a Runtime to Click commands that need it.
    Ensures a Runtime is created and passed as the first argument.
    """
    @click.pass_context
    def new_func(ctx: click.Context, *args, **kwargs):
        ctx.ensure_object(dict)
        rt = ctx.obj.get('rt')
        if rt is None:
            opts = ctx.obj.get('global_opts', {})  # user overrides
            try:
                rt = build_runtime(**opts)
            except LockError as e:
                raise click.ClickException(str(e)) from e
            ctx.obj['rt'] = rt
        # call the function with the Runtime context
        return f(ctx.obj['rt'], *args, **kwargs)
    return update_wrapper(new_func, f)

strategy_option = click.option(
    '--strategy', type=click.Choice(strategy_registry.names()), default=None,
    help="Lock resource type (default from config: file).",
)

@click.group()
@click.option('--config', 'config_path', type=click.Path(path_type=Path), default=None,
              help="Path to a YAML configuration file.")
@click.option('-v', '--verbose', is_flag=True, default=False,
              help="Debug logging of every acquire and release.")
@click.version_option(package_name="pathmutex")
@click.pass_context
def main(ctx, config_path, verbose):
    """pathmutex: filesystem locks shared between processes."""
    ctx.ensure_object(dict)
    ctx.obj['global_opts'] = {
        'config_path': config_path,
        'verbose': verbose,
    }

@main.command(context_settings={"ignore_unknown_options": True})
@pass_runtime
@click.argument("lock")
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.option("--timeout", "-t", type=float, default=None,
              help="Seconds to wait for the lock (default from config).")
@click.option("--poll-interval", type=float, default=None,
              help="Seconds between attempts (default from config).")
@strategy_option
def run(rt: Runtime, lock: str, command: tuple[str, ...], timeout: float | None,
        poll_interval: float | None, strategy: str | None):
    """
    Run COMMAND while holding LOCK.

    Example: pathmutex run nightly.lock -t 30 -- rsync -a src/ dst/
    """
    timeout = rt.settings.timeout if timeout is None else timeout
    try:
        file_lock = rt.new_lock(lock, poll_interval=poll_interval, strategy=strategy)
        file_lock.lock(timeout)
    except LockTimeoutError as e:
        rt.logger.error("%s", e)
        sys.exit(EX_TEMPFAIL)
    except LockError as e:
        raise click.ClickException(str(e)) from e

    rt.logger.debug("Running %s", " ".join(command))
    returncode = 1
    try:
        returncode = subprocess.call(list(command))
    except OSError as e:
        rt.logger.error("Could not start %s: %s", command[0], e)
        returncode = 127
    finally:
        try:
            file_lock.unlock()
        except LockError as e:
            # The command already ran; report the broken marker but keep its status
            rt.logger.error("%s", e)
            returncode = returncode or 1
    sys.exit(returncode)

@main.command()
@pass_runtime
@click.argument("lock")
@strategy_option
def status(rt: Runtime, lock: str, strategy: str | None):
    """
    Report whether LOCK is currently held by anyone. Exit 0 if held, 1 if free.
    Informational only: the answer may be stale by the time you read it.
    """
    path = rt.lock_path(lock)
    held = get_strategy(strategy or rt.settings.strategy).exists(path)
    click.echo(f"{path}: {'held' if held else 'free'}")
    sys.exit(0 if held else 1)

@main.command(name="break")
@pass_runtime
@click.argument("lock")
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation.")
@strategy_option
def break_(rt: Runtime, lock: str, yes: bool, strategy: str | None):
    """
    Remove a stale LOCK left behind by a crashed holder.

    Only do this when you are sure the holder is gone: breaking a live lock
    lets two processes into the critical section.
    """
    path = rt.lock_path(lock)
    lock_strategy = get_strategy(strategy or rt.settings.strategy)
    if not lock_strategy.exists(path):
        click.echo(f"{path}: no {lock_strategy.name} lock present")
        return
    if not yes:
        click.confirm(f"Remove lock {path}?", abort=True)
    try:
        if path.is_dir():
            os.rmdir(path)
        else:
            os.unlink(path)
    except OSError as e:
        raise click.ClickException(f"Failed to remove {path}: {e}") from e
    rt.logger.info("Removed stale lock %s", path)
    click.echo(f"{path}: removed")

@main.command()
@pass_runtime
@click.option("--init", is_flag=True, default=False,
              help="Write a default configuration file if none exists.")
def config(rt: Runtime, init: bool):
    """
    Show the effective configuration.
    """
    if init:
        if rt.config_path.exists():
            raise click.ClickException(f"Config already exists: {rt.config_path}")
        save_settings(rt.config_path, LockSettings())
        click.echo(f"Wrote default config to {rt.config_path}")
        return
    click.echo(f"# {rt.config_path}{'' if rt.config_path.exists() else ' (not found, defaults)'}")
    click.echo(yaml.safe_dump(rt.settings.to_dict(), sort_keys=False), nl=False)
