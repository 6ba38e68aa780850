from __future__ import annotations
import asyncio
import getpass
import os
import sys

import click

from .config import RunDefaults, load_config
from .credentials import DEFAULT_KEY_FILES, resolve_keys, split_key_paths
from .dispatcher import Dispatcher
from .errors import ConfigError, CredentialError
from .hosts import build_targets, resolve_hosts
from .models import ExecutionResult, HostTarget, clean_command
from .output import (
    console,
    print_banner,
    print_command,
    print_log_warning,
    print_result,
    print_summary,
    print_timeout,
)


DEFAULT_TIMEOUT = 15.0
DEFAULT_CONCURRENCY = 50
DEFAULT_LOG_DIR = "./commandcast_logs"


@click.group()
@click.version_option("1.0.0", prog_name="commandcast")
@click.option("--config", "-c", type=click.Path(dir_okay=False), help="YAML defaults file")
@click.option("--concurrency", "-n", type=int, default=None, help="Max concurrent connections (0=unbounded)")
@click.option("--log-dir", "-l", default=None, help="Log output directory")
@click.option("--no-log", is_flag=True, default=False, help="Disable file logging")
@click.pass_context
def cli(ctx, config, concurrency, log_dir, no_log):
    """commandcast - Run a command on multiple hosts over SSH."""
    ctx.ensure_object(dict)

    defaults = RunDefaults()
    if config:
        try:
            defaults = load_config(config)
        except ConfigError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)

    ctx.obj["defaults"] = defaults
    ctx.obj["concurrency"] = _first(concurrency, defaults.concurrency, DEFAULT_CONCURRENCY)
    ctx.obj["log_dir"] = log_dir or defaults.log_dir or DEFAULT_LOG_DIR
    ctx.obj["enable_logging"] = not no_log


def _first(*values):
    """First value that is not None."""
    return next(v for v in values if v is not None)


# ── exec ─────────────────────────────────────────────────────────

@cli.command("exec")
@click.argument("command", required=False, default="")
@click.option("--interactive", "-i", is_flag=True, default=False, help="Enable interactive mode")
@click.option("--hosts", default=None, help="Multiple hosts (comma separated)")
@click.option("--hostfile", default=None, help="File containing host names")
@click.option("--user", "-u", default=None, help="SSH auth user")
@click.option("--timeout", type=float, default=None, help="SSH timeout (seconds)")
@click.option("--keys", default=None, help="SSH auth keys (comma separated)")
@click.pass_context
def exec_(ctx, command, interactive, hosts, hostfile, user, timeout, keys):
    """Execute a command on all hosts."""
    defaults: RunDefaults = ctx.obj["defaults"]

    command = clean_command(command)
    if not interactive and not command:
        raise click.UsageError("Missing COMMAND (or pass --interactive).")

    if hosts is None:
        hosts = ",".join(defaults.hosts) if defaults.hosts else "localhost"
    host_names = resolve_hosts(hosts, hostfile)
    if not host_names:
        console.print("[red]No hosts given.[/red]")
        sys.exit(1)

    user = user or defaults.user or os.environ.get("USER") or getpass.getuser()
    timeout = _first(timeout, defaults.timeout, DEFAULT_TIMEOUT)
    key_paths = split_key_paths(keys) if keys else (defaults.keys or list(DEFAULT_KEY_FILES))

    try:
        ssh_keys = resolve_keys(key_paths)
    except CredentialError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    targets = build_targets(host_names, user, ssh_keys, timeout)
    print_banner(key_paths, targets)

    dispatcher = _make_dispatcher(ctx.obj)
    if interactive:
        asyncio.run(_interactive_shell(dispatcher, targets, timeout))
    else:
        asyncio.run(_run_once(dispatcher, command, targets, timeout))


cli.add_command(exec_, name="e")


def _make_dispatcher(obj: dict) -> Dispatcher:
    dispatcher = Dispatcher(
        max_concurrency=obj["concurrency"],
        log_dir=obj["log_dir"],
        enable_logging=obj["enable_logging"],
    )

    async def _result_cb(result: ExecutionResult):
        print_result(result)

    async def _timeout_cb(missing: list[HostTarget]):
        print_timeout(missing)

    dispatcher.on_result(_result_cb)
    dispatcher.on_timeout(_timeout_cb)
    return dispatcher


async def _run_once(dispatcher, command, targets, timeout):
    print_command(command)
    report = await dispatcher.execute(command, targets, timeout)
    print_summary(report)
    if dispatcher.log_error:
        print_log_warning(dispatcher.log_error)
    return report


# ── interactive ──────────────────────────────────────────────────

async def _interactive_shell(dispatcher, targets, timeout):
    console.print(
        f"[bold green]{len(targets)} hosts.[/bold green] "
        "Type commands to run on all hosts, 'exit' to quit."
    )
    while True:
        try:
            line = input(">>> ")
        except (EOFError, KeyboardInterrupt):
            console.print("\nGoodbye!")
            break

        cmd = clean_command(line)
        if cmd == "exit":
            break
        if not cmd:
            continue

        report = await dispatcher.execute(cmd, targets, timeout)
        print_summary(report)

    if dispatcher.log_error:
        print_log_warning(dispatcher.log_error)


# ── entry point ──────────────────────────────────────────────────

def main():
    cli()


if __name__ == "__main__":
    main()
