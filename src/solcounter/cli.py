"""
solcounter CLI

Command-line client for the on-chain counter program.

Commands:
  run      - Create (if needed), initialize, increment and read a counter
  read     - Read the current value of a counter account
  keygen   - Generate a payer keypair
  whoami   - Show the payer address
  info     - Show configuration and commands
"""

from __future__ import annotations

import logging
import os
import sys

import click

from .errors import ConfigurationError
from .pneuma.rpc import DEFAULT_COMMITMENT, DEFAULT_NETWORK
from .sigil.keys import load_env, load_payer_keypair


# ============ Constants ============

VERSION = "0.1.0"


# ============ Banner ============


def _print_banner(compact: bool = False) -> None:
    """Print the CLI banner.

    Args:
        compact: If True, print a single-line banner (for subcommands).
    """
    if compact:
        click.echo(
            click.style("  ◆ ", fg="cyan")
            + click.style("S O L C O U N T E R", fg="bright_white", bold=True)
            + click.style(f"  v{VERSION}", dim=True)
        )
        click.echo()
        return

    border = click.style("  ◆ ═══════════════════════════════════════ ◆", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("      S O L C O U N T E R", fg="bright_white", bold=True)
        + click.style(f"      v{VERSION}", dim=True)
    )
    click.secho("        ─── On-chain Counter Client ───", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="solcounter")
@click.option("--verbose", "-v", is_flag=True, help="Log RPC traffic and polling")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """solcounter: on-chain counter client."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(asctime)s %(name)s %(message)s"
        )
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .theurgy.lifecycle import run
from .theurgy.read import read
from .theurgy.keygen import keygen

cli.add_command(run)
cli.add_command(read)
cli.add_command(keygen)


# ============ Identity ============


@cli.command()
def whoami() -> None:
    """Show the payer address."""
    try:
        load_env()
        payer = load_payer_keypair(os.environ.get("PAYER_WALLET"))
    except ConfigurationError as exc:
        click.echo(f"No payer keypair: {exc}")
        click.echo("Run 'solcounter keygen' to create one.")
        sys.exit(exc.exit_code)
    click.echo(f"Address: {payer.pubkey()}")


# ============ Info ============


@cli.command()
def info() -> None:
    """Show configuration and commands."""
    _print_banner()

    click.secho("  Config ─────────────────────────────────", fg="cyan")
    click.echo()

    load_env()
    try:
        payer_text = click.style(
            str(load_payer_keypair(os.environ.get("PAYER_WALLET")).pubkey()),
            fg="bright_white",
        )
    except ConfigurationError:
        payer_text = click.style("not set", fg="yellow") + click.style(
            "  (run: solcounter keygen)", dim=True
        )

    rows = [
        ("Payer:      ", payer_text),
        ("Program:    ", os.environ.get("PROGRAM_ID") or click.style("not set", fg="yellow")),
        ("Account:    ", os.environ.get("ACCOUNT_ID") or click.style("(fresh)", dim=True)),
        ("Network:    ", os.environ.get("RPC_URL") or os.environ.get("NETWORK", DEFAULT_NETWORK)),
        ("Commitment: ", os.environ.get("COMMITMENT", DEFAULT_COMMITMENT)),
    ]
    for label, value in rows:
        click.echo(click.style(f"  {label}", dim=True) + value)

    click.echo()

    click.secho("  Commands ───────────────────────────────", fg="cyan")
    click.echo()

    commands = [
        ("run   ", "Create, initialize, increment and read"),
        ("read  ", "Read a counter account"),
        ("keygen", "Generate a payer keypair"),
        ("whoami", "Show the payer address"),
    ]
    for cmd, desc in commands:
        click.echo(
            click.style("  ", dim=True)
            + click.style(cmd, fg="bright_white", bold=True)
            + click.style("  ◇  ", fg="cyan")
            + click.style(desc, dim=True)
        )

    click.echo()


# ============ Entry Points ============


def main() -> None:
    """solcounter CLI entry point."""
    # Ensure UTF-8 output on Windows (for Unicode box-drawing / symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass  # Fallback: old Python or non-tty
    cli()


if __name__ == "__main__":
    main()
