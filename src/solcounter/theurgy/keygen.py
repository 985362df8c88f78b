"""
Keygen - Create a payer keypair for the counter client.

Writes PAYER_WALLET (JSON byte array) to ~/.solcounter/.env unless one is
already present. Fund the printed address before running the lifecycle.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from ..errors import ConfigurationError
from ..sigil import keys


@click.command()
@click.option("--env-path", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Target .env file (default: ~/.solcounter/.env)")
@click.option("--force", is_flag=True, help="Replace an existing PAYER_WALLET")
def keygen(env_path: Optional[Path], force: bool) -> None:
    """Generate and save a payer keypair."""
    env_path = env_path or keys.SOLCOUNTER_ENV

    if not force:
        existing = None
        if env_path.exists():
            for line in env_path.read_text(encoding="utf-8").splitlines():
                if line.strip().startswith("PAYER_WALLET="):
                    existing = line.split("=", 1)[1].strip()
        if existing:
            try:
                payer = keys.load_payer_keypair(existing)
            except ConfigurationError as exc:
                click.secho(f"ERROR: existing PAYER_WALLET is invalid: {exc}", fg="red")
                click.echo("Use --force to replace it.")
                sys.exit(exc.exit_code)
            click.echo("Payer keypair already exists.")
            click.echo(f"  Address: {payer.pubkey()}")
            return

    secret_json, address = keys.generate_keypair()
    saved = keys.save_env_value("PAYER_WALLET", secret_json, env_path)

    click.secho("Payer keypair created.", fg="green")
    click.echo(f"  Address: {address}")
    click.echo(f"  Saved:   {saved}")
