"""
Read - Show the current value of a counter account.

A missing account is reported as such (exit code 5), never as zero.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

import click

from ..errors import ConfigurationError, CounterError, ReadError
from ..pneuma.rpc import COMMITMENT_LEVELS, DEFAULT_COMMITMENT, DEFAULT_NETWORK, RpcClient, cluster_url
from ..pneuma.state import read_counter
from ..sigil.keys import load_env, parse_address


@click.command()
@click.option("--account", "account_id", default=None, help="Counter account address (default: ACCOUNT_ID)")
@click.option("--network", default=None, help="Cluster name")
@click.option("--rpc-url", default=None, help="RPC URL (overrides --network)")
@click.option("--commitment", type=click.Choice(COMMITMENT_LEVELS), default=None, help="Read commitment")
def read(
    account_id: Optional[str],
    network: Optional[str],
    rpc_url: Optional[str],
    commitment: Optional[str],
) -> None:
    """Read and decode a counter account."""
    try:
        load_env()
        address = parse_address(account_id or os.environ.get("ACCOUNT_ID"), "ACCOUNT_ID")
        try:
            url = rpc_url or os.environ.get("RPC_URL") or cluster_url(
                network or os.environ.get("NETWORK", DEFAULT_NETWORK)
            )
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        level = commitment or os.environ.get("COMMITMENT", DEFAULT_COMMITMENT)
        with RpcClient(url, commitment=level) as client:
            state = read_counter(client, address)
    except CounterError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(exc.exit_code)

    if state is None:
        click.secho(f"Account not found: {address}", fg="yellow")
        sys.exit(ReadError.exit_code)

    click.echo(f"  Account: {address}")
    click.echo(f"  Raw:     {state.raw.hex()}")
    click.secho(f"Current counter value: {state.value}", fg="green")
