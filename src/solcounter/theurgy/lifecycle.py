"""
Lifecycle - Drive the counter account from creation to read-back.

Flow (fresh account):
1. create-account: allocate an 8-byte, rent-exempt, program-owned account
2. initialize:     set the counter to 0
3. increment:      add 1
4. read:           poll until the counter reads 1

Flow (existing account, via --account / ACCOUNT_ID):
1. baseline:  read the current value (a missing account stops here)
2. increment: add 1
3. read:      poll until the counter reads baseline + 1

The baseline is one extra ledger read. It is taken at the configured
commitment, but a lagging node can still return an older value; the
expected value is then too low and the final read may settle on the
pre-increment counter. The increment itself is unaffected.

Stages run strictly in order, each waiting for the previous transaction to
reach the configured commitment. The first failure stops the run; effects
that already landed on-chain stay there.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Optional

import click
from solders.pubkey import Pubkey

from ..config import CounterConfig
from ..errors import CounterError, ReadError
from ..pneuma.accounts import Existing, provision
from ..pneuma.instructions import increment_instruction, initialize_instruction
from ..pneuma.layout import next_value
from ..pneuma.rpc import COMMITMENT_LEVELS, RpcClient
from ..pneuma.state import SettledRead, read_counter, wait_for_counter
from ..pneuma.tx import submit

Reporter = Callable[[str, str], None]


@dataclass
class StageResult:
    stage: str
    signature: Optional[str] = None


@dataclass
class LifecycleReport:
    address: Pubkey
    stages: list[StageResult] = field(default_factory=list)
    final: Optional[SettledRead] = None

    @property
    def value(self) -> Optional[int]:
        return self.final.state.value if self.final else None

    def signature(self, stage: str) -> Optional[str]:
        for result in self.stages:
            if result.stage == stage:
                return result.signature
        return None


@contextmanager
def _stage(name: str) -> Iterator[None]:
    """Tag any CounterError escaping the block with the stage name."""
    try:
        yield
    except CounterError as exc:
        if exc.stage is None:
            exc.stage = name
        raise


def _noop(stage: str, message: str) -> None:
    pass


def run_lifecycle(
    config: CounterConfig,
    client: RpcClient,
    reporter: Optional[Reporter] = None,
) -> LifecycleReport:
    """
    Run the counter lifecycle.

    For an existing account the expected final value is derived from a
    single baseline read, so it is only as fresh as the node serving it.

    Args:
        config: Immutable process configuration
        client: RPC client for the target cluster
        reporter: Called as ``reporter(stage, message)`` after each stage

    Returns:
        LifecycleReport with per-stage signatures and the final read

    Raises:
        CounterError: From the first failing stage, with ``stage`` set
    """
    report = reporter or _noop
    submit_opts = dict(
        commitment=config.commitment,
        timeout=config.confirm_timeout,
        poll_interval=config.poll_interval,
    )
    payer = config.payer
    target = config.target

    if isinstance(target, Existing):
        address = target.address
        lifecycle = LifecycleReport(address)
        with _stage("baseline"):
            baseline = read_counter(client, address)
            if baseline is None:
                raise ReadError(f"Account {address} not found")
        lifecycle.stages.append(StageResult("baseline"))
        report("baseline", f"counter at {baseline.value}")
        expected = next_value(baseline.value)
    else:
        with _stage("create-account"):
            provisioned = provision(
                target, payer, config.program_id, client, **submit_opts
            )
        address = provisioned.address
        lifecycle = LifecycleReport(address)
        created_sig = provisioned.receipt.signature if provisioned.receipt else None
        lifecycle.stages.append(StageResult("create-account", created_sig))
        report("create-account", f"account {address} (tx {created_sig})")

        with _stage("initialize"):
            receipt = submit(
                client,
                [initialize_instruction(config.program_id, address, payer.pubkey())],
                [payer],
                **submit_opts,
            )
        lifecycle.stages.append(StageResult("initialize", receipt.signature))
        report("initialize", f"tx {receipt.signature}")
        expected = next_value(0)

    with _stage("increment"):
        receipt = submit(
            client,
            [increment_instruction(config.program_id, address)],
            [payer],
            **submit_opts,
        )
    lifecycle.stages.append(StageResult("increment", receipt.signature))
    report("increment", f"tx {receipt.signature}")

    with _stage("read"):
        lifecycle.final = wait_for_counter(
            client,
            address,
            expected,
            timeout=config.settle_timeout,
            poll_interval=config.poll_interval,
        )
    lifecycle.stages.append(StageResult("read"))
    report("read", f"counter value {lifecycle.final.state.value}")

    return lifecycle


@click.command()
@click.option("--account", "account_id", default=None, help="Existing counter account (skips create + initialize)")
@click.option("--program-id", default=None, help="Counter program address")
@click.option("--network", default=None, help="Cluster name (devnet, testnet, mainnet-beta, localnet)")
@click.option("--rpc-url", default=None, help="RPC URL (overrides --network)")
@click.option("--commitment", type=click.Choice(COMMITMENT_LEVELS), default=None, help="Finality tier to wait for")
@click.option("--settle-timeout", type=float, default=None, help="Seconds to wait for the final read to converge")
@click.option("--env-file", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Extra .env file to load")
def run(
    account_id: Optional[str],
    program_id: Optional[str],
    network: Optional[str],
    rpc_url: Optional[str],
    commitment: Optional[str],
    settle_timeout: Optional[float],
    env_file: Optional[Path],
) -> None:
    """
    Create (if needed), initialize, increment and read a counter.

    Pass --account to reuse an existing counter; it is incremented once
    and read back.
    """
    click.echo("=== Counter Lifecycle ===")
    click.echo("")

    try:
        config = CounterConfig.from_env(
            env_file,
            account_id=account_id,
            program_id=program_id,
            network=network,
            rpc_url=rpc_url,
            commitment=commitment,
            settle_timeout=settle_timeout,
        )
    except CounterError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(exc.exit_code)

    click.echo(f"  Payer:   {config.payer.pubkey()}")
    click.echo(f"  Program: {config.program_id}")
    click.echo(f"  RPC:     {config.rpc_url} ({config.commitment})")
    click.echo("")

    def _report(stage: str, message: str) -> None:
        click.echo(f"[{stage}] {message}")

    try:
        with RpcClient(config.rpc_url, commitment=config.commitment) as client:
            result = run_lifecycle(config, client, reporter=_report)
    except CounterError as exc:
        click.secho(f"FAILED: {exc}", fg="red")
        sys.exit(exc.exit_code)

    click.echo("")
    if not result.final.settled:
        click.secho(
            f"  WARNING: expected {result.final.expected}, ledger still reports "
            f"{result.final.state.value} (node not yet converged)",
            fg="yellow",
        )
    click.secho(f"Current counter value: {result.value}", fg="green")
    click.echo(f"  Account: {result.address}")
