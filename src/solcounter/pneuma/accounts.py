"""
Account Provisioner - Create or reuse the counter account.

A counter target is either ``Fresh()`` (create a new program-owned account)
or ``Existing(address)`` (trust the caller's address as-is).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import CreateAccountParams, create_account

from ..errors import RpcError, SubmissionError
from .layout import ACCOUNT_SIZE
from .rpc import DEFAULT_COMMITMENT, RpcClient
from .tx import Receipt, submit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fresh:
    """No account supplied: provision one."""


@dataclass(frozen=True)
class Existing:
    address: Pubkey


CounterTarget = Union[Fresh, Existing]


@dataclass(frozen=True)
class Provisioned:
    address: Pubkey
    receipt: Optional[Receipt] = None

    @property
    def created(self) -> bool:
        return self.receipt is not None


def target_from_address(address: Optional[Pubkey]) -> CounterTarget:
    return Fresh() if address is None else Existing(address)


def create_account_instruction(
    payer: Pubkey, new_account: Pubkey, lamports: int, program_id: Pubkey
) -> Instruction:
    """System program instruction allocating the 8-byte counter account."""
    return create_account(
        CreateAccountParams(
            from_pubkey=payer,
            to_pubkey=new_account,
            lamports=lamports,
            space=ACCOUNT_SIZE,
            owner=program_id,
        )
    )


def provision(
    target: CounterTarget,
    payer: Keypair,
    program_id: Pubkey,
    client: RpcClient,
    commitment: str = DEFAULT_COMMITMENT,
    timeout: float = 90.0,
    poll_interval: float = 1.0,
) -> Provisioned:
    """
    Resolve the counter account address, creating the account if needed.

    Existing addresses are returned without touching the network; whether
    they exist or are owned by the program is the caller's concern.

    Raises:
        SubmissionError: If the rent query or the create transaction fails
    """
    if isinstance(target, Existing):
        return Provisioned(target.address)
    if not isinstance(target, Fresh):
        raise TypeError(f"Unsupported counter target: {target!r}")

    account = Keypair()
    logger.debug("generated counter account %s", account.pubkey())

    try:
        lamports = client.get_minimum_balance_for_rent_exemption(ACCOUNT_SIZE)
    except RpcError as exc:
        raise SubmissionError(f"Rent exemption query failed: {exc.message}") from exc

    instruction = create_account_instruction(
        payer.pubkey(), account.pubkey(), lamports, program_id
    )
    receipt = submit(
        client,
        [instruction],
        [payer, account],
        commitment=commitment,
        timeout=timeout,
        poll_interval=poll_interval,
    )
    return Provisioned(account.pubkey(), receipt)
