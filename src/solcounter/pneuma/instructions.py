"""
Instruction Encoder - Build counter program instructions.

Pure functions: given addresses, they return a solders Instruction whose
payload follows the wire schema in ``layout`` and whose account list carries
the signer/writable flags the program checks.
"""

from __future__ import annotations

from typing import Sequence

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from ..errors import EncodingError
from .layout import Opcode, pack_instruction_data


def initialize_instruction(
    program_id: Pubkey,
    account: Pubkey,
    payer: Pubkey,
    initial_value: int = 0,
) -> Instruction:
    """
    Build the Initialize instruction.

    Args:
        program_id: Counter program address
        account: Counter account to initialize (writable)
        payer: Fee payer (co-signer, read-only)
        initial_value: Starting counter value, 0 unless seeding

    Returns:
        Instruction with a 9-byte payload
    """
    accounts = [
        AccountMeta(pubkey=account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=payer, is_signer=True, is_writable=False),
    ]
    data = pack_instruction_data(Opcode.INITIALIZE, initial_value)
    return Instruction(program_id, data, accounts)


def increment_instruction(program_id: Pubkey, account: Pubkey) -> Instruction:
    """Build the Increment instruction for ``account``."""
    accounts = [AccountMeta(pubkey=account, is_signer=False, is_writable=True)]
    data = pack_instruction_data(Opcode.INCREMENT)
    return Instruction(program_id, data, accounts)


def encode(
    opcode: Opcode,
    program_id: Pubkey,
    accounts: Sequence[Pubkey],
    initial_value: int = 0,
) -> Instruction:
    """
    Encode an instruction by opcode.

    ``accounts`` is ``[counter, payer]`` for Initialize and ``[counter]``
    for Increment.
    """
    if opcode == Opcode.INITIALIZE:
        if len(accounts) != 2:
            raise EncodingError(
                f"Initialize takes 2 accounts (counter, payer), got {len(accounts)}"
            )
        return initialize_instruction(program_id, accounts[0], accounts[1], initial_value)

    if opcode == Opcode.INCREMENT:
        if len(accounts) != 1:
            raise EncodingError(f"Increment takes 1 account, got {len(accounts)}")
        return increment_instruction(program_id, accounts[0])

    raise EncodingError(f"Unknown opcode: {opcode}")
