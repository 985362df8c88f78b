"""
Transaction Sequencer - Build, sign, send and confirm transactions.

Uses solders for message compilation and signing, and the httpx-based
RpcClient for sending. One best-effort attempt per call: a rejected or
unconfirmed transaction raises SubmissionError and is never resubmitted.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional, Sequence

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.transaction import Transaction

from ..errors import RpcError, SubmissionError
from .rpc import DEFAULT_COMMITMENT, RpcClient, commitment_reached

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Receipt:
    signature: str
    slot: Optional[int]
    commitment: str


def build_transaction(
    instructions: Sequence[Instruction],
    signers: Sequence[Keypair],
    client: RpcClient,
) -> tuple[Transaction, int]:
    """
    Compile and sign a transaction against the latest blockhash.

    The first signer pays the fee. Instructions keep their order.

    Returns:
        (signed transaction, last valid block height)
    """
    if not instructions:
        raise ValueError("At least one instruction is required")
    if not signers:
        raise ValueError("At least one signer (the fee payer) is required")

    blockhash, last_valid_height = client.get_latest_blockhash()
    message = Message.new_with_blockhash(
        list(instructions), signers[0].pubkey(), blockhash
    )
    tx = Transaction(list(signers), message, blockhash)
    return tx, last_valid_height


def wait_for_confirmation(
    client: RpcClient,
    signature: str,
    last_valid_height: int,
    commitment: str = DEFAULT_COMMITMENT,
    timeout: float = 90.0,
    poll_interval: float = 1.0,
) -> Receipt:
    """
    Poll a signature until it reaches ``commitment``.

    Raises:
        SubmissionError: If the transaction failed, its blockhash expired,
            or it was not confirmed within ``timeout`` seconds
    """
    start = time.time()
    while True:
        status = client.get_signature_status(signature)
        if status is not None:
            if status.get("err"):
                raise SubmissionError(
                    f"Transaction failed: {status['err']}", signature=signature
                )
            logger.debug(
                "signature %s at %s", signature, status.get("confirmationStatus")
            )
            if commitment_reached(status.get("confirmationStatus"), commitment):
                return Receipt(signature, status.get("slot"), commitment)
        elif client.get_block_height() > last_valid_height:
            raise SubmissionError(
                "Blockhash expired before the transaction landed",
                signature=signature,
            )

        if time.time() - start >= timeout:
            raise SubmissionError(
                f"Transaction not {commitment} within {timeout}s",
                signature=signature,
            )
        time.sleep(poll_interval)


def submit(
    client: RpcClient,
    instructions: Sequence[Instruction],
    signers: Sequence[Keypair],
    commitment: str = DEFAULT_COMMITMENT,
    timeout: float = 90.0,
    poll_interval: float = 1.0,
) -> Receipt:
    """
    Sign, send (preflight skipped) and block until ``commitment``.

    Args:
        client: RPC client
        instructions: Instructions, executed atomically in order
        signers: Keypairs; the first one pays the fee
        commitment: Finality tier to wait for (default: finalized)
        timeout: Confirmation timeout in seconds
        poll_interval: Status polling interval in seconds

    Returns:
        Receipt with the transaction signature
    """
    signature: Optional[str] = None
    try:
        tx, last_valid_height = build_transaction(instructions, signers, client)
        signature = str(tx.signatures[0])
        sent = client.send_transaction(tx, skip_preflight=True)
        if sent and sent != signature:
            logger.debug("node returned signature %s, expected %s", sent, signature)
            signature = sent
        return wait_for_confirmation(
            client,
            signature,
            last_valid_height,
            commitment=commitment,
            timeout=timeout,
            poll_interval=poll_interval,
        )
    except RpcError as exc:
        raise SubmissionError(exc.message, signature=signature) from exc
