"""
State Reader - Fetch and decode the counter account.

A missing account reads as ``None``, never as a zero counter. Reads right
after a confirmed write may hit a node that has not converged yet, so
``wait_for_counter`` polls until the expected value shows up.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from solders.pubkey import Pubkey

from ..errors import ReadError, RpcError
from .layout import unpack_counter
from .rpc import RpcClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CounterState:
    value: int
    raw: bytes


@dataclass(frozen=True)
class SettledRead:
    state: CounterState
    expected: int
    settled: bool


def decode_counter(data: bytes) -> CounterState:
    return CounterState(value=unpack_counter(data), raw=bytes(data))


def read_counter(client: RpcClient, address: Pubkey) -> Optional[CounterState]:
    """
    Read the counter account.

    Returns:
        Decoded state, or None if the account does not exist

    Raises:
        ReadError: If the RPC call fails or the data is malformed
    """
    try:
        data = client.get_account_data(address)
    except RpcError as exc:
        raise ReadError(f"Failed to read account {address}: {exc.message}") from exc

    if not data:
        return None
    return decode_counter(data)


def wait_for_counter(
    client: RpcClient,
    address: Pubkey,
    expected: int,
    timeout: float = 10.0,
    poll_interval: float = 0.5,
) -> SettledRead:
    """
    Poll the counter until it reads ``expected`` or ``timeout`` elapses.

    Returns:
        SettledRead with the last observed state; ``settled`` is False if
        the expected value was not observed in time

    Raises:
        ReadError: If the account was never observed
    """
    start = time.time()
    last: Optional[CounterState] = None
    while True:
        state = read_counter(client, address)
        if state is not None:
            last = state
            if state.value == expected:
                return SettledRead(state, expected, settled=True)
            logger.debug("counter at %d, waiting for %d", state.value, expected)

        if time.time() - start >= timeout:
            break
        time.sleep(poll_interval)

    if last is None:
        raise ReadError(f"Account {address} not found")
    return SettledRead(last, expected, settled=False)
