"""
Shared fixtures: an in-memory ledger that stands in for RpcClient.

The fake ledger applies the system program's CreateAccount and the counter
program's Initialize / Increment the way the on-chain code does, so the
lifecycle can be exercised end to end without a cluster.
"""

from __future__ import annotations

from typing import Optional

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders import system_program
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from solcounter.config import CounterConfig
from solcounter.errors import RpcError
from solcounter.pneuma.accounts import Existing, Fresh

SYSTEM_PROGRAM_ID = system_program.ID
RENT_FOR_8_BYTES = 946_560


class FakeLedger:
    """Duck-typed RpcClient backed by a dict of account bytes."""

    def __init__(self, program_id: Pubkey) -> None:
        self.program_id = program_id
        self.accounts: dict[Pubkey, bytearray] = {}
        self.owners: dict[Pubkey, Pubkey] = {}
        self.previous: dict[Pubkey, bytes] = {}
        self.statuses: dict[str, dict] = {}
        self.log: list[str] = []
        self.sent: list[Transaction] = []
        self.skip_preflight: list[bool] = []
        # Failure injection
        self.reject: set[str] = set()
        self.send_errors: set[str] = set()
        self.stale_reads = 0
        self.block_height = 10

    # ---- RpcClient surface ----

    def __enter__(self) -> "FakeLedger":
        return self

    def __exit__(self, *exc_info) -> None:
        pass

    def get_latest_blockhash(self) -> tuple[Hash, int]:
        return Hash.new_unique(), self.block_height + 150

    def get_block_height(self) -> int:
        return self.block_height

    def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        self.log.append(f"rent:{size}")
        return RENT_FOR_8_BYTES

    def get_account_data(self, address: Pubkey) -> Optional[bytes]:
        self.log.append("read")
        if self.stale_reads > 0 and address in self.previous:
            self.stale_reads -= 1
            return self.previous[address]
        data = self.accounts.get(address)
        return bytes(data) if data is not None else None

    def get_signature_status(self, signature: str) -> Optional[dict]:
        self.log.append("status")
        return self.statuses.get(signature)

    def send_transaction(self, tx: Transaction, skip_preflight: bool = True) -> str:
        kind = self._kind(tx)
        if kind in self.send_errors:
            raise RpcError(f"node rejected {kind}")
        self.log.append(f"send:{kind}")
        self.sent.append(tx)
        self.skip_preflight.append(skip_preflight)

        signature = str(tx.signatures[0])
        err = None
        if kind in self.reject:
            err = {"InstructionError": [0, "Custom"]}
        else:
            self._apply(tx)
        self.statuses[signature] = {
            "slot": len(self.sent),
            "confirmationStatus": "finalized",
            "err": err,
        }
        return signature

    # ---- Program semantics ----

    def _kind(self, tx: Transaction) -> str:
        message = tx.message
        ix = message.instructions[0]
        program = message.account_keys[ix.program_id_index]
        if program == SYSTEM_PROGRAM_ID:
            return "create"
        return {0: "initialize", 1: "increment"}.get(ix.data[0], "unknown")

    def _apply(self, tx: Transaction) -> None:
        message = tx.message
        keys = message.account_keys
        signers = set(keys[: message.header.num_required_signatures])
        for ix in message.instructions:
            program = keys[ix.program_id_index]
            accounts = [keys[i] for i in ix.accounts]
            data = bytes(ix.data)
            if program == SYSTEM_PROGRAM_ID:
                new_account = accounts[1]
                assert new_account in signers, "new account must co-sign"
                space = int.from_bytes(data[12:20], "little")
                self.accounts[new_account] = bytearray(space)
                self.owners[new_account] = Pubkey.from_bytes(data[20:52])
            elif program == self.program_id:
                target = accounts[0]
                current = self.accounts[target]
                self.previous[target] = bytes(current)
                if data[0] == 0:
                    assert len(data) == 9
                    assert self.owners.get(target) == self.program_id
                    assert not any(current), "already initialized"
                    current[:8] = data[1:9]
                elif data[0] == 1:
                    value = (int.from_bytes(current[:8], "little") + 1) % (1 << 64)
                    current[:8] = value.to_bytes(8, "little")

    # ---- Helpers ----

    def set_counter(self, address: Pubkey, value: int) -> None:
        self.accounts[address] = bytearray(value.to_bytes(8, "little"))
        self.owners[address] = self.program_id

    def sends(self) -> list[str]:
        return [entry for entry in self.log if entry.startswith("send:")]


@pytest.fixture()
def program_id() -> Pubkey:
    return Pubkey.new_unique()


@pytest.fixture()
def payer() -> Keypair:
    return Keypair()


@pytest.fixture()
def ledger(program_id: Pubkey) -> FakeLedger:
    return FakeLedger(program_id)


def _make_config(payer: Keypair, program_id: Pubkey, account: Optional[Pubkey] = None) -> CounterConfig:
    return CounterConfig(
        payer=payer,
        program_id=program_id,
        target=Existing(account) if account is not None else Fresh(),
        rpc_url="http://127.0.0.1:8899",
        network="localnet",
        confirm_timeout=1.0,
        settle_timeout=1.0,
        poll_interval=0.0,
    )


@pytest.fixture()
def make_config(payer: Keypair, program_id: Pubkey):
    """Factory: ``make_config()`` for a fresh account, ``make_config(addr)`` to reuse one."""

    def _factory(account: Optional[Pubkey] = None) -> CounterConfig:
        return _make_config(payer, program_id, account)

    return _factory
