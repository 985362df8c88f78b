"""Tests for the account provisioner."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID

from solcounter.errors import RpcError, SubmissionError
from solcounter.pneuma.accounts import (
    Existing,
    Fresh,
    create_account_instruction,
    provision,
    target_from_address,
)

RENT_FOR_8_BYTES = 946_560


class TestTargetVariant:
    def test_none_is_fresh(self) -> None:
        assert target_from_address(None) == Fresh()

    def test_address_is_existing(self) -> None:
        address = Pubkey.new_unique()
        assert target_from_address(address) == Existing(address)


class TestCreateAccountInstruction:
    def test_fields(self, program_id: Pubkey) -> None:
        payer, new_account = Pubkey.new_unique(), Pubkey.new_unique()
        ix = create_account_instruction(payer, new_account, RENT_FOR_8_BYTES, program_id)

        assert ix.program_id == SYSTEM_PROGRAM_ID
        data = bytes(ix.data)
        assert int.from_bytes(data[0:4], "little") == 0  # CreateAccount
        assert int.from_bytes(data[4:12], "little") == RENT_FOR_8_BYTES
        assert int.from_bytes(data[12:20], "little") == 8
        assert Pubkey.from_bytes(data[20:52]) == program_id

        metas = [(m.pubkey, m.is_signer, m.is_writable) for m in ix.accounts]
        assert metas == [(payer, True, True), (new_account, True, True)]


class TestProvision:
    def test_existing_touches_nothing(self, payer: Keypair, program_id: Pubkey) -> None:
        client = MagicMock()
        address = Pubkey.new_unique()

        result = provision(Existing(address), payer, program_id, client)

        assert result.address == address
        assert result.created is False
        assert client.method_calls == []

    def test_fresh_creates_program_owned_account(self, ledger, payer: Keypair, program_id: Pubkey) -> None:
        result = provision(Fresh(), payer, program_id, ledger, poll_interval=0)

        assert result.created is True
        assert ledger.accounts[result.address] == bytearray(8)
        assert ledger.owners[result.address] == program_id
        assert ledger.log == ["rent:8", "send:create", "status"]
        assert result.receipt.signature == str(ledger.sent[0].signatures[0])

    def test_fresh_signed_by_payer_and_new_account(self, ledger, payer: Keypair, program_id: Pubkey) -> None:
        result = provision(Fresh(), payer, program_id, ledger, poll_interval=0)
        tx = ledger.sent[0]
        signers = tx.message.account_keys[: tx.message.header.num_required_signatures]
        assert set(signers) == {payer.pubkey(), result.address}
        tx.verify()

    def test_each_fresh_call_uses_a_new_address(self, ledger, payer: Keypair, program_id: Pubkey) -> None:
        first = provision(Fresh(), payer, program_id, ledger, poll_interval=0)
        second = provision(Fresh(), payer, program_id, ledger, poll_interval=0)
        assert first.address != second.address

    def test_rejected_creation(self, ledger, payer: Keypair, program_id: Pubkey) -> None:
        ledger.reject.add("create")
        with pytest.raises(SubmissionError):
            provision(Fresh(), payer, program_id, ledger, poll_interval=0)
        assert ledger.sends() == ["send:create"]

    def test_rent_query_failure(self, payer: Keypair, program_id: Pubkey) -> None:
        client = MagicMock()
        client.get_minimum_balance_for_rent_exemption.side_effect = RpcError("rpc down")
        with pytest.raises(SubmissionError, match="Rent exemption query failed"):
            provision(Fresh(), payer, program_id, client)
        client.send_transaction.assert_not_called()

    def test_rejects_unknown_target(self, payer: Keypair, program_id: Pubkey) -> None:
        with pytest.raises(TypeError):
            provision(None, payer, program_id, MagicMock())  # type: ignore[arg-type]
