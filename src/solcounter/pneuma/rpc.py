"""
JSON-RPC Client for a Solana cluster.

Lightweight alternative to solana-py: uses httpx for HTTP and solders for
transaction serialization. Covers exactly the ledger surface the counter
client needs: blockhash, rent, send, signature status and account reads.
"""

from __future__ import annotations

import base64
import itertools
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import httpx
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from ..errors import RpcError

logger = logging.getLogger(__name__)

# Public cluster endpoints (same table as web3.js clusterApiUrl)
CLUSTER_URLS: dict[str, str] = {
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "localnet": "http://127.0.0.1:8899",
}
DEFAULT_NETWORK = "devnet"

# Weakest to strongest
COMMITMENT_LEVELS = ("processed", "confirmed", "finalized")
DEFAULT_COMMITMENT = "finalized"


def cluster_url(network: str) -> str:
    """Resolve a network name to its public RPC URL."""
    try:
        return CLUSTER_URLS[network]
    except KeyError:
        known = ", ".join(sorted(CLUSTER_URLS))
        raise ValueError(f"Unknown network '{network}' (expected one of: {known})") from None


def commitment_reached(status: Optional[str], required: str) -> bool:
    """True if a confirmationStatus is at least as strong as ``required``."""
    if status not in COMMITMENT_LEVELS:
        return False
    return COMMITMENT_LEVELS.index(status) >= COMMITMENT_LEVELS.index(required)


@contextmanager
def _malformed(method: str) -> Iterator[None]:
    """Turn an unexpected result shape into RpcError."""
    try:
        yield
    except (AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
        raise RpcError(f"{method} returned malformed result: {exc!r}") from exc


class RpcClient:
    """
    Minimal Solana JSON-RPC client.

    Args:
        url: RPC endpoint URL
        commitment: Commitment used for reads and blockhash queries
        timeout: HTTP timeout in seconds
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        url: str,
        commitment: str = DEFAULT_COMMITMENT,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url
        self.commitment = commitment
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._ids = itertools.count(1)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RpcClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _rpc_call(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Returns:
            Result field from the RPC response

        Raises:
            RpcError: On transport failure or an RPC error object
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        logger.debug("rpc %s %s", method, params)

        try:
            response = self._client.post(self.url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise RpcError(f"{method} failed: {exc}") from exc
        except ValueError as exc:
            raise RpcError(f"{method} returned invalid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise RpcError(f"{method} returned malformed response: {data!r}")

        if "error" in data:
            error = data["error"]
            if not isinstance(error, dict):
                error = {"message": error}
            raise RpcError(
                f"RPC error in {method}: {error.get('message', error)}",
                code=error.get("code"),
            )

        return data.get("result")

    # ---- Queries ----

    def get_latest_blockhash(self) -> tuple[Hash, int]:
        """
        Returns:
            (blockhash, last_valid_block_height)
        """
        result = self._rpc_call(
            "getLatestBlockhash", [{"commitment": self.commitment}]
        )
        with _malformed("getLatestBlockhash"):
            value = result["value"]
            return Hash.from_string(value["blockhash"]), int(value["lastValidBlockHeight"])

    def get_block_height(self) -> int:
        result = self._rpc_call("getBlockHeight", [{"commitment": self.commitment}])
        with _malformed("getBlockHeight"):
            return int(result)

    def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        """Lamports an account of ``size`` bytes must hold to be rent exempt."""
        result = self._rpc_call(
            "getMinimumBalanceForRentExemption",
            [size, {"commitment": self.commitment}],
        )
        with _malformed("getMinimumBalanceForRentExemption"):
            return int(result)

    def get_account_data(self, address: Pubkey) -> Optional[bytes]:
        """
        Fetch raw account data.

        Returns:
            Account bytes, or None if the account does not exist
        """
        result = self._rpc_call(
            "getAccountInfo",
            [str(address), {"encoding": "base64", "commitment": self.commitment}],
        )
        with _malformed("getAccountInfo"):
            value = (result or {}).get("value")
            if value is None:
                return None
            encoded, _encoding = value["data"]
            return base64.b64decode(encoded, validate=True)

    def get_signature_status(self, signature: str) -> Optional[dict]:
        """
        Look up a transaction's status.

        Returns:
            Status dict (``confirmationStatus``, ``err``, ``slot``) or None
            if the node has not seen the signature yet
        """
        result = self._rpc_call(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": False}],
        )
        with _malformed("getSignatureStatuses"):
            statuses = result["value"] or [None]
            status = statuses[0]
            if status is not None and not isinstance(status, dict):
                raise TypeError(f"status is {type(status).__name__}")
            return status

    # ---- Submission ----

    def send_transaction(self, tx: Transaction, skip_preflight: bool = True) -> str:
        """
        Send a signed transaction.

        Returns:
            Transaction signature (base58)
        """
        encoded = base64.b64encode(bytes(tx)).decode("ascii")
        signature = self._rpc_call(
            "sendTransaction",
            [
                encoded,
                {
                    "encoding": "base64",
                    "skipPreflight": skip_preflight,
                    "preflightCommitment": self.commitment,
                },
            ],
        )
        if not isinstance(signature, str):
            raise RpcError(f"sendTransaction returned malformed result: {signature!r}")
        return signature
