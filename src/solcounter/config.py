"""
Process configuration.

Everything the lifecycle needs from the outside world is read exactly once,
at startup, into an immutable CounterConfig that is passed down explicitly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .errors import ConfigurationError
from .pneuma.accounts import CounterTarget, target_from_address
from .pneuma.rpc import (
    COMMITMENT_LEVELS,
    DEFAULT_COMMITMENT,
    DEFAULT_NETWORK,
    cluster_url,
)
from .sigil.keys import load_env, load_payer_keypair, parse_address


@dataclass(frozen=True)
class CounterConfig:
    payer: Keypair
    program_id: Pubkey
    target: CounterTarget
    rpc_url: str
    network: str = DEFAULT_NETWORK
    commitment: str = DEFAULT_COMMITMENT
    confirm_timeout: float = 90.0
    settle_timeout: float = 10.0
    poll_interval: float = 0.5

    @classmethod
    def from_mapping(
        cls,
        env: Mapping[str, str],
        **overrides: object,
    ) -> "CounterConfig":
        """
        Build a config from environment-style variables.

        Recognised keys: PAYER_WALLET, PROGRAM_ID, ACCOUNT_ID, NETWORK,
        RPC_URL, COMMITMENT, SETTLE_TIMEOUT. Non-None ``overrides`` (from
        CLI flags) take precedence over the matching variable.

        Raises:
            ConfigurationError: If a required value is missing or invalid
        """
        values = {k: v for k, v in env.items() if v not in (None, "")}
        for key, value in overrides.items():
            if value is not None and value != "":
                values[key.upper()] = value  # type: ignore[assignment]

        payer = load_payer_keypair(values.get("PAYER_WALLET"))
        program_id = parse_address(values.get("PROGRAM_ID"), "PROGRAM_ID")

        account_id = values.get("ACCOUNT_ID")
        target: CounterTarget = target_from_address(
            parse_address(account_id, "ACCOUNT_ID") if account_id else None
        )

        network = values.get("NETWORK", DEFAULT_NETWORK)
        rpc_url = values.get("RPC_URL")
        if not rpc_url:
            try:
                rpc_url = cluster_url(network)
            except ValueError as exc:
                raise ConfigurationError(str(exc)) from exc

        commitment = values.get("COMMITMENT", DEFAULT_COMMITMENT)
        if commitment not in COMMITMENT_LEVELS:
            raise ConfigurationError(
                f"Unknown commitment '{commitment}' "
                f"(expected one of: {', '.join(COMMITMENT_LEVELS)})"
            )

        try:
            settle_timeout = float(values.get("SETTLE_TIMEOUT", 10.0))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"SETTLE_TIMEOUT must be a number: {exc}") from exc

        return cls(
            payer=payer,
            program_id=program_id,
            target=target,
            rpc_url=rpc_url,
            network=network,
            commitment=commitment,
            settle_timeout=settle_timeout,
        )

    @classmethod
    def from_env(
        cls, env_path: Optional[Path] = None, **overrides: object
    ) -> "CounterConfig":
        """Load .env files, then build the config from ``os.environ``."""
        load_env(env_path)
        return cls.from_mapping(os.environ, **overrides)
