"""
Ed25519 Key Management for the counter client.

The payer keypair is supplied as PAYER_WALLET: a JSON array of the 64 raw
secret-key bytes, the same format ``solana-keygen`` writes to disk.
Keys may live in the environment or in ~/.solcounter/.env.

Dependencies: solders (keypair parsing/generation), python-dotenv
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from ..errors import ConfigurationError


# Default config directory
SOLCOUNTER_DIR = Path.home() / ".solcounter"
SOLCOUNTER_ENV = SOLCOUNTER_DIR / ".env"

SECRET_KEY_LENGTH = 64


def load_env(env_path: Optional[Path] = None) -> None:
    """
    Load .env files into the process environment.

    ``env_path`` wins over ./.env, which wins over ~/.solcounter/.env.
    Variables already set in the environment are never overridden.
    """
    if env_path is not None:
        if not env_path.exists():
            raise ConfigurationError(f"Env file not found: {env_path}")
        load_dotenv(env_path, override=False)
    load_dotenv(Path.cwd() / ".env", override=False)
    if SOLCOUNTER_ENV.exists():
        load_dotenv(SOLCOUNTER_ENV, override=False)


def load_payer_keypair(raw: Optional[str]) -> Keypair:
    """
    Parse a keypair from its JSON byte-array form.

    Args:
        raw: JSON text such as "[12, 34, ...]" (64 integers)

    Raises:
        ConfigurationError: If the value is missing or malformed
    """
    if not raw:
        raise ConfigurationError("PAYER_WALLET is not set")

    try:
        secret = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"PAYER_WALLET is not valid JSON: {exc}") from exc

    if not isinstance(secret, list) or not all(
        isinstance(b, int) and 0 <= b <= 255 for b in secret
    ):
        raise ConfigurationError("PAYER_WALLET must be a JSON array of byte values")
    if len(secret) != SECRET_KEY_LENGTH:
        raise ConfigurationError(
            f"PAYER_WALLET must hold {SECRET_KEY_LENGTH} bytes, got {len(secret)}"
        )

    try:
        return Keypair.from_bytes(bytes(secret))
    except ValueError as exc:
        raise ConfigurationError(f"PAYER_WALLET is not a valid keypair: {exc}") from exc


def parse_address(value: Optional[str], name: str) -> Pubkey:
    """
    Parse a base58 address.

    Raises:
        ConfigurationError: If missing or not a valid public key
    """
    if not value:
        raise ConfigurationError(f"{name} is not set")
    try:
        return Pubkey.from_string(value.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} is not a valid address: {value}") from exc


def keypair_to_json(keypair: Keypair) -> str:
    """Serialize a keypair to the JSON byte-array form."""
    return json.dumps(list(bytes(keypair)), separators=(",", ":"))


def generate_keypair() -> tuple[str, str]:
    """
    Generate a new payer keypair.

    Returns:
        Tuple of (secret_json, address)
    """
    keypair = Keypair()
    return keypair_to_json(keypair), str(keypair.pubkey())


def save_env_value(key: str, value: str, env_path: Optional[Path] = None) -> Path:
    """
    Save a single key=value to the .env file, preserving other entries.

    Returns:
        Path to the saved .env file
    """
    env_path = env_path or SOLCOUNTER_ENV
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        for line in env_path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                k, v = line.split("=", 1)
                existing[k.strip()] = v.strip()

    existing[key] = value

    lines = [f"{k}={v}" for k, v in existing.items()]
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    # Secret material: owner-only on Unix
    if os.name != "nt":
        env_path.chmod(0o600)

    return env_path
