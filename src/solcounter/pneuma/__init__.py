"""
Pneuma - On-chain interaction layer for the counter client.

Provides the JSON-RPC client, the instruction wire schema and encoder,
account provisioning, transaction sequencing and state reads.

Uses httpx + solders instead of the heavyweight solana-py.
"""
