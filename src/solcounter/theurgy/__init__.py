"""
Theurgy - Command implementations for the counter client.

Each module corresponds to a top-level CLI command:
- lifecycle: create, initialize, increment and read a counter (``run``)
- read:      read a counter account
- keygen:    generate a payer keypair
"""
