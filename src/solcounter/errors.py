"""
Error taxonomy for the counter client.

Every failure carries the exit code the CLI terminates with and, once it
has crossed a lifecycle stage boundary, the name of the stage that failed.
"""

from __future__ import annotations

from typing import Optional


class CounterError(RuntimeError):
    exit_code: int = 1

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class ConfigurationError(CounterError):
    exit_code = 2


class EncodingError(CounterError):
    exit_code = 3


class SubmissionError(CounterError):
    exit_code = 4

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        signature: Optional[str] = None,
    ) -> None:
        super().__init__(message, stage=stage)
        self.signature = signature

    def __str__(self) -> str:
        text = super().__str__()
        if self.signature:
            text += f" (tx {self.signature})"
        return text


class ReadError(CounterError):
    exit_code = 5


class RpcError(CounterError):
    """Transport failure or JSON-RPC error object from the ledger node."""

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code
