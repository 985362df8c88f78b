__all__ = [
    # Config
    "CounterConfig",
    # Errors
    "CounterError",
    "ConfigurationError",
    "EncodingError",
    "SubmissionError",
    "ReadError",
    "RpcError",
    # Wire schema
    "Opcode",
    "pack_instruction_data",
    "unpack_counter",
    # Encoder
    "encode",
    "initialize_instruction",
    "increment_instruction",
    # Provisioner
    "Fresh",
    "Existing",
    "CounterTarget",
    "Provisioned",
    "provision",
    # Sequencer
    "Receipt",
    "submit",
    # Reader
    "CounterState",
    "SettledRead",
    "read_counter",
    "wait_for_counter",
    # RPC
    "RpcClient",
    # Orchestrator
    "LifecycleReport",
    "run_lifecycle",
]

from .config import CounterConfig
from .errors import (
    ConfigurationError,
    CounterError,
    EncodingError,
    ReadError,
    RpcError,
    SubmissionError,
)
from .pneuma.accounts import CounterTarget, Existing, Fresh, Provisioned, provision
from .pneuma.instructions import encode, increment_instruction, initialize_instruction
from .pneuma.layout import Opcode, pack_instruction_data, unpack_counter
from .pneuma.rpc import RpcClient
from .pneuma.state import CounterState, SettledRead, read_counter, wait_for_counter
from .pneuma.tx import Receipt, submit
from .theurgy.lifecycle import LifecycleReport, run_lifecycle
