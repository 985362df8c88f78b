"""
Wire schema shared with the on-chain counter program.

Instruction data (9 bytes)::

    [0]     opcode           0 = Initialize, 1 = Increment
    [1:7]   value, u48 LE    Initialize only (initial counter value)
    [7:9]   unused           always zero

Counter account data (8 bytes)::

    [0:6]   counter, u48 LE
    [6:8]   reserved         zero-written by Initialize, untouched by Increment

The opcode table belongs to the program. New opcodes take the next unused
integer; existing ones are never renumbered.
"""

from __future__ import annotations

from enum import IntEnum

from borsh_construct import CStruct, U8, U64

from ..errors import EncodingError, ReadError


class Opcode(IntEnum):
    INITIALIZE = 0
    INCREMENT = 1


INSTRUCTION_SIZE = 9
VALUE_OFFSET = 1
VALUE_WIDTH = 6

ACCOUNT_SIZE = 8
COUNTER_OFFSET = 0
COUNTER_WIDTH = 6
COUNTER_MAX = (1 << (8 * COUNTER_WIDTH)) - 1

InstructionLayout = CStruct("opcode" / U8, "value" / U64)
CounterLayout = CStruct("counter" / U64)


def pack_instruction_data(opcode: Opcode, value: int = 0) -> bytes:
    """
    Encode an instruction payload.

    Args:
        opcode: Program operation
        value: Initial counter value (Initialize only, must fit in 48 bits)

    Returns:
        9-byte payload

    Raises:
        EncodingError: If the value is out of range or given for Increment
    """
    if value < 0 or value > COUNTER_MAX:
        raise EncodingError(f"Value {value} does not fit in {VALUE_WIDTH} bytes")
    if opcode != Opcode.INITIALIZE and value:
        raise EncodingError(f"{Opcode(opcode).name} carries no value")

    return InstructionLayout.build({"opcode": int(opcode), "value": value})


def unpack_counter(data: bytes) -> int:
    """
    Decode the counter value from raw account bytes.

    Raises:
        ReadError: If the buffer is shorter than the account allocation
    """
    if len(data) < ACCOUNT_SIZE:
        raise ReadError(
            f"Malformed counter account: expected {ACCOUNT_SIZE} bytes, got {len(data)}"
        )
    # Reserved bytes 6..8 are masked off
    return CounterLayout.parse(bytes(data[:ACCOUNT_SIZE])).counter & COUNTER_MAX


def next_value(value: int) -> int:
    """Value the program stores after one Increment, as seen through 48 bits."""
    return (value + 1) & COUNTER_MAX
