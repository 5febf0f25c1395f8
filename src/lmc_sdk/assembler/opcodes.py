"""
LMC Instruction Set Definition
==============================

The Little Man Computer has 100 mailboxes (00-99), each holding a
three-digit decimal word 000-999. An instruction word is a one-digit
operation followed by a two-digit mailbox address.

Instruction Encoding
--------------------
| Mnemonic | Word | Operand        | Effect                              |
|----------|------|----------------|-------------------------------------|
| ADD      | 1xx  | address        | acc += mem[xx]                      |
| SUB      | 2xx  | address        | acc -= mem[xx]                      |
| STA      | 3xx  | address        | mem[xx] = acc                       |
| LDA      | 5xx  | address        | acc = mem[xx]                       |
| BRA      | 6xx  | address        | jump to xx                          |
| BRZ      | 7xx  | address        | jump to xx if acc == 0              |
| BRP      | 8xx  | address        | jump to xx if negative flag clear   |
| INP      | 901  | -              | acc = next input                    |
| OUT      | 902  | -              | output acc                          |
| HLT      | 000  | -              | stop                                |
| DAT      | n    | value, default | pseudo-op: mailbox holds n (0-999)  |

Words 001-099, 4xx and 9xx other than 901/902 do not decode.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# Number of mailboxes and the largest value one can hold
MAILBOX_COUNT = 100
MAX_WORD = 999


class OperandKind(Enum):
    """What an instruction's operand field holds."""
    NONE = auto()       # INP, OUT, HLT
    ADDRESS = auto()    # 00-99
    VALUE = auto()      # DAT: 000-999, optional

    def __str__(self) -> str:
        return {
            OperandKind.NONE: "no operand",
            OperandKind.ADDRESS: "a mailbox address",
            OperandKind.VALUE: "a value",
        }[self]


@dataclass(frozen=True)
class OpcodeInfo:
    """
    Encoding of one mnemonic.

    Attributes:
        mnemonic: Upper-case mnemonic
        code: Instruction word with a zero operand field
        operand: Kind of operand the mnemonic takes
    """
    mnemonic: str
    code: int
    operand: OperandKind

    def __repr__(self) -> str:
        return f"OpcodeInfo({self.mnemonic}, {self.code:03d})"


OPCODES: dict[str, OpcodeInfo] = {
    info.mnemonic: info for info in (
        OpcodeInfo("ADD", 100, OperandKind.ADDRESS),
        OpcodeInfo("SUB", 200, OperandKind.ADDRESS),
        OpcodeInfo("STA", 300, OperandKind.ADDRESS),
        OpcodeInfo("LDA", 500, OperandKind.ADDRESS),
        OpcodeInfo("BRA", 600, OperandKind.ADDRESS),
        OpcodeInfo("BRZ", 700, OperandKind.ADDRESS),
        OpcodeInfo("BRP", 800, OperandKind.ADDRESS),
        OpcodeInfo("INP", 901, OperandKind.NONE),
        OpcodeInfo("OUT", 902, OperandKind.NONE),
        OpcodeInfo("HLT", 0, OperandKind.NONE),
        OpcodeInfo("DAT", 0, OperandKind.VALUE),
    )
}

# Leading digit -> mnemonic for instructions with an address field
_ADDRESS_OPS = {
    info.code // 100: info.mnemonic
    for info in OPCODES.values()
    if info.operand == OperandKind.ADDRESS
}
_FIXED_OPS = {901: "INP", 902: "OUT", 0: "HLT"}


def get_opcode_info(mnemonic: str) -> Optional[OpcodeInfo]:
    """Look up a mnemonic (case-insensitive)."""
    return OPCODES.get(mnemonic.upper())


def is_valid_mnemonic(mnemonic: str) -> bool:
    return mnemonic.upper() in OPCODES


def encode(mnemonic: str, operand: Optional[int] = None) -> int:
    """
    Encode one instruction as a mailbox word.

    Raises:
        ValueError: On an unknown mnemonic or an out-of-range operand
    """
    info = get_opcode_info(mnemonic)
    if info is None:
        raise ValueError(f"unknown mnemonic '{mnemonic}'")

    if info.operand == OperandKind.NONE:
        if operand is not None:
            raise ValueError(f"{info.mnemonic} takes no operand")
        return info.code

    if info.operand == OperandKind.VALUE:
        value = 0 if operand is None else operand
        if not 0 <= value <= MAX_WORD:
            raise ValueError(f"DAT value {value} is outside 0-{MAX_WORD}")
        return value

    if operand is None or not 0 <= operand < MAILBOX_COUNT:
        raise ValueError(f"{info.mnemonic} needs an address 00-{MAILBOX_COUNT - 1}, got {operand}")
    return info.code + operand


def decode(word: int) -> Optional[tuple[str, Optional[int]]]:
    """
    Decode a mailbox word into (mnemonic, operand).

    Returns:
        The decoded instruction, or None if the word is not an instruction
    """
    if word in _FIXED_OPS:
        return _FIXED_OPS[word], None

    mnemonic = _ADDRESS_OPS.get(word // 100)
    if mnemonic is None:
        return None
    return mnemonic, word % 100


def disassemble(word: int) -> str:
    """Render a word as an instruction, or as DAT if it does not decode."""
    decoded = decode(word)
    if decoded is None:
        return f"DAT {word}"
    mnemonic, operand = decoded
    if operand is None:
        return mnemonic
    return f"{mnemonic} {operand:02d}"
