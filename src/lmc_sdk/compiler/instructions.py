"""
Symbolic and Resolved LMC Instructions
======================================

The code generator emits `Instruction` objects whose operands may still
be symbolic `Label` handles. The label allocator rewrites them into
`ResolvedInstruction` objects carrying concrete mailbox addresses.

Instruction Set
---------------
| Opcode | Operand | Effect                                          |
|--------|---------|-------------------------------------------------|
| LDA    | address | acc = mem[address], clear negative flag         |
| STA    | address | mem[address] = acc                              |
| ADD    | address | acc = (acc + mem[address]) mod 1000, clear flag |
| SUB    | address | acc = (acc - mem[address]) mod 1000, flag = r<0 |
| BRA    | address | jump                                            |
| BRZ    | address | jump if acc == 0                                |
| BRP    | address | jump if negative flag clear                     |
| INP    | -       | acc = next input, clear negative flag           |
| OUT    | -       | output acc                                      |
| HLT    | -       | stop                                            |
| DAT    | value   | data cell holding value (0-999)                 |
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class Opcode(Enum):
    """The closed set of LMC operations, valued by mnemonic."""
    LDA = "LDA"
    STA = "STA"
    ADD = "ADD"
    SUB = "SUB"
    BRA = "BRA"
    BRZ = "BRZ"
    BRP = "BRP"
    INP = "INP"
    OUT = "OUT"
    HLT = "HLT"
    DAT = "DAT"

    @property
    def is_branch(self) -> bool:
        return self in BRANCH_OPCODES

    @property
    def references_memory(self) -> bool:
        """True if the operand is a mailbox address."""
        return self in MEMORY_OPCODES or self in BRANCH_OPCODES


BRANCH_OPCODES = frozenset({Opcode.BRA, Opcode.BRZ, Opcode.BRP})
MEMORY_OPCODES = frozenset({Opcode.LDA, Opcode.STA, Opcode.ADD, Opcode.SUB})


@dataclass(frozen=True)
class Label:
    """
    Handle to a record in the label allocator's arena.

    Only the allocator knows where a label is defined; instructions hold
    the handle and the allocator rewrites it during resolution.

    Attributes:
        index: Position of the record in the arena
        name: Unique symbolic name, used in the assembly output
    """
    index: int
    name: str

    def __str__(self) -> str:
        return self.name


Operand = Union[Label, int, None]


@dataclass
class Instruction:
    """
    One symbolic instruction.

    Attributes:
        opcode: The operation
        operand: A Label for memory and branch operands, an int for DAT
            values, or None for INP/OUT/HLT
        comment: Optional annotation carried into the assembly output
    """
    opcode: Opcode
    operand: Operand = None
    comment: Optional[str] = None

    def __str__(self) -> str:
        if self.operand is None:
            return self.opcode.value
        return f"{self.opcode.value} {self.operand}"


@dataclass(frozen=True)
class ResolvedInstruction:
    """
    One instruction with every label replaced by a mailbox address.

    Attributes:
        address: Mailbox this instruction occupies
        opcode: The operation
        operand: Mailbox address, DAT value, or None
        labels: Names of all labels defined at this address, in
            definition order
        operand_label: Name of the label the operand referred to, if any
        comment: Annotation from the code generator, if any
    """
    address: int
    opcode: Opcode
    operand: Optional[int] = None
    labels: tuple[str, ...] = ()
    operand_label: Optional[str] = None
    comment: Optional[str] = None

    def __str__(self) -> str:
        if self.operand is None:
            return f"{self.address:02d}: {self.opcode.value}"
        return f"{self.address:02d}: {self.opcode.value} {self.operand}"
