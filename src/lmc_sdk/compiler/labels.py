"""
Label Allocator
===============

Labels are the compiler's handles for "the address of whatever is emitted
here". Code generation is two-pass:

1. Instructions are emitted symbolically. Branches and memory operands
   hold `Label` handles, most of which point forward to code not yet
   emitted.
2. Once the whole instruction list (code, HLT and data cells) is known,
   `resolve()` rewrites every handle to the position where its label was
   defined. Position equals mailbox address because the program is loaded
   at mailbox 00.

The allocator owns an arena of label records. Instructions never point
at each other; they only hold an index into the arena.

Several labels may be defined at the same position (for example the exit
labels of two nested constructs that end together). A label referenced
but never defined, or defined twice, is a compiler defect and raises
InternalCompilerError.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from lmc_sdk.compiler.errors import InternalCompilerError
from lmc_sdk.compiler.instructions import Instruction, Label, ResolvedInstruction

logger = logging.getLogger(__name__)


@dataclass
class _LabelRecord:
    name: str
    position: Optional[int] = None


class LabelAllocator:
    """
    Generates unique labels and resolves them to addresses.

    Usage:
        labels = LabelAllocator()
        loop = labels.new_label("while")
        labels.define(loop, len(instructions))
        ...
        resolved = labels.resolve(instructions)
    """

    def __init__(self):
        self._records: list[_LabelRecord] = []
        self._names: set[str] = set()
        self._counter = 0

    def __len__(self) -> int:
        return len(self._records)

    def new_label(self, prefix: str = "L") -> Label:
        """Create a fresh label named <prefix>_<n>."""
        while True:
            name = f"{prefix}_{self._counter}"
            self._counter += 1
            if name not in self._names:
                return self._add(name)

    def named_label(self, name: str) -> Label:
        """
        Create a label with an exact name.

        Used for data cells (var_x, tmp_0, const_1) whose names are
        already unique by construction.
        """
        if name in self._names:
            raise InternalCompilerError(f"label '{name}' allocated twice")
        return self._add(name)

    def _add(self, name: str) -> Label:
        label = Label(index=len(self._records), name=name)
        self._records.append(_LabelRecord(name))
        self._names.add(name)
        return label

    def _record(self, label: Label) -> _LabelRecord:
        if not 0 <= label.index < len(self._records) or \
                self._records[label.index].name != label.name:
            raise InternalCompilerError(f"label '{label.name}' does not belong to this allocator")
        return self._records[label.index]

    # =========================================================================
    # Definition
    # =========================================================================

    def define(self, label: Label, position: int) -> None:
        """Record `position` as the address of `label`."""
        record = self._record(label)
        if record.position is not None:
            raise InternalCompilerError(
                f"label '{label.name}' defined twice "
                f"(at {record.position} and {position})"
            )
        record.position = position

    def is_defined(self, label: Label) -> bool:
        return self._record(label).position is not None

    def address_of(self, label: Label) -> int:
        position = self._record(label).position
        if position is None:
            raise InternalCompilerError(f"unresolved label '{label.name}'")
        return position

    def labels_at(self, position: int) -> list[Label]:
        """All labels defined at `position`, in allocation order."""
        return [
            Label(index, record.name)
            for index, record in enumerate(self._records)
            if record.position == position
        ]

    def remove_position(self, position: int) -> None:
        """
        Account for the instruction at `position` being deleted.

        Labels after it move down by one. Labels at it now name the
        instruction that slides into its place.
        """
        for record in self._records:
            if record.position is not None and record.position > position:
                record.position -= 1

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve(self, instructions: list[Instruction]) -> list[ResolvedInstruction]:
        """
        Rewrite every label operand to its address.

        Returns:
            One ResolvedInstruction per input instruction; the address of
            instruction i is i

        Raises:
            InternalCompilerError: If an operand label was never defined or
                points past the end of the program
        """
        names_at: dict[int, list[str]] = {}
        for record in self._records:
            if record.position is not None:
                names_at.setdefault(record.position, []).append(record.name)

        resolved = []
        for address, instruction in enumerate(instructions):
            operand = instruction.operand
            operand_label = None

            if isinstance(operand, Label):
                operand_label = operand.name
                operand = self.address_of(operand)
                if operand >= len(instructions):
                    raise InternalCompilerError(
                        f"label '{operand_label}' points past the end of the program"
                    )

            resolved.append(ResolvedInstruction(
                address=address,
                opcode=instruction.opcode,
                operand=operand,
                labels=tuple(names_at.get(address, ())),
                operand_label=operand_label,
                comment=instruction.comment,
            ))

        logger.debug("Resolved %d labels over %d instructions", len(self._records), len(resolved))
        return resolved
