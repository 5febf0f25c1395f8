"""
Assembly and Listing Formatter
==============================

Renders the compiler's resolved instructions in three forms:

- `format_assembly`: symbolic LMC assembly, one instruction per line,
  accepted by this SDK's assembler and by common LMC simulators
- `format_listing`: address, machine word and instruction side by side,
  followed by the symbol table
- `to_mailboxes`: the 100-word memory image

Assembly Format
---------------
Each line is `[label] MNEMONIC [operand] [// comment]`. A mailbox can
carry several compiler labels (the exits of nested constructs that end
together), but LMC assembly allows one label per line. The first label
defined at an address is kept and every operand naming that address is
rewritten to it.

    	INP
    	STA var_a
    while_0	LDA var_a
    	SUB const_0
    	...
    var_a	DAT 0
"""

from typing import TYPE_CHECKING, Optional

from lmc_sdk.errors import ProgramTooLargeError
from lmc_sdk.assembler.opcodes import MAILBOX_COUNT, OperandKind, encode, get_opcode_info

if TYPE_CHECKING:
    from lmc_sdk.compiler.instructions import ResolvedInstruction


def _canonical_labels(instructions: list["ResolvedInstruction"]) -> dict[int, str]:
    """Map each labeled address to the first label defined there."""
    return {instr.address: instr.labels[0] for instr in instructions if instr.labels}


def _operand_text(instr: "ResolvedInstruction", canonical: dict[int, str]) -> str:
    if instr.operand is None:
        return ""
    info = get_opcode_info(instr.opcode.value)
    if info.operand == OperandKind.ADDRESS:
        if instr.operand_label is not None:
            return canonical.get(instr.operand, instr.operand_label)
        return f"{instr.operand:02d}"
    return str(instr.operand)


def format_assembly(
    instructions: list["ResolvedInstruction"],
    comments: bool = True,
    header: Optional[str] = None,
) -> str:
    """
    Render resolved instructions as LMC assembly text.

    Args:
        instructions: Output of the code generator
        comments: Include instruction comments (when the generator
            produced any)
        header: Optional comment placed on the first line

    Returns:
        Assembly source ending with a newline
    """
    canonical = _canonical_labels(instructions)
    width = max((len(name) for name in canonical.values()), default=0)

    lines = []
    if header:
        lines.append(f"// {header}")

    for instr in instructions:
        label = canonical.get(instr.address, "")
        text = instr.opcode.value
        operand = _operand_text(instr, canonical)
        if operand:
            text = f"{text} {operand}"

        line = f"{label:<{width}}\t{text}" if width else f"\t{text}"
        if comments and instr.comment:
            line = f"{line}\t// {instr.comment}"
        lines.append(line.rstrip())

    return "\n".join(lines) + "\n"


def to_mailboxes(
    instructions: list["ResolvedInstruction"],
    capacity: int = MAILBOX_COUNT,
) -> list[int]:
    """
    Encode resolved instructions as a memory image.

    Returns:
        `capacity` words; mailboxes past the program hold 000

    Raises:
        ProgramTooLargeError: If the program needs more than `capacity` cells
    """
    if len(instructions) > capacity:
        raise ProgramTooLargeError(len(instructions), capacity)

    memory = [0] * capacity
    for instr in instructions:
        memory[instr.address] = encode(instr.opcode.value, instr.operand)
    return memory


def format_listing(instructions: list["ResolvedInstruction"], title: Optional[str] = None) -> str:
    """
    Render an address/machine-code listing with a symbol table.

    Example:
        Addr  Code  Label        Instruction
        00    901                INP
        01    306                STA var_a
    """
    canonical = _canonical_labels(instructions)
    memory = to_mailboxes(instructions, capacity=max(len(instructions), 1))

    lines = []
    lines.append(f"LMC Listing: {title}" if title else "LMC Listing")
    lines.append("=" * 50)
    lines.append("")
    lines.append("Addr  Code  Label            Instruction")
    lines.append("-" * 50)

    for instr in instructions:
        label = canonical.get(instr.address, "")
        text = instr.opcode.value
        operand = _operand_text(instr, canonical)
        if operand:
            text = f"{text} {operand}"
        line = f"{instr.address:02d}    {memory[instr.address]:03d}   {label:16s} {text}"
        if instr.comment:
            line = f"{line:50s} // {instr.comment}"
        lines.append(line.rstrip())

    lines.append("")
    lines.append("Symbol Table")
    lines.append("-" * 30)
    for instr in instructions:
        for name in instr.labels:
            lines.append(f"{name:20s} = {instr.address:02d}")

    return "\n".join(lines) + "\n"
