"""
LMC Assembler - Main Interface
==============================

Two-pass assembler turning LMC assembly text into a 100-word memory
image that the emulator (or any LMC simulator) can load.

Source Format
-------------
One statement per line:

    [label] MNEMONIC [operand]    // comment

- Mnemonics are case-insensitive; labels are case-sensitive
- Comments start with `//` or `;`
- A line may hold only a label, which then names the next instruction
- Operands are a decimal number or a label
- `DAT` takes an optional value (default 0)

Assembly Process
----------------
1. Pass 1: split lines into statements and record each label's address
2. Pass 2: resolve operands and encode each statement as a word

Example Usage
-------------
>>> from lmc_sdk.assembler import Assembler
>>> asm = Assembler()
>>> memory = asm.assemble('''
...         INP
...         OUT
...         HLT
... ''')
>>> memory[:3]
[901, 902, 0]

Command-Line Usage
------------------
    $ lmcasm countdown.asm -o countdown.mem -l countdown.lst
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from lmc_sdk.errors import (
    AssemblySyntaxError,
    DuplicateSymbolError,
    ProgramTooLargeError,
    SourceLocation,
    UndefinedSymbolError,
    find_similar_names,
)
from lmc_sdk.assembler.opcodes import (
    MAILBOX_COUNT,
    MAX_WORD,
    OperandKind,
    OpcodeInfo,
    disassemble,
    encode,
    get_opcode_info,
)

logger = logging.getLogger(__name__)

_LABEL_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass
class AssemblyStatement:
    """
    One instruction from pass 1.

    Attributes:
        address: Mailbox the instruction occupies
        info: Opcode table entry
        operand: Operand text as written, or None
        location: Where the mnemonic appears
        source_line: Full source line for error context
    """
    address: int
    info: OpcodeInfo
    operand: Optional[str]
    location: SourceLocation
    source_line: str


class Assembler:
    """
    Two-pass LMC assembler.

    Attributes:
        capacity: Number of mailboxes in the target machine
    """

    def __init__(self, capacity: int = MAILBOX_COUNT):
        self.capacity = capacity
        self._symbols: dict[str, int] = {}
        self._symbol_locations: dict[str, SourceLocation] = {}
        self._statements: list[AssemblyStatement] = []
        self._memory: list[int] = []

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble(self, source: str, filename: str = "<input>") -> list[int]:
        """
        Assemble source text into a memory image.

        Returns:
            `capacity` words; mailboxes past the program hold 000

        Raises:
            AssemblySyntaxError: Malformed line, bad mnemonic or operand
            UndefinedSymbolError: Operand names an unknown label
            DuplicateSymbolError: Label defined twice
            ProgramTooLargeError: More statements than mailboxes
        """
        self._symbols = {}
        self._symbol_locations = {}
        self._statements = []

        self._pass1(source, filename)

        if len(self._statements) > self.capacity:
            overflow = self._statements[self.capacity]
            raise ProgramTooLargeError(len(self._statements), self.capacity, overflow.location)

        memory = [0] * self.capacity
        for stmt in self._statements:
            memory[stmt.address] = self._encode(stmt)

        self._memory = memory
        logger.info(
            "Assembled %d mailboxes, %d labels from %s",
            len(self._statements), len(self._symbols), filename,
        )
        return list(memory)

    def assemble_file(self, filepath: str | Path) -> list[int]:
        """
        Assemble a source file.

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        source = filepath.read_text(encoding="utf-8")
        return self.assemble(source, str(filepath))

    # =========================================================================
    # Pass 1: statements and labels
    # =========================================================================

    def _pass1(self, source: str, filename: str) -> None:
        pending_labels: list[tuple[str, SourceLocation, str]] = []

        for line_no, raw_line in enumerate(source.splitlines(), start=1):
            code = self._strip_comment(raw_line)
            fields = self._split_fields(code)
            if not fields:
                continue

            texts = [text for _, text in fields]
            first_column = fields[0][0]

            if get_opcode_info(texts[0]) is None:
                label = texts[0]
                label_location = SourceLocation(filename, line_no, first_column)
                if not _LABEL_RE.match(label):
                    raise AssemblySyntaxError(
                        f"invalid label or unknown mnemonic '{label}'",
                        location=label_location,
                        source_line=raw_line,
                    )
                pending_labels.append((label, label_location, raw_line))
                fields = fields[1:]
                texts = texts[1:]
                if not fields:
                    continue

            column, mnemonic = fields[0]
            location = SourceLocation(filename, line_no, column)
            info = get_opcode_info(mnemonic)
            if info is None:
                raise AssemblySyntaxError(
                    f"unknown mnemonic '{mnemonic}'",
                    location=location,
                    source_line=raw_line,
                )

            if len(texts) > 2:
                extra_column, extra = fields[2]
                raise AssemblySyntaxError(
                    f"unexpected '{extra}' after operand",
                    location=SourceLocation(filename, line_no, extra_column),
                    source_line=raw_line,
                )

            operand = texts[1] if len(texts) == 2 else None
            if info.operand == OperandKind.NONE and operand is not None:
                raise AssemblySyntaxError(
                    f"{info.mnemonic} takes no operand",
                    location=location,
                    source_line=raw_line,
                )
            if info.operand == OperandKind.ADDRESS and operand is None:
                raise AssemblySyntaxError(
                    f"{info.mnemonic} needs {info.operand}",
                    location=location,
                    source_line=raw_line,
                )

            address = len(self._statements)
            for label, label_location, label_line in pending_labels:
                self._define_label(label, address, label_location, label_line)
            pending_labels = []

            self._statements.append(AssemblyStatement(
                address=address,
                info=info,
                operand=operand,
                location=location,
                source_line=raw_line,
            ))

        # Trailing labels name the first free mailbox
        for label, label_location, label_line in pending_labels:
            self._define_label(label, len(self._statements), label_location, label_line)

    @staticmethod
    def _strip_comment(line: str) -> str:
        for marker in ("//", ";"):
            index = line.find(marker)
            if index != -1:
                line = line[:index]
        return line

    @staticmethod
    def _split_fields(code: str) -> list[tuple[int, str]]:
        """Split a line into (1-indexed column, text) fields."""
        return [(match.start() + 1, match.group()) for match in re.finditer(r"\S+", code)]

    def _define_label(self, label: str, address: int, location: SourceLocation, source_line: str) -> None:
        if label in self._symbols:
            raise DuplicateSymbolError(
                label,
                location=location,
                original_location=self._symbol_locations[label],
                source_line=source_line,
            )
        self._symbols[label] = address
        self._symbol_locations[label] = location

    # =========================================================================
    # Pass 2: encoding
    # =========================================================================

    def _encode(self, stmt: AssemblyStatement) -> int:
        operand = None
        if stmt.operand is not None:
            operand = self._resolve_operand(stmt)

        if stmt.info.operand == OperandKind.ADDRESS and not 0 <= operand < self.capacity:
            raise AssemblySyntaxError(
                f"address {operand} is outside mailboxes 00-{self.capacity - 1:02d}",
                location=stmt.location,
                source_line=stmt.source_line,
            )
        if stmt.info.operand == OperandKind.VALUE and operand is not None and not 0 <= operand <= MAX_WORD:
            raise AssemblySyntaxError(
                f"DAT value {operand} is outside 0-{MAX_WORD}",
                location=stmt.location,
                source_line=stmt.source_line,
            )

        return encode(stmt.info.mnemonic, operand)

    def _resolve_operand(self, stmt: AssemblyStatement) -> int:
        text = stmt.operand
        if re.fullmatch(r"-?\d+", text):
            return int(text)

        if text in self._symbols:
            return self._symbols[text]

        raise UndefinedSymbolError(
            text,
            location=stmt.location,
            source_line=stmt.source_line,
            similar_symbols=find_similar_names(text, self._symbols),
        )

    # =========================================================================
    # Output Methods
    # =========================================================================

    @property
    def program_size(self) -> int:
        """Number of mailboxes used by the last assembled program."""
        return len(self._statements)

    def get_symbols(self) -> dict[str, int]:
        return dict(self._symbols)

    def get_listing(self) -> str:
        """Listing of the last assembled program: address, word, source."""
        lines = []
        lines.append("LMC Assembler Listing")
        lines.append("=" * 60)
        lines.append("")
        lines.append("Addr  Code  Line  Source")
        lines.append("-" * 60)
        for stmt in self._statements:
            word = self._memory[stmt.address]
            lines.append(
                f"{stmt.address:02d}    {word:03d}   {stmt.location.line:4d}  {stmt.source_line.strip()}"
            )
        lines.append("")
        lines.append("Symbol Table")
        lines.append("-" * 30)
        for name, address in sorted(self._symbols.items()):
            lines.append(f"{name:20s} = {address:02d}")
        return "\n".join(lines) + "\n"


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>") -> list[int]:
    """Assemble source text into a 100-word memory image."""
    return Assembler().assemble(source, filename)


def assemble_file(filepath: str | Path) -> list[int]:
    """Assemble a file into a 100-word memory image."""
    return Assembler().assemble_file(filepath)


def format_memory(memory: list[int], disassembly: bool = False) -> str:
    """
    Render a memory image as text, one mailbox per line ("NN WWW").

    Trailing zero mailboxes are omitted. With `disassembly`, each line is
    followed by the decoded instruction.
    """
    used = len(memory)
    while used > 0 and memory[used - 1] == 0:
        used -= 1

    lines = []
    for address in range(used):
        line = f"{address:02d} {memory[address]:03d}"
        if disassembly:
            line = f"{line}  {disassemble(memory[address])}"
        lines.append(line)
    return "\n".join(lines) + "\n"


def parse_memory(text: str) -> list[int]:
    """
    Read a memory image written by format_memory.

    Accepts "NN WWW" lines (anything after the word is ignored) or bare
    words one per line.

    Raises:
        ValueError: On a malformed line or value
    """
    memory = [0] * MAILBOX_COUNT
    next_address = 0
    for line_no, line in enumerate(text.splitlines(), start=1):
        fields = line.split()
        if not fields:
            continue
        try:
            if len(fields) >= 2 and fields[1].isdigit():
                address, word = int(fields[0]), int(fields[1])
            else:
                address, word = next_address, int(fields[0])
        except ValueError:
            raise ValueError(f"line {line_no}: expected 'address word', got '{line.strip()}'") from None
        if not 0 <= address < MAILBOX_COUNT or not 0 <= word <= MAX_WORD:
            raise ValueError(f"line {line_no}: mailbox {address} / word {word} out of range")
        memory[address] = word
        next_address = address + 1
    return memory
