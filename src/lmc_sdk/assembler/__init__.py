"""
LMC Assembler
=============

Tools for the assembly side of the toolchain:

- **Assembler**: two-pass text assembler producing a 100-word memory image
- **format_assembly / format_listing / to_mailboxes**: render the
  compiler's resolved instructions as assembly text, a listing, or a
  memory image
- **opcodes**: the LMC instruction encoding table

Example Usage
-------------
>>> from lmc_sdk.assembler import assemble
>>> assemble("INP\\nOUT\\nHLT\\n")[:3]
[901, 902, 0]
"""

from lmc_sdk.assembler.assembler import (
    Assembler,
    AssemblyStatement,
    assemble,
    assemble_file,
    format_memory,
    parse_memory,
)
from lmc_sdk.assembler.formatter import format_assembly, format_listing, to_mailboxes
from lmc_sdk.assembler.opcodes import (
    MAILBOX_COUNT,
    MAX_WORD,
    OPCODES,
    OpcodeInfo,
    OperandKind,
    decode,
    disassemble,
    encode,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "AssemblyStatement",
    "assemble",
    "assemble_file",
    "format_memory",
    "parse_memory",
    # Formatter
    "format_assembly",
    "format_listing",
    "to_mailboxes",
    # Opcodes
    "MAILBOX_COUNT",
    "MAX_WORD",
    "OPCODES",
    "OpcodeInfo",
    "OperandKind",
    "decode",
    "disassemble",
    "encode",
]
