"""
LMC SDK - Pseudocode Toolchain for the Little Man Computer
==========================================================

This package compiles a small imperative pseudocode language to
assembly for the Little Man Computer (LMC), the classic teaching
machine with one accumulator and 100 three-digit mailboxes shared by
code and data.

Main Components
---------------
- **compiler**: pseudocode compiler (lmcc)
    Converts pseudocode (.lmc) into LMC assembly (.asm)

- **assembler**: LMC assembler (lmcasm)
    Converts assembly into a 100-word memory image

- **emulator**: LMC simulator (lmcrun)
    Runs memory images, compiled programs or assembly sources

Quick Start
-----------
Compile a program:
    >>> from lmc_sdk import compile_lmc
    >>> print(compile_lmc("input a\\nprint a + 1\\n"))

Compile and run:
    >>> from lmc_sdk import LMCCompiler, LittleManComputer
    >>> result = LMCCompiler().compile_source("input a\\nprint a + 1\\n")
    >>> LittleManComputer(result.mailboxes).run(inputs=[41])
    [42]

Or use the command-line tools:
    $ lmcc countdown.lmc -o countdown.asm
    $ lmcasm countdown.asm -o countdown.mem
    $ lmcrun countdown.lmc -i 3
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from lmc_sdk.errors import (
    LMCError,
    SourceLocation,
    AssemblerError,
    AssemblySyntaxError,
    UndefinedSymbolError,
    DuplicateSymbolError,
    ProgramTooLargeError,
    EmulatorError,
    InputExhaustedError,
    InvalidInputError,
    InvalidInstructionError,
    StepLimitExceededError,
)
from lmc_sdk.compiler import (
    LMCCompiler,
    CompilerOptions,
    CompilerResult,
    CompilerError,
    CompilationError,
    compile_lmc,
    compile_file,
)
from lmc_sdk.assembler import (
    Assembler,
    assemble,
    format_assembly,
    format_listing,
    to_mailboxes,
)
from lmc_sdk.emulator import LittleManComputer, MachineState, run_program

__all__ = [
    "__version__",
    # Errors
    "LMCError",
    "SourceLocation",
    "AssemblerError",
    "AssemblySyntaxError",
    "UndefinedSymbolError",
    "DuplicateSymbolError",
    "ProgramTooLargeError",
    "EmulatorError",
    "InputExhaustedError",
    "InvalidInputError",
    "InvalidInstructionError",
    "StepLimitExceededError",
    "CompilerError",
    "CompilationError",
    # Compiler
    "LMCCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_lmc",
    "compile_file",
    # Assembler
    "Assembler",
    "assemble",
    "format_assembly",
    "format_listing",
    "to_mailboxes",
    # Emulator
    "LittleManComputer",
    "MachineState",
    "run_program",
]
