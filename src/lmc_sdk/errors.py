"""
LMC SDK Error Hierarchy
=======================

This module defines the exception hierarchy for the entire LMC SDK.
All exceptions inherit from LMCError, allowing callers to catch all
SDK-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
LMCError (base)
├── AssemblerError (assembler-related)
│   ├── AssemblySyntaxError - syntax errors in assembly source
│   ├── UndefinedSymbolError - reference to undefined label
│   ├── DuplicateSymbolError - label defined multiple times
│   └── ProgramTooLargeError - program does not fit in 100 mailboxes
├── CompilerError (see lmc_sdk.compiler.errors)
└── EmulatorError (program execution)
    ├── InputExhaustedError - INP executed with no input left
    ├── InvalidInputError - input value outside 0-999
    ├── InvalidInstructionError - undecodable instruction word
    └── StepLimitExceededError - program did not halt in time

Design Philosophy
-----------------
Each source-level exception captures location information (filename,
line, column) when applicable. Error messages follow this format:

    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class LMCError(Exception):
    """
    Base exception for all LMC SDK errors.

    All exceptions in the SDK inherit from this class, allowing callers
    to catch all SDK-related errors with a single except clause:

        try:
            compile_lmc(source)
        except LMCError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


def format_diagnostic(
    message: str,
    location: Optional[SourceLocation] = None,
    hint: Optional[str] = None,
    source_line: Optional[str] = None,
) -> str:
    """
    Format a diagnostic with location, source context, and hint.

    Example output:
        countdown.lmc:3:5: error: undefined symbol 'lop'
            BRA lop
                ^
        hint: did you mean 'loop'?
    """
    parts = []

    if location:
        parts.append(f"{location}: error: {message}")
    else:
        parts.append(f"error: {message}")

    # Source context with caret pointer
    if source_line is not None and location is not None:
        parts.append(f"    {source_line}")
        if location.column > 0:
            padding = " " * (4 + location.column - 1)
            parts.append(f"{padding}^")

    if hint:
        parts.append(f"hint: {hint}")

    return "\n".join(parts)


def find_similar_names(name: str, candidates) -> list[str]:
    """
    Find names close to `name` for "did you mean" hints.

    A candidate is similar when it differs only in case, or its length is
    within one character and the edit distance is at most 2.
    """
    name_lower = name.lower()
    similar = []

    for candidate in candidates:
        candidate_lower = candidate.lower()
        if candidate == name:
            continue
        if (
            candidate_lower == name_lower or
            abs(len(candidate) - len(name)) <= 1 and
            _edit_distance(name_lower, candidate_lower) <= 2
        ):
            similar.append(candidate)

    return similar[:3]


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    distances = range(len(s2) + 1)
    for i, c1 in enumerate(s1):
        new_distances = [i + 1]
        for j, c2 in enumerate(s2):
            if c1 == c2:
                new_distances.append(distances[j])
            else:
                new_distances.append(1 + min((
                    distances[j],
                    distances[j + 1],
                    new_distances[-1]
                )))
        distances = new_distances

    return distances[-1]


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(LMCError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(format_diagnostic(message, location, hint, source_line))


class AssemblySyntaxError(AssemblerError):
    """
    Syntax error in assembly source code.

    Examples:
        - Unknown mnemonic
        - Missing operand for LDA/STA/ADD/SUB/BRA/BRZ/BRP
        - Operand given to INP/OUT/HLT
        - DAT value outside 0-999
    """
    pass


class UndefinedSymbolError(AssemblerError):
    """
    Reference to an undefined label.

    Raised during the second pass of assembly when an operand names a
    label that is never defined. Similar label names are suggested.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        hint = None
        if self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DuplicateSymbolError(AssemblerError):
    """Label defined more than once."""

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{symbol}' was first defined at {original_location}"

        super().__init__(
            f"duplicate symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class ProgramTooLargeError(AssemblerError):
    """
    Assembled program does not fit in the machine's mailboxes.

    The LMC has exactly 100 mailboxes shared by code and data.
    """

    def __init__(self, size: int, capacity: int, location: Optional[SourceLocation] = None):
        self.size = size
        self.capacity = capacity
        super().__init__(
            f"program needs {size} mailboxes but the machine has {capacity}",
            location=location,
            hint=f"remove at least {size - capacity} instructions or data cells",
        )


# =============================================================================
# Emulator Exceptions
# =============================================================================

class EmulatorError(LMCError):
    """
    Base exception for errors raised while executing a program.

    Attributes:
        pc: Program counter at the time of the error (if known)
    """

    def __init__(self, message: str, pc: Optional[int] = None):
        self.pc = pc
        if pc is not None:
            message = f"{message} (pc={pc:02d})"
        super().__init__(message)


class InputExhaustedError(EmulatorError):
    """INP executed but no input value is available."""

    def __init__(self, pc: Optional[int] = None):
        super().__init__("program requested input but none is left", pc)


class InvalidInputError(EmulatorError):
    """Input value outside the range a mailbox can hold."""

    def __init__(self, value: int, pc: Optional[int] = None):
        self.value = value
        super().__init__(f"input value {value} is outside the range 0-999", pc)


class InvalidInstructionError(EmulatorError):
    """Instruction word that does not decode to an LMC operation."""

    def __init__(self, word: int, pc: Optional[int] = None):
        self.word = word
        super().__init__(f"invalid instruction {word:03d}", pc)


class StepLimitExceededError(EmulatorError):
    """
    Program did not halt within the allowed number of steps.

    Attributes:
        outputs: Values output before the limit was hit
    """

    def __init__(self, max_steps: int, outputs: Optional[list[int]] = None, pc: Optional[int] = None):
        self.max_steps = max_steps
        self.outputs = list(outputs or [])
        super().__init__(f"program did not halt within {max_steps} steps", pc)
