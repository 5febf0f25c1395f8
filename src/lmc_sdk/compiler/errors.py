"""
LMC Compiler Error Hierarchy
============================

This module defines the exception hierarchy for the pseudocode compiler.
All exceptions inherit from CompilerError, which itself inherits from
the base LMCError for consistent error handling across the SDK.

Exception Hierarchy
-------------------
CompilerError (base for all compiler errors)
├── CompilationError - aggregate report of several errors
├── LMCSyntaxError - lexer and parser syntax errors
│   ├── InvalidCharacterError - unexpected character
│   ├── NumberRangeError - literal outside 0-999
│   ├── UnexpectedTokenError - token does not fit the grammar
│   └── MissingTokenError - required token absent
├── SemanticError - well-formed source that breaks language rules
│   ├── UndeclaredIdentifierError - variable read before it is defined
│   ├── InvalidBreakError - 'break' outside any loop
│   └── InvalidExpressionError - comparison used as value or vice versa
├── AddressSpaceExhaustedError - program does not fit in 100 mailboxes
└── InternalCompilerError - compiler defect (unresolved label, unknown node)

Error Message Format
--------------------
    countdown.lmc:4:11: error: undeclared identifier 'cuont'
        print cuont
              ^
    hint: did you mean 'count'?
"""

from typing import Optional, List

from lmc_sdk.errors import LMCError, SourceLocation, format_diagnostic


# =============================================================================
# Base Compiler Exception
# =============================================================================

class CompilerError(LMCError):
    """
    Base exception for all compiler errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The actual source text at the error location
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
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with location, source context, and hint."""
        return format_diagnostic(self.message, self.location, self.hint, self.source_line)


class CompilationError(CompilerError):
    """
    Aggregate compilation error containing multiple errors.

    The message is already a formatted report from ErrorCollector and
    is passed through without another prefix.
    """

    def __init__(self, message: str, errors: Optional[List[CompilerError]] = None):
        self.errors = list(errors or [])
        super().__init__(message)

    def _format_message(self) -> str:
        """Return message as-is - it's already a formatted aggregate report."""
        return self.message


# =============================================================================
# Syntax Errors (Lexer and Parser)
# =============================================================================

class LMCSyntaxError(CompilerError):
    """
    Syntax error in pseudocode source.

    Raised when the lexer or parser encounters input that cannot be
    tokenized or parsed according to the language grammar.
    """
    pass


class InvalidCharacterError(LMCSyntaxError):
    """Character that cannot start any token."""

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (0x{ord(char):02X})",
            location=location,
            source_line=source_line,
        )


class NumberRangeError(LMCSyntaxError):
    """Numeric literal that a mailbox cannot hold."""

    def __init__(
        self,
        value: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.value = value
        super().__init__(
            f"number {value} is outside the range of LMC values",
            location=location,
            hint="mailboxes hold integers from 0 to 999",
            source_line=source_line,
        )


class UnexpectedTokenError(LMCSyntaxError):
    """Token that does not match the expected grammar rule."""

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected token '{found}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(LMCSyntaxError):
    """Required token (like 'endif' or a comparison operator) is missing."""

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"expected {expected}",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Semantic Errors
# =============================================================================

class SemanticError(CompilerError):
    """
    Semantic error in pseudocode source.

    Raised during code generation when the program is syntactically
    correct but violates language rules.
    """
    pass


class UndeclaredIdentifierError(SemanticError):
    """
    Variable read before any assignment or input defines it.

    Similar names already defined are offered as suggestions.
    """

    def __init__(
        self,
        identifier: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_identifiers: Optional[List[str]] = None,
    ):
        self.identifier = identifier
        self.similar_identifiers = similar_identifiers or []

        hint = None
        if self.similar_identifiers:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_identifiers[:3])
            hint = f"did you mean {suggestions}?"
        else:
            hint = f"assign '{identifier}' or read it with 'input' first"

        super().__init__(
            f"undeclared identifier '{identifier}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class InvalidBreakError(SemanticError):
    """'break' used outside of a while loop."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "'break' statement not within a loop",
            location=location,
            source_line=source_line,
        )


class InvalidExpressionError(SemanticError):
    """
    Expression of the wrong kind for its position.

    Examples:
        - a comparison where an arithmetic value is required (x = a > b)
        - an arithmetic value where a condition is required (if a + b)
    """
    pass


# =============================================================================
# Resource and Internal Errors
# =============================================================================

class AddressSpaceExhaustedError(CompilerError):
    """
    Program needs more mailboxes than the machine provides.

    Code, variables, temporaries and constants share one address space.

    Attributes:
        required: Number of mailboxes the program needs
        capacity: Number of mailboxes available
    """

    def __init__(self, required: int, capacity: int):
        self.required = required
        self.capacity = capacity
        self.overflow = required - capacity
        super().__init__(
            f"program needs {required} mailboxes but the machine has {capacity} "
            f"({self.overflow} over)",
            hint="simplify expressions or reuse variables to free mailboxes",
        )


class InternalCompilerError(CompilerError):
    """
    Compiler defect.

    Raised for conditions a well-formed AST can never produce, such as
    an unresolved label at resolution time or an unknown node kind.
    """

    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        super().__init__(
            f"internal compiler error: {message}",
            location=location,
        )


# =============================================================================
# Error Collection (for multi-error reporting)
# =============================================================================

class ErrorCollector:
    """
    Collects multiple errors for batch reporting.

    The parser uses this to keep going after a bad line, so the user sees
    every syntax error in one run.

    Example:
        collector = ErrorCollector(max_errors=100)

        for line in lines:
            try:
                parse_line(line)
            except LMCSyntaxError as e:
                collector.add(e)
                if collector.should_stop():
                    break

        collector.raise_if_errors()
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the error collector.

        Args:
            max_errors: Maximum errors to collect before stopping
        """
        self.errors: List[CompilerError] = []
        self.warnings: List[str] = []
        self.max_errors = max_errors

    def add(self, error: CompilerError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def add_warning(self, message: str, location: Optional[SourceLocation] = None) -> None:
        """Add a warning message."""
        if location:
            self.warnings.append(f"{location}: warning: {message}")
        else:
            self.warnings.append(f"warning: {message}")

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def should_stop(self) -> bool:
        """Return True if max_errors has been reached."""
        return len(self.errors) >= self.max_errors

    def report(self) -> str:
        """Format all errors and warnings for display."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        for warning in self.warnings:
            lines.append(warning)

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors and warnings."""
        self.errors.clear()
        self.warnings.clear()

    def raise_if_errors(self) -> None:
        """Raise a CompilationError if any errors were collected."""
        if self.has_errors():
            raise CompilationError(self.report(), self.errors)
