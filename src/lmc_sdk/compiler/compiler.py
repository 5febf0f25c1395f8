"""
LMC Compiler Main Module
========================

This module provides the main compiler interface. It orchestrates the
complete compilation process:

    Source → Lex → Parse → Generate → Resolve → Assembly

Usage
-----
Command line:
    $ lmcc countdown.lmc -o countdown.asm

Programmatic:
    >>> from lmc_sdk.compiler import compile_lmc
    >>> print(compile_lmc("input a\\nprint a\\n"))

Compilation Pipeline
--------------------
1. **Lexical Analysis**: Convert source to tokens
2. **Parsing**: Build the Abstract Syntax Tree, collecting every syntax error
3. **Code Generation**: Lower the AST to symbolic LMC instructions
4. **Resolution**: Assign addresses to all labels and data cells

Error Handling
--------------
Syntax errors are collected and reported together as one
CompilationError. Semantic errors (undeclared variable, misplaced
'break', program too large) stop compilation at the first one. There is
never partial output.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from lmc_sdk.compiler.ast import ProgramNode
from lmc_sdk.compiler.codegen import CodeGenerator, MAILBOX_COUNT
from lmc_sdk.compiler.errors import ErrorCollector
from lmc_sdk.compiler.instructions import ResolvedInstruction
from lmc_sdk.compiler.lexer import Lexer, Token
from lmc_sdk.compiler.optimizer import OptimizationStats
from lmc_sdk.compiler.parser import LMCParser
from lmc_sdk.assembler.formatter import format_assembly, format_listing, to_mailboxes

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        optimize: Remove branches to the next instruction and unreachable
            code
        fold_initializers: Compile a top-level first assignment of a
            literal ('x = 5') as the initial value of x's DAT cell
        capacity: Number of mailboxes in the target machine (1-100)
        emit_comments: Annotate the assembly with the source line of each
            statement
    """
    optimize: bool = True
    fold_initializers: bool = False
    capacity: int = MAILBOX_COUNT
    emit_comments: bool = False


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        success: True if compilation succeeded
        instructions: Resolved instructions, one per mailbox used
        ast: Abstract syntax tree (if parsing succeeded)
        token_count: Number of tokens lexed
        stats: Optimizer statistics
        warnings: Warning messages
    """
    filename: str = ""
    success: bool = False
    instructions: list[ResolvedInstruction] = field(default_factory=list)
    ast: Optional[ProgramNode] = None
    token_count: int = 0
    stats: OptimizationStats = field(default_factory=OptimizationStats)
    warnings: list = field(default_factory=list)

    @property
    def assembly(self) -> str:
        """The program as LMC assembly text."""
        return format_assembly(self.instructions)

    @property
    def listing(self) -> str:
        """Address/machine-code listing with symbol table."""
        return format_listing(self.instructions, title=self.filename)

    @property
    def mailboxes(self) -> list[int]:
        """The 100-word memory image."""
        return to_mailboxes(self.instructions)

    @property
    def size(self) -> int:
        """Number of mailboxes used by code and data."""
        return len(self.instructions)


class LMCCompiler:
    """
    Compiler from LMC pseudocode to LMC assembly.

    Example:
        compiler = LMCCompiler()
        result = compiler.compile_file("countdown.lmc")
        print(result.assembly)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()
        self._errors = ErrorCollector()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile pseudocode source.

        Returns:
            CompilerResult containing the resolved program

        Raises:
            CompilationError: If the source has syntax errors
            CompilerError: On the first semantic or capacity error
        """
        self._errors.clear()
        result = CompilerResult(filename=filename)
        source_lines = source.splitlines()

        logger.debug("Compiling %s", filename)
        tokens = self._lex(source, filename)
        result.token_count = len(tokens)

        ast = self._parse(tokens, filename, source_lines)
        result.ast = ast

        generator = CodeGenerator(
            optimize=self.options.optimize,
            fold_initializers=self.options.fold_initializers,
            capacity=self.options.capacity,
            emit_comments=self.options.emit_comments,
            source_lines=source_lines,
        )
        result.instructions = generator.generate(ast)
        result.stats = generator.stats
        self._check_unused(generator)
        result.success = True

        result.warnings = list(self._errors.warnings)
        for warning in result.warnings:
            logger.warning(warning)

        logger.info("Compiled %s: %d mailboxes", filename, result.size)
        return result

    def compile_file(self, filepath: str | Path) -> CompilerResult:
        """
        Compile a pseudocode source file.

        Raises:
            CompilerError: If compilation fails
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath))

    def _lex(self, source: str, filename: str) -> list[Token]:
        return list(Lexer(source, filename).tokenize())

    def _parse(self, tokens: list[Token], filename: str, source_lines: list[str]) -> ProgramNode:
        return LMCParser(tokens, filename, source_lines).parse()

    def _check_unused(self, generator: CodeGenerator) -> None:
        """Warn about variables that are written but never read."""
        for symbol in generator.symbols.variables:
            if symbol.reads == 0:
                self._errors.add_warning(
                    f"variable '{symbol.name}' is assigned but never read",
                    symbol.location,
                )


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_lmc(
    source: str,
    filename: str = "<input>",
    options: Optional[CompilerOptions] = None,
) -> str:
    """
    Compile pseudocode to LMC assembly text.

    This is the primary high-level interface.

    Example:
        >>> asm = compile_lmc('''
        ... input a
        ... while a > 0
        ...     a = a - 1
        ...     print a
        ... endwhile
        ... ''')
    """
    return LMCCompiler(options).compile_source(source, filename).assembly


def compile_to_instructions(
    source: str,
    filename: str = "<input>",
    options: Optional[CompilerOptions] = None,
) -> list[ResolvedInstruction]:
    """Compile pseudocode to the resolved instruction list."""
    return LMCCompiler(options).compile_source(source, filename).instructions


def compile_file(
    filepath: str | Path,
    output_path: Optional[str | Path] = None,
    options: Optional[CompilerOptions] = None,
) -> str:
    """
    Compile a pseudocode file to LMC assembly.

    Args:
        filepath: Path to the source file
        output_path: Optional path to write the assembly to
        options: Compiler configuration

    Returns:
        The assembly text
    """
    result = LMCCompiler(options).compile_file(filepath)

    if output_path:
        Path(output_path).write_text(result.assembly, encoding="utf-8")

    return result.assembly
