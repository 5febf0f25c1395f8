"""
LMC Pseudocode Compiler
=======================

Compiles a small imperative pseudocode language to assembly for the
Little Man Computer.

Pipeline
--------
    Source → Lexer → Parser → AST → Code Generator → Label Resolution → Assembly

The resolved instructions can be rendered as assembly text, assembled
into a memory image, or run directly on the emulator.

Usage
-----
>>> from lmc_sdk.compiler import compile_lmc
>>> source = '''
... input a
... input b
... if a == b
...     print 1
... else
...     print 0
... endif
... '''
>>> print(compile_lmc(source))

Language
--------
- Variables: created by assignment or 'input'; values 0-999
- Arithmetic: + and - with parentheses
- Comparisons: == != < > <= >= (in 'if' and 'while' only)
- Control flow: if / else if / else / endif, while / endwhile, break,
  'while true' for unconditional loops
- I/O: input x, output expr (or print expr)
- Comments: // to end of line

Not supported: procedures, arrays, multiplication/division, for-loops.
"""

from lmc_sdk.compiler.compiler import (
    LMCCompiler,
    CompilerOptions,
    CompilerResult,
    compile_lmc,
    compile_file,
    compile_to_instructions,
)
from lmc_sdk.compiler.errors import (
    CompilerError,
    CompilationError,
    LMCSyntaxError,
    InvalidCharacterError,
    NumberRangeError,
    UnexpectedTokenError,
    MissingTokenError,
    SemanticError,
    UndeclaredIdentifierError,
    InvalidBreakError,
    InvalidExpressionError,
    AddressSpaceExhaustedError,
    InternalCompilerError,
)
from lmc_sdk.compiler.lexer import Lexer, Token, TokenType
from lmc_sdk.compiler.parser import LMCParser, parse_source
from lmc_sdk.compiler.codegen import CodeGenerator, LoopContext, COMPARISON_BRANCHES
from lmc_sdk.compiler.instructions import Instruction, Label, Opcode, ResolvedInstruction
from lmc_sdk.compiler.labels import LabelAllocator
from lmc_sdk.compiler.symbols import Symbol, SymbolKind, SymbolTable, TemporaryPool
from lmc_sdk.compiler.ast import (
    ASTNode,
    ASTPrinter,
    ProgramNode,
    AssignmentStatement,
    InputStatement,
    OutputStatement,
    IfStatement,
    ElseIfClause,
    WhileStatement,
    BreakStatement,
    BinaryExpression,
    BinaryOperator,
    IdentifierExpression,
    NumberLiteral,
)

__all__ = [
    # Compiler
    "LMCCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_lmc",
    "compile_file",
    "compile_to_instructions",
    # Errors
    "CompilerError",
    "CompilationError",
    "LMCSyntaxError",
    "InvalidCharacterError",
    "NumberRangeError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "SemanticError",
    "UndeclaredIdentifierError",
    "InvalidBreakError",
    "InvalidExpressionError",
    "AddressSpaceExhaustedError",
    "InternalCompilerError",
    # Front end
    "Lexer",
    "Token",
    "TokenType",
    "LMCParser",
    "parse_source",
    # Back end
    "CodeGenerator",
    "LoopContext",
    "COMPARISON_BRANCHES",
    "Instruction",
    "Label",
    "Opcode",
    "ResolvedInstruction",
    "LabelAllocator",
    "Symbol",
    "SymbolKind",
    "SymbolTable",
    "TemporaryPool",
    # AST
    "ASTNode",
    "ASTPrinter",
    "ProgramNode",
    "AssignmentStatement",
    "InputStatement",
    "OutputStatement",
    "IfStatement",
    "ElseIfClause",
    "WhileStatement",
    "BreakStatement",
    "BinaryExpression",
    "BinaryOperator",
    "IdentifierExpression",
    "NumberLiteral",
]
