"""
LMC Code Generator
==================

This module lowers the pseudocode AST into a flat, label-resolved list
of LMC instructions.

Code Generation Strategy
------------------------
The LMC has one accumulator, no stack, no immediate operands and only
two conditional branches (BRZ on zero, BRP on a clear negative flag).
Everything is built from those:

1. Expressions leave their value in the accumulator
2. Literals are loaded from deduplicated constant cells
3. When the right operand of + or - is not a single cell, it is
   evaluated first and parked in a temporary
4. Comparisons compute left - right and branch on zero/negative
5. Control flow is lowered to labeled jumps, resolved in a second pass

Numeric Model
-------------
Mailboxes hold 0-999. ADD wraps modulo 1000 and clears the negative
flag. SUB stores (acc - mem) mod 1000 and sets the flag iff the exact
difference is negative. With both operands in 0-999, the wrapped
difference is zero iff they are equal and the flag is set iff
left < right, so every comparison below is exact.

Comparison Lowering
-------------------
The accumulator holds left - right. Branches are tried in order; the
last one is always an unconditional BRA:

| OP  | 1st          | 2nd          | last       |
|-----|--------------|--------------|------------|
| ==  | BRZ true     |              | BRA false  |
| !=  | BRZ false    |              | BRA true   |
| >=  | BRP true     |              | BRA false  |
| <   | BRP false    |              | BRA true   |
| >   | BRZ false    | BRP true     | BRA false  |
| <=  | BRZ true     | BRP false    | BRA true   |

Control Flow
------------
if/else if/else:

        <cond 1 -> then_a / else_b>
    then_a:
        <body 1>
        BRA endif_c
    else_b:
        <cond 2 -> then_d / else_e>
    then_d:
        <body 2>
        BRA endif_c
    else_e:
        <else body>
    endif_c:

while:

    while_a:
        <cond -> do_b / endwhile_c>     (omitted for 'while true')
    do_b:
        <body, 'break' is BRA endwhile_c>
        BRA while_a
    endwhile_c:

Program Layout
--------------
    00      first instruction
    ...     code
    n       HLT
    n+1...  DAT cells: variables, temporaries, constants

Usage
-----
>>> from lmc_sdk.compiler.parser import parse_source
>>> from lmc_sdk.compiler.codegen import CodeGenerator
>>> program = parse_source("input a\\nprint a + 1\\n")
>>> for instr in CodeGenerator().generate(program):
...     print(instr)
00: INP
01: STA 06
02: LDA 06
03: ADD 07
04: OUT
05: HLT
06: DAT 0
07: DAT 1
"""

import logging
from typing import Optional

from lmc_sdk.errors import SourceLocation
from lmc_sdk.compiler.ast import (
    ASTNode,
    ProgramNode,
    Statement,
    Expression,
    AssignmentStatement,
    InputStatement,
    OutputStatement,
    IfStatement,
    WhileStatement,
    BreakStatement,
    BinaryExpression,
    BinaryOperator,
    IdentifierExpression,
    NumberLiteral,
    is_leaf,
)
from lmc_sdk.compiler.errors import (
    AddressSpaceExhaustedError,
    CompilerError,
    InternalCompilerError,
    InvalidBreakError,
    InvalidExpressionError,
)
from lmc_sdk.compiler.instructions import Instruction, Label, Opcode, ResolvedInstruction
from lmc_sdk.compiler.labels import LabelAllocator
from lmc_sdk.compiler.optimizer import BranchOptimizer, OptimizationStats
from lmc_sdk.compiler.symbols import Symbol, SymbolTable, TemporaryPool

logger = logging.getLogger(__name__)


# Number of mailboxes in a Little Man Computer
MAILBOX_COUNT = 100

# Branch sequence per comparison: (opcode, True -> true label, False -> false label)
COMPARISON_BRANCHES: dict[BinaryOperator, tuple[tuple[Opcode, bool], ...]] = {
    BinaryOperator.EQUAL: ((Opcode.BRZ, True), (Opcode.BRA, False)),
    BinaryOperator.NOT_EQUAL: ((Opcode.BRZ, False), (Opcode.BRA, True)),
    BinaryOperator.GREATER_EQ: ((Opcode.BRP, True), (Opcode.BRA, False)),
    BinaryOperator.LESS: ((Opcode.BRP, False), (Opcode.BRA, True)),
    BinaryOperator.GREATER: ((Opcode.BRZ, False), (Opcode.BRP, True), (Opcode.BRA, False)),
    BinaryOperator.LESS_EQ: ((Opcode.BRZ, True), (Opcode.BRP, False), (Opcode.BRA, True)),
}


# =============================================================================
# Loop Context
# =============================================================================

class LoopContext:
    """
    Stack of break targets for the loops enclosing the current statement.

    Passed explicitly through statement lowering; each while loop pushes
    its exit label for the duration of its body.
    """

    def __init__(self):
        self._exits: list[Label] = []

    @property
    def depth(self) -> int:
        return len(self._exits)

    @property
    def innermost_exit(self) -> Optional[Label]:
        return self._exits[-1] if self._exits else None

    def push(self, exit_label: Label) -> None:
        self._exits.append(exit_label)

    def pop(self) -> Label:
        if not self._exits:
            raise InternalCompilerError("loop context popped while empty")
        return self._exits.pop()


# =============================================================================
# Code Generator Class
# =============================================================================

class CodeGenerator:
    """
    Generates LMC instructions from a pseudocode AST.

    Each call to generate() starts from fresh state, so one generator can
    compile several programs and the same AST always produces the same
    instructions.

    Attributes:
        optimize: Remove branches to the next instruction and dead code
        fold_initializers: Turn a top-level first 'x = <literal>' into the
            initial value of x's DAT cell instead of LDA/STA
        capacity: Number of mailboxes available
        emit_comments: Annotate instructions with the source line they
            came from
        stats: Optimizer statistics from the last generate() call
    """

    def __init__(
        self,
        optimize: bool = True,
        fold_initializers: bool = False,
        capacity: int = MAILBOX_COUNT,
        emit_comments: bool = False,
        source_lines: Optional[list[str]] = None,
    ):
        if not 1 <= capacity <= MAILBOX_COUNT:
            raise CompilerError(
                f"capacity must be between 1 and {MAILBOX_COUNT} mailboxes, got {capacity}",
                hint="LMC addresses are two decimal digits (00-99)",
            )
        self.optimize = optimize
        self.fold_initializers = fold_initializers
        self.capacity = capacity
        self.emit_comments = emit_comments
        self.source_lines = source_lines or []
        self.stats = OptimizationStats()
        self._reset()

    def _reset(self) -> None:
        self._instructions: list[Instruction] = []
        self._labels = LabelAllocator()
        self._symbols = SymbolTable(self._labels)
        self._temps = TemporaryPool(self._symbols)
        self._pending_comment: Optional[str] = None

    @property
    def symbols(self) -> SymbolTable:
        """Symbol table of the last generated program."""
        return self._symbols

    def generate(self, program: ProgramNode) -> list[ResolvedInstruction]:
        """
        Generate the resolved instruction list for a program.

        Raises:
            UndeclaredIdentifierError: Variable read before definition
            InvalidBreakError: 'break' outside a loop
            InvalidExpressionError: Comparison used as a value or vice versa
            AddressSpaceExhaustedError: Program does not fit in memory
            InternalCompilerError: Unknown node kind or unresolved label
        """
        if not isinstance(program, ProgramNode):
            raise self._unknown_node(program)

        self._reset()
        loops = LoopContext()

        for stmt in program.statements:
            self._generate_statement(stmt, loops, top_level=True)

        optimizer = BranchOptimizer(self._labels, enabled=self.optimize)
        self._instructions = optimizer.optimize(self._instructions)
        self.stats = optimizer.stats

        self._pending_comment = None
        self._emit(Opcode.HLT)
        code_size = len(self._instructions)

        for symbol in self._symbols.data_symbols():
            self._labels.define(symbol.label, len(self._instructions))
            self._emit(Opcode.DAT, symbol.initial_value)

        required = len(self._instructions)
        if required > self.capacity:
            raise AddressSpaceExhaustedError(required, self.capacity)

        resolved = self._labels.resolve(self._instructions)
        logger.info(
            "Generated %d instructions and %d data cells (%d of %d mailboxes)",
            code_size, required - code_size, required, self.capacity,
        )
        return resolved

    # =========================================================================
    # Emission Helpers
    # =========================================================================

    def _emit(self, opcode: Opcode, operand=None) -> None:
        if isinstance(operand, Symbol):
            operand = operand.label
        self._instructions.append(Instruction(opcode, operand, self._pending_comment))
        self._pending_comment = None

    def _new_label(self, prefix: str) -> Label:
        return self._labels.new_label(prefix)

    def _define(self, label: Label) -> None:
        self._labels.define(label, len(self._instructions))

    def _get_source_line(self, location: Optional[SourceLocation]) -> Optional[str]:
        if location is None:
            return None
        if 0 < location.line <= len(self.source_lines):
            return self.source_lines[location.line - 1]
        return None

    def _unknown_node(self, node) -> InternalCompilerError:
        return InternalCompilerError(
            f"unknown AST node kind '{type(node).__name__}'",
            location=node.location if isinstance(node, ASTNode) else None,
        )

    # =========================================================================
    # Statement Generation
    # =========================================================================

    def _generate_block(self, statements: list[Statement], loops: LoopContext) -> None:
        for stmt in statements:
            self._generate_statement(stmt, loops, top_level=False)

    def _generate_statement(self, stmt: Statement, loops: LoopContext, top_level: bool) -> None:
        if self.emit_comments:
            source = self._get_source_line(getattr(stmt, "location", None))
            self._pending_comment = source.strip() if source else None

        if isinstance(stmt, AssignmentStatement):
            self._generate_assignment(stmt, top_level)
        elif isinstance(stmt, InputStatement):
            symbol = self._symbols.resolve(stmt.target, stmt.location)
            self._emit(Opcode.INP)
            self._emit(Opcode.STA, symbol)
        elif isinstance(stmt, OutputStatement):
            self._generate_value(stmt.value)
            self._emit(Opcode.OUT)
        elif isinstance(stmt, IfStatement):
            self._generate_if(stmt, loops)
        elif isinstance(stmt, WhileStatement):
            self._generate_while(stmt, loops)
        elif isinstance(stmt, BreakStatement):
            self._generate_break(stmt, loops)
        else:
            raise self._unknown_node(stmt)

    def _generate_assignment(self, stmt: AssignmentStatement, top_level: bool) -> None:
        if (
            self.fold_initializers and
            top_level and
            isinstance(stmt.value, NumberLiteral) and
            self._symbols.lookup(stmt.target) is None
        ):
            symbol = self._symbols.resolve(stmt.target, stmt.location)
            symbol.initial_value = stmt.value.value
            self._pending_comment = None
            logger.debug("Folded initializer %s = %d", stmt.target, stmt.value.value)
            return

        # The value is compiled first so 'x = x + 1' cannot define x
        self._generate_value(stmt.value)
        symbol = self._symbols.resolve(stmt.target, stmt.location)
        self._emit(Opcode.STA, symbol)

    def _generate_if(self, stmt: IfStatement, loops: LoopContext) -> None:
        end_label = self._new_label("endif")
        branches = [(stmt.condition, stmt.body)]
        branches.extend((clause.condition, clause.body) for clause in stmt.else_ifs)

        for condition, body in branches:
            then_label = self._new_label("then")
            next_label = self._new_label("else")

            self._generate_condition(condition, then_label, next_label)
            self._define(then_label)
            self._generate_block(body, loops)
            self._emit(Opcode.BRA, end_label)
            self._define(next_label)

        if stmt.else_body is not None:
            self._generate_block(stmt.else_body, loops)

        self._define(end_label)

    def _generate_while(self, stmt: WhileStatement, loops: LoopContext) -> None:
        start_label = self._new_label("while")
        end_label = self._new_label("endwhile")

        self._define(start_label)
        if not stmt.is_infinite:
            body_label = self._new_label("do")
            self._generate_condition(stmt.condition, body_label, end_label)
            self._define(body_label)

        loops.push(end_label)
        try:
            self._generate_block(stmt.body, loops)
        finally:
            loops.pop()

        self._emit(Opcode.BRA, start_label)
        self._define(end_label)

    def _generate_break(self, stmt: BreakStatement, loops: LoopContext) -> None:
        exit_label = loops.innermost_exit
        if exit_label is None:
            raise InvalidBreakError(
                location=stmt.location,
                source_line=self._get_source_line(stmt.location),
            )
        self._emit(Opcode.BRA, exit_label)

    # =========================================================================
    # Expression Generation
    # =========================================================================

    def _generate_value(self, expr: Expression) -> None:
        """Leave the value of an arithmetic expression in the accumulator."""
        if isinstance(expr, (NumberLiteral, IdentifierExpression)):
            self._emit(Opcode.LDA, self._cell_of(expr))
        elif isinstance(expr, BinaryExpression):
            if expr.operator.is_comparison:
                raise InvalidExpressionError(
                    f"comparison '{expr.operator.symbol}' cannot be used as a value",
                    location=expr.location,
                    hint="comparisons are only allowed in 'if' and 'while' conditions",
                    source_line=self._get_source_line(expr.location),
                )
            self._generate_arithmetic(expr.operator, expr.left, expr.right)
        else:
            raise self._unknown_node(expr)

    def _generate_arithmetic(
        self,
        operator: BinaryOperator,
        left: Expression,
        right: Expression,
    ) -> None:
        """
        Leave left + right or left - right in the accumulator.

        SUB computes accumulator - memory, so the left operand is always
        the one in the accumulator when the operation executes.
        """
        opcode = Opcode.ADD if operator == BinaryOperator.ADD else Opcode.SUB

        if is_leaf(right):
            self._generate_value(left)
            self._emit(opcode, self._cell_of(right))
            return

        self._generate_value(right)
        temp = self._temps.acquire()
        self._emit(Opcode.STA, temp)
        self._generate_value(left)
        self._emit(opcode, temp)
        self._temps.release(temp)

    def _cell_of(self, expr: Expression) -> Symbol:
        if isinstance(expr, NumberLiteral):
            return self._symbols.constant(expr.value)
        if isinstance(expr, IdentifierExpression):
            return self._symbols.reference(
                expr.name,
                expr.location,
                self._get_source_line(expr.location),
            )
        raise self._unknown_node(expr)

    def _generate_condition(self, cond: Expression, true_label: Label, false_label: Label) -> None:
        """Branch to true_label or false_label depending on a comparison."""
        if not isinstance(cond, BinaryExpression) or not cond.operator.is_comparison:
            if not isinstance(cond, (BinaryExpression, NumberLiteral, IdentifierExpression)):
                raise self._unknown_node(cond)
            raise InvalidExpressionError(
                "condition must be a comparison",
                location=cond.location,
                hint="use one of == != < > <= >=",
                source_line=self._get_source_line(cond.location),
            )

        self._generate_arithmetic(BinaryOperator.SUBTRACT, cond.left, cond.right)

        for opcode, on_true in COMPARISON_BRANCHES[cond.operator]:
            self._emit(opcode, true_label if on_true else false_label)


# =============================================================================
# Convenience Functions
# =============================================================================

def generate_code(program: ProgramNode, **options) -> list[ResolvedInstruction]:
    """Generate resolved instructions for a program (convenience wrapper)."""
    return CodeGenerator(**options).generate(program)
