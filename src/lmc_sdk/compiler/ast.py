"""
Pseudocode Abstract Syntax Tree (AST) Definitions
=================================================

This module defines the AST node types produced by the parser and
consumed by the code generator.

Node Hierarchy
--------------
ASTNode (base)
├── ProgramNode - root node containing all top-level statements
├── Statements
│   ├── AssignmentStatement - x = expr
│   ├── InputStatement - input x
│   ├── OutputStatement - output expr / print expr
│   ├── IfStatement - if / else if / else / endif
│   ├── ElseIfClause - one 'else if' branch of an IfStatement
│   ├── WhileStatement - while / endwhile (condition None means 'true')
│   └── BreakStatement - break
└── Expressions
    ├── BinaryExpression - arithmetic (+ -) and comparison operators
    ├── IdentifierExpression - variable reference
    └── NumberLiteral - integer constant 0-999

The code generator accepts exactly these node kinds. Anything else
reaching it is a compiler defect.

Design Notes
------------
- All nodes are dataclasses for clean representation
- Each node stores its source location for error reporting
- Comparisons are ordinary BinaryExpressions; the code generator
  decides from context whether one is valid
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from lmc_sdk.errors import SourceLocation


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node appears
    """
    location: SourceLocation

    def __repr__(self) -> str:
        """Default representation showing node type."""
        return f"{self.__class__.__name__}@{self.location.line}:{self.location.column}"


@dataclass
class Expression(ASTNode):
    """Base class for all expression nodes."""
    pass


@dataclass
class Statement(ASTNode):
    """Base class for all statement nodes."""
    pass


# =============================================================================
# Program Root Node
# =============================================================================

@dataclass
class ProgramNode(ASTNode):
    """
    Root node of the AST representing a complete program.

    Attributes:
        statements: Top-level statements in source order
    """
    statements: list[Statement] = field(default_factory=list)


# =============================================================================
# Expression Nodes
# =============================================================================

class BinaryOperator(Enum):
    """Binary operator types, valued by their source spelling."""
    # Arithmetic
    ADD = "+"
    SUBTRACT = "-"

    # Comparison
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS = "<"
    GREATER = ">"
    LESS_EQ = "<="
    GREATER_EQ = ">="

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def is_comparison(self) -> bool:
        return self not in (BinaryOperator.ADD, BinaryOperator.SUBTRACT)


@dataclass
class BinaryExpression(Expression):
    """
    Binary operation expression (a op b).

    Attributes:
        operator: The binary operator
        left: Left operand expression
        right: Right operand expression
    """
    operator: BinaryOperator = None
    left: Expression = None
    right: Expression = None


@dataclass
class IdentifierExpression(Expression):
    """
    Variable reference.

    Attributes:
        name: The variable name
    """
    name: str = ""


@dataclass
class NumberLiteral(Expression):
    """
    Integer literal.

    Attributes:
        value: The value (0-999)
    """
    value: int = 0


def is_leaf(expr: Expression) -> bool:
    """True for expressions that name a single memory cell."""
    return isinstance(expr, (IdentifierExpression, NumberLiteral))


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class AssignmentStatement(Statement):
    """
    Assignment (target = value).

    Attributes:
        target: Name of the variable being assigned
        value: Arithmetic expression to store
    """
    target: str = ""
    value: Expression = None


@dataclass
class InputStatement(Statement):
    """
    Read one value from the input tray into a variable.

    Attributes:
        target: Name of the variable receiving the value
    """
    target: str = ""


@dataclass
class OutputStatement(Statement):
    """
    Write the value of an expression to the output tray.

    Attributes:
        value: Arithmetic expression to output
    """
    value: Expression = None


@dataclass
class ElseIfClause(ASTNode):
    """
    One 'else if' branch of an if statement.

    Attributes:
        condition: Comparison controlling the branch
        body: Statements executed when the condition holds
    """
    condition: Expression = None
    body: list[Statement] = field(default_factory=list)


@dataclass
class IfStatement(Statement):
    """
    If statement with optional else-if chain and else branch.

    Attributes:
        condition: Comparison for the first branch
        body: Statements executed when the condition holds
        else_ifs: 'else if' branches, tested in order
        else_body: Statements executed when no condition holds (or None)
    """
    condition: Expression = None
    body: list[Statement] = field(default_factory=list)
    else_ifs: list[ElseIfClause] = field(default_factory=list)
    else_body: Optional[list[Statement]] = None


@dataclass
class WhileStatement(Statement):
    """
    While loop.

    Attributes:
        condition: Comparison tested before each iteration, or None
            for 'while true'
        body: Loop body statements
    """
    condition: Optional[Expression] = None
    body: list[Statement] = field(default_factory=list)

    @property
    def is_infinite(self) -> bool:
        return self.condition is None


@dataclass
class BreakStatement(Statement):
    """Break statement (exit innermost loop)."""
    pass


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care about.

    Usage:
        class VariableCollector(ASTVisitor):
            def visit_IdentifierExpression(self, node):
                self.names.add(node.name)
    """

    def visit(self, node: ASTNode):
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all child nodes."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, list):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(ast))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _block(self, title: str, statements: list[Statement]) -> None:
        self._emit(title)
        self.indent_level += 1
        for stmt in statements:
            self.visit(stmt)
        self.indent_level -= 1

    def visit_ProgramNode(self, node: ProgramNode):
        self._block("Program", node.statements)

    def visit_AssignmentStatement(self, node: AssignmentStatement):
        self._emit(f"Assign: {node.target} = {self._expr_str(node.value)}")

    def visit_InputStatement(self, node: InputStatement):
        self._emit(f"Input: {node.target}")

    def visit_OutputStatement(self, node: OutputStatement):
        self._emit(f"Output: {self._expr_str(node.value)}")

    def visit_IfStatement(self, node: IfStatement):
        self._emit(f"If {self._expr_str(node.condition)}")
        self.indent_level += 1
        self._block("Then:", node.body)
        for clause in node.else_ifs:
            self._block(f"Else If {self._expr_str(clause.condition)}:", clause.body)
        if node.else_body is not None:
            self._block("Else:", node.else_body)
        self.indent_level -= 1

    def visit_WhileStatement(self, node: WhileStatement):
        cond = "true" if node.is_infinite else self._expr_str(node.condition)
        self._block(f"While {cond}", node.body)

    def visit_BreakStatement(self, node: BreakStatement):
        self._emit("Break")

    def _expr_str(self, expr: Expression) -> str:
        """Convert expression to string representation."""
        if expr is None:
            return ""
        if isinstance(expr, NumberLiteral):
            return str(expr.value)
        if isinstance(expr, IdentifierExpression):
            return expr.name
        if isinstance(expr, BinaryExpression):
            return f"({self._expr_str(expr.left)} {expr.operator.symbol} {self._expr_str(expr.right)})"
        return f"<{type(expr).__name__}>"
