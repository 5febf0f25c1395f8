# =============================================================================
# test_parser.py - Pseudocode Parser Tests
# =============================================================================
# Tests for the recursive descent parser.
#
# Test coverage includes:
#   - Simple statements: assignment, input, output/print, break
#   - Expression structure: left associativity and parentheses
#   - if / else if / else / endif and while / endwhile, 'while true'
#   - Error reporting and recovery (several errors in one run)
#   - The AST pretty printer
# =============================================================================

import pytest
from lmc_sdk.compiler.parser import LMCParser, parse_source
from lmc_sdk.compiler.lexer import tokenize
from lmc_sdk.compiler.ast import (
    ASTPrinter,
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
)
from lmc_sdk.compiler.errors import (
    CompilationError,
    MissingTokenError,
    UnexpectedTokenError,
)


# =============================================================================
# Helper Functions
# =============================================================================

def parse(source: str):
    return parse_source(source, "<test>")


def parse_errors(source: str) -> list:
    """Parse source expected to fail and return the collected errors."""
    with pytest.raises(CompilationError) as exc_info:
        parse(source)
    return exc_info.value.errors


# =============================================================================
# Simple Statement Tests
# =============================================================================

class TestSimpleStatements:
    """Test single-line statements."""

    def test_empty_program(self):
        assert parse("").statements == []

    def test_blank_lines_and_comments(self):
        program = parse("\n// comment\n\n   \n")
        assert program.statements == []

    def test_input(self):
        stmt = parse("input a").statements[0]
        assert isinstance(stmt, InputStatement)
        assert stmt.target == "a"

    def test_print(self):
        stmt = parse("print 7").statements[0]
        assert isinstance(stmt, OutputStatement)
        assert isinstance(stmt.value, NumberLiteral)
        assert stmt.value.value == 7

    def test_output_keyword(self):
        stmt = parse("output x").statements[0]
        assert isinstance(stmt, OutputStatement)
        assert stmt.value.name == "x"

    def test_assignment(self):
        stmt = parse("total = 5").statements[0]
        assert isinstance(stmt, AssignmentStatement)
        assert stmt.target == "total"
        assert stmt.value.value == 5

    def test_break(self):
        stmt = parse("break").statements[0]
        assert isinstance(stmt, BreakStatement)

    def test_statement_locations(self):
        program = parse("input a\n\nprint a")
        assert program.statements[0].location.line == 1
        assert program.statements[1].location.line == 3

    def test_trailing_comment(self):
        program = parse("input a // read a\nprint a // and echo it\n")
        assert len(program.statements) == 2


# =============================================================================
# Expression Tests
# =============================================================================

class TestExpressions:
    """Test arithmetic expression structure."""

    def test_binary_add(self):
        expr = parse("x = a + 1").statements[0].value
        assert isinstance(expr, BinaryExpression)
        assert expr.operator == BinaryOperator.ADD
        assert expr.left.name == "a"
        assert expr.right.value == 1

    def test_left_associative(self):
        """a - b - c parses as (a - b) - c."""
        expr = parse("x = a - b - c").statements[0].value
        assert expr.operator == BinaryOperator.SUBTRACT
        assert isinstance(expr.left, BinaryExpression)
        assert expr.left.left.name == "a"
        assert expr.left.right.name == "b"
        assert expr.right.name == "c"

    def test_parentheses_group_right(self):
        expr = parse("x = a - (b - c)").statements[0].value
        assert isinstance(expr.left, IdentifierExpression)
        assert isinstance(expr.right, BinaryExpression)
        assert expr.right.left.name == "b"

    def test_nested_parentheses(self):
        expr = parse("x = ((a))").statements[0].value
        assert isinstance(expr, IdentifierExpression)
        assert expr.name == "a"

    def test_mixed_operators(self):
        expr = parse("x = a + b - c").statements[0].value
        assert expr.operator == BinaryOperator.SUBTRACT
        assert expr.left.operator == BinaryOperator.ADD

    def test_operator_properties(self):
        assert BinaryOperator.LESS_EQ.symbol == "<="
        assert BinaryOperator.LESS_EQ.is_comparison
        assert not BinaryOperator.ADD.is_comparison


# =============================================================================
# If Statement Tests
# =============================================================================

class TestIfStatement:
    """Test if / else if / else parsing."""

    def test_if_only(self):
        stmt = parse("if a == 1\nprint a\nendif").statements[0]
        assert isinstance(stmt, IfStatement)
        assert stmt.condition.operator == BinaryOperator.EQUAL
        assert len(stmt.body) == 1
        assert stmt.else_ifs == []
        assert stmt.else_body is None

    def test_if_else(self):
        stmt = parse("if a < b\nprint a\nelse\nprint b\nendif").statements[0]
        assert len(stmt.body) == 1
        assert len(stmt.else_body) == 1
        assert stmt.else_body[0].value.name == "b"

    def test_else_if_chain(self):
        source = """
if a == 1
    print 10
else if a == 2
    print 20
else if a == 3
    print 30
else
    print 0
endif
"""
        stmt = parse(source).statements[0]
        assert len(stmt.else_ifs) == 2
        assert stmt.else_ifs[0].condition.right.value == 2
        assert stmt.else_ifs[1].body[0].value.value == 30
        assert stmt.else_body[0].value.value == 0

    def test_empty_branches(self):
        stmt = parse("if a == 1\nelse\nendif").statements[0]
        assert stmt.body == []
        assert stmt.else_body == []

    @pytest.mark.parametrize("op,expected", [
        ("==", BinaryOperator.EQUAL),
        ("!=", BinaryOperator.NOT_EQUAL),
        ("<", BinaryOperator.LESS),
        (">", BinaryOperator.GREATER),
        ("<=", BinaryOperator.LESS_EQ),
        (">=", BinaryOperator.GREATER_EQ),
    ])
    def test_comparison_operators(self, op, expected):
        stmt = parse(f"if a {op} b\nendif").statements[0]
        assert stmt.condition.operator == expected

    def test_condition_with_arithmetic(self):
        stmt = parse("if a + 1 > b - 2\nendif").statements[0]
        assert stmt.condition.operator == BinaryOperator.GREATER
        assert stmt.condition.left.operator == BinaryOperator.ADD
        assert stmt.condition.right.operator == BinaryOperator.SUBTRACT


# =============================================================================
# While Statement Tests
# =============================================================================

class TestWhileStatement:
    """Test while loop parsing."""

    def test_while(self):
        stmt = parse("while n > 0\nn = n - 1\nendwhile").statements[0]
        assert isinstance(stmt, WhileStatement)
        assert stmt.condition.operator == BinaryOperator.GREATER
        assert not stmt.is_infinite
        assert len(stmt.body) == 1

    def test_while_true(self):
        stmt = parse("while true\nbreak\nendwhile").statements[0]
        assert stmt.condition is None
        assert stmt.is_infinite
        assert isinstance(stmt.body[0], BreakStatement)

    def test_nested_blocks(self):
        source = """
while true
    input a
    if a == 0
        break
    endif
    while a > 0
        a = a - 1
    endwhile
endwhile
print 1
"""
        program = parse(source)
        assert len(program.statements) == 2
        loop = program.statements[0]
        assert isinstance(loop.body[1], IfStatement)
        assert isinstance(loop.body[2], WhileStatement)
        assert isinstance(loop.body[1].body[0], BreakStatement)


# =============================================================================
# Error Tests
# =============================================================================

class TestParseErrors:
    """Test syntax error reporting."""

    def test_missing_expression(self):
        errors = parse_errors("x =\n")
        assert len(errors) == 1
        assert isinstance(errors[0], UnexpectedTokenError)
        assert errors[0].found == "end of line"

    def test_missing_assign(self):
        errors = parse_errors("x 5\n")
        assert isinstance(errors[0], MissingTokenError)
        assert "'='" in errors[0].expected

    def test_missing_comparison(self):
        errors = parse_errors("if a\nendif\n")
        assert isinstance(errors[0], MissingTokenError)
        assert "comparison operator" in errors[0].message

    def test_missing_endif(self):
        errors = parse_errors("input a\nif a == 1\nprint a\n")
        assert len(errors) == 1
        assert isinstance(errors[0], MissingTokenError)
        assert errors[0].expected == "'endif'"

    def test_missing_endwhile(self):
        errors = parse_errors("input a\nwhile a > 0\na = a - 1\n")
        assert errors[0].expected == "'endwhile'"

    def test_extra_tokens(self):
        errors = parse_errors("input a b\n")
        assert isinstance(errors[0], UnexpectedTokenError)
        assert errors[0].found == "b"
        assert errors[0].expected == "end of line"

    def test_true_outside_while(self):
        errors = parse_errors("x = true\n")
        assert isinstance(errors[0], UnexpectedTokenError)
        assert errors[0].found == "true"

    def test_true_in_if(self):
        errors = parse_errors("if true\nendif\n")
        assert errors[0].found == "true"

    def test_second_else(self):
        source = "if a == 1\nprint 1\nelse\nprint 2\nelse\nprint 3\nendif\n"
        errors = parse_errors(source)
        assert len(errors) == 1
        assert isinstance(errors[0], UnexpectedTokenError)
        assert errors[0].found == "else"

    def test_junk_after_else(self):
        """The endif still closes the if after a bad else line."""
        source = "input a\nif a == 1\nprint 1\nelse junk\nprint 2\nendif\nprint 3\n"
        errors = parse_errors(source)
        assert len(errors) == 1
        assert errors[0].found == "junk"
        assert errors[0].location.line == 4

    def test_bad_if_condition_keeps_block(self):
        errors = parse_errors("if a\nprint 1\nendif\n")
        assert len(errors) == 1
        assert errors[0].location.line == 1

    def test_bad_else_if_condition(self):
        source = "if a == 1\nprint 1\nelse if b\nprint 2\nelse\nprint 3\nendif\n"
        errors = parse_errors(source)
        assert len(errors) == 1
        assert errors[0].location.line == 3

    def test_bad_while_condition_keeps_block(self):
        errors = parse_errors("while a = 1\nprint a\nendwhile\nprint 2\n")
        assert len(errors) == 1
        assert errors[0].location.line == 1

    def test_errors_after_bad_header_still_reported(self):
        errors = parse_errors("if a\nprint )\nendif\nx =\n")
        assert [error.location.line for error in errors] == [1, 2, 4]

    def test_stray_endwhile(self):
        errors = parse_errors("endwhile\n")
        assert errors[0].found == "endwhile"
        assert errors[0].expected == "a statement"

    def test_unclosed_parenthesis(self):
        errors = parse_errors("x = (a + 1\n")
        assert isinstance(errors[0], MissingTokenError)
        assert errors[0].expected == "')'"

    def test_input_needs_variable(self):
        errors = parse_errors("input 5\n")
        assert isinstance(errors[0], MissingTokenError)

    def test_multiple_errors_reported(self):
        """The parser skips a bad line and keeps going."""
        errors = parse_errors("x =\ny = 1\nprint +\n")
        assert len(errors) == 2
        assert errors[0].location.line == 1
        assert errors[1].location.line == 3

    def test_error_message_format(self):
        with pytest.raises(CompilationError) as exc_info:
            parse_source("print 1\nprint )\n", "demo.lmc")
        report = str(exc_info.value)
        assert "demo.lmc:2:7: error: unexpected token ')'" in report
        assert "    print )" in report
        assert "1 error, 0 warnings" in report

    def test_parser_accepts_token_list(self):
        tokens = tokenize("input a\nprint a")
        program = LMCParser(tokens, "<test>").parse()
        assert len(program.statements) == 2


# =============================================================================
# AST Printer Tests
# =============================================================================

class TestASTPrinter:
    """Test the AST pretty printer."""

    def test_print_program(self):
        source = """
input a
while a > 0
    a = a - 1
    if a == 2
        break
    else
        print a
    endif
endwhile
"""
        text = ASTPrinter().print(parse(source))
        assert text.splitlines() == [
            "Program",
            "  Input: a",
            "  While (a > 0)",
            "    Assign: a = (a - 1)",
            "    If (a == 2)",
            "      Then:",
            "        Break",
            "      Else:",
            "        Output: a",
        ]

    def test_print_while_true_and_else_if(self):
        source = "while true\nif a == 1\nelse if a < 5\nprint 1\nendif\nendwhile\n"
        text = ASTPrinter().print(parse(source))
        assert "  While true" in text.splitlines()
        assert "      Else If (a < 5):" in text.splitlines()
