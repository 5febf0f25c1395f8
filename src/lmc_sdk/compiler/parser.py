"""
Pseudocode Recursive Descent Parser
===================================

This module implements a recursive descent parser for the LMC
pseudocode language. It takes a stream of tokens from the lexer and
builds an Abstract Syntax Tree (AST).

Grammar (Simplified EBNF)
-------------------------
program    ::= (statement? NEWLINE)* EOF
statement  ::= IDENTIFIER '=' expr
             | 'input' IDENTIFIER
             | ('output' | 'print') expr
             | if_stmt
             | while_stmt
             | 'break'

if_stmt    ::= 'if' cond NEWLINE block
               ('else' 'if' cond NEWLINE block)*
               ('else' NEWLINE block)?
               'endif'
while_stmt ::= 'while' (cond | 'true') NEWLINE block 'endwhile'
block      ::= (statement? NEWLINE)*

cond       ::= expr ('==' | '!=' | '<' | '>' | '<=' | '>=') expr
expr       ::= term (('+' | '-') term)*
term       ::= NUMBER | IDENTIFIER | '(' expr ')'

Addition and subtraction are left associative: a - b - c is (a - b) - c.

Error Recovery
--------------
A syntax error inside a statement is recorded and the parser skips to
the next line, so one run reports every bad line. A missing 'endif' or
'endwhile' cannot be recovered from and is reported at end of file.

Example Usage
-------------
>>> from lmc_sdk.compiler.parser import parse_source
>>> program = parse_source("input a\\nprint a - 1\\n")
>>> len(program.statements)
2
"""

from typing import Optional

from lmc_sdk.errors import SourceLocation
from lmc_sdk.compiler.lexer import Lexer, Token, TokenType, COMPARISON_TOKENS
from lmc_sdk.compiler.ast import (
    ProgramNode,
    Statement,
    Expression,
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
from lmc_sdk.compiler.errors import (
    LMCSyntaxError,
    UnexpectedTokenError,
    MissingTokenError,
    ErrorCollector,
)


_OPERATORS = {
    TokenType.PLUS: BinaryOperator.ADD,
    TokenType.MINUS: BinaryOperator.SUBTRACT,
    TokenType.EQ: BinaryOperator.EQUAL,
    TokenType.NE: BinaryOperator.NOT_EQUAL,
    TokenType.LT: BinaryOperator.LESS,
    TokenType.GT: BinaryOperator.GREATER,
    TokenType.LE: BinaryOperator.LESS_EQ,
    TokenType.GE: BinaryOperator.GREATER_EQ,
}


class LMCParser:
    """
    Recursive descent parser for LMC pseudocode.

    Attributes:
        tokens: List of tokens to parse
        filename: Source filename for error reporting
    """

    def __init__(
        self,
        tokens: list[Token],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
    ):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer (ending with EOF)
            filename: Source filename for error messages
            source_lines: Original source lines for error context
        """
        self.tokens = tokens
        self.filename = filename
        self.source_lines = source_lines or []

        self._pos = 0
        self._errors = ErrorCollector()

    def parse(self) -> ProgramNode:
        """
        Parse the token stream into an AST.

        Returns:
            ProgramNode containing all top-level statements

        Raises:
            CompilationError: If any syntax errors were found
        """
        statements: list[Statement] = []
        try:
            statements = self._parse_block(terminators=())
        except LMCSyntaxError as e:
            self._errors.add(e)

        self._errors.raise_if_errors()

        return ProgramNode(
            location=SourceLocation(self.filename, 1, 1),
            statements=statements,
        )

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self, offset: int = 0) -> Token:
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def _advance(self) -> Token:
        if not self._at_end():
            token = self.tokens[self._pos]
            self._pos += 1
            return token
        return self.tokens[-1]

    def _check(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _match(self, *types: TokenType) -> Optional[Token]:
        """Consume the current token if it matches one of the types."""
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: TokenType, message: str = None) -> Token:
        """
        Expect and consume a specific token type.

        Raises:
            MissingTokenError: If the expected token is not found
        """
        if self._check(token_type):
            return self._advance()

        current = self._peek()
        if message is None:
            message = token_type.name.lower()

        raise MissingTokenError(
            message,
            current.location,
            self._get_source_line(current.line),
        )

    def _expect_end_of_line(self) -> None:
        if self._check(TokenType.NEWLINE, TokenType.EOF):
            self._match(TokenType.NEWLINE)
            return
        self._unexpected("end of line")

    def _unexpected(self, expected: str):
        raise self._unexpected_error(expected, self._peek())

    def _unexpected_error(self, expected: str, token: Token) -> UnexpectedTokenError:
        return UnexpectedTokenError(
            token.describe(),
            expected=expected,
            location=token.location,
            source_line=self._get_source_line(token.line),
        )

    def _get_source_line(self, line: int) -> Optional[str]:
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    def _synchronize(self) -> None:
        """Skip the rest of the current line after an error."""
        while not self._at_end():
            if self._advance().type == TokenType.NEWLINE:
                return

    def _parse_header(self, has_condition: bool) -> Optional[BinaryExpression]:
        """
        Parse the rest of an if, else or while line.

        Errors are recorded here rather than propagated, so the block
        below and its closing keyword still pair up with this statement.
        """
        try:
            condition = self._parse_condition() if has_condition else None
            self._expect_end_of_line()
            return condition
        except LMCSyntaxError as e:
            self._errors.add(e)
            self._synchronize()
            return None

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_block(self, terminators: tuple[TokenType, ...]) -> list[Statement]:
        """
        Parse statements until one of the terminator tokens.

        The terminator is left for the caller to consume. An empty
        terminator tuple parses to end of file.
        """
        statements: list[Statement] = []

        while not self._errors.should_stop():
            if self._match(TokenType.NEWLINE):
                continue
            if self._at_end() or self._check(*terminators):
                return statements

            try:
                statements.append(self._parse_statement())
            except LMCSyntaxError as e:
                self._errors.add(e)
                self._synchronize()

        return statements

    def _parse_statement(self) -> Statement:
        token = self._peek()

        if token.type == TokenType.IF:
            return self._parse_if_statement()
        if token.type == TokenType.WHILE:
            return self._parse_while_statement()
        if token.type == TokenType.BREAK:
            self._advance()
            self._expect_end_of_line()
            return BreakStatement(location=token.location)
        if token.type == TokenType.INPUT:
            return self._parse_input_statement()
        if token.type == TokenType.OUTPUT:
            return self._parse_output_statement()
        if token.type == TokenType.IDENTIFIER:
            return self._parse_assignment()

        self._unexpected("a statement")

    def _parse_assignment(self) -> AssignmentStatement:
        name_token = self._advance()
        self._expect(TokenType.ASSIGN, "'=' after variable name")
        value = self._parse_expression()
        self._expect_end_of_line()

        return AssignmentStatement(
            location=name_token.location,
            target=name_token.value,
            value=value,
        )

    def _parse_input_statement(self) -> InputStatement:
        keyword = self._advance()
        name_token = self._expect(TokenType.IDENTIFIER, "variable name after 'input'")
        self._expect_end_of_line()

        return InputStatement(location=keyword.location, target=name_token.value)

    def _parse_output_statement(self) -> OutputStatement:
        keyword = self._advance()
        value = self._parse_expression()
        self._expect_end_of_line()

        return OutputStatement(location=keyword.location, value=value)

    def _parse_if_statement(self) -> IfStatement:
        """Parse an if statement with its else-if chain and else branch."""
        location = self._advance().location
        condition = self._parse_header(has_condition=True)

        body = self._parse_block((TokenType.ELSE, TokenType.ENDIF))
        else_ifs: list[ElseIfClause] = []
        else_body: Optional[list[Statement]] = None

        while else_token := self._match(TokenType.ELSE):
            if else_body is not None:
                # Report the extra branch, then parse it so 'endif' still closes this if
                self._errors.add(self._unexpected_error("'endif' after the 'else' branch", else_token))
                self._synchronize()
                self._parse_block((TokenType.ELSE, TokenType.ENDIF))
                continue

            if self._match(TokenType.IF):
                clause_condition = self._parse_header(has_condition=True)
                clause_body = self._parse_block((TokenType.ELSE, TokenType.ENDIF))
                else_ifs.append(ElseIfClause(
                    location=else_token.location,
                    condition=clause_condition,
                    body=clause_body,
                ))
                continue

            self._parse_header(has_condition=False)
            else_body = self._parse_block((TokenType.ELSE, TokenType.ENDIF))

        self._expect(TokenType.ENDIF, "'endif'")
        self._expect_end_of_line()

        return IfStatement(
            location=location,
            condition=condition,
            body=body,
            else_ifs=else_ifs,
            else_body=else_body,
        )

    def _parse_while_statement(self) -> WhileStatement:
        location = self._advance().location

        condition = None
        if self._match(TokenType.TRUE):
            self._parse_header(has_condition=False)
        else:
            condition = self._parse_header(has_condition=True)

        body = self._parse_block((TokenType.ENDWHILE,))
        self._expect(TokenType.ENDWHILE, "'endwhile'")
        self._expect_end_of_line()

        return WhileStatement(location=location, condition=condition, body=body)

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _parse_condition(self) -> BinaryExpression:
        """Parse 'expr OP expr' where OP is a comparison operator."""
        left = self._parse_expression()

        op_token = self._match(*COMPARISON_TOKENS)
        if op_token is None:
            current = self._peek()
            raise MissingTokenError(
                "comparison operator (==, !=, <, >, <=, >=)",
                current.location,
                self._get_source_line(current.line),
            )

        right = self._parse_expression()
        return BinaryExpression(
            location=left.location,
            operator=_OPERATORS[op_token.type],
            left=left,
            right=right,
        )

    def _parse_expression(self) -> Expression:
        """Parse additive expression (left associative)."""
        left = self._parse_term()

        while op_token := self._match(TokenType.PLUS, TokenType.MINUS):
            right = self._parse_term()
            left = BinaryExpression(
                location=op_token.location,
                operator=_OPERATORS[op_token.type],
                left=left,
                right=right,
            )

        return left

    def _parse_term(self) -> Expression:
        token = self._peek()

        if token.type == TokenType.NUMBER:
            self._advance()
            return NumberLiteral(location=token.location, value=token.value)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return IdentifierExpression(location=token.location, name=token.value)

        if token.type == TokenType.LPAREN:
            self._advance()
            expr = self._parse_expression()
            self._expect(TokenType.RPAREN, "')'")
            return expr

        if token.type == TokenType.TRUE:
            self._unexpected("a number, variable or '(' ('true' is only valid after 'while')")

        self._unexpected("a number, variable or '('")


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str, filename: str = "<input>") -> ProgramNode:
    """
    Parse pseudocode source into an AST.

    This is a convenience function that combines lexing and parsing.

    Raises:
        LMCSyntaxError: If the lexer rejects the source
        CompilationError: If parsing fails
    """
    tokens = list(Lexer(source, filename).tokenize())
    parser = LMCParser(tokens, filename, source.splitlines())
    return parser.parse()
