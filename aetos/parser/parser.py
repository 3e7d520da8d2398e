"""
Aetos recursive-descent parser.

Consumes a token iterable (normally the lexer's lazy generator) holding the
current token plus exactly one token of lookahead. There is no backtracking
and no error recovery: the first syntax error is raised as a ParseError.

Binary operators are parsed by precedence climbing over the table below.
Assignment sits underneath `||` and, inside an expression, is folded into an
equality test (`a = b` parses as `a == b`).
"""

import logging
from enum import IntEnum
from typing import Iterable, Iterator, List, Optional, Tuple

from ..lexer.tokens import Token, TokenType, SourceLocation
from ..lexer.errors import error_from_token
from .ast_nodes import (
    Assignment, BinaryExpr, BinaryOperator, Block, BoolLiteral, Borrow, Call,
    Expression, ExpressionStatement, FieldAccess, FloatLiteral, FunctionDecl,
    If, IntegerLiteral, Move, Parameter, Program, Return, SourceSpan,
    Statement, StringLiteral, StructDecl, StructField, StructInit, Type,
    TypeCast, TypeKind, VariableDeclaration, VariableRef, While,
)
from .errors import (
    create_unexpected_token_error, create_unexpected_eof_error,
    create_invalid_syntax_error
)

logger = logging.getLogger(__name__)


class Precedence(IntEnum):
    """Binding strength of binary operators, lowest first."""
    NONE = 0
    OR = 1              # ||
    AND = 2             # &&
    EQUALITY = 3        # == !=
    COMPARISON = 4      # < > <= >=
    TERM = 5            # + -
    FACTOR = 6          # * / and postfix `as`


BINARY_OPERATORS = {
    TokenType.LOGICAL_OR: (Precedence.OR, BinaryOperator.OR),
    TokenType.LOGICAL_AND: (Precedence.AND, BinaryOperator.AND),
    TokenType.EQUAL: (Precedence.EQUALITY, BinaryOperator.EQUAL),
    TokenType.NOT_EQUAL: (Precedence.EQUALITY, BinaryOperator.NOT_EQUAL),
    TokenType.LESS_THAN: (Precedence.COMPARISON, BinaryOperator.LESS_THAN),
    TokenType.GREATER_THAN: (Precedence.COMPARISON, BinaryOperator.GREATER_THAN),
    TokenType.LESS_EQUAL: (Precedence.COMPARISON, BinaryOperator.LESS_EQUAL),
    TokenType.GREATER_EQUAL: (Precedence.COMPARISON, BinaryOperator.GREATER_EQUAL),
    TokenType.PLUS: (Precedence.TERM, BinaryOperator.ADD),
    TokenType.MINUS: (Precedence.TERM, BinaryOperator.SUBTRACT),
    TokenType.MULTIPLY: (Precedence.FACTOR, BinaryOperator.MULTIPLY),
    TokenType.DIVIDE: (Precedence.FACTOR, BinaryOperator.DIVIDE),
}

PRIMITIVE_TYPES = {
    TokenType.I32: TypeKind.I32,
    TokenType.I64: TypeKind.I64,
    TokenType.F32: TypeKind.F32,
    TokenType.F64: TypeKind.F64,
    TokenType.BOOL: TypeKind.BOOL,
    TokenType.STRING_TYPE: TypeKind.STRING,
    TokenType.VOID: TypeKind.VOID,
}

# Wrapper forms recognised when the name is followed by '('
OWNERSHIP_WRAPPERS = ("move", "borrow", "mut_borrow")


class Parser:
    """
    Aetos parser.

    Builds a Program from the token stream. `parse()` may only be called
    once per parser because the token stream is consumed as it goes.
    """

    def __init__(self, tokens: Iterable[Token]):
        """
        Initialize parser with a token stream.

        Args:
            tokens: Tokens from the lexer, ending with an EOF token
        """
        self._tokens: Iterator[Token] = iter(tokens)
        self._eof = Token(TokenType.EOF, "", None, SourceLocation("<eof>", 0, 0, 0))
        self._previous: Optional[Token] = None
        self._current: Token = self._pull()
        self._lookahead: Token = self._pull()
        # Set while parsing an if/while condition, where `name {` opens the body
        self._no_struct_literal = False
        self._check_invalid(self._current)

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def parse(self) -> Program:
        """
        Parse the token stream into an AST.

        Returns:
            Program AST node representing the entire program

        Raises:
            ParseError: On the first syntax error
            LexerError: On the first unrecognized input
        """
        program = Program()
        start = self._current.location

        while not self._check(TokenType.EOF):
            if self._check(TokenType.FN):
                program.functions.append(self._parse_function())
            elif self._check(TokenType.STRUCT):
                program.structs.append(self._parse_struct())
                self._match(TokenType.SEMICOLON)
            elif self._match(TokenType.SEMICOLON):
                continue
            else:
                raise create_invalid_syntax_error(
                    "Expected function or struct declaration",
                    self._current.location,
                    self._current
                )

        program.span = SourceSpan(start, self._current.location)
        logger.debug("parsed %d functions and %d structs",
                     len(program.functions), len(program.structs))
        return program

    def _parse_function(self) -> FunctionDecl:
        """Parse `fn name(params) -> type { body }`."""
        start_token = self._consume(TokenType.FN)
        name = self._consume(TokenType.IDENTIFIER).lexeme

        self._consume(TokenType.LEFT_PAREN)
        params = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                param_name = self._consume(TokenType.IDENTIFIER).lexeme
                self._consume(TokenType.COLON)
                params.append(Parameter(param_name, self._parse_type()))
                if not self._match(TokenType.COMMA):
                    break
        self._consume(TokenType.RIGHT_PAREN)

        self._consume(TokenType.ARROW)
        return_type = self._parse_type()

        self._consume(TokenType.LEFT_BRACE)
        body = self._parse_statements_until_brace()

        return FunctionDecl(name, params, return_type, body, span=self._span_from(start_token))

    def _parse_struct(self) -> StructDecl:
        """Parse `struct Name { field: type, ... }`; a trailing comma is allowed."""
        start_token = self._consume(TokenType.STRUCT)
        name = self._consume(TokenType.IDENTIFIER).lexeme

        self._consume(TokenType.LEFT_BRACE)
        fields = []
        while not self._check(TokenType.RIGHT_BRACE):
            field_name = self._consume(TokenType.IDENTIFIER).lexeme
            self._consume(TokenType.COLON)
            fields.append(StructField(field_name, self._parse_type()))
            if not self._match(TokenType.COMMA):
                break
        self._consume(TokenType.RIGHT_BRACE)

        return StructDecl(name, fields, span=self._span_from(start_token))

    def _parse_type(self) -> Type:
        token = self._current
        if token.is_type_keyword:
            self._advance()
            return Type(PRIMITIVE_TYPES[token.type])
        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return Type.struct(token.lexeme)
        if token.type == TokenType.EOF:
            raise create_unexpected_eof_error("type", token.location)
        raise create_unexpected_token_error("type", token)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_statements_until_brace(self) -> List[Statement]:
        """Parse statements up to and including the closing '}'."""
        statements = []
        while not self._match(TokenType.RIGHT_BRACE):
            if self._check(TokenType.EOF):
                raise create_unexpected_eof_error(TokenType.RIGHT_BRACE, self._current.location)
            statements.append(self._parse_statement())
        return statements

    def _parse_body(self) -> List[Statement]:
        """Parse an if/while body: a braced statement list or one statement."""
        if self._match(TokenType.LEFT_BRACE):
            return self._parse_statements_until_brace()
        return [self._parse_statement()]

    def _parse_statement(self) -> Statement:
        """Parse a statement."""
        token = self._current

        if token.type == TokenType.LET:
            return self._parse_variable_declaration()
        if token.type == TokenType.IDENTIFIER and self._lookahead.type == TokenType.ASSIGN:
            return self._parse_assignment()
        if token.type == TokenType.RETURN:
            return self._parse_return_statement()
        if token.type == TokenType.IF:
            return self._parse_if_statement()
        if token.type == TokenType.WHILE:
            return self._parse_while_statement()
        if token.type == TokenType.LEFT_BRACE:
            self._advance()
            return Block(self._parse_statements_until_brace(), span=self._span_from(token))
        if token.type in (TokenType.FOR, TokenType.IN):
            raise create_invalid_syntax_error(
                f"'{token.lexeme}' is reserved and not supported", token.location, token
            )

        expr = self._parse_expression()
        self._consume(TokenType.SEMICOLON)
        return ExpressionStatement(expr, span=self._span_from(token))

    def _parse_variable_declaration(self) -> VariableDeclaration:
        """Parse `let [mut] name : type = expr ;`."""
        start_token = self._consume(TokenType.LET)
        mutable = self._match(TokenType.MUT)
        name = self._consume(TokenType.IDENTIFIER).lexeme
        self._consume(TokenType.COLON)
        var_type = self._parse_type()
        self._consume(TokenType.ASSIGN)
        initializer = self._parse_expression()
        self._consume(TokenType.SEMICOLON)

        return VariableDeclaration(name, var_type, initializer, mutable,
                                   span=self._span_from(start_token))

    def _parse_assignment(self) -> Assignment:
        start_token = self._consume(TokenType.IDENTIFIER)
        self._consume(TokenType.ASSIGN)
        value = self._parse_expression()
        self._consume(TokenType.SEMICOLON)
        return Assignment(start_token.lexeme, value, span=self._span_from(start_token))

    def _parse_return_statement(self) -> Return:
        """Parse `return [expr] ;`. A bare `return;` returns integer 0."""
        start_token = self._consume(TokenType.RETURN)
        if self._match(TokenType.SEMICOLON):
            return Return(IntegerLiteral(0), span=self._span_from(start_token))

        value = self._parse_expression()
        self._consume(TokenType.SEMICOLON)
        return Return(value, span=self._span_from(start_token))

    def _parse_if_statement(self) -> If:
        start_token = self._consume(TokenType.IF)
        condition = self._parse_condition()
        then_branch = self._parse_body()

        else_branch = None
        if self._match(TokenType.ELSE):
            if self._check(TokenType.IF):
                else_branch = [self._parse_if_statement()]
            else:
                else_branch = self._parse_body()

        return If(condition, then_branch, else_branch, span=self._span_from(start_token))

    def _parse_while_statement(self) -> While:
        start_token = self._consume(TokenType.WHILE)
        condition = self._parse_condition()
        body = self._parse_body()
        return While(condition, body, span=self._span_from(start_token))

    def _parse_condition(self) -> Expression:
        saved = self._no_struct_literal
        self._no_struct_literal = True
        try:
            return self._parse_expression()
        finally:
            self._no_struct_literal = saved

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _parse_expression(self) -> Expression:
        """Parse an expression, including the assignment-as-equality form."""
        left = self._parse_precedence(Precedence.OR)

        if self._check(TokenType.ASSIGN):
            assign_token = self._advance()
            if not isinstance(left, VariableRef):
                raise create_invalid_syntax_error(
                    "Left side of assignment must be a variable",
                    assign_token.location,
                    assign_token
                )
            right = self._parse_expression()
            return BinaryExpr(left, BinaryOperator.EQUAL, right, span=left.span)

        return left

    def _parse_precedence(self, precedence: Precedence) -> Expression:
        """Parse a left-associative chain of operators binding at least `precedence`."""
        left = self._parse_unary()

        while True:
            token = self._current
            if token.type == TokenType.AS:
                self._advance()
                left = TypeCast(left, self._parse_type(), span=left.span)
                continue

            entry = BINARY_OPERATORS.get(token.type)
            if entry is None or entry[0] < precedence:
                return left

            operator_precedence, operator = entry
            self._advance()
            if operator_precedence == Precedence.FACTOR:
                right = self._parse_unary()
            else:
                right = self._parse_precedence(Precedence(operator_precedence + 1))
            left = BinaryExpr(left, operator, right, span=left.span)

    def _parse_unary(self) -> Expression:
        """Unary minus becomes `0 - e`, logical not becomes `e == false`."""
        token = self._current
        if self._match(TokenType.MINUS):
            operand = self._parse_unary()
            return BinaryExpr(IntegerLiteral(0), BinaryOperator.SUBTRACT, operand,
                              span=self._span_from(token))
        if self._match(TokenType.LOGICAL_NOT):
            operand = self._parse_unary()
            return BinaryExpr(operand, BinaryOperator.EQUAL, BoolLiteral(False),
                              span=self._span_from(token))
        return self._parse_postfix(self._parse_primary())

    def _parse_postfix(self, expr: Expression) -> Expression:
        """Parse a dotted field-access chain."""
        while self._match(TokenType.DOT):
            field_name = self._consume(TokenType.IDENTIFIER).lexeme
            expr = FieldAccess(expr, field_name, span=expr.span)
        return expr

    def _parse_primary(self) -> Expression:
        token = self._current
        span = SourceSpan(token.location, token.location)

        if token.type == TokenType.INTEGER:
            self._advance()
            return IntegerLiteral(token.value, span=span)
        if token.type == TokenType.FLOAT:
            self._advance()
            return FloatLiteral(token.value, span=span)
        if token.type == TokenType.STRING:
            self._advance()
            return StringLiteral(token.value, span=span)
        if token.type in (TokenType.TRUE, TokenType.FALSE):
            self._advance()
            return BoolLiteral(token.value, span=span)
        if token.type == TokenType.IDENTIFIER:
            return self._parse_identifier_expression()
        if token.type == TokenType.LEFT_PAREN:
            self._advance()
            expr = self._parse_nested(self._parse_expression)
            self._consume(TokenType.RIGHT_PAREN)
            return expr
        if token.type == TokenType.EOF:
            raise create_unexpected_eof_error("expression", token.location)

        raise create_unexpected_token_error("expression", token)

    def _parse_identifier_expression(self) -> Expression:
        """Parse a variable, call, struct initializer or ownership wrapper."""
        name_token = self._advance()
        name = name_token.lexeme

        if self._check(TokenType.LEFT_PAREN):
            self._advance()
            if name in OWNERSHIP_WRAPPERS:
                inner = self._parse_nested(self._parse_expression)
                self._consume(TokenType.RIGHT_PAREN)
                span = self._span_from(name_token)
                if name == "move":
                    return Move(inner, span=span)
                return Borrow(inner, mutable=(name == "mut_borrow"), span=span)

            args = self._parse_nested(self._parse_arguments)
            return Call(name, args, span=self._span_from(name_token))

        if self._check(TokenType.LEFT_BRACE) and not self._no_struct_literal:
            self._advance()
            fields = self._parse_nested(self._parse_field_initializers)
            return StructInit(name, fields, span=self._span_from(name_token))

        return VariableRef(name, span=SourceSpan(name_token.location, name_token.location))

    def _parse_arguments(self) -> List[Expression]:
        """Parse call arguments up to and including ')'."""
        args = []
        if not self._match(TokenType.RIGHT_PAREN):
            while True:
                args.append(self._parse_expression())
                if not self._match(TokenType.COMMA):
                    break
            self._consume(TokenType.RIGHT_PAREN)
        return args

    def _parse_field_initializers(self) -> List[Tuple[str, Expression]]:
        """Parse `field: expr, ...` up to and including '}'."""
        fields = []
        while not self._check(TokenType.RIGHT_BRACE):
            field_name = self._consume(TokenType.IDENTIFIER).lexeme
            self._consume(TokenType.COLON)
            fields.append((field_name, self._parse_expression()))
            if not self._match(TokenType.COMMA):
                break
        self._consume(TokenType.RIGHT_BRACE)
        return fields

    def _parse_nested(self, parse_fn):
        """Run `parse_fn` with struct initializers allowed again (inside delimiters)."""
        saved = self._no_struct_literal
        self._no_struct_literal = False
        try:
            return parse_fn()
        finally:
            self._no_struct_literal = saved

    # ------------------------------------------------------------------
    # Token stream utilities
    # ------------------------------------------------------------------

    def _pull(self) -> Token:
        token = next(self._tokens, None)
        if token is None:
            # Keep handing out the final EOF once the stream is exhausted
            return self._eof
        if token.type == TokenType.EOF:
            self._eof = token
        return token

    def _check_invalid(self, token: Token):
        if token.type == TokenType.INVALID:
            raise error_from_token(token)

    def _match(self, token_type: TokenType) -> bool:
        """Check if current token matches type and consume if so."""
        if self._check(token_type):
            self._advance()
            return True
        return False

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token matches type without consuming."""
        return self._current.type == token_type

    def _advance(self) -> Token:
        """Consume and return the current token."""
        token = self._current
        self._previous = token
        if token.type != TokenType.EOF:
            self._current = self._lookahead
            self._lookahead = self._pull()
            self._check_invalid(self._current)
        return token

    def _consume(self, token_type: TokenType) -> Token:
        """Consume token of expected type or raise error."""
        if self._check(token_type):
            return self._advance()
        if self._current.type == TokenType.EOF:
            raise create_unexpected_eof_error(token_type, self._current.location)
        raise create_unexpected_token_error(token_type, self._current)

    def _span_from(self, start_token: Token) -> SourceSpan:
        end = self._previous.location if self._previous is not None else start_token.location
        return SourceSpan(start_token.location, end)


def parse_string(source: str, filename: str = "<string>") -> Program:
    """
    Convenience function to parse a source string.

    Raises:
        LexerError: If the source contains an unrecognized sequence
        ParseError: If parsing fails
    """
    from ..lexer import Lexer

    return Parser(Lexer(source, filename).iter_tokens()).parse()


def parse_file(filepath: str) -> Program:
    """
    Convenience function to parse a source file.

    Raises:
        LexerError: If lexing fails
        ParseError: If parsing fails
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return parse_string(source, filepath)
