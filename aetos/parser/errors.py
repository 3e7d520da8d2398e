"""
Error handling for the Aetos parser.

Parsing is fail-fast: the first syntax error aborts the parse. Every error
carries a `kind` so callers can tell an unexpected token from a premature
end of input or a structurally invalid construct.
"""

from enum import Enum
from typing import Optional, List, Union

from ..lexer.tokens import Token, TokenType, SourceLocation
from ..lexer.errors import Diagnostic


class ParseErrorKind(Enum):
    UNEXPECTED_TOKEN = "UnexpectedToken"
    UNEXPECTED_EOF = "UnexpectedEof"
    INVALID_SYNTAX = "InvalidSyntax"


class ParseError(Exception):
    """
    Exception raised when the parser encounters a syntax error.

    Attributes:
        kind: Which of the three syntax error categories this is
        expected: What the parser was looking for (UNEXPECTED_TOKEN/EOF)
        found: Description of the token actually seen (UNEXPECTED_TOKEN)
        token: The offending token, when there is one
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation],
        kind: ParseErrorKind = ParseErrorKind.INVALID_SYNTAX,
        token: Optional[Token] = None,
        expected: Optional[str] = None,
        found: Optional[str] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.token = token
        self.expected = expected
        self.found = found
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )

    def __str__(self) -> str:
        return str(self.diagnostic)


TOKEN_SUGGESTIONS = {
    TokenType.SEMICOLON: ["Add a semicolon ';' to end the statement"],
    TokenType.RIGHT_PAREN: ["Add a closing parenthesis ')'"],
    TokenType.RIGHT_BRACE: ["Add a closing brace '}'"],
    TokenType.LEFT_BRACE: ["Add an opening brace '{' to start a block"],
    TokenType.COLON: ["Add a colon ':' before the type"],
    TokenType.ARROW: ["Add an arrow '->' before the return type"],
    TokenType.ASSIGN: ["Add an assignment operator '='"],
}

def describe_token(token: Token) -> str:
    if token.type == TokenType.IDENTIFIER:
        return f"identifier '{token.lexeme}'"
    if token.type == TokenType.EOF:
        return "end of input"
    if token.is_keyword:
        return f"keyword '{token.lexeme}'"
    return f"'{token.lexeme}'"


# Helper functions for creating common parser errors

def create_unexpected_token_error(expected: Union[TokenType, str], found: Token) -> ParseError:
    """Create an error for an unexpected token."""
    expected_str = expected.name if isinstance(expected, TokenType) else expected
    found_str = describe_token(found)

    return ParseError(
        message=f"Expected {expected_str}, found {found_str}",
        location=found.location,
        kind=ParseErrorKind.UNEXPECTED_TOKEN,
        token=found,
        expected=expected_str,
        found=found_str,
        code="P001",
        suggestions=TOKEN_SUGGESTIONS.get(expected, []) if isinstance(expected, TokenType) else []
    )


def create_unexpected_eof_error(expected: Union[TokenType, str], location: SourceLocation) -> ParseError:
    """Create an error for unexpected end of input."""
    expected_str = expected.name if isinstance(expected, TokenType) else expected

    return ParseError(
        message=f"Unexpected end of input, expected {expected_str}",
        location=location,
        kind=ParseErrorKind.UNEXPECTED_EOF,
        expected=expected_str,
        code="P010",
        help_text=f"The parser reached the end of the file while expecting {expected_str}.",
    )


def create_invalid_syntax_error(message: str, location: Optional[SourceLocation],
                                token: Optional[Token] = None) -> ParseError:
    """Create an error for a structurally invalid construct."""
    return ParseError(
        message=message,
        location=location,
        kind=ParseErrorKind.INVALID_SYNTAX,
        token=token,
        code="P005",
    )
