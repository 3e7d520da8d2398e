"""
Token definitions for the Aetos lexer.

This module defines all token types supported by Aetos:
- Keywords (declarations, control flow, primitive type names)
- Operators and punctuation
- Literals (integers, floats, strings, booleans)
- Identifiers
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any


class TokenType(Enum):
    """
    Enumeration of all token types in Aetos.

    Organized by category for clarity and maintainability.
    """

    # ========================================================================
    # Special Tokens
    # ========================================================================
    EOF = auto()                    # End of file
    INVALID = auto()                # Unrecognized input, value holds the reason

    # ========================================================================
    # Literals
    # ========================================================================
    INTEGER = auto()                # 42
    FLOAT = auto()                  # 3.14
    STRING = auto()                 # "hello"
    TRUE = auto()                   # true
    FALSE = auto()                  # false

    # ========================================================================
    # Identifiers and Keywords
    # ========================================================================
    IDENTIFIER = auto()             # variable_name

    # Declarations
    FN = auto()                     # fn
    LET = auto()                    # let
    MUT = auto()                    # mut
    STRUCT = auto()                 # struct

    # Control flow
    IF = auto()                     # if
    ELSE = auto()                   # else
    WHILE = auto()                  # while
    FOR = auto()                    # for (reserved)
    IN = auto()                     # in (reserved)
    RETURN = auto()                 # return

    # Casts
    AS = auto()                     # as

    # Primitive type names
    I32 = auto()                    # i32
    I64 = auto()                    # i64
    F32 = auto()                    # f32
    F64 = auto()                    # f64
    BOOL = auto()                   # bool
    STRING_TYPE = auto()            # string
    VOID = auto()                   # void

    # ========================================================================
    # Operators
    # ========================================================================
    PLUS = auto()                   # +
    MINUS = auto()                  # -
    MULTIPLY = auto()               # *
    DIVIDE = auto()                 # /
    MODULO = auto()                 # %

    ASSIGN = auto()                 # =

    EQUAL = auto()                  # ==
    NOT_EQUAL = auto()              # !=
    LESS_THAN = auto()              # <
    GREATER_THAN = auto()           # >
    LESS_EQUAL = auto()             # <=
    GREATER_EQUAL = auto()          # >=

    LOGICAL_AND = auto()            # &&
    LOGICAL_OR = auto()             # ||
    LOGICAL_NOT = auto()            # !

    # ========================================================================
    # Punctuation and Delimiters
    # ========================================================================
    LEFT_PAREN = auto()             # (
    RIGHT_PAREN = auto()            # )
    LEFT_BRACKET = auto()           # [
    RIGHT_BRACKET = auto()          # ]
    LEFT_BRACE = auto()             # {
    RIGHT_BRACE = auto()            # }

    SEMICOLON = auto()              # ;
    COMMA = auto()                  # ,
    DOT = auto()                    # .
    COLON = auto()                  # :
    QUESTION = auto()               # ?
    ARROW = auto()                  # ->


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Used for error reporting and debugging information.
    """
    filename: str
    line: int
    column: int
    offset: int  # Character offset from start of file

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical token in the Aetos language.

    Contains the token type, lexeme (raw text), semantic value
    and source location for error reporting.
    """
    type: TokenType
    lexeme: str                     # Raw text from source
    value: Any                      # Parsed value (int for INTEGER, message for INVALID)
    location: SourceLocation

    def __str__(self) -> str:
        if self.value is not None and self.value != self.lexeme:
            return f"{self.type.name}({self.lexeme!r} -> {self.value!r})"
        return f"{self.type.name}({self.lexeme!r})"

    @property
    def is_keyword(self) -> bool:
        """Check if this token is a keyword."""
        return self.type in KEYWORDS.values()

    @property
    def is_type_keyword(self) -> bool:
        """Check if this token names a primitive type."""
        return self.type in TYPE_KEYWORDS


KEYWORDS = {
    "fn": TokenType.FN,
    "let": TokenType.LET,
    "mut": TokenType.MUT,
    "as": TokenType.AS,
    "return": TokenType.RETURN,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "for": TokenType.FOR,
    "in": TokenType.IN,
    "struct": TokenType.STRUCT,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "i32": TokenType.I32,
    "i64": TokenType.I64,
    "f32": TokenType.F32,
    "f64": TokenType.F64,
    "bool": TokenType.BOOL,
    "string": TokenType.STRING_TYPE,
    "void": TokenType.VOID,
}

TYPE_KEYWORDS = {
    TokenType.I32, TokenType.I64, TokenType.F32, TokenType.F64,
    TokenType.BOOL, TokenType.STRING_TYPE, TokenType.VOID,
}

OPERATORS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.MULTIPLY,
    "/": TokenType.DIVIDE,
    "%": TokenType.MODULO,
    "=": TokenType.ASSIGN,
    "==": TokenType.EQUAL,
    "!=": TokenType.NOT_EQUAL,
    "<": TokenType.LESS_THAN,
    ">": TokenType.GREATER_THAN,
    "<=": TokenType.LESS_EQUAL,
    ">=": TokenType.GREATER_EQUAL,
    "&&": TokenType.LOGICAL_AND,
    "||": TokenType.LOGICAL_OR,
    "!": TokenType.LOGICAL_NOT,
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "[": TokenType.LEFT_BRACKET,
    "]": TokenType.RIGHT_BRACKET,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ";": TokenType.SEMICOLON,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    ":": TokenType.COLON,
    "?": TokenType.QUESTION,
    "->": TokenType.ARROW,
}
