"""
Aetos Lexer Package

Lexical analyzer for the Aetos language: a lazy, single-pass scanner that
reports unrecognized input as INVALID tokens with source locations.
"""

from .tokens import Token, TokenType, SourceLocation
from .lexer import Lexer, tokenize_string, tokenize_file
from .errors import Diagnostic, LexerError, error_from_token

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "SourceLocation",
    "Diagnostic",
    "LexerError",
    "error_from_token",
    "tokenize_string",
    "tokenize_file",
]
