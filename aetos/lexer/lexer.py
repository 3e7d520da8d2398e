"""
Aetos Lexer - turns source text into a lazy token stream.

The scanner keeps nothing but a cursor (position, line, column). Tokens are
produced one at a time by `iter_tokens()`, so the parser can pull them on
demand. Input that matches no rule comes out as a single INVALID token whose
value explains the problem; the parser turns that into a LexerError.
"""

import logging
import re
from typing import Iterator, List

import numpy as np

from .tokens import Token, TokenType, SourceLocation, KEYWORDS, OPERATORS
from .errors import describe_invalid_character, error_from_token

logger = logging.getLogger(__name__)

INT32_MAX = 2**31 - 1


class Lexer:
    """
    Aetos lexical analyzer.

    Converts source code text into a stream of tokens in a single
    left-to-right pass.
    """

    identifier_pattern = re.compile(r'[a-zA-Z_][a-zA-Z0-9_]*')
    number_pattern = re.compile(r'[0-9]+(\.[0-9]+)?')

    def __init__(self, source: str, filename: str = "<unknown>"):
        """
        Initialize the lexer with source code.

        Args:
            source: Source code string
            filename: Name of source file for error reporting
        """
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1

    def iter_tokens(self) -> Iterator[Token]:
        """
        Lazily yield tokens, ending with exactly one EOF token.
        """
        self.pos = 0
        self.line = 1
        self.column = 1
        count = 0

        while True:
            self._skip_whitespace_and_comments()
            if self.pos >= len(self.source):
                break
            count += 1
            yield self._next_token()

        logger.debug("lexed %d tokens from %s", count, self.filename)
        yield Token(TokenType.EOF, "", None, self._location())

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source code.

        Returns:
            List of tokens including the EOF token
        """
        return list(self.iter_tokens())

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column, self.pos)

    def _next_token(self) -> Token:
        """Scan the token starting at the current position."""
        location = self._location()
        current_char = self.source[self.pos]

        if '0' <= current_char <= '9':
            return self._tokenize_number(location)

        if current_char.isalpha() or current_char == '_':
            match = self.identifier_pattern.match(self.source, self.pos)
            if match:
                return self._tokenize_identifier_or_keyword(match.group(0), location)

        if current_char == '"':
            return self._tokenize_string(location)

        # Longest operator first
        for op_len in (2, 1):
            potential_op = self.source[self.pos:self.pos + op_len]
            if len(potential_op) == op_len and potential_op in OPERATORS:
                self._advance_by(op_len)
                return Token(OPERATORS[potential_op], potential_op, None, location)

        self._advance()
        return Token(
            TokenType.INVALID,
            current_char,
            describe_invalid_character(current_char),
            location
        )

    def _tokenize_number(self, location: SourceLocation) -> Token:
        """Tokenize an integer or float literal."""
        match = self.number_pattern.match(self.source, self.pos)
        lexeme = match.group(0)
        self._advance_by(len(lexeme))

        if match.group(1):
            value = float(np.float32(lexeme))
            return Token(TokenType.FLOAT, lexeme, value, location)

        value = int(lexeme)
        if value > INT32_MAX:
            return Token(
                TokenType.INVALID,
                lexeme,
                f"Integer literal out of range for i32: {lexeme}",
                location
            )
        return Token(TokenType.INTEGER, lexeme, value, location)

    def _tokenize_identifier_or_keyword(self, lexeme: str, location: SourceLocation) -> Token:
        self._advance_by(len(lexeme))

        token_type = KEYWORDS.get(lexeme)
        if token_type is TokenType.TRUE:
            return Token(token_type, lexeme, True, location)
        if token_type is TokenType.FALSE:
            return Token(token_type, lexeme, False, location)
        if token_type is not None:
            return Token(token_type, lexeme, None, location)
        return Token(TokenType.IDENTIFIER, lexeme, lexeme, location)

    def _tokenize_string(self, location: SourceLocation) -> Token:
        """Tokenize a string literal. No escape sequences; newlines allowed."""
        start_pos = self.pos
        end = self.source.find('"', self.pos + 1)

        if end == -1:
            self._advance_by(len(self.source) - self.pos)
            return Token(
                TokenType.INVALID,
                self.source[start_pos:],
                "Unterminated string literal",
                location
            )

        self._advance_by(end + 1 - self.pos)
        lexeme = self.source[start_pos:self.pos]
        return Token(TokenType.STRING, lexeme, lexeme[1:-1], location)

    def _skip_whitespace_and_comments(self):
        """Skip whitespace and // line comments."""
        while self.pos < len(self.source):
            if self.source[self.pos].isspace():
                self._advance()
                continue

            if self.source.startswith('//', self.pos):
                while self.pos < len(self.source) and self.source[self.pos] != '\n':
                    self._advance()
                continue

            break

    def _advance(self):
        """Advance position by one character, updating line/column."""
        if self.pos < len(self.source):
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _advance_by(self, count: int):
        """Advance position by multiple characters."""
        for _ in range(count):
            self._advance()


def tokenize_string(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting

    Returns:
        List of tokens

    Raises:
        LexerError: If the source contains an unrecognized sequence
    """
    tokens = Lexer(source, filename).tokenize()

    for token in tokens:
        if token.type == TokenType.INVALID:
            raise error_from_token(token)

    return tokens


def tokenize_file(filepath: str) -> List[Token]:
    """
    Convenience function to tokenize a source file.

    Raises:
        LexerError: If lexing fails
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return tokenize_string(source, filepath)
