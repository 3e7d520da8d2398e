"""
Error handling for the Aetos lexer.

Provides error reporting with source location information
and IDE-friendly diagnostics.
"""

from typing import Optional, List
from dataclasses import dataclass
from .tokens import SourceLocation, Token


@dataclass
class Diagnostic:
    """Base class for compiler diagnostics (errors, warnings, info)."""
    message: str
    location: Optional[SourceLocation]
    severity: str  # "error", "warning", "info", "hint"
    code: Optional[str] = None
    help_text: Optional[str] = None
    suggestions: Optional[List[str]] = None

    def __str__(self) -> str:
        severity_prefix = self.severity.upper()
        if self.code:
            severity_prefix += f"[{self.code}]"
        result = f"{severity_prefix}: {self.message}\n"
        if self.location is not None:
            result += f"  --> {self.location}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        if self.suggestions:
            result += "  suggestions:\n"
            for suggestion in self.suggestions:
                result += f"    - {suggestion}\n"

        return result


class LexerError(Exception):
    """
    Exception raised when the source contains an unrecognized sequence.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.message = message
        self.location = location
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


def describe_invalid_character(char: str) -> str:
    """Describe an invalid character for an INVALID token."""
    if char.isprintable():
        return f"Invalid character: '{char}'"
    return f"Invalid character (U+{ord(char):04X})"


def error_from_token(token: Token) -> LexerError:
    """Turn an INVALID token produced by the lexer into a LexerError."""
    message = token.value or f"Unrecognized input: '{token.lexeme}'"

    if message.startswith("Unterminated"):
        return LexerError(
            message=message,
            location=token.location,
            code="L002",
            help_text="String literals must be closed with a matching \" quote.",
            suggestions=["Add a closing \" quote"]
        )
    if message.startswith("Integer literal"):
        return LexerError(
            message=message,
            location=token.location,
            code="L003",
            help_text="Integer literals must fit in a signed 32-bit integer.",
        )
    return LexerError(
        message=message,
        location=token.location,
        code="L001",
        help_text=f"The text '{token.lexeme}' is not valid in Aetos source code.",
    )
