"""
Runtime error handling for the Aetos interpreter.

A runtime error aborts the current program run and propagates to whoever
called `Interpreter.execute_program`; the language has no way to catch it.
"""

from enum import Enum
from typing import List, Optional

from ..lexer.errors import Diagnostic
from ..lexer.tokens import SourceLocation


class RuntimeErrorKind(Enum):
    UNDEFINED_VARIABLE = "R001"
    UNDEFINED_FUNCTION = "R002"
    NOT_A_STRUCT = "R010"
    UNKNOWN_FIELD = "R011"
    DIVISION_BY_ZERO = "R020"
    TYPE_MISMATCH = "R021"
    INVALID_BUILTIN_ARGUMENTS = "R030"
    MISSING_MAIN = "R040"
    STACK_OVERFLOW = "R050"

    @property
    def code(self) -> str:
        return self.value


class InterpreterError(Exception):
    """
    Exception raised when evaluation of a program fails.

    `kind` identifies the failure; the message names the offending
    variable, function, field or operation.
    """

    def __init__(
        self,
        kind: RuntimeErrorKind,
        message: str,
        location: Optional[SourceLocation] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=kind.code,
            help_text=help_text,
            suggestions=suggestions
        )

    def __str__(self) -> str:
        return self.message


def create_undefined_variable_error(name: str) -> InterpreterError:
    return InterpreterError(RuntimeErrorKind.UNDEFINED_VARIABLE, f"Undefined variable: {name}")


def create_undefined_function_error(name: str) -> InterpreterError:
    return InterpreterError(RuntimeErrorKind.UNDEFINED_FUNCTION, f"Undefined function: {name}")


def create_division_by_zero_error() -> InterpreterError:
    return InterpreterError(
        RuntimeErrorKind.DIVISION_BY_ZERO,
        "Division by zero",
        help_text="Check the divisor before dividing."
    )


def create_type_mismatch_error(operation: str, left, right=None) -> InterpreterError:
    """Operands of a runtime operation have kinds it is not defined for."""
    if right is None:
        message = f"Type mismatch in {operation}: {left.kind.value}"
    else:
        message = f"Type mismatch in {operation}: {left.kind.value} and {right.kind.value}"
    return InterpreterError(RuntimeErrorKind.TYPE_MISMATCH, message)


def create_builtin_arguments_error(name: str, expected: str) -> InterpreterError:
    return InterpreterError(
        RuntimeErrorKind.INVALID_BUILTIN_ARGUMENTS,
        f"Invalid arguments for builtin '{name}'",
        help_text=f"'{name}' expects ({expected})."
    )


def create_stack_overflow_error(function_name: str, depth: int) -> InterpreterError:
    return InterpreterError(
        RuntimeErrorKind.STACK_OVERFLOW,
        f"Stack overflow: call to '{function_name}' at depth {depth}",
        help_text="Recursion is too deep; check the base case of recursive functions."
    )
