"""
Semantic analysis error handling for Aetos.

Type checking is fail-fast: the first error aborts the check. Each
TypeCheckError carries a `kind` and a `details` mapping with the offending
names and types so that callers and tests can inspect it without parsing
the message.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from ..lexer.tokens import SourceLocation
from ..lexer.errors import Diagnostic
from ..parser.ast_nodes import ASTNode, Type


class SemanticError(Exception):
    """
    Exception raised when semantic analysis encounters a fatal error.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation],
        node: Optional[ASTNode] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.message = message
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )
        self.node = node

    def __str__(self) -> str:
        return str(self.diagnostic)


class TypeErrorKind(Enum):
    TYPE_MISMATCH = "S001"
    UNDEFINED_STRUCT = "S002"
    UNDEFINED_VARIABLE = "S010"
    UNDEFINED_FUNCTION = "S015"
    UNDEFINED_FIELD = "S016"
    DUPLICATE_VARIABLE = "S011"
    DUPLICATE_FUNCTION = "S012"
    DUPLICATE_STRUCT = "S013"
    DUPLICATE_FIELD = "S014"
    USE_AFTER_MOVE = "S040"
    VARIABLE_ALREADY_MOVED = "S044"
    PARAMETER_COUNT_MISMATCH = "S050"
    INVALID_RETURN_TYPE = "S053"
    NON_BOOLEAN_CONDITION = "S061"


class TypeCheckError(SemanticError):
    """A semantic error of one specific kind."""

    def __init__(
        self,
        kind: TypeErrorKind,
        message: str,
        node: Optional[ASTNode] = None,
        help_text: Optional[str] = None,
        **details: Any
    ):
        location = node.span.start if node is not None and node.span is not None else None
        super().__init__(message, location, node=node, code=kind.value, help_text=help_text)
        self.kind = kind
        self.details: Dict[str, Any] = details


# Helper functions for creating specific type errors

def create_type_mismatch_error(expected: Type, found: Type,
                               node: Optional[ASTNode] = None) -> TypeCheckError:
    return TypeCheckError(
        TypeErrorKind.TYPE_MISMATCH,
        f"Type mismatch: expected {expected}, found {found}",
        node,
        help_text=f"The expression has type '{found}' but '{expected}' was expected.",
        expected=expected,
        found=found,
    )


def create_operand_mismatch_error(operator: str, left: Type, right: Type,
                                  node: Optional[ASTNode] = None) -> TypeCheckError:
    return TypeCheckError(
        TypeErrorKind.TYPE_MISMATCH,
        f"Type mismatch: cannot apply '{operator}' to {left} and {right}",
        node,
        expected=left,
        found=right,
    )


def create_undefined_error(kind: TypeErrorKind, what: str, name: str,
                           node: Optional[ASTNode] = None) -> TypeCheckError:
    """Create an Undefined{Variable,Function,Struct} error."""
    return TypeCheckError(
        kind,
        f"Undefined {what}: '{name}'",
        node,
        help_text=f"'{name}' is not declared where it is used.",
        name=name,
    )


def create_undefined_field_error(struct_name: str, field_name: str,
                                 node: Optional[ASTNode] = None) -> TypeCheckError:
    return TypeCheckError(
        TypeErrorKind.UNDEFINED_FIELD,
        f"Struct '{struct_name}' has no field '{field_name}'",
        node,
        struct_name=struct_name,
        name=field_name,
    )


def create_duplicate_error(kind: TypeErrorKind, what: str, name: str,
                           node: Optional[ASTNode] = None) -> TypeCheckError:
    """Create a Duplicate{Variable,Function,Struct,Field} error."""
    return TypeCheckError(
        kind,
        f"Duplicate {what}: '{name}' is already declared",
        node,
        name=name,
    )


def create_parameter_count_error(function_name: str, expected: int, found: int,
                                 node: Optional[ASTNode] = None) -> TypeCheckError:
    return TypeCheckError(
        TypeErrorKind.PARAMETER_COUNT_MISMATCH,
        f"Function '{function_name}' expects {expected} arguments, got {found}",
        node,
        name=function_name,
        expected=expected,
        found=found,
    )


def create_invalid_return_error(expected: Type, found: Type,
                                node: Optional[ASTNode] = None) -> TypeCheckError:
    return TypeCheckError(
        TypeErrorKind.INVALID_RETURN_TYPE,
        f"Invalid return type: function returns {expected}, found {found}",
        node,
        expected=expected,
        found=found,
    )


def create_invalid_cast_error(source: Type, target: Type,
                              node: Optional[ASTNode] = None) -> TypeCheckError:
    return TypeCheckError(
        TypeErrorKind.TYPE_MISMATCH,
        f"Cannot cast {source} to {target}",
        node,
        help_text="Allowed casts are i32<->f32, i32<->i64 and f32<->f64.",
        expected=target,
        found=source,
    )


def create_ownership_error(kind: TypeErrorKind, name: str,
                           node: Optional[ASTNode] = None) -> TypeCheckError:
    """Create a UseAfterMove or VariableAlreadyMoved error."""
    if kind is TypeErrorKind.VARIABLE_ALREADY_MOVED:
        message = f"Variable '{name}' has already been moved"
    else:
        message = f"Use of moved value '{name}'"
    return TypeCheckError(
        kind,
        message,
        node,
        help_text=f"The value '{name}' was moved and can no longer be used.",
        name=name,
    )


def create_non_boolean_condition_error(found: Type,
                                       node: Optional[ASTNode] = None) -> TypeCheckError:
    return TypeCheckError(
        TypeErrorKind.NON_BOOLEAN_CONDITION,
        f"Condition must be bool, found {found}",
        node,
        found=found,
    )
