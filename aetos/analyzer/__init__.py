"""
Aetos Semantic Analyzer Package

Static checking of Aetos programs:
- Struct and function signature collection (forward references allowed)
- Type checking with one-directional numeric widening
- Ownership-state tracking (Available / Moved / Borrowed)
"""

from .type_checker import (
    TypeChecker, check_program, is_compatible, common_numeric_type, is_cast_allowed
)
from .symbol_table import SymbolTable, Scope, VariableInfo, VariableState, FunctionSignature
from .builtins import BUILTIN_SIGNATURES
from .errors import SemanticError, TypeCheckError, TypeErrorKind

__all__ = [
    # Main checker
    "TypeChecker", "check_program",
    "is_compatible", "common_numeric_type", "is_cast_allowed",

    # Symbol management
    "SymbolTable", "Scope", "VariableInfo", "VariableState", "FunctionSignature",
    "BUILTIN_SIGNATURES",

    # Error handling
    "SemanticError", "TypeCheckError", "TypeErrorKind",
]
