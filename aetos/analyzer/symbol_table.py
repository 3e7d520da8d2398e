"""
Symbol tables for Aetos type checking.

A function body is checked against one flat `Scope` of variables. Nested
blocks take a snapshot on entry and restore it on exit, so declarations and
ownership changes made inside a block never leak out of it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..parser.ast_nodes import Type, VOID


class VariableState(Enum):
    """Ownership state of a variable binding."""
    AVAILABLE = "available"
    MOVED = "moved"
    BORROWED = "borrowed"


@dataclass
class VariableInfo:
    var_type: Type
    state: VariableState = VariableState.AVAILABLE
    mutable: bool = False


@dataclass(frozen=True)
class FunctionSignature:
    """Parameter types and return type of a user function or builtin."""
    params: List[Type]
    return_type: Type = VOID

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.params)
        return f"fn({params}) -> {self.return_type}"


@dataclass
class Scope:
    """Variables visible in the function body currently being checked."""
    variables: Dict[str, VariableInfo] = field(default_factory=dict)
    return_type: Optional[Type] = None

    def declare(self, name: str, info: VariableInfo) -> bool:
        """Bind a new name. Returns False if the name is already bound."""
        if name in self.variables:
            return False
        self.variables[name] = info
        return True

    def lookup(self, name: str) -> Optional[VariableInfo]:
        return self.variables.get(name)

    def set_state(self, name: str, state: VariableState):
        info = self.variables.get(name)
        if info is not None:
            self.variables[name] = VariableInfo(info.var_type, state, info.mutable)

    def snapshot(self) -> Dict[str, VariableInfo]:
        """Copy of the bindings, for restoring after a nested block."""
        return dict(self.variables)

    def restore(self, saved: Dict[str, VariableInfo]):
        self.variables = saved

    def clear(self):
        self.variables = {}
        self.return_type = None


@dataclass
class SymbolTable:
    """Program-wide tables: struct layouts, function signatures, current scope."""
    structs: Dict[str, Dict[str, Type]] = field(default_factory=dict)
    functions: Dict[str, FunctionSignature] = field(default_factory=dict)
    scope: Scope = field(default_factory=Scope)

    def lookup_field(self, struct_name: str, field_name: str) -> Optional[Type]:
        fields = self.structs.get(struct_name)
        if fields is None:
            return None
        return fields.get(field_name)
