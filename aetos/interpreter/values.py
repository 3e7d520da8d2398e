"""
Runtime values produced by the interpreter.

Integers are kept wrapped to the signed 32-bit range, floats are numpy
float32 scalars so that arithmetic rounds the way the language's `f32` does.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np

from ..arith import wrap_i32


class ValueKind(Enum):
    INTEGER = "Integer"
    FLOAT = "Float"
    BOOLEAN = "Boolean"
    STRING = "String"
    STRUCT = "Struct"
    VOID = "Void"


@dataclass
class RuntimeValue:
    """A tagged runtime value. Struct values keep their fields in `value`."""
    kind: ValueKind
    value: Any = None
    struct_name: Optional[str] = None

    @classmethod
    def integer(cls, value: int) -> 'RuntimeValue':
        return cls(ValueKind.INTEGER, wrap_i32(int(value)))

    @classmethod
    def float32(cls, value) -> 'RuntimeValue':
        return cls(ValueKind.FLOAT, np.float32(value))

    @classmethod
    def boolean(cls, value: bool) -> 'RuntimeValue':
        return cls(ValueKind.BOOLEAN, bool(value))

    @classmethod
    def string(cls, value: str) -> 'RuntimeValue':
        return cls(ValueKind.STRING, value)

    @classmethod
    def struct(cls, name: str, fields: Dict[str, 'RuntimeValue']) -> 'RuntimeValue':
        return cls(ValueKind.STRUCT, dict(fields), struct_name=name)

    @classmethod
    def void(cls) -> 'RuntimeValue':
        return cls(ValueKind.VOID)

    @property
    def is_numeric(self) -> bool:
        return self.kind in (ValueKind.INTEGER, ValueKind.FLOAT)

    def is_truthy(self) -> bool:
        if self.kind is ValueKind.BOOLEAN:
            return self.value
        if self.is_numeric:
            return bool(self.value != 0)
        return False

    def get_field(self, name: str) -> Optional['RuntimeValue']:
        if self.kind is not ValueKind.STRUCT:
            return None
        return self.value.get(name)

    def __str__(self) -> str:
        if self.kind is ValueKind.BOOLEAN:
            return "true" if self.value else "false"
        if self.kind is ValueKind.STRUCT:
            fields = ", ".join(f"{name}: {value}" for name, value in self.value.items())
            return f"{self.struct_name} {{ {fields} }}"
        if self.kind is ValueKind.VOID:
            return "void"
        return str(self.value)
