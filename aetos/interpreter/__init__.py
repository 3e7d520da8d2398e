"""
Aetos Interpreter Package

Tree-walking execution of Aetos programs:
- Runtime values (i32 integers, f32 floats, booleans, strings, structs)
- Host builtins (printing, timing, drawing, key input)
- Pluggable graphics capability with a headless numpy implementation
"""

from .interpreter import (
    Interpreter, InterpreterConfiguration, CallStack, run_program, uses_graphics,
)
from .values import RuntimeValue, ValueKind
from .builtins import BUILTINS, GRAPHICS_BUILTINS, Builtin
from .graphics import GraphicsCapability, HeadlessGraphics, KEY_CODES
from .errors import InterpreterError, RuntimeErrorKind

__all__ = [
    # Execution
    "Interpreter", "InterpreterConfiguration", "CallStack", "run_program", "uses_graphics",

    # Values and builtins
    "RuntimeValue", "ValueKind", "BUILTINS", "GRAPHICS_BUILTINS", "Builtin",

    # Graphics
    "GraphicsCapability", "HeadlessGraphics", "KEY_CODES",

    # Error handling
    "InterpreterError", "RuntimeErrorKind",
]
