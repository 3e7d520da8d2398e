"""
Signatures of the host-provided builtin functions.

The interpreter implements the same names in `aetos.interpreter.builtins`.
"""

from typing import Dict

from ..parser.ast_nodes import I32, F32, BOOL, STRING
from .symbol_table import FunctionSignature


BUILTIN_SIGNATURES: Dict[str, FunctionSignature] = {
    # Output
    "print": FunctionSignature([I32]),
    "print_i32": FunctionSignature([I32]),
    "print_string": FunctionSignature([STRING]),

    # Embedded stubs
    "gpio_set": FunctionSignature([I32, I32]),
    "gpio_toggle": FunctionSignature([I32]),
    "delay": FunctionSignature([I32]),

    # Graphics: x, y, then r, g, b channels last
    "init_graphics": FunctionSignature([I32, I32, STRING]),
    "clear_screen": FunctionSignature([I32] * 3),
    "draw_pixel": FunctionSignature([I32] * 5),
    "draw_rect": FunctionSignature([I32] * 7),
    "draw_circle": FunctionSignature([I32] * 6),
    "draw_line": FunctionSignature([I32] * 7),
    "render": FunctionSignature([]),

    # Timing and input
    "get_time": FunctionSignature([], F32),
    "sleep": FunctionSignature([I32]),
    "is_key_pressed": FunctionSignature([I32], BOOL),
}
