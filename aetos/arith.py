"""
32-bit integer arithmetic shared by the constant folder and the interpreter.

Aetos integers are signed 32-bit values: results wrap around on overflow and
division truncates toward zero. Keeping one implementation guarantees that a
folded constant equals what the interpreter would have computed.
"""

from typing import Optional

from .parser.ast_nodes import BinaryOperator


I32_MIN = -2**31
I32_MAX = 2**31 - 1


def wrap_i32(value: int) -> int:
    """Wrap an arbitrary Python int into the signed 32-bit range."""
    value &= 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def saturate_i32(value: float) -> int:
    """Truncate a finite float toward zero, clamped to the signed 32-bit range."""
    return int(max(min(value, I32_MAX), I32_MIN))


def divide_i32(left: int, right: int) -> int:
    """Integer division truncating toward zero. `right` must be non-zero."""
    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        quotient = -quotient
    return wrap_i32(quotient)


def integer_arithmetic(operator: BinaryOperator, left: int, right: int) -> Optional[int]:
    """Evaluate + - * / on two i32 values; None for division by zero."""
    if operator is BinaryOperator.ADD:
        return wrap_i32(left + right)
    if operator is BinaryOperator.SUBTRACT:
        return wrap_i32(left - right)
    if operator is BinaryOperator.MULTIPLY:
        return wrap_i32(left * right)
    if operator is BinaryOperator.DIVIDE:
        if right == 0:
            return None
        return divide_i32(left, right)
    raise ValueError(f"not an arithmetic operator: {operator.value}")


def compare(operator: BinaryOperator, left, right) -> bool:
    """Evaluate a comparison operator on two numbers (or two bools for ==, !=)."""
    if operator is BinaryOperator.EQUAL:
        return left == right
    if operator is BinaryOperator.NOT_EQUAL:
        return left != right
    if operator is BinaryOperator.LESS_THAN:
        return left < right
    if operator is BinaryOperator.GREATER_THAN:
        return left > right
    if operator is BinaryOperator.LESS_EQUAL:
        return left <= right
    if operator is BinaryOperator.GREATER_EQUAL:
        return left >= right
    raise ValueError(f"not a comparison operator: {operator.value}")
