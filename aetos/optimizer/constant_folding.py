"""
Constant folding.

Rewrites binary expressions whose operands are both literals into a single
literal, bottom-up, so `5 + 3 * 2` becomes `11`. Only integer arithmetic,
integer comparisons and `&&`/`||` over boolean literals are folded. Division
by a literal zero is left in place so it still fails at run time.
"""

from dataclasses import replace
from typing import Optional

from ..arith import compare, integer_arithmetic
from ..parser.ast_nodes import (
    BinaryExpr, BinaryOperator, BoolLiteral, Expression, FunctionDecl,
    IntegerLiteral, Program,
)
from .base import OptimizationPass
from .rewrite import rewrite_statements


def fold_binary(expr: BinaryExpr) -> Optional[Expression]:
    """The literal `expr` evaluates to, or None when it cannot be folded."""
    left, right, operator = expr.left, expr.right, expr.operator

    if isinstance(left, IntegerLiteral) and isinstance(right, IntegerLiteral):
        if operator.is_arithmetic:
            value = integer_arithmetic(operator, left.value, right.value)
            if value is None:
                return None
            return IntegerLiteral(value, span=expr.span)
        if operator.is_comparison:
            return BoolLiteral(compare(operator, left.value, right.value), span=expr.span)
        return None

    if isinstance(left, BoolLiteral) and isinstance(right, BoolLiteral):
        if operator is BinaryOperator.AND:
            return BoolLiteral(left.value and right.value, span=expr.span)
        if operator is BinaryOperator.OR:
            return BoolLiteral(left.value or right.value, span=expr.span)

    return None


class ConstantFoldingPass(OptimizationPass):
    """Folds literal-only binary expressions throughout every function."""

    name = "constant_folding"

    def __init__(self):
        super().__init__()
        self.stats['expressions_folded'] = 0

    def _fold(self, expr: Expression) -> Expression:
        if isinstance(expr, BinaryExpr):
            folded = fold_binary(expr)
            if folded is not None:
                self.stats['expressions_folded'] += 1
                return folded
        return expr

    def run_on_function(self, function: FunctionDecl, program: Program) -> FunctionDecl:
        return replace(function, params=list(function.params),
                       body=rewrite_statements(function.body, self._fold))
