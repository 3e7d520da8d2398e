"""
Structural rebuilding helpers for optimizer passes.

Both helpers return a brand new tree: every node is rebuilt (leaves are
shallow-copied, which is enough since their fields are immutable values), so
a pass never shares nodes with its input.
"""

from dataclasses import replace
from typing import Callable, List

from ..parser.ast_nodes import (
    Assignment, BinaryExpr, Block, Borrow, Call, Expression,
    ExpressionStatement, FieldAccess, If, Move, Return, Statement,
    StructInit, TypeCast, VariableDeclaration, While,
)

ExpressionRewriter = Callable[[Expression], Expression]


def rewrite_expression(expr: Expression, fn: ExpressionRewriter) -> Expression:
    """Rebuild `expr` bottom-up, applying `fn` to every rebuilt node."""
    if isinstance(expr, BinaryExpr):
        rebuilt = replace(expr,
                          left=rewrite_expression(expr.left, fn),
                          right=rewrite_expression(expr.right, fn))
    elif isinstance(expr, Call):
        rebuilt = replace(expr, args=[rewrite_expression(arg, fn) for arg in expr.args])
    elif isinstance(expr, StructInit):
        rebuilt = replace(expr, fields=[(name, rewrite_expression(value, fn))
                                        for name, value in expr.fields])
    elif isinstance(expr, (FieldAccess, TypeCast, Move, Borrow)):
        rebuilt = replace(expr, expr=rewrite_expression(expr.expr, fn))
    else:
        rebuilt = replace(expr)
    return fn(rebuilt)


def rewrite_statement(stmt: Statement, fn: ExpressionRewriter) -> Statement:
    """Rebuild `stmt`, rewriting every expression inside it with `fn`."""
    if isinstance(stmt, VariableDeclaration):
        return replace(stmt, initializer=rewrite_expression(stmt.initializer, fn))
    if isinstance(stmt, Assignment):
        return replace(stmt, value=rewrite_expression(stmt.value, fn))
    if isinstance(stmt, Return):
        return replace(stmt, value=rewrite_expression(stmt.value, fn))
    if isinstance(stmt, ExpressionStatement):
        return replace(stmt, expr=rewrite_expression(stmt.expr, fn))
    if isinstance(stmt, Block):
        return replace(stmt, statements=rewrite_statements(stmt.statements, fn))
    if isinstance(stmt, While):
        return replace(stmt,
                       condition=rewrite_expression(stmt.condition, fn),
                       body=rewrite_statements(stmt.body, fn))
    if isinstance(stmt, If):
        else_branch = None
        if stmt.else_branch is not None:
            else_branch = rewrite_statements(stmt.else_branch, fn)
        return replace(stmt,
                       condition=rewrite_expression(stmt.condition, fn),
                       then_branch=rewrite_statements(stmt.then_branch, fn),
                       else_branch=else_branch)
    raise TypeError(f"Unknown statement node: {type(stmt).__name__}")


def rewrite_statements(statements: List[Statement], fn: ExpressionRewriter) -> List[Statement]:
    return [rewrite_statement(stmt, fn) for stmt in statements]


def copy_statements(statements: List[Statement]) -> List[Statement]:
    """Fresh copy of a statement list with no shared nodes."""
    return rewrite_statements(statements, lambda expr: expr)
