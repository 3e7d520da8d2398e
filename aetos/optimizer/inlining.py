"""
Bounded function inlining.

A call used directly as a statement, `f(a, b);`, is replaced by one
`let` per parameter binding the argument, followed by a copy of the callee's
body. Local names are not renamed, so a callee local can collide with a
caller variable of the same name.

A callee is inlinable when it is small (at most `max_statements` top-level
statements and `max_params` parameters), is not a print-family or other
builtin name, and returns at most once, as its final top-level statement.
That final `return e;` becomes the statement `e;` so its value is discarded,
exactly as the original call statement discarded it.
"""

from dataclasses import replace
from typing import Dict, List, Optional

from ..analyzer.builtins import BUILTIN_SIGNATURES
from ..parser.ast_nodes import (
    Call, ExpressionStatement, FunctionDecl, Program, Return, Statement,
    VariableDeclaration, walk,
)
from .base import OptimizationPass
from .rewrite import copy_statements, rewrite_expression

PRINT_PREFIX = "print"


class InliningPass(OptimizationPass):

    name = "inline_functions"

    def __init__(self, max_statements: int = 5, max_params: int = 3):
        super().__init__()
        self.max_statements = max_statements
        self.max_params = max_params
        self.stats['calls_inlined'] = 0
        self._inlinable: Dict[str, FunctionDecl] = {}

    def is_inlinable(self, function: FunctionDecl) -> bool:
        if len(function.body) > self.max_statements:
            return False
        if len(function.params) > self.max_params:
            return False
        if function.name.startswith(PRINT_PREFIX) or function.name in BUILTIN_SIGNATURES:
            return False

        returns = [node for stmt in function.body for node in walk(stmt)
                   if isinstance(node, Return)]
        return not returns or (len(returns) == 1 and returns[0] is function.body[-1])

    def run_on_program(self, program: Program) -> Program:
        self._inlinable = {f.name: f for f in program.functions if self.is_inlinable(f)}
        return super().run_on_program(program)

    def run_on_function(self, function: FunctionDecl, program: Program) -> FunctionDecl:
        body: List[Statement] = []
        for stmt in function.body:
            callee = self._inline_target(stmt)
            if callee is None:
                body.extend(copy_statements([stmt]))
                continue

            body.extend(self._expand_call(callee, stmt.expr))
            self.stats['calls_inlined'] += 1

        return replace(function, params=list(function.params), body=body)

    def _inline_target(self, stmt: Statement) -> Optional[FunctionDecl]:
        if not (isinstance(stmt, ExpressionStatement) and isinstance(stmt.expr, Call)):
            return None
        callee = self._inlinable.get(stmt.expr.name)
        if callee is None or len(callee.params) != len(stmt.expr.args):
            return None
        return callee

    def _expand_call(self, callee: FunctionDecl, call: Call) -> List[Statement]:
        statements: List[Statement] = [
            VariableDeclaration(param.name, param.param_type,
                                rewrite_expression(arg, lambda expr: expr),
                                span=call.span)
            for param, arg in zip(callee.params, call.args)
        ]

        inlined = copy_statements(callee.body)
        if inlined and isinstance(inlined[-1], Return):
            last = inlined[-1]
            inlined[-1] = ExpressionStatement(last.value, span=last.span)

        statements.extend(inlined)
        return statements
