"""
Dead-code elimination.

Counts, per function, how often each variable name is used: every variable
reference counts, and so does every assignment target, so that an assignment
keeps its declaration (and the side effects of its right-hand side) alive.
Declarations at the top level of the function body whose name is never used
are then removed. Parameters and nested blocks are left alone.
"""

from collections import Counter
from dataclasses import replace

from ..parser.ast_nodes import (
    Assignment, FunctionDecl, Program, VariableDeclaration, VariableRef, walk,
)
from .base import OptimizationPass
from .rewrite import copy_statements


def count_usages(function: FunctionDecl) -> Counter:
    usages: Counter = Counter()
    for stmt in function.body:
        for node in walk(stmt):
            if isinstance(node, VariableRef):
                usages[node.name] += 1
            elif isinstance(node, Assignment):
                usages[node.name] += 1
    return usages


class DeadCodeEliminationPass(OptimizationPass):

    name = "dead_code_elimination"

    def __init__(self):
        super().__init__()
        self.stats['declarations_removed'] = 0

    def run_on_function(self, function: FunctionDecl, program: Program) -> FunctionDecl:
        usages = count_usages(function)

        kept = []
        for stmt in function.body:
            if isinstance(stmt, VariableDeclaration) and usages[stmt.name] == 0:
                self.stats['declarations_removed'] += 1
                continue
            kept.append(stmt)

        return replace(function, params=list(function.params), body=copy_statements(kept))
