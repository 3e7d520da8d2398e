"""
Common shape of optimizer passes.
"""

import logging
from dataclasses import replace
from typing import Dict

from ..parser.ast_nodes import FunctionDecl, Program
from .rewrite import copy_statements

logger = logging.getLogger(__name__)


class OptimizationPass:
    """
    A tree -> tree transformation over a whole Program.

    Subclasses implement `run_on_function`; `run_on_program` applies it to
    every function and returns a new Program, leaving the input untouched.
    Counters in `self.stats` accumulate across runs.
    """

    name = "pass"

    def __init__(self):
        self.stats: Dict[str, int] = {'functions_visited': 0}

    def run_on_program(self, program: Program) -> Program:
        functions = []
        for function in program.functions:
            self.stats['functions_visited'] += 1
            functions.append(self.run_on_function(function, program))

        structs = [replace(struct, fields=list(struct.fields)) for struct in program.structs]
        logger.debug("%s: %s", self.name, self.stats)
        return replace(program, functions=functions, structs=structs)

    def run_on_function(self, function: FunctionDecl, program: Program) -> FunctionDecl:
        return replace(function, params=list(function.params),
                       body=copy_statements(function.body))
