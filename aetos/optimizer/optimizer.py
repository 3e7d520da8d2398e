"""
Optimizer driver.

Runs constant folding, dead-code elimination and bounded inlining exactly
once each, in that order. The order matters and a second run is not
guaranteed to be a no-op: inlining can expose new foldable constants.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from ..parser.ast_nodes import Program
from .base import OptimizationPass
from .constant_folding import ConstantFoldingPass
from .dead_code import DeadCodeEliminationPass
from .inlining import InliningPass

logger = logging.getLogger(__name__)


@dataclass
class OptimizerConfiguration:
    """Which passes run, and the inlining bounds."""
    constant_folding: bool = True
    dead_code_elimination: bool = True
    inline_functions: bool = True
    max_inline_statements: int = 5
    max_inline_params: int = 3


class Optimizer:
    """
    Applies the enabled passes to a Program and returns the rewritten copy.
    """

    def __init__(self, config: OptimizerConfiguration = None):
        self.config = config or OptimizerConfiguration()
        self.passes: List[OptimizationPass] = []

        if self.config.constant_folding:
            self.passes.append(ConstantFoldingPass())
        if self.config.dead_code_elimination:
            self.passes.append(DeadCodeEliminationPass())
        if self.config.inline_functions:
            self.passes.append(InliningPass(self.config.max_inline_statements,
                                            self.config.max_inline_params))

    def optimize(self, program: Program) -> Program:
        for optimization_pass in self.passes:
            program = optimization_pass.run_on_program(program)
        logger.debug("optimizer ran %d passes", len(self.passes))
        return program

    def get_optimization_report(self) -> Dict[str, Any]:
        return {p.name: p.stats.copy() for p in self.passes}


def optimize_program(program: Program, config: OptimizerConfiguration = None) -> Program:
    """Convenience function: run the default pass pipeline once."""
    return Optimizer(config).optimize(program)
