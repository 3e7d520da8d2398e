"""
Aetos Optimizer Package

Three structural passes over the AST, each returning a new tree:
constant folding, dead-code elimination and bounded inlining.
"""

from .optimizer import Optimizer, OptimizerConfiguration, optimize_program
from .base import OptimizationPass
from .constant_folding import ConstantFoldingPass, fold_binary
from .dead_code import DeadCodeEliminationPass, count_usages
from .inlining import InliningPass

__all__ = [
    "Optimizer",
    "OptimizerConfiguration",
    "optimize_program",
    "OptimizationPass",
    "ConstantFoldingPass",
    "DeadCodeEliminationPass",
    "InliningPass",
    "fold_binary",
    "count_usages",
]
