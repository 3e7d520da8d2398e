"""
Aetos Language Package

Front end and execution engine for Aetos, a small statically typed
procedural language with move/borrow ownership markers.

Architecture:
    aetos/
    ├── lexer/           # Tokenization
    ├── parser/          # Recursive-descent parsing into a dataclass AST
    ├── analyzer/        # Type checking and ownership-state tracking
    ├── optimizer/       # Constant folding, dead-code elimination, inlining
    ├── interpreter/     # Tree-walking execution and graphics capability
    ├── driver.py        # Stage chaining
    └── cli.py           # `aetosc` command line
"""

__version__ = "0.3.0"

from .lexer import Lexer, tokenize_string
from .parser import Parser, parse_string, parse_file
from .analyzer import TypeChecker, check_program
from .optimizer import Optimizer, OptimizerConfiguration, optimize_program
from .interpreter import Interpreter, InterpreterConfiguration, RuntimeValue
from .driver import check_source, compile_source, run_source, run_file

__all__ = [
    "Lexer", "tokenize_string",
    "Parser", "parse_string", "parse_file",
    "TypeChecker", "check_program",
    "Optimizer", "OptimizerConfiguration", "optimize_program",
    "Interpreter", "InterpreterConfiguration", "RuntimeValue",
    "check_source", "compile_source", "run_source", "run_file",
]
