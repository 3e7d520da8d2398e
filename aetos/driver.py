"""
Pipeline driver chaining the Aetos stages.

    source -> tokens -> Program -> checked -> optimized -> RuntimeValue

Each stage raises its own error type (LexerError, ParseError,
TypeCheckError, InterpreterError); nothing here catches them.
"""

import logging
from pathlib import Path
from typing import Optional

from .analyzer import TypeChecker
from .interpreter import Interpreter, InterpreterConfiguration, RuntimeValue
from .optimizer import Optimizer, OptimizerConfiguration
from .parser import Program, parse_string

logger = logging.getLogger(__name__)


def check_source(source: str, filename: str = "<string>") -> Program:
    """Lex, parse and type-check `source`; return the checked Program."""
    program = parse_string(source, filename)
    TypeChecker().check_program(program)
    logger.debug("%s: %d functions, %d structs checked",
                 filename, len(program.functions), len(program.structs))
    return program


def compile_source(source: str, filename: str = "<string>",
                   optimizer_config: Optional[OptimizerConfiguration] = None,
                   optimize: bool = True) -> Program:
    """Check `source` and, unless `optimize` is False, run the optimizer over it."""
    program = check_source(source, filename)
    if optimize:
        program = Optimizer(optimizer_config).optimize(program)
    return program


def run_source(source: str, filename: str = "<string>", optimize: bool = True,
               interpreter: Optional[Interpreter] = None) -> RuntimeValue:
    """Compile and execute `source`, returning the value of `main`."""
    program = compile_source(source, filename, optimize=optimize)
    interpreter = interpreter or Interpreter()
    return interpreter.execute_program(program)


def run_file(filepath: str, optimize: bool = True,
             config: Optional[InterpreterConfiguration] = None,
             **interpreter_options) -> RuntimeValue:
    """Compile and execute the Aetos source file at `filepath`."""
    path = Path(filepath)
    source = path.read_text(encoding="utf-8")
    interpreter = Interpreter(config, **interpreter_options)
    return run_source(source, str(path), optimize=optimize, interpreter=interpreter)
