"""
Tree-walking interpreter for Aetos.

Executes a checked (and usually optimized) Program directly from its AST.
Every call gets a private frame on an explicit call stack, so a callee
cannot see its caller's locals. Within a function, `if`/`else` branches and
bare blocks discard whatever they declare or reassign, while `while` bodies
keep their changes after the loop ends.

If the program calls any drawing, timing or input builtin, a graphics
capability is created before `main` runs and is polled once per `render()`
call and once per loop iteration; a closed surface stops the running loop.
"""

import logging
import sys
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, TextIO

import numpy as np

from ..arith import compare, integer_arithmetic, saturate_i32
from ..parser.ast_nodes import (
    Assignment, BinaryExpr, BinaryOperator, Block, BoolLiteral, Borrow, Call,
    Expression, ExpressionStatement, FieldAccess, FloatLiteral, FunctionDecl,
    If, IntegerLiteral, Move, Program, Return, Statement, StringLiteral,
    StructInit, TypeCast, TypeKind, VariableDeclaration, VariableRef, While,
    walk,
)
from .builtins import BUILTINS, GRAPHICS_BUILTINS, Builtin
from .errors import (
    InterpreterError, RuntimeErrorKind, create_division_by_zero_error,
    create_stack_overflow_error, create_type_mismatch_error,
    create_undefined_function_error, create_undefined_variable_error,
)
from .graphics import GraphicsCapability, GraphicsFactory, HeadlessGraphics
from .values import RuntimeValue, ValueKind

logger = logging.getLogger(__name__)

Frame = Dict[str, RuntimeValue]


@dataclass
class InterpreterConfiguration:
    """Size and title of the graphics surface, if the program needs one."""
    width: int = 800
    height: int = 600
    title: str = "Aetos Program"


class _ReturnSignal(Exception):
    """Unwinds from a `return` statement to the enclosing call."""

    def __init__(self, value: RuntimeValue):
        super().__init__()
        self.value = value


class CallStack:
    """Stack of name -> value frames, one per active function call."""

    def __init__(self):
        self.frames: List[Frame] = []

    @property
    def depth(self) -> int:
        return len(self.frames)

    @property
    def current(self) -> Frame:
        return self.frames[-1]

    def push(self, frame: Frame) -> None:
        self.frames.append(frame)

    def pop(self) -> Frame:
        return self.frames.pop()

    def lookup(self, name: str) -> Optional[RuntimeValue]:
        return self.current.get(name)

    def bind(self, name: str, value: RuntimeValue) -> None:
        self.current[name] = value

    def snapshot(self) -> Frame:
        return dict(self.current)

    def restore(self, frame: Frame) -> None:
        self.frames[-1] = frame


def uses_graphics(program: Program) -> bool:
    """Whether any function calls a builtin that needs the graphics surface."""
    return any(isinstance(node, Call) and node.name in GRAPHICS_BUILTINS
               for node in walk(program))


def default_graphics_factory(width: int, height: int, title: str) -> GraphicsCapability:
    return HeadlessGraphics(width, height, title)


class Interpreter:
    """
    Evaluates Aetos programs.

    The output stream, the blocking sleep and the graphics factory are
    injectable so that embedding programs and tests can observe them.
    """

    def __init__(
        self,
        config: Optional[InterpreterConfiguration] = None,
        graphics_factory: Optional[GraphicsFactory] = None,
        output: Optional[TextIO] = None,
        sleep: Callable[[float], None] = time.sleep,
        builtins: Optional[Dict[str, Builtin]] = None
    ):
        self.config = config or InterpreterConfiguration()
        self.graphics_factory = graphics_factory or default_graphics_factory
        self.output = output if output is not None else sys.stdout
        self.sleep = sleep
        self.builtins = builtins if builtins is not None else BUILTINS

        self.functions: Dict[str, FunctionDecl] = {}
        self.call_stack = CallStack()
        self.graphics: Optional[GraphicsCapability] = None
        self.should_exit = False
        self.stats = {'calls': 0, 'loop_iterations': 0}
        self._start_time = time.monotonic()

    def elapsed_time(self) -> float:
        return time.monotonic() - self._start_time

    # Program and function execution

    def execute_program(self, program: Program) -> RuntimeValue:
        """Run `main` and return its value (Void if it returns nothing)."""
        self.functions = {function.name: function for function in program.functions}
        self.call_stack = CallStack()
        self.graphics = None
        self.should_exit = False

        main = self.functions.get("main")
        if main is None:
            raise InterpreterError(
                RuntimeErrorKind.MISSING_MAIN,
                "No main function found",
                help_text="Add an entry point: fn main() -> i32 { ... }"
            )

        if uses_graphics(program):
            config = self.config
            self.graphics = self.graphics_factory(config.width, config.height, config.title)
            logger.debug("graphics initialized (%dx%d)", config.width, config.height)

        result = self.call_function(main, [])
        logger.debug("program finished: %d calls, %d loop iterations",
                     self.stats['calls'], self.stats['loop_iterations'])
        return result

    def call_function(self, function: FunctionDecl, args: List[RuntimeValue]) -> RuntimeValue:
        if len(args) != len(function.params):
            raise InterpreterError(
                RuntimeErrorKind.TYPE_MISMATCH,
                f"Function '{function.name}' expects {len(function.params)} "
                f"arguments, got {len(args)}"
            )

        self.stats['calls'] += 1
        self.call_stack.push({param.name: arg for param, arg in zip(function.params, args)})
        try:
            self.execute_statements(function.body)
        except _ReturnSignal as signal:
            return signal.value
        except RecursionError as error:
            raise create_stack_overflow_error(function.name, self.call_stack.depth) from error
        finally:
            self.call_stack.pop()
        return RuntimeValue.void()

    # Statements

    def execute_statements(self, statements: List[Statement]) -> None:
        for stmt in statements:
            self.execute_statement(stmt)

    def execute_statement(self, stmt: Statement) -> None:
        if isinstance(stmt, VariableDeclaration):
            self.call_stack.bind(stmt.name, self.evaluate(stmt.initializer))
        elif isinstance(stmt, Assignment):
            value = self.evaluate(stmt.value)
            if self.call_stack.lookup(stmt.name) is None:
                raise create_undefined_variable_error(stmt.name)
            self.call_stack.bind(stmt.name, value)
        elif isinstance(stmt, Return):
            raise _ReturnSignal(self.evaluate(stmt.value))
        elif isinstance(stmt, ExpressionStatement):
            self.evaluate(stmt.expr)
        elif isinstance(stmt, Block):
            self._execute_scoped(stmt.statements)
        elif isinstance(stmt, If):
            if self.evaluate(stmt.condition).is_truthy():
                self._execute_scoped(stmt.then_branch)
            elif stmt.else_branch is not None:
                self._execute_scoped(stmt.else_branch)
        elif isinstance(stmt, While):
            self._execute_while(stmt)
        else:
            raise TypeError(f"unknown statement node: {type(stmt).__name__}")

    def _execute_scoped(self, statements: List[Statement]) -> None:
        saved = self.call_stack.snapshot()
        self.execute_statements(statements)
        self.call_stack.restore(saved)

    def _execute_while(self, stmt: While) -> None:
        # The body runs in the enclosing frame: its changes survive the loop.
        while self.evaluate(stmt.condition).is_truthy():
            self.execute_statements(stmt.body)
            self.stats['loop_iterations'] += 1

            if self.graphics is not None and not self.graphics.poll_input():
                self.should_exit = True
            if self.should_exit:
                break

    # Expressions

    def evaluate(self, expr: Expression) -> RuntimeValue:
        if isinstance(expr, IntegerLiteral):
            return RuntimeValue.integer(expr.value)
        if isinstance(expr, FloatLiteral):
            return RuntimeValue.float32(expr.value)
        if isinstance(expr, StringLiteral):
            return RuntimeValue.string(expr.value)
        if isinstance(expr, BoolLiteral):
            return RuntimeValue.boolean(expr.value)

        if isinstance(expr, VariableRef):
            value = self.call_stack.lookup(expr.name)
            if value is None:
                raise create_undefined_variable_error(expr.name)
            return value

        if isinstance(expr, BinaryExpr):
            left = self.evaluate(expr.left)
            right = self.evaluate(expr.right)
            return self.evaluate_binary(expr.operator, left, right)

        if isinstance(expr, Call):
            return self._evaluate_call(expr)

        if isinstance(expr, StructInit):
            fields = {name: self.evaluate(value) for name, value in expr.fields}
            return RuntimeValue.struct(expr.struct_name, fields)

        if isinstance(expr, FieldAccess):
            return self._evaluate_field_access(expr)

        if isinstance(expr, TypeCast):
            return self._evaluate_cast(expr)

        if isinstance(expr, (Move, Borrow)):
            return self.evaluate(expr.expr)

        raise TypeError(f"unknown expression node: {type(expr).__name__}")

    def _evaluate_call(self, call: Call) -> RuntimeValue:
        args = [self.evaluate(arg) for arg in call.args]

        builtin = self.builtins.get(call.name)
        if builtin is not None:
            return builtin(self, args)

        function = self.functions.get(call.name)
        if function is None:
            raise create_undefined_function_error(call.name)
        return self.call_function(function, args)

    def _evaluate_field_access(self, expr: FieldAccess) -> RuntimeValue:
        value = self.evaluate(expr.expr)
        if value.kind is not ValueKind.STRUCT:
            raise InterpreterError(RuntimeErrorKind.NOT_A_STRUCT, "Field access on non-struct value")

        field = value.get_field(expr.field_name)
        if field is None:
            raise InterpreterError(
                RuntimeErrorKind.UNKNOWN_FIELD,
                f"Unknown field '{expr.field_name}' on struct {value.struct_name}"
            )
        return field

    def _evaluate_cast(self, expr: TypeCast) -> RuntimeValue:
        value = self.evaluate(expr.expr)
        target = expr.target_type.kind

        if value.kind is ValueKind.INTEGER and target in (TypeKind.F32, TypeKind.F64):
            return RuntimeValue.float32(value.value)
        if value.kind is ValueKind.FLOAT and target in (TypeKind.I32, TypeKind.I64):
            if not np.isfinite(value.value):
                raise create_type_mismatch_error(f"cast to {expr.target_type}", value)
            return RuntimeValue.integer(saturate_i32(float(value.value)))
        return value

    def evaluate_binary(self, operator: BinaryOperator, left: RuntimeValue,
                        right: RuntimeValue) -> RuntimeValue:
        kinds = (left.kind, right.kind)

        if kinds == (ValueKind.INTEGER, ValueKind.INTEGER):
            if operator.is_arithmetic:
                result = integer_arithmetic(operator, left.value, right.value)
                if result is None:
                    raise create_division_by_zero_error()
                return RuntimeValue.integer(result)
            if operator.is_comparison:
                return RuntimeValue.boolean(compare(operator, left.value, right.value))

        elif left.is_numeric and right.is_numeric:
            # At least one side is Float: promote the other.
            lhs, rhs = np.float32(left.value), np.float32(right.value)
            if operator.is_arithmetic:
                return RuntimeValue.float32(self._float_arithmetic(operator, lhs, rhs))
            if operator.is_comparison:
                return RuntimeValue.boolean(compare(operator, lhs, rhs))

        elif kinds == (ValueKind.BOOLEAN, ValueKind.BOOLEAN):
            if operator is BinaryOperator.AND:
                return RuntimeValue.boolean(left.value and right.value)
            if operator is BinaryOperator.OR:
                return RuntimeValue.boolean(left.value or right.value)
            if operator in (BinaryOperator.EQUAL, BinaryOperator.NOT_EQUAL):
                return RuntimeValue.boolean(compare(operator, left.value, right.value))

        raise create_type_mismatch_error(f"'{operator.value}'", left, right)

    @staticmethod
    def _float_arithmetic(operator: BinaryOperator, left: np.float32, right: np.float32) -> np.float32:
        if operator is BinaryOperator.ADD:
            return left + right
        if operator is BinaryOperator.SUBTRACT:
            return left - right
        if operator is BinaryOperator.MULTIPLY:
            return left * right
        if right == 0:
            raise create_division_by_zero_error()
        return left / right


def run_program(program: Program, config: Optional[InterpreterConfiguration] = None,
                **kwargs) -> RuntimeValue:
    """Convenience function: execute `program` with a fresh interpreter."""
    return Interpreter(config, **kwargs).execute_program(program)
