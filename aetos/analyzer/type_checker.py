"""
Type checker for Aetos.

Runs in two passes over a Program:

1. Declaration collection - struct layouts and the function signature table
   (seeded with the builtin catalog) so functions may call each other
   regardless of declaration order.
2. Body checking - each function body is checked against a fresh scope
   seeded from its parameters.

Besides types, every variable carries an ownership state. `move(x)` marks x
as Moved and any later read of x is rejected; `borrow(x)` marks x as
Borrowed, which is recorded but never rejected. This is a deliberately
simple discipline, not a borrow checker.

The checker never modifies the tree.
"""

import logging
from typing import Dict, List, Optional

from ..parser.ast_nodes import (
    Assignment, BinaryExpr, BinaryOperator, Block, BoolLiteral, Borrow, Call,
    Expression, ExpressionStatement, FieldAccess, FloatLiteral, FunctionDecl,
    If, IntegerLiteral, Move, Program, Return, Statement, StringLiteral,
    StructInit, Type, TypeCast, VariableDeclaration, VariableRef, While,
    I32, I64, F32, F64, BOOL, STRING,
)
from .builtins import BUILTIN_SIGNATURES
from .errors import (
    TypeErrorKind, create_type_mismatch_error, create_operand_mismatch_error,
    create_undefined_error, create_undefined_field_error, create_duplicate_error,
    create_parameter_count_error, create_invalid_return_error,
    create_invalid_cast_error, create_ownership_error,
    create_non_boolean_condition_error
)
from .symbol_table import (
    FunctionSignature, SymbolTable, VariableInfo, VariableState
)

logger = logging.getLogger(__name__)


# (target, source) pairs accepted by implicit widening
WIDENING_CONVERSIONS = {
    (F32, I32),
    (F64, I32),
    (F64, F32),
    (I64, I32),
}

# (source, target) pairs accepted by an explicit `as` cast, besides identity
ALLOWED_CASTS = {
    (I32, F32), (F32, I32),
    (I32, I64), (I64, I32),
    (F32, F64), (F64, F32),
}

COMMON_NUMERIC_TYPES = {
    frozenset({I32, F32}): F32,
    frozenset({I32, F64}): F64,
    frozenset({F32, F64}): F64,
    frozenset({I32, I64}): I64,
}

ANY_STRUCT = Type.struct("<struct>")


def is_compatible(target: Type, source: Type) -> bool:
    """Whether a value of type `source` may be used where `target` is expected."""
    return target == source or (target, source) in WIDENING_CONVERSIONS


def common_numeric_type(left: Type, right: Type) -> Optional[Type]:
    """The wider of two numeric types, or None if they do not combine."""
    if not (left.is_numeric and right.is_numeric):
        return None
    if left == right:
        return left
    return COMMON_NUMERIC_TYPES.get(frozenset({left, right}))


def is_cast_allowed(source: Type, target: Type) -> bool:
    return source == target or (source, target) in ALLOWED_CASTS


class TypeChecker:
    """
    Validates types and ownership states of a Program.

    Checking is fail-fast: `check_program` raises the first TypeCheckError
    it finds and returns None when the whole program is well typed.
    """

    def __init__(self, builtins: Optional[Dict[str, FunctionSignature]] = None):
        self.builtins = dict(BUILTIN_SIGNATURES if builtins is None else builtins)
        self.symbols = SymbolTable()

    def check_program(self, program: Program) -> None:
        """
        Check a whole program.

        Raises:
            TypeCheckError: On the first type or ownership error
        """
        self.symbols = SymbolTable(functions=dict(self.builtins))

        self._collect_declarations(program)
        for function in program.functions:
            self._check_function(function)

        logger.debug("type checked %d functions", len(program.functions))

    # ========================================================================
    # Pass 1: Declaration collection
    # ========================================================================

    def _collect_declarations(self, program: Program):
        for struct in program.structs:
            if struct.name in self.symbols.structs:
                raise create_duplicate_error(
                    TypeErrorKind.DUPLICATE_STRUCT, "struct", struct.name, struct)

            fields: Dict[str, Type] = {}
            for struct_field in struct.fields:
                if struct_field.name in fields:
                    raise create_duplicate_error(
                        TypeErrorKind.DUPLICATE_FIELD, "field", struct_field.name, struct)
                fields[struct_field.name] = struct_field.field_type
            self.symbols.structs[struct.name] = fields

        for struct in program.structs:
            for struct_field in struct.fields:
                self._require_declared(struct_field.field_type, struct)

        user_functions = set()
        for function in program.functions:
            if function.name in user_functions:
                raise create_duplicate_error(
                    TypeErrorKind.DUPLICATE_FUNCTION, "function", function.name, function)
            user_functions.add(function.name)

            for param in function.params:
                self._require_declared(param.param_type, function)
            self._require_declared(function.return_type, function)

            # A user function with a builtin's name replaces its signature here
            self.symbols.functions[function.name] = FunctionSignature(
                [param.param_type for param in function.params],
                function.return_type
            )

    def _require_declared(self, declared: Type, node):
        if declared.is_struct and declared.struct_name not in self.symbols.structs:
            raise create_undefined_error(
                TypeErrorKind.UNDEFINED_STRUCT, "struct", declared.struct_name, node)

    # ========================================================================
    # Pass 2: Function bodies
    # ========================================================================

    def _check_function(self, function: FunctionDecl):
        scope = self.symbols.scope
        scope.clear()
        scope.return_type = function.return_type

        for param in function.params:
            if not scope.declare(param.name, VariableInfo(param.param_type)):
                raise create_duplicate_error(
                    TypeErrorKind.DUPLICATE_VARIABLE, "variable", param.name, function)

        self._check_statements(function.body)

    def _check_statements(self, statements: List[Statement]):
        for statement in statements:
            self._check_statement(statement)

    def _check_nested(self, statements: List[Statement]):
        """Check a nested block; its bindings and state changes are discarded."""
        scope = self.symbols.scope
        saved = scope.snapshot()
        try:
            self._check_statements(statements)
        finally:
            scope.restore(saved)

    def _check_statement(self, stmt: Statement):
        scope = self.symbols.scope

        if isinstance(stmt, VariableDeclaration):
            if scope.lookup(stmt.name) is not None:
                raise create_duplicate_error(
                    TypeErrorKind.DUPLICATE_VARIABLE, "variable", stmt.name, stmt)
            self._require_declared(stmt.var_type, stmt)
            value_type = self.type_of(stmt.initializer)
            if not is_compatible(stmt.var_type, value_type):
                raise create_type_mismatch_error(stmt.var_type, value_type, stmt)
            scope.declare(stmt.name, VariableInfo(stmt.var_type, mutable=stmt.mutable))

        elif isinstance(stmt, Assignment):
            value_type = self.type_of(stmt.value)
            info = scope.lookup(stmt.name)
            if info is None:
                raise create_undefined_error(
                    TypeErrorKind.UNDEFINED_VARIABLE, "variable", stmt.name, stmt)
            if not is_compatible(info.var_type, value_type):
                raise create_type_mismatch_error(info.var_type, value_type, stmt)

        elif isinstance(stmt, Return):
            value_type = self.type_of(stmt.value)
            if not is_compatible(scope.return_type, value_type):
                raise create_invalid_return_error(scope.return_type, value_type, stmt)

        elif isinstance(stmt, ExpressionStatement):
            self.type_of(stmt.expr)

        elif isinstance(stmt, Block):
            self._check_nested(stmt.statements)

        elif isinstance(stmt, While):
            self._check_condition(stmt.condition)
            self._check_nested(stmt.body)

        elif isinstance(stmt, If):
            self._check_condition(stmt.condition)
            self._check_nested(stmt.then_branch)
            if stmt.else_branch is not None:
                self._check_nested(stmt.else_branch)

        else:
            raise TypeError(f"Unknown statement node: {type(stmt).__name__}")

    def _check_condition(self, condition: Expression):
        condition_type = self.type_of(condition)
        if condition_type != BOOL:
            raise create_non_boolean_condition_error(condition_type, condition)

    # ========================================================================
    # Expressions
    # ========================================================================

    def type_of(self, expr: Expression) -> Type:
        """Compute the type of an expression in the current scope."""
        if isinstance(expr, IntegerLiteral):
            return I32
        if isinstance(expr, FloatLiteral):
            return F32
        if isinstance(expr, StringLiteral):
            return STRING
        if isinstance(expr, BoolLiteral):
            return BOOL
        if isinstance(expr, VariableRef):
            return self._type_of_variable(expr)
        if isinstance(expr, BinaryExpr):
            return self._type_of_binary(expr)
        if isinstance(expr, Call):
            return self._type_of_call(expr)
        if isinstance(expr, StructInit):
            return self._type_of_struct_init(expr)
        if isinstance(expr, FieldAccess):
            return self._type_of_field_access(expr)
        if isinstance(expr, TypeCast):
            source = self.type_of(expr.expr)
            self._require_declared(expr.target_type, expr)
            if not is_cast_allowed(source, expr.target_type):
                raise create_invalid_cast_error(source, expr.target_type, expr)
            return expr.target_type
        if isinstance(expr, Move):
            return self._type_of_move(expr)
        if isinstance(expr, Borrow):
            value_type = self.type_of(expr.expr)
            if isinstance(expr.expr, VariableRef):
                self.symbols.scope.set_state(expr.expr.name, VariableState.BORROWED)
            return value_type

        raise TypeError(f"Unknown expression node: {type(expr).__name__}")

    def _type_of_variable(self, ref: VariableRef) -> Type:
        info = self.symbols.scope.lookup(ref.name)
        if info is None:
            raise create_undefined_error(
                TypeErrorKind.UNDEFINED_VARIABLE, "variable", ref.name, ref)
        if info.state is VariableState.MOVED:
            raise create_ownership_error(TypeErrorKind.USE_AFTER_MOVE, ref.name, ref)
        return info.var_type

    def _type_of_move(self, move: Move) -> Type:
        if not isinstance(move.expr, VariableRef):
            return self.type_of(move.expr)

        name = move.expr.name
        info = self.symbols.scope.lookup(name)
        if info is None:
            raise create_undefined_error(
                TypeErrorKind.UNDEFINED_VARIABLE, "variable", name, move.expr)
        if info.state is VariableState.MOVED:
            raise create_ownership_error(TypeErrorKind.VARIABLE_ALREADY_MOVED, name, move)
        self.symbols.scope.set_state(name, VariableState.MOVED)
        return info.var_type

    def _type_of_binary(self, expr: BinaryExpr) -> Type:
        left = self.type_of(expr.left)
        right = self.type_of(expr.right)
        operator = expr.operator

        if operator.is_logical:
            if left == BOOL and right == BOOL:
                return BOOL
            raise create_operand_mismatch_error(operator.value, left, right, expr)

        common = common_numeric_type(left, right)
        if operator.is_arithmetic:
            if common is None:
                raise create_operand_mismatch_error(operator.value, left, right, expr)
            return common

        # Comparisons; equality additionally accepts bool == bool
        is_equality = operator in (BinaryOperator.EQUAL, BinaryOperator.NOT_EQUAL)
        if common is not None or (is_equality and left == BOOL and right == BOOL):
            return BOOL
        raise create_operand_mismatch_error(operator.value, left, right, expr)

    def _type_of_call(self, call: Call) -> Type:
        signature = self.symbols.functions.get(call.name)
        if signature is None:
            raise create_undefined_error(
                TypeErrorKind.UNDEFINED_FUNCTION, "function", call.name, call)
        if len(call.args) != len(signature.params):
            raise create_parameter_count_error(
                call.name, len(signature.params), len(call.args), call)

        for arg, param_type in zip(call.args, signature.params):
            arg_type = self.type_of(arg)
            if not is_compatible(param_type, arg_type):
                raise create_type_mismatch_error(param_type, arg_type, arg)

        return signature.return_type

    def _type_of_struct_init(self, init: StructInit) -> Type:
        if init.struct_name not in self.symbols.structs:
            raise create_undefined_error(
                TypeErrorKind.UNDEFINED_STRUCT, "struct", init.struct_name, init)

        for field_name, value in init.fields:
            field_type = self.symbols.lookup_field(init.struct_name, field_name)
            if field_type is None:
                raise create_undefined_field_error(init.struct_name, field_name, init)
            value_type = self.type_of(value)
            if not is_compatible(field_type, value_type):
                raise create_type_mismatch_error(field_type, value_type, value)

        return Type.struct(init.struct_name)

    def _type_of_field_access(self, access: FieldAccess) -> Type:
        base = self.type_of(access.expr)
        if not base.is_struct:
            raise create_type_mismatch_error(ANY_STRUCT, base, access)

        field_type = self.symbols.lookup_field(base.struct_name, access.field_name)
        if field_type is None:
            raise create_undefined_field_error(base.struct_name, access.field_name, access)
        return field_type


def check_program(program: Program,
                  builtins: Optional[Dict[str, FunctionSignature]] = None) -> None:
    """
    Convenience function to type check a program.

    Raises:
        TypeCheckError: On the first error
    """
    TypeChecker(builtins).check_program(program)
