"""
Abstract Syntax Tree node definitions for Aetos.

Every node is a dataclass with structural equality; the optional source span
is carried for diagnostics but ignored when comparing trees. Nodes expose
`children()` so generic traversals (see `walk`) can visit every expression
and statement without knowing the concrete node types.
"""

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Iterator, List, Optional, Tuple

from ..lexer.tokens import SourceLocation


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""

    # Top-level
    PROGRAM = "Program"
    FUNCTION_DECL = "FunctionDecl"
    STRUCT_DECL = "StructDecl"

    # Statements
    VARIABLE_DECL = "VariableDeclaration"
    ASSIGNMENT = "Assignment"
    RETURN_STATEMENT = "Return"
    EXPRESSION_STMT = "ExpressionStatement"
    BLOCK_STATEMENT = "Block"
    WHILE_LOOP = "While"
    IF_STATEMENT = "If"

    # Expressions
    INTEGER_LITERAL = "IntegerLiteral"
    FLOAT_LITERAL = "FloatLiteral"
    STRING_LITERAL = "StringLiteral"
    BOOL_LITERAL = "BoolLiteral"
    BINARY_OP = "BinaryExpr"
    VARIABLE_REF = "VariableRef"
    FUNCTION_CALL = "Call"
    STRUCT_INIT = "StructInit"
    FIELD_ACCESS = "FieldAccess"
    TYPE_CAST = "TypeCast"
    MOVE = "Move"
    BORROW = "Borrow"


# ============================================================================
# Types
# ============================================================================

class TypeKind(Enum):
    I32 = "i32"
    I64 = "i64"
    F32 = "f32"
    F64 = "f64"
    BOOL = "bool"
    STRING = "string"
    VOID = "void"
    STRUCT = "struct"


@dataclass(frozen=True)
class Type:
    """
    A language type: one of the primitives or a struct referenced by name.

    `str(t)` gives the source spelling and `Type.parse` is its inverse.
    """
    kind: TypeKind
    struct_name: Optional[str] = None

    @staticmethod
    def struct(name: str) -> 'Type':
        return Type(TypeKind.STRUCT, name)

    @staticmethod
    def parse(text: str) -> 'Type':
        for kind in TypeKind:
            if kind is not TypeKind.STRUCT and kind.value == text:
                return Type(kind)
        return Type.struct(text)

    @property
    def is_struct(self) -> bool:
        return self.kind is TypeKind.STRUCT

    @property
    def is_numeric(self) -> bool:
        return self.kind in (TypeKind.I32, TypeKind.I64, TypeKind.F32, TypeKind.F64)

    def __str__(self) -> str:
        if self.kind is TypeKind.STRUCT:
            return self.struct_name
        return self.kind.value


I32 = Type(TypeKind.I32)
I64 = Type(TypeKind.I64)
F32 = Type(TypeKind.F32)
F64 = Type(TypeKind.F64)
BOOL = Type(TypeKind.BOOL)
STRING = Type(TypeKind.STRING)
VOID = Type(TypeKind.VOID)


class BinaryOperator(Enum):
    """Binary operators, valued by their source spelling."""
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_EQUAL = "<="
    GREATER_EQUAL = ">="
    AND = "&&"
    OR = "||"

    @property
    def is_arithmetic(self) -> bool:
        return self in ARITHMETIC_OPERATORS

    @property
    def is_comparison(self) -> bool:
        return self in COMPARISON_OPERATORS

    @property
    def is_logical(self) -> bool:
        return self in (BinaryOperator.AND, BinaryOperator.OR)


ARITHMETIC_OPERATORS = frozenset({
    BinaryOperator.ADD, BinaryOperator.SUBTRACT,
    BinaryOperator.MULTIPLY, BinaryOperator.DIVIDE,
})

COMPARISON_OPERATORS = frozenset({
    BinaryOperator.EQUAL, BinaryOperator.NOT_EQUAL,
    BinaryOperator.LESS_THAN, BinaryOperator.GREATER_THAN,
    BinaryOperator.LESS_EQUAL, BinaryOperator.GREATER_EQUAL,
})


@dataclass(frozen=True)
class SourceSpan:
    """Represents a span of source code (start and end locations)."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.filename == self.end.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start}-{self.end}"


@dataclass
class ASTNode(ABC):
    """Base class for all AST nodes."""
    node_type: ClassVar[ASTNodeType]
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False, kw_only=True)

    def children(self) -> List['ASTNode']:
        """Get all child nodes."""
        return []

    def __str__(self) -> str:
        if self.span is None:
            return self.node_type.value
        return f"{self.node_type.value}@{self.span}"


def walk(node: ASTNode) -> Iterator[ASTNode]:
    """Yield `node` and every node below it, depth first."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))


# ============================================================================
# Expressions
# ============================================================================

@dataclass
class Expression(ASTNode):
    """Base class for expressions."""


@dataclass
class IntegerLiteral(Expression):
    node_type = ASTNodeType.INTEGER_LITERAL
    value: int


@dataclass
class FloatLiteral(Expression):
    node_type = ASTNodeType.FLOAT_LITERAL
    value: float


@dataclass
class StringLiteral(Expression):
    node_type = ASTNodeType.STRING_LITERAL
    value: str


@dataclass
class BoolLiteral(Expression):
    node_type = ASTNodeType.BOOL_LITERAL
    value: bool


@dataclass
class BinaryExpr(Expression):
    """Binary operation expression."""
    node_type = ASTNodeType.BINARY_OP
    left: Expression
    operator: BinaryOperator
    right: Expression

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]


@dataclass
class VariableRef(Expression):
    node_type = ASTNodeType.VARIABLE_REF
    name: str


@dataclass
class Call(Expression):
    """Call of a user function or builtin by name."""
    node_type = ASTNodeType.FUNCTION_CALL
    name: str
    args: List[Expression]

    def children(self) -> List[ASTNode]:
        return list(self.args)


@dataclass
class StructInit(Expression):
    """Struct initializer `Name { field: expr, ... }`, fields in source order."""
    node_type = ASTNodeType.STRUCT_INIT
    struct_name: str
    fields: List[Tuple[str, Expression]]

    def children(self) -> List[ASTNode]:
        return [value for _, value in self.fields]


@dataclass
class FieldAccess(Expression):
    node_type = ASTNodeType.FIELD_ACCESS
    expr: Expression
    field_name: str

    def children(self) -> List[ASTNode]:
        return [self.expr]


@dataclass
class TypeCast(Expression):
    node_type = ASTNodeType.TYPE_CAST
    expr: Expression
    target_type: Type

    def children(self) -> List[ASTNode]:
        return [self.expr]


@dataclass
class Move(Expression):
    """Ownership-transfer marker `move(expr)`."""
    node_type = ASTNodeType.MOVE
    expr: Expression

    def children(self) -> List[ASTNode]:
        return [self.expr]


@dataclass
class Borrow(Expression):
    """Ownership-sharing marker `borrow(expr)` / `mut_borrow(expr)`."""
    node_type = ASTNodeType.BORROW
    expr: Expression
    mutable: bool = False

    def children(self) -> List[ASTNode]:
        return [self.expr]


# ============================================================================
# Statements
# ============================================================================

@dataclass
class Statement(ASTNode):
    """Base class for statements."""


@dataclass
class VariableDeclaration(Statement):
    """`let [mut] name : type = initializer ;`"""
    node_type = ASTNodeType.VARIABLE_DECL
    name: str
    var_type: Type
    initializer: Expression
    mutable: bool = False

    def children(self) -> List[ASTNode]:
        return [self.initializer]


@dataclass
class Assignment(Statement):
    node_type = ASTNodeType.ASSIGNMENT
    name: str
    value: Expression

    def children(self) -> List[ASTNode]:
        return [self.value]


@dataclass
class Return(Statement):
    node_type = ASTNodeType.RETURN_STATEMENT
    value: Expression

    def children(self) -> List[ASTNode]:
        return [self.value]


@dataclass
class ExpressionStatement(Statement):
    node_type = ASTNodeType.EXPRESSION_STMT
    expr: Expression

    def children(self) -> List[ASTNode]:
        return [self.expr]


@dataclass
class Block(Statement):
    """Bare `{ ... }` block statement."""
    node_type = ASTNodeType.BLOCK_STATEMENT
    statements: List[Statement]

    def children(self) -> List[ASTNode]:
        return list(self.statements)


@dataclass
class While(Statement):
    node_type = ASTNodeType.WHILE_LOOP
    condition: Expression
    body: List[Statement]

    def children(self) -> List[ASTNode]:
        return [self.condition] + list(self.body)


@dataclass
class If(Statement):
    """If statement; an else-if chain is an `If` as the only else statement."""
    node_type = ASTNodeType.IF_STATEMENT
    condition: Expression
    then_branch: List[Statement]
    else_branch: Optional[List[Statement]] = None

    def children(self) -> List[ASTNode]:
        children = [self.condition] + list(self.then_branch)
        if self.else_branch is not None:
            children.extend(self.else_branch)
        return children


# ============================================================================
# Top-level nodes
# ============================================================================

@dataclass
class Parameter:
    """Function parameter."""
    name: str
    param_type: Type


@dataclass
class StructField:
    """Struct field."""
    name: str
    field_type: Type


@dataclass
class FunctionDecl(ASTNode):
    """Function definition `fn name(params) -> type { body }`."""
    node_type = ASTNodeType.FUNCTION_DECL
    name: str
    params: List[Parameter]
    return_type: Type
    body: List[Statement]

    def children(self) -> List[ASTNode]:
        return list(self.body)


@dataclass
class StructDecl(ASTNode):
    """Struct definition; a layout only, no methods."""
    node_type = ASTNodeType.STRUCT_DECL
    name: str
    fields: List[StructField]

    def field_type(self, name: str) -> Optional[Type]:
        for struct_field in self.fields:
            if struct_field.name == name:
                return struct_field.field_type
        return None


@dataclass
class Program(ASTNode):
    """Root AST node representing a complete program."""
    node_type = ASTNodeType.PROGRAM
    functions: List[FunctionDecl] = field(default_factory=list)
    structs: List[StructDecl] = field(default_factory=list)

    def children(self) -> List[ASTNode]:
        return list(self.structs) + list(self.functions)

    def get_function(self, name: str) -> Optional[FunctionDecl]:
        for function in self.functions:
            if function.name == name:
                return function
        return None
