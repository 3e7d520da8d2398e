"""
Aetos Parser Package

Recursive-descent parser for the Aetos language with one token of
lookahead. Produces dataclass AST nodes carrying source spans.
"""

from .ast_nodes import *
from .parser import Parser, parse_string, parse_file
from .errors import ParseError, ParseErrorKind

__all__ = [
    # Core parser
    "Parser", "parse_string", "parse_file",

    # AST nodes
    "ASTNode", "ASTNodeType", "SourceSpan", "walk",
    "Program", "FunctionDecl", "StructDecl", "Parameter", "StructField",
    "Statement", "VariableDeclaration", "Assignment", "Return",
    "ExpressionStatement", "Block", "While", "If",
    "Expression", "IntegerLiteral", "FloatLiteral", "StringLiteral",
    "BoolLiteral", "BinaryExpr", "BinaryOperator", "VariableRef", "Call",
    "StructInit", "FieldAccess", "TypeCast", "Move", "Borrow",
    "Type", "TypeKind", "I32", "I64", "F32", "F64", "BOOL", "STRING", "VOID",

    # Error handling
    "ParseError", "ParseErrorKind",
]
