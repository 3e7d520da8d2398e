"""
Test suite for the Aetos optimizer passes.

Tests cover:
- Constant folding of integer, comparison and boolean expressions
- Dead-code elimination of unused declarations
- Bounded inlining of statement-position calls
- Pass purity and the optimizer driver
"""

import copy
import itertools
import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from aetos.parser import (
    parse_string, BinaryExpr, BinaryOperator, BoolLiteral, Call,
    ExpressionStatement, IntegerLiteral, Return, VariableDeclaration,
    VariableRef, I32,
)
from aetos.optimizer import (
    ConstantFoldingPass, DeadCodeEliminationPass, InliningPass, Optimizer,
    OptimizerConfiguration, count_usages, fold_binary, optimize_program,
)
from aetos.interpreter import Interpreter, RuntimeValue


FOLDABLE_OPERATORS = [
    BinaryOperator.ADD, BinaryOperator.SUBTRACT, BinaryOperator.MULTIPLY,
    BinaryOperator.EQUAL, BinaryOperator.NOT_EQUAL, BinaryOperator.LESS_THAN,
    BinaryOperator.GREATER_THAN, BinaryOperator.LESS_EQUAL, BinaryOperator.GREATER_EQUAL,
]


class TestConstantFolding(unittest.TestCase):

    def setUp(self):
        self.pass_ = ConstantFoldingPass()

    def test_nested_arithmetic_folds_to_one_literal(self):
        program = parse_string("fn main() -> i32 { let x: i32 = 5 + 3 * 2; return x; }")
        folded = self.pass_.run_on_program(program)
        self.assertEqual(folded.functions[0].body[0].initializer, IntegerLiteral(11))
        self.assertEqual(self.pass_.stats['expressions_folded'], 2)

    def test_folding_matches_evaluation(self):
        """Folding `a op b` gives the literal the interpreter would compute."""
        interpreter = Interpreter()
        values = [0, 1, -7, 42, 2147483647, -2147483648]
        for a, b in itertools.product(values, repeat=2):
            for operator in FOLDABLE_OPERATORS:
                expr = BinaryExpr(IntegerLiteral(a), operator, IntegerLiteral(b))
                folded = fold_binary(expr)
                evaluated = interpreter.evaluate_binary(
                    operator, RuntimeValue.integer(a), RuntimeValue.integer(b))
                self.assertEqual(folded.value, evaluated.value, f"{a} {operator.value} {b}")

    def test_integer_overflow_wraps(self):
        expr = BinaryExpr(IntegerLiteral(2147483647), BinaryOperator.ADD, IntegerLiteral(1))
        self.assertEqual(fold_binary(expr), IntegerLiteral(-2147483648))

    def test_division_truncates_toward_zero(self):
        expr = BinaryExpr(IntegerLiteral(-7), BinaryOperator.DIVIDE, IntegerLiteral(2))
        self.assertEqual(fold_binary(expr), IntegerLiteral(-3))

    def test_division_by_zero_is_not_folded(self):
        program = parse_string("fn main() -> i32 { return 10 / 0; }")
        folded = self.pass_.run_on_program(program)
        self.assertEqual(folded.functions[0].body[0].value,
                         BinaryExpr(IntegerLiteral(10), BinaryOperator.DIVIDE, IntegerLiteral(0)))

    def test_boolean_logic(self):
        expr = BinaryExpr(BoolLiteral(True), BinaryOperator.AND, BoolLiteral(False))
        self.assertEqual(fold_binary(expr), BoolLiteral(False))
        expr = BinaryExpr(BoolLiteral(False), BinaryOperator.OR, BoolLiteral(True))
        self.assertEqual(fold_binary(expr), BoolLiteral(True))

    def test_comparison_produces_bool(self):
        expr = BinaryExpr(IntegerLiteral(3), BinaryOperator.LESS_THAN, IntegerLiteral(4))
        self.assertEqual(fold_binary(expr), BoolLiteral(True))

    def test_variables_are_not_folded(self):
        expr = BinaryExpr(VariableRef("x"), BinaryOperator.ADD, IntegerLiteral(1))
        self.assertIsNone(fold_binary(expr))

    def test_folds_inside_nested_statements(self):
        program = parse_string("""
        fn main() -> i32 {
            while 1 < 2 { print(2 * 3); }
            return 0;
        }
        """)
        loop = self.pass_.run_on_program(program).functions[0].body[0]
        self.assertEqual(loop.condition, BoolLiteral(True))
        self.assertEqual(loop.body[0].expr.args[0], IntegerLiteral(6))


class TestDeadCodeElimination(unittest.TestCase):

    def setUp(self):
        self.pass_ = DeadCodeEliminationPass()

    def test_unused_declaration_is_removed(self):
        program = parse_string("""
        fn main() -> i32 {
            let unused: i32 = 1;
            let used: i32 = 2;
            return used;
        }
        """)
        body = self.pass_.run_on_program(program).functions[0].body
        self.assertEqual([type(s) for s in body], [VariableDeclaration, Return])
        self.assertEqual(body[0].name, "used")
        self.assertEqual(self.pass_.stats['declarations_removed'], 1)

    def test_no_op_when_every_variable_is_used(self):
        program = parse_string("""
        fn main() -> i32 {
            let a: i32 = 1;
            let b: i32 = a + 1;
            if b > 1 { print(b); }
            return a;
        }
        """)
        optimized = self.pass_.run_on_program(program)
        self.assertEqual(optimized, program)

    def test_assignment_counts_as_use(self):
        program = parse_string("""
        fn main() -> i32 {
            let mut x: i32 = 0;
            x = compute();
            return 0;
        }
        fn compute() -> i32 { return 1; }
        """)
        body = self.pass_.run_on_program(program).functions[0].body
        self.assertEqual(len(body), 3)

    def test_nested_declarations_are_left_alone(self):
        program = parse_string("""
        fn main() -> i32 {
            if true { let inner: i32 = 1; }
            return 0;
        }
        """)
        optimized = self.pass_.run_on_program(program)
        self.assertEqual(optimized, program)

    def test_count_usages(self):
        function = parse_string("""
        fn f(a: i32) -> i32 { let b: i32 = a; b = a + b; return b; }
        """).functions[0]
        usages = count_usages(function)
        self.assertEqual(usages["a"], 2)
        self.assertEqual(usages["b"], 3)


class TestInlining(unittest.TestCase):

    def setUp(self):
        self.pass_ = InliningPass()

    def test_statement_call_is_expanded(self):
        program = parse_string("""
        fn f(a: i32, b: i32) -> i32 { return a + b; }
        fn main() -> i32 { f(2, 3); return 0; }
        """)
        body = self.pass_.run_on_program(program).get_function("main").body
        self.assertEqual(body, [
            VariableDeclaration("a", I32, IntegerLiteral(2)),
            VariableDeclaration("b", I32, IntegerLiteral(3)),
            ExpressionStatement(BinaryExpr(VariableRef("a"), BinaryOperator.ADD, VariableRef("b"))),
            Return(IntegerLiteral(0)),
        ])
        self.assertEqual(self.pass_.stats['calls_inlined'], 1)

    def test_inlined_return_does_not_end_caller(self):
        program = parse_string("""
        fn f(a: i32, b: i32) -> i32 { return a + b; }
        fn main() -> i32 { f(2, 3); return 9; }
        """)
        inlined = self.pass_.run_on_program(program)
        self.assertEqual(Interpreter().execute_program(inlined), RuntimeValue.integer(9))

    def test_call_in_expression_position_is_kept(self):
        program = parse_string("""
        fn f(a: i32, b: i32) -> i32 { return a + b; }
        fn main() -> i32 { let r: i32 = f(2, 3); return r; }
        """)
        self.assertEqual(self.pass_.run_on_program(program), program)
        self.assertEqual(Interpreter().execute_program(program), RuntimeValue.integer(5))

    def test_size_limits(self):
        program = parse_string("""
        fn wide(a: i32, b: i32, c: i32, d: i32) -> void { }
        fn long(a: i32) -> void { a = 1; a = 2; a = 3; a = 4; a = 5; a = 6; }
        fn main() -> i32 { wide(1, 2, 3, 4); long(1); return 0; }
        """)
        self.assertEqual(self.pass_.run_on_program(program), program)

    def test_print_family_is_never_inlined(self):
        program = parse_string("""
        fn print_twice(v: i32) -> void { print(v); print(v); }
        fn main() -> i32 { print_twice(4); return 0; }
        """)
        self.assertEqual(self.pass_.run_on_program(program), program)

    def test_function_named_like_a_builtin_is_never_inlined(self):
        program = parse_string("""
        fn delay(ms: i32) -> void { let unused: i32 = ms; }
        fn main() -> i32 { delay(5); return 0; }
        """)
        self.assertEqual(self.pass_.run_on_program(program), program)
        self.assertEqual(self.pass_.stats['calls_inlined'], 0)

    def test_early_return_prevents_inlining(self):
        program = parse_string("""
        fn f(a: i32) -> i32 { if a > 0 { return 1; } return 2; }
        fn main() -> i32 { f(1); return 0; }
        """)
        self.assertEqual(self.pass_.run_on_program(program), program)

    def test_inlined_statements_are_copies(self):
        program = parse_string("""
        fn f(a: i32) -> void { print(a); }
        fn main() -> i32 { f(1); return 0; }
        """)
        inlined = self.pass_.run_on_program(program)
        callee_stmt = inlined.get_function("f").body[0]
        inlined_stmt = inlined.get_function("main").body[1]
        self.assertEqual(callee_stmt, inlined_stmt)
        self.assertIsNot(callee_stmt, inlined_stmt)
        self.assertIsNot(callee_stmt.expr, inlined_stmt.expr)


class TestOptimizer(unittest.TestCase):

    SOURCE = """
    fn f(a: i32, b: i32) -> i32 { return a + b; }
    fn main() -> i32 {
        let dead: i32 = 1 + 1;
        let x: i32 = 5 + 3 * 2;
        f(2, 3);
        return x;
    }
    """

    def test_passes_do_not_modify_input(self):
        program = parse_string(self.SOURCE)
        snapshot = copy.deepcopy(program)
        optimize_program(program)
        self.assertEqual(program, snapshot)

    def test_full_pipeline(self):
        optimizer = Optimizer()
        optimized = optimizer.optimize(parse_string(self.SOURCE))
        body = optimized.get_function("main").body

        self.assertEqual(body[0], VariableDeclaration("x", I32, IntegerLiteral(11)))
        self.assertIsInstance(body[1], VariableDeclaration)
        self.assertEqual(body[1].name, "a")
        self.assertEqual(body[-1], Return(VariableRef("x")))
        self.assertEqual(Interpreter().execute_program(optimized), RuntimeValue.integer(11))

        report = optimizer.get_optimization_report()
        self.assertEqual(set(report), {"constant_folding", "dead_code_elimination", "inline_functions"})
        self.assertEqual(report["dead_code_elimination"]["declarations_removed"], 1)

    def test_configuration_disables_passes(self):
        config = OptimizerConfiguration(dead_code_elimination=False, inline_functions=False)
        optimizer = Optimizer(config)
        self.assertEqual([p.name for p in optimizer.passes], ["constant_folding"])
        body = optimizer.optimize(parse_string(self.SOURCE)).get_function("main").body
        self.assertEqual(body[0].name, "dead")
        self.assertEqual(body[2], ExpressionStatement(Call("f", [IntegerLiteral(2), IntegerLiteral(3)])))


if __name__ == '__main__':
    unittest.main()
