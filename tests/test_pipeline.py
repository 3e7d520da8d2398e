"""
End-to-end tests: source text through every stage to a runtime value.

Also runs the sample programs shipped in examples/.
"""

import io
import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from aetos import check_source, compile_source, run_source, run_file
from aetos.analyzer import TypeCheckError, TypeErrorKind
from aetos.interpreter import (
    HeadlessGraphics, Interpreter, InterpreterConfiguration, InterpreterError,
    RuntimeErrorKind, RuntimeValue,
)
from aetos.lexer import LexerError
from aetos.parser import IntegerLiteral, ParseError

EXAMPLES_DIR = os.path.join(project_root, "examples")


class TestPipeline(unittest.TestCase):

    def test_folded_program_runs(self):
        source = "fn main() -> i32 { let x: i32 = 5 + 3 * 2; return x; }"
        program = compile_source(source)
        self.assertEqual(program.functions[0].body[0].initializer, IntegerLiteral(11))
        self.assertEqual(run_source(source), RuntimeValue.integer(11))

    def test_optimized_and_plain_runs_agree(self):
        source = """
        fn add(a: i32, b: i32) -> i32 { return a + b; }
        fn log_sum(a: i32, b: i32) -> void { print(a + b); }
        fn main() -> i32 {
            let unused: i32 = 100 * 100;
            let total: i32 = add(2, 3) * (4 - 1);
            log_sum(total, 1);
            return total;
        }
        """
        outputs = []
        results = []
        for optimize in (True, False):
            output = io.StringIO()
            results.append(run_source(source, optimize=optimize,
                                      interpreter=Interpreter(output=output)))
            outputs.append(output.getvalue())
        self.assertEqual(results, [RuntimeValue.integer(15)] * 2)
        self.assertEqual(outputs, ["16\n"] * 2)

    def test_each_stage_reports_its_own_error(self):
        with self.assertRaises(LexerError):
            check_source("fn main() -> i32 { return 1 ^ 2; }")
        with self.assertRaises(ParseError):
            check_source("fn main() -> i32 { return 1 +; }")
        with self.assertRaises(TypeCheckError) as ctx:
            check_source("fn main() -> i32 { let x: i32 = 5; let y: bool = true; return x + y; }")
        self.assertEqual(ctx.exception.kind, TypeErrorKind.TYPE_MISMATCH)
        with self.assertRaises(InterpreterError) as ctx:
            run_source("fn main() -> i32 { return 10 / 0; }")
        self.assertEqual(ctx.exception.kind, RuntimeErrorKind.DIVISION_BY_ZERO)

    def test_type_error_prevents_execution(self):
        output = io.StringIO()
        with self.assertRaises(TypeCheckError):
            run_source('fn main() -> i32 { print(1); return "no"; }',
                       interpreter=Interpreter(output=output))
        self.assertEqual(output.getvalue(), "")


class TestExamples(unittest.TestCase):

    def _run_example(self, name: str, **options):
        output = io.StringIO()
        result = run_file(os.path.join(EXAMPLES_DIR, name), output=output, **options)
        return result, output.getvalue()

    def test_hello(self):
        result, output = self._run_example("hello.aetos")
        self.assertEqual(result, RuntimeValue.integer(0))
        self.assertEqual(output, "Hello from Aetos!\n42\n")

    def test_area(self):
        result, output = self._run_example("area.aetos")
        self.assertEqual(output, "36\n")

    def test_fibonacci(self):
        result, output = self._run_example("fibonacci.aetos")
        self.assertEqual(result, RuntimeValue.integer(55))
        self.assertEqual(output.split(), ["0", "1", "1", "2", "3", "5", "8", "13", "21", "34"])

    def test_bouncing_ball_stops_when_window_closes(self):
        surfaces = []

        def factory(width, height, title):
            surface = HeadlessGraphics(width, height, title, close_after_polls=20)
            surfaces.append(surface)
            return surface

        sleeps = []
        result, _ = self._run_example(
            "bouncing_ball.aetos",
            config=InterpreterConfiguration(800, 600, "Bouncing Ball"),
            graphics_factory=factory,
            sleep=sleeps.append,
        )
        # render() and the loop each poll once per frame
        self.assertEqual(result, RuntimeValue.integer(10))
        self.assertEqual(surfaces[0].frames_rendered, 10)
        self.assertEqual(sleeps, [0.016] * 10)
        self.assertEqual(surfaces[0].pixel(0, 599), (20, 20, 40))


if __name__ == '__main__':
    unittest.main()
