#!/usr/bin/env python3
"""
Main test runner for the Aetos toolchain.

Checks the package imports, walks one program through every stage, then
runs the unittest suite under tests/.
"""

import io
import sys
import os
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, project_root)


def run_pipeline_demo() -> bool:
    """Drive a small program through lexer, parser, checker, optimizer and interpreter."""

    try:
        from aetos.lexer import Lexer
        from aetos.parser import Parser
        from aetos.analyzer import TypeChecker
        from aetos.optimizer import Optimizer
        from aetos.interpreter import Interpreter

        print("✅ All Aetos modules imported successfully")
        print()

    except ImportError as e:
        print(f"❌ Failed to import Aetos modules: {e}")
        return False

    print("Testing simple pipeline...")
    code = """
    fn add(a: i32, b: i32) -> i32 {
        return a + b;
    }

    fn main() -> i32 {
        let result: i32 = add(5, 10) * (2 + 1);
        print(result);
        return result;
    }
    """

    try:
        print("  🔧 Lexing...")
        tokens = Lexer(code, "<demo>").tokenize()
        print(f"     Generated {len(tokens)} tokens")

        print("  🔧 Parsing...")
        program = Parser(tokens).parse()
        print(f"     Parsed {len(program.functions)} functions and {len(program.structs)} structs")

        print("  🔧 Type checking...")
        TypeChecker().check_program(program)
        print("     No type errors")

        print("  🔧 Optimizing...")
        optimizer = Optimizer()
        program = optimizer.optimize(program)
        for name, stats in optimizer.get_optimization_report().items():
            print(f"     {name}: {stats}")

        print("  🔧 Interpreting...")
        output = io.StringIO()
        result = Interpreter(output=output).execute_program(program)
        print(f"     main returned {result}, printed {output.getvalue().strip()!r}")

        if str(result) != "45":
            print(f"     ❌ Expected 45, got {result}")
            return False

    except Exception as e:
        print(f"     ❌ Pipeline failed: {e}")
        return False

    print("  ✅ Pipeline successful")
    print()
    return True


def run_unit_tests() -> bool:
    """Discover and run every test module under tests/."""
    print("Running unit tests...")
    suite = unittest.defaultTestLoader.discover(os.path.join(project_root, "tests"))
    result = unittest.TextTestRunner(verbosity=1).run(suite)
    print()
    return result.wasSuccessful()


def run_all_tests() -> bool:
    """Run all Aetos tests."""

    print("🚀 Aetos Test Suite")
    print("=" * 60)

    if not run_pipeline_demo():
        return False

    if not run_unit_tests():
        print("❌ Unit tests FAILED")
        return False

    print("🎉 All tests PASSED!")
    return True


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
