"""
Test suite for the Aetos lexer.

Tests cover:
- Keywords, identifiers and literals
- Operators, including two-character ones
- Comments, whitespace and source locations
- Invalid input reporting
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from aetos.lexer import Lexer, LexerError, TokenType, tokenize_string


class TestLexer(unittest.TestCase):
    """Test cases for the lexer."""

    def _types(self, source: str):
        return [token.type for token in tokenize_string(source)]

    def test_function_header(self):
        """Test a complete function header."""
        self.assertEqual(
            self._types("fn main() -> i32 {"),
            [TokenType.FN, TokenType.IDENTIFIER, TokenType.LEFT_PAREN,
             TokenType.RIGHT_PAREN, TokenType.ARROW, TokenType.I32,
             TokenType.LEFT_BRACE, TokenType.EOF]
        )

    def test_keywords_and_type_names(self):
        tokens = tokenize_string("let mut struct if else while return as for in "
                                 "i64 f32 f64 bool string void")
        types = [t.type for t in tokens[:-1]]
        self.assertEqual(types, [
            TokenType.LET, TokenType.MUT, TokenType.STRUCT, TokenType.IF,
            TokenType.ELSE, TokenType.WHILE, TokenType.RETURN, TokenType.AS,
            TokenType.FOR, TokenType.IN, TokenType.I64, TokenType.F32,
            TokenType.F64, TokenType.BOOL, TokenType.STRING_TYPE, TokenType.VOID,
        ])
        self.assertTrue(all(t.is_keyword for t in tokens[:10]))
        self.assertTrue(all(t.is_type_keyword for t in tokens[10:-1]))

    def test_identifiers(self):
        tokens = tokenize_string("x _tmp player_2 move borrow")
        self.assertTrue(all(t.type == TokenType.IDENTIFIER for t in tokens[:-1]))
        self.assertEqual([t.value for t in tokens[:-1]], ["x", "_tmp", "player_2", "move", "borrow"])

    def test_integer_and_float_literals(self):
        tokens = tokenize_string("42 0 3.5 10.25")
        self.assertEqual(tokens[0].type, TokenType.INTEGER)
        self.assertEqual(tokens[0].value, 42)
        self.assertEqual(tokens[1].value, 0)
        self.assertEqual(tokens[2].type, TokenType.FLOAT)
        self.assertEqual(tokens[2].value, 3.5)
        self.assertEqual(tokens[3].value, 10.25)

    def test_float_literal_is_single_precision(self):
        token = tokenize_string("0.1")[0]
        self.assertNotEqual(token.value, 0.1)
        self.assertAlmostEqual(token.value, 0.1, places=6)

    def test_boolean_literals(self):
        tokens = tokenize_string("true false")
        self.assertEqual(tokens[0].type, TokenType.TRUE)
        self.assertIs(tokens[0].value, True)
        self.assertEqual(tokens[1].type, TokenType.FALSE)
        self.assertIs(tokens[1].value, False)

    def test_string_literal(self):
        token = tokenize_string('"hello world"')[0]
        self.assertEqual(token.type, TokenType.STRING)
        self.assertEqual(token.value, "hello world")
        self.assertEqual(token.lexeme, '"hello world"')

    def test_two_character_operators(self):
        """Test that the longest operator wins."""
        self.assertEqual(
            self._types("== != <= >= && || -> = < > ! -"),
            [TokenType.EQUAL, TokenType.NOT_EQUAL, TokenType.LESS_EQUAL,
             TokenType.GREATER_EQUAL, TokenType.LOGICAL_AND, TokenType.LOGICAL_OR,
             TokenType.ARROW, TokenType.ASSIGN, TokenType.LESS_THAN,
             TokenType.GREATER_THAN, TokenType.LOGICAL_NOT, TokenType.MINUS,
             TokenType.EOF]
        )

    def test_punctuation(self):
        self.assertEqual(
            self._types("( ) [ ] { } ; , . : ? % + * /"),
            [TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN, TokenType.LEFT_BRACKET,
             TokenType.RIGHT_BRACKET, TokenType.LEFT_BRACE, TokenType.RIGHT_BRACE,
             TokenType.SEMICOLON, TokenType.COMMA, TokenType.DOT, TokenType.COLON,
             TokenType.QUESTION, TokenType.MODULO, TokenType.PLUS,
             TokenType.MULTIPLY, TokenType.DIVIDE, TokenType.EOF]
        )

    def test_comments_are_skipped(self):
        source = """
        // leading comment
        let x: i32 = 1; // trailing comment
        """
        self.assertEqual(
            self._types(source),
            [TokenType.LET, TokenType.IDENTIFIER, TokenType.COLON, TokenType.I32,
             TokenType.ASSIGN, TokenType.INTEGER, TokenType.SEMICOLON, TokenType.EOF]
        )

    def test_source_locations(self):
        tokens = tokenize_string("let x\n  = 5;", "demo.aetos")
        self.assertEqual((tokens[0].location.line, tokens[0].location.column), (1, 1))
        self.assertEqual((tokens[1].location.line, tokens[1].location.column), (1, 5))
        self.assertEqual((tokens[2].location.line, tokens[2].location.column), (2, 3))
        self.assertEqual(tokens[2].location.filename, "demo.aetos")
        self.assertEqual(str(tokens[3].location), "demo.aetos:2:5")

    def test_single_eof_token(self):
        tokens = tokenize_string("")
        self.assertEqual(len(tokens), 1)
        self.assertEqual(tokens[0].type, TokenType.EOF)

    def test_lazy_stream(self):
        """Test that tokens are produced on demand."""
        stream = Lexer("fn main").iter_tokens()
        self.assertEqual(next(stream).type, TokenType.FN)
        self.assertEqual(next(stream).type, TokenType.IDENTIFIER)
        self.assertEqual(next(stream).type, TokenType.EOF)
        with self.assertRaises(StopIteration):
            next(stream)


class TestLexerErrors(unittest.TestCase):
    """Test cases for invalid input."""

    def test_invalid_character_becomes_invalid_token(self):
        tokens = Lexer("let @ = 1;").tokenize()
        self.assertEqual(tokens[1].type, TokenType.INVALID)
        self.assertEqual(tokens[1].lexeme, "@")
        # Scanning continues after the invalid character
        self.assertEqual(tokens[2].type, TokenType.ASSIGN)

    def test_invalid_character_raises(self):
        with self.assertRaises(LexerError) as ctx:
            tokenize_string("let x: i32 = 1 # 2;")
        self.assertEqual(ctx.exception.diagnostic.code, "L001")
        self.assertIn("#", ctx.exception.message)
        self.assertEqual(ctx.exception.location.column, 16)

    def test_unterminated_string(self):
        with self.assertRaises(LexerError) as ctx:
            tokenize_string('print_string("oops);')
        self.assertEqual(ctx.exception.diagnostic.code, "L002")
        self.assertIn("Unterminated", ctx.exception.message)

    def test_integer_out_of_range(self):
        with self.assertRaises(LexerError) as ctx:
            tokenize_string("2147483648")
        self.assertEqual(ctx.exception.diagnostic.code, "L003")

    def test_largest_integer_is_accepted(self):
        self.assertEqual(tokenize_string("2147483647")[0].value, 2147483647)

    def test_non_ascii_letter_is_invalid(self):
        with self.assertRaises(LexerError):
            tokenize_string("let é = 1;")


if __name__ == '__main__':
    unittest.main()
