"""
Test suite for the graphics capability and the drawing builtins.

Tests cover:
- HeadlessGraphics frame buffer operations and clipping
- Graphics pre-scan and lazy creation
- Loop polling, render polling and window-close exit
- Key input mapping
"""

import io
import unittest
import sys
import os

import numpy as np

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from aetos.parser import parse_string
from aetos.analyzer import TypeChecker
from aetos.interpreter import (
    HeadlessGraphics, Interpreter, InterpreterConfiguration, RuntimeValue,
    KEY_CODES, uses_graphics,
)


class TestHeadlessGraphics(unittest.TestCase):

    def setUp(self):
        self.graphics = HeadlessGraphics(20, 10)

    def test_buffer_shape(self):
        self.assertEqual(self.graphics.buffer.shape, (10, 20, 3))
        self.assertEqual(self.graphics.buffer.dtype, np.uint8)
        self.assertFalse(self.graphics.buffer.any())

    def test_clear(self):
        self.graphics.clear(10, 20, 30)
        self.assertEqual(self.graphics.pixel(0, 0), (10, 20, 30))
        self.assertEqual(self.graphics.pixel(19, 9), (10, 20, 30))

    def test_channels_are_truncated_to_8_bits(self):
        self.graphics.draw_pixel(1, 1, 256 + 5, -1, 511)
        self.assertEqual(self.graphics.pixel(1, 1), (5, 255, 255))

    def test_pixel_outside_buffer_is_ignored(self):
        self.graphics.draw_pixel(-1, 0, 255, 255, 255)
        self.graphics.draw_pixel(20, 0, 255, 255, 255)
        self.graphics.draw_pixel(0, 10, 255, 255, 255)
        self.assertFalse(self.graphics.buffer.any())

    def test_rect_is_clipped(self):
        self.graphics.draw_rect(15, 8, 10, 10, 255, 0, 0)
        red = self.graphics.buffer[:, :, 0]
        self.assertEqual(int(red.astype(bool).sum()), 5 * 2)
        self.assertEqual(self.graphics.pixel(19, 9), (255, 0, 0))
        self.assertEqual(self.graphics.pixel(14, 9), (0, 0, 0))

    def test_empty_rect_draws_nothing(self):
        self.graphics.draw_rect(2, 2, 0, 5, 255, 0, 0)
        self.graphics.draw_rect(2, 2, -3, 5, 255, 0, 0)
        self.assertFalse(self.graphics.buffer.any())

    def test_circle_is_filled(self):
        self.graphics.draw_circle(10, 5, 2, 0, 255, 0)
        self.assertEqual(self.graphics.pixel(10, 5), (0, 255, 0))
        self.assertEqual(self.graphics.pixel(12, 5), (0, 255, 0))
        self.assertEqual(self.graphics.pixel(12, 7), (0, 0, 0))
        self.assertEqual(int(self.graphics.buffer[:, :, 1].astype(bool).sum()), 13)

    def test_line_endpoints(self):
        self.graphics.draw_line(0, 0, 5, 3, 0, 0, 255)
        self.assertEqual(self.graphics.pixel(0, 0), (0, 0, 255))
        self.assertEqual(self.graphics.pixel(5, 3), (0, 0, 255))
        self.assertEqual(int(self.graphics.buffer[:, :, 2].astype(bool).sum()), 6)

    def test_vertical_line_leaving_the_buffer(self):
        self.graphics.draw_line(3, 5, 3, 50, 255, 255, 255)
        self.assertEqual(int(self.graphics.buffer[:, 3, 0].astype(bool).sum()), 5)

    def test_far_endpoint_is_clipped_before_stepping(self):
        self.graphics.draw_line(0, 0, 2000000000, 0, 255, 0, 0)
        self.assertEqual(int(self.graphics.buffer[0, :, 0].astype(bool).sum()), 20)
        self.assertEqual(int(self.graphics.buffer[:, :, 0].astype(bool).sum()), 20)

    def test_line_outside_the_buffer_draws_nothing(self):
        self.graphics.draw_line(-50, -5, 100, -1, 255, 0, 0)
        self.graphics.draw_line(30, 0, 40, 9, 255, 0, 0)
        self.assertFalse(self.graphics.buffer.any())

    def test_line_crossing_the_buffer(self):
        self.graphics.draw_line(-10, 4, 100, 4, 0, 255, 0)
        self.assertEqual(int(self.graphics.buffer[4, :, 1].astype(bool).sum()), 20)
        self.assertEqual(int(self.graphics.buffer[:, :, 1].astype(bool).sum()), 20)

    def test_close_after_polls(self):
        graphics = HeadlessGraphics(4, 4, close_after_polls=3)
        self.assertEqual([graphics.poll_input() for _ in range(4)], [True, True, False, False])
        self.assertTrue(graphics.closed)

    def test_keys(self):
        self.graphics.press_key("W")
        self.assertTrue(self.graphics.is_key_down("W"))
        self.graphics.release_key("W")
        self.assertFalse(self.graphics.is_key_down("W"))

    def test_elapsed_time_uses_clock(self):
        ticks = iter([100.0, 102.5])
        graphics = HeadlessGraphics(4, 4, clock=lambda: next(ticks))
        self.assertEqual(graphics.get_elapsed_time(), 2.5)


class TestGraphicsBuiltins(unittest.TestCase):

    def setUp(self):
        self.created = []
        self.close_after_polls = None

    def _factory(self, width, height, title):
        graphics = HeadlessGraphics(width, height, title, close_after_polls=self.close_after_polls)
        self.created.append(graphics)
        return graphics

    def _run(self, code: str, **config) -> RuntimeValue:
        program = parse_string(code)
        TypeChecker().check_program(program)
        interpreter = Interpreter(InterpreterConfiguration(**config),
                                  graphics_factory=self._factory,
                                  output=io.StringIO(),
                                  sleep=lambda seconds: None)
        self.interpreter = interpreter
        return interpreter.execute_program(program)

    def test_no_graphics_for_plain_programs(self):
        self._run("fn main() -> i32 { print(1); return 0; }")
        self.assertEqual(self.created, [])

    def test_graphics_created_with_configured_size(self):
        self._run("""
        fn main() -> i32 {
            init_graphics(64, 32, "demo");
            clear_screen(1, 2, 3);
            draw_pixel(0, 0, 200, 100, 50);
            return 0;
        }
        """, width=64, height=32, title="demo")
        self.assertEqual(len(self.created), 1)
        graphics = self.created[0]
        self.assertEqual((graphics.width, graphics.height, graphics.title), (64, 32, "demo"))
        self.assertEqual(graphics.pixel(0, 0), (200, 100, 50))
        self.assertEqual(graphics.pixel(1, 0), (1, 2, 3))

    def test_prescan_finds_nested_calls(self):
        program = parse_string("""
        fn helper() -> i32 {
            if true { while false { let t: f32 = get_time() + 1.0; } }
            return 0;
        }
        fn main() -> i32 { return helper(); }
        """)
        self.assertTrue(uses_graphics(program))
        self.assertFalse(uses_graphics(parse_string("fn main() -> i32 { print(1); return 0; }")))

    def test_render_counts_frames(self):
        self._run("""
        fn main() -> i32 {
            render();
            render();
            return 0;
        }
        """, width=8, height=8)
        self.assertEqual(self.created[0].frames_rendered, 2)
        self.assertEqual(self.created[0].polls, 2)

    def test_each_loop_iteration_polls_once(self):
        self._run("""
        fn main() -> i32 {
            let mut i: i32 = 0;
            while i < 4 { draw_pixel(i, 0, 255, 255, 255); i = i + 1; }
            return i;
        }
        """, width=8, height=8)
        self.assertEqual(self.created[0].polls, 4)

    def test_closing_the_window_ends_the_loop(self):
        self.close_after_polls = 3
        result = self._run("""
        fn main() -> i32 {
            let mut frames: i32 = 0;
            while true {
                clear_screen(0, 0, 0);
                frames = frames + 1;
            }
            return frames;
        }
        """, width=8, height=8)
        self.assertEqual(result, RuntimeValue.integer(3))
        self.assertTrue(self.interpreter.should_exit)

    def test_render_close_stops_loop_after_body(self):
        self.close_after_polls = 2
        result = self._run("""
        fn main() -> i32 {
            let mut frames: i32 = 0;
            while true {
                frames = frames + 1;
                render();
            }
            return frames;
        }
        """, width=8, height=8)
        # render polls once, the loop polls once: the second poll closes
        self.assertEqual(result, RuntimeValue.integer(1))

    def test_closed_surface_does_not_leak_into_next_run(self):
        self.close_after_polls = 1
        self._run("""
        fn main() -> i32 {
            while true { render(); }
            return 0;
        }
        """, width=8, height=8)
        self.assertTrue(self.created[0].closed)

        plain = parse_string("""
        fn main() -> i32 {
            let mut i: i32 = 0;
            while i < 10 { i = i + 1; }
            return i;
        }
        """)
        self.assertEqual(self.interpreter.execute_program(plain), RuntimeValue.integer(10))
        self.assertIsNone(self.interpreter.graphics)
        self.assertFalse(self.interpreter.should_exit)

    def test_key_codes(self):
        self.assertEqual(KEY_CODES[87], "W")
        self.assertEqual(KEY_CODES[32], "Space")

        program = parse_string("""
        fn main() -> i32 {
            let mut score: i32 = 0;
            if is_key_pressed(87) { score = 1; }
            let w: bool = is_key_pressed(87);
            let left: bool = is_key_pressed(37);
            let unknown: bool = is_key_pressed(999);
            if w && !left && !unknown { return 10; }
            return 0;
        }
        """)
        TypeChecker().check_program(program)

        def factory(width, height, title):
            graphics = HeadlessGraphics(width, height, title)
            graphics.press_key("W")
            return graphics

        interpreter = Interpreter(InterpreterConfiguration(8, 8), graphics_factory=factory)
        self.assertEqual(interpreter.execute_program(program), RuntimeValue.integer(10))

    def test_get_time_reads_graphics_clock(self):
        ticks = iter([0.0, 1.5])

        def factory(width, height, title):
            return HeadlessGraphics(width, height, title, clock=lambda: next(ticks))

        program = parse_string("fn main() -> f32 { return get_time(); }")
        interpreter = Interpreter(InterpreterConfiguration(8, 8), graphics_factory=factory)
        self.assertEqual(interpreter.execute_program(program), RuntimeValue.float32(1.5))


if __name__ == '__main__':
    unittest.main()
