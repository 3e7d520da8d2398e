"""
Host implementations of the builtin functions.

Each builtin declares the runtime kinds of its arguments; a call with the
wrong number or kinds of arguments raises INVALID_BUILTIN_ARGUMENTS before
the handler runs. Handlers receive the interpreter and the evaluated
argument values.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, List, Tuple

from .errors import create_builtin_arguments_error
from .graphics import KEY_CODES
from .values import RuntimeValue, ValueKind

if TYPE_CHECKING:
    from .interpreter import Interpreter

logger = logging.getLogger(__name__)

INT = ValueKind.INTEGER
STR = ValueKind.STRING

# Builtins whose presence makes the interpreter set up graphics before main runs.
GRAPHICS_BUILTINS = frozenset({
    "init_graphics", "clear_screen", "draw_pixel", "draw_rect", "draw_circle",
    "draw_line", "render", "get_time", "sleep", "is_key_pressed",
})

Handler = Callable[['Interpreter', List[RuntimeValue]], RuntimeValue]


@dataclass(frozen=True)
class Builtin:
    name: str
    param_kinds: Tuple[ValueKind, ...]
    handler: Handler

    def check_arguments(self, args: List[RuntimeValue]) -> None:
        kinds = tuple(arg.kind for arg in args)
        if kinds != self.param_kinds:
            expected = ", ".join(kind.value for kind in self.param_kinds)
            raise create_builtin_arguments_error(self.name, expected)

    def __call__(self, interpreter: 'Interpreter', args: List[RuntimeValue]) -> RuntimeValue:
        self.check_arguments(args)
        return self.handler(interpreter, args)


def _print(interpreter, args):
    print(args[0], file=interpreter.output)
    return RuntimeValue.void()


def _gpio_set(interpreter, args):
    logger.debug("gpio_set(%d, %d) ignored", args[0].value, args[1].value)
    return RuntimeValue.void()


def _gpio_toggle(interpreter, args):
    logger.debug("gpio_toggle(%d) ignored", args[0].value)
    return RuntimeValue.void()


def _sleep(interpreter, args):
    milliseconds = max(args[0].value, 0)
    interpreter.sleep(milliseconds / 1000.0)
    return RuntimeValue.void()


def _init_graphics(interpreter, args):
    # The surface was already created by the pre-scan.
    return RuntimeValue.void()


def _draw(method_name: str) -> Handler:
    def handler(interpreter, args):
        if interpreter.graphics is not None:
            getattr(interpreter.graphics, method_name)(*(arg.value for arg in args))
        return RuntimeValue.void()
    return handler


def _render(interpreter, args):
    graphics = interpreter.graphics
    if graphics is not None:
        graphics.render()
        if not graphics.poll_input():
            interpreter.should_exit = True
    return RuntimeValue.void()


def _get_time(interpreter, args):
    if interpreter.graphics is not None:
        return RuntimeValue.float32(interpreter.graphics.get_elapsed_time())
    return RuntimeValue.float32(interpreter.elapsed_time())


def _is_key_pressed(interpreter, args):
    key = KEY_CODES.get(args[0].value)
    if key is None or interpreter.graphics is None:
        return RuntimeValue.boolean(False)
    return RuntimeValue.boolean(interpreter.graphics.is_key_down(key))


def _builtin(name: str, param_kinds: Tuple[ValueKind, ...], handler: Handler) -> Tuple[str, Builtin]:
    return name, Builtin(name, param_kinds, handler)


BUILTINS: Dict[str, Builtin] = dict([
    _builtin("print", (INT,), _print),
    _builtin("print_i32", (INT,), _print),
    _builtin("print_string", (STR,), _print),
    _builtin("gpio_set", (INT, INT), _gpio_set),
    _builtin("gpio_toggle", (INT,), _gpio_toggle),
    _builtin("delay", (INT,), _sleep),
    _builtin("init_graphics", (INT, INT, STR), _init_graphics),
    _builtin("clear_screen", (INT,) * 3, _draw("clear")),
    _builtin("draw_pixel", (INT,) * 5, _draw("draw_pixel")),
    _builtin("draw_rect", (INT,) * 7, _draw("draw_rect")),
    _builtin("draw_circle", (INT,) * 6, _draw("draw_circle")),
    _builtin("draw_line", (INT,) * 7, _draw("draw_line")),
    _builtin("render", (), _render),
    _builtin("get_time", (), _get_time),
    _builtin("sleep", (INT,), _sleep),
    _builtin("is_key_pressed", (INT,), _is_key_pressed),
])
