"""
Motor de cálculo para la calculadora científica.

Este módulo provee la clase CalculatorEngine, una máquina de estados que
recibe una orden del usuario a la vez (dígitos, operadores, funciones,
órdenes de control) y mantiene la pantalla, el operando previo y el
operador pendiente. Está diseñado como módulo independiente de la interfaz:
la UI (o una prueba) llama a sus órdenes y dibuja ``snapshot()``.

Contrato de interfaz:
    - órdenes: input_digit, input_constant, input_parenthesis,
      input_operator, input_function, evaluate, clear_all, backspace,
      square_in_place, factorial, percentage, toggle_setting,
      load_from_history
    - snapshot() -> CalculatorSnapshot

Colaboradores inyectados:
    - history: HistoryStore (registro de resultados)
    - settings: SettingsStore (interruptores, p. ej. 'history')
    - scheduler: objeto con after(ms, fn) / after_cancel(handle); la raíz
      de tkinter cumple este contrato.
    - feedback: callable(tag) para sonido/vibración.
"""

from __future__ import annotations

import contextlib
import enum
import logging
import math
import threading
from dataclasses import dataclass, replace

from formula_evaluator import EvaluationError, FormulaEvaluator
from number_formatter import ERROR_MARKER, format_number, parse_number, stringify_number

log = logging.getLogger(__name__)


class Operator(enum.Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    POWER = "**"

    @property
    def glyph(self) -> str:
        return _GLYPHS[self]

    @classmethod
    def from_symbol(cls, symbol):
        """Operator para ``symbol``; el propio símbolo si no se reconoce."""
        if isinstance(symbol, cls):
            return symbol
        if symbol == "^":
            return cls.POWER
        try:
            return cls(symbol)
        except ValueError:
            return symbol


_GLYPHS = {
    Operator.ADD: "+",
    Operator.SUBTRACT: "−",
    Operator.MULTIPLY: "×",
    Operator.DIVIDE: "÷",
    Operator.POWER: "^",
}


class FeedbackEvent:
    NUMBER = "number"
    OPERATOR = "operator"
    EQUALS = "equals"
    CLEAR = "clear"
    CLICK = "click"


def operator_glyph(op) -> str:
    if isinstance(op, Operator):
        return op.glyph
    return str(op)


def _divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _power(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        return math.inf
    except ValueError:
        return math.nan


_OPERATIONS = {
    Operator.ADD: lambda a, b: a + b,
    Operator.SUBTRACT: lambda a, b: a - b,
    Operator.MULTIPLY: lambda a, b: a * b,
    Operator.DIVIDE: _divide,
    Operator.POWER: _power,
}


def perform_calculation(op, a: float, b: float) -> float:
    """Aplica ``op`` a (a, b). Nunca lanza: 5/0 da infinito, 0/0 da NaN.

    Un operador desconocido devuelve el segundo operando.
    """
    operation = _OPERATIONS.get(Operator.from_symbol(op))
    if operation is None:
        return b
    return operation(a, b)


@dataclass(frozen=True)
class CalculatorState:
    display: str = "0"
    previous_value: float | None = None
    pending_operator: Operator | str | None = None
    awaiting_new_operand: bool = False

    @property
    def is_error(self) -> bool:
        return self.display == ERROR_MARKER


INITIAL_STATE = CalculatorState()


@dataclass(frozen=True)
class CalculatorSnapshot:
    """Estado de solo lectura para dibujar la calculadora."""

    display: str
    formatted_display: str
    preview: str
    is_error: bool


class ThreadingScheduler:
    """Planificador con threading.Timer y la interfaz after/after_cancel de tk."""

    def after(self, ms: int, callback):
        timer = threading.Timer(ms / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return timer

    def after_cancel(self, handle):
        handle.cancel()


class CalculatorEngine:
    """Procesa órdenes de la calculadora, una a la vez."""

    ERROR_CLEAR_DELAY_MS = 1500
    MAX_FACTORIAL = 170

    def __init__(
        self,
        history=None,
        settings=None,
        scheduler=None,
        feedback=None,
        evaluator: FormulaEvaluator | None = None,
        error_clear_delay_ms: int | None = None,
    ):
        self._history = history
        self._settings = settings
        self._scheduler = scheduler if scheduler is not None else ThreadingScheduler()
        self._feedback = feedback
        self._evaluator = evaluator if evaluator is not None else FormulaEvaluator()
        if error_clear_delay_ms is not None:
            self.ERROR_CLEAR_DELAY_MS = error_clear_delay_ms

        self._lock = threading.RLock()
        self._state = INITIAL_STATE
        self._clear_handle = None
        self._error_generation = 0

    # ── Estado observable ────────────────────────────────────────

    @property
    def state(self) -> CalculatorState:
        return self._state

    @property
    def display(self) -> str:
        return self._state.display

    def snapshot(self) -> CalculatorSnapshot:
        with self._lock:
            state = self._state
        preview = ""
        if state.previous_value is not None and state.pending_operator is not None:
            preview = (
                f"{format_number(state.previous_value)} "
                f"{operator_glyph(state.pending_operator)}"
            )
        return CalculatorSnapshot(
            display=state.display,
            formatted_display=format_number(state.display),
            preview=preview,
            is_error=state.is_error,
        )

    # ── Entrada de dígitos y funciones ───────────────────────────

    def input_digit(self, token: str):
        """Añade un dígito, el punto decimal, un paréntesis o una constante."""
        with self._command(FeedbackEvent.NUMBER):
            state = self._state
            if state.awaiting_new_operand:
                self._state = replace(state, display=token, awaiting_new_operand=False)
            elif state.display == "0" and token != ".":
                self._state = replace(state, display=token)
            elif token == "." and "." in self._current_number(state.display):
                return
            else:
                self._state = replace(state, display=state.display + token)

    def input_constant(self, name: str):
        symbols = {"pi": "π", "π": "π", "e": "e"}
        if name not in symbols:
            raise ValueError(f"Constante desconocida: {name}")
        self.input_digit(symbols[name])

    def input_parenthesis(self, side: str):
        symbols = {"open": "(", "(": "(", "close": ")", ")": ")"}
        if side not in symbols:
            raise ValueError(f"Paréntesis desconocido: {side}")
        self.input_digit(symbols[side])

    def input_function(self, name: str):
        """Escribe la forma de apertura de una función, p. ej. ``sin(``."""
        name = name.rstrip("(")
        if name not in self._evaluator.functions:
            raise ValueError(f"Función desconocida: {name}")
        token = f"{name}("
        with self._command(FeedbackEvent.NUMBER):
            state = self._state
            if state.awaiting_new_operand or state.display == "0":
                self._state = replace(state, display=token, awaiting_new_operand=False)
            else:
                self._state = replace(state, display=state.display + token)

    @staticmethod
    def _current_number(display: str) -> str:
        # Último literal numérico de la pantalla: "sin(3.1)+2" -> "2"
        end = len(display)
        start = end
        while start > 0 and (display[start - 1].isdigit() or display[start - 1] == "."):
            start -= 1
        return display[start:end]

    # ── Operadores binarios encadenados ──────────────────────────

    def input_operator(self, op):
        operator = Operator.from_symbol(op)
        with self._command(FeedbackEvent.OPERATOR):
            state = self._state
            current = parse_number(state.display)
            if state.previous_value is None:
                self._state = replace(
                    state,
                    previous_value=current,
                    pending_operator=operator,
                    awaiting_new_operand=True,
                )
                return
            if state.pending_operator is not None:
                result = perform_calculation(
                    state.pending_operator, state.previous_value, current
                )
                state = replace(state, display=stringify_number(result), previous_value=result)
            self._state = replace(state, pending_operator=operator, awaiting_new_operand=True)

    def evaluate(self):
        """Orden '=': resuelve la operación pendiente o la expresión científica."""
        with self._command(FeedbackEvent.EQUALS):
            state = self._state
            if state.pending_operator is not None and state.previous_value is not None:
                result = perform_calculation(
                    state.pending_operator,
                    state.previous_value,
                    parse_number(state.display),
                )
                expression = (
                    f"{format_number(state.previous_value)} "
                    f"{operator_glyph(state.pending_operator)} "
                    f"{format_number(state.display)}"
                )
                record = True
            else:
                expression = state.display
                record = self._evaluator.uses_scientific_tokens(expression)
                try:
                    result = self._evaluator.evaluate(expression)
                except EvaluationError as exc:
                    log.debug("Evaluación fallida de %r: %s", expression, exc)
                    self._fail()
                    return

            if math.isnan(result) or math.isinf(result):
                log.debug("Resultado no finito para %r", expression)
                self._fail()
                return

            display = stringify_number(result)
            if record and self._history_enabled():
                self._history.append(expression, display)
            self._state = CalculatorState(display=display, awaiting_new_operand=True)

    # ── Órdenes inmediatas ───────────────────────────────────────

    def square_in_place(self):
        with self._command(FeedbackEvent.CLICK):
            value = parse_number(self._state.display)
            self._state = replace(self._state, display=stringify_number(value * value))

    def percentage(self):
        with self._command(FeedbackEvent.CLICK):
            value = parse_number(self._state.display)
            self._state = replace(self._state, display=stringify_number(value / 100))

    def factorial(self):
        """n! para enteros en [0, 170]; fuera de rango es un error."""
        with self._command(FeedbackEvent.CLICK):
            value = parse_number(self._state.display)
            if (
                not math.isfinite(value)
                or not value.is_integer()
                or value < 0
                or value > self.MAX_FACTORIAL
            ):
                log.debug("Factorial fuera de dominio: %r", self._state.display)
                self._fail()
                return
            result = 1.0
            for i in range(2, int(value) + 1):
                result *= i
            self._state = replace(self._state, display=stringify_number(result))

    # ── Control ──────────────────────────────────────────────────

    def clear_all(self):
        with self._command(FeedbackEvent.CLEAR):
            self._state = INITIAL_STATE

    def backspace(self):
        with self._command(FeedbackEvent.CLEAR):
            display = self._state.display
            if len(display) > 1 and display != ERROR_MARKER:
                self._state = replace(self._state, display=display[:-1])
            else:
                self._state = replace(self._state, display="0")

    def toggle_setting(self, key: str) -> bool:
        """Invierte un ajuste y devuelve su nuevo valor."""
        if self._settings is None:
            raise RuntimeError("No hay almacén de ajustes configurado")
        if key not in self._settings:
            raise KeyError(key)
        # No toca CalculatorState: un error visible sigue su auto-borrado.
        with self._lock:
            value = self._settings.toggle(key)
        self._emit(FeedbackEvent.CLICK)
        return value

    def load_from_history(self, result: str):
        """Recupera un resultado del historial en la pantalla."""
        with self._command(FeedbackEvent.CLICK):
            # El siguiente dígito empieza un operando nuevo en vez de
            # añadirse al resultado recuperado.
            self._state = replace(self._state, display=result, awaiting_new_operand=True)

    # ── Error y auto-borrado ─────────────────────────────────────

    def _fail(self):
        self._state = CalculatorState(display=ERROR_MARKER, awaiting_new_operand=True)
        self._error_generation += 1
        generation = self._error_generation
        self._clear_handle = self._scheduler.after(
            self.ERROR_CLEAR_DELAY_MS, lambda: self._auto_clear(generation)
        )

    def _auto_clear(self, generation: int):
        with self._lock:
            if generation != self._error_generation or not self._state.is_error:
                return
            self._clear_handle = None
            self._state = INITIAL_STATE

    def _dismiss_error(self):
        if self._clear_handle is not None:
            self._scheduler.after_cancel(self._clear_handle)
            self._clear_handle = None
        self._error_generation += 1
        if self._state.is_error:
            self._state = INITIAL_STATE

    @contextlib.contextmanager
    def _command(self, event: str):
        # Una orden a la vez; cualquier orden descarta un error pendiente.
        with self._lock:
            self._dismiss_error()
            yield
        self._emit(event)

    def _history_enabled(self) -> bool:
        if self._history is None:
            return False
        if self._settings is None:
            return True
        return self._settings.get("history")

    def _emit(self, event: str):
        if self._feedback is None:
            return
        try:
            self._feedback(event)
        except Exception:
            log.exception("Fallo del emisor de feedback (%s)", event)

