"""
Formato de números para la pantalla de la calculadora.

Tres funciones sin estado:
    - stringify_number(value) -> str: texto canónico de un resultado.
    - parse_number(text) -> float: lectura del prefijo numérico de la pantalla.
    - format_number(value) -> str: presentación (notación científica, decimales).

Ninguna de ellas modifica el estado del motor.
"""

import math
import re
from decimal import Decimal

ERROR_MARKER = "Error"

_NON_FINITE_MARKERS = {"Infinity", "-Infinity", "NaN"}

EXPONENTIAL_UPPER = 1e15
EXPONENTIAL_LOWER = 1e-6
EXPONENTIAL_DIGITS = 6
MAX_FRACTION_DIGITS = 10
PLAIN_INTEGER_LIMIT = 1e21
PLAIN_FRACTION_LIMIT = 1e-6

_NUMERIC_PREFIX_RE = re.compile(
    r"^\s*(?P<num>[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)
_NUMERIC_FULL_RE = re.compile(
    r"^\s*[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*$"
)


def stringify_number(value) -> str:
    """Convierte un resultado numérico en el texto que se guarda en pantalla."""
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < PLAIN_INTEGER_LIMIT:
        return str(int(value))
    if PLAIN_FRACTION_LIMIT <= abs(value) < PLAIN_INTEGER_LIMIT:
        # Notación posicional con los dígitos mínimos de repr: 1e-05 -> 0.00001
        return format(Decimal(repr(value)), "f")
    return repr(value)


def parse_number(text) -> float:
    """Lee el número al inicio de ``text``; NaN si no empieza por uno.

    >>> parse_number("12.5")
    12.5
    >>> parse_number("3+4")
    3.0
    """
    if isinstance(text, (int, float)):
        return float(text)
    match = _NUMERIC_PREFIX_RE.match(text)
    if match is None:
        return math.nan
    literal = match.group("num").replace("Infinity", "inf")
    return float(literal)


def format_number(value) -> str:
    """Devuelve la representación visible de un valor.

    El marcador de error, los literales no finitos y cualquier texto que no
    sea un número completo (p. ej. ``"sin(3"``) pasan sin cambios.
    """
    if not isinstance(value, str):
        value = stringify_number(value)

    if value == ERROR_MARKER or value in _NON_FINITE_MARKERS:
        return value
    if not _NUMERIC_FULL_RE.match(value):
        return value

    num = parse_number(value)
    if not math.isfinite(num):
        return value

    magnitude = abs(num)
    if magnitude >= EXPONENTIAL_UPPER or (0 < magnitude < EXPONENTIAL_LOWER):
        return _to_exponential(num, EXPONENTIAL_DIGITS)

    if "." in value or not num.is_integer():
        text = f"{num:.{MAX_FRACTION_DIGITS}f}"
        return text.rstrip("0").rstrip(".")

    return f"{num:.0f}"


def _to_exponential(num: float, digits: int) -> str:
    # Exponente sin ceros a la izquierda: 1.000000e-7, no 1.000000e-07.
    mantissa, exponent = f"{num:.{digits}e}".split("e")
    exp_value = int(exponent)
    sign = "-" if exp_value < 0 else "+"
    return f"{mantissa}e{sign}{abs(exp_value)}"
