"""Parseo y evaluación de expresiones para la calculadora científica.

No se usa ``eval``: la expresión se divide en tokens con expresiones
regulares y se evalúa con un analizador de precedencia restringido al
vocabulario fijo de la calculadora (números, ``+ - * / ** ^ ( )``, siete
funciones unarias y las constantes π y e).
"""

import math
import re


class EvaluationError(ValueError):
    """La expresión no produce un número real finito."""


class PythonMathProvider:
    """Provee funciones y constantes matemáticas en un namespace seguro."""

    FUNCTIONS = ("sin", "cos", "tan", "log", "ln", "sqrt", "abs")
    CONSTANTS = ("pi", "π", "e")

    def build_namespace(self) -> dict:
        return {
            "sin": math.sin,
            "cos": math.cos,
            "tan": math.tan,
            "log": math.log10,
            "ln": math.log,
            "sqrt": math.sqrt,
            "abs": abs,
            "π": math.pi,
            "pi": math.pi,
            "e": math.e,
        }


class FormulaEvaluator:
    """Transforma expresiones de la pantalla y evalúa su valor numérico."""

    _ALLOWED_CHARS = re.compile(r"^[\d\s+\-*/^().πa-zA-Z]*$")
    _NUMBER = r"(?:\d+\.?\d*|\.\d+)(?:[eE][+\-]?\d+)?"
    _TOKEN_RE = re.compile(
        rf"\s*(?:(?P<number>{_NUMBER})|(?P<name>[A-Za-z]+|π)|(?P<op>\*\*|[+\-*/^()]))"
    )
    _NUMBER_RE = re.compile(_NUMBER)
    _SCIENTIFIC_RE = re.compile(r"[A-Za-zπ^]")

    def __init__(self, provider: PythonMathProvider = None):
        self._provider = provider if provider is not None else PythonMathProvider()
        self._namespace = self._provider.build_namespace()
        self._tokens: list[tuple[str, str]] = []
        self._pos = 0

    def evaluate(self, expression: str) -> float:
        """Evalúa la expresión y devuelve un float finito.

        Raises:
            EvaluationError: expresión vacía o mal formada, identificador
                desconocido, error de dominio o resultado no finito.
        """
        if not expression or not expression.strip():
            raise EvaluationError("Expresión vacía")

        self._validate_raw_expression(expression)
        self._tokens = self._insert_implicit_mult(self._tokenize(expression))
        self._pos = 0

        value = self._parse_additive()
        if self._pos < len(self._tokens):
            _kind, text = self._tokens[self._pos]
            raise EvaluationError(f"Token inesperado: {text}")
        return self._checked(value)

    @property
    def functions(self) -> tuple:
        return self._provider.FUNCTIONS

    def uses_scientific_tokens(self, expression: str) -> bool:
        """True si la expresión contiene funciones, constantes o ``^``."""
        without_numbers = self._NUMBER_RE.sub("", expression)
        return bool(self._SCIENTIFIC_RE.search(without_numbers))

    # ── Tokens ───────────────────────────────────────────────────

    def _validate_raw_expression(self, expression: str):
        if not self._ALLOWED_CHARS.fullmatch(expression):
            raise EvaluationError("Expresión contiene caracteres inválidos")

    def _tokenize(self, expression: str) -> list[tuple[str, str]]:
        tokens = []
        pos = 0
        end = len(expression.rstrip())
        while pos < end:
            match = self._TOKEN_RE.match(expression, pos)
            if match is None:
                raise EvaluationError(f"Carácter inesperado: {expression[pos]}")
            kind = match.lastgroup
            text = match.group(kind)
            if kind == "op" and text == "^":
                text = "**"
            if kind == "name":
                self._validate_identifier(text)
            tokens.append((kind, text))
            pos = match.end()
        return tokens

    def _validate_identifier(self, name: str):
        if name not in self._namespace:
            raise EvaluationError(f"Identificador no permitido: {name}")

    def _insert_implicit_mult(self, tokens):
        result = []
        for kind, text in tokens:
            if result and result[-1][0] == "number" and kind == "number":
                raise EvaluationError(f"Número mal formado: {result[-1][1]}{text}")
            if result and self._ends_operand(result[-1]) and self._starts_operand(kind, text):
                result.append(("op", "*"))
            result.append((kind, text))
        return result

    def _ends_operand(self, token) -> bool:
        kind, text = token
        if kind == "number" or text == ")":
            return True
        return kind == "name" and text in self._provider.CONSTANTS

    @staticmethod
    def _starts_operand(kind: str, text: str) -> bool:
        return kind in ("number", "name") or text == "("

    def _peek(self):
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _advance(self):
        token = self._peek()
        if token is None:
            raise EvaluationError("Expresión incompleta")
        self._pos += 1
        return token

    def _expect(self, text: str):
        kind, actual = self._advance()
        if actual != text or kind != "op":
            raise EvaluationError(f"Se esperaba '{text}'")

    # ── Precedencia: + -  <  * /  <  unario  <  ** ────────────────

    def _parse_additive(self) -> float:
        value = self._parse_multiplicative()
        while self._peek() in (("op", "+"), ("op", "-")):
            _kind, op = self._advance()
            rhs = self._parse_multiplicative()
            value = self._checked(value + rhs if op == "+" else value - rhs)
        return value

    def _parse_multiplicative(self) -> float:
        value = self._parse_unary()
        while self._peek() in (("op", "*"), ("op", "/")):
            _kind, op = self._advance()
            rhs = self._parse_unary()
            if op == "*":
                value = self._checked(value * rhs)
            elif rhs == 0:
                raise EvaluationError("División por cero")
            else:
                value = self._checked(value / rhs)
        return value

    def _parse_unary(self) -> float:
        if self._peek() in (("op", "+"), ("op", "-")):
            _kind, op = self._advance()
            value = self._parse_unary()
            return -value if op == "-" else value
        return self._parse_power()

    def _parse_power(self) -> float:
        base = self._parse_primary()
        if self._peek() == ("op", "**"):
            self._advance()
            # Asociativo por la derecha: 2**3**2 == 2**9
            exponent = self._parse_unary()
            return self._power(base, exponent)
        return base

    def _parse_primary(self) -> float:
        kind, text = self._advance()

        if kind == "number":
            return float(text)

        if kind == "name":
            if text in self._provider.FUNCTIONS:
                self._expect("(")
                argument = self._parse_additive()
                self._expect(")")
                return self._call(text, argument)
            return self._namespace[text]

        if text == "(":
            value = self._parse_additive()
            self._expect(")")
            return value

        raise EvaluationError(f"Token inesperado: {text}")

    # ── Operaciones numéricas ────────────────────────────────────

    def _call(self, name: str, argument: float) -> float:
        try:
            value = self._namespace[name](argument)
        except (ValueError, OverflowError) as exc:
            raise EvaluationError(f"{name}: fuera de dominio") from exc
        return self._checked(value)

    def _power(self, base: float, exponent: float) -> float:
        try:
            value = math.pow(base, exponent)
        except (ValueError, OverflowError) as exc:
            raise EvaluationError("Potencia no definida") from exc
        return self._checked(value)

    @staticmethod
    def _checked(value) -> float:
        if isinstance(value, complex) or not math.isfinite(value):
            raise EvaluationError("Resultado no finito")
        return float(value)
