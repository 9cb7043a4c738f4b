"""
Interfaz gráfica de la calculadora científica.

Usa tkinter. La interfaz solo traduce botones y teclas a órdenes del
motor y dibuja su ``snapshot()``; toda la lógica vive en CalculatorEngine.
La propia raíz de tk sirve de planificador para el auto-borrado de errores.
"""

import logging
import tkinter as tk
from tkinter import font as tkfont

from calculator_engine import CalculatorEngine
from number_formatter import format_number

log = logging.getLogger(__name__)


class FeedbackEmitter:
    """Traduce las etiquetas del motor en sonido (campana de tk)."""

    def __init__(self, root: tk.Tk, settings):
        self._root = root
        self._settings = settings

    def __call__(self, event: str):
        if self._settings.get("sound"):
            self._root.bell()
        if self._settings.get("vibration"):
            # Sin hardware háptico en escritorio.
            log.debug("vibración: %s", event)


# ═════════════════════════════════════════════════════════════════
#  Aplicación principal
# ═════════════════════════════════════════════════════════════════

class CalculatorApp:
    """Ventana principal de la calculadora científica."""

    # ── Paletas de colores (tema oscuro / claro) ─────────────────
    DARK = {
        "bg":         "#1E1E2E",
        "display_bg": "#181825",
        "num":        "#313244",
        "num_fg":     "#CDD6F4",
        "op":         "#F38BA8",
        "op_fg":      "#1E1E2E",
        "func":       "#45475A",
        "func_fg":    "#CDD6F4",
        "special":    "#585B70",
        "special_fg": "#CDD6F4",
        "equals":     "#89B4FA",
        "equals_fg":  "#1E1E2E",
        "toggle_on":  "#A6E3A1",
        "toggle_off": "#585B70",
        "expr_fg":    "#BAC2DE",
        "result_fg":  "#A6E3A1",
        "error_fg":   "#F38BA8",
    }
    LIGHT = {
        "bg":         "#EFF1F5",
        "display_bg": "#E6E9EF",
        "num":        "#CCD0DA",
        "num_fg":     "#4C4F69",
        "op":         "#D20F39",
        "op_fg":      "#EFF1F5",
        "func":       "#BCC0CC",
        "func_fg":    "#4C4F69",
        "special":    "#ACB0BE",
        "special_fg": "#4C4F69",
        "equals":     "#1E66F5",
        "equals_fg":  "#EFF1F5",
        "toggle_on":  "#40A02B",
        "toggle_off": "#ACB0BE",
        "expr_fg":    "#5C5F77",
        "result_fg":  "#40A02B",
        "error_fg":   "#D20F39",
    }

    PANELS = [
        ("basic",      "Básica"),
        ("scientific", "Científica"),
        ("history",    "Historial"),
        ("settings",   "Ajustes"),
    ]

    SETTING_LABELS = {
        "sound":     "Efectos de sonido",
        "vibration": "Vibración",
        "history":   "Guardar historial",
        "theme":     "Tema oscuro",
    }

    # ── Definiciones de botones científicos ──────────────────────
    #  (texto, acción)

    SCIENCE_BUTTONS = [
        [("sin", "function:sin"), ("cos", "function:cos"),
         ("tan", "function:tan"), ("log", "function:log"),
         ("ln",  "function:ln")],
        [("π", "constant:pi"), ("e", "constant:e"),
         ("√", "function:sqrt"), ("x²", "square"),
         ("xʸ", "operator:^")],
        [("(", "paren:open"), (")", "paren:close"),
         ("|x|", "function:abs"), ("x!", "factorial"),
         ("%", "percent")],
    ]

    # ── Definiciones del teclado principal ────────────────────────
    #  Cada fila es una lista de (texto, acción, tipo_color)
    #  tipo_color: "num", "op", "special", "equals"

    KEYPAD = [
        [("AC", "clear",     "special"), ("⌫","backspace","special"),
         ("÷","operator:/","op"),   ("×","operator:*","op")],

        [("7",  "digit:7",  "num"), ("8","digit:8","num"),
         ("9",  "digit:9",  "num"), ("−","operator:-","op")],

        [("4",  "digit:4",  "num"), ("5","digit:5","num"),
         ("6",  "digit:6",  "num"), ("+","operator:+","op")],

        [("1",  "digit:1",  "num"), ("2","digit:2","num"),
         ("3",  "digit:3",  "num"), (".","digit:.","num")],

        [("0",  "digit:0",  "num"), ("=",  "equals",    "equals")],
    ]

    KEY_BINDINGS = {
        "<Return>": "equals", "<KP_Enter>": "equals", "=": "equals",
        "<Escape>": "clear", "<Delete>": "clear", "<BackSpace>": "backspace",
        "+": "operator:+", "-": "operator:-", "*": "operator:*",
        "/": "operator:/", "^": "operator:^", "%": "percent",
        "(": "paren:open", ")": "paren:close", ".": "digit:.",
    }

    # ────────────────────────────────────────────────────────────

    def __init__(self, root: tk.Tk, engine: CalculatorEngine, history, settings):
        self.root = root
        self.root.title("Calculadora Científica")
        self.root.resizable(False, False)

        self.engine = engine
        self.history = history
        self.settings = settings
        self._active_panel = "basic"
        self._styled: list[tuple[tk.Widget, str, str]] = []
        self._panel_buttons: dict[str, tk.Button] = {}

        self._init_fonts()
        self._create_display()
        self._create_panel_bar()
        self._create_panels()
        self._create_keypad()
        self._bind_keyboard()

        self._apply_theme()
        self._show_panel("basic")
        self._refresh()

    @property
    def C(self) -> dict:
        return self.DARK if self.settings.get("theme") else self.LIGHT

    # ── Fuentes ──────────────────────────────────────────────────

    def _init_fonts(self):
        self._f_expr   = tkfont.Font(family="Consolas", size=14)
        self._f_result = tkfont.Font(family="Consolas", size=24, weight="bold")
        self._f_btn    = tkfont.Font(family="Segoe UI", size=15)
        self._f_func   = tkfont.Font(family="Segoe UI", size=12)
        self._f_small  = tkfont.Font(family="Segoe UI", size=10)

    def _style(self, widget, bg: str, fg: str | None = None):
        self._styled.append((widget, bg, fg))
        return widget

    # ── Pantalla ─────────────────────────────────────────────────

    def _create_display(self):
        frame = self._style(tk.Frame(self.root, padx=12, pady=8), "display_bg")
        frame.pack(fill="x", padx=6, pady=(6, 2))

        # Operación pendiente: "12 ×"
        self.preview_var = tk.StringVar()
        self._style(tk.Label(frame, textvariable=self.preview_var,
                             font=self._f_expr, anchor="e"),
                    "display_bg", "expr_fg").pack(fill="x")

        self.display_var = tk.StringVar(value="0")
        self.display_label = self._style(
            tk.Label(frame, textvariable=self.display_var,
                     font=self._f_result, anchor="e"),
            "display_bg", "result_fg",
        )
        self.display_label.pack(fill="x", pady=(2, 4))

    # ── Selector de panel ────────────────────────────────────────

    def _create_panel_bar(self):
        frame = self._style(tk.Frame(self.root), "bg")
        frame.pack(fill="x", padx=6, pady=(2, 2))
        for col, (key, label) in enumerate(self.PANELS):
            frame.columnconfigure(col, weight=1, uniform="panel")
            btn = tk.Button(frame, text=label, font=self._f_small,
                            relief="flat",
                            command=lambda k=key: self._show_panel(k))
            btn.grid(row=0, column=col, sticky="nsew", padx=2)
            self._panel_buttons[key] = btn

    def _create_panels(self):
        self._panel_host = self._style(tk.Frame(self.root), "bg")
        self._panel_host.pack(fill="x", padx=6, pady=2)
        self._panels = {
            "basic": self._style(tk.Frame(self._panel_host), "bg"),
            "scientific": self._create_science_panel(),
            "history": self._create_history_panel(),
            "settings": self._create_settings_panel(),
        }

    def _show_panel(self, key: str):
        self._active_panel = key
        for name, panel in self._panels.items():
            if name == key:
                panel.pack(fill="x")
            else:
                panel.pack_forget()
        if key == "history":
            self._refresh_history()
        self._apply_theme()

    # ── Panel de funciones científicas ───────────────────────────

    def _create_science_panel(self):
        frame = self._style(tk.Frame(self._panel_host), "bg")
        for col in range(5):
            frame.columnconfigure(col, weight=1, uniform="sci")

        for r, row_def in enumerate(self.SCIENCE_BUTTONS):
            for col, (text, action) in enumerate(row_def):
                btn = self._style(
                    tk.Button(frame, text=text, font=self._f_func,
                              relief="flat",
                              command=lambda a=action: self._on_key(a)),
                    "func", "func_fg",
                )
                btn.grid(row=r, column=col, sticky="nsew", padx=2, pady=2,
                         ipady=6)
        return frame

    # ── Historial ────────────────────────────────────────────────

    def _create_history_panel(self):
        frame = self._style(tk.Frame(self._panel_host), "bg")
        self.history_list = self._style(
            tk.Listbox(frame, height=8, font=self._f_small,
                       relief="flat", activestyle="none"),
            "display_bg", "expr_fg",
        )
        self.history_list.pack(fill="both", expand=True)
        self.history_list.bind("<<ListboxSelect>>", self._on_history_select)

        self._style(tk.Button(frame, text="Borrar historial",
                              font=self._f_small, relief="flat",
                              command=self._clear_history),
                    "special", "special_fg").pack(fill="x", pady=(2, 0))
        return frame

    def _refresh_history(self):
        self.history_list.delete(0, "end")
        entries = self.history.entries()
        if not entries:
            self.history_list.insert("end", "Sin cálculos todavía")
            return
        for entry in entries:
            self.history_list.insert(
                "end",
                f"{entry.expression} = {format_number(entry.result)}   ({entry.timestamp})",
            )

    def _on_history_select(self, _event):
        selection = self.history_list.curselection()
        entries = self.history.entries()
        if not selection or selection[0] >= len(entries):
            return
        self.engine.load_from_history(entries[selection[0]].result)
        self._show_panel("basic")
        self._refresh()

    def _clear_history(self):
        self.history.clear()
        self._refresh_history()

    # ── Ajustes ──────────────────────────────────────────────────

    def _create_settings_panel(self):
        frame = self._style(tk.Frame(self._panel_host), "bg")
        self._setting_vars: dict[str, tk.BooleanVar] = {}
        for key, label in self.SETTING_LABELS.items():
            var = tk.BooleanVar(value=self.settings.get(key))
            self._setting_vars[key] = var
            self._style(
                tk.Checkbutton(frame, text=label, variable=var,
                               font=self._f_func, anchor="w",
                               command=lambda k=key: self._on_toggle(k)),
                "bg", "func_fg",
            ).pack(fill="x", pady=1)
        return frame

    def _on_toggle(self, key: str):
        value = self.engine.toggle_setting(key)
        self._setting_vars[key].set(value)
        if key == "theme":
            self._apply_theme()

    # ── Teclado numérico / operadores ────────────────────────────

    def _create_keypad(self):
        frame = self._style(tk.Frame(self.root), "bg")
        frame.pack(fill="both", expand=True, padx=6, pady=(2, 6))

        # Determinar el ancho máximo de las filas
        max_cols = max(len(row) for row in self.KEYPAD)
        for c in range(max_cols):
            frame.columnconfigure(c, weight=1, uniform="key")

        for r, row_def in enumerate(self.KEYPAD):
            spans = self._compute_spans(len(row_def), max_cols)
            col_pos = 0
            for idx, (text, action, kind) in enumerate(row_def):
                btn = self._style(
                    tk.Button(frame, text=text, font=self._f_btn,
                              relief="flat",
                              command=lambda a=action: self._on_key(a)),
                    kind, f"{kind}_fg",
                )
                btn.grid(row=r, column=col_pos, columnspan=spans[idx],
                         sticky="nsew", padx=2, pady=2, ipady=8)
                col_pos += spans[idx]

        for r in range(len(self.KEYPAD)):
            frame.rowconfigure(r, weight=1)

    @staticmethod
    def _compute_spans(cols_in_row: int, max_cols: int) -> list[int]:
        """Reparte max_cols entre cols_in_row botones."""
        base, extra = divmod(max_cols, cols_in_row)
        spans = [base] * cols_in_row
        # Asignar columnas extra al último botón (generalmente '=')
        spans[-1] += extra
        return spans

    # ── Atajos de teclado ────────────────────────────────────────

    def _bind_keyboard(self):
        for digit in "0123456789":
            self.root.bind(digit, lambda _e, d=digit: self._on_key(f"digit:{d}"))
        for sequence, action in self.KEY_BINDINGS.items():
            self.root.bind(sequence, lambda _e, a=action: self._on_key(a))

    # ── Acciones ─────────────────────────────────────────────────

    def _on_key(self, action: str):
        kind, _sep, arg = action.partition(":")
        handlers = {
            "digit": lambda: self.engine.input_digit(arg),
            "constant": lambda: self.engine.input_constant(arg),
            "paren": lambda: self.engine.input_parenthesis(arg),
            "function": lambda: self.engine.input_function(arg),
            "operator": lambda: self.engine.input_operator(arg),
            "equals": self.engine.evaluate,
            "clear": self.engine.clear_all,
            "backspace": self.engine.backspace,
            "square": self.engine.square_in_place,
            "factorial": self.engine.factorial,
            "percent": self.engine.percentage,
        }
        handlers[kind]()
        self._refresh()
        if self.engine.snapshot().is_error:
            self.root.after(self.engine.ERROR_CLEAR_DELAY_MS + 10, self._refresh)
        return "break"

    def _refresh(self):
        snap = self.engine.snapshot()
        self.display_var.set(snap.formatted_display)
        self.preview_var.set(snap.preview)
        self.display_label.config(
            fg=self.C["error_fg"] if snap.is_error else self.C["result_fg"])
        if self._active_panel == "history":
            self._refresh_history()

    # ── Tema ─────────────────────────────────────────────────────

    def _apply_theme(self):
        palette = self.C
        self.root.configure(bg=palette["bg"])
        for widget, bg, fg in self._styled:
            options = {"bg": palette[bg]}
            if fg is not None:
                options["fg"] = palette[fg]
            if isinstance(widget, tk.Button):
                options["activebackground"] = palette["special"]
            if isinstance(widget, tk.Checkbutton):
                options["selectcolor"] = palette["display_bg"]
                options["activebackground"] = palette["bg"]
            widget.config(**options)
        for key, btn in self._panel_buttons.items():
            active = key == self._active_panel
            btn.config(bg=palette["toggle_on"] if active else palette["toggle_off"],
                       fg=palette["bg"] if active else palette["special_fg"],
                       activebackground=palette["toggle_on"])
