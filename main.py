"""Punto de entrada de la calculadora científica."""

import argparse
import logging
import tkinter as tk
from pathlib import Path

from calculator_engine import CalculatorEngine
from calculator_ui import CalculatorApp, FeedbackEmitter
from history_store import HistoryStore
from settings_store import SettingsStore
from storage import JsonFileStorage, MemoryStorage


DEFAULT_DATA_DIR = Path.home() / ".calculadora_pro"
ERROR_CLEAR_DELAY_MS = 1500


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Calculadora científica")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=DEFAULT_DATA_DIR,
        help=f"Directorio del historial y los ajustes (por defecto: {DEFAULT_DATA_DIR})",
    )
    parser.add_argument(
        "--no-persist",
        action="store_true",
        help="No leer ni guardar historial ni ajustes en disco",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log en nivel DEBUG")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    storage = MemoryStorage() if args.no_persist else JsonFileStorage(args.data_dir)
    history = HistoryStore(storage).load()
    settings = SettingsStore(storage).load()

    root = tk.Tk()
    root.geometry("420x640")
    engine = CalculatorEngine(
        history=history,
        settings=settings,
        scheduler=root,
        feedback=FeedbackEmitter(root, settings),
        error_clear_delay_ms=ERROR_CLEAR_DELAY_MS,
    )
    CalculatorApp(root, engine=engine, history=history, settings=settings)
    root.mainloop()


if __name__ == "__main__":
    main()
