"""Fixtures compartidos: motor con almacenamiento en memoria y reloj falso."""

import pytest

from calculator_engine import CalculatorEngine
from history_store import HistoryStore
from settings_store import SettingsStore
from storage import MemoryStorage


class FakeScheduler:
    """Captura las llamadas a after() como lo haría la raíz de tk."""

    def __init__(self):
        self.pending = {}
        self.cancelled = []
        self._next_id = 0

    def after(self, ms, callback):
        self._next_id += 1
        handle = f"after#{self._next_id}"
        self.pending[handle] = (ms, callback)
        return handle

    def after_cancel(self, handle):
        self.cancelled.append(handle)
        self.pending.pop(handle, None)

    def fire_all(self):
        callbacks = list(self.pending.values())
        self.pending.clear()
        for _ms, callback in callbacks:
            callback()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def history(storage):
    return HistoryStore(storage).load()


@pytest.fixture
def settings(storage):
    return SettingsStore(storage).load()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def events():
    return []


@pytest.fixture
def engine(history, settings, scheduler, events):
    return CalculatorEngine(
        history=history,
        settings=settings,
        scheduler=scheduler,
        feedback=events.append,
    )


def press(engine, *keys):
    """Envía una secuencia de teclas: dígitos, operadores y '='."""
    for key in keys:
        if key == "=":
            engine.evaluate()
        elif key in ("+", "-", "*", "/", "^"):
            engine.input_operator(key)
        else:
            for char in key:
                engine.input_digit(char)
