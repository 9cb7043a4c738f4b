"""Interruptores de la calculadora: sonido, vibración, historial y tema."""

import json
import logging
import threading

log = logging.getLogger(__name__)

SETTINGS_KEY = "calcpro_settings"

DEFAULT_SETTINGS = {
    "sound": True,
    "vibration": True,
    "history": True,
    "theme": True,
}


class SettingsStore:
    """Ajustes booleanos persistidos tras cada cambio."""

    def __init__(self, storage):
        self._storage = storage
        self._lock = threading.Lock()
        self._values = dict(DEFAULT_SETTINGS)

    def __contains__(self, key) -> bool:
        return key in self._values

    def get(self, key: str) -> bool:
        return self._values[key]

    def as_dict(self) -> dict:
        return dict(self._values)

    def toggle(self, key: str) -> bool:
        """Invierte ``key``, guarda todos los ajustes y devuelve el nuevo valor."""
        with self._lock:
            if key not in self._values:
                raise KeyError(key)
            self._values[key] = not self._values[key]
            value = self._values[key]
            self.save()
        return value

    def load(self):
        """Mezcla los ajustes guardados sobre los valores por defecto."""
        values = dict(DEFAULT_SETTINGS)
        try:
            raw = self._storage.get(SETTINGS_KEY)
            data = json.loads(raw) if raw else {}
        except Exception as exc:
            log.warning("Ajustes guardados ilegibles: %s", type(exc).__name__)
            data = {}
        if not isinstance(data, dict):
            log.warning("Ajustes guardados con formato inesperado")
            data = {}
        for key, value in data.items():
            if key in values and isinstance(value, bool):
                values[key] = value
        with self._lock:
            self._values = values
        return self

    def save(self):
        try:
            self._storage.set(SETTINGS_KEY, json.dumps(self._values))
        except Exception:
            log.warning("No se pudieron guardar los ajustes", exc_info=True)
