"""Almacenamiento clave-valor de cadenas para el historial y los ajustes.

Las lecturas fallidas devuelven None y las escrituras fallidas se
registran en el log y se descartan: la persistencia nunca interrumpe
un cálculo.
"""

import logging
import re
from pathlib import Path

log = logging.getLogger(__name__)

_SAFE_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class MemoryStorage:
    """Almacén en memoria; útil para pruebas o para ejecutar sin disco."""

    def __init__(self, initial: dict | None = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str):
        self._data[key] = value


class JsonFileStorage:
    """Un archivo ``<clave>.json`` por clave dentro de ``directory``."""

    def __init__(self, directory):
        self._directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY_RE.match(key):
            raise ValueError(f"Clave no válida: {key!r}")
        return self._directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("No se pudo leer %s: %s", path, exc)
            return None

    def set(self, key: str, value: str):
        path = self._path(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            tmp.write_text(value, encoding="utf-8")
            tmp.replace(path)
        except OSError as exc:
            log.warning("No se pudo escribir %s: %s", path, exc)
