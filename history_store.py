"""Historial acotado de cálculos completados (el más reciente primero)."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict, dataclass
from datetime import datetime

log = logging.getLogger(__name__)

HISTORY_KEY = "calcpro_history"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class HistoryEntry:
    expression: str
    result: str
    timestamp: str

    @classmethod
    def from_dict(cls, data) -> HistoryEntry | None:
        if not isinstance(data, dict):
            return None
        fields = (data.get("expression"), data.get("result"), data.get("timestamp"))
        if not all(isinstance(value, str) for value in fields):
            return None
        return cls(*fields)


class HistoryStore:
    """Registro de resultados con límite de entradas y persistencia JSON."""

    MAX_ENTRIES = 50

    def __init__(self, storage, max_entries: int | None = None, clock=datetime.now):
        self._storage = storage
        self._clock = clock
        self._max_entries = max_entries if max_entries is not None else self.MAX_ENTRIES
        self._lock = threading.Lock()
        self._entries: tuple[HistoryEntry, ...] = ()

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> tuple[HistoryEntry, ...]:
        return self._entries

    def append(self, expression: str, result: str) -> HistoryEntry:
        entry = HistoryEntry(
            expression=expression,
            result=result,
            timestamp=self._clock().strftime(TIMESTAMP_FORMAT),
        )
        self.add(entry)
        return entry

    def add(self, entry: HistoryEntry):
        with self._lock:
            self._entries = ((entry,) + self._entries)[: self._max_entries]
            self.save()

    def clear(self):
        with self._lock:
            self._entries = ()
            self.save()

    # ── Persistencia ─────────────────────────────────────────────

    def load(self):
        """Carga el historial; datos corruptos producen un historial vacío."""
        try:
            raw = self._storage.get(HISTORY_KEY)
            data = json.loads(raw) if raw else []
        except Exception as exc:
            log.warning("Historial guardado ilegible: %s", type(exc).__name__)
            data = []
        if not isinstance(data, list):
            log.warning("Historial guardado con formato inesperado")
            data = []
        entries = []
        for item in data:
            entry = HistoryEntry.from_dict(item)
            if entry is None:
                log.debug("Entrada de historial descartada: %r", item)
                continue
            entries.append(entry)
        with self._lock:
            self._entries = tuple(entries[: self._max_entries])
        return self

    def save(self):
        payload = json.dumps([asdict(entry) for entry in self._entries], ensure_ascii=False)
        try:
            self._storage.set(HISTORY_KEY, payload)
        except Exception:
            log.warning("No se pudo guardar el historial", exc_info=True)
