# ==============================================================================
# TABLAS JSON - Base del almacenamiento local
# ==============================================================================
# Cada tabla local es un archivo JSON dentro de FIXOS_DATA_DIR.
#
#   RecordTable → {"<id>": {...}}   (entidades, ajustes, conexión)
#   QueueTable  → [{...}, {...}]    (outbox de sincronización)
#
# Escritura: archivo .tmp + os.replace, bajo TABLE_LOCK.
# ==============================================================================

import json
import logging
import os
import threading
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

# Compartido por todas las tablas y por el archivo de esquema
TABLE_LOCK = threading.RLock()

Row = Dict[str, Any]


class JsonTable:
    """
    Archivo JSON con un contenedor de tipo fijo (dict o list).

    Un archivo corrupto o con otro tipo se lee como tabla vacía.
    """

    container = dict

    def __init__(self, path: str):
        self.path = path
        self.name = os.path.splitext(os.path.basename(path))[0]
        if not os.path.exists(path):
            self.dump(self.container())

    def load(self):
        with TABLE_LOCK:
            try:
                with open(self.path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except FileNotFoundError:
                return self.container()
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.warning(f"Tabla local '{self.name}' ilegible, se trata como vacía: {e}")
                return self.container()
        if not isinstance(data, self.container):
            logger.warning(f"Tabla local '{self.name}' con formato inesperado, se trata como vacía")
            return self.container()
        return data

    def dump(self, data) -> None:
        tmp = f"{self.path}.tmp"
        with TABLE_LOCK:
            try:
                with open(tmp, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(tmp, self.path)
            except (OSError, TypeError, ValueError):
                if os.path.exists(tmp):
                    os.remove(tmp)
                raise

    def truncate(self) -> None:
        self.dump(self.container())


class RecordTable(JsonTable):
    """Registros indexados por id (o por clave de configuración)."""

    container = dict

    def rows(self) -> Dict[str, Row]:
        return self.load()

    def records(self) -> List[Row]:
        return list(self.load().values())

    def find(self, key: Any) -> Optional[Row]:
        return self.load().get(str(key))

    def put(self, key: Any, row: Row) -> None:
        with TABLE_LOCK:
            rows = self.load()
            rows[str(key)] = row
            self.dump(rows)

    def pop(self, key: Any) -> Optional[Row]:
        """Quita el registro y lo retorna (None si no existía)."""
        with TABLE_LOCK:
            rows = self.load()
            row = rows.pop(str(key), None)
            if row is not None:
                self.dump(rows)
            return row

    def replace(self, rows: Dict[str, Row]) -> None:
        self.dump(rows)


class QueueTable(JsonTable):
    """Entradas en orden de llegada; cada una lleva su propio 'id'."""

    container = list

    def entries(self) -> List[Row]:
        return self.load()

    def lookup(self, entry_id: str) -> Optional[Row]:
        return next((e for e in self.load() if e.get('id') == entry_id), None)

    def push(self, entry: Row, supersedes: Optional[Callable[[Row], bool]] = None) -> None:
        """Agrega al final, quitando antes las entradas que 'supersedes' reemplaza."""
        with TABLE_LOCK:
            queue = self.load()
            if supersedes is not None:
                queue = [e for e in queue if not supersedes(e)]
            queue.append(entry)
            self.dump(queue)

    def discard(self, entry_id: str) -> bool:
        return self.discard_where(lambda e: e.get('id') == entry_id) > 0

    def discard_where(self, predicate: Callable[[Row], bool]) -> int:
        """Quita las entradas que cumplen predicate. Retorna cuántas."""
        with TABLE_LOCK:
            queue = self.load()
            kept = [e for e in queue if not predicate(e)]
            removed = len(queue) - len(kept)
            if removed:
                self.dump(kept)
            return removed

    def patch(self, entry_id: str, changes: Callable[[Row], Row]) -> bool:
        """Aplica changes(entrada) -> campos nuevos a la entrada con ese id."""
        with TABLE_LOCK:
            queue = self.load()
            for entry in queue:
                if entry.get('id') == entry_id:
                    entry.update(changes(entry))
                    self.dump(queue)
                    return True
            return False
