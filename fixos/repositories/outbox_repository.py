# ==============================================================================
# OUTBOX DE SINCRONIZACIÓN
# ==============================================================================
# Operaciones contra la nube que fallaron y quedan pendientes de reenvío.
# Una operación nueva para la misma (tabla, clave) reemplaza la pendiente.
# ==============================================================================

from typing import Any, Dict, List, Optional

from fixos.models import generate_id, now_iso
from fixos.repositories.base import QueueTable

OP_UPSERT = 'upsert'
OP_DELETE = 'delete'


def _same_target(table: str, key: str):
    return lambda e: e.get('table') == table and e.get('key') == key


class OutboxRepository:
    """
    Formato de cada entrada en sync_outbox.json:
    {
        "id": "...", "table": "orders", "op": "upsert", "key": "...",
        "payload": {...} | null, "attempts": 1, "last_error": "...",
        "created_at": "..."
    }
    """

    def __init__(self, table: QueueTable):
        self._table = table

    def enqueue(self, table: str, op: str, key: str,
                payload: Optional[Dict[str, Any]] = None, error: str = '') -> Dict[str, Any]:
        entry = {
            'id': generate_id(),
            'table': table,
            'op': op,
            'key': key,
            'payload': payload if op == OP_UPSERT else None,
            'attempts': 1,
            'last_error': error,
            'created_at': now_iso(),
        }
        self._table.push(entry, supersedes=_same_target(table, key))
        return entry

    def discard_for(self, table: str, key: str) -> int:
        """
        Quita lo pendiente para (tabla, clave) tras una escritura
        exitosa en la nube.

        Returns:
            Cantidad de entradas descartadas
        """
        return self._table.discard_where(_same_target(table, key))

    def pending(self) -> List[Dict[str, Any]]:
        return self._table.entries()

    def size(self) -> int:
        return len(self._table.entries())

    def remove(self, entry_id: str) -> bool:
        return self._table.discard(entry_id)

    def mark_failed(self, entry_id: str, error: str) -> None:
        self._table.patch(entry_id, lambda entry: {
            'attempts': int(entry.get('attempts') or 0) + 1,
            'last_error': error,
        })

    def clear(self) -> None:
        self._table.truncate()
