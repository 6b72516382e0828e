# ==============================================================================
# REPOSITORIO ESPEJADO - Local primero, nube como réplica
# ==============================================================================
#
# ESCRITURA:
#   1. Siempre se escribe en la tabla local (fuente de verdad)
#   2. En modo nube, upsert/delete en la base remota
#   3. Si la nube falla: warning en el log + entrada en el outbox
#   4. Si la nube responde: se descarta lo pendiente para esa clave
#
# LECTURA:
#   - Modo nube: se prefiere la nube; si falla, se lee la tabla local
#   - Modo local: tabla local
#
# ==============================================================================

import logging
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from fixos.errors import CloudStorageError
from fixos.models import generate_id
from fixos.repositories.cloud_schema import LOCAL_TO_CLOUD
from fixos.repositories.connection_repository import ConnectionRepository
from fixos.repositories.local_store import LocalDatabase
from fixos.repositories.outbox_repository import OP_DELETE, OP_UPSERT, OutboxRepository

logger = logging.getLogger(__name__)

T = TypeVar('T')


def _sort_value(value: Any) -> Any:
    if isinstance(value, str):
        return (0, value.lower())
    if value is None:
        return (1, '')
    return (0, value)


class MirroredRepository(Generic[T]):
    """
    Repositorio de una entidad con doble escritura local + nube.

    Las subclases definen:
        entity_cls: dataclass con to_dict()/from_dict()
        table_name: nombre de la tabla local
        order_by / descending: orden de los listados
    """

    entity_cls: Type[T] = None
    table_name: str = ''
    key_field: str = 'id'
    order_by: Optional[str] = None
    descending: bool = False

    def __init__(self, local_db: LocalDatabase, connection: ConnectionRepository,
                 outbox: OutboxRepository):
        self._local = local_db.table(self.table_name)
        self._connection = connection
        self._outbox = outbox

    @property
    def cloud_table(self) -> str:
        return LOCAL_TO_CLOUD[self.table_name]

    def _from_row(self, row: Dict[str, Any]) -> T:
        return self.entity_cls.from_dict(row)

    def _sorted(self, entities: List[T]) -> List[T]:
        if not self.order_by:
            return entities
        return sorted(entities, key=lambda e: _sort_value(getattr(e, self.order_by)),
                      reverse=self.descending)

    # =========================================================================
    # Lectura
    # =========================================================================

    def list_local(self) -> List[T]:
        return self._sorted([self._from_row(r) for r in self._local.records()])

    def list_all(self) -> List[T]:
        mirror = self._connection.get_mirror()
        if mirror is not None:
            try:
                rows = mirror.fetch_all(self.cloud_table, self.order_by, self.descending)
                return [self._from_row(r) for r in rows]
            except CloudStorageError as e:
                logger.warning(f"Lectura de '{self.table_name}' en la nube falló, usando base local: {e}")
        return self.list_local()

    def get(self, record_id: str) -> Optional[T]:
        if not record_id:
            return None
        mirror = self._connection.get_mirror()
        if mirror is not None:
            try:
                row = mirror.fetch_one(self.cloud_table, record_id)
                if row is not None:
                    return self._from_row(row)
            except CloudStorageError as e:
                logger.warning(f"Lectura de '{self.table_name}/{record_id}' en la nube falló: {e}")
        row = self._local.find(record_id)
        return self._from_row(row) if row is not None else None

    def find(self, predicate: Callable[[T], bool]) -> List[T]:
        return [e for e in self.list_all() if predicate(e)]

    # =========================================================================
    # Escritura
    # =========================================================================

    def save(self, entity: T) -> T:
        """Guarda localmente y espeja en la nube. Genera id si falta."""
        if not getattr(entity, self.key_field):
            setattr(entity, self.key_field, generate_id())
        key = getattr(entity, self.key_field)
        record = entity.to_dict()
        self._local.put(key, record)
        self._mirror_upsert(key, record)
        return entity

    def delete(self, record_id: str) -> bool:
        """Elimina localmente y en la nube. Retorna si existía localmente."""
        existed = self._local.pop(record_id) is not None
        mirror = self._connection.get_mirror()
        if mirror is not None:
            try:
                mirror.delete(self.cloud_table, record_id)
            except CloudStorageError as e:
                logger.warning(f"Borrado de '{self.table_name}/{record_id}' en la nube falló, queda en outbox: {e}")
                self._outbox.enqueue(self.cloud_table, OP_DELETE, record_id, error=str(e))
            else:
                self._outbox.discard_for(self.cloud_table, record_id)
        return existed

    def replace_all(self, entities: Iterable[T]) -> None:
        """Reemplazo completo de la tabla local (no se espeja)."""
        data = {}
        for entity in entities:
            if not getattr(entity, self.key_field):
                setattr(entity, self.key_field, generate_id())
            data[getattr(entity, self.key_field)] = entity.to_dict()
        self._local.replace(data)

    def local_records(self) -> Dict[str, Dict[str, Any]]:
        return self._local.rows()

    def _mirror_upsert(self, key: str, record: Dict[str, Any]) -> None:
        mirror = self._connection.get_mirror()
        if mirror is None:
            return
        try:
            mirror.upsert(self.cloud_table, record)
        except CloudStorageError as e:
            logger.warning(f"Escritura de '{self.table_name}/{key}' en la nube falló, queda en outbox: {e}")
            self._outbox.enqueue(self.cloud_table, OP_UPSERT, key, record, error=str(e))
            return
        self._outbox.discard_for(self.cloud_table, key)
