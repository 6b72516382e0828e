# ==============================================================================
# SERVICIO DE SINCRONIZACIÓN CON LA NUBE
# ==============================================================================
# - replay_outbox(): reenvía las operaciones que fallaron
# - push_local_to_cloud(): sube todos los registros locales
# - status(): modo, URL configurada y pendientes
# ==============================================================================

import logging
from typing import Any, Dict

from fixos.errors import CloudStorageError
from fixos.repositories.cloud_schema import LOCAL_TO_CLOUD
from fixos.repositories.connection_repository import ConnectionRepository
from fixos.repositories.interfaces import ICloudMirror
from fixos.repositories.local_store import ENTITY_TABLES, LocalDatabase
from fixos.repositories.outbox_repository import OP_DELETE, OP_UPSERT, OutboxRepository

logger = logging.getLogger(__name__)


class SyncService:
    """
    Sincronización manual con la base en la nube.

    Ambas operaciones requieren modo nube con URL (ValidationError si no).
    """

    def __init__(self, local_db: LocalDatabase, connection: ConnectionRepository,
                 outbox: OutboxRepository):
        self.local_db = local_db
        self.connection = connection
        self.outbox = outbox

    def status(self) -> Dict[str, Any]:
        """Modo, URL configurada, nube activa y cantidad de pendientes."""
        config = self.connection.get_config()
        return {
            'mode': config['mode'],
            'url_configured': bool(config['url']),
            'cloud_enabled': self.connection.is_cloud_enabled(),
            'pending': self.outbox.size(),
        }

    def replay_outbox(self) -> Dict[str, int]:
        """
        Reaplica las entradas pendientes en orden.
        Éxito: se elimina la entrada. Falla: attempts + 1 y last_error.
        """
        mirror: ICloudMirror = self.connection.require_mirror()
        applied = failed = 0
        for entry in self.outbox.pending():
            try:
                if entry['op'] == OP_UPSERT:
                    mirror.upsert(entry['table'], entry.get('payload') or {})
                elif entry['op'] == OP_DELETE:
                    mirror.delete(entry['table'], entry['key'])
                else:
                    raise CloudStorageError(f"Operação desconhecida: {entry['op']}")
            except CloudStorageError as e:
                failed += 1
                self.outbox.mark_failed(entry['id'], e.message)
                logger.warning(f"Outbox {entry['table']}/{entry['key']} sigue pendiente: {e.message}")
                continue
            self.outbox.remove(entry['id'])
            applied += 1
        logger.info(f"Outbox reenviado: {applied} aplicados, {failed} fallidos")
        return {'applied': applied, 'failed': failed, 'pending': self.outbox.size()}

    def push_local_to_cloud(self) -> Dict[str, Any]:
        """
        Sube (upsert) cada registro local de cada tabla espejada.

        Returns:
            {"pushed": {tabla: cantidad}, "errors": [mensajes]}
        """
        mirror: ICloudMirror = self.connection.require_mirror()
        pushed: Dict[str, int] = {}
        errors = []
        for name in ENTITY_TABLES:
            cloud_table = LOCAL_TO_CLOUD[name]
            count = 0
            for key, record in self.local_db.table(name).rows().items():
                try:
                    mirror.upsert(cloud_table, record)
                except CloudStorageError as e:
                    errors.append(f"{name}: {e.message}")
                    logger.warning(f"Push de {name} falló: {e.message}")
                    continue
                # El dato local es el más reciente: lo pendiente queda obsoleto
                self.outbox.discard_for(cloud_table, key)
                count += 1
            pushed[name] = count
        logger.info(f"Base local enviada a la nube: {pushed}")
        return {'pushed': pushed, 'errors': errors}
