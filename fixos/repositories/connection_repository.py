# ==============================================================================
# REPOSITORIO DE CONEXIÓN - Modo de base de datos y URL de la nube
# ==============================================================================
# Vive solo en la base local (nunca se espeja). Lo guardado desde la
# pantalla de configuración tiene prioridad sobre las variables de entorno.
# ==============================================================================

import logging
from typing import Any, Dict, Optional

from fixos.config import DB_MODE_CLOUD, DB_MODE_LOCAL, Settings
from fixos.errors import CloudStorageError, ValidationError
from fixos.repositories.base import RecordTable
from fixos.repositories.cloud_mirror import CloudMirror
from fixos.repositories.interfaces import ICloudMirror

logger = logging.getLogger(__name__)

CLOUD_KEY = 'cloud'


class ConnectionRepository:
    """
    Resuelve si el espejo en la nube está activo y entrega el CloudMirror.

    Formato en connection.json:
    {"cloud": {"mode": "cloud", "url": "postgresql://..."}}
    """

    def __init__(self, table: RecordTable, settings: Settings):
        self._table = table
        self._settings = settings
        self._mirror: Optional[CloudMirror] = None
        self._warned_missing_url = False

    def get_config(self) -> Dict[str, Any]:
        """Modo y URL efectivos (guardado local > entorno)."""
        stored = self._table.find(CLOUD_KEY) or {}
        mode = stored.get('mode') or self._settings.FIXOS_DB_MODE or DB_MODE_LOCAL
        url = stored.get('url') if 'url' in stored else self._settings.FIXOS_DATABASE_URL
        return {'mode': mode, 'url': url or None}

    def save_config(self, mode: str, url: Optional[str]) -> Dict[str, Any]:
        if mode not in (DB_MODE_LOCAL, DB_MODE_CLOUD):
            raise ValidationError(f"Modo de banco inválido: {mode}")
        url = (url or '').strip() or None
        self._table.put(CLOUD_KEY, {'mode': mode, 'url': url})
        self._drop_mirror()
        self._warned_missing_url = False
        logger.info(f"Conexión actualizada: modo={mode}, url={'definida' if url else 'vacía'}")
        return self.get_config()

    def is_cloud_enabled(self) -> bool:
        return self.get_mirror() is not None

    def get_mirror(self) -> Optional[ICloudMirror]:
        """
        CloudMirror activo, o None en modo local.
        Modo nube sin URL equivale a modo local (se avisa una vez).
        """
        config = self.get_config()
        if config['mode'] != DB_MODE_CLOUD:
            return None
        if not config['url']:
            if not self._warned_missing_url:
                logger.warning("Modo nube sin URL configurada: se usa solo la base local")
                self._warned_missing_url = True
            return None
        if self._mirror is None or self._mirror.url != config['url']:
            self._drop_mirror()
            try:
                self._mirror = CloudMirror(config['url'])
            except CloudStorageError as e:
                logger.warning(f"No se pudo crear el espejo en la nube: {e}")
                return None
        return self._mirror

    def require_mirror(self) -> ICloudMirror:
        """Como get_mirror() pero falla si la nube no está configurada."""
        mirror = self.get_mirror()
        if mirror is None:
            raise ValidationError("Banco na nuvem não configurado.")
        return mirror

    def close(self) -> None:
        """Libera el pool de conexiones del espejo."""
        self._drop_mirror()

    def _drop_mirror(self) -> None:
        if self._mirror is not None:
            self._mirror.dispose()
            self._mirror = None
