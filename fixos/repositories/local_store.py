# ==============================================================================
# BASE DE DATOS LOCAL - Conjunto de tablas JSON versionadas
# ==============================================================================
# Siempre activa. Es la fuente de verdad: toda escritura pasa primero aquí.
#
# ESTRUCTURA DEL DIRECTORIO DE DATOS:
# ├── schema.json            → {"version": 3, "tables": [...]}
# ├── customers.json         → {id: cliente}
# ├── ...                    → una tabla por entidad
# ├── sync_outbox.json       → [operaciones pendientes para la nube]
# └── connection.json        → configuración de conexión (nunca se espeja)
# ==============================================================================

import json
import logging
import os
from typing import Dict, List, Optional

from fixos.repositories.base import TABLE_LOCK, JsonTable, QueueTable, RecordTable

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 3
SCHEMA_FILE = 'schema.json'

# Tablas de entidades (se espejan en la nube)
ENTITY_TABLES = (
    'customers',
    'products',
    'suppliers',
    'equipment',
    'orders',
    'sales',
    'financialAccounts',
    'settings',
)

# Tablas solo locales
OUTBOX_TABLE = 'sync_outbox'
CONNECTION_TABLE = 'connection'

ALL_TABLES = ENTITY_TABLES + (OUTBOX_TABLE, CONNECTION_TABLE)


class LocalDatabase:
    """
    Directorio de datos con una tabla JSON por entidad.

    Al abrir:
    - schema.json ausente, ilegible o de una versión más nueva que la
      conocida: se reinicia el almacenamiento (se borran las tablas).
    - versión más vieja: se actualiza la versión y se crean las tablas
      que falten.
    """

    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        os.makedirs(self.data_dir, exist_ok=True)
        self._tables: Dict[str, JsonTable] = {}
        self._open()

    # =========================================================================
    # Esquema
    # =========================================================================

    @property
    def schema_path(self) -> str:
        return os.path.join(self.data_dir, SCHEMA_FILE)

    def table_path(self, name: str) -> str:
        return os.path.join(self.data_dir, f"{name}.json")

    def _read_schema(self) -> Optional[dict]:
        try:
            with open(self.schema_path, 'r', encoding='utf-8') as f:
                schema = json.load(f)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"schema.json ilegible: {e}")
            return None
        if not isinstance(schema, dict) or not isinstance(schema.get('version'), int):
            logger.warning("schema.json sin versión válida")
            return None
        return schema

    def _write_schema(self) -> None:
        with TABLE_LOCK:
            temp_path = self.schema_path + '.tmp'
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump({'version': SCHEMA_VERSION, 'tables': list(ALL_TABLES)}, f, indent=2)
            os.replace(temp_path, self.schema_path)

    def _open(self) -> None:
        schema = self._read_schema()
        if schema is None or schema['version'] > SCHEMA_VERSION:
            self.reset()
            return
        if schema['version'] < SCHEMA_VERSION:
            logger.info(f"Actualizando base local de v{schema['version']} a v{SCHEMA_VERSION}")
            self._write_schema()
        self._load_tables()

    def _load_tables(self) -> None:
        self._tables = {}
        for name in ALL_TABLES:
            cls = QueueTable if name == OUTBOX_TABLE else RecordTable
            self._tables[name] = cls(self.table_path(name))

    def reset(self) -> None:
        """Borra todas las tablas y recrea el esquema vacío."""
        with TABLE_LOCK:
            existing = [n for n in ALL_TABLES if os.path.exists(self.table_path(n))]
            if existing:
                logger.warning(f"Reiniciando base local en {self.data_dir} (tablas: {', '.join(existing)})")
            for name in existing:
                os.remove(self.table_path(name))
            self._write_schema()
            self._load_tables()

    @property
    def version(self) -> int:
        schema = self._read_schema()
        return schema['version'] if schema else SCHEMA_VERSION

    # =========================================================================
    # Acceso a tablas
    # =========================================================================

    def table(self, name: str) -> RecordTable:
        """Tabla indexada por clave."""
        table = self._tables.get(name)
        if not isinstance(table, RecordTable):
            raise KeyError(f"Tabla local desconocida: {name}")
        return table

    def outbox_table(self) -> QueueTable:
        return self._tables[OUTBOX_TABLE]

    def table_files(self) -> List[str]:
        """Rutas de todos los archivos que componen la base (para backups)."""
        paths = [self.schema_path] + [self.table_path(n) for n in ALL_TABLES]
        return [p for p in paths if os.path.exists(p)]
