# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Base local JSON (siempre activa) + espejo SQL opcional en la nube.
#
# ESTRUCTURA:
# ├── interfaces.py            → Protocolos que usan los servicios
# ├── base.py                  → Tablas JSON (RecordTable, QueueTable)
# ├── local_store.py           → LocalDatabase: directorio de datos versionado
# ├── cloud_schema.py          → Tablas SQLAlchemy del espejo
# ├── cloud_mirror.py          → CloudMirror: upsert/delete/fetch en la nube
# ├── connection_repository.py → Modo local/nube y URL
# ├── outbox_repository.py     → Operaciones pendientes para la nube
# ├── mirrored.py              → MirroredRepository: local primero + nube
# └── *_repository.py          → Un repositorio por entidad
# ==============================================================================

from fixos.repositories.interfaces import IEntityRepository, ISettingsRepository, ICloudMirror

from fixos.repositories.base import JsonTable, RecordTable, QueueTable
from fixos.repositories.local_store import LocalDatabase, SCHEMA_VERSION, ENTITY_TABLES
from fixos.repositories.cloud_mirror import CloudMirror
from fixos.repositories.connection_repository import ConnectionRepository
from fixos.repositories.outbox_repository import OutboxRepository, OP_UPSERT, OP_DELETE
from fixos.repositories.mirrored import MirroredRepository
from fixos.repositories.customer_repository import (
    CustomerRepository,
    SupplierRepository,
    EquipmentRepository,
)
from fixos.repositories.inventory_repository import ProductRepository
from fixos.repositories.order_repository import OrderRepository, FIRST_ORDER_NUMBER
from fixos.repositories.sales_repository import SalesRepository
from fixos.repositories.account_repository import AccountRepository
from fixos.repositories.settings_repository import SettingsRepository, SettingEntry

__all__ = [
    # Interfaces
    'IEntityRepository',
    'ISettingsRepository',
    'ICloudMirror',

    # Infraestructura
    'JsonTable',
    'RecordTable',
    'QueueTable',
    'LocalDatabase',
    'SCHEMA_VERSION',
    'ENTITY_TABLES',
    'CloudMirror',
    'ConnectionRepository',
    'OutboxRepository',
    'OP_UPSERT',
    'OP_DELETE',
    'MirroredRepository',

    # Entidades
    'CustomerRepository',
    'SupplierRepository',
    'EquipmentRepository',
    'ProductRepository',
    'OrderRepository',
    'FIRST_ORDER_NUMBER',
    'SalesRepository',
    'AccountRepository',
    'SettingsRepository',
    'SettingEntry',
]
