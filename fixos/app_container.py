# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Punto único para obtener repositorios y servicios ya cableados.
# Todo se crea de forma perezosa la primera vez que se pide.
#
# ═══════════════════════════════════════════════════════════════════════════════
# PERSISTENCIA
# ═══════════════════════════════════════════════════════════════════════════════
#
#   LocalDatabase ──┬── MirroredRepository (uno por entidad) ── servicios
#                   ├── OutboxRepository
#                   └── ConnectionRepository ── CloudMirror (opcional)
#
# El modo nube se decide en cada operación según ConnectionRepository,
# así que cambiar la conexión desde Ajustes no requiere reiniciar.
# ==============================================================================

from typing import Optional

from fixos.config import Settings

# ═══════════════════════════════════════════════════════════════════════════════
# REPOSITORIOS
# ═══════════════════════════════════════════════════════════════════════════════
from fixos.repositories import (
    AccountRepository,
    ConnectionRepository,
    CustomerRepository,
    EquipmentRepository,
    LocalDatabase,
    OrderRepository,
    OutboxRepository,
    ProductRepository,
    SalesRepository,
    SettingsRepository,
    SupplierRepository,
)
from fixos.repositories.local_store import CONNECTION_TABLE

# ═══════════════════════════════════════════════════════════════════════════════
# SERVICIOS
# ═══════════════════════════════════════════════════════════════════════════════
from fixos.services import (
    AccountService,
    AssistantService,
    BackupService,
    CartService,
    CustomerService,
    EquipmentService,
    NotificationService,
    PostalCodeClient,
    PrintService,
    ProductService,
    SalesService,
    ServiceOrderService,
    SettingsService,
    StatsService,
    SupplierService,
    SyncService,
)


class AppContainer:
    """
    Contenedor de dependencias de la aplicación (singleton).

    Uso:
        container = get_container(settings)
        orders = container.order_service.list_orders()
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, settings: Settings = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, settings: Settings = None):
        if self._initialized:
            return
        self.settings = settings or Settings()
        self._cache = {}
        self._initialized = True

    def _lazy(self, name: str, factory):
        if name not in self._cache:
            self._cache[name] = factory()
        return self._cache[name]

    # =========================================================================
    # INFRAESTRUCTURA
    # =========================================================================

    @property
    def local_db(self) -> LocalDatabase:
        return self._lazy('local_db', lambda: LocalDatabase(self.settings.FIXOS_DATA_DIR))

    @property
    def connection(self) -> ConnectionRepository:
        return self._lazy('connection', lambda: ConnectionRepository(
            self.local_db.table(CONNECTION_TABLE), self.settings))

    @property
    def outbox(self) -> OutboxRepository:
        return self._lazy('outbox', lambda: OutboxRepository(self.local_db.outbox_table()))

    def _repo(self, cls):
        return self._lazy(cls.__name__, lambda: cls(self.local_db, self.connection, self.outbox))

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def customer_repo(self) -> CustomerRepository:
        return self._repo(CustomerRepository)

    @property
    def supplier_repo(self) -> SupplierRepository:
        return self._repo(SupplierRepository)

    @property
    def equipment_repo(self) -> EquipmentRepository:
        return self._repo(EquipmentRepository)

    @property
    def product_repo(self) -> ProductRepository:
        return self._repo(ProductRepository)

    @property
    def order_repo(self) -> OrderRepository:
        return self._repo(OrderRepository)

    @property
    def sales_repo(self) -> SalesRepository:
        return self._repo(SalesRepository)

    @property
    def account_repo(self) -> AccountRepository:
        return self._repo(AccountRepository)

    @property
    def settings_repo(self) -> SettingsRepository:
        return self._repo(SettingsRepository)

    # =========================================================================
    # CLIENTES EXTERNOS
    # =========================================================================

    @property
    def postal_client(self) -> PostalCodeClient:
        return self._lazy('postal_client', lambda: PostalCodeClient(
            self.settings.VIACEP_URL, timeout=self.settings.FIXOS_HTTP_TIMEOUT))

    @property
    def assistant_service(self) -> AssistantService:
        return self._lazy('assistant_service', lambda: AssistantService(
            self.settings.GEMINI_API_KEY,
            model=self.settings.GEMINI_MODEL,
            base_url=self.settings.GEMINI_URL,
            timeout=self.settings.FIXOS_HTTP_TIMEOUT,
        ))

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def settings_service(self) -> SettingsService:
        return self._lazy('settings_service', lambda: SettingsService(
            self.settings_repo, self.connection))

    @property
    def customer_service(self) -> CustomerService:
        return self._lazy('customer_service', lambda: CustomerService(
            self.customer_repo, self.postal_client))

    @property
    def supplier_service(self) -> SupplierService:
        return self._lazy('supplier_service', lambda: SupplierService(self.supplier_repo))

    @property
    def product_service(self) -> ProductService:
        return self._lazy('product_service', lambda: ProductService(self.product_repo))

    @property
    def equipment_service(self) -> EquipmentService:
        return self._lazy('equipment_service', lambda: EquipmentService(
            self.equipment_repo, self.customer_repo))

    @property
    def order_service(self) -> ServiceOrderService:
        return self._lazy('order_service', lambda: ServiceOrderService(
            self.order_repo,
            self.customer_repo,
            self.equipment_repo,
            self.product_repo,
            self.settings_service,
        ))

    @property
    def cart_service(self) -> CartService:
        return self._lazy('cart_service', lambda: CartService(self.product_service))

    @property
    def sales_service(self) -> SalesService:
        return self._lazy('sales_service', lambda: SalesService(self.sales_repo, self.product_repo))

    @property
    def account_service(self) -> AccountService:
        return self._lazy('account_service', lambda: AccountService(self.account_repo))

    @property
    def stats_service(self) -> StatsService:
        return self._lazy('stats_service', lambda: StatsService(
            self.order_repo, self.sales_repo, self.customer_repo))

    @property
    def print_service(self) -> PrintService:
        return self._lazy('print_service', lambda: PrintService(
            self.order_service, self.settings_service))

    @property
    def notification_service(self) -> NotificationService:
        return self._lazy('notification_service', lambda: NotificationService(
            self.order_service, self.settings_service))

    @property
    def sync_service(self) -> SyncService:
        return self._lazy('sync_service', lambda: SyncService(
            self.local_db, self.connection, self.outbox))

    @property
    def backup_service(self) -> BackupService:
        return self._lazy('backup_service', lambda: BackupService(
            self.local_db, self.settings.backup_dir))

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def reset(self) -> None:
        """Descarta todas las instancias (se recrean al pedirlas)."""
        connection = self._cache.get('connection')
        if connection is not None:
            connection.close()
        self._cache = {}

    @classmethod
    def get_instance(cls, settings: Settings = None) -> 'AppContainer':
        if cls._instance is None:
            return cls(settings)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia singleton (útil para tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


def get_container(settings: Settings = None) -> AppContainer:
    """Contenedor global (settings solo se usa en la primera llamada)."""
    return AppContainer.get_instance(settings)
