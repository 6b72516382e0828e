# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# Un servicio por pantalla del sistema, más los clientes de APIs externas
# (CEP, IA) y la generación de impresiones y mensajes.
# Los servicios reciben sus repositorios en el constructor; ver
# app_container.py para el cableado.
# ==============================================================================

from fixos.services.customer_service import CustomerService, SupplierService
from fixos.services.inventory_service import ProductService
from fixos.services.equipment_service import EquipmentService
from fixos.services.order_service import ServiceOrderService
from fixos.services.cart_service import CartService
from fixos.services.sales_service import SalesService
from fixos.services.account_service import AccountService
from fixos.services.stats_service import StatsService
from fixos.services.settings_service import SettingsService
from fixos.services.sync_service import SyncService
from fixos.services.print_service import PrintService
from fixos.services.notification_service import NotificationService
from fixos.services.postal_code_client import PostalCodeClient
from fixos.services.assistant_service import AssistantService
from fixos.services.backup_service import BackupService

__all__ = [
    'CustomerService',
    'SupplierService',
    'ProductService',
    'EquipmentService',
    'ServiceOrderService',
    'CartService',
    'SalesService',
    'AccountService',
    'StatsService',
    'SettingsService',
    'SyncService',
    'PrintService',
    'NotificationService',
    'PostalCodeClient',
    'AssistantService',
    'BackupService',
]
