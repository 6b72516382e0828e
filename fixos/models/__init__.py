# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Este módulo define todas las entidades del dominio usando dataclasses.
# Las mismas entidades viajan al almacenamiento local (JSON) y al espejo
# en la nube (SQL), ver repositories/.
# ==============================================================================

from .entities import (
    # Utilidades
    generate_id,
    now_iso,
    items_total,
    items_cost,

    # Enumeraciones
    OrderStatus,
    PaymentStatus,
    AccountType,
    AccountStatus,
    OccurrenceType,
    Priority,
    PAYMENT_METHODS,
    DEFAULT_PAYMENT_METHOD,
    SERVICES_CATEGORY,

    # Entidades
    Customer,
    Supplier,
    Equipment,
    Product,
    LineItem,
    Sale,
    Occurrence,
    StatusChange,
    ServiceOrder,
    FinancialAccount,
    BusinessInfo,
)

__all__ = [
    'generate_id',
    'now_iso',
    'items_total',
    'items_cost',

    'OrderStatus',
    'PaymentStatus',
    'AccountType',
    'AccountStatus',
    'OccurrenceType',
    'Priority',
    'PAYMENT_METHODS',
    'DEFAULT_PAYMENT_METHOD',
    'SERVICES_CATEGORY',

    'Customer',
    'Supplier',
    'Equipment',
    'Product',
    'LineItem',
    'Sale',
    'Occurrence',
    'StatusChange',
    'ServiceOrder',
    'FinancialAccount',
    'BusinessInfo',
]
