# ==============================================================================
# REPOSITORIO DE ÓRDENES DE SERVICIO
# ==============================================================================

from fixos.models import ServiceOrder
from fixos.repositories.mirrored import MirroredRepository

FIRST_ORDER_NUMBER = 1001


class OrderRepository(MirroredRepository[ServiceOrder]):
    """Órdenes, de la más nueva (mayor número) a la más vieja."""
    entity_cls = ServiceOrder
    table_name = 'orders'
    order_by = 'order_number'
    descending = True

    def next_order_number(self) -> int:
        """Mayor número existente + 1; 1001 si no hay órdenes."""
        numbers = [o.order_number for o in self.list_all() if o.order_number]
        return max(numbers) + 1 if numbers else FIRST_ORDER_NUMBER
