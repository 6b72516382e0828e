# ==============================================================================
# REPOSITORIOS DE CLIENTES, EQUIPOS Y PROVEEDORES
# ==============================================================================

from typing import List

from fixos.models import Customer, Equipment, Supplier
from fixos.repositories.mirrored import MirroredRepository


class CustomerRepository(MirroredRepository[Customer]):
    """Clientes, ordenados por nombre."""
    entity_cls = Customer
    table_name = 'customers'
    order_by = 'name'


class SupplierRepository(MirroredRepository[Supplier]):
    """Proveedores, ordenados por nombre."""
    entity_cls = Supplier
    table_name = 'suppliers'
    order_by = 'name'


class EquipmentRepository(MirroredRepository[Equipment]):
    """Equipos de clientes."""
    entity_cls = Equipment
    table_name = 'equipment'

    def list_for_customer(self, customer_id: str) -> List[Equipment]:
        return self.find(lambda e: e.customer_id == customer_id)
