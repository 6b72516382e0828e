# ==============================================================================
# REPOSITORIO DE VENTAS
# ==============================================================================

from fixos.models import Sale
from fixos.repositories.mirrored import MirroredRepository


class SalesRepository(MirroredRepository[Sale]):
    """Ventas directas, de la más reciente a la más antigua."""
    entity_cls = Sale
    table_name = 'sales'
    order_by = 'created_at'
    descending = True
