# ==============================================================================
# REPOSITORIO DE INVENTARIO
# ==============================================================================
# Productos y servicios del catálogo: products.json -> {id: producto}
# ==============================================================================

from typing import Optional

from fixos.models import Product
from fixos.repositories.mirrored import MirroredRepository


class ProductRepository(MirroredRepository[Product]):
    """Productos, ordenados por nombre."""
    entity_cls = Product
    table_name = 'products'
    order_by = 'name'

    def adjust_stock(self, product_id: str, delta: int) -> Optional[Product]:
        """
        Suma delta al stock del producto (negativo para descontar).
        No impide stock negativo.

        Returns:
            Producto actualizado o None si no existe
        """
        product = self.get(product_id)
        if product is None:
            return None
        product.stock = int(product.stock) + int(delta)
        return self.save(product)
