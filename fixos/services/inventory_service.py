# ==============================================================================
# SERVICIO DE INVENTARIO
# ==============================================================================
# Productos (con stock) y servicios (categoría 'Serviços', sin stock).
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional

from fixos.errors import NotFoundError, ValidationError
from fixos.models import Product
from fixos.repositories.interfaces import IEntityRepository
from fixos.services.customer_service import clean, entities_from, matches

logger = logging.getLogger(__name__)


class ProductService:
    """
    Servicio para gestión del catálogo de productos.

    Responsabilidades:
    - CRUD de productos
    - Importación (reemplazo masivo de la tabla local)
    - Ajuste de stock (ventas, entradas manuales)
    - Listado para venta directa (excluye servicios)
    """

    def __init__(self, product_repo: IEntityRepository):
        self.product_repo = product_repo

    def list_products(self) -> List[Product]:
        """Todo el catálogo (productos y servicios), ordenado por nombre."""
        return self.product_repo.list_all()

    def search(self, term: Optional[str]) -> List[Product]:
        """
        Filtra por nombre, SKU o categoría.

        Args:
            term: Texto a buscar; vacío o None retorna todos
        """
        return [p for p in self.list_products() if matches(term, p.name, p.sku, p.category)]

    def list_for_sale(self, term: Optional[str] = None) -> List[Product]:
        """Productos vendibles en caja (sin la categoría de servicios)."""
        return [p for p in self.search(term) if not p.is_service]

    def get_product(self, product_id: str) -> Product:
        product = self.product_repo.get(product_id)
        if product is None:
            raise NotFoundError('Produto não encontrado.')
        return product

    def save_product(self, data: Dict[str, Any]) -> Product:
        """
        Crea o actualiza un producto.

        Raises:
            ValidationError: nombre vacío o valores numéricos inválidos
        """
        name = clean(data.get('name'))
        if not name:
            raise ValidationError('Nome do produto é obrigatório.')
        try:
            price = round(float(data.get('price') or 0), 2)
            cost = round(float(data.get('cost') or 0), 2)
            stock = int(float(data.get('stock') or 0))
        except (TypeError, ValueError):
            raise ValidationError('Preço, custo e estoque devem ser numéricos.')

        product = Product.from_dict({**data, 'name': name})
        product.price = price
        product.cost = cost
        product.stock = stock
        product.sku = clean(product.sku)
        saved = self.product_repo.save(product)
        logger.info(f"Producto guardado: {saved.id} ({saved.name}), stock={saved.stock}")
        return saved

    def replace_products(self, records: Any) -> List[Product]:
        """
        Reemplaza la tabla local de productos (importación, sin espejo).

        Args:
            records: Lista de dicts de productos; sin id se genera uno

        Returns:
            Productos guardados
        """
        products = entities_from(records, Product)
        self.product_repo.replace_all(products)
        logger.info(f"Productos importados: {len(products)} (tabla local reemplazada)")
        return products

    def delete_product(self, product_id: str) -> None:
        """
        Raises:
            NotFoundError: si el producto no existe
        """
        if not self.product_repo.delete(product_id):
            raise NotFoundError('Produto não encontrado.')

    def adjust_stock(self, product_id: str, delta: int) -> Product:
        """Suma delta al stock (negativo para descontar)."""
        product = self.product_repo.adjust_stock(product_id, int(delta))
        if product is None:
            raise NotFoundError('Produto não encontrado.')
        return product
