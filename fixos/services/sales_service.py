# ==============================================================================
# SERVICIO DE VENTAS DIRECTAS
# ==============================================================================
# Registra la venta y descuenta el stock de cada producto vendido.
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional

from fixos.errors import ValidationError
from fixos.models import DEFAULT_PAYMENT_METHOD, PAYMENT_METHODS, LineItem, Sale, generate_id
from fixos.repositories.interfaces import IEntityRepository

logger = logging.getLogger(__name__)


class SalesService:
    """
    Servicio de ventas.

    Responsabilidades:
    - Finalizar ventas desde el carrito
    - Actualizar stock
    - Listar ventas
    """

    def __init__(self, sales_repo: IEntityRepository, product_repo: IEntityRepository):
        self.sales_repo = sales_repo
        self.product_repo = product_repo

    def list_sales(self) -> List[Sale]:
        """Ventas directas, de la más reciente a la más antigua."""
        return self.sales_repo.list_all()

    def finalize_sale(self, cart: List[Dict[str, Any]], customer_id: Optional[str] = None,
                      payment_method: str = DEFAULT_PAYMENT_METHOD) -> Sale:
        """
        Registra una venta.

        Args:
            cart: Ítems del carrito ({product_id, quantity, price_at_time, ...})
            customer_id: Cliente (opcional)
            payment_method: Dinheiro, Cartão o Pix

        Raises:
            ValidationError: carrito vacío o método de pago inválido
        """
        if not cart:
            raise ValidationError('Carrinho vazio.')
        payment_method = payment_method or DEFAULT_PAYMENT_METHOD
        if payment_method not in PAYMENT_METHODS:
            raise ValidationError(f"Forma de pagamento inválida: {payment_method}")

        items = [LineItem.from_dict(i) for i in cart]
        if any(i.quantity <= 0 or not i.product_id for i in items):
            raise ValidationError('Item inválido no carrinho.')

        sale = Sale(
            id=generate_id(),
            customer_id=customer_id or None,
            items=items,
            payment_method=payment_method,
        )
        sale.calculate_totals()
        self.sales_repo.save(sale)

        for item in items:
            product = self.product_repo.adjust_stock(item.product_id, -item.quantity)
            if product is None:
                logger.warning(f"Venta {sale.id}: producto {item.product_id} no existe, stock sin descontar")

        logger.info(f"Venta registrada: {sale.id}, total={sale.total:.2f}, pago={payment_method}")
        return sale
