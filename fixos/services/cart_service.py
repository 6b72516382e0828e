# ==============================================================================
# SERVICIO DE CARRITO
# ==============================================================================
# Carrito de la venta directa. Se almacena en la sesión de Flask
# (session['cart']) salvo que se inyecte otro almacenamiento.
# ==============================================================================

from typing import Any, Dict, List, MutableMapping, Optional

from flask import session

from fixos.errors import ValidationError
from fixos.services.inventory_service import ProductService

CART_KEY = 'cart'


class CartService:
    """
    Responsabilidades:
    - Agregar/quitar productos validando stock
    - Calcular totales
    - Vaciar el carrito

    Cada ítem: {product_id, name, quantity, price_at_time, cost_at_time}
    """

    def __init__(self, product_service: ProductService,
                 storage: Optional[MutableMapping[str, Any]] = None):
        self.product_service = product_service
        self._storage = storage

    @property
    def _store(self) -> MutableMapping[str, Any]:
        return self._storage if self._storage is not None else session

    def _get_cart(self) -> List[Dict[str, Any]]:
        return list(self._store.get(CART_KEY, []))

    def _save_cart(self, cart: List[Dict[str, Any]]) -> None:
        self._store[CART_KEY] = cart
        if self._storage is None:
            session.modified = True

    def get_cart(self) -> Dict[str, Any]:
        """Carrito con totales."""
        cart = self._get_cart()
        return {
            'items': cart,
            'total_items': sum(i['quantity'] for i in cart),
            'total': round(sum(i['quantity'] * i['price_at_time'] for i in cart), 2),
        }

    def add_item(self, product_id: str, quantity: int = 1) -> Dict[str, Any]:
        """
        Agrega un producto (o suma cantidad si ya está).

        Raises:
            ValidationError: cantidad inválida, servicio, sin stock o
                             stock insuficiente
            NotFoundError: producto inexistente
        """
        try:
            quantity = int(quantity)
        except (TypeError, ValueError):
            raise ValidationError('Quantidade inválida.')
        if quantity <= 0:
            raise ValidationError('Quantidade deve ser maior que zero.')

        product = self.product_service.get_product(product_id)
        if product.is_service:
            raise ValidationError('Serviços não são vendidos no caixa.')
        if product.stock <= 0:
            raise ValidationError('Produto sem estoque!')

        cart = self._get_cart()
        existing = next((i for i in cart if i['product_id'] == product.id), None)
        current = existing['quantity'] if existing else 0
        if current + quantity > product.stock:
            raise ValidationError('Estoque insuficiente!')

        if existing:
            existing['quantity'] = current + quantity
        else:
            cart.append({
                'product_id': product.id,
                'name': product.name,
                'quantity': quantity,
                'price_at_time': float(product.price),
                'cost_at_time': float(product.cost),
            })
        self._save_cart(cart)
        return self.get_cart()

    def remove_item(self, product_id: str) -> Dict[str, Any]:
        """
        Quita un producto del carrito.

        Returns:
            Carrito actualizado (mismo formato que get_cart)
        """
        cart = [i for i in self._get_cart() if i['product_id'] != product_id]
        self._save_cart(cart)
        return self.get_cart()

    def clear(self) -> None:
        """Vacía el carrito de la sesión."""
        self._save_cart([])

    def items(self) -> List[Dict[str, Any]]:
        return self._get_cart()
