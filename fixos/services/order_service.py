# ==============================================================================
# SERVICIO DE ÓRDENES DE SERVICIO
# ==============================================================================
# Ciclo de vida de una O.S.: entrada, presupuesto, reparación, entrega.
#
# REGLAS:
# - Numeración secuencial: mayor número existente + 1 (primera = 1001)
# - Cerrar una O.S. la marca Entregue + Pago
# - Cada guardado agrega una entrada al historial
# - Al entregar se calcula el vencimiento de la garantía
# ==============================================================================

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from fixos.errors import NotFoundError, ValidationError
from fixos.models import (
    Customer,
    Equipment,
    LineItem,
    Occurrence,
    OccurrenceType,
    OrderStatus,
    PaymentStatus,
    Priority,
    ServiceOrder,
    generate_id,
    now_iso,
)
from fixos.repositories.interfaces import IEntityRepository
from fixos.services.customer_service import clean, matches

logger = logging.getLogger(__name__)

SAVE_NOTE = 'Registro salvo/atualizado'

STATUS_VALUES = tuple(s.value for s in OrderStatus)
PAYMENT_VALUES = tuple(s.value for s in PaymentStatus)
PRIORITY_VALUES = tuple(p.value for p in Priority)
OCCURRENCE_VALUES = tuple(t.value for t in OccurrenceType)


def _parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


class ServiceOrderService:
    """
    Servicio para gestión de órdenes de servicio.

    Responsabilidades:
    - Guardar órdenes (con alta de equipo en línea)
    - Cambiar estado y registrar historial
    - Ocurrencias y alta rápida de cliente
    - Búsqueda por número o cliente
    """

    def __init__(
        self,
        order_repo: IEntityRepository,
        customer_repo: IEntityRepository,
        equipment_repo: IEntityRepository,
        product_repo: IEntityRepository,
        settings_service=None,
    ):
        self.order_repo = order_repo
        self.customer_repo = customer_repo
        self.equipment_repo = equipment_repo
        self.product_repo = product_repo
        self.settings_service = settings_service

    # =========================================================================
    # Consultas
    # =========================================================================

    def list_orders(self) -> List[ServiceOrder]:
        """Todas las O.S., de la más nueva a la más antigua."""
        return self.order_repo.list_all()

    def get_order(self, order_id: str) -> ServiceOrder:
        """
        Raises:
            NotFoundError: si la O.S. no existe
        """
        order = self.order_repo.get(order_id)
        if order is None:
            raise NotFoundError('O.S. não encontrada.')
        return order

    def search(self, term: Optional[str]) -> List[ServiceOrder]:
        """Por número de O.S., nombre del cliente o modelo del equipo."""
        orders = self.list_orders()
        if not (term or '').strip():
            return orders
        customers = {c.id: c.name for c in self.customer_repo.list_all()}
        models = {e.id: e.model for e in self.equipment_repo.list_all()}
        return [
            o for o in orders
            if matches(term, str(o.order_number), customers.get(o.customer_id),
                       models.get(o.equipment_id))
        ]

    # =========================================================================
    # Guardado
    # =========================================================================

    def _default_warranty(self) -> int:
        if self.settings_service is None:
            return 90
        return self.settings_service.get_default_warranty()

    def _build_items(self, raw_items: List[Dict[str, Any]]) -> List[LineItem]:
        items = []
        for raw in raw_items or []:
            item = LineItem.from_dict(raw)
            if not item.product_id:
                raise ValidationError('Item sem produto.')
            if item.quantity <= 0:
                raise ValidationError('Quantidade deve ser maior que zero.')
            if 'cost_at_time' not in raw or 'price_at_time' not in raw:
                product = self.product_repo.get(item.product_id)
                if product is not None:
                    if 'price_at_time' not in raw:
                        item.price_at_time = product.price
                    if 'cost_at_time' not in raw:
                        item.cost_at_time = product.cost
            items.append(item)
        return items

    def _create_equipment(self, customer_id: str, new_equipment: Dict[str, Any]) -> Equipment:
        brand = clean(new_equipment.get('brand'))
        model = clean(new_equipment.get('model'))
        if not brand or not model:
            raise ValidationError('Preencha Marca e Modelo do equipamento.')
        equipment = Equipment(
            id=generate_id(),
            customer_id=customer_id,
            type=clean(new_equipment.get('type')) or 'Smartphone',
            brand=brand,
            model=model,
            serial_number=clean(new_equipment.get('serial_number')),
        )
        self.equipment_repo.save(equipment)
        logger.info(f"Equipo creado en línea: {equipment.id} ({equipment.label})")
        return equipment

    @staticmethod
    def _set_warranty_expiry(order: ServiceOrder, delivered_at: str) -> None:
        delivered = _parse_iso(delivered_at)
        order.warranty_expiry_date = (delivered + timedelta(days=order.warranty_days)).isoformat()

    def save_order(self, data: Dict[str, Any], closing: bool = False,
                   new_equipment: Optional[Dict[str, Any]] = None) -> ServiceOrder:
        """
        Crea o actualiza una O.S.

        Args:
            data: Campos de la orden (con id para actualizar)
            closing: True para cerrar (Entregue + Pago)
            new_equipment: {brand, model, type, serial_number} para dar de
                           alta el equipo junto con la orden

        Raises:
            ValidationError: sin cliente, sin equipo o con valores inválidos
        """
        existing = self.order_repo.get(data['id']) if data.get('id') else None
        merged = existing.to_dict() if existing else {}
        merged.update({k: v for k, v in data.items() if v is not None})

        customer_id = clean(merged.get('customer_id'))
        if not customer_id:
            raise ValidationError('Selecione um cliente.')

        if new_equipment:
            merged['equipment_id'] = self._create_equipment(customer_id, new_equipment).id
        if not clean(merged.get('equipment_id')):
            raise ValidationError('Selecione ou cadastre um equipamento.')

        if data.get('items') is not None:
            merged['items'] = [i.to_dict() for i in self._build_items(data.get('items'))]
        if 'warranty_days' not in merged or merged.get('warranty_days') in (None, ''):
            merged['warranty_days'] = self._default_warranty()

        try:
            order = ServiceOrder.from_dict(merged)
            for fee in ('labor_cost', 'labor_cost_base', 'diagnosis_fee'):
                if float(merged.get(fee) or 0) < 0:
                    raise ValidationError('Valores não podem ser negativos.')
        except (TypeError, ValueError, AttributeError):
            raise ValidationError('Dados da O.S. inválidos.')

        if order.status not in STATUS_VALUES:
            raise ValidationError(f"Status inválido: {order.status}")
        if order.payment_status not in PAYMENT_VALUES:
            raise ValidationError(f"Status de pagamento inválido: {order.payment_status}")
        if order.priority and order.priority not in PRIORITY_VALUES:
            raise ValidationError(f"Prioridade inválida: {order.priority}")

        if closing:
            order.status = OrderStatus.DELIVERED.value
            order.payment_status = PaymentStatus.PAID.value

        now = now_iso()
        if not order.id:
            order.id = generate_id()
        if not existing:
            order.created_at = clean(data.get('created_at')) or now
        if not order.order_number:
            order.order_number = self.order_repo.next_order_number()
        order.updated_at = now
        order.calculate_totals()
        if order.status == OrderStatus.DELIVERED.value and not order.warranty_expiry_date:
            self._set_warranty_expiry(order, now)
        order.add_history(order.status, SAVE_NOTE)

        self.order_repo.save(order)
        logger.info(f"O.S. #{order.order_number} guardada ({order.status}, total={order.total:.2f})")
        return order

    # =========================================================================
    # Estado, ocurrencias, borrado
    # =========================================================================

    def change_status(self, order_id: str, status: str, note: Optional[str] = None) -> ServiceOrder:
        """Cambia el estado y registra el historial. Entregue fija la garantía."""
        if status not in STATUS_VALUES:
            raise ValidationError(f"Status inválido: {status}")
        order = self.get_order(order_id)
        now = now_iso()
        order.status = status
        order.updated_at = now
        if status == OrderStatus.DELIVERED.value:
            self._set_warranty_expiry(order, now)
        order.add_history(status, note)
        self.order_repo.save(order)
        logger.info(f"O.S. #{order.order_number} -> {status}")
        return order

    def add_occurrence(self, order_id: str, description: str,
                       type: str = OccurrenceType.INFO.value) -> Occurrence:
        """
        Registra una ocurrencia en el log de la O.S.

        Args:
            order_id: Id de la O.S.
            description: Texto de la ocurrencia (obligatorio)
            type: Informação, Alerta o Problema

        Returns:
            Occurrence creada
        """
        description = clean(description)
        if not description:
            raise ValidationError('Descrição da ocorrência é obrigatória.')
        if type not in OCCURRENCE_VALUES:
            raise ValidationError(f"Tipo de ocorrência inválido: {type}")
        order = self.get_order(order_id)
        occurrence = Occurrence(id=generate_id(), description=description, type=type)
        order.occurrences.append(occurrence)
        order.updated_at = now_iso()
        self.order_repo.save(order)
        return occurrence

    def quick_add_customer(self, name: str, phone: str, document: str = '') -> Customer:
        """Alta rápida de cliente desde la pantalla de la O.S."""
        name, phone = clean(name), clean(phone)
        if not name or not phone:
            raise ValidationError('Preencha Nome e WhatsApp')
        customer = Customer(id=generate_id(), name=name, phone=phone, document=clean(document))
        return self.customer_repo.save(customer)

    def delete_order(self, order_id: str) -> None:
        """
        Elimina una O.S. El stock de sus ítems no se devuelve.

        Raises:
            NotFoundError: si la O.S. no existe
        """
        if not self.order_repo.delete(order_id):
            raise NotFoundError('O.S. não encontrada.')
        logger.info(f"O.S. eliminada: {order_id}")

    # =========================================================================
    # Datos para impresión / notificación
    # =========================================================================

    def get_order_context(self, order_id: str) -> Dict[str, Any]:
        """Orden con su cliente, equipo y nombres de productos."""
        order = self.get_order(order_id)
        product_names = {}
        for item in order.items:
            product = self.product_repo.get(item.product_id)
            product_names[item.product_id] = product.name if product else 'Item'
        return {
            'order': order,
            'customer': self.customer_repo.get(order.customer_id),
            'equipment': self.equipment_repo.get(order.equipment_id),
            'product_names': product_names,
        }
